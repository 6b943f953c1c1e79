"""Helpers for Decimal normalization and ledger rounding."""

from decimal import ROUND_HALF_EVEN, Context, Decimal, DivisionByZero, InvalidOperation, Overflow

# Every period's interest is rounded to this step.
LEDGER_QUANTUM = Decimal("0.0001")

LEDGER_CONTEXT = Context(
    prec=34,
    rounding=ROUND_HALF_EVEN,
    traps=[InvalidOperation, Overflow, DivisionByZero],
)


def coerce_decimal(value) -> Decimal:
    """Normalize numeric values to Decimal.

    Args:
        value: Raw numeric value from a request payload or caller.

    Returns:
        Decimal: Normalized numeric value. Floats go through ``str`` so that
        ``0.1`` becomes ``Decimal("0.1")`` rather than its binary expansion.
    """
    if value is None:
        raise TypeError("a missing amount is not zero")
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise TypeError("booleans are not numeric amounts")
    return Decimal(str(value))


def quantize_ledger(value: Decimal) -> Decimal:
    """Round ``value`` half-even to the ledger quantum."""
    return value.quantize(LEDGER_QUANTUM, context=LEDGER_CONTEXT)


__all__ = ["LEDGER_CONTEXT", "LEDGER_QUANTUM", "coerce_decimal", "quantize_ledger"]
