"""Compound interest accumulation over a period schedule."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional, Tuple

from interest_engine.core.decimal_utils import LEDGER_CONTEXT, coerce_decimal, quantize_ledger
from interest_engine.core.errors import InvalidParameterError
from interest_engine.domain.calculation import PeriodBreakdown, PeriodSchedule


@dataclass(frozen=True)
class Accumulation:
    principal: Decimal
    final_balance: Decimal
    total_interest: Decimal
    breakdown: Optional[Tuple[PeriodBreakdown, ...]]


def _validated(value: object, label: str) -> Decimal:
    try:
        amount = coerce_decimal(value)
    except (TypeError, ArithmeticError):
        raise InvalidParameterError(f"{label} is not a number: {value!r}") from None
    if not amount.is_finite():
        raise InvalidParameterError(f"{label} must be finite, got {amount}")
    if amount < 0:
        raise InvalidParameterError(f"{label} must not be negative, got {amount}")
    return amount


def accumulate(
    principal: Decimal,
    annual_rate: Decimal,
    schedule: PeriodSchedule,
    include_breakdown: bool,
) -> Accumulation:
    """Compound ``principal`` over every period in ``schedule``.

    Per period: ``interest = round(balance * annual_rate / periods_per_year)``
    and ``balance += interest``, where rounding is half-even to the ledger
    quantum (0.0001). The principal is rounded the same way before the first
    period; the rounded principal is returned alongside the totals so that
    ``total_interest == final_balance - principal`` holds exactly.

    Without ``include_breakdown`` only the running balance is kept.
    """
    opening = quantize_ledger(_validated(principal, "principal"))
    rate = _validated(annual_rate, "annual rate")
    period_rate = LEDGER_CONTEXT.divide(rate, Decimal(schedule.frequency.periods_per_year))

    rows: Optional[List[PeriodBreakdown]] = [] if include_breakdown else None
    balance = opening
    for period in schedule:
        interest = quantize_ledger(LEDGER_CONTEXT.multiply(balance, period_rate))
        closing = LEDGER_CONTEXT.add(balance, interest)
        if rows is not None:
            rows.append(
                PeriodBreakdown(
                    period=period.index,
                    start_date=period.start_date,
                    end_date=period.end_date,
                    opening_balance=balance,
                    interest=interest,
                    closing_balance=closing,
                )
            )
        balance = closing

    return Accumulation(
        principal=opening,
        final_balance=balance,
        total_interest=LEDGER_CONTEXT.subtract(balance, opening),
        breakdown=tuple(rows) if rows is not None else None,
    )


__all__ = ["Accumulation", "accumulate"]
