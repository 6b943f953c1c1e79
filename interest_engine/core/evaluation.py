"""Per-account evaluation with failure isolation."""

from __future__ import annotations

from interest_engine.core.accumulation import accumulate
from interest_engine.core.errors import InvalidParameterError
from interest_engine.domain.calculation import Account, InterestResult, PeriodSchedule
from interest_engine.logging_setup import get_logger

logger = get_logger(__name__)


def evaluate(
    account: Account,
    schedule: PeriodSchedule,
    include_breakdown: bool,
    position: int = 0,
) -> InterestResult:
    """Compute one account's result; numeric failures become a failed InterestResult."""
    try:
        accumulation = accumulate(account.principal, account.annual_rate, schedule, include_breakdown)
    except InvalidParameterError as exc:
        logger.warning("Account %s rejected: %s", account.account_id, exc)
        return InterestResult.failure(account.account_id, position, f"{account.account_id}: {exc}")
    except ArithmeticError as exc:
        logger.warning("Arithmetic failure for account %s: %r", account.account_id, exc)
        return InterestResult.failure(
            account.account_id,
            position,
            f"{account.account_id}: arithmetic overflow ({type(exc).__name__})",
        )

    return InterestResult(
        account_id=account.account_id,
        position=position,
        principal=accumulation.principal,
        final_balance=accumulation.final_balance,
        total_interest=accumulation.total_interest,
        breakdown=accumulation.breakdown,
    )


__all__ = ["evaluate"]
