"""Batch orchestration of account evaluations.

Two execution strategies share one contract:

- ``Sequential``: accounts are evaluated one after another in input order.
- ``Concurrent``: one task per account is submitted to a bounded
  ``ThreadPoolExecutor``. Each task knows its input position and its result
  lands in a pre-sized slot list at that index, so completion order never
  shows up in the output.

The period schedule is built once per batch and only ever read afterwards;
workers share it without locking. Each slot is written by exactly one task,
and ``wait()`` / ``Future.result()`` make those writes visible before the
slot list is read.

A batch only fails as a whole when it cannot start (no schedule, bad pool
configuration, pool refusing work). Anything that goes wrong for a single
account is recorded in that account's result.
"""

from __future__ import annotations

import time
from concurrent.futures import Future, ThreadPoolExecutor, wait
from datetime import date
from typing import Dict, List, Optional, Sequence

from interest_engine.core.errors import BatchInitializationError, InvalidParameterError, WorkerFailure
from interest_engine.core.evaluation import evaluate
from interest_engine.core.periods import generate_schedule
from interest_engine.domain.calculation import (
    Account,
    CalculationOutcome,
    Concurrent,
    ExecutionMode,
    InterestResult,
    PeriodSchedule,
    Sequential,
)
from interest_engine.logging_setup import get_logger

logger = get_logger(__name__)


def _worker_failure_result(position: int, account: object, exc: BaseException) -> InterestResult:
    account_id = getattr(account, "account_id", None)
    failure = WorkerFailure(position, account_id, f"{type(exc).__name__}: {exc}")
    logger.error("Worker failure: %s", failure, exc_info=(type(exc), exc, exc.__traceback__))
    return InterestResult.failure("" if account_id is None else str(account_id), position, str(failure))


def _evaluate_slot(
    position: int,
    account: Account,
    schedule: PeriodSchedule,
    include_breakdown: bool,
) -> InterestResult:
    try:
        return evaluate(account, schedule, include_breakdown, position=position)
    except Exception as exc:  # noqa: BLE001
        return _worker_failure_result(position, account, exc)


def _build_schedule(start_date: date, intervals: int, frequency: object) -> PeriodSchedule:
    try:
        return generate_schedule(start_date, intervals, frequency)
    except InvalidParameterError as exc:
        raise BatchInitializationError(f"cannot build period schedule: {exc}") from exc


def _run_sequential(
    accounts: Sequence[Account],
    schedule: PeriodSchedule,
    include_breakdown: bool,
) -> List[InterestResult]:
    return [
        _evaluate_slot(position, account, schedule, include_breakdown)
        for position, account in enumerate(accounts)
    ]


def _run_concurrent(
    accounts: Sequence[Account],
    schedule: PeriodSchedule,
    include_breakdown: bool,
    mode: Concurrent,
) -> List[InterestResult]:
    pool_size = mode.pool_size
    if isinstance(pool_size, bool) or not isinstance(pool_size, int) or pool_size < 1:
        raise BatchInitializationError(f"pool size must be a positive integer, got {pool_size!r}")
    timeout = mode.timeout
    if timeout is not None:
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout < 0:
            raise BatchInitializationError(f"timeout must be a non-negative number, got {timeout!r}")

    try:
        executor = ThreadPoolExecutor(
            max_workers=min(pool_size, len(accounts)),
            thread_name_prefix="interest-worker",
        )
    except (ValueError, RuntimeError) as exc:
        raise BatchInitializationError(f"cannot start worker pool: {exc}") from exc

    slots: List[Optional[InterestResult]] = [None] * len(accounts)
    futures: Dict[Future, int] = {}
    try:
        try:
            for position, account in enumerate(accounts):
                future = executor.submit(_evaluate_slot, position, account, schedule, include_breakdown)
                futures[future] = position
        except RuntimeError as exc:
            raise BatchInitializationError(f"worker pool rejected work: {exc}") from exc

        wait(futures, timeout=timeout)

        for future, position in futures.items():
            account = accounts[position]
            if future.done() and not future.cancelled():
                try:
                    slots[position] = future.result()
                except Exception as exc:  # noqa: BLE001
                    slots[position] = _worker_failure_result(position, account, exc)
                continue

            future.cancel()
            account_id = str(getattr(account, "account_id", ""))
            logger.warning("Account %s abandoned after %ss deadline", account_id, timeout)
            slots[position] = InterestResult.failure(
                account_id,
                position,
                f"{account_id}: timed out after {timeout}s",
            )
    finally:
        # past a deadline, do not block on tasks still running
        executor.shutdown(wait=timeout is None, cancel_futures=True)

    return slots  # type: ignore[return-value]


def run(
    accounts: Sequence[Account],
    start_date: date,
    intervals: int,
    frequency: object,
    include_breakdown: bool,
    mode: Optional[ExecutionMode] = None,
) -> CalculationOutcome:
    """Evaluate every account and return results in input order.

    Raises ``InvalidParameterError`` for an empty account list. A batch that
    cannot start comes back as a failed outcome with no results.
    """
    accounts = list(accounts) if accounts is not None else []
    if not accounts:
        raise InvalidParameterError("account list must not be empty")

    mode = mode if mode is not None else Sequential()
    mode_name = getattr(mode, "name", type(mode).__name__)
    started = time.perf_counter()

    try:
        schedule = _build_schedule(start_date, intervals, frequency)
        if isinstance(mode, Concurrent):
            results = _run_concurrent(accounts, schedule, include_breakdown, mode)
        elif isinstance(mode, Sequential):
            results = _run_sequential(accounts, schedule, include_breakdown)
        else:
            raise BatchInitializationError(f"unknown execution mode: {mode!r}")
    except BatchInitializationError as exc:
        logger.error("Batch of %d accounts not started (%s): %s", len(accounts), mode_name, exc)
        return CalculationOutcome(results=(), succeeded=False, message=str(exc), mode=mode_name)

    failures = sum(1 for result in results if not result.succeeded)
    logger.info(
        "Processed %d accounts (%s, %d failed) over %d %s periods in %.1f ms",
        len(results),
        mode_name,
        failures,
        len(schedule),
        schedule.frequency.value,
        (time.perf_counter() - started) * 1000,
    )
    return CalculationOutcome(results=tuple(results), mode=mode_name)


def calculate_compound_interest(
    accounts: Sequence[Account],
    start_date: date,
    intervals: int,
    frequency: object,
    include_breakdowns: bool,
) -> CalculationOutcome:
    """Sequential entry point."""
    return run(accounts, start_date, intervals, frequency, include_breakdowns, Sequential())


def calculate_compound_interest_concurrent(
    accounts: Sequence[Account],
    start_date: date,
    intervals: int,
    frequency: object,
    include_breakdowns: bool,
    pool_size: int = 8,
    timeout: Optional[float] = None,
) -> CalculationOutcome:
    """Concurrent entry point; same results as the sequential one."""
    return run(
        accounts,
        start_date,
        intervals,
        frequency,
        include_breakdowns,
        Concurrent(pool_size=pool_size, timeout=timeout),
    )


__all__ = [
    "calculate_compound_interest",
    "calculate_compound_interest_concurrent",
    "run",
]
