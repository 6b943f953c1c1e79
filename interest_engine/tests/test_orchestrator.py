from __future__ import annotations

import threading
from datetime import date
from decimal import Decimal
from typing import List

import pytest

from interest_engine.core import orchestrator
from interest_engine.core.errors import InvalidParameterError
from interest_engine.core.evaluation import evaluate as real_evaluate
from interest_engine.core.orchestrator import (
    calculate_compound_interest,
    calculate_compound_interest_concurrent,
    run,
)
from interest_engine.domain.calculation import Account, CompoundingFrequency, Concurrent, Sequential

START = date(2024, 1, 31)


def make_accounts(count: int) -> List[Account]:
    return [
        Account(f"ACC-{index:05d}", Decimal(1000 + index), Decimal("0.05") + Decimal(index % 7) / 100)
        for index in range(count)
    ]


def both_modes(accounts, intervals=12, frequency=CompoundingFrequency.MONTHLY, include_breakdown=True):
    sequential = calculate_compound_interest(accounts, START, intervals, frequency, include_breakdown)
    concurrent = calculate_compound_interest_concurrent(
        accounts, START, intervals, frequency, include_breakdown, pool_size=4
    )
    return sequential, concurrent


def test_sequential_and_concurrent_results_are_identical():
    sequential, concurrent = both_modes(make_accounts(25))

    assert sequential.succeeded and concurrent.succeeded
    assert sequential.mode == "sequential"
    assert concurrent.mode == "concurrent"
    assert sequential.results == concurrent.results
    assert [r.model_dump_json() for r in sequential.results] == [
        r.model_dump_json() for r in concurrent.results
    ]


def test_repeated_runs_are_idempotent():
    accounts = make_accounts(8)

    first = run(accounts, START, 24, "quarterly", True, Concurrent(pool_size=3))
    second = run(accounts, START, 24, "quarterly", True, Concurrent(pool_size=3))

    assert first == second


def test_breakdown_interest_sums_to_total_for_every_account():
    accounts = make_accounts(5) + [
        Account("FRAC-1", Decimal("2500.55"), Decimal("0.0375")),
        Account("FRAC-2", Decimal("1000.00005"), Decimal("0.12")),
        Account("FRAC-3", Decimal("99.123456789"), Decimal("0.07")),
        Account("FRAC-4", Decimal("0.00015"), Decimal("0.5")),
    ]

    for outcome in both_modes(accounts, intervals=18):
        for result in outcome.results:
            assert result.succeeded
            assert result.total_interest == result.final_balance - result.principal
            assert sum(row.interest for row in result.breakdown) == result.total_interest
            assert result.breakdown[0].opening_balance == result.principal


@pytest.mark.parametrize("mode", [Sequential(), Concurrent(pool_size=3)])
def test_one_bad_account_among_valid_ones_keeps_position(mode):
    accounts = make_accounts(10)
    accounts[3] = Account("NEGATIVE", Decimal("500"), Decimal("-0.02"))

    outcome = run(accounts, START, 12, CompoundingFrequency.MONTHLY, False, mode)

    assert outcome.succeeded
    assert len(outcome.results) == 10
    assert [result.position for result in outcome.results] == list(range(10))
    assert [result.account_id for result in outcome.results] == [a.account_id for a in accounts]
    assert [result.succeeded for result in outcome.results].count(False) == 1
    assert not outcome.results[3].succeeded
    assert outcome.failed_results == [outcome.results[3]]


def test_single_interval_without_breakdown():
    sequential, concurrent = both_modes(make_accounts(3), intervals=1, include_breakdown=False)

    for outcome in (sequential, concurrent):
        assert all(result.breakdown is None for result in outcome.results)
    with_rows = calculate_compound_interest(make_accounts(1), START, 1, "monthly", True)
    assert len(with_rows.results[0].breakdown) == 1


@pytest.mark.parametrize("accounts", [[], None])
def test_empty_account_list_is_rejected(accounts):
    with pytest.raises(InvalidParameterError):
        calculate_compound_interest(accounts, START, 12, "monthly", False)
    with pytest.raises(InvalidParameterError):
        calculate_compound_interest_concurrent(accounts, START, 12, "monthly", False)


def test_generator_input_is_accepted():
    accounts = make_accounts(4)

    outcome = run((account for account in accounts), START, 3, "monthly", False, Concurrent(pool_size=2))

    assert [result.account_id for result in outcome.results] == [a.account_id for a in accounts]


@pytest.mark.parametrize(
    "intervals, frequency",
    [(0, "monthly"), (-1, "monthly"), (12, "fortnightly")],
)
def test_schedule_failure_fails_whole_batch(intervals, frequency):
    sequential = calculate_compound_interest(make_accounts(3), START, intervals, frequency, False)
    concurrent = calculate_compound_interest_concurrent(make_accounts(3), START, intervals, frequency, False)

    for outcome in (sequential, concurrent):
        assert not outcome.succeeded
        assert outcome.results == ()
        assert "schedule" in outcome.message


@pytest.mark.parametrize("pool_size", [0, -2])
def test_invalid_pool_size_fails_whole_batch(pool_size):
    outcome = calculate_compound_interest_concurrent(make_accounts(3), START, 12, "monthly", False, pool_size=pool_size)

    assert not outcome.succeeded
    assert outcome.results == ()
    assert "pool size" in outcome.message


def test_unknown_mode_fails_whole_batch():
    outcome = run(make_accounts(2), START, 12, "monthly", False, mode="parallel")

    assert not outcome.succeeded
    assert "unknown execution mode" in outcome.message


@pytest.mark.parametrize("mode", [Sequential(), Concurrent(pool_size=4)])
def test_unexpected_worker_error_is_isolated(monkeypatch, mode):
    def flaky_evaluate(account, schedule, include_breakdown, position=0):
        if account.account_id == "ACC-00002":
            raise RuntimeError("disk on fire")
        return real_evaluate(account, schedule, include_breakdown, position=position)

    monkeypatch.setattr(orchestrator, "evaluate", flaky_evaluate)

    outcome = run(make_accounts(6), START, 12, "monthly", False, mode)

    assert outcome.succeeded
    assert len(outcome.results) == 6
    failed = outcome.results[2]
    assert not failed.succeeded
    assert failed.account_id == "ACC-00002"
    assert "RuntimeError" in failed.message
    assert "position 2" in failed.message
    assert all(result.succeeded for index, result in enumerate(outcome.results) if index != 2)


def test_deadline_marks_only_unfinished_accounts(monkeypatch):
    release = threading.Event()

    def slow_evaluate(account, schedule, include_breakdown, position=0):
        if account.account_id == "ACC-00000":
            release.wait(timeout=5)
        return real_evaluate(account, schedule, include_breakdown, position=position)

    monkeypatch.setattr(orchestrator, "evaluate", slow_evaluate)
    try:
        outcome = run(make_accounts(5), START, 12, "monthly", False, Concurrent(pool_size=2, timeout=0.5))
    finally:
        release.set()

    assert outcome.succeeded
    assert len(outcome.results) == 5
    assert not outcome.results[0].succeeded
    assert "timed out" in outcome.results[0].message
    assert all(result.succeeded for result in outcome.results[1:])


def test_concurrent_mode_fills_every_slot_exactly_once():
    accounts = make_accounts(10_000)

    outcome = calculate_compound_interest_concurrent(
        accounts, START, 12, CompoundingFrequency.MONTHLY, False, pool_size=16
    )

    assert outcome.succeeded
    assert len(outcome.results) == 10_000
    assert [result.position for result in outcome.results] == list(range(10_000))
    assert len({result.account_id for result in outcome.results}) == 10_000
    assert [result.account_id for result in outcome.results] == [a.account_id for a in accounts]
    assert all(result.succeeded for result in outcome.results)


@pytest.mark.parametrize("timeout", ["soon", True, -1])
def test_invalid_timeout_fails_whole_batch(timeout):
    outcome = run(make_accounts(3), START, 12, "monthly", False, Concurrent(pool_size=2, timeout=timeout))

    assert not outcome.succeeded
    assert outcome.results == ()
    assert "timeout" in outcome.message
