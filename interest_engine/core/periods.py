"""Compounding period schedule generation."""

from __future__ import annotations

import calendar
from datetime import date, timedelta
from typing import List

from interest_engine.core.errors import InvalidParameterError
from interest_engine.domain.calculation import CompoundingFrequency, Period, PeriodSchedule


def resolve_frequency(frequency: object) -> CompoundingFrequency:
    """Return ``frequency`` as a CompoundingFrequency or raise InvalidParameterError."""
    if isinstance(frequency, CompoundingFrequency):
        return frequency
    try:
        return CompoundingFrequency(frequency)
    except ValueError:
        raise InvalidParameterError(f"unrecognized compounding frequency: {frequency!r}") from None


def add_months(anchor: date, months: int) -> date:
    """Shift ``anchor`` by whole months, clamping to the target month's last day."""
    month_index = anchor.month - 1 + months
    year = anchor.year + month_index // 12
    month = month_index % 12 + 1
    if not date.min.year <= year <= date.max.year:
        raise InvalidParameterError(f"schedule runs past the supported calendar ({year})")
    day = min(anchor.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def _boundary(start_date: date, frequency: CompoundingFrequency, steps: int) -> date:
    # boundaries are always computed from the anchor so month-end clamping never accumulates
    if frequency.step_months:
        return add_months(start_date, steps * frequency.step_months)
    try:
        return start_date + timedelta(days=steps * frequency.step_days)
    except OverflowError:
        raise InvalidParameterError("schedule runs past the supported calendar") from None


def generate_schedule(start_date: date, intervals: int, frequency: object) -> PeriodSchedule:
    """Build ``intervals`` consecutive compounding periods starting at ``start_date``.

    Period ``n`` (1-based) runs from the ``n - 1``th to the ``n``th boundary.
    For month-based frequencies a 31 January start yields 28/29 February,
    31 March, 30 April and so on.
    """
    if not isinstance(start_date, date):
        raise InvalidParameterError(f"start date must be a date, got {start_date!r}")
    if isinstance(intervals, bool) or not isinstance(intervals, int):
        raise InvalidParameterError(f"interval count must be an integer, got {intervals!r}")
    if intervals <= 0:
        raise InvalidParameterError(f"interval count must be positive, got {intervals}")

    resolved = resolve_frequency(frequency)

    periods: List[Period] = []
    period_start = start_date
    for index in range(1, intervals + 1):
        period_end = _boundary(start_date, resolved, index)
        periods.append(Period(index=index, start_date=period_start, end_date=period_end))
        period_start = period_end

    return PeriodSchedule(start_date=start_date, frequency=resolved, periods=tuple(periods))


__all__ = ["add_months", "generate_schedule", "resolve_frequency"]
