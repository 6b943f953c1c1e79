from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from interest_engine.core.decimal_utils import coerce_decimal


class CompoundingFrequency(str, Enum):
    ANNUAL = "annual"
    SEMI_ANNUAL = "semi_annual"
    QUARTERLY = "quarterly"
    MONTHLY = "monthly"
    WEEKLY = "weekly"
    DAILY = "daily"

    @classmethod
    def _missing_(cls, value: object) -> Optional["CompoundingFrequency"]:
        # accept member names and loose spellings ("MONTHLY", "Semi-Annual")
        if isinstance(value, str):
            key = value.strip().lower().replace("-", "_").replace(" ", "_")
            for member in cls:
                if member.value == key:
                    return member
        return None

    @property
    def periods_per_year(self) -> int:
        return _FREQUENCY_TABLE[self][0]

    @property
    def step_months(self) -> int:
        return _FREQUENCY_TABLE[self][1]

    @property
    def step_days(self) -> int:
        return _FREQUENCY_TABLE[self][2]


# frequency -> (periods per year, months per step, days per step)
_FREQUENCY_TABLE: Dict[CompoundingFrequency, Tuple[int, int, int]] = {
    CompoundingFrequency.ANNUAL: (1, 12, 0),
    CompoundingFrequency.SEMI_ANNUAL: (2, 6, 0),
    CompoundingFrequency.QUARTERLY: (4, 3, 0),
    CompoundingFrequency.MONTHLY: (12, 1, 0),
    CompoundingFrequency.WEEKLY: (52, 0, 7),
    CompoundingFrequency.DAILY: (365, 0, 1),
}


@dataclass(frozen=True)
class Account:
    account_id: str
    principal: Decimal
    annual_rate: Decimal

    def __post_init__(self) -> None:
        # frozen: bypass __setattr__ to normalise numeric inputs; values that
        # cannot be converted are kept and rejected per account by accumulate()
        for name in ("principal", "annual_rate"):
            try:
                object.__setattr__(self, name, coerce_decimal(getattr(self, name)))
            except (TypeError, ArithmeticError):
                pass


@dataclass(frozen=True)
class Period:
    index: int
    start_date: date
    end_date: date


@dataclass(frozen=True)
class PeriodSchedule:
    """Ordered compounding periods shared read-only by every account in a batch."""

    start_date: date
    frequency: CompoundingFrequency
    periods: Tuple[Period, ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.periods)

    def __iter__(self):
        return iter(self.periods)

    @property
    def end_date(self) -> date:
        return self.periods[-1].end_date if self.periods else self.start_date


class PeriodBreakdown(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True, alias_generator=to_camel, populate_by_name=True)

    period: int
    start_date: date
    end_date: date
    opening_balance: Decimal
    interest: Decimal
    closing_balance: Decimal


class InterestResult(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True, alias_generator=to_camel, populate_by_name=True)

    account_id: str
    position: int
    principal: Optional[Decimal] = None
    final_balance: Optional[Decimal] = None
    total_interest: Optional[Decimal] = None
    breakdown: Optional[Tuple[PeriodBreakdown, ...]] = None
    succeeded: bool = True
    message: Optional[str] = None

    @classmethod
    def failure(cls, account_id: str, position: int, message: str) -> "InterestResult":
        return cls(account_id=account_id, position=position, succeeded=False, message=message)


class CalculationOutcome(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    results: Tuple[InterestResult, ...] = ()
    succeeded: bool = True
    message: Optional[str] = None
    mode: str

    @property
    def failed_results(self) -> List[InterestResult]:
        return [result for result in self.results if not result.succeeded]


@dataclass(frozen=True)
class Sequential:
    """Evaluate accounts one at a time, in input order."""

    name: str = field(default="sequential", init=False)


@dataclass(frozen=True)
class Concurrent:
    """Fan accounts out to a bounded thread pool.

    ``timeout`` is an optional batch deadline in seconds; accounts still
    pending when it expires are reported as timed out.
    """

    pool_size: int = 8
    timeout: Optional[float] = None
    name: str = field(default="concurrent", init=False)


ExecutionMode = Union[Sequential, Concurrent]


__all__ = [
    "Account",
    "CalculationOutcome",
    "CompoundingFrequency",
    "Concurrent",
    "ExecutionMode",
    "InterestResult",
    "Period",
    "PeriodBreakdown",
    "PeriodSchedule",
    "Sequential",
]
