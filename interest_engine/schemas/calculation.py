"""Data contracts for the computeCompoundInterest service."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from interest_engine.domain.calculation import Account, CompoundingFrequency, InterestResult


class Status(str, Enum):
    OK = "OK"
    ERROR = "ERROR"


class AccountPayload(BaseModel):
    """One account as submitted by the client.

    Principal and rate are deliberately unconstrained here: a negative value
    fails that account only, not the whole request.
    """

    model_config = ConfigDict(extra="forbid")

    accountId: str
    principal: Decimal
    annualRate: Decimal = Field(
        ...,
        description="Annual interest rate expressed as a decimal (e.g. 0.05 for 5%).",
    )

    @field_validator("accountId", mode="before")
    @classmethod
    def _stringify_account_id(cls, value: object) -> object:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    def to_account(self) -> Account:
        return Account(account_id=self.accountId, principal=self.principal, annual_rate=self.annualRate)


class CompoundInterestRequest(BaseModel):
    """Inputs required to compute compound interest for a batch of accounts."""

    model_config = ConfigDict(extra="forbid")

    accounts: List[AccountPayload] = Field(..., min_length=1)
    startDate: date
    intervals: int = Field(..., gt=0, description="Number of compounding periods.")
    frequency: CompoundingFrequency
    includeBreakdowns: bool

    @field_validator("frequency", mode="before")
    @classmethod
    def _parse_frequency(cls, value: object) -> object:
        if isinstance(value, str):
            try:
                return CompoundingFrequency(value)
            except ValueError:
                allowed = ", ".join(member.name for member in CompoundingFrequency)
                raise ValueError(f"unknown frequency {value!r}; expected one of {allowed}") from None
        return value

    def to_accounts(self) -> List[Account]:
        return [payload.to_account() for payload in self.accounts]


class CompoundInterestResponse(BaseModel):
    """Envelope returned by every computeCompoundInterest endpoint."""

    version: str
    status: Status
    message: Optional[str] = None
    results: List[InterestResult] = Field(default_factory=list)
    elapsedTimeMs: int = Field(0, ge=0)
    detail: Optional[List[dict]] = None


class VersionResponse(BaseModel):
    activeVersion: str
    versions: List[str]
    frequencies: List[str]
