"""Exceptions raised by the calculation engine."""

from __future__ import annotations

from typing import Optional


class CalculationError(Exception):
    """Base class for engine errors."""


class InvalidParameterError(CalculationError, ValueError):
    """Malformed numeric or schedule input."""


class BatchInitializationError(CalculationError):
    """The batch could not start: no schedule or no worker pool."""


class WorkerFailure(CalculationError):
    """Unexpected fault while evaluating a single account."""

    def __init__(self, position: int, account_id: Optional[str], reason: str):
        super().__init__(f"account {account_id!r} at position {position}: {reason}")
        self.position = position
        self.account_id = account_id
        self.reason = reason
