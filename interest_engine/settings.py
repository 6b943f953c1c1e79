"""Environment-driven settings for the calculation service."""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from interest_engine.logging_setup import get_logger


class ServiceVersion(str, Enum):
    """Published versions of the computeCompoundInterest service."""

    VERSION_1 = "v1"
    VERSION_2 = "v2"

    @classmethod
    def parse(cls, raw: str) -> "ServiceVersion":
        value = raw.strip()
        for member in cls:
            if value.upper() == member.name or value.lower() == member.value:
                return member
        raise ValueError(f"unknown service version: {raw!r}")

    @property
    def version_name(self) -> str:
        return self.value

    @property
    def concurrent(self) -> bool:
        return self is ServiceVersion.VERSION_2


@dataclass(frozen=True)
class EngineSettings:
    """Settings for the calculation service.

    Attributes:
        active_version: Version served by the unversioned endpoint.
        pool_size: Worker threads for the concurrent version.
        timeout_seconds: Optional deadline for a concurrent batch.
        log_level: Level name handed to ``configure_logging``.
    """

    active_version: ServiceVersion = ServiceVersion.VERSION_1
    pool_size: int = 8
    timeout_seconds: Optional[float] = None
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if self.pool_size < 1:
            raise ValueError(f"pool size must be at least 1, got {self.pool_size}")
        if self.timeout_seconds is not None and self.timeout_seconds <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout_seconds}")

    @classmethod
    def from_env(cls) -> "EngineSettings":
        """Build settings from environment variables.

        Returns:
            EngineSettings: Settings sourced from ``CALCULATE_*`` variables.
        """
        logger = get_logger(__name__)
        version = ServiceVersion.parse(os.getenv("CALCULATE_ACTIVE_VERSION", "VERSION_1"))
        pool_size = int(os.getenv("CALCULATE_POOL_SIZE", "8"))
        raw_timeout = os.getenv("CALCULATE_TIMEOUT_SECONDS", "").strip()
        timeout = float(raw_timeout) if raw_timeout else None
        log_level = os.getenv("INTEREST_ENGINE_LOG_LEVEL", "INFO").strip().upper()
        logger.debug(
            "Settings: version=%s pool_size=%d timeout=%s", version.name, pool_size, timeout
        )
        return cls(
            active_version=version,
            pool_size=pool_size,
            timeout_seconds=timeout,
            log_level=log_level,
        )


__all__ = ["EngineSettings", "ServiceVersion"]
