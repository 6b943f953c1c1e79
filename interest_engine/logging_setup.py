"""Logging for the ``interest_engine`` package.

``create_app`` calls ``configure_logging`` once; engine modules only ask for
loggers through ``get_logger`` and never add handlers themselves.
"""

from __future__ import annotations

import logging
import os

_ROOT = "interest_engine"
_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"
_configured = False


def _parse_level(level: int | str | None) -> int:
    if level is None:
        level = os.getenv("INTEREST_ENGINE_LOG_LEVEL")
    if isinstance(level, int):
        return level
    if isinstance(level, str):
        name = level.strip().upper()
        if name.isdigit():
            return int(name)
        numeric = logging.getLevelName(name)
        if isinstance(numeric, int):
            return numeric
    return logging.INFO


def configure_logging(level: int | str | None = None) -> None:
    """Send package logs to stderr at ``level`` (default: env, then INFO)."""
    global _configured
    if _configured:
        return

    root = logging.getLogger(_ROOT)
    for handler in [h for h in root.handlers if isinstance(h, logging.NullHandler)]:
        root.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(_FORMAT))
    root.addHandler(handler)
    root.setLevel(_parse_level(level))
    root.propagate = False
    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Return ``name``'s logger; stays silent until ``configure_logging`` runs."""
    root = logging.getLogger(_ROOT)
    if not root.handlers:
        root.addHandler(logging.NullHandler())
    return logging.getLogger(name)
