"""HTTP routes for the calculation service."""

import time
from http import HTTPStatus
from typing import Any, Optional

from flask import Blueprint, current_app, g, jsonify, request
from pydantic import ValidationError

from interest_engine.core.errors import InvalidParameterError
from interest_engine.core.orchestrator import (
    calculate_compound_interest,
    calculate_compound_interest_concurrent,
)
from interest_engine.domain.calculation import CompoundingFrequency
from interest_engine.logging_setup import get_logger
from interest_engine.schemas.calculation import (
    CompoundInterestRequest,
    CompoundInterestResponse,
    Status,
    VersionResponse,
)
from interest_engine.settings import EngineSettings, ServiceVersion

calculate_bp = Blueprint("calculate", __name__)

logger = get_logger(__name__)


def _settings() -> EngineSettings:
    return current_app.config["ENGINE_SETTINGS"]


def _elapsed_ms(started: float) -> int:
    return int(round((time.perf_counter() - started) * 1000))


def _respond(response: CompoundInterestResponse, status: HTTPStatus) -> Any:
    return jsonify(response.model_dump(mode="json", by_alias=True, exclude_none=False)), status


def _error(
    version: ServiceVersion,
    started: float,
    message: str,
    status: HTTPStatus,
    detail: Optional[list] = None,
) -> Any:
    response = CompoundInterestResponse(
        version=version.version_name,
        status=Status.ERROR,
        message=message,
        elapsedTimeMs=_elapsed_ms(started),
        detail=detail,
    )
    return _respond(response, status)


@calculate_bp.errorhandler(ValidationError)
def _handle_validation_error(exc: ValidationError) -> Any:
    """Convert Pydantic validation errors into the ERROR envelope."""
    logger.debug("Rejected request: %s", exc)
    return _error(
        g.get("service_version", _settings().active_version),
        g.get("started", time.perf_counter()),
        f"Invalid request: {exc.error_count()} validation error(s).",
        HTTPStatus.BAD_REQUEST,
        detail=exc.errors(include_url=False, include_context=False),
    )


def _run_compute_compound_interest(version: ServiceVersion) -> Any:
    started = time.perf_counter()
    g.service_version = version
    g.started = started
    logger.debug("Calling JSON service computeCompoundInterest (%s)", version.name)

    raw_payload = request.get_json(silent=True)
    if not isinstance(raw_payload, dict):
        return _error(version, started, "The request body must be a JSON object.", HTTPStatus.BAD_REQUEST)

    payload = CompoundInterestRequest.model_validate(raw_payload)

    logger.debug("Num Accounts: %d", len(payload.accounts))
    logger.debug("StartDate: %s", payload.startDate)
    logger.debug("Intervals: %d", payload.intervals)
    logger.debug("Frequency: %s", payload.frequency.name)
    logger.debug("IncludeBreakdowns: %s", payload.includeBreakdowns)

    accounts = payload.to_accounts()
    settings = _settings()
    try:
        if version.concurrent:
            outcome = calculate_compound_interest_concurrent(
                accounts,
                payload.startDate,
                payload.intervals,
                payload.frequency,
                payload.includeBreakdowns,
                pool_size=settings.pool_size,
                timeout=settings.timeout_seconds,
            )
        else:
            outcome = calculate_compound_interest(
                accounts,
                payload.startDate,
                payload.intervals,
                payload.frequency,
                payload.includeBreakdowns,
            )
    except InvalidParameterError as exc:
        return _error(version, started, str(exc), HTTPStatus.BAD_REQUEST)

    if not outcome.succeeded:
        return _error(
            version,
            started,
            f"An exception occurred: {outcome.message}",
            HTTPStatus.INTERNAL_SERVER_ERROR,
        )

    response = CompoundInterestResponse(
        version=version.version_name,
        status=Status.OK,
        results=list(outcome.results),
        elapsedTimeMs=_elapsed_ms(started),
    )
    return _respond(response, HTTPStatus.OK)


@calculate_bp.post("/computeCompoundInterest")
def compute_compound_interest() -> Any:
    """Serve whichever version the settings mark as active."""
    return _run_compute_compound_interest(_settings().active_version)


@calculate_bp.post("/v1/computeCompoundInterest")
def compute_compound_interest_v1() -> Any:
    """Version 1: accounts are evaluated sequentially."""
    return _run_compute_compound_interest(ServiceVersion.VERSION_1)


@calculate_bp.post("/v2/computeCompoundInterest")
def compute_compound_interest_v2() -> Any:
    """Version 2: accounts are evaluated concurrently."""
    return _run_compute_compound_interest(ServiceVersion.VERSION_2)


@calculate_bp.get("/version")
def version() -> Any:
    response = VersionResponse(
        activeVersion=_settings().active_version.version_name,
        versions=[member.version_name for member in ServiceVersion],
        frequencies=[member.name for member in CompoundingFrequency],
    )
    return jsonify(response.model_dump())
