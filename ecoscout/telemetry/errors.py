"""Structured error telemetry helpers."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Canonical error codes for operational telemetry."""

    AI_INITIALIZATION_FAILED = "AI_INITIALIZATION_FAILED"
    AI_TIER_FAILED = "AI_TIER_FAILED"
    AI_EMPTY_RESPONSE = "AI_EMPTY_RESPONSE"
    AI_RESPONSE_UNPARSEABLE = "AI_RESPONSE_UNPARSEABLE"
    AI_RESULT_REJECTED = "AI_RESULT_REJECTED"
    CATALOG_ENRICHMENT_FAILED = "CATALOG_ENRICHMENT_FAILED"
    SCOUT_TIER_FAILED = "SCOUT_TIER_FAILED"
    SIGNAL_SUBSCRIBER_FAILURE = "SIGNAL_SUBSCRIBER_FAILURE"


def emit_structured_error(
    logger: logging.Logger,
    *,
    code: ErrorCode,
    message: str,
    suppressed: bool,
    request_id: str | None = None,
    tier: str | None = None,
    details: dict[str, Any] | None = None,
) -> None:
    """Emit a structured telemetry event via logging."""
    logger.error(
        "ecoscout_error",
        extra={
            "error_code": code,
            "error_message": message,
            "suppressed": suppressed,
            "request_id": request_id,
            "tier": tier,
            "details": details or {},
        },
    )
