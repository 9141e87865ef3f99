"""Signal type definitions for resolution progress notifications."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class SignalType(str, Enum):
    """All signal types emitted while resolving a product."""

    TIER_STARTED = "TIER_STARTED"
    TIER_FAILED = "TIER_FAILED"
    ENRICHMENT_APPLIED = "ENRICHMENT_APPLIED"
    ENRICHMENT_SKIPPED = "ENRICHMENT_SKIPPED"
    RESOLUTION_COMPLETE = "RESOLUTION_COMPLETE"


class Signal(BaseModel):
    """An immutable progress event emitted during one resolve() call.

    Signals are the toast-equivalent feed for UI collaborators; they carry
    no authority over the resolution itself.
    """

    sequence: int = Field(description="Monotonic sequence number within the resolution")
    signal_type: SignalType
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    request_id: str
    payload: dict[str, Any] = Field(default_factory=dict)

    model_config = {"frozen": True}
