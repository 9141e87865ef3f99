"""EcoScout configuration settings."""

from __future__ import annotations

import os
from typing import Literal

from pydantic import BaseModel, Field, field_validator


def _float_env(var_name: str, default: float) -> float:
    raw = os.getenv(var_name, "").strip()
    return float(raw) if raw else default


class GeminiConfig(BaseModel):
    """Generative AI endpoint configuration.

    The REST backend authenticates with an API key; the Vertex backend uses
    project credentials (GOOGLE_APPLICATION_CREDENTIALS) instead.
    """

    api_key: str = Field(default_factory=lambda: os.getenv("GEMINI_API_KEY", ""))
    api_base: str = Field(
        default_factory=lambda: os.getenv(
            "GEMINI_API_BASE", "https://generativelanguage.googleapis.com/v1beta"
        )
    )
    model: str = Field(
        default_factory=lambda: os.getenv("GEMINI_MODEL", "gemini-1.5-flash-latest")
    )
    backend: Literal["rest", "vertex"] = Field(
        default_factory=lambda: os.getenv("ECOSCOUT_AI_BACKEND", "rest").strip().lower()
    )
    project_id: str = Field(default_factory=lambda: os.getenv("VERTEX_PROJECT_ID", ""))
    location: str = Field(default_factory=lambda: os.getenv("VERTEX_LOCATION", "us-central1"))
    request_timeout_s: float = 30.0

    model_config = {"validate_default": True}


class CatalogConfig(BaseModel):
    """Public product catalog (Open Food Facts) configuration."""

    base_url: str = Field(
        default_factory=lambda: os.getenv(
            "ECOSCOUT_CATALOG_BASE_URL", "https://world.openfoodfacts.org"
        )
    )
    page_size: int = 5
    user_agent: str = "EcoScout/1.0 (+https://github.com/ecoscout)"

    @field_validator("page_size")
    @classmethod
    def _validate_page_size(cls, value: int) -> int:
        if value < 1:
            raise ValueError("page_size must be >= 1")
        return value


class TimeoutConfig(BaseModel):
    """Bounded-wait budgets per resolution tier, in seconds."""

    ai_timeout_s: float = Field(default_factory=lambda: _float_env("ECOSCOUT_AI_TIMEOUT_S", 6.0))
    catalog_timeout_s: float = Field(
        default_factory=lambda: _float_env("ECOSCOUT_CATALOG_TIMEOUT_S", 3.0)
    )
    scout_timeout_s: float = Field(
        default_factory=lambda: _float_env("ECOSCOUT_SCOUT_TIMEOUT_S", 6.0)
    )

    @field_validator("ai_timeout_s", "catalog_timeout_s", "scout_timeout_s")
    @classmethod
    def _validate_positive(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("timeouts must be > 0")
        return value


class ResolutionPolicy(BaseModel):
    """Acceptance policy for AI results.

    min_confidence is None by default: any syntactically valid AI result is
    accepted regardless of its self-reported confidence.
    """

    min_confidence: float | None = Field(default=None, ge=0.0, le=1.0)
    image_fast_mode: bool = False


class EcoScoutConfig(BaseModel):
    """Root configuration for the resolution pipeline."""

    gemini: GeminiConfig = Field(default_factory=GeminiConfig)
    catalog: CatalogConfig = Field(default_factory=CatalogConfig)
    timeouts: TimeoutConfig = Field(default_factory=TimeoutConfig)
    policy: ResolutionPolicy = Field(default_factory=ResolutionPolicy)
    log_level: str = Field(default_factory=lambda: os.getenv("ECOSCOUT_LOG_LEVEL", "INFO"))
