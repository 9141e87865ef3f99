"""FastAPI application entry point for EcoScout."""

from __future__ import annotations

import logging
import os
from typing import Final

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ecoscout.api.routes import router
from ecoscout.config.settings import EcoScoutConfig
from ecoscout.resolution.orchestrator import ResolutionOrchestrator

_DEVELOPMENT_ENVIRONMENTS: Final[set[str]] = {"dev", "development", "local"}

VERSION = "1.0.0"


def _is_truthy_env(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _resolve_cors_origins() -> list[str]:
    environment = os.getenv("ECOSCOUT_ENV", "development").strip().lower()
    origins_raw = os.getenv("ECOSCOUT_ALLOWED_ORIGINS", "")
    origins = [origin.strip() for origin in origins_raw.split(",") if origin.strip()]

    if origins:
        return origins

    if environment in _DEVELOPMENT_ENVIRONMENTS and _is_truthy_env(
        os.getenv("ECOSCOUT_DEV_ALLOW_ALL_ORIGINS", "")
    ):
        return ["*"]

    if environment not in _DEVELOPMENT_ENVIRONMENTS:
        raise RuntimeError(
            "Production CORS configuration error: ECOSCOUT_ALLOWED_ORIGINS must be set "
            "to a comma-separated list of trusted origins when ECOSCOUT_ENV is not "
            "development/local/dev."
        )

    return []


def create_app(
    config: EcoScoutConfig | None = None,
    orchestrator: ResolutionOrchestrator | None = None,
) -> FastAPI:
    """Factory function for creating the FastAPI application."""
    config = config or (orchestrator.config if orchestrator else EcoScoutConfig())
    logging.basicConfig(level=config.log_level.upper())

    app = FastAPI(
        title="EcoScout",
        description="Product sustainability resolution service",
        version=VERSION,
    )
    app.state.orchestrator = orchestrator or ResolutionOrchestrator.from_config(config)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=_resolve_cors_origins(),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router, prefix="/api/v1")

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        return {"status": "healthy", "service": "ecoscout", "version": VERSION}

    return app
