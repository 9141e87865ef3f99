"""REST API routes for EcoScout.

Provides endpoints for:
- Full tiered resolution of a barcode, name or photo
- The AI analysis step on its own
- Catalog lookup and mapping on its own
"""

from __future__ import annotations

import httpx
from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel

from ecoscout.ai_engine.client import AIConfigurationError, AIHTTPError
from ecoscout.api.auth import require_api_auth
from ecoscout.catalog.client import CatalogError
from ecoscout.catalog.mapper import map_to_canonical
from ecoscout.products.models import AIAnalysis, CanonicalProduct, ResolveRequest
from ecoscout.resolution.orchestrator import ResolutionOrchestrator
from ecoscout.resolution.timeouts import TierTimeoutError, bounded

router = APIRouter(dependencies=[Depends(require_api_auth)])


def get_orchestrator(request: Request) -> ResolutionOrchestrator:
    return request.app.state.orchestrator


# --- Request Models ---


class AnalyzeRequest(BaseModel):
    """Input for the AI-only analysis endpoint."""

    query: str | None = None
    image_base64: str | None = None
    image_mime_type: str = "image/jpeg"
    fast_mode: bool = False


# --- Endpoints ---


@router.post("/resolve", response_model=CanonicalProduct)
async def resolve(
    body: ResolveRequest,
    orchestrator: ResolutionOrchestrator = Depends(get_orchestrator),
) -> CanonicalProduct:
    """Resolve a barcode, name or photo to one canonical product record.

    Never fails for upstream trouble: the response degrades to scout or
    demo data, which the `source` field makes visible.
    """
    if not body.has_input:
        raise HTTPException(
            status_code=422, detail="One of barcode, product_name or image_base64 is required"
        )
    try:
        return await orchestrator.resolve(body)
    except AIConfigurationError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc


@router.post("/analyze", response_model=AIAnalysis)
async def analyze(
    body: AnalyzeRequest,
    orchestrator: ResolutionOrchestrator = Depends(get_orchestrator),
) -> AIAnalysis:
    """Run the AI analysis step alone, without fallbacks."""
    query = (body.query or "").strip()
    if not query and not body.image_base64:
        raise HTTPException(status_code=422, detail="Either query or image_base64 is required")

    analyzer = orchestrator.analyzer
    if body.image_base64:
        call = analyzer.analyze_image(
            body.image_base64, fast_mode=body.fast_mode, mime_type=body.image_mime_type
        )
    else:
        call = analyzer.analyze_text(query)

    try:
        analysis = await bounded(call, orchestrator.config.timeouts.ai_timeout_s, label="analyze")
    except AIConfigurationError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    except AIHTTPError as exc:
        raise HTTPException(status_code=502, detail=f"Gemini API error: {exc.status_code}") from exc
    except httpx.HTTPError as exc:
        raise HTTPException(status_code=502, detail=f"Gemini request failed: {exc}") from exc
    except TierTimeoutError as exc:
        raise HTTPException(status_code=504, detail=str(exc)) from exc

    if analysis is None:
        raise HTTPException(status_code=422, detail="Model response could not be analyzed")
    return analysis


@router.get("/catalog/{barcode}", response_model=CanonicalProduct)
async def catalog_lookup(
    barcode: str,
    orchestrator: ResolutionOrchestrator = Depends(get_orchestrator),
) -> CanonicalProduct:
    """Look a barcode up in the catalog and map it, without AI."""
    try:
        raw = await orchestrator.catalog.fetch_by_barcode(barcode)
    except CatalogError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    except httpx.HTTPError as exc:
        raise HTTPException(status_code=502, detail=f"Catalog request failed: {exc}") from exc

    product = map_to_canonical(raw)
    if product is None:
        raise HTTPException(status_code=404, detail=f"Product {barcode} not found")
    return product
