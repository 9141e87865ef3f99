"""AI Analyzer: product identification and eco scoring backed by Gemini.

The analyzer provides intelligence without authority: it builds prompts, calls
the transport, and turns the model's free text into a validated AIAnalysis.
It never substitutes defaults or clamps scores; that is the orchestrator's job.

Soft failures (empty text, unparseable or schema-invalid JSON) return None.
Transport failures (AIHTTPError, httpx errors) and AIConfigurationError raise.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from pydantic import ValidationError

from ecoscout.ai_engine.client import GeminiTransport, GenerationSettings
from ecoscout.ai_engine.prompts import (
    IMAGE_FAST_SETTINGS,
    IMAGE_STANDARD_SETTINGS,
    SCOUT_SETTINGS,
    TEXT_SETTINGS,
    image_prompt,
    scout_prompt,
    text_prompt,
)
from ecoscout.products.models import AIAnalysis
from ecoscout.telemetry.errors import ErrorCode, emit_structured_error

logger = logging.getLogger(__name__)

_FENCED_JSON = re.compile(r"```(?:json)?\s*\n(.*?)\n?\s*```", re.DOTALL | re.IGNORECASE)


def _load_object(text: str) -> dict[str, Any] | None:
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        return None
    return data if isinstance(data, dict) else None


def parse_analysis(response_text: str) -> AIAnalysis | None:
    """Parse model output: a fenced ```json block first, the whole text second."""
    data = None
    match = _FENCED_JSON.search(response_text)
    if match:
        data = _load_object(match.group(1).strip())
    if data is None:
        data = _load_object(response_text.strip())
    if data is None:
        return None

    try:
        return AIAnalysis.model_validate(data)
    except ValidationError:
        return None


def split_data_url(image: str, default_mime: str = "image/jpeg") -> tuple[str, str]:
    """Split 'data:image/png;base64,AAAA' into ('image/png', 'AAAA')."""
    if image.startswith("data:") and "," in image:
        header, data = image.split(",", 1)
        mime = header[5:].split(";")[0] or default_mime
        return mime, data
    return default_mime, image


class AIAnalyzer:
    """Prompts the generative model and parses its structured answer."""

    def __init__(self, client: GeminiTransport) -> None:
        self._client = client

    async def analyze_text(self, query: str) -> AIAnalysis | None:
        """Identify and score a product from a name or barcode."""
        parts = [{"text": text_prompt(query)}]
        return await self._run(parts, TEXT_SETTINGS, mode="text")

    async def analyze_scout(self, query: str) -> AIAnalysis | None:
        """Best-guess identification used by the scout tier."""
        parts = [{"text": scout_prompt(query)}]
        return await self._run(parts, SCOUT_SETTINGS, mode="scout")

    async def analyze_image(
        self,
        image_base64: str,
        fast_mode: bool = False,
        mime_type: str = "image/jpeg",
    ) -> AIAnalysis | None:
        """Identify and score the product in an image.

        fast_mode selects the short, low-temperature prompt meant for live
        camera overlays; the standard prompt is for a static detail view.
        Data-URL prefixes are accepted and stripped.
        """
        mime, data = split_data_url(image_base64, default_mime=mime_type)
        parts = [
            {"text": image_prompt(fast_mode)},
            {"inline_data": {"mime_type": mime, "data": data}},
        ]
        settings = IMAGE_FAST_SETTINGS if fast_mode else IMAGE_STANDARD_SETTINGS
        return await self._run(parts, settings, mode="image_fast" if fast_mode else "image")

    async def _run(
        self,
        parts: list[dict[str, Any]],
        settings: GenerationSettings,
        mode: str,
    ) -> AIAnalysis | None:
        response_text = await self._client.generate_text(parts, settings)

        if not response_text or not response_text.strip():
            emit_structured_error(
                logger,
                code=ErrorCode.AI_EMPTY_RESPONSE,
                message=f"No text found in Gemini {mode} response",
                suppressed=True,
                details={"mode": mode},
            )
            return None

        analysis = parse_analysis(response_text)
        if analysis is None:
            emit_structured_error(
                logger,
                code=ErrorCode.AI_RESPONSE_UNPARSEABLE,
                message="Failed to parse Gemini JSON response",
                suppressed=True,
                details={"mode": mode, "raw_text": response_text[:500]},
            )
        return analysis
