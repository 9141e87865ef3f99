"""Gemini transports: the only code that talks to the generative AI endpoint.

Two interchangeable backends share the same call shape: a list of REST-style
content parts in, the first candidate's text segment out.

- GeminiRestClient: generateContent over HTTPS with an API key header.
- VertexGeminiClient: the Vertex AI SDK with project credentials.
"""

from __future__ import annotations

import base64
import logging
from typing import Any, Protocol

import httpx
from pydantic import BaseModel

from ecoscout.config.settings import GeminiConfig
from ecoscout.telemetry.errors import ErrorCode, emit_structured_error

logger = logging.getLogger(__name__)

VERTEX_DEFAULT_MODEL = "gemini-2.5-flash"


class AIConfigurationError(Exception):
    """Missing or unusable AI credential. Fatal, never retried."""


class AIHTTPError(Exception):
    """The AI endpoint answered with a non-2xx status."""

    def __init__(self, status_code: int, detail: str = "") -> None:
        super().__init__(f"Gemini API request failed with status {status_code}")
        self.status_code = status_code
        self.detail = detail


class GenerationSettings(BaseModel):
    """Sampling parameters for one generateContent call."""

    temperature: float = 0.4
    top_k: int | None = None
    top_p: float | None = None
    max_output_tokens: int = 2048

    def to_rest(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "temperature": self.temperature,
            "maxOutputTokens": self.max_output_tokens,
        }
        if self.top_k is not None:
            payload["topK"] = self.top_k
        if self.top_p is not None:
            payload["topP"] = self.top_p
        return payload


class GeminiTransport(Protocol):
    async def generate_text(
        self, parts: list[dict[str, Any]], generation: GenerationSettings
    ) -> str | None: ...


def extract_candidate_text(response: dict[str, Any]) -> str | None:
    """Return candidates[0].content.parts[0].text, or None when absent."""
    try:
        text = response["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return None
    return text if isinstance(text, str) else None


class GeminiRestClient:
    """generateContent over plain HTTPS, authenticated with an API key."""

    def __init__(
        self,
        config: GeminiConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config
        self._transport = transport

    async def generate_text(
        self, parts: list[dict[str, Any]], generation: GenerationSettings
    ) -> str | None:
        if not self._config.api_key:
            raise AIConfigurationError("GEMINI_API_KEY is not set")

        url = f"{self._config.api_base.rstrip('/')}/models/{self._config.model}:generateContent"
        body = {
            "contents": [{"parts": parts}],
            "generationConfig": generation.to_rest(),
        }
        headers = {
            "Content-Type": "application/json",
            "x-goog-api-key": self._config.api_key,
        }

        async with httpx.AsyncClient(
            timeout=self._config.request_timeout_s, transport=self._transport
        ) as client:
            response = await client.post(url, json=body, headers=headers)

        if not response.is_success:
            logger.warning(
                "Gemini API error",
                extra={"status_code": response.status_code, "body": response.text[:500]},
            )
            raise AIHTTPError(response.status_code, response.text[:500])

        return extract_candidate_text(response.json())


class VertexGeminiClient:
    """Gemini through the Vertex AI SDK. Initialized lazily on first call."""

    def __init__(self, config: GeminiConfig, model_name: str = VERTEX_DEFAULT_MODEL) -> None:
        self._config = config
        self._model_name = model_name
        self._model: Any = None

    def _ensure_model(self) -> Any:
        if self._model is not None:
            return self._model
        if not self._config.project_id:
            raise AIConfigurationError("VERTEX_PROJECT_ID is not set")

        try:
            import vertexai
            from vertexai.generative_models import GenerativeModel

            vertexai.init(project=self._config.project_id, location=self._config.location)
            self._model = GenerativeModel(self._model_name)
        except Exception as exc:
            emit_structured_error(
                logger,
                code=ErrorCode.AI_INITIALIZATION_FAILED,
                message=str(exc),
                suppressed=False,
            )
            raise AIConfigurationError(f"Vertex AI initialization failed: {exc}") from exc
        return self._model

    async def generate_text(
        self, parts: list[dict[str, Any]], generation: GenerationSettings
    ) -> str | None:
        model = self._ensure_model()

        from vertexai.generative_models import GenerationConfig, Part

        contents = []
        for part in parts:
            if "text" in part:
                contents.append(Part.from_text(part["text"]))
            else:
                inline = part["inline_data"]
                contents.append(
                    Part.from_data(
                        data=base64.b64decode(inline["data"]),
                        mime_type=inline["mime_type"],
                    )
                )

        response = await model.generate_content_async(
            contents,
            generation_config=GenerationConfig(
                temperature=generation.temperature,
                top_k=generation.top_k,
                top_p=generation.top_p,
                max_output_tokens=generation.max_output_tokens,
            ),
        )
        try:
            return response.text
        except ValueError:
            # The SDK raises when the candidate carries no text part.
            return None


def build_gemini_client(config: GeminiConfig) -> GeminiTransport:
    """Pick the transport named by config.backend."""
    if config.backend == "vertex":
        return VertexGeminiClient(config)
    return GeminiRestClient(config)
