"""Tests for the Gemini transports."""

import json

import httpx
import pytest

from ecoscout.ai_engine.client import (
    AIConfigurationError,
    AIHTTPError,
    GeminiRestClient,
    GenerationSettings,
    VertexGeminiClient,
    build_gemini_client,
    extract_candidate_text,
)
from ecoscout.config.settings import GeminiConfig


def _config(**overrides):
    values = {"api_key": "test-key", "api_base": "https://gemini.test/v1beta", "model": "gemini-test"}
    values.update(overrides)
    return GeminiConfig(**values)


class TestExtractCandidateText:
    def test_first_candidate_text(self):
        response = {"candidates": [{"content": {"parts": [{"text": "hello"}, {"text": "x"}]}}]}
        assert extract_candidate_text(response) == "hello"

    def test_missing_candidates(self):
        assert extract_candidate_text({"promptFeedback": {"blockReason": "SAFETY"}}) is None
        assert extract_candidate_text({"candidates": []}) is None


class TestGenerationSettings:
    def test_rest_payload_omits_unset_sampling(self):
        payload = GenerationSettings(temperature=0.7, top_p=0.95, max_output_tokens=1024).to_rest()
        assert payload == {"temperature": 0.7, "maxOutputTokens": 1024, "topP": 0.95}


class TestGeminiRestClient:
    @pytest.mark.asyncio
    async def test_missing_key_raises_configuration_error(self):
        client = GeminiRestClient(_config(api_key=""))
        with pytest.raises(AIConfigurationError):
            await client.generate_text([{"text": "hi"}], GenerationSettings())

    @pytest.mark.asyncio
    async def test_request_shape_and_response_text(self):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["key"] = request.headers["x-goog-api-key"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(
                200, json={"candidates": [{"content": {"parts": [{"text": '{"a": 1}'}]}}]}
            )

        client = GeminiRestClient(_config(), transport=httpx.MockTransport(handler))
        text = await client.generate_text(
            [{"text": "describe"}], GenerationSettings(temperature=0.1, max_output_tokens=512)
        )

        assert text == '{"a": 1}'
        assert seen["url"] == "https://gemini.test/v1beta/models/gemini-test:generateContent"
        assert seen["key"] == "test-key"
        assert seen["body"]["contents"] == [{"parts": [{"text": "describe"}]}]
        assert seen["body"]["generationConfig"]["maxOutputTokens"] == 512

    @pytest.mark.asyncio
    async def test_non_2xx_raises_with_status(self):
        def handler(request):
            return httpx.Response(429, json={"error": {"message": "quota"}})

        client = GeminiRestClient(_config(), transport=httpx.MockTransport(handler))
        with pytest.raises(AIHTTPError) as exc_info:
            await client.generate_text([{"text": "x"}], GenerationSettings())
        assert exc_info.value.status_code == 429

    @pytest.mark.asyncio
    async def test_response_without_text_returns_none(self):
        def handler(request):
            return httpx.Response(200, json={"candidates": []})

        client = GeminiRestClient(_config(), transport=httpx.MockTransport(handler))
        assert await client.generate_text([{"text": "x"}], GenerationSettings()) is None


class TestVertexGeminiClient:
    @pytest.mark.asyncio
    async def test_missing_project_raises_configuration_error(self):
        client = VertexGeminiClient(_config(backend="vertex", project_id=""))
        with pytest.raises(AIConfigurationError):
            await client.generate_text([{"text": "x"}], GenerationSettings())


class TestBuildGeminiClient:
    def test_rest_is_default(self):
        assert isinstance(build_gemini_client(_config(backend="rest")), GeminiRestClient)

    def test_vertex_backend(self):
        assert isinstance(build_gemini_client(_config(backend="vertex")), VertexGeminiClient)
