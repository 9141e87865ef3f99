"""Tests for AI response parsing and the analyzer's soft-failure contract."""

import json

import pytest

from ecoscout.ai_engine.engine import AIAnalyzer, parse_analysis, split_data_url
from ecoscout.ai_engine.prompts import IMAGE_FAST_SETTINGS, SCOUT_SETTINGS, TEXT_SETTINGS


class _RecordingTransport:
    def __init__(self, text):
        self.text = text
        self.calls = []

    async def generate_text(self, parts, generation):
        self.calls.append((parts, generation))
        return self.text


class TestParseAnalysis:
    def test_fenced_json_block(self):
        text = (
            "Here is the analysis:\n```json\n"
            '{"product_name": "Oat Milk", "eco_score": 72, "confidence": 0.8}\n```\nThanks!'
        )
        analysis = parse_analysis(text)
        assert analysis.product_name == "Oat Milk"
        assert analysis.eco_score == 72
        assert analysis.confidence == 0.8

    def test_bare_json(self):
        analysis = parse_analysis('{"product_name": "Soap", "brand": "Clean Co"}')
        assert analysis.product_name == "Soap"
        assert analysis.brand == "Clean Co"
        assert analysis.eco_score is None

    def test_garbage_returns_none(self):
        assert parse_analysis("I could not identify this product.") is None

    def test_json_array_returns_none(self):
        assert parse_analysis("[1, 2, 3]") is None

    def test_non_numeric_score_becomes_none(self):
        analysis = parse_analysis('{"product_name": "X", "eco_score": "high"}')
        assert analysis.eco_score is None

    def test_numeric_string_score_accepted(self):
        analysis = parse_analysis('{"eco_score": "64"}')
        assert analysis.eco_score == 64

    def test_string_alternatives_are_normalized(self):
        analysis = parse_analysis('{"alternatives": ["Glass Bottle", {"product_name": "Can"}]}')
        assert [a.product_name for a in analysis.alternatives] == ["Glass Bottle", "Can"]

    def test_null_fields_become_empty(self):
        analysis = parse_analysis('{"product_name": null, "alternatives": null}')
        assert analysis.product_name == ""
        assert analysis.alternatives == []

    def test_whitespace_only_text_becomes_empty(self):
        analysis = parse_analysis('{"product_name": "  ", "brand": " Oatly ", "category": "\\t"}')
        assert analysis.product_name == ""
        assert analysis.brand == "Oatly"
        assert analysis.category == ""

    def test_invalid_alternatives_shape_returns_none(self):
        assert parse_analysis('{"alternatives": 5}') is None


class TestSplitDataUrl:
    def test_data_url(self):
        assert split_data_url("data:image/png;base64,AAAA") == ("image/png", "AAAA")

    def test_plain_base64_uses_default(self):
        assert split_data_url("AAAA", default_mime="image/webp") == ("image/webp", "AAAA")


class TestAIAnalyzer:
    @pytest.mark.asyncio
    async def test_analyze_text_uses_text_settings(self):
        transport = _RecordingTransport(json.dumps({"product_name": "Tea", "eco_score": 70}))
        analysis = await AIAnalyzer(transport).analyze_text("green tea")

        assert analysis.product_name == "Tea"
        parts, settings = transport.calls[0]
        assert "green tea" in parts[0]["text"]
        assert settings == TEXT_SETTINGS

    @pytest.mark.asyncio
    async def test_analyze_scout_uses_scout_settings(self):
        transport = _RecordingTransport('{"product_name": "Tea"}')
        await AIAnalyzer(transport).analyze_scout("tea")
        assert transport.calls[0][1] == SCOUT_SETTINGS

    @pytest.mark.asyncio
    async def test_analyze_image_sends_inline_data(self):
        transport = _RecordingTransport('{"product_name": "Jar"}')
        await AIAnalyzer(transport).analyze_image("data:image/png;base64,QUJD", fast_mode=True)

        parts, settings = transport.calls[0]
        assert parts[1] == {"inline_data": {"mime_type": "image/png", "data": "QUJD"}}
        assert settings == IMAGE_FAST_SETTINGS

    @pytest.mark.asyncio
    async def test_empty_text_returns_none(self):
        assert await AIAnalyzer(_RecordingTransport("   ")).analyze_text("x") is None
        assert await AIAnalyzer(_RecordingTransport(None)).analyze_text("x") is None

    @pytest.mark.asyncio
    async def test_unparseable_text_returns_none(self):
        assert await AIAnalyzer(_RecordingTransport("not json")).analyze_text("x") is None
