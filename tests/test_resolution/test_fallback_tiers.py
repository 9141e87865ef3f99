"""Tests for the scout and demo tiers and the heuristic estimator behind them."""

import asyncio
import random

import pytest

from ecoscout.ai_engine.client import AIConfigurationError, AIHTTPError
from ecoscout.products.models import AIAnalysis
from ecoscout.resolution.demo import DEMO_CONFIDENCE, DEMO_RECORDS, DemoGenerator
from ecoscout.resolution.heuristic import SCORE_BANDS, RandomBandEstimator, SubScores
from ecoscout.resolution.scout import ScoutResolver


class _FixedEstimator:
    def estimate(self, analysis):
        return SubScores(
            packaging_score=60,
            carbon_score=61,
            ingredient_score=62,
            certification_score=63,
            health_score=64,
        )


class _ScoutAnalyzer:
    def __init__(self, result=None, error=None, delay_s=0.0):
        self.result = result
        self.error = error
        self.delay_s = delay_s
        self.queries = []

    async def analyze_scout(self, query):
        self.queries.append(query)
        if self.delay_s:
            await asyncio.sleep(self.delay_s)
        if self.error:
            raise self.error
        return self.result


class TestRandomBandEstimator:
    def test_scores_stay_inside_bands(self):
        estimator = RandomBandEstimator(random.Random(7))
        for _ in range(50):
            scores = estimator.estimate(AIAnalysis())
            for field, (low, high) in SCORE_BANDS.items():
                assert low <= getattr(scores, field) <= high

    def test_seeded_rng_is_reproducible(self):
        first = RandomBandEstimator(random.Random(42)).estimate(AIAnalysis())
        second = RandomBandEstimator(random.Random(42)).estimate(AIAnalysis())
        assert first == second


class TestScoutResolver:
    @pytest.mark.asyncio
    async def test_success_builds_scout_record(self):
        analyzer = _ScoutAnalyzer(
            AIAnalysis(product_name="Oat Milk", brand="Oatly", eco_score=130, reasoning="Plant based")
        )
        result = await ScoutResolver(analyzer, _FixedEstimator()).find_product("oat milk")

        assert result.success is True
        product = result.product
        assert product.product_name == "Oat Milk"
        assert product.eco_score == 100
        assert product.packaging_score == 60
        assert product.health_score == 64
        assert product.recyclable is False
        assert product.co2_impact == -1
        assert product.certifications == []
        assert product.source == "scout"
        assert product.confidence == 0.5
        assert product.eco_description == "Scout: Plant based"
        assert analyzer.queries == ["oat milk"]

    @pytest.mark.asyncio
    async def test_missing_fields_get_scout_defaults(self):
        result = await ScoutResolver(_ScoutAnalyzer(AIAnalysis()), _FixedEstimator()).find_product("x")
        assert result.product.product_name == "Unknown Product"
        assert result.product.eco_score == 50

    @pytest.mark.asyncio
    async def test_none_analysis_is_unsuccessful(self):
        result = await ScoutResolver(_ScoutAnalyzer(None), _FixedEstimator()).find_product("x")
        assert result.success is False
        assert result.product is None

    @pytest.mark.asyncio
    async def test_http_error_is_unsuccessful(self):
        analyzer = _ScoutAnalyzer(error=AIHTTPError(500, "boom"))
        result = await ScoutResolver(analyzer, _FixedEstimator()).find_product("x")
        assert result.success is False
        assert "500" in result.reasoning

    @pytest.mark.asyncio
    async def test_timeout_is_unsuccessful(self):
        analyzer = _ScoutAnalyzer(AIAnalysis(product_name="Late"), delay_s=0.2)
        result = await ScoutResolver(analyzer, _FixedEstimator(), timeout_s=0.02).find_product("x")
        assert result.success is False
        assert "timed out" in result.reasoning

    @pytest.mark.asyncio
    async def test_configuration_error_propagates(self):
        analyzer = _ScoutAnalyzer(error=AIConfigurationError("GEMINI_API_KEY is not set"))
        with pytest.raises(AIConfigurationError):
            await ScoutResolver(analyzer, _FixedEstimator()).find_product("x")


class TestDemoGenerator:
    def test_record_comes_from_fixed_set(self):
        product = DemoGenerator().generate("anything")
        assert product.product_name in {record["product_name"] for record in DEMO_RECORDS}
        assert product.source == "demo"
        assert product.confidence == DEMO_CONFIDENCE

    def test_every_record_is_complete(self):
        for record in DEMO_RECORDS:
            product = DemoGenerator(records=[record]).generate()
            assert product.product_name and product.brand and product.category
            assert product.eco_description
            assert 0 <= product.eco_score <= 100
            assert product.certifications, product.product_name
            assert 1 <= len(product.alternatives) <= 2, product.product_name
            assert all(alt.product_name and alt.reasoning for alt in product.alternatives)

    def test_seed_hint_does_not_change_the_pick(self):
        first = DemoGenerator(rng=random.Random(3)).generate("oat milk")
        second = DemoGenerator(rng=random.Random(3)).generate("something else")
        assert first == second

    def test_copies_are_independent(self):
        generator = DemoGenerator(records=[DEMO_RECORDS[-1]])
        first = generator.generate()
        first.alternatives.clear()
        second = generator.generate()
        assert len(second.alternatives) == 2
