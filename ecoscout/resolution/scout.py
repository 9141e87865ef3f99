"""Scout tier: a second, looser AI identification when the primary call fails."""

from __future__ import annotations

import logging

from pydantic import BaseModel

from ecoscout.ai_engine.client import AIConfigurationError
from ecoscout.ai_engine.engine import AIAnalyzer
from ecoscout.products.models import UNKNOWN_CO2_IMPACT, AIAnalysis, CanonicalProduct
from ecoscout.products.scoring import clamp_score
from ecoscout.resolution.heuristic import HeuristicEstimator, RandomBandEstimator
from ecoscout.resolution.timeouts import bounded

logger = logging.getLogger(__name__)

SCOUT_DEFAULT_ECO_SCORE = 50
SCOUT_DEFAULT_CONFIDENCE = 0.5
SCOUT_UNKNOWN_NAME = "Unknown Product"


class ScoutResult(BaseModel):
    success: bool
    product: CanonicalProduct | None = None
    confidence: float = 0.0
    reasoning: str = ""


class ScoutResolver:
    """Asks the model for a best guess and fills the gaps heuristically.

    find_product never raises except for AIConfigurationError; every other
    failure (timeout, HTTP error, unparseable output) is reported as an
    unsuccessful ScoutResult.
    """

    def __init__(
        self,
        analyzer: AIAnalyzer,
        estimator: HeuristicEstimator | None = None,
        timeout_s: float = 6.0,
    ) -> None:
        self._analyzer = analyzer
        self._estimator = estimator or RandomBandEstimator()
        self._timeout_s = timeout_s

    async def find_product(self, query: str) -> ScoutResult:
        try:
            analysis = await bounded(
                self._analyzer.analyze_scout(query), self._timeout_s, label="scout"
            )
        except AIConfigurationError:
            raise
        except Exception as exc:
            reason = str(exc) or type(exc).__name__
            logger.warning("Scout lookup failed: %s", reason)
            return ScoutResult(success=False, reasoning=reason)

        if analysis is None:
            return ScoutResult(success=False, reasoning="Scout analysis returned no result")

        product = self.to_canonical(analysis)
        return ScoutResult(
            success=True,
            product=product,
            confidence=product.confidence,
            reasoning=analysis.reasoning,
        )

    def to_canonical(self, analysis: AIAnalysis) -> CanonicalProduct:
        sub_scores = self._estimator.estimate(analysis)
        eco_score = (
            analysis.eco_score if analysis.eco_score is not None else SCOUT_DEFAULT_ECO_SCORE
        )
        confidence = (
            analysis.confidence if analysis.confidence is not None else SCOUT_DEFAULT_CONFIDENCE
        )
        return CanonicalProduct(
            product_name=analysis.product_name or SCOUT_UNKNOWN_NAME,
            brand=analysis.brand,
            category=analysis.category,
            eco_score=clamp_score(eco_score),
            **sub_scores.model_dump(),
            recyclable=False,
            co2_impact=UNKNOWN_CO2_IMPACT,
            certifications=[],
            eco_description=f"Scout: {analysis.reasoning or 'Analysis complete.'}",
            alternatives=list(analysis.alternatives),
            source="scout",
            confidence=confidence,
        )
