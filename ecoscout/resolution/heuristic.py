"""Sub-score estimation for scout records, which have no catalog data."""

from __future__ import annotations

import random
from typing import Protocol

from pydantic import BaseModel, Field

from ecoscout.products.models import AIAnalysis

# Inclusive (low, high) bands for each sub-score.
SCORE_BANDS: dict[str, tuple[int, int]] = {
    "packaging_score": (50, 80),
    "carbon_score": (45, 75),
    "ingredient_score": (55, 85),
    "certification_score": (40, 70),
    "health_score": (55, 90),
}


class SubScores(BaseModel):
    packaging_score: int = Field(ge=0, le=100)
    carbon_score: int = Field(ge=0, le=100)
    ingredient_score: int = Field(ge=0, le=100)
    certification_score: int = Field(ge=0, le=100)
    health_score: int = Field(ge=0, le=100)


class HeuristicEstimator(Protocol):
    """Produces the five sub-scores for a record built from a scout analysis."""

    def estimate(self, analysis: AIAnalysis) -> SubScores: ...


class RandomBandEstimator:
    """Draws each sub-score uniformly from its band.

    Pass a seeded random.Random for reproducible output.
    """

    def __init__(
        self,
        rng: random.Random | None = None,
        bands: dict[str, tuple[int, int]] | None = None,
    ) -> None:
        self._rng = rng or random.Random()
        self._bands = bands or SCORE_BANDS

    def estimate(self, analysis: AIAnalysis) -> SubScores:
        return SubScores(
            **{field: self._rng.randint(low, high) for field, (low, high) in self._bands.items()}
        )
