"""Score helpers shared by the mapper and the resolution tiers."""

from __future__ import annotations

GRADE_SCORES: dict[str, int] = {"A": 90, "B": 75, "C": 60, "D": 40, "E": 20}
UNGRADED_SCORE = 50


def clamp_score(value: float, low: int = 0, high: int = 100) -> int:
    """Clamp a raw score into [low, high] and round it to an integer."""
    return int(round(max(low, min(high, value))))


def grade_to_score(grade: str | None) -> int:
    """Map a letter grade (A-E, any case) to a score. Anything else scores 50."""
    if not grade:
        return UNGRADED_SCORE
    return GRADE_SCORES.get(grade.strip().upper(), UNGRADED_SCORE)
