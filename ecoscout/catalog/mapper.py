"""Catalog mapper: raw catalog record to canonical product.

Transparent, deterministic scoring. Every rule here is part of the published
scoring contract, so changes alter user-visible scores:

- eco score: catalog numeric score (clamped), else letter grade table
- ingredients: 50, +20 vegan, +10 vegetarian, +10 palm-oil-free
- certifications: 50, +25 organic/bio label, +15 fair-trade label
- packaging: 40, +35 when the packaging text mentions "recycl"
- carbon: 100 - min(100, co2 * 10) when a CO2 figure exists, else 55
- health: nutrition grade through the same letter table
"""

from __future__ import annotations

import re

from ecoscout.products.models import UNKNOWN_CO2_IMPACT, CanonicalProduct, RawCatalogRecord
from ecoscout.products.scoring import clamp_score, grade_to_score

MAX_CERTIFICATIONS = 6
DEFAULT_CARBON_SCORE = 55

_NAMESPACE_PREFIX = re.compile(r"^[a-z]{2,3}:")
_ORGANIC = re.compile(r"organic|bio")
_FAIR_TRADE = re.compile(r"fair[- ]?trade")


def strip_namespace(tag: str) -> str:
    """Drop the language prefix of a catalog tag ('en:organic' -> 'organic')."""
    return _NAMESPACE_PREFIX.sub("", tag.strip())


def _first_segment(text: str | None) -> str:
    if not text:
        return ""
    return text.split(",")[0].strip()


def _identity(raw: RawCatalogRecord) -> tuple[str, str, str]:
    name = raw.product_name or raw.generic_name or "Unknown product"

    brand = ""
    if raw.brands_tags:
        brand = raw.brands_tags[0]
    brand = brand or _first_segment(raw.brands) or "Unknown brand"

    category = ""
    if raw.categories_tags:
        category = strip_namespace(raw.categories_tags[0])
    category = category or _first_segment(raw.categories) or "general"

    return name, brand, category


def _packaging_text(raw: RawCatalogRecord) -> str:
    parts = [raw.packaging, raw.packaging_text, raw.packaging_recycling]
    return " ".join(p for p in parts if p).lower()


def map_to_canonical(raw: RawCatalogRecord | None) -> CanonicalProduct | None:
    """Normalize a catalog record. Returns None when there was no catalog match."""
    if raw is None:
        return None

    name, brand, category = _identity(raw)

    if raw.ecoscore_score is not None:
        eco_score = clamp_score(raw.ecoscore_score)
    else:
        eco_score = grade_to_score(raw.ecoscore_grade)

    analysis = set(raw.ingredients_analysis_tags or [])
    ingredient_score = clamp_score(
        50
        + (20 if "en:vegan" in analysis else 0)
        + (10 if "en:vegetarian" in analysis else 0)
        + (10 if "en:palm-oil-free" in analysis else 0)
    )

    labels = [strip_namespace(tag) for tag in raw.labels_tags or []]
    has_organic = any(_ORGANIC.search(label) for label in labels)
    has_fair_trade = any(_FAIR_TRADE.search(label) for label in labels)
    certification_score = clamp_score(
        50 + (25 if has_organic else 0) + (15 if has_fair_trade else 0)
    )

    recyclable = "recycl" in _packaging_text(raw)
    packaging_score = clamp_score(40 + (35 if recyclable else 0))

    co2 = raw.co2_total
    if co2 is not None:
        co2_impact = co2
        carbon_score = clamp_score(100 - min(100, co2 * 10))
    else:
        co2_impact = UNKNOWN_CO2_IMPACT
        carbon_score = DEFAULT_CARBON_SCORE

    recyclability = (
        "Packaging appears recyclable." if recyclable else "Packaging recyclability unknown."
    )

    return CanonicalProduct(
        product_name=name,
        brand=brand,
        category=category,
        eco_score=eco_score,
        packaging_score=packaging_score,
        carbon_score=carbon_score,
        ingredient_score=ingredient_score,
        certification_score=certification_score,
        health_score=grade_to_score(raw.nutriscore_grade),
        recyclable=recyclable,
        co2_impact=co2_impact,
        certifications=labels[:MAX_CERTIFICATIONS],
        eco_description=f"{name} by {brand} has eco-score {eco_score}. {recyclability}",
        alternatives=[],
        source="catalog",
        image_url=raw.image_front_url or raw.image_url,
    )
