"""Field-level merge of an AI-derived base record with a catalog enrichment."""

from __future__ import annotations

from ecoscout.products.models import UNKNOWN_CO2_IMPACT, CanonicalProduct

DEFAULT_SUB_SCORES: dict[str, int] = {
    "packaging_score": 55,
    "carbon_score": 55,
    "ingredient_score": 55,
    "certification_score": 50,
    "health_score": 50,
}

CATALOG_DESCRIPTION_SEPARATOR = "\n\nExtra info (catalog): "


def merge_enrichment(
    base: CanonicalProduct, enrichment: CanonicalProduct | None
) -> CanonicalProduct:
    """Merge catalog data into an AI record.

    The AI record is the authority for identity and the overall eco score.
    The catalog only fills empty identity fields and supplies what the AI
    does not provide: sub-scores, recyclability, CO2 impact and labels.
    Without enrichment the catalog-owned fields are reset to fixed defaults.
    """
    if enrichment is None:
        return base.model_copy(
            update={
                **DEFAULT_SUB_SCORES,
                "recyclable": False,
                "co2_impact": UNKNOWN_CO2_IMPACT,
                "certifications": [],
            },
            deep=True,
        )

    description = base.eco_description
    if enrichment.eco_description:
        description = f"{description}{CATALOG_DESCRIPTION_SEPARATOR}{enrichment.eco_description}"

    alternatives = base.alternatives or enrichment.alternatives

    return CanonicalProduct(
        product_name=base.product_name or enrichment.product_name,
        brand=base.brand or enrichment.brand,
        category=base.category or enrichment.category,
        eco_score=base.eco_score,
        packaging_score=enrichment.packaging_score,
        carbon_score=enrichment.carbon_score,
        ingredient_score=enrichment.ingredient_score,
        certification_score=enrichment.certification_score,
        health_score=enrichment.health_score,
        recyclable=enrichment.recyclable,
        co2_impact=enrichment.co2_impact,
        certifications=list(enrichment.certifications),
        eco_description=description,
        alternatives=[alt.model_copy() for alt in alternatives],
        source="catalog",
        confidence=base.confidence,
        image_url=enrichment.image_url or base.image_url,
    )
