"""Demo tier: canned records returned when every other tier has failed."""

from __future__ import annotations

import logging
import random
from typing import Any

from ecoscout.products.models import CanonicalProduct

logger = logging.getLogger(__name__)

DEMO_CONFIDENCE = 0.1

DEMO_RECORDS: list[dict[str, Any]] = [
    {
        "product_name": "Organic Coconut Oil",
        "brand": "Nature's Best",
        "category": "food",
        "eco_score": 78,
        "packaging_score": 70,
        "carbon_score": 65,
        "ingredient_score": 90,
        "certification_score": 85,
        "health_score": 80,
        "recyclable": True,
        "co2_impact": 0.4,
        "certifications": ["USDA Organic", "Fair Trade"],
        "eco_description": "Organic coconut oil in a recyclable glass jar.",
        "alternatives": [
            {
                "product_name": "Local Cold-Pressed Sunflower Oil",
                "reasoning": "Grown closer to home, so far less transport.",
            },
        ],
    },
    {
        "product_name": "Bamboo Toothbrush",
        "brand": "EcoFriendly",
        "category": "personal care",
        "eco_score": 85,
        "packaging_score": 88,
        "carbon_score": 80,
        "ingredient_score": 85,
        "certification_score": 70,
        "health_score": 75,
        "recyclable": True,
        "co2_impact": 0.1,
        "certifications": ["FSC Certified"],
        "eco_description": "Biodegradable bamboo handle with paper packaging.",
        "alternatives": [
            {
                "product_name": "Toothbrush with Replaceable Head",
                "reasoning": "Only the head is thrown away.",
            },
        ],
    },
    {
        "product_name": "Reusable Water Bottle",
        "brand": "HydroGreen",
        "category": "drinkware",
        "eco_score": 82,
        "packaging_score": 75,
        "carbon_score": 78,
        "ingredient_score": 80,
        "certification_score": 60,
        "health_score": 85,
        "recyclable": True,
        "co2_impact": 0.8,
        "certifications": ["BPA Free"],
        "eco_description": "Stainless steel bottle that replaces hundreds of single-use bottles.",
        "alternatives": [
            {
                "product_name": "Glass Water Bottle",
                "reasoning": "Inert, reusable and widely recyclable.",
            },
        ],
    },
    {
        "product_name": "Organic Cotton T-Shirt",
        "brand": "EcoWear",
        "category": "clothing",
        "eco_score": 72,
        "packaging_score": 65,
        "carbon_score": 60,
        "ingredient_score": 85,
        "certification_score": 80,
        "health_score": 70,
        "recyclable": False,
        "co2_impact": 2.1,
        "certifications": ["GOTS", "Fair Trade"],
        "eco_description": "Organic cotton grown without synthetic pesticides.",
        "alternatives": [
            {
                "product_name": "Hemp T-Shirt",
                "reasoning": "Hemp needs little water and no pesticides.",
            },
            {
                "product_name": "Second-hand T-Shirt",
                "reasoning": "No new production at all.",
            },
        ],
    },
    {
        "product_name": "Plastic Water Bottle",
        "brand": "AquaBrand",
        "category": "beverages",
        "eco_score": 25,
        "packaging_score": 20,
        "carbon_score": 30,
        "ingredient_score": 60,
        "certification_score": 10,
        "health_score": 50,
        "recyclable": True,
        "co2_impact": 1.6,
        "certifications": ["PET 1 Recyclable"],
        "eco_description": "Single-use PET bottle. Recyclable, but rarely recycled in practice.",
        "alternatives": [
            {
                "product_name": "Stainless Steel Water Bottle",
                "reasoning": "Durable, reusable for years and fully recyclable at end of life.",
            },
            {
                "product_name": "Glass Water Bottle",
                "reasoning": "Inert, reusable and widely recyclable.",
            },
        ],
    },
]


class DemoGenerator:
    """Returns one of a fixed set of plausible records.

    Output is always marked source="demo" with a low confidence so it can
    be told apart from real data. Each call returns an independent copy.
    """

    def __init__(
        self,
        records: list[dict[str, Any]] | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._records = records or DEMO_RECORDS
        self._rng = rng or random.Random()

    def generate(self, seed_hint: str = "") -> CanonicalProduct:
        """Pick a record uniformly at random.

        seed_hint does not influence the choice; it is only logged so a demo
        record can be traced back to the query that fell through.
        """
        record = self._rng.choice(self._records)
        logger.info(
            "Serving demo record",
            extra={"seed_hint": seed_hint, "product_name": record["product_name"]},
        )
        return CanonicalProduct.model_validate(
            {**record, "source": "demo", "confidence": DEMO_CONFIDENCE}
        )
