"""Product data models: the canonical record and the upstream shapes it is built from."""

from __future__ import annotations

import math
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

ResolutionSource = Literal["ai", "catalog", "scout", "demo"]

UNKNOWN_CO2_IMPACT = -1.0
DEFAULT_ECO_SCORE = 55


class Alternative(BaseModel):
    """A more sustainable product suggested in place of the resolved one."""

    product_name: str = ""
    reasoning: str = ""

    @field_validator("product_name", "reasoning", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        return _text_or_empty(value)


class CanonicalProduct(BaseModel):
    """The single reconciled output of the resolution pipeline.

    Attributes are snake_case; the JSON shape is camelCase (productName,
    ecoScore, co2Impact, ...) to match what UI collaborators consume.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    product_name: str = ""
    brand: str = ""
    category: str = ""
    eco_score: int = Field(default=DEFAULT_ECO_SCORE, ge=0, le=100)
    packaging_score: int = Field(default=55, ge=0, le=100)
    carbon_score: int = Field(default=55, ge=0, le=100)
    ingredient_score: int = Field(default=55, ge=0, le=100)
    certification_score: int = Field(default=50, ge=0, le=100)
    health_score: int = Field(default=50, ge=0, le=100)
    recyclable: bool = False
    co2_impact: float = UNKNOWN_CO2_IMPACT  # kg CO2e per 100g, -1 when unknown
    certifications: list[str] = Field(default_factory=list, max_length=6)
    eco_description: str = ""
    alternatives: list[Alternative] = Field(default_factory=list)
    source: ResolutionSource = "ai"
    confidence: float | None = None
    image_url: str | None = None


class AIAnalysis(BaseModel):
    """Structured output of the generative AI endpoint after JSON extraction.

    Numeric fields are not range-checked here. Missing, non-numeric and
    non-finite values become None so that callers substitute defaults.
    """

    model_config = ConfigDict(extra="ignore")

    product_name: str = ""
    brand: str = ""
    category: str = ""
    eco_score: float | None = None
    confidence: float | None = None
    reasoning: str = ""
    alternatives: list[Alternative] = Field(default_factory=list)

    @field_validator("product_name", "brand", "category", "reasoning", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        return _text_or_empty(value)

    @field_validator("eco_score", "confidence", mode="before")
    @classmethod
    def _coerce_number(cls, value: Any) -> float | None:
        return _finite_or_none(value)

    @field_validator("alternatives", mode="before")
    @classmethod
    def _coerce_alternatives(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, list):
            return [{"product_name": item} if isinstance(item, str) else item for item in value]
        return value


class RawCatalogRecord(BaseModel):
    """Subset of an Open Food Facts product used by the mapper."""

    model_config = ConfigDict(extra="ignore")

    code: str | None = None
    product_name: str | None = None
    generic_name: str | None = None
    brands: str | None = None
    brands_tags: list[str] | None = None
    categories: str | None = None
    categories_tags: list[str] | None = None
    ecoscore_grade: str | None = None
    ecoscore_score: float | None = None
    nutriscore_grade: str | None = None
    ingredients_analysis_tags: list[str] | None = None
    labels: str | None = None
    labels_tags: list[str] | None = None
    packaging: str | None = None
    packaging_text: str | None = None
    packaging_recycling: str | None = None
    ecoscore_data: dict[str, Any] | None = None
    image_url: str | None = None
    image_front_url: str | None = None

    @field_validator("ecoscore_score", mode="before")
    @classmethod
    def _coerce_score(cls, value: Any) -> float | None:
        return _finite_or_none(value)

    @property
    def co2_total(self) -> float | None:
        """kg CO2e per 100g from the agribalyse block, if present and valid."""
        agribalyse = (self.ecoscore_data or {}).get("agribalyse") or {}
        value = _finite_or_none(agribalyse.get("co2_total"))
        if value is None or value < 0:
            return None
        return value


class ResolveRequest(BaseModel):
    """Identifying input for one resolution call."""

    barcode: str | None = None
    product_name: str | None = None
    image_base64: str | None = None
    image_mime_type: str = "image/jpeg"

    @field_validator("barcode", "product_name", "image_base64", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value.strip() if isinstance(value, str) else value

    @property
    def has_input(self) -> bool:
        return bool(self.barcode or self.product_name or self.image_base64)


def _text_or_empty(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    if isinstance(value, str):
        return value.strip()
    return value


def _finite_or_none(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return None
    if not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    return float(value)
