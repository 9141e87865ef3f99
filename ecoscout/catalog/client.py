"""Open Food Facts catalog client.

Read-only lookups by barcode and by free-text name. No credential is required.
Every call opens its own AsyncClient so concurrent resolutions share nothing.
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from ecoscout.config.settings import CatalogConfig
from ecoscout.products.models import RawCatalogRecord

logger = logging.getLogger(__name__)

PRODUCT_FIELDS = (
    "code,product_name,generic_name,brands,brands_tags,categories,categories_tags,"
    "ecoscore_grade,ecoscore_score,nutriscore_grade,ingredients_analysis_tags,labels,"
    "labels_tags,packaging,packaging_text,packaging_tags,packaging_recycling,"
    "ecoscore_data,image_url,image_front_url"
)


class CatalogError(Exception):
    """Raised when the catalog answers with a non-2xx status."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class CatalogClient:
    """Async client for the public product catalog."""

    def __init__(
        self,
        config: CatalogConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config or CatalogConfig()
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._config.base_url,
            headers={
                "Accept": "application/json",
                "User-Agent": self._config.user_agent,
            },
            transport=self._transport,
        )

    async def _get_json(self, path: str, params: dict[str, Any]) -> Any:
        async with self._client() as client:
            response = await client.get(path, params=params)
        if not response.is_success:
            raise CatalogError(
                f"Catalog request failed: {response.status_code}",
                status_code=response.status_code,
            )
        return response.json()

    async def fetch_by_barcode(self, barcode: str) -> RawCatalogRecord | None:
        """Look up one product by barcode. Returns None when the catalog has no match."""
        path = f"/api/v2/product/{quote(barcode.strip(), safe='')}.json"
        data = await self._get_json(path, {"fields": PRODUCT_FIELDS})

        if not isinstance(data, dict) or data.get("status") != 1 or not data.get("product"):
            logger.info("Catalog miss for barcode", extra={"barcode": barcode})
            return None
        return RawCatalogRecord.model_validate(data["product"])

    async def search_by_name(
        self, name: str, page_size: int | None = None
    ) -> list[RawCatalogRecord]:
        """Full-text search. Results keep catalog order; callers use the first one.

        Hits that fail validation are skipped rather than failing the search.
        """
        params = {
            "search_terms": name,
            "search_simple": 1,
            "action": "process",
            "json": 1,
            "page_size": page_size or self._config.page_size,
            "fields": PRODUCT_FIELDS,
        }
        data = await self._get_json("/cgi/search.pl", params)

        products = data.get("products") if isinstance(data, dict) else None
        if not isinstance(products, list):
            return []

        records: list[RawCatalogRecord] = []
        for product in products:
            if not isinstance(product, dict):
                continue
            try:
                records.append(RawCatalogRecord.model_validate(product))
            except ValidationError as exc:
                logger.info(
                    "Skipping malformed catalog search hit",
                    extra={"code": product.get("code"), "error_count": exc.error_count()},
                )
        return records
