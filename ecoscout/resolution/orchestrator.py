"""Resolution orchestrator: tiered product resolution with bounded waits.

The orchestrator turns an identifying input (barcode, name or photo) into
exactly one CanonicalProduct. Tiers run in a fixed order and the first
success wins:

1. AI analysis (image first, then a generic text description, for photos)
2. Catalog enrichment of the AI record (never fatal)
3. Scout: a looser AI guess with heuristic sub-scores
4. Demo: a canned record, which cannot fail

Responsibilities:
- Drive the tier state machine with explicit transition guards
- Bound every upstream call with its own timeout
- Emit Signals at every tier boundary
- Apply the AI acceptance policy (min_confidence)

MUST NOT:
- Raise for any upstream failure other than a missing AI credential
- Let the catalog override the AI's identity or overall eco score
- Leave a timed-out upstream call running
"""

from __future__ import annotations

import asyncio
import logging
import re
import time
import uuid
from typing import Any

from ecoscout.ai_engine.client import AIConfigurationError, build_gemini_client
from ecoscout.ai_engine.engine import AIAnalyzer
from ecoscout.ai_engine.prompts import GENERIC_IMAGE_DESCRIPTION
from ecoscout.catalog.client import CatalogClient
from ecoscout.catalog.mapper import map_to_canonical
from ecoscout.config.settings import EcoScoutConfig
from ecoscout.products.models import (
    DEFAULT_ECO_SCORE,
    AIAnalysis,
    CanonicalProduct,
    ResolveRequest,
)
from ecoscout.products.scoring import clamp_score
from ecoscout.resolution.demo import DemoGenerator
from ecoscout.resolution.heuristic import HeuristicEstimator
from ecoscout.resolution.merge import merge_enrichment
from ecoscout.resolution.phases import VALID_TRANSITIONS, Phase
from ecoscout.resolution.scout import ScoutResolver
from ecoscout.resolution.timeouts import bounded
from ecoscout.signals.emitter import SignalEmitter, Subscriber
from ecoscout.signals.types import SignalType
from ecoscout.telemetry.errors import ErrorCode, emit_structured_error

logger = logging.getLogger(__name__)

BARCODE_PATTERN = re.compile(r"^\d{8,14}$")

UNKNOWN_PRODUCT_NAME = "Unknown product"
UNKNOWN_BRAND = "Unknown brand"
UNKNOWN_CATEGORY = "general"


class ResolutionError(Exception):
    """Raised on an internal state-machine violation. Never on upstream failure."""


def _describe(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__


def build_base_record(analysis: AIAnalysis) -> CanonicalProduct:
    """Turn an accepted AI analysis into the base record for enrichment."""
    confidence = "unknown" if analysis.confidence is None else f"{analysis.confidence}"
    eco_score = (
        DEFAULT_ECO_SCORE if analysis.eco_score is None else clamp_score(analysis.eco_score)
    )
    return CanonicalProduct(
        product_name=analysis.product_name,
        brand=analysis.brand,
        category=analysis.category,
        eco_score=eco_score,
        eco_description=f"AI: {analysis.reasoning}. Confidence: {confidence}",
        alternatives=list(analysis.alternatives),
        source="ai",
        confidence=analysis.confidence,
    )


def finalize(product: CanonicalProduct) -> CanonicalProduct:
    """Fill identity fields that every upstream left empty."""
    updates = {}
    if not product.product_name:
        updates["product_name"] = UNKNOWN_PRODUCT_NAME
    if not product.brand:
        updates["brand"] = UNKNOWN_BRAND
    if not product.category:
        updates["category"] = UNKNOWN_CATEGORY
    return product.model_copy(update=updates) if updates else product


class ResolutionRun:
    """State for one resolve() call. Not reusable."""

    def __init__(
        self,
        request: ResolveRequest,
        *,
        analyzer: AIAnalyzer,
        catalog: CatalogClient,
        scout: ScoutResolver,
        demo: DemoGenerator,
        config: EcoScoutConfig,
        subscribers: list[Subscriber] | None = None,
    ) -> None:
        self._request = request
        self._analyzer = analyzer
        self._catalog = catalog
        self._scout = scout
        self._demo = demo
        self._config = config
        self._request_id = f"res_{uuid.uuid4().hex[:12]}"
        self._phase = Phase.INIT
        self._signals = SignalEmitter(self._request_id, subscribers)

    @property
    def request_id(self) -> str:
        return self._request_id

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def signals(self) -> SignalEmitter:
        return self._signals

    @property
    def barcode(self) -> str | None:
        """The explicit barcode, or a product name that is all digits."""
        if self._request.barcode:
            return self._request.barcode
        name = self._request.product_name
        if name and BARCODE_PATTERN.match(name):
            return name
        return None

    @property
    def query(self) -> str:
        return self._request.barcode or self._request.product_name or GENERIC_IMAGE_DESCRIPTION

    # --- Phase Transition ---

    async def _transition(self, to_phase: Phase, context: dict[str, Any] | None = None) -> None:
        if to_phase not in VALID_TRANSITIONS.get(self._phase, set()):
            raise ResolutionError(f"Invalid transition: {self._phase.value} -> {to_phase.value}")
        self._phase = to_phase
        if to_phase is not Phase.COMPLETE:
            await self._signals.emit_tier_started(to_phase.value.lower(), context)

    async def _tier_failed(self, tier: Phase, code: ErrorCode, reason: str) -> None:
        emit_structured_error(
            logger,
            code=code,
            message=reason,
            suppressed=True,
            request_id=self._request_id,
            tier=tier.value.lower(),
        )
        await self._signals.emit_tier_failed(tier.value.lower(), reason)

    # --- Main Lifecycle ---

    async def execute(self) -> CanonicalProduct:
        started = time.monotonic()

        if not self._request.has_input:
            await self._transition(Phase.DEMO, {"reason": "no identifying input"})
            product = self._demo.generate(seed_hint="")
        else:
            await self._transition(Phase.AI_ANALYZE, {"input": self._input_kind()})
            base = await self._ai_tier()
            if base is not None:
                await self._transition(Phase.ENRICH)
                product = await self._enrich_tier(base)
            else:
                await self._transition(Phase.SCOUT, {"query": self.query})
                product = await self._scout_tier()
                if product is None:
                    await self._transition(Phase.DEMO)
                    product = self._demo.generate(seed_hint=self.query)

        product = finalize(product)
        await self._transition(Phase.COMPLETE)
        duration_s = round(time.monotonic() - started, 3)
        await self._signals.emit_resolution_complete(
            source=product.source,
            product_name=product.product_name,
            eco_score=product.eco_score,
            duration_s=duration_s,
        )
        logger.info(
            "Product resolved",
            extra={
                "request_id": self._request_id,
                "source": product.source,
                "duration_s": duration_s,
            },
        )
        return product

    def _input_kind(self) -> str:
        if self._request.image_base64:
            return "image"
        return "barcode" if self.barcode else "name"

    # --- Tiers ---

    async def _ai_tier(self) -> CanonicalProduct | None:
        try:
            analysis = await self._analyze()
        except AIConfigurationError:
            raise
        except Exception as exc:
            await self._tier_failed(Phase.AI_ANALYZE, ErrorCode.AI_TIER_FAILED, _describe(exc))
            return None

        if analysis is None:
            await self._tier_failed(
                Phase.AI_ANALYZE, ErrorCode.AI_TIER_FAILED, "AI returned no usable analysis"
            )
            return None

        min_confidence = self._config.policy.min_confidence
        if min_confidence is not None and (
            analysis.confidence is None or analysis.confidence < min_confidence
        ):
            await self._tier_failed(
                Phase.AI_ANALYZE,
                ErrorCode.AI_RESULT_REJECTED,
                f"confidence {analysis.confidence} below minimum {min_confidence}",
            )
            return None

        return build_base_record(analysis)

    async def _analyze(self) -> AIAnalysis | None:
        timeout_s = self._config.timeouts.ai_timeout_s
        if not self._request.image_base64:
            return await bounded(
                self._analyzer.analyze_text(self.query), timeout_s, label="ai_text"
            )

        try:
            analysis = await bounded(
                self._analyzer.analyze_image(
                    self._request.image_base64,
                    fast_mode=self._config.policy.image_fast_mode,
                    mime_type=self._request.image_mime_type,
                ),
                timeout_s,
                label="ai_image",
            )
        except AIConfigurationError:
            raise
        except Exception as exc:
            logger.warning(
                "Image analysis failed, retrying with a text description",
                extra={"request_id": self._request_id, "reason": _describe(exc)},
            )
            analysis = None

        if analysis is not None:
            return analysis
        return await bounded(
            self._analyzer.analyze_text(GENERIC_IMAGE_DESCRIPTION), timeout_s, label="ai_text"
        )

    async def _enrich_tier(self, base: CanonicalProduct) -> CanonicalProduct:
        enrichment: CanonicalProduct | None = None
        try:
            enrichment = await bounded(
                self._lookup_catalog(base),
                self._config.timeouts.catalog_timeout_s,
                label="catalog",
            )
        except Exception as exc:
            emit_structured_error(
                logger,
                code=ErrorCode.CATALOG_ENRICHMENT_FAILED,
                message=_describe(exc),
                suppressed=True,
                request_id=self._request_id,
                tier="enrich",
            )

        if enrichment is None:
            await self._signals.emit(SignalType.ENRICHMENT_SKIPPED, {"tier": "enrich"})
        else:
            await self._signals.emit(
                SignalType.ENRICHMENT_APPLIED,
                {"tier": "enrich", "catalog_name": enrichment.product_name},
            )
        return merge_enrichment(base, enrichment)

    async def _lookup_catalog(self, base: CanonicalProduct) -> CanonicalProduct | None:
        barcode = self.barcode
        if barcode:
            return map_to_canonical(await self._catalog.fetch_by_barcode(barcode))

        name = self._request.product_name or base.product_name
        if not name:
            return None
        results = await self._catalog.search_by_name(name)
        return map_to_canonical(results[0] if results else None)

    async def _scout_tier(self) -> CanonicalProduct | None:
        result = await self._scout.find_product(self.query)
        if not result.success or result.product is None:
            await self._tier_failed(Phase.SCOUT, ErrorCode.SCOUT_TIER_FAILED, result.reasoning)
            return None
        return result.product


class ResolutionOrchestrator:
    """Holds the collaborators and starts one ResolutionRun per request."""

    def __init__(
        self,
        analyzer: AIAnalyzer,
        catalog: CatalogClient,
        *,
        config: EcoScoutConfig | None = None,
        scout: ScoutResolver | None = None,
        demo: DemoGenerator | None = None,
        estimator: HeuristicEstimator | None = None,
        subscribers: list[Subscriber] | None = None,
    ) -> None:
        self._config = config or EcoScoutConfig()
        self._analyzer = analyzer
        self._catalog = catalog
        self._scout = scout or ScoutResolver(
            analyzer, estimator, timeout_s=self._config.timeouts.scout_timeout_s
        )
        self._demo = demo or DemoGenerator()
        self._subscribers: list[Subscriber] = list(subscribers or [])

    @classmethod
    def from_config(cls, config: EcoScoutConfig | None = None) -> ResolutionOrchestrator:
        config = config or EcoScoutConfig()
        analyzer = AIAnalyzer(build_gemini_client(config.gemini))
        return cls(analyzer, CatalogClient(config.catalog), config=config)

    @property
    def config(self) -> EcoScoutConfig:
        return self._config

    @property
    def analyzer(self) -> AIAnalyzer:
        return self._analyzer

    @property
    def catalog(self) -> CatalogClient:
        return self._catalog

    def subscribe(self, callback: Subscriber) -> None:
        self._subscribers.append(callback)

    def new_run(self, request: ResolveRequest) -> ResolutionRun:
        return ResolutionRun(
            request,
            analyzer=self._analyzer,
            catalog=self._catalog,
            scout=self._scout,
            demo=self._demo,
            config=self._config,
            subscribers=self._subscribers,
        )

    async def resolve(self, request: ResolveRequest) -> CanonicalProduct:
        """Resolve one input to exactly one record.

        Raises AIConfigurationError when no AI credential is configured;
        every other upstream failure degrades to the next tier.
        """
        return await self.new_run(request).execute()

    async def resolve_many(self, requests: list[ResolveRequest]) -> list[CanonicalProduct]:
        """Resolve independent inputs concurrently, preserving order."""
        return list(await asyncio.gather(*(self.resolve(request) for request in requests)))


async def resolve_product(
    request: ResolveRequest | dict[str, Any],
    orchestrator: ResolutionOrchestrator | None = None,
) -> CanonicalProduct:
    """One-shot convenience wrapper around ResolutionOrchestrator.resolve."""
    if not isinstance(request, ResolveRequest):
        request = ResolveRequest.model_validate(request)
    orchestrator = orchestrator or ResolutionOrchestrator.from_config()
    return await orchestrator.resolve(request)
