"""Signal emitter: progress notifications for a single resolution.

One emitter per resolve() call. Subscribers may be sync or async callables;
a failing subscriber is logged and never interrupts resolution.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Callable

from ecoscout.signals.types import Signal, SignalType
from ecoscout.telemetry.errors import ErrorCode, emit_structured_error

logger = logging.getLogger(__name__)

Subscriber = Callable[[Signal], Any]


class SignalEmitter:
    """Emits and broadcasts signals for one resolution.

    Signals are:
    - Immutable once emitted
    - Assigned monotonic sequence numbers
    - Kept in memory for the lifetime of the call
    - Broadcast to subscribers in emission order
    """

    def __init__(self, request_id: str, subscribers: list[Subscriber] | None = None) -> None:
        self._request_id = request_id
        self._sequence = 0
        self._subscribers: list[Subscriber] = list(subscribers or [])
        self._signals: list[Signal] = []
        self._lock = asyncio.Lock()

    @property
    def request_id(self) -> str:
        return self._request_id

    @property
    def signals(self) -> list[Signal]:
        """Return all emitted signals (read-only copy)."""
        return list(self._signals)

    def subscribe(self, callback: Subscriber) -> None:
        self._subscribers.append(callback)

    def unsubscribe(self, callback: Subscriber) -> None:
        self._subscribers = [s for s in self._subscribers if s is not callback]

    async def emit(self, signal_type: SignalType, payload: dict[str, Any] | None = None) -> Signal:
        """Emit a signal. This is the ONLY way to create signals."""
        async with self._lock:
            self._sequence += 1
            signal = Signal(
                sequence=self._sequence,
                signal_type=signal_type,
                timestamp=datetime.now(timezone.utc),
                request_id=self._request_id,
                payload=payload or {},
            )
            self._signals.append(signal)

        await self._broadcast(signal)
        return signal

    async def _broadcast(self, signal: Signal) -> None:
        for subscriber in self._subscribers:
            try:
                result = subscriber(signal)
                if asyncio.iscoroutine(result):
                    await result
            except Exception as exc:
                emit_structured_error(
                    logger,
                    code=ErrorCode.SIGNAL_SUBSCRIBER_FAILURE,
                    message=str(exc),
                    suppressed=True,
                    request_id=self._request_id,
                    details={"signal_type": signal.signal_type.value},
                )

    async def emit_tier_started(self, tier: str, context: dict[str, Any] | None = None) -> Signal:
        return await self.emit(SignalType.TIER_STARTED, {"tier": tier, **(context or {})})

    async def emit_tier_failed(self, tier: str, reason: str) -> Signal:
        return await self.emit(SignalType.TIER_FAILED, {"tier": tier, "reason": reason})

    async def emit_resolution_complete(
        self, source: str, product_name: str, eco_score: int, duration_s: float
    ) -> Signal:
        """Convenience: emit the final RESOLUTION_COMPLETE signal."""
        return await self.emit(
            SignalType.RESOLUTION_COMPLETE,
            {
                "source": source,
                "product_name": product_name,
                "eco_score": eco_score,
                "duration_s": duration_s,
            },
        )
