"""Bounded waits for upstream calls."""

from __future__ import annotations

import asyncio
from typing import Awaitable, TypeVar

T = TypeVar("T")


class TierTimeoutError(TimeoutError):
    """An upstream call did not finish inside its tier budget."""

    def __init__(self, label: str, timeout_s: float) -> None:
        super().__init__(f"{label} timed out after {timeout_s:.1f}s")
        self.label = label
        self.timeout_s = timeout_s


async def bounded(awaitable: Awaitable[T], timeout_s: float, *, label: str) -> T:
    """Race an awaitable against a timer.

    On timeout the operation is cancelled (httpx aborts the in-flight request)
    and awaited to completion, so its late result or error is discarded and
    nothing is left running.
    """
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout_s)
    except asyncio.TimeoutError as exc:
        raise TierTimeoutError(label, timeout_s) from exc
