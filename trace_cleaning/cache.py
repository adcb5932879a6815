"""
In-memory cache for pipeline results.

Entries are keyed by ``(trace_id, snap, smooth)`` and expire after a fixed
TTL. Writes are last-writer-wins. All access happens on the event loop
thread, so the cache needs no lock.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from cachetools import TTLCache

from trace_cleaning.models import PipelineOptions, PipelineResult

logger = logging.getLogger(__name__)

CacheKey = tuple[str, bool, bool]


def make_key(trace_id: str, options: PipelineOptions) -> CacheKey:
    return (trace_id, options.snap, options.smooth)


class ResultCache:
    def __init__(
        self,
        ttl_seconds: float,
        *,
        max_entries: int = 256,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self._entries: TTLCache[CacheKey, PipelineResult] | None = None
        if ttl_seconds > 0:
            self._entries = TTLCache(
                maxsize=max(1, max_entries),
                ttl=ttl_seconds,
                timer=clock,
            )

    @property
    def enabled(self) -> bool:
        return self._entries is not None

    def __len__(self) -> int:
        if self._entries is None:
            return 0
        self._entries.expire()
        return len(self._entries)

    def get(self, trace_id: str, options: PipelineOptions) -> PipelineResult | None:
        if self._entries is None:
            return None
        key = make_key(trace_id, options)
        result = self._entries.get(key)
        if result is not None:
            logger.debug("Result cache hit for %s", key)
        return result

    def set(
        self,
        trace_id: str,
        options: PipelineOptions,
        result: PipelineResult,
    ) -> None:
        if self._entries is None:
            return
        self._entries[make_key(trace_id, options)] = result

    def clear(self) -> None:
        if self._entries is not None:
            self._entries.clear()
