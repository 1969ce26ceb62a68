"""Coordinate-keyed response cache for upstream weather data."""

from __future__ import annotations

import asyncio
import contextlib
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

import structlog
from cachetools import LRUCache
from prometheus_client import Counter, Gauge

logger = structlog.get_logger()

T = TypeVar("T")

Clock = Callable[[], float]

# Metrics
cache_hits = Counter("cache_hits_total", "Total cache hits", ["cache"])
cache_misses = Counter("cache_misses_total", "Total cache misses", ["cache"])
cache_evictions = Counter(
    "cache_evictions_total",
    "Total entries removed by the expiry sweep",
    ["cache"],
)
cache_size_gauge = Gauge("cache_size", "Current number of cache entries", ["cache"])


def now_ms() -> float:
    """Wall clock in milliseconds."""
    return time.time() * 1000


def make_key(lat: float, lon: float) -> str:
    """Create cache key from coordinates.

    Rounds coordinates to 2 decimal places (about 1.1 km) so nearby
    lookups share one slot.
    """
    return f"{lat:.2f},{lon:.2f}"


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    """A stored payload and the time it was written."""

    key: str
    payload: T
    stored_at: float


class ResponseCache(Generic[T]):
    """Time-bounded cache keyed by rounded coordinates.

    Reads honour an entry only while ``now - stored_at < duration``. Stale
    entries stay in place until :meth:`sweep` removes them, either when
    called directly or from the background task started with :meth:`start`.
    """

    def __init__(
        self,
        name: str,
        duration_ms: int,
        cleanup_interval_ms: int,
        max_size: int,
        clock: Clock = now_ms,
    ) -> None:
        """Initialize an empty cache."""
        self.name = name
        self._duration = duration_ms
        self._cleanup_interval = cleanup_interval_ms
        self._clock = clock
        self._entries: LRUCache[str, CacheEntry[T]] = LRUCache(maxsize=max_size)
        self._sweeper: asyncio.Task[None] | None = None

    @property
    def duration_ms(self) -> int:
        return self._duration

    @property
    def cleanup_interval_ms(self) -> int:
        return self._cleanup_interval

    def get(self, lat: float, lon: float) -> T | None:
        """Return the cached payload for coordinates if it is still fresh."""
        entry = self._entries.get(make_key(lat, lon))
        if entry is not None and self._clock() - entry.stored_at < self._duration:
            cache_hits.labels(cache=self.name).inc()
            return entry.payload
        cache_misses.labels(cache=self.name).inc()
        return None

    def set(self, lat: float, lon: float, payload: T) -> None:
        """Store payload for coordinates, replacing any previous entry."""
        key = make_key(lat, lon)
        self._entries[key] = CacheEntry(key=key, payload=payload, stored_at=self._clock())
        cache_size_gauge.labels(cache=self.name).set(len(self._entries))

    def sweep(self) -> int:
        """Remove every entry older than the cache duration.

        Returns:
            Number of entries removed
        """
        now = self._clock()
        expired = [
            key
            for key, entry in list(self._entries.items())
            if now - entry.stored_at > self._duration
        ]
        for key in expired:
            self._entries.pop(key, None)

        cache_evictions.labels(cache=self.name).inc(len(expired))
        cache_size_gauge.labels(cache=self.name).set(len(self._entries))
        if expired:
            logger.info(
                "Cache sweep removed expired entries",
                cache=self.name,
                removed=len(expired),
                remaining=len(self._entries),
            )
        return len(expired)

    def keys(self) -> list[str]:
        """Return every stored key, including stale ones not yet swept."""
        return list(self._entries.keys())

    def clear(self) -> None:
        """Clear all cache entries."""
        self._entries.clear()
        cache_size_gauge.labels(cache=self.name).set(0)

    @property
    def size(self) -> int:
        """Return current cache size."""
        return len(self._entries)

    def is_healthy(self) -> bool:
        """Check if cache is operational."""
        return self._entries is not None and isinstance(len(self._entries), int)

    async def _run_sweeper(self) -> None:
        interval = self._cleanup_interval / 1000
        while True:
            await asyncio.sleep(interval)
            self.sweep()

    def start(self) -> None:
        """Start the periodic sweep on the running event loop."""
        if self._sweeper is None or self._sweeper.done():
            self._sweeper = asyncio.create_task(
                self._run_sweeper(), name=f"{self.name}-cache-sweeper"
            )
            logger.debug(
                "Cache sweeper started",
                cache=self.name,
                interval_ms=self._cleanup_interval,
            )

    async def stop(self) -> None:
        """Cancel the periodic sweep and wait for it to finish."""
        if self._sweeper is None:
            return
        self._sweeper.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._sweeper
        self._sweeper = None
        logger.debug("Cache sweeper stopped", cache=self.name)

    @property
    def sweeper_running(self) -> bool:
        return self._sweeper is not None and not self._sweeper.done()
