"""Tests for the response cache."""

import asyncio

import pytest

from supplyboard.services.cache import ResponseCache, make_key


class TestResponseCache:
    """Tests for ResponseCache."""

    def test_set_and_get(self, cache_service: ResponseCache) -> None:
        """Test basic set and get operations."""
        cache_service.set(52.52, 13.41, {"temp": 10.5})
        assert cache_service.get(52.52, 13.41) == {"temp": 10.5}

    def test_cache_miss(self, cache_service: ResponseCache) -> None:
        """Test cache miss returns None."""
        assert cache_service.get(52.52, 13.41) is None

    def test_key_format(self) -> None:
        assert make_key(40.7128, -74.0060) == "40.71,-74.01"
        assert make_key(1, 2) == "1.00,2.00"

    def test_coordinate_rounding(self, cache_service: ResponseCache) -> None:
        """Nearby coordinates share one slot."""
        cache_service.set(40.7128, -74.0060, {"temp": 10.5})

        assert cache_service.get(40.7129, -74.0061) == {"temp": 10.5}
        assert cache_service.keys() == ["40.71,-74.01"]

    def test_different_coordinates_miss(self, cache_service: ResponseCache) -> None:
        """Test different coordinates don't hit cache."""
        cache_service.set(52.52, 13.41, {"temp": 10.5})
        assert cache_service.get(51.50, 0.12) is None

    def test_last_write_wins(self, cache_service: ResponseCache) -> None:
        cache_service.set(52.52, 13.41, {"temp": 1})
        cache_service.set(52.521, 13.409, {"temp": 2})

        assert cache_service.get(52.52, 13.41) == {"temp": 2}
        assert cache_service.size == 1

    def test_fresh_until_duration_elapses(self, cache_service: ResponseCache, clock) -> None:
        cache_service.set(52.52, 13.41, {"temp": 10.5})

        clock.advance(599_999)
        assert cache_service.get(52.52, 13.41) == {"temp": 10.5}

        clock.advance(1)
        assert cache_service.get(52.52, 13.41) is None

    def test_stale_read_does_not_evict(self, cache_service: ResponseCache, clock) -> None:
        cache_service.set(52.52, 13.41, {"temp": 10.5})
        clock.advance(700_000)

        assert cache_service.get(52.52, 13.41) is None
        assert cache_service.keys() == ["52.52,13.41"]

    def test_rewrite_refreshes_stale_entry(self, cache_service: ResponseCache, clock) -> None:
        cache_service.set(52.52, 13.41, {"temp": 1})
        clock.advance(700_000)
        cache_service.set(52.52, 13.41, {"temp": 2})

        assert cache_service.get(52.52, 13.41) == {"temp": 2}

    def test_sweep_removes_expired_entries(self, cache_service: ResponseCache, clock) -> None:
        cache_service.set(52.52, 13.41, {"temp": 1})
        clock.advance(1_800_001)
        cache_service.set(51.50, 0.12, {"temp": 2})

        removed = cache_service.sweep()

        assert removed == 1
        assert cache_service.keys() == ["51.50,0.12"]
        assert cache_service.get(51.50, 0.12) == {"temp": 2}

    def test_sweep_keeps_fresh_entries(self, cache_service: ResponseCache, clock) -> None:
        cache_service.set(52.52, 13.41, {"temp": 1})
        clock.advance(300_000)

        assert cache_service.sweep() == 0
        assert cache_service.size == 1

    def test_clear(self, cache_service: ResponseCache) -> None:
        """Test clearing cache."""
        cache_service.set(52.52, 13.41, {"temp": 10.5})
        cache_service.clear()
        assert cache_service.get(52.52, 13.41) is None

    def test_size(self, cache_service: ResponseCache) -> None:
        """Test cache size tracking."""
        assert cache_service.size == 0
        cache_service.set(52.52, 13.41, {"temp": 10.5})
        assert cache_service.size == 1
        cache_service.set(51.50, 0.12, {"temp": 5.0})
        assert cache_service.size == 2

    def test_is_healthy(self, cache_service: ResponseCache) -> None:
        """Test health check."""
        assert cache_service.is_healthy() is True

    def test_max_size(self, clock) -> None:
        """Least recently used entry is dropped when the cache is full."""
        cache = ResponseCache(
            name="small", duration_ms=60_000, cleanup_interval_ms=60_000, max_size=2, clock=clock
        )

        cache.set(1.0, 1.0, {"temp": 1})
        cache.set(2.0, 2.0, {"temp": 2})
        cache.set(3.0, 3.0, {"temp": 3})

        assert cache.size == 2
        assert cache.get(1.0, 1.0) is None
        assert cache.get(2.0, 2.0) is not None
        assert cache.get(3.0, 3.0) is not None


class TestSweeperTask:
    """Tests for the background sweep task."""

    @pytest.mark.asyncio
    async def test_sweeper_removes_expired_entries(self, clock) -> None:
        cache = ResponseCache(
            name="sweeper", duration_ms=1_000, cleanup_interval_ms=10, max_size=10, clock=clock
        )
        cache.set(52.52, 13.41, {"temp": 1})
        clock.advance(5_000)

        cache.start()
        try:
            for _ in range(50):
                if cache.size == 0:
                    break
                await asyncio.sleep(0.01)
        finally:
            await cache.stop()

        assert cache.size == 0

    @pytest.mark.asyncio
    async def test_start_and_stop(self, cache_service: ResponseCache) -> None:
        cache_service.start()
        assert cache_service.sweeper_running

        await cache_service.stop()
        assert not cache_service.sweeper_running

    @pytest.mark.asyncio
    async def test_stop_without_start(self, cache_service: ResponseCache) -> None:
        await cache_service.stop()
        assert not cache_service.sweeper_running
