"""Unit tests for MemoryCache.

This test suite covers:
    - Basic get/set/delete/clear
    - TTL expiry (milliseconds)
    - Bulk cleanup of expired entries
    - Conformance with the Cache protocol
"""

import pytest

from idempotency_marker.protocols import Cache, has_cache_capabilities
from idempotency_marker.storage.memory import MemoryCache


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def memory_cache(clock: FakeClock) -> MemoryCache:
    return MemoryCache(clock=clock)


# ============================================================================
# Basic Operations
# ============================================================================


@pytest.mark.asyncio
async def test_get_missing_key(memory_cache: MemoryCache) -> None:
    assert await memory_cache.get("missing") is None


@pytest.mark.asyncio
async def test_set_then_get(memory_cache: MemoryCache) -> None:
    await memory_cache.set("k", "1", ttl=5000)
    assert await memory_cache.get("k") == "1"
    assert len(memory_cache) == 1


@pytest.mark.asyncio
async def test_set_overwrites(memory_cache: MemoryCache) -> None:
    await memory_cache.set("k", "1", ttl=5000)
    await memory_cache.set("k", "2", ttl=5000)
    assert await memory_cache.get("k") == "2"


@pytest.mark.asyncio
@pytest.mark.parametrize("ttl", [0, -1])
async def test_non_positive_ttl_rejected(memory_cache: MemoryCache, ttl: int) -> None:
    with pytest.raises(ValueError):
        await memory_cache.set("k", "1", ttl=ttl)


@pytest.mark.asyncio
async def test_delete(memory_cache: MemoryCache) -> None:
    await memory_cache.set("k", "1", ttl=5000)
    assert await memory_cache.delete("k") is True
    assert await memory_cache.delete("k") is False
    assert await memory_cache.get("k") is None


@pytest.mark.asyncio
async def test_clear(memory_cache: MemoryCache) -> None:
    await memory_cache.set("a", "1", ttl=5000)
    await memory_cache.set("b", "1", ttl=5000)
    await memory_cache.clear()
    assert len(memory_cache) == 0


# ============================================================================
# Expiry
# ============================================================================


@pytest.mark.asyncio
async def test_ttl_is_milliseconds(memory_cache: MemoryCache, clock: FakeClock) -> None:
    await memory_cache.set("k", "1", ttl=1500)

    clock.advance(1.4)
    assert await memory_cache.get("k") == "1"

    clock.advance(0.2)
    assert await memory_cache.get("k") is None


@pytest.mark.asyncio
async def test_expired_entry_removed_on_get(memory_cache: MemoryCache, clock: FakeClock) -> None:
    await memory_cache.set("k", "1", ttl=100)
    clock.advance(1)

    await memory_cache.get("k")

    assert len(memory_cache) == 0


@pytest.mark.asyncio
async def test_cleanup_expired(memory_cache: MemoryCache, clock: FakeClock) -> None:
    await memory_cache.set("short-1", "1", ttl=100)
    await memory_cache.set("short-2", "1", ttl=100)
    await memory_cache.set("long", "1", ttl=60_000)
    clock.advance(1)

    removed = await memory_cache.cleanup_expired()

    assert removed == 2
    assert len(memory_cache) == 1
    assert await memory_cache.get("long") == "1"


@pytest.mark.asyncio
async def test_cleanup_with_nothing_expired(memory_cache: MemoryCache) -> None:
    await memory_cache.set("k", "1", ttl=60_000)
    assert await memory_cache.cleanup_expired() == 0


# ============================================================================
# Protocol conformance
# ============================================================================


def test_satisfies_cache_protocol(memory_cache: MemoryCache) -> None:
    assert isinstance(memory_cache, Cache)
    assert has_cache_capabilities(memory_cache)
