"""Unit tests for the cache coordinator."""

from typing import Any

import pytest

from idempotency_marker.core.coordinator import CacheCoordinator
from idempotency_marker.exceptions import CacheReadError, CacheWriteError


class TestLookup:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("value", ["1", True, 1, {"done": True}])
    async def test_truthy_value_is_hit(self, make_cache: Any, value: Any) -> None:
        cache = make_cache(value=value)
        coordinator = CacheCoordinator(cache, ttl=1000)

        assert await coordinator.lookup("idemp-key-abc") is True
        assert cache.get_calls == ["idemp-key-abc"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("value", [None, "", 0, False])
    async def test_falsy_value_is_miss(self, make_cache: Any, value: Any) -> None:
        coordinator = CacheCoordinator(make_cache(value=value), ttl=1000)
        assert await coordinator.lookup("idemp-key-abc") is False

    @pytest.mark.asyncio
    async def test_failure_raises_cache_read_error(self, make_cache: Any) -> None:
        cause = ConnectionError("cache unavailable")
        coordinator = CacheCoordinator(make_cache(get_error=cause), ttl=1000)

        with pytest.raises(CacheReadError) as exc_info:
            await coordinator.lookup("idemp-key-abc")

        assert exc_info.value.key == "idemp-key-abc"
        assert exc_info.value.cause is cause
        assert exc_info.value.__cause__ is cause

    @pytest.mark.asyncio
    async def test_lookup_never_writes(self, make_cache: Any) -> None:
        cache = make_cache(value="1")
        await CacheCoordinator(cache, ttl=1000).lookup("idemp-key-abc")
        assert cache.set_calls == []


class TestMarkCompleted:
    @pytest.mark.asyncio
    async def test_stores_marker_with_ttl(self, cache: Any) -> None:
        coordinator = CacheCoordinator(cache, ttl=3600)
        await coordinator.mark_completed("idemp-key-abc")

        assert cache.set_calls == [("idemp-key-abc", "1", 3600)]

    @pytest.mark.asyncio
    async def test_failure_raises_cache_write_error(self, make_cache: Any) -> None:
        cause = TimeoutError("write timed out")
        coordinator = CacheCoordinator(make_cache(set_error=cause), ttl=3600)

        with pytest.raises(CacheWriteError) as exc_info:
            await coordinator.mark_completed("idemp-key-abc")

        assert exc_info.value.key == "idemp-key-abc"
        assert exc_info.value.cause is cause

    @pytest.mark.asyncio
    async def test_no_retry_on_failure(self, make_cache: Any) -> None:
        cache = make_cache(set_error=RuntimeError("nope"))
        with pytest.raises(CacheWriteError):
            await CacheCoordinator(cache, ttl=3600).mark_completed("k")
        assert len(cache.set_calls) == 1
