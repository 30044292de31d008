"""Cache coordination for completion markers.

The coordinator owns the two cache interactions of the middleware:

1. Lookup: is there a completion marker for this cache key?
2. Write: store the completion marker once a request has succeeded.

It translates any failure of the cache collaborator into
``CacheReadError`` or ``CacheWriteError`` so the middleware can apply its
fail-open (reads) and fail-silent (writes) policies without knowing what
the cache raises.

The coordinator never retries and never touches cache internals.
"""

from typing import Any

from idempotency_marker.config import COMPLETION_MARKER
from idempotency_marker.exceptions import CacheReadError, CacheWriteError


class CacheCoordinator:
    """Get/set protocol against the external cache.

    Attributes:
        cache: Cache collaborator
        ttl: Marker lifetime in milliseconds
    """

    def __init__(self, cache: Any, ttl: int | float) -> None:
        """Initialize the coordinator.

        Args:
            cache: Cache exposing async ``get`` and ``set``
            ttl: Marker lifetime in milliseconds
        """
        self.cache = cache
        self.ttl = ttl

    async def lookup(self, cache_key: str) -> bool:
        """Check whether a completion marker exists.

        Args:
            cache_key: Derived cache key

        Returns:
            True if the cache returned a truthy value

        Raises:
            CacheReadError: If the cache lookup failed
        """
        try:
            value = await self.cache.get(cache_key)
        except Exception as e:
            raise CacheReadError(
                message=f"Failed to read completion marker: {e}",
                key=cache_key,
                cause=e,
            ) from e
        return bool(value)

    async def mark_completed(self, cache_key: str) -> None:
        """Store the completion marker with the configured TTL.

        Args:
            cache_key: Derived cache key

        Raises:
            CacheWriteError: If the cache write failed
        """
        try:
            await self.cache.set(cache_key, COMPLETION_MARKER, ttl=self.ttl)
        except Exception as e:
            raise CacheWriteError(
                message=f"Failed to write completion marker: {e}",
                key=cache_key,
                cause=e,
            ) from e
