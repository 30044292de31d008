"""In-memory TTL cache implementing the Cache contract.

This module provides a single-process cache suitable for:
    - Development and testing
    - Single-worker deployments where losing markers on restart is fine

Entries expire after their TTL (milliseconds). Expired entries are treated
as absent by ``get`` and removed lazily; ``cleanup_expired`` sweeps them
in bulk and is driven by ``core.cleanup.start_cleanup_task``.

For multi-process deployments, adapt a shared store (Redis, memcached,
...) to the ``Cache`` protocol instead.

Examples:
    Basic usage::

        from idempotency_marker.storage.memory import MemoryCache

        cache = MemoryCache()
        await cache.set("idemp-key-abc", "1", ttl=5000)
        await cache.get("idemp-key-abc")  # "1"
"""

import time
from collections.abc import Callable
from typing import Any


class MemoryCache:
    """Dictionary-backed async cache with per-entry expiry.

    All operations run on the event loop without awaiting anything, so
    each one is atomic with respect to other coroutines.

    Attributes:
        _store: Maps keys to (value, expires_at) tuples; expires_at is on
            the clock returned by ``_clock``.
        _clock: Monotonic time source in seconds.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        """Initialize an empty cache.

        Args:
            clock: Time source in seconds, injectable for tests
        """
        self._store: dict[str, tuple[Any, float]] = {}
        self._clock = clock

    async def get(self, key: str) -> Any | None:
        """Retrieve a value, or None if absent or expired.

        Args:
            key: The cache key to look up.

        Returns:
            The stored value if present and not expired.
        """
        entry = self._store.get(key)
        if entry is None:
            return None

        value, expires_at = entry
        if expires_at <= self._clock():
            del self._store[key]
            return None
        return value

    async def set(self, key: str, value: Any, *, ttl: float) -> None:
        """Store a value for ``ttl`` milliseconds.

        Args:
            key: The cache key.
            value: Value to store.
            ttl: Time-to-live in milliseconds. Must be positive.

        Raises:
            ValueError: If ttl is not positive.
        """
        if ttl <= 0:
            raise ValueError(f"ttl must be positive, got {ttl}")
        self._store[key] = (value, self._clock() + ttl / 1000.0)

    async def delete(self, key: str) -> bool:
        """Remove a key.

        Returns:
            True if the key was present.
        """
        return self._store.pop(key, None) is not None

    async def clear(self) -> None:
        """Remove all entries."""
        self._store.clear()

    async def cleanup_expired(self) -> int:
        """Remove all expired entries.

        Returns:
            The number of entries removed.
        """
        now = self._clock()
        expired_keys = [key for key, (_, expires_at) in self._store.items() if expires_at <= now]
        for key in expired_keys:
            del self._store[key]
        return len(expired_keys)

    def __len__(self) -> int:
        return len(self._store)
