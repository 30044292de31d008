"""Capability interfaces for the middleware's collaborators.

The middleware never depends on a concrete cache or logger class. Any
object with the right shape works: the check is structural and happens
once, when the configuration is built, rather than on every request.

Examples:
    Wrapping an existing async cache client::

        class RedisCache:
            def __init__(self, client):
                self.client = client

            async def get(self, key: str) -> str | None:
                return await self.client.get(key)

            async def set(self, key: str, value: str, *, ttl: float) -> None:
                await self.client.set(key, value, px=int(ttl))

Cache Contract:
    1. ``get`` resolves to the stored value, or a falsy value when absent.
    2. ``set`` stores ``value`` for ``ttl`` milliseconds.
    3. Failures are reported by raising from the awaited coroutine. The
       middleware never retries.
    4. The cache is shared by all concurrent requests. Without an atomic
       set-if-absent, two concurrent duplicates can both observe a miss.
"""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Cache(Protocol):
    """Minimal async key/value store with per-entry TTL."""

    async def get(self, key: str) -> Any:
        """Retrieve the value stored under ``key``.

        Args:
            key: Derived cache key.

        Returns:
            The stored value, or None if absent or expired.
        """
        ...

    async def set(self, key: str, value: str, *, ttl: float) -> Any:
        """Store ``value`` under ``key``.

        Args:
            key: Derived cache key.
            value: Value to store (the completion marker).
            ttl: Time-to-live in milliseconds.
        """
        ...


@runtime_checkable
class Logger(Protocol):
    """Minimal error-reporting sink.

    Both structlog bound loggers and ``logging.Logger`` satisfy this.
    """

    def error(self, event: str, *args: Any, **kwargs: Any) -> Any: ...


def has_cache_capabilities(candidate: Any) -> bool:
    """Check that an object exposes callable ``get`` and ``set`` methods."""
    return callable(getattr(candidate, "get", None)) and callable(getattr(candidate, "set", None))


def has_logger_capabilities(candidate: Any) -> bool:
    """Check that an object exposes a callable ``error`` method."""
    return callable(getattr(candidate, "error", None))
