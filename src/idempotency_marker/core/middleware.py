"""Framework-agnostic core middleware for idempotency handling.

This module composes the method classifier, key resolver, key hasher,
cache coordinator and completion observer into a single middleware. It is
framework-agnostic and is wrapped by adapters for specific web
frameworks.

For each request the middleware:
1. Lets methods other than POST/PUT/PATCH/DELETE straight through
2. Extracts the idempotency key, letting keyless requests through
3. Derives the cache key and looks up a completion marker
4. On a hit, answers with an empty short-circuit response and never
   calls the downstream handler
5. On a miss, registers a completion observer and calls the handler;
   a 2xx completion stores the marker for the configured TTL

Cache failures never reach the client. A failed lookup is logged and the
request runs as if no marker existed (fail-open), without scheduling a
marker write. A failed write is logged and otherwise ignored.

Known limitation:
    Lookup and write are a check-then-act pair with no lock in between.
    Two requests carrying the same key that arrive before either has
    completed will both miss and both run the handler. Callers needing
    stronger guarantees must serialize duplicates themselves, for example
    with a distributed lock or an atomic set-if-absent in their cache.

Examples:
    Using the middleware directly::

        from idempotency_marker.core.middleware import create_idempotency_middleware
        from idempotency_marker.storage.memory import MemoryCache

        middleware = create_idempotency_middleware(cache=MemoryCache(), ttl=5000)

        async def call_next() -> None:
            ...  # run the handler, writing to `response`

        await middleware.process(request, response, call_next)
"""

from collections.abc import Awaitable, Callable
from functools import partial
from typing import Any, Protocol

from idempotency_marker.config import SHORT_CIRCUIT_CONTENT_TYPE, MiddlewareConfig
from idempotency_marker.core.completion import CompletionObserver
from idempotency_marker.core.coordinator import CacheCoordinator
from idempotency_marker.exceptions import CacheReadError, CacheWriteError
from idempotency_marker.hashing import derive_cache_key
from idempotency_marker.keys import resolve_idempotency_key
from idempotency_marker.methods import is_idempotency_controlled
from idempotency_marker.models import CompletedResponse, Request
from idempotency_marker.observability.logging import (
    CACHE_READ_ERROR_EVENT,
    CACHE_WRITE_ERROR_EVENT,
    get_logger,
)
from idempotency_marker.observability.metrics import record_marker_write, record_request

logger = get_logger(__name__)


class ResponseWriter(Protocol):
    """The in-flight response, as seen by the core middleware.

    Adapters implement this on top of their framework's response
    machinery.
    """

    async def send_empty(self, status: int, headers: dict[str, str]) -> None:
        """Send a complete response with the given status and no body."""
        ...

    def add_completion_observer(self, observer: CompletionObserver) -> None:
        """Register the observer to notify once the response is sent.

        Implementations accept a single observer per response and raise
        RuntimeError on a second registration.
        """
        ...


class IdempotencyMiddleware:
    """Framework-agnostic idempotency middleware.

    Attributes:
        config: Validated configuration
        coordinator: Cache coordinator bound to the configured cache and TTL
    """

    def __init__(self, config: MiddlewareConfig) -> None:
        """Initialize the middleware.

        Args:
            config: Validated configuration
        """
        self.config = config
        self.coordinator = CacheCoordinator(config.cache, config.ttl)

    async def process(
        self,
        request: Request,
        response: ResponseWriter,
        call_next: Callable[[], Awaitable[None]],
    ) -> None:
        """Process a request with idempotency handling.

        Args:
            request: The incoming request
            response: The in-flight response
            call_next: Runs the downstream handler
        """
        if not is_idempotency_controlled(request.method):
            record_request("bypass")
            await call_next()
            return

        idempotency_key = resolve_idempotency_key(self.config.idempotency_key_extractor, request)
        if idempotency_key is None:
            record_request("no_key")
            await call_next()
            return

        cache_key = derive_cache_key(idempotency_key, self.config.key_prefix)

        try:
            already_processed = await self.coordinator.lookup(cache_key)
        except CacheReadError as e:
            self.config.logger.error(CACHE_READ_ERROR_EVENT, exc_info=e)
            record_request("read_error")
            await call_next()
            return

        if already_processed:
            record_request("hit")
            logger.debug(
                "idempotency.replay_blocked",
                cache_key=cache_key,
                method=request.method,
                path=request.path,
            )
            await response.send_empty(
                self.config.hit_status_code,
                {"content-type": SHORT_CIRCUIT_CONTENT_TYPE},
            )
            return

        record_request("miss")
        response.add_completion_observer(
            CompletionObserver(partial(self._on_response_complete, cache_key))
        )
        await call_next()

    async def _on_response_complete(self, cache_key: str, completed: CompletedResponse) -> None:
        """Persist the completion marker for successful responses.

        Args:
            cache_key: Derived cache key of the request
            completed: Final status and body of the response
        """
        if not completed.is_success:
            record_marker_write("skipped")
            return

        try:
            await self.coordinator.mark_completed(cache_key)
        except CacheWriteError as e:
            self.config.logger.error(CACHE_WRITE_ERROR_EVENT, exc_info=e)
            record_marker_write("error")
            return

        record_marker_write("stored")
        logger.debug("idempotency.marker_stored", cache_key=cache_key, status=completed.status)


def create_idempotency_middleware(
    config: MiddlewareConfig | None = None,
    **options: Any,
) -> IdempotencyMiddleware:
    """Validate configuration and build a ready-to-use middleware.

    Accepts either a prebuilt ``MiddlewareConfig`` or the same keyword
    options its constructor takes, never both.

    Args:
        config: Prebuilt configuration
        **options: Configuration options (cache, ttl, ...)

    Returns:
        IdempotencyMiddleware instance

    Raises:
        ConfigurationError: If the configuration is invalid

    Examples:
        >>> middleware = create_idempotency_middleware(cache=MemoryCache(), ttl=5000)
    """
    if config is not None and options:
        raise TypeError("Pass either a MiddlewareConfig or keyword options, not both")
    if config is None:
        config = MiddlewareConfig(**options)
    return IdempotencyMiddleware(config)
