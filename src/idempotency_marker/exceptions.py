"""Custom exceptions for the idempotency middleware.

This module defines the exception hierarchy used to signal configuration
problems at setup time and cache collaborator failures at request time.

Only ``ConfigurationError`` ever propagates to the caller, and only while
the middleware is being constructed. Cache errors are raised by the cache
coordinator and handled by the middleware itself, which logs them and
degrades to "no idempotency protection" for the affected request.

Examples:
    Failing fast on a bad configuration::

        from idempotency_marker.exceptions import ConfigurationError

        try:
            middleware = create_idempotency_middleware(cache=cache, ttl=0)
        except ConfigurationError as e:
            logger.error("Invalid middleware setup", error=e.message)
            raise

    Handling a cache read error::

        from idempotency_marker.exceptions import CacheReadError

        try:
            hit = await coordinator.lookup(cache_key)
        except CacheReadError as e:
            logger.error("idempotency.cache_read_error", exc_info=e)
            # Fall through as if the key was never seen
            hit = False
"""

from typing import Any


class IdempotencyError(Exception):
    """Base exception for all idempotency-related errors.

    Attributes:
        message: Human-readable error description.
    """

    def __init__(self, message: str) -> None:
        """Initialize the exception with a message.

        Args:
            message: Human-readable error description.
        """
        self.message = message
        super().__init__(message)


class ConfigurationError(IdempotencyError):
    """The middleware configuration is invalid.

    Raised synchronously while building a ``MiddlewareConfig`` (and so
    while constructing the middleware), never while serving a request.
    Typical causes are a cache without callable ``get``/``set`` methods or
    a TTL that is not a strictly positive number.

    Attributes:
        message: Human-readable error description.
        errors: Structured validation errors, one dict per offending field.

    Examples:
        >>> try:
        ...     MiddlewareConfig(cache=object(), ttl=1000)
        ... except ConfigurationError as e:
        ...     e.errors[0]["loc"]
        ('cache',)
    """

    def __init__(self, message: str, errors: list[dict[str, Any]] | None = None) -> None:
        """Initialize the configuration error.

        Args:
            message: Human-readable error description.
            errors: Structured validation errors, if available.
        """
        super().__init__(message)
        self.errors = errors or []


class CacheError(IdempotencyError):
    """A cache collaborator operation failed.

    Attributes:
        message: Human-readable error description.
        key: The derived cache key involved in the operation.
        cause: The exception raised by the cache collaborator.
    """

    def __init__(self, message: str, key: str, cause: BaseException | None = None) -> None:
        """Initialize the cache error with details.

        Args:
            message: Human-readable error description.
            key: The derived cache key involved in the operation.
            cause: The underlying exception from the cache.
        """
        super().__init__(message)
        self.key = key
        self.cause = cause


class CacheReadError(CacheError):
    """Looking up a completion marker failed.

    The middleware treats this as a miss without registering a completion
    observer: the request runs unprotected and nothing is written for it.
    """


class CacheWriteError(CacheError):
    """Persisting a completion marker failed.

    The response has already been delivered when this happens, so the
    error is only logged.
    """
