"""Core middleware logic for idempotency handling.

This package contains the framework-agnostic logic:
- Coordinator: completion marker lookup and write against the cache
- Completion: single-shot observer fired when a response is sent
- Middleware: request processing composed from the pieces above
- Cleanup: periodic expiry sweep for the bundled memory cache
"""

from idempotency_marker.core.completion import CompletionObserver
from idempotency_marker.core.coordinator import CacheCoordinator
from idempotency_marker.core.middleware import (
    IdempotencyMiddleware,
    ResponseWriter,
    create_idempotency_middleware,
)

__all__ = [
    "CacheCoordinator",
    "CompletionObserver",
    "IdempotencyMiddleware",
    "ResponseWriter",
    "create_idempotency_middleware",
]
