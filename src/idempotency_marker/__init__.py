"""
Idempotency middleware for Python web applications.

This package keeps retried POST/PUT/PATCH/DELETE requests carrying the
same idempotency key from running their handler more than once within a
configured time window. Successful requests leave a completion marker in
a cache; duplicates are answered with an empty short-circuit response.
"""

from idempotency_marker.config import MiddlewareConfig
from idempotency_marker.core.middleware import IdempotencyMiddleware, create_idempotency_middleware
from idempotency_marker.exceptions import (
    CacheReadError,
    CacheWriteError,
    ConfigurationError,
    IdempotencyError,
)
from idempotency_marker.hashing import derive_cache_key, hash_sha256
from idempotency_marker.keys import header_extractor, namespaced_extractor
from idempotency_marker.models import CompletedResponse, Request

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "CacheReadError",
    "CacheWriteError",
    "CompletedResponse",
    "ConfigurationError",
    "IdempotencyError",
    "IdempotencyMiddleware",
    "MiddlewareConfig",
    "Request",
    "create_idempotency_middleware",
    "derive_cache_key",
    "hash_sha256",
    "header_extractor",
    "namespaced_extractor",
]
