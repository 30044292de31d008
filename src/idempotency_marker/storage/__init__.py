"""Cache implementations for the idempotency middleware.

Any object with async ``get``/``set`` methods can back the middleware
(see ``protocols.Cache``). This package bundles an in-process one.

Available Caches:
    - MemoryCache: In-memory dictionary with per-entry TTL
"""

from idempotency_marker.storage.memory import MemoryCache

__all__ = ["MemoryCache"]
