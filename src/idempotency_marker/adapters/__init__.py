"""Framework adapters for the idempotency middleware.

This package provides adapters that integrate the framework-agnostic core
middleware with specific web frameworks:

- asgi.py: ASGI middleware for FastAPI, Starlette, etc.

Adapters convert framework requests into ``Request`` objects and report
response completion to the core middleware.
"""

from idempotency_marker.adapters.asgi import ASGIIdempotencyMiddleware, ASGIResponseWriter

__all__ = ["ASGIIdempotencyMiddleware", "ASGIResponseWriter"]
