"""End-to-end scenario tests for the idempotency middleware.

Each scenario drives a FastAPI application wrapped with the ASGI adapter
and verifies one aspect of duplicate handling over real HTTP semantics.
"""
