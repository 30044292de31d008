"""Observability utilities for the idempotency middleware.

This package provides:
- Structured logging with stable event names for cache failures
- Prometheus counters for request outcomes and marker writes
"""

from idempotency_marker.observability.logging import configure_logging, get_logger
from idempotency_marker.observability.metrics import (
    record_cleanup,
    record_marker_write,
    record_request,
)

__all__ = [
    "configure_logging",
    "get_logger",
    "record_request",
    "record_marker_write",
    "record_cleanup",
]
