"""Prometheus metrics for the idempotency middleware.

Metrics:

- ``idempotency_requests_total{result}``: one increment per request seen
  by the middleware. ``result`` is one of ``bypass`` (method not
  controlled), ``no_key``, ``hit`` (short-circuited), ``miss`` or
  ``read_error``.
- ``idempotency_marker_writes_total{outcome}``: completion handling for
  misses. ``outcome`` is ``stored``, ``skipped`` (non-2xx status) or
  ``error``.
- ``idempotency_cache_cleanup_removed_total``: entries removed by the
  memory cache sweep.

Examples:
    >>> record_request("hit")
    >>> record_marker_write("stored")
"""

from prometheus_client import Counter

requests_total = Counter(
    "idempotency_requests_total",
    "Total number of requests seen by the idempotency middleware",
    ["result"],
)

marker_writes_total = Counter(
    "idempotency_marker_writes_total",
    "Completion handling outcomes for requests that missed the cache",
    ["outcome"],
)

cleanup_removed_total = Counter(
    "idempotency_cache_cleanup_removed_total",
    "Total number of expired memory cache entries removed by cleanup",
)


def record_request(result: str) -> None:
    """Record how the middleware handled a request.

    Args:
        result: One of bypass, no_key, hit, miss, read_error
    """
    requests_total.labels(result=result).inc()


def record_marker_write(outcome: str) -> None:
    """Record the completion handling outcome of a cache miss.

    Args:
        outcome: One of stored, skipped, error
    """
    marker_writes_total.labels(outcome=outcome).inc()


def record_cleanup(records_removed: int) -> None:
    """Record a memory cache cleanup pass.

    Args:
        records_removed: Number of expired entries removed
    """
    cleanup_removed_total.inc(records_removed)
