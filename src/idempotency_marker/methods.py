"""HTTP method classification.

Only methods with side effects are worth protecting. Safe methods (GET,
HEAD, OPTIONS, TRACE, ...) bypass the middleware entirely and never touch
the cache.
"""

# Methods subject to idempotency control
CONTROLLED_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})


def is_idempotency_controlled(method: str) -> bool:
    """Check whether requests with this method need idempotency handling.

    Args:
        method: HTTP method name (case-insensitive)

    Returns:
        True for POST, PUT, PATCH and DELETE, False otherwise

    Examples:
        >>> is_idempotency_controlled("post")
        True
        >>> is_idempotency_controlled("GET")
        False
    """
    return method.upper() in CONTROLLED_METHODS
