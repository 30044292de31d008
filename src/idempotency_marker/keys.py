"""Idempotency key extraction.

An extractor is any synchronous callable taking a ``Request`` and returning
the raw idempotency key, or None when the request carries none. The
default reads the ``X-Request-ID`` header.

Keys are not namespaced by the middleware. Services sharing a cache should
build their own extractor that mixes in a service name, a user id, or
anything else that keeps keys from colliding across tenants.

Examples:
    Reading a different header::

        extractor = header_extractor("Idempotency-Key")

    Namespacing by service::

        extractor = namespaced_extractor("billing", header_extractor())
        extractor(Request("POST", headers={"x-request-id": "42"}))
        # 'billing-42'
"""

from collections.abc import Callable
from typing import Any

from idempotency_marker.models import Request

DEFAULT_IDEMPOTENCY_HEADER = "x-request-id"

KeyExtractor = Callable[[Request], Any]


def header_extractor(header_name: str = DEFAULT_IDEMPOTENCY_HEADER) -> KeyExtractor:
    """Build an extractor that reads a request header.

    Args:
        header_name: Header to read (case-insensitive)

    Returns:
        Extractor returning the stripped header value, or None if missing
    """
    name = header_name.lower()

    def extract(request: Request) -> str | None:
        value = request.header(name)
        if value is None:
            return None
        return value.strip()

    return extract


default_key_extractor = header_extractor()


def namespaced_extractor(
    namespace: str,
    extractor: KeyExtractor = default_key_extractor,
    separator: str = "-",
) -> KeyExtractor:
    """Prefix the keys produced by another extractor with a namespace.

    Requests without a key stay keyless; the namespace alone is never
    returned as a key.

    Args:
        namespace: Prefix such as a service name
        extractor: Extractor producing the raw key
        separator: String placed between namespace and key

    Returns:
        Extractor producing namespaced keys
    """

    def extract(request: Request) -> str | None:
        key = resolve_idempotency_key(extractor, request)
        if key is None:
            return None
        return f"{namespace}{separator}{key}"

    return extract


def resolve_idempotency_key(extractor: KeyExtractor, request: Request) -> str | None:
    """Run an extractor and normalize its result.

    None, empty strings and non-string values all mean "no key".

    Args:
        extractor: Key extractor
        request: The incoming request

    Returns:
        A non-empty key string, or None
    """
    key = extractor(request)
    if not isinstance(key, str) or not key:
        return None
    return key
