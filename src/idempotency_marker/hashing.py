"""Cache key derivation for idempotency keys.

Raw idempotency keys are client supplied and may contain anything, so they
are never used as cache keys directly. Each one is hashed with SHA-256 and
prefixed, which yields a fixed-length key that is safe for any backend.
"""

import hashlib

DEFAULT_KEY_PREFIX = "idemp-key-"


def hash_sha256(value: str) -> str:
    """Compute the SHA-256 digest of a string.

    Args:
        value: The string to hash. Encoded as UTF-8.

    Returns:
        Lowercase hexadecimal digest (64 characters)

    Examples:
        >>> hash_sha256("123")
        'a665a45920422f9d417e4867efdc4fb8a04a1f3fff1fa07e998e86f7f7a27ae3'
    """
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


def derive_cache_key(idempotency_key: str, prefix: str = DEFAULT_KEY_PREFIX) -> str:
    """Derive the cache key under which a completion marker is stored.

    Args:
        idempotency_key: Raw idempotency key extracted from the request
        prefix: Namespace prepended to the digest

    Returns:
        ``prefix`` followed by the SHA-256 hex digest of the raw key

    Examples:
        >>> derive_cache_key("123")
        'idemp-key-a665a45920422f9d417e4867efdc4fb8a04a1f3fff1fa07e998e86f7f7a27ae3'
    """
    return prefix + hash_sha256(idempotency_key)
