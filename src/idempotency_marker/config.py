"""Configuration module for the idempotency middleware.

This module provides the MiddlewareConfig class, the single immutable
object a middleware instance is built from. It is validated eagerly:
constructing it with a bad cache or TTL raises ``ConfigurationError``
straight away, long before any request is served.

Example:
    Basic usage::

        >>> from idempotency_marker.storage.memory import MemoryCache
        >>> config = MiddlewareConfig(cache=MemoryCache(), ttl=5000)
        >>> config.key_prefix
        'idemp-key-'

    Custom extraction and logging::

        >>> config = MiddlewareConfig(
        ...     cache=MemoryCache(),
        ...     ttl=60_000,
        ...     idempotency_key_extractor=header_extractor("Idempotency-Key"),
        ...     logger=logging.getLogger("payments"),
        ... )

    Loading from environment:

        >>> import os
        >>> os.environ['IDEMPOTENCY_TTL'] = '5000'
        >>> os.environ['IDEMPOTENCY_HEADER_NAME'] = 'Idempotency-Key'
        >>> config = MiddlewareConfig.from_env(cache=MemoryCache())
"""

import math
import os
from collections.abc import Callable
from typing import Any, Literal

from pydantic import BaseModel, Field, ValidationError, field_validator

from idempotency_marker.exceptions import ConfigurationError
from idempotency_marker.hashing import DEFAULT_KEY_PREFIX
from idempotency_marker.keys import default_key_extractor, header_extractor
from idempotency_marker.models import Request
from idempotency_marker.observability.logging import logger as default_logger
from idempotency_marker.protocols import has_cache_capabilities, has_logger_capabilities

# Completion marker stored for successfully handled keys
COMPLETION_MARKER = "1"

# Content type of the short-circuit response sent on a cache hit
SHORT_CIRCUIT_CONTENT_TYPE = "text/plain; charset=utf-8"


class MiddlewareConfig(BaseModel):
    """Configuration for the idempotency middleware.

    Attributes:
        cache: Async cache exposing ``get(key)`` and ``set(key, value, ttl=...)``.
            Checked structurally: any object with callable ``get`` and
            ``set`` attributes is accepted.
        ttl: Lifetime of completion markers in milliseconds. Must be a
            strictly positive, finite int or float. Strings and booleans
            are rejected rather than coerced.
        idempotency_key_extractor: Callable returning the raw idempotency
            key for a request, or None. Defaults to the ``X-Request-ID``
            header.
        logger: Error sink with an ``error`` method. Defaults to the
            package's structlog logger.
        key_prefix: Prefix for derived cache keys. Default is "idemp-key-".
        hit_status_code: Status sent when a duplicate is short-circuited.
            304 (default) or 204.

    Note:
        This class is immutable (frozen=True). Create a new instance if
        you need different settings.
    """

    cache: Any = Field(description="Async cache with get and set methods")
    ttl: int | float = Field(description="Completion marker TTL in milliseconds (> 0)")
    idempotency_key_extractor: Callable[[Request], Any] = Field(
        default=default_key_extractor,
        description="Callable extracting the raw idempotency key from a request",
    )
    logger: Any = Field(
        default_factory=lambda: default_logger,
        description="Error sink exposing an error() method",
    )
    key_prefix: str = Field(
        default=DEFAULT_KEY_PREFIX,
        description="Prefix prepended to hashed idempotency keys",
    )
    hit_status_code: Literal[204, 304] = Field(
        default=304,
        description="Status code of the short-circuit response for duplicates",
    )

    model_config = {"frozen": True, "arbitrary_types_allowed": True}

    def __init__(self, **data: Any) -> None:
        """Validate the configuration, failing fast with ConfigurationError.

        Raises:
            ConfigurationError: If any option is missing or invalid.
        """
        try:
            super().__init__(**data)
        except ValidationError as e:
            raise ConfigurationError(_format_errors(e), errors=e.errors()) from e

    @field_validator("cache")
    @classmethod
    def validate_cache(cls, v: Any) -> Any:
        """Ensure the cache exposes callable ``get`` and ``set`` methods.

        Raises:
            ValueError: If either method is missing or not callable.
        """
        if v is None or not has_cache_capabilities(v):
            raise ValueError("A valid cache instance with callable .get and .set methods is required")
        return v

    @field_validator("ttl", mode="before")
    @classmethod
    def validate_ttl(cls, v: Any) -> int | float:
        """Ensure the TTL is a strictly positive, finite number.

        Runs before type coercion so that ``"3600"`` or ``True`` are
        rejected instead of silently converted.

        Raises:
            ValueError: If the TTL is not a positive number.

        Example:
            >>> MiddlewareConfig(cache=MemoryCache(), ttl=1500).ttl
            1500
        """
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            raise ValueError("A positive numeric ttl (in milliseconds) is required")
        if not math.isfinite(v) or v <= 0:
            raise ValueError(f"A positive numeric ttl (in milliseconds) is required, got {v}")
        return v

    @field_validator("logger")
    @classmethod
    def validate_logger(cls, v: Any) -> Any:
        """Ensure the logger exposes a callable ``error`` method."""
        if not has_logger_capabilities(v):
            raise ValueError("logger must provide a callable .error method")
        return v

    @classmethod
    def from_dict(cls, config_dict: dict[str, Any]) -> "MiddlewareConfig":
        """Create configuration from a dictionary.

        Args:
            config_dict: Dictionary with configuration values.

        Returns:
            MiddlewareConfig instance populated from the dictionary.

        Raises:
            ConfigurationError: If the dictionary contains invalid values.
        """
        return cls(**config_dict)

    @classmethod
    def from_env(
        cls,
        cache: Any,
        prefix: str = "IDEMPOTENCY_",
        **overrides: Any,
    ) -> "MiddlewareConfig":
        """Create configuration from environment variables.

        The cache (and optionally the logger or extractor) cannot come from
        the environment and must be passed in. Recognized variables:

        - ``{prefix}TTL``: TTL in milliseconds
        - ``{prefix}KEY_PREFIX``: cache key prefix
        - ``{prefix}HIT_STATUS_CODE``: 204 or 304
        - ``{prefix}HEADER_NAME``: header holding the idempotency key

        Args:
            cache: Cache collaborator.
            prefix: Prefix for environment variable names.
            **overrides: Explicit options, taking precedence over the
                environment.

        Returns:
            MiddlewareConfig instance.

        Raises:
            ConfigurationError: If a variable cannot be parsed or the
                resulting configuration is invalid.
        """
        config_dict: dict[str, Any] = {"cache": cache}

        ttl = os.environ.get(f"{prefix}TTL")
        if ttl is not None:
            config_dict["ttl"] = _parse_number(f"{prefix}TTL", ttl)

        key_prefix = os.environ.get(f"{prefix}KEY_PREFIX")
        if key_prefix is not None:
            config_dict["key_prefix"] = key_prefix

        hit_status_code = os.environ.get(f"{prefix}HIT_STATUS_CODE")
        if hit_status_code is not None:
            config_dict["hit_status_code"] = _parse_number(
                f"{prefix}HIT_STATUS_CODE", hit_status_code
            )

        header_name = os.environ.get(f"{prefix}HEADER_NAME")
        if header_name:
            config_dict["idempotency_key_extractor"] = header_extractor(header_name)

        config_dict.update(overrides)
        return cls(**config_dict)


def _parse_number(name: str, raw: str) -> int | float:
    """Parse an environment variable as an int, falling back to float."""
    try:
        return int(raw)
    except ValueError:
        pass
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be numeric, got {raw!r}") from None


def _format_errors(error: ValidationError) -> str:
    """Flatten pydantic validation errors into a single message."""
    details = "; ".join(
        f"{'.'.join(str(part) for part in err['loc']) or 'config'}: {err['msg']}"
        for err in error.errors()
    )
    return f"Invalid idempotency middleware configuration: {details}"
