"""
Pytest configuration and shared fixtures for idempotency_marker tests.
"""

from typing import Any

import pytest

from idempotency_marker.core.completion import CompletionObserver
from idempotency_marker.models import CompletedResponse


class FakeCache:
    """Cache double recording every call, with optional failures."""

    def __init__(
        self,
        value: Any = None,
        get_error: Exception | None = None,
        set_error: Exception | None = None,
    ) -> None:
        self.value = value
        self.get_error = get_error
        self.set_error = set_error
        self.get_calls: list[str] = []
        self.set_calls: list[tuple[str, Any, float]] = []

    async def get(self, key: str) -> Any:
        self.get_calls.append(key)
        if self.get_error is not None:
            raise self.get_error
        return self.value

    async def set(self, key: str, value: Any, *, ttl: float) -> bool:
        self.set_calls.append((key, value, ttl))
        if self.set_error is not None:
            raise self.set_error
        return True


class RecordingLogger:
    """Logger double capturing error() calls."""

    def __init__(self) -> None:
        self.error_calls: list[tuple[str, tuple[Any, ...], dict[str, Any]]] = []

    def error(self, event: str, *args: Any, **kwargs: Any) -> None:
        self.error_calls.append((event, args, kwargs))


class FakeResponseWriter:
    """ResponseWriter double standing in for a framework response."""

    def __init__(self) -> None:
        self.sent: tuple[int, dict[str, str]] | None = None
        self.observers: list[CompletionObserver] = []

    async def send_empty(self, status: int, headers: dict[str, str]) -> None:
        self.sent = (status, headers)

    def add_completion_observer(self, observer: CompletionObserver) -> None:
        if self.observers:
            raise RuntimeError("A completion observer is already registered for this response")
        self.observers.append(observer)

    async def finish(self, status: int, body: bytes = b"") -> None:
        """Simulate the framework completing the response."""
        for observer in self.observers:
            await observer.notify(CompletedResponse(status=status, body=body))


@pytest.fixture
def sample_idempotency_key() -> str:
    """Provide a sample idempotency key for tests."""
    return "123"


@pytest.fixture
def sample_cache_key() -> str:
    """Derived cache key of sample_idempotency_key."""
    return "idemp-key-a665a45920422f9d417e4867efdc4fb8a04a1f3fff1fa07e998e86f7f7a27ae3"


@pytest.fixture
def cache() -> FakeCache:
    """A cache that always misses."""
    return FakeCache()


@pytest.fixture
def make_cache() -> type[FakeCache]:
    """Factory for caches with custom behavior."""
    return FakeCache


@pytest.fixture
def recording_logger() -> RecordingLogger:
    """A logger recording error calls."""
    return RecordingLogger()


@pytest.fixture
def response_writer() -> FakeResponseWriter:
    """A fresh response writer double."""
    return FakeResponseWriter()
