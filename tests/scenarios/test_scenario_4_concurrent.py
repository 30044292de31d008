"""Scenario 4: Concurrent Duplicates

The middleware performs a check-then-act sequence without a lock. These
tests pin down that known limitation:

- Two requests with the same key that are both in flight before either
  completes both miss the cache and both run the handler
- Once one has completed, later duplicates are blocked
- Concurrent requests with different keys do not interfere
"""

import asyncio

import httpx
import pytest
from fastapi import FastAPI

from idempotency_marker.adapters.asgi import ASGIIdempotencyMiddleware
from idempotency_marker.config import MiddlewareConfig
from idempotency_marker.storage.memory import MemoryCache


class SlowApp:
    """App whose handler blocks until released."""

    def __init__(self) -> None:
        self.calls = 0
        self.entered = asyncio.Event()
        self.release = asyncio.Event()
        self.cache = MemoryCache()
        self.app = FastAPI()
        config = MiddlewareConfig(cache=self.cache, ttl=60_000)
        self.app.add_middleware(ASGIIdempotencyMiddleware, config=config)

        @self.app.post("/api/transfers")
        async def create_transfer():
            self.calls += 1
            if self.calls >= 2:
                self.entered.set()
            await self.release.wait()
            return {"transfer": self.calls}

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            transport=httpx.ASGITransport(app=self.app), base_url="http://testserver"
        )


@pytest.mark.asyncio
async def test_in_flight_duplicates_both_execute() -> None:
    slow = SlowApp()
    headers = {"X-Request-ID": "transfer-1"}

    async with slow.client() as client:
        first = asyncio.create_task(client.post("/api/transfers", headers=headers))
        second = asyncio.create_task(client.post("/api/transfers", headers=headers))

        await asyncio.wait_for(slow.entered.wait(), timeout=5)
        slow.release.set()
        responses = await asyncio.gather(first, second)

    assert [r.status_code for r in responses] == [200, 200]
    assert slow.calls == 2


@pytest.mark.asyncio
async def test_duplicates_after_completion_are_blocked() -> None:
    slow = SlowApp()
    slow.release.set()
    headers = {"X-Request-ID": "transfer-1"}

    async with slow.client() as client:
        first = await client.post("/api/transfers", headers=headers)
        retries = await asyncio.gather(
            *(client.post("/api/transfers", headers=headers) for _ in range(5))
        )

    assert first.status_code == 200
    assert all(r.status_code == 304 for r in retries)
    assert slow.calls == 1


@pytest.mark.asyncio
async def test_distinct_keys_run_concurrently() -> None:
    slow = SlowApp()
    slow.release.set()

    async with slow.client() as client:
        responses = await asyncio.gather(
            *(
                client.post("/api/transfers", headers={"X-Request-ID": f"transfer-{i}"})
                for i in range(10)
            )
        )

    assert all(r.status_code == 200 for r in responses)
    assert slow.calls == 10
    assert len(slow.cache) == 10
