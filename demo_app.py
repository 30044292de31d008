"""Demo FastAPI application with idempotency middleware.

This application demonstrates the idempotency middleware in action.
Run with: python demo_app.py
Then try:
    curl -X POST -H 'X-Request-ID: abc' -H 'Content-Type: application/json' \\
        -d '{"amount": 100}' http://localhost:8000/api/payments
Repeating the command within five seconds returns 304 with an empty body,
and the payment counter does not move.
"""

import time
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Optional

import uvicorn
from fastapi import FastAPI
from pydantic import BaseModel

from idempotency_marker.adapters.asgi import ASGIIdempotencyMiddleware
from idempotency_marker.config import MiddlewareConfig
from idempotency_marker.core.cleanup import start_cleanup_task, stop_cleanup_task
from idempotency_marker.keys import namespaced_extractor
from idempotency_marker.observability.logging import configure_logging
from idempotency_marker.storage.memory import MemoryCache

SERVICE_NAME = "payments-demo"

configure_logging(level="INFO", json_output=False)

cache = MemoryCache()

# Built eagerly so configuration errors surface at startup
config = MiddlewareConfig(
    cache=cache,
    ttl=5000,
    idempotency_key_extractor=namespaced_extractor(SERVICE_NAME),
)

processed_payments = 0


@asynccontextmanager
async def lifespan(app: FastAPI):
    task = await start_cleanup_task(cache, interval_seconds=30)
    yield
    await stop_cleanup_task(task)


app = FastAPI(
    title="Idempotency Middleware Demo",
    description="Demo API showing idempotent request handling",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(ASGIIdempotencyMiddleware, config=config)


class PaymentRequest(BaseModel):
    amount: int
    currency: str = "USD"
    description: Optional[str] = None


class PaymentResponse(BaseModel):
    id: str
    status: str
    amount: int
    currency: str
    created_at: str


@app.get("/")
async def root():
    """Root endpoint - returns API info."""
    return {
        "name": "Idempotency Middleware Demo",
        "version": "0.1.0",
        "endpoints": {
            "POST /api/payments": "Create a payment at most once per X-Request-ID",
            "GET /api/status": "Health check (safe method, no idempotency)",
        },
        "usage": "Include an 'X-Request-ID' header in POST/PUT/PATCH/DELETE requests",
    }


@app.get("/api/status")
async def get_status():
    """Health check endpoint - safe method bypasses idempotency middleware."""
    return {
        "status": "ok",
        "processed_payments": processed_payments,
        "timestamp": datetime.now(UTC).isoformat(),
    }


@app.post("/api/payments", response_model=PaymentResponse)
async def create_payment(payment: PaymentRequest):
    """Create a payment.

    Retries carrying the same X-Request-ID within the TTL are answered with
    304 by the middleware and never reach this handler.
    """
    global processed_payments
    processed_payments += 1

    return PaymentResponse(
        id=f"pay_{int(time.time() * 1000)}",
        status="success",
        amount=payment.amount,
        currency=payment.currency,
        created_at=datetime.now(UTC).isoformat(),
    )


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000, log_level="info")
