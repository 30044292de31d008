"""ASGI middleware adapter for FastAPI and Starlette applications.

This module wraps the core idempotency middleware as a plain ASGI
middleware. It is implemented at the ASGI message level, rather than on
top of ``BaseHTTPMiddleware``, because the completion observer must see
the final ``http.response.body`` message after it has been handed to the
server.

The adapter:
1. Converts the ASGI scope to the internal Request format
2. Sends the short-circuit response for duplicates
3. Intercepts ``send`` to report the final status and body of misses

Starlette and FastAPI instantiate middleware lazily, on the first request.
Build the ``MiddlewareConfig`` up front and pass it as ``config=`` so that
configuration errors are raised at startup rather than answered with a
500 on the first request.

The body of a protected response is retained for the completion observer
only up to ``MAX_OBSERVED_BODY_BYTES``; larger streamed bodies are
forwarded in full but observed truncated.

Examples:
    FastAPI integration::

        from fastapi import FastAPI
        from idempotency_marker.adapters.asgi import ASGIIdempotencyMiddleware
        from idempotency_marker.config import MiddlewareConfig
        from idempotency_marker.storage.memory import MemoryCache

        config = MiddlewareConfig(cache=MemoryCache(), ttl=60_000)

        app = FastAPI()
        app.add_middleware(ASGIIdempotencyMiddleware, config=config)

        @app.post("/api/payments")
        async def create_payment(data: PaymentData):
            # Retries with the same X-Request-ID no longer run twice
            return {"status": "success"}

    Starlette integration::

        from starlette.applications import Starlette
        from starlette.middleware import Middleware

        app = Starlette(
            middleware=[Middleware(ASGIIdempotencyMiddleware, config=config)]
        )
"""

from typing import Any

from starlette.datastructures import Headers
from starlette.responses import Response
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from idempotency_marker.config import MiddlewareConfig
from idempotency_marker.core.completion import CompletionObserver
from idempotency_marker.core.middleware import create_idempotency_middleware
from idempotency_marker.models import CompletedResponse, Request

MAX_OBSERVED_BODY_BYTES = 64 * 1024


class ASGIResponseWriter:
    """ResponseWriter implementation for a single ASGI HTTP exchange.

    Attributes:
        scope: ASGI connection scope
        receive: ASGI receive channel
    """

    def __init__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """Initialize the writer.

        Args:
            scope: ASGI connection scope
            receive: ASGI receive channel
            send: ASGI send channel of the server
        """
        self.scope = scope
        self.receive = receive
        self._send = send
        self._observer: CompletionObserver | None = None
        self._status: int | None = None
        self._body = bytearray()

    async def send_empty(self, status: int, headers: dict[str, str]) -> None:
        """Send a complete response with no body."""
        response = Response(status_code=status, headers=headers)
        await response(self.scope, self.receive, self._send)

    def add_completion_observer(self, observer: CompletionObserver) -> None:
        """Register the completion observer for this response.

        Raises:
            RuntimeError: If an observer is already registered
        """
        if self._observer is not None:
            raise RuntimeError("A completion observer is already registered for this response")
        self._observer = observer

    async def send(self, message: Message) -> None:
        """Forward a message to the server, tracking status and body.

        The observer is notified after the final message has been
        forwarded, so the client always receives the handler's response
        unchanged. A response ends with an ``http.response.body`` message
        without ``more_body``, or with ``http.response.pathsend`` when the
        server offers that extension.
        """
        if self._observer is None:
            await self._send(message)
            return

        message_type = message["type"]
        if message_type == "http.response.start":
            self._status = message["status"]
        elif message_type == "http.response.body":
            self._observe_body(message.get("body", b""))
            if not message.get("more_body", False):
                await self._send(message)
                await self._complete()
                return
        elif message_type == "http.response.pathsend":
            await self._send(message)
            await self._complete()
            return

        await self._send(message)

    def _observe_body(self, chunk: bytes) -> None:
        room = MAX_OBSERVED_BODY_BYTES - len(self._body)
        if room > 0:
            self._body.extend(chunk[:room])

    async def _complete(self) -> None:
        observer = self._observer
        if observer is None:
            return
        await observer.notify(
            CompletedResponse(
                status=self._status if self._status is not None else 500,
                body=bytes(self._body),
            )
        )


class ASGIIdempotencyMiddleware:
    """ASGI middleware for idempotency handling.

    Attributes:
        app: The wrapped ASGI application
        config: Validated configuration
        middleware: Core middleware instance
    """

    def __init__(
        self,
        app: ASGIApp,
        config: MiddlewareConfig | None = None,
        **options: Any,
    ) -> None:
        """Initialize the ASGI middleware.

        Validation happens here. Under ``app.add_middleware`` this
        constructor only runs when Starlette builds the middleware stack on
        the first request, so keyword options are validated late. Pass a
        prebuilt ``config`` to have errors raised at startup instead.

        Args:
            app: The ASGI application
            config: Prebuilt configuration (preferred)
            **options: Configuration options when no config is given

        Raises:
            ConfigurationError: If the configuration is invalid
        """
        self.app = app
        self.middleware = create_idempotency_middleware(config, **options)
        self.config = self.middleware.config

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """Handle an ASGI connection."""
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = self._convert_request(scope)
        writer = ASGIResponseWriter(scope, receive, send)

        async def call_next() -> None:
            await self.app(scope, receive, writer.send)

        await self.middleware.process(request, writer, call_next)

    def _convert_request(self, scope: Scope) -> Request:
        """Convert an ASGI scope to the internal Request format.

        Args:
            scope: ASGI HTTP scope

        Returns:
            Internal Request object
        """
        headers: dict[str, str] = {}
        for key, value in Headers(scope=scope).items():
            # First occurrence wins for repeated headers
            headers.setdefault(key, value)

        return Request(
            method=scope["method"],
            path=scope.get("path", "/"),
            query_string=scope.get("query_string", b"").decode("latin-1"),
            headers=headers,
        )
