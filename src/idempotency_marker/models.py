"""Request and response containers used by the core middleware.

Framework adapters convert their native request objects into ``Request``
and report the final outcome of a response as a ``CompletedResponse``.
Both are deliberately small: the core only needs the method, the headers
(for key extraction) and the final status code.

Examples:
    Building a request by hand::

        from idempotency_marker.models import Request

        request = Request(
            method="POST",
            path="/api/payments",
            headers={"X-Request-ID": "abc-123"},
        )
        request.header("x-request-id")  # "abc-123"
"""

from collections.abc import Mapping


class Request:
    """Abstract request representation.

    Header names are normalized to lowercase so lookups are
    case-insensitive.

    Attributes:
        method: HTTP method, uppercased
        path: URL path
        query_string: Query string without leading '?'
        headers: Request headers with lowercase names
    """

    def __init__(
        self,
        method: str,
        path: str = "/",
        query_string: str = "",
        headers: Mapping[str, str] | None = None,
    ) -> None:
        """Initialize a request.

        Args:
            method: HTTP method
            path: URL path
            query_string: Query string
            headers: Request headers
        """
        self.method = method.upper()
        self.path = path
        self.query_string = query_string
        self.headers: dict[str, str] = {
            name.lower(): value for name, value in (headers or {}).items()
        }

    def header(self, name: str, default: str | None = None) -> str | None:
        """Return a header value by case-insensitive name."""
        return self.headers.get(name.lower(), default)

    def __repr__(self) -> str:
        return f"Request(method={self.method!r}, path={self.path!r})"


class CompletedResponse:
    """Final state of a response once it has been fully sent.

    Attributes:
        status: HTTP status code sent to the client
        body: Concatenated body bytes emitted by the handler
    """

    def __init__(self, status: int, body: bytes = b"") -> None:
        self.status = status
        self.body = body

    @property
    def is_success(self) -> bool:
        """True when the status code is in the 2xx range."""
        return 200 <= self.status < 300

    def __repr__(self) -> str:
        return f"CompletedResponse(status={self.status}, body_bytes={len(self.body)})"
