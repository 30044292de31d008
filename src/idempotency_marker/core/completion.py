"""Single-shot response completion observer.

When a controlled request misses the cache, the middleware registers a
``CompletionObserver`` on the in-flight response before handing control to
the downstream handler. The framework adapter notifies the observer once
the response has been fully sent, with the final status code and the body
that was emitted. The observer then decides whether to persist the
completion marker.

The observer fires at most once. Adapters may call ``notify`` from more
than one code path (normal completion, disconnect handling); only the
first call runs the callback.

Examples:
    Observing a response::

        async def on_complete(response: CompletedResponse) -> None:
            print("finished with", response.status)

        observer = CompletionObserver(on_complete)
        await observer.notify(CompletedResponse(status=201, body=b"ok"))
        await observer.notify(CompletedResponse(status=500))  # ignored
"""

import asyncio
from collections.abc import Awaitable, Callable

from idempotency_marker.models import CompletedResponse

CompletionCallback = Callable[[CompletedResponse], Awaitable[None]]


class CompletionObserver:
    """Observer notified exactly once when a response completes.

    Attributes:
        callback: Coroutine function run on the first notification
    """

    def __init__(self, callback: CompletionCallback) -> None:
        """Initialize the observer.

        Args:
            callback: Coroutine function receiving the completed response
        """
        self.callback = callback
        self._response: CompletedResponse | None = None
        self._done = asyncio.Event()

    @property
    def fired(self) -> bool:
        """True once the observer has been notified."""
        return self._response is not None

    @property
    def response(self) -> CompletedResponse | None:
        """The response passed to the first notification, if any."""
        return self._response

    async def notify(self, response: CompletedResponse) -> bool:
        """Report that the response has been fully sent.

        Args:
            response: Final status code and emitted body

        Returns:
            True if this call ran the callback, False if the observer had
            already fired
        """
        if self._response is not None:
            return False

        self._response = response
        try:
            await self.callback(response)
        finally:
            self._done.set()
        return True

    async def wait(self) -> CompletedResponse:
        """Wait until the observer has fired and its callback finished.

        Returns:
            The completed response

        Raises:
            RuntimeError: If the callback was never handed a response
        """
        await self._done.wait()
        if self._response is None:
            raise RuntimeError("Completion observer finished without a response")
        return self._response
