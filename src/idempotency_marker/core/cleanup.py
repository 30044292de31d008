"""Background sweep of expired entries in the bundled memory cache.

``MemoryCache`` expires entries lazily on ``get``, so keys that are never
looked up again would stay in memory forever. This module provides a
background task that periodically removes them.

External caches (Redis, memcached) expire entries on their own and do not
need this task.

Examples:
    Integrate with FastAPI lifespan::

        from contextlib import asynccontextmanager

        from fastapi import FastAPI

        cache = MemoryCache()

        @asynccontextmanager
        async def lifespan(app: FastAPI):
            task = await start_cleanup_task(cache, interval_seconds=60)
            yield
            await stop_cleanup_task(task)

        app = FastAPI(lifespan=lifespan)
"""

import asyncio

from idempotency_marker.observability.logging import get_logger
from idempotency_marker.observability.metrics import record_cleanup
from idempotency_marker.storage.memory import MemoryCache

logger = get_logger(__name__)


async def cleanup_loop(
    cache: MemoryCache,
    interval_seconds: float = 300,
    stop_event: asyncio.Event | None = None,
) -> None:
    """Periodically remove expired entries until stopped.

    Args:
        cache: Memory cache to sweep
        interval_seconds: Time between sweeps (default 300s = 5 minutes)
        stop_event: Event to signal the loop to stop (optional)
    """
    if stop_event is None:
        stop_event = asyncio.Event()

    logger.info("cleanup.started", interval_seconds=interval_seconds)

    while not stop_event.is_set():
        try:
            count = await cache.cleanup_expired()
            record_cleanup(count)

            if count > 0:
                logger.info("cleanup.completed", records_removed=count)
            else:
                logger.debug("cleanup.completed", records_removed=0)

        except Exception as e:
            # Keep sweeping on the next interval
            logger.error(
                "cleanup.failed",
                error=str(e),
                error_type=type(e).__name__,
            )

        try:
            await asyncio.wait_for(stop_event.wait(), timeout=interval_seconds)
        except asyncio.TimeoutError:
            continue

    logger.info("cleanup.stopped")


async def start_cleanup_task(
    cache: MemoryCache,
    interval_seconds: float = 300,
) -> asyncio.Task[None]:
    """Start the cleanup background task.

    Args:
        cache: Memory cache to sweep
        interval_seconds: Time between sweeps

    Returns:
        The asyncio Task running the cleanup loop
    """
    stop_event = asyncio.Event()

    task = asyncio.create_task(
        cleanup_loop(
            cache=cache,
            interval_seconds=interval_seconds,
            stop_event=stop_event,
        )
    )

    task._stop_event = stop_event  # type: ignore[attr-defined]

    return task


async def stop_cleanup_task(task: asyncio.Task[None]) -> None:
    """Stop a running cleanup task gracefully.

    Args:
        task: The cleanup task returned by start_cleanup_task
    """
    stop_event: asyncio.Event | None = getattr(task, "_stop_event", None)

    if stop_event:
        stop_event.set()

    try:
        await asyncio.wait_for(task, timeout=5.0)
    except asyncio.TimeoutError:
        logger.warning("cleanup.stop_timeout", message="Cleanup task did not stop in time")
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            logger.debug("cleanup.cancelled")
