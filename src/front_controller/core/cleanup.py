"""Periodic purge of expired session entries.

Expired stored requests are invisible as soon as they expire, but the
in-memory session backend only frees them when they are touched again. A
SessionCleanup purges them on a fixed interval so that abandoned sessions do
not keep growing.

Examples:
    Run the cleanup for the lifetime of a Starlette app::

        from contextlib import asynccontextmanager

        @asynccontextmanager
        async def lifespan(app):
            task = await start_cleanup_task(session_storage, interval_seconds=60)
            yield
            await stop_cleanup_task(task)
"""

import asyncio
from typing import Protocol

from front_controller.observability.logging import get_logger
from front_controller.observability.metrics import record_cleanup

logger = get_logger(__name__)

STOP_TIMEOUT_SECONDS = 5.0


class ExpiringStorage(Protocol):
    def cleanup_expired(self) -> int:
        """Remove expired entries and return how many were removed."""
        ...


class SessionCleanup:
    """Calls ``storage.cleanup_expired()`` every ``interval_seconds``.

    The storage call is synchronous, so it runs in a worker thread. A failing
    run is logged and the next run happens on schedule.

    Attributes:
        storage: Storage to purge.
        interval_seconds: Pause between two runs.
        stop_event: Set to end the loop after the current run.
    """

    def __init__(self, storage: ExpiringStorage, interval_seconds: float = 300) -> None:
        self.storage = storage
        self.interval_seconds = interval_seconds
        self.stop_event = asyncio.Event()

    async def run_once(self) -> int:
        removed = await asyncio.to_thread(self.storage.cleanup_expired)
        record_cleanup(removed)
        log = logger.info if removed else logger.debug
        log("session.cleanup.completed", entries_removed=removed)
        return removed

    async def run(self) -> None:
        logger.info("session.cleanup.started", interval_seconds=self.interval_seconds)

        while not self.stop_event.is_set():
            try:
                await self.run_once()
            except Exception as e:
                logger.error(
                    "session.cleanup.failed",
                    error=str(e),
                    error_type=type(e).__name__,
                )

            if await self._sleep():
                break

        logger.info("session.cleanup.stopped")

    async def _sleep(self) -> bool:
        """Wait one interval. Returns True if stop was requested meanwhile."""
        try:
            await asyncio.wait_for(self.stop_event.wait(), timeout=self.interval_seconds)
        except asyncio.TimeoutError:
            return False
        return True


async def start_cleanup_task(
    storage: ExpiringStorage,
    interval_seconds: float = 300,
) -> asyncio.Task[None]:
    """Schedule a SessionCleanup on the running event loop.

    Returns:
        The task running the cleanup. Pass it to stop_cleanup_task().
    """
    cleanup = SessionCleanup(storage, interval_seconds)
    task = asyncio.create_task(cleanup.run(), name="session-cleanup")
    task.cleanup = cleanup  # type: ignore[attr-defined]
    return task


async def stop_cleanup_task(task: asyncio.Task[None]) -> None:
    """Ask the cleanup to stop and wait for it, cancelling it if it hangs."""
    cleanup: SessionCleanup | None = getattr(task, "cleanup", None)
    if cleanup is not None:
        cleanup.stop_event.set()

    try:
        await asyncio.wait_for(asyncio.shield(task), timeout=STOP_TIMEOUT_SECONDS)
    except asyncio.TimeoutError:
        logger.warning("session.cleanup.stop_timeout", timeout_seconds=STOP_TIMEOUT_SECONDS)
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            logger.debug("session.cleanup.cancelled")
