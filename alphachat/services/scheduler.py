"""
Cleanup Scheduler - periodic sweep of expired temporary chat sessions.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

logger = logging.getLogger(__name__)


class CleanupScheduler:
    """
    Runs a sweep once shortly after startup and then on a fixed interval.

    The loop lives in a single asyncio task owned by the application
    lifespan. A failing sweep is logged and the next tick runs as usual.
    """

    def __init__(
        self,
        sweep: Callable[[], Awaitable[int]],
        interval_seconds: float = 60 * 60,
        startup_delay_seconds: float = 5.0,
    ):
        """
        Args:
            sweep: Coroutine function removing expired sessions, returning the count
            interval_seconds: Time between sweeps
            startup_delay_seconds: Wait before the first sweep
        """
        self.sweep = sweep
        self.interval_seconds = interval_seconds
        self.startup_delay_seconds = startup_delay_seconds
        self._task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run_once(self) -> Optional[int]:
        """Run one sweep. Returns the number removed, or None if it failed."""
        try:
            deleted = await self.sweep()
        except Exception as e:
            logger.error(f"Scheduled cleanup error: {e}", exc_info=True)
            return None

        if deleted:
            logger.info(f"Scheduled cleanup completed: {deleted} expired sessions removed")
        else:
            logger.info("Scheduled cleanup completed: no expired sessions found")
        return deleted

    async def _loop(self) -> None:
        await asyncio.sleep(self.startup_delay_seconds)
        while True:
            await self.run_once()
            await asyncio.sleep(self.interval_seconds)

    def start(self) -> None:
        """Start the background task on the running event loop."""
        if self.is_running:
            return
        self._task = asyncio.create_task(self._loop(), name="temporary-chat-cleanup")
        logger.info(
            f"Temporary chat cleanup scheduler started "
            f"(every {self.interval_seconds:g}s, first run in {self.startup_delay_seconds:g}s)"
        )

    async def stop(self) -> None:
        """Cancel the background task and wait for it to finish."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Temporary chat cleanup scheduler stopped")
