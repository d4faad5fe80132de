"""Fire-and-forget dispatch for telemetry sends."""

import asyncio
from typing import Any, Coroutine

from ..logging_config import get_logger

logger = get_logger(__name__)


class TelemetryDispatcher:
    """Runs bus sends as background tasks so request handling never waits on them."""

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        """Number of sends still in flight."""
        return len(self._tasks)

    def spawn(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task:
        """Schedule a coroutine and keep a reference until it finishes."""
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    def _on_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Telemetry dispatch failed: %s", exc)

    async def drain(self, timeout: float = 5.0) -> None:
        """Wait for outstanding sends, cancelling whatever is left after timeout."""
        if not self._tasks:
            return

        pending = list(self._tasks)
        logger.info("Draining %d pending telemetry sends", len(pending))
        done, still_pending = await asyncio.wait(pending, timeout=timeout)

        for task in still_pending:
            task.cancel()
        if still_pending:
            logger.warning(
                "Dropped %d telemetry sends still pending after %.1fs",
                len(still_pending),
                timeout,
            )
            await asyncio.gather(*still_pending, return_exceptions=True)
