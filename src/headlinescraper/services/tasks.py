"""Fire-and-forget task spawning with failure logging and shutdown draining."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Coroutine, Set

__all__ = ["TaskRunner"]

logger = logging.getLogger(__name__)


class TaskRunner:
    """Run coroutines as detached :mod:`asyncio` tasks.

    Callers never await the spawned tasks. The runner keeps a strong reference
    to each task until it finishes, logs any exception it raised and counts
    failures so that nothing fails silently. :meth:`drain` waits for whatever
    is still running, which the application does on shutdown.
    """

    def __init__(self) -> None:
        self._tasks: Set[asyncio.Task[Any]] = set()
        self.spawned = 0
        self.failed = 0

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def spawn(self, coro: Coroutine[Any, Any, Any], *, name: str | None = None) -> asyncio.Task[Any]:
        task = asyncio.get_running_loop().create_task(coro, name=name)
        self._tasks.add(task)
        self.spawned += 1
        task.add_done_callback(self._on_done)
        return task

    def _on_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            logger.warning("Background task %s was cancelled", task.get_name())
            return

        exc = task.exception()
        if exc is not None:
            self.failed += 1
            logger.error("Background task %s failed", task.get_name(), exc_info=exc)

    async def drain(self) -> None:
        """Wait until every spawned task, including ones spawned meanwhile, has finished."""

        while True:
            pending = [task for task in self._tasks if not task.done()]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)
