"""Fire-and-forget task spawning.

Generation runs detached from the request that created the favicon. There is
no queue, retry or concurrency limit: every spawn is one task. A task cannot
be cancelled once started.
"""

import asyncio
import inspect
import logging
from abc import ABC, abstractmethod
from typing import Awaitable, Callable, Set, Union

logger = logging.getLogger(__name__)

Job = Callable[[], Awaitable[None]]
ErrorCallback = Callable[[Exception], Union[None, Awaitable[None]]]


async def _run_guarded(job: Job, on_error: ErrorCallback) -> None:
    """Run job, handing any exception to on_error instead of raising."""
    try:
        await job()
    except Exception as e:
        try:
            result = on_error(e)
            if inspect.isawaitable(result):
                await result
        except Exception:
            logger.error("Task failure callback raised", exc_info=True)


class TaskSpawner(ABC):
    """Interface for running background jobs."""

    @abstractmethod
    async def spawn(self, job: Job, on_error: ErrorCallback) -> None:
        """Start job; exceptions it raises are passed to on_error."""
        pass


class AsyncioTaskSpawner(TaskSpawner):
    """Run each job as a detached asyncio task on the running loop."""

    def __init__(self):
        self._tasks: Set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def spawn(self, job: Job, on_error: ErrorCallback) -> None:
        task = asyncio.get_running_loop().create_task(_run_guarded(job, on_error))
        # The loop only keeps weak references to tasks
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def drain(self) -> None:
        """Wait for every task spawned so far to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)


class InlineTaskSpawner(TaskSpawner):
    """Run each job to completion before spawn returns."""

    async def spawn(self, job: Job, on_error: ErrorCallback) -> None:
        await _run_guarded(job, on_error)
