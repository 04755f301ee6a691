"""Registry of in-flight operations so they can be cancelled together."""
import asyncio
import logging
from typing import Any, Coroutine, Set, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class TaskRegistry:
    """Holds a handle for every running login/playback/read operation.

    cancel_all() is called when the owning UI context goes away (app
    shutdown); cancelled operations unwind through their own cleanup.
    """

    def __init__(self) -> None:
        self._tasks: Set[asyncio.Task] = set()

    async def run(self, coro: Coroutine[Any, Any, T]) -> T:
        """Run coro as a registered task and return its result."""
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return await task

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    async def cancel_all(self) -> None:
        tasks = [t for t in self._tasks if not t.done()]
        if not tasks:
            return
        logger.info("Cancelling %d in-flight operation(s)", len(tasks))
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
