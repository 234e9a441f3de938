"""
Dispatch Queues

Bounded output queues between the router and downstream consumers.

Full-queue policy: wait up to ``enqueue_timeout`` seconds for room, then drop
the item and log a warning. The router never waits forever on a stalled
consumer.
"""

import asyncio
import logging
from typing import Generic, TypeVar

logger = logging.getLogger("keelbot.slackbot.queues")

T = TypeVar("T")


class DispatchQueue(Generic[T]):
    """Insert-only (from the router's side) bounded queue"""

    def __init__(self, name: str, maxsize: int = 100, enqueue_timeout: float = 5.0):
        self.name = name
        self._queue: "asyncio.Queue[T]" = asyncio.Queue(maxsize=maxsize)
        self._enqueue_timeout = enqueue_timeout
        self.dropped = 0

    async def put(self, item: T) -> bool:
        """
        Hand an item off to consumers.

        Returns:
            False if the item was dropped because the queue stayed full
        """
        try:
            await asyncio.wait_for(self._queue.put(item), timeout=self._enqueue_timeout)
        except asyncio.TimeoutError:
            self.dropped += 1
            logger.warning(
                "%s queue full (%d items) for %.1fs, dropping item",
                self.name, self._queue.qsize(), self._enqueue_timeout,
            )
            return False
        return True

    async def get(self) -> T:
        return await self._queue.get()

    def get_nowait(self) -> T:
        return self._queue.get_nowait()

    def task_done(self) -> None:
        self._queue.task_done()

    def qsize(self) -> int:
        return self._queue.qsize()

    def empty(self) -> bool:
        return self._queue.empty()

    @property
    def maxsize(self) -> int:
        return self._queue.maxsize
