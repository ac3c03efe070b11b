"""Bounded FIFO work queue between submitters and the worker."""

import asyncio
import logging

from stock_research.errors import QueueFullError
from stock_research.models import WorkItem

logger = logging.getLogger(__name__)


class WorkQueue:
    """
    Bounded asyncio queue of WorkItems.

    `enqueue` waits for free space up to `enqueue_timeout` seconds and then
    raises QueueFullError; nothing is dropped or retried internally.
    `dequeue` waits indefinitely and propagates cancellation.
    """

    def __init__(self, capacity: int = 100, enqueue_timeout: float = 5.0):
        if capacity < 1:
            raise ValueError(f"Invalid capacity {capacity}. Must be at least 1")
        if enqueue_timeout <= 0:
            raise ValueError(f"Invalid enqueue timeout {enqueue_timeout}. Must be positive")
        self._capacity = capacity
        self._enqueue_timeout = enqueue_timeout
        self._queue: asyncio.Queue[WorkItem] = asyncio.Queue(maxsize=capacity)

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def enqueue_timeout(self) -> float:
        return self._enqueue_timeout

    def qsize(self) -> int:
        return self._queue.qsize()

    async def enqueue(self, item: WorkItem) -> None:
        """
        Add a work item, waiting for space if the queue is full.

        Raises:
            TypeError: If item is None
            QueueFullError: If no space frees up within the enqueue timeout
        """
        if item is None:
            raise TypeError("Work item cannot be None")

        # put() runs in the caller's task, so the caller resumes right after the
        # item lands without yielding to the consumer
        try:
            async with asyncio.timeout(self._enqueue_timeout):
                await self._queue.put(item)
        except TimeoutError:
            logger.warning(
                f"Queue full (capacity {self._capacity}); rejected job {item.job_id} "
                f"after {self._enqueue_timeout}s"
            )
            raise QueueFullError(self._capacity, self._enqueue_timeout) from None

        logger.debug(f"Enqueued job {item.job_id} ({item.ticker}); depth {self.qsize()}")

    async def dequeue(self) -> WorkItem:
        """Wait for the next work item. Raises CancelledError if the waiter is cancelled."""
        item = await self._queue.get()
        self._queue.task_done()
        return item
