"""Tests for the bounded work queue."""

import asyncio

import pytest

from stock_research.errors import QueueFullError
from stock_research.jobs.queue import WorkQueue
from stock_research.models import WorkItem


def _item(n: int) -> WorkItem:
    return WorkItem(job_id=f"job-{n}", ticker="NVDA")


class TestWorkQueue:
    """Tests for WorkQueue enqueue/dequeue behavior."""

    @pytest.mark.anyio
    async def test_fifo_order(self) -> None:
        """Test items come out in the order they went in."""
        queue = WorkQueue(capacity=5, enqueue_timeout=0.5)
        for n in range(5):
            await queue.enqueue(_item(n))

        out = [await queue.dequeue() for _ in range(5)]

        assert [i.job_id for i in out] == [f"job-{n}" for n in range(5)]

    @pytest.mark.anyio
    async def test_full_queue_times_out(self) -> None:
        """Test enqueue beyond capacity waits then raises QueueFullError."""
        queue = WorkQueue(capacity=2, enqueue_timeout=0.05)
        await queue.enqueue(_item(1))
        await queue.enqueue(_item(2))

        with pytest.raises(QueueFullError, match="capacity: 2") as exc_info:
            await queue.enqueue(_item(3))

        assert exc_info.value.capacity == 2
        assert queue.qsize() == 2

    @pytest.mark.anyio
    async def test_enqueue_succeeds_when_space_frees(self) -> None:
        """Test a waiting enqueue completes once a consumer drains an item."""
        queue = WorkQueue(capacity=1, enqueue_timeout=1.0)
        await queue.enqueue(_item(1))

        async def drain_later() -> WorkItem:
            await asyncio.sleep(0.05)
            return await queue.dequeue()

        drained, _ = await asyncio.gather(drain_later(), queue.enqueue(_item(2)))

        assert drained.job_id == "job-1"
        assert (await queue.dequeue()).job_id == "job-2"

    @pytest.mark.anyio
    async def test_dequeue_cancellation(self) -> None:
        """Test a cancelled dequeue raises CancelledError and consumes nothing."""
        queue = WorkQueue(capacity=2, enqueue_timeout=0.5)
        waiter = asyncio.create_task(queue.dequeue())
        await asyncio.sleep(0.01)

        waiter.cancel()
        with pytest.raises(asyncio.CancelledError):
            await waiter

        await queue.enqueue(_item(1))
        assert queue.qsize() == 1

    @pytest.mark.anyio
    async def test_none_rejected(self) -> None:
        """Test None cannot be enqueued."""
        queue = WorkQueue()
        with pytest.raises(TypeError):
            await queue.enqueue(None)  # type: ignore[arg-type]

    def test_invalid_construction(self) -> None:
        """Test capacity and timeout are validated."""
        with pytest.raises(ValueError):
            WorkQueue(capacity=0)
        with pytest.raises(ValueError):
            WorkQueue(enqueue_timeout=0)

    def test_accessors(self) -> None:
        """Test capacity and timeout are exposed for health reporting."""
        queue = WorkQueue(capacity=7, enqueue_timeout=2.0)

        assert queue.capacity == 7
        assert queue.enqueue_timeout == 2.0
        assert queue.qsize() == 0
