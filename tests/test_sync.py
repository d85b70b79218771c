# tests/test_sync.py
"""Tests for the completion barrier."""

import asyncio

import pytest

from sshfan.sync import CompletionBarrier


def test_rejects_empty_round() -> None:
    with pytest.raises(ValueError):
        CompletionBarrier(0)


@pytest.mark.asyncio
async def test_wait_blocks_until_all_tasks_report() -> None:
    barrier = CompletionBarrier(3)
    released = asyncio.Event()

    async def waiter():
        await barrier.wait()
        released.set()

    waiting = asyncio.create_task(waiter())

    for expected_pending in (2, 1):
        barrier.task_done()
        await asyncio.sleep(0.01)
        assert barrier.pending == expected_pending
        assert not released.is_set()
        assert not barrier.is_complete()

    barrier.task_done()
    await asyncio.wait_for(waiting, timeout=1)

    assert released.is_set()
    assert barrier.is_complete()
    assert barrier.completed == 3
    assert barrier.pending == 0


@pytest.mark.asyncio
async def test_complete_barrier_is_terminal() -> None:
    barrier = CompletionBarrier(1)
    barrier.task_done()

    with pytest.raises(RuntimeError):
        barrier.task_done()

    # Waiting after completion returns immediately
    await asyncio.wait_for(barrier.wait(), timeout=1)
    assert barrier.is_complete()
