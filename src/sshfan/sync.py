"""Completion barrier for a dispatch round."""

from __future__ import annotations

import asyncio


class CompletionBarrier:
    """Counts finished tasks and releases waiters once all have reported.

    The barrier is single-use: after the last task reports, it stays
    complete and a new round needs a new barrier.
    """

    def __init__(self, total: int):
        if total < 1:
            raise ValueError("barrier needs at least one task")
        self.total = total
        self._pending = total
        self._complete = asyncio.Event()

    @property
    def pending(self) -> int:
        return self._pending

    @property
    def completed(self) -> int:
        return self.total - self._pending

    def is_complete(self) -> bool:
        return self._complete.is_set()

    def task_done(self) -> None:
        """Record one finished task."""
        if self._pending == 0:
            raise RuntimeError("task_done() called more times than tasks dispatched")
        self._pending -= 1
        if self._pending == 0:
            self._complete.set()

    async def wait(self) -> None:
        """Block until every dispatched task has reported."""
        await self._complete.wait()
