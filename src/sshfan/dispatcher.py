"""Fans one remote command out to every configured host."""

from __future__ import annotations

import asyncio
import logging
import shutil
from datetime import datetime
from pathlib import Path
from typing import Callable, Sequence

from .config import ConfigError, RunConfig, remote_argv
from .executor import execute
from .models import Failure, Result, Task
from .sync import CompletionBarrier

logger = logging.getLogger(__name__)

# Type alias for result callback
ResultCallback = Callable[[Result], None]


def build_tasks(hosts: Sequence[str], argv: Sequence[str]) -> list[Task]:
    """One task per host, numbered by position. Duplicates are kept."""
    if not hosts:
        raise ConfigError("No hosts to dispatch to")
    argv = tuple(argv)
    return [Task(id=i, host=host, argv=argv) for i, host in enumerate(hosts)]


class Dispatcher:
    """Launches one execution unit per host and collects the results."""

    def __init__(self, config: RunConfig, on_result: ResultCallback | None = None):
        self.config = config
        self.on_result = on_result
        self.tasks = build_tasks(config.hosts, remote_argv(config))
        self.results: list[Result] = []
        self.barrier: CompletionBarrier | None = None
        self._units: list[asyncio.Task] = []
        self._errors: list[BaseException] = []
        self._log_dir: Path | None = None

    def _setup_logging(self) -> None:
        """Set up the per-run log directory with timestamp."""
        if self.config.log_dir is None:
            return
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        self._log_dir = self.config.log_dir / timestamp
        self._log_dir.mkdir(parents=True, exist_ok=True)

        # Copy the source config file to the log directory
        if self.config.source_path and self.config.source_path.exists():
            shutil.copy(self.config.source_path, self._log_dir / "config.yaml")

    def _write_log(self, result: Result) -> None:
        if self._log_dir is None:
            return
        name = result.host.replace("/", "_")
        status = (
            f"FAILURE {result.outcome.detail}"
            if isinstance(result.outcome, Failure)
            else "SUCCESS"
        )
        with open(self._log_dir / f"{result.task_id}-{name}.log", "wb") as f:
            f.write(f"[{result.task_id}] {result.host} {status}\n".encode())
            f.write(b"--- stdout ---\n")
            f.write(result.stdout)
            f.write(b"\n--- stderr ---\n")
            f.write(result.stderr)

    def dispatch(self) -> CompletionBarrier:
        """Start every task without waiting for any of them.

        Must be called from a running event loop. Returns the barrier the
        caller waits on.
        """
        if self.barrier is not None:
            raise RuntimeError("Dispatcher can only dispatch once")

        self._setup_logging()
        self.barrier = CompletionBarrier(len(self.tasks))

        max_workers = self.config.max_workers
        if max_workers is None:
            self._units = [
                asyncio.create_task(self._run_task(task, self.barrier)) for task in self.tasks
            ]
        else:
            queue: asyncio.Queue[Task] = asyncio.Queue()
            for task in self.tasks:
                queue.put_nowait(task)
            workers = min(max_workers, len(self.tasks))
            self._units = [
                asyncio.create_task(self._worker(queue, self.barrier)) for _ in range(workers)
            ]

        logger.debug(
            "dispatched %d tasks (%s)",
            len(self.tasks),
            f"{len(self._units)} workers" if max_workers else "unbounded",
        )
        return self.barrier

    async def run_all(self) -> list[Result]:
        """Run the command on all hosts and return results in completion order."""
        barrier = self.dispatch()
        await barrier.wait()
        await asyncio.gather(*self._units)

        if self._errors:
            raise self._errors[0]
        return self.results

    async def _worker(self, queue: asyncio.Queue[Task], barrier: CompletionBarrier) -> None:
        while True:
            try:
                task = queue.get_nowait()
            except asyncio.QueueEmpty:
                return
            await self._run_task(task, barrier)

    async def _run_task(self, task: Task, barrier: CompletionBarrier) -> None:
        try:
            result = await execute(task, self.config.remote_shell)
            self.results.append(result)
            self._write_log(result)
            if self.on_result:
                self.on_result(result)
        except Exception as e:
            logger.debug("[%d] task failed unexpectedly: %s", task.id, e)
            self._errors.append(e)
        finally:
            barrier.task_done()


def run(config: RunConfig, on_result: ResultCallback | None = None) -> list[Result]:
    """Blocking entry point: dispatch, wait for every host, return results."""
    return asyncio.run(Dispatcher(config, on_result=on_result).run_all())
