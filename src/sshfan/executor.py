"""Runs one remote command on one host through the ssh client."""

from __future__ import annotations

import asyncio
import logging
import signal
from typing import Sequence

from .config import DEFAULT_REMOTE_SHELL
from .models import Failure, Outcome, Result, Success, Task

logger = logging.getLogger(__name__)


async def execute(task: Task, remote_shell: Sequence[str] = DEFAULT_REMOTE_SHELL) -> Result:
    """Run ``remote_shell host argv...`` and capture everything it writes.

    Never raises for process problems: a launch error or a non-zero exit
    becomes a Failure on the returned Result.
    """
    args = [*remote_shell, task.host, *task.argv]
    logger.debug("[%d] starting %s", task.id, args)

    try:
        proc = await asyncio.create_subprocess_exec(
            *args,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except (OSError, ValueError) as e:
        logger.debug("[%d] launch failed: %s", task.id, e)
        return Result(task.id, task.host, Failure(str(e)))

    # Read stdout and stderr concurrently
    stdout, stderr = await asyncio.gather(
        _drain(proc.stdout, task, "stdout"),
        _drain(proc.stderr, task, "stderr"),
    )
    returncode = await proc.wait()
    logger.debug("[%d] %s exited with %d", task.id, task.host, returncode)

    return Result(task.id, task.host, _outcome(returncode), stdout, stderr)


async def _drain(stream: asyncio.StreamReader | None, task: Task, name: str) -> bytes:
    """Read a pipe to EOF; a failed read yields no output for that stream."""
    if stream is None:
        return b""
    try:
        return await stream.read()
    except OSError as e:
        logger.debug("[%d] reading %s failed: %s", task.id, name, e)
        return b""


def _outcome(returncode: int) -> Outcome:
    if returncode == 0:
        return Success()
    return Failure(describe_exit(returncode))


def describe_exit(returncode: int) -> str:
    """Text for a non-zero exit, e.g. ``exit status 255`` or ``signal: SIGKILL``."""
    if returncode < 0:
        try:
            return f"signal: {signal.Signals(-returncode).name}"
        except ValueError:
            return f"signal: {-returncode}"
    return f"exit status {returncode}"
