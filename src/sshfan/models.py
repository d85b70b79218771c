"""Task and result types shared by the dispatch engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Union


@dataclass(frozen=True)
class Task:
    """One remote command bound to one host."""

    id: int
    host: str
    argv: tuple[str, ...]


@dataclass(frozen=True)
class Success:
    """The remote command exited with status 0."""


@dataclass(frozen=True)
class Failure:
    """The remote command failed or could not be launched."""

    detail: str


Outcome = Union[Success, Failure]


@dataclass(frozen=True)
class Result:
    """Completed outcome of a single task."""

    task_id: int
    host: str
    outcome: Outcome
    stdout: bytes = b""
    stderr: bytes = b""
    completed_at: datetime = field(default_factory=datetime.now)

    @property
    def succeeded(self) -> bool:
        return isinstance(self.outcome, Success)
