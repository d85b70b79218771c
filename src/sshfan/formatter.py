"""Renders task results into printable blocks."""

from __future__ import annotations

from dataclasses import dataclass

from rich.text import Text

from .models import Failure, Result
from .sink import ConsoleSink

TIME_FORMAT = "%H:%M:%S"
TAB_SIZE = 8


@dataclass(frozen=True)
class Palette:
    """Rich styles for each part of a result block."""

    task_id: str = "cyan"
    success: str = "bold green"
    failure: str = "bold red"
    detail: str = "red"
    stdout_label: str = "green"
    stderr_label: str = "red"


DEFAULT_PALETTE = Palette()


def _decode(data: bytes) -> str:
    """Decode captured output for display.

    Carriage returns become line breaks; rich would otherwise drop them and
    glue progress updates together. Tabs are kept and rendered at
    ``TAB_SIZE`` column stops like a terminal does.
    """
    text = data.decode("utf-8", errors="replace")
    return text.replace("\r\n", "\n").replace("\r", "\n").rstrip("\n")


def format_result(result: Result, palette: Palette = DEFAULT_PALETTE) -> Text:
    """Build the block for one result.

    Example::

        [1] 15:04:00 [SUCCESS] web1.example.com
        [0] 21:18:57 [FAILURE] db1.example.com exit status 127
    """
    block = Text(tab_size=TAB_SIZE)
    block.append(f"[{result.task_id}]", style=palette.task_id)
    block.append(f" {result.completed_at.strftime(TIME_FORMAT)} ")

    if isinstance(result.outcome, Failure):
        block.append("[FAILURE]", style=palette.failure)
        block.append(f" {result.host} ")
        block.append(result.outcome.detail, style=palette.detail)
    else:
        block.append("[SUCCESS]", style=palette.success)
        block.append(f" {result.host}")

    if result.stdout:
        block.append("\n")
        block.append("Stdout:", style=palette.stdout_label)
        block.append(f" {_decode(result.stdout)}")

    if result.stderr:
        block.append("\n")
        block.append("Stderr:", style=palette.stderr_label)
        block.append(f" {_decode(result.stderr)}")

    return block


class ResultFormatter:
    """Result callback that renders each result and writes it to a sink."""

    def __init__(self, sink: ConsoleSink, palette: Palette = DEFAULT_PALETTE):
        self.sink = sink
        self.palette = palette

    def __call__(self, result: Result) -> None:
        self.sink.write(format_result(result, self.palette))
