"""Shared output destination for formatted result blocks."""

from __future__ import annotations

import os
import threading
from typing import IO

from rich.console import Console, RenderableType


def make_console(
    *,
    no_color: bool = False,
    stderr: bool = False,
    force_terminal: bool | None = None,
    file: IO[str] | None = None,
) -> Console:
    """Console that styles output only on an interactive terminal.

    ``no_color`` (or a non-empty ``NO_COLOR`` variable) turns off every
    escape sequence, bold included, not just the colors.
    """
    if os.environ.get("NO_COLOR", ""):
        no_color = True
    return Console(
        file=file,
        stderr=stderr,
        force_terminal=force_terminal,
        color_system=None if no_color else "auto",
        no_color=no_color,
        highlight=False,
        soft_wrap=True,
    )


class ConsoleSink:
    """Writes whole blocks to a console, one block at a time."""

    def __init__(self, console: Console | None = None):
        self.console = console or make_console()
        self._lock = threading.Lock()

    def write(self, block: RenderableType) -> None:
        with self._lock:
            self.console.print(block)
            self.console.file.flush()
