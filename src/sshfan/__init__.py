"""sshfan: Run one command on many SSH hosts in parallel."""

from .config import ConfigError, RunConfig, build_config, load_file
from .dispatcher import Dispatcher, build_tasks, run
from .executor import execute
from .formatter import Palette, ResultFormatter, format_result
from .models import Failure, Result, Success, Task
from .sink import ConsoleSink
from .sync import CompletionBarrier

__all__ = [
    "ConfigError",
    "RunConfig",
    "build_config",
    "load_file",
    "Dispatcher",
    "build_tasks",
    "run",
    "execute",
    "Palette",
    "ResultFormatter",
    "format_result",
    "Failure",
    "Result",
    "Success",
    "Task",
    "ConsoleSink",
    "CompletionBarrier",
]
