"""TUI Dashboard for sshfan."""

from dataclasses import dataclass
from enum import Enum

from rich.markup import escape
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.message import Message
from textual.reactive import reactive
from textual.widgets import Footer, Header, Label, RichLog, Static
from textual.worker import Worker, WorkerState

from .config import RunConfig
from .dispatcher import Dispatcher
from .formatter import DEFAULT_PALETTE, Palette, format_result
from .models import Result


class TaskStatus(Enum):
    """Status of a task as shown on its panel."""

    PENDING = "pending"
    SUCCESS = "success"
    FAILURE = "failure"


STATUS_ICONS = {
    TaskStatus.PENDING: ("…", "yellow"),
    TaskStatus.SUCCESS: ("✔", "green"),
    TaskStatus.FAILURE: ("✘", "red"),
}


class TaskPanel(Static):
    """A panel displaying the result of a single task."""

    status: reactive[TaskStatus] = reactive(TaskStatus.PENDING)

    def __init__(self, task_id: int, host: str, **kwargs) -> None:
        super().__init__(**kwargs)
        self.task_id = task_id
        self.host = host

    def compose(self) -> ComposeResult:
        yield Label(self._get_header(), id=f"header-{self.task_id}")
        yield RichLog(
            id=f"log-{self.task_id}",
            markup=False,
            wrap=True,
            auto_scroll=True,
        )

    def _get_header(self) -> str:
        icon, color = STATUS_ICONS.get(self.status, ("?", "white"))
        return f"[{color}]{icon}[/] [cyan]\\[{self.task_id}][/] [bold]{escape(self.host)}[/bold]"

    def watch_status(self, status: TaskStatus) -> None:
        # Border color follows the status class
        self.set_class(status is TaskStatus.SUCCESS, "-success")
        self.set_class(status is TaskStatus.FAILURE, "-failure")
        if self.is_mounted:
            self.query_one(f"#header-{self.task_id}", Label).update(self._get_header())

    def show_result(self, result: Result, palette: Palette = DEFAULT_PALETTE) -> None:
        log = self.query_one(f"#log-{self.task_id}", RichLog)
        log.write(format_result(result, palette))
        self.status = TaskStatus.SUCCESS if result.succeeded else TaskStatus.FAILURE


class ProgressLine(Static):
    """One-line tally of finished hosts."""

    total: reactive[int] = reactive(0)
    succeeded: reactive[int] = reactive(0)
    failed: reactive[int] = reactive(0)
    finished: reactive[bool] = reactive(False)

    @property
    def completed(self) -> int:
        return self.succeeded + self.failed

    def count(self, result: Result) -> None:
        if result.succeeded:
            self.succeeded += 1
        else:
            self.failed += 1

    def render(self) -> str:
        state = "all hosts reported" if self.finished else "waiting"
        return (
            f"{self.completed}/{self.total} done, "
            f"{self.succeeded} ok, {self.failed} failed ({state})"
        )


@dataclass
class TaskFinished(Message):
    """Message for a completed task."""

    result: Result


class Dashboard(App):
    """Live view of a dispatch round, one panel per host."""

    CSS = """
    Screen {
        layout: grid;
        grid-size: 3;
        grid-gutter: 0 1;
    }

    TaskPanel {
        border: round $panel;
        height: 100%;
        min-height: 6;
    }

    TaskPanel.-success {
        border: round $success;
    }

    TaskPanel.-failure {
        border: round $error;
    }

    TaskPanel > Label {
        width: 100%;
        padding: 0 1;
    }

    TaskPanel > RichLog {
        height: 1fr;
        padding: 0 1;
    }

    ProgressLine {
        dock: bottom;
        height: 1;
        padding: 0 1;
    }
    """

    BINDINGS = [Binding("q", "quit", "Quit")]

    def __init__(self, config: RunConfig, palette: Palette = DEFAULT_PALETTE, **kwargs) -> None:
        super().__init__(**kwargs)
        self.config = config
        self.block_palette = palette
        self.dispatcher = Dispatcher(config, on_result=self._on_result)
        self.panels: dict[int, TaskPanel] = {}
        self.results: list[Result] = []
        self._worker: Worker | None = None

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)

        for task in self.dispatcher.tasks:
            panel = TaskPanel(task.id, task.host, id=f"panel-{task.id}")
            self.panels[task.id] = panel
            yield panel

        yield ProgressLine(id="progress")
        yield Footer()

    def on_mount(self) -> None:
        """Start the dispatch when the app mounts."""
        self.query_one(ProgressLine).total = len(self.dispatcher.tasks)

        # Subprocesses get their own event loop in a worker thread
        self._worker = self.run_worker(self.dispatcher.run_all(), exclusive=True, thread=True)

    def on_worker_state_changed(self, event: Worker.StateChanged) -> None:
        if event.worker is self._worker and event.state == WorkerState.SUCCESS:
            self.query_one(ProgressLine).finished = True

    def _on_result(self, result: Result) -> None:
        """Called from the worker thread - posts message to main thread."""
        self.post_message(TaskFinished(result))

    def on_task_finished(self, message: TaskFinished) -> None:
        result = message.result
        self.results.append(result)
        panel = self.panels.get(result.task_id)
        if panel is not None:
            panel.show_result(result, self.block_palette)
        self.query_one(ProgressLine).count(result)
