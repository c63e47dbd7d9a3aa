"""Progress indicators for long-running package operations."""

from __future__ import annotations

from typing import Protocol

from rich.console import Console
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskID, TextColumn


class ProgressReporter(Protocol):
    """Something that can display and release an operation indicator."""

    def show(self, message: str, fraction: float) -> None:
        """Display a message with an approximate completion fraction."""

    def clear(self) -> None:
        """Release the indicator. Safe to call when nothing is shown."""


class NullProgress:
    """Progress reporter that displays nothing."""

    def show(self, message: str, fraction: float) -> None:
        pass

    def clear(self) -> None:
        pass


class RichProgress:
    """Progress reporter rendering a transient Rich progress bar.

    The bar is started on the first :meth:`show` and torn down by
    :meth:`clear`, so no live display outlives an operation.
    """

    def __init__(self, console: Console, title: str = "npm") -> None:
        self._console = console
        self._title = title
        self._progress: Progress | None = None
        self._task: TaskID | None = None

    def show(self, message: str, fraction: float) -> None:
        description = f"[info]{self._title}[/] {message}"
        completed = max(0.0, min(fraction, 1.0)) * 100

        if self._progress is None:
            self._progress = Progress(
                SpinnerColumn(),
                TextColumn("{task.description}"),
                BarColumn(),
                console=self._console,
                transient=True,
            )
            self._progress.start()
            self._task = self._progress.add_task(description, total=100, completed=completed)
            return

        if self._task is not None:
            self._progress.update(self._task, description=description, completed=completed)

    def clear(self) -> None:
        progress, self._progress, self._task = self._progress, None, None
        if progress is not None:
            progress.stop()
