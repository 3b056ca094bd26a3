"""Live row registry.

Each dashboard row is a task in a rich Progress display. The registry maps a
row key to its task, creates tasks the first time a key shows up and updates
them in place afterwards. Rows are only ever appended: a key keeps the
position it was first rendered at for the whole run.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

from rich.console import Console
from rich.progress import Progress, ProgressColumn, Task, TaskID
from rich.spinner import Spinner
from rich.text import Text

from prwatch_core.rows import RowKind, RowSpec

logger = logging.getLogger(__name__)

DEFAULT_SPINNER = "dots2"
SPINNER_PLACEHOLDER = "*"
LABEL_WIDTH = 10


def _diff_stat(message: str) -> Text:
    stat = Text(message)
    stat.highlight_regex(r"\+", "green")
    stat.highlight_regex(r"-", "red")
    return stat


def render_row(spec: RowSpec, spinner: Text | None = None) -> Text:
    """Render one row to styled text.

    ``spinner`` is the current animation frame for rows that are still
    spinning; a static placeholder is used when it is not given.
    """
    text = Text(" " * spec.indent)

    if spec.kind is RowKind.HEADER:
        text.append("====> ", style="magenta")
        text.append(spec.prefix, style="bold white")
        if spec.message:
            text.append(f" {spec.message}", style="bold white")
    elif spec.kind is RowKind.SECTION:
        text.append("----> ", style="magenta")
        text.append(spec.prefix, style="bold dim")
        if spec.message:
            text.append(f" {spec.message}", style="dim")
    elif spec.kind is RowKind.CHECK:
        text.append(spec.message, style=spec.style)
        text.append(" ")
        if spec.spinning:
            text.append_text(spinner if spinner is not None else Text(SPINNER_PLACEHOLDER))
            text.append(" ")
        text.append(spec.prefix, style="bold dim")
    elif spec.kind is RowKind.LABELED:
        if spec.prefix_width is not None:
            text.append("--> ", style="magenta")
            text.append(spec.prefix.ljust(spec.prefix_width))
            text.append(" | ", style="magenta")
            text.append_text(_diff_stat(spec.message))
        else:
            text.append(spec.prefix.ljust(LABEL_WIDTH), style="white")
            text.append(" --> ", style="magenta")
            text.append(spec.message)
    else:
        if spec.prefix:
            text.append(f"{spec.prefix} ")
        text.append(spec.message)

    return text


class RowColumn(ProgressColumn):
    """The single Progress column: draws a task from the RowSpec in its fields."""

    def __init__(self, spinner_name: str = DEFAULT_SPINNER):
        self._spinner = Spinner(spinner_name)
        super().__init__()

    def render(self, task: Task) -> Text:
        spec: RowSpec | None = task.fields.get("row")
        if spec is None:
            return Text("")
        frame = self._spinner.render(task.get_time()) if spec.spinning else None
        return render_row(spec, frame)


@dataclass
class Row:
    key: str
    task_id: TaskID
    spec: RowSpec


class RowRegistry:
    """Owns the on-screen rows of one run, keyed by RowSpec.key."""

    def __init__(self, console: Console | None = None, spinner: str = DEFAULT_SPINNER):
        self.console = console or Console()
        # Frames are pushed by render(); the scheduler ticks fast enough to animate spinners.
        self._progress = Progress(RowColumn(spinner), console=self.console, auto_refresh=False)
        self._rows: dict[str, Row] = {}

    def __enter__(self) -> RowRegistry:
        self.start()
        return self

    def __exit__(self, *exc) -> None:
        self.stop()

    def start(self) -> None:
        self._progress.start()

    def stop(self) -> None:
        self._progress.stop()

    @property
    def keys(self) -> list[str]:
        return list(self._rows)

    @property
    def needs_ticking(self) -> bool:
        """True while any row shows a spinner and must be redrawn without data changes."""
        return any(row.spec.spinning for row in self._rows.values())

    def get(self, key: str) -> RowSpec | None:
        row = self._rows.get(key)
        return row.spec if row else None

    def lines(self) -> list[str]:
        """Plain text of every row, in on-screen order."""
        return [render_row(row.spec).plain for row in self._rows.values()]

    def render(self, rows: Iterable[RowSpec]) -> None:
        """Draw one frame.

        New keys are appended below the existing rows; known keys are updated
        in place, and only when their spec changed.
        """
        for spec in rows:
            try:
                self._render_one(spec)
            except Exception as e:
                logger.warning("Could not render row %r: %s", spec.key, e)

        try:
            self._progress.refresh()
        except OSError as e:
            logger.warning("Could not refresh the display: %s", e)

    def _render_one(self, spec: RowSpec) -> None:
        row = self._rows.get(spec.key)
        if row is None:
            task_id = self._progress.add_task(spec.key, total=None, row=spec)
            self._rows[spec.key] = Row(key=spec.key, task_id=task_id, spec=spec)
            return

        if row.spec == spec:
            return
        self._progress.update(row.task_id, row=spec)
        row.spec = spec
