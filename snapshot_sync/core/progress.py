"""
Progress bar for playlist imports using the Rich library.

Importing a large snapshot inserts playlist videos one at a time, which is
the only step slow enough to be worth a progress bar. The bar shows how
many videos were added and how many were already present.

Usage:
    from snapshot_sync.core.progress import ImportProgressBar

    total = sum(len(entry.videos) for entry in snapshot.local_playlists or ())
    with ImportProgressBar(total=total) as progress:
        import_snapshot(store, snapshots, on_video=progress.update)
"""

from rich import get_console
from rich.console import JustifyMethod, OverflowMethod
from rich.highlighter import Highlighter
from rich.progress import (
    BarColumn,
    Progress,
    ProgressColumn,
    Task,
    TaskID,
)
from rich.style import StyleType
from rich.text import Text
from rich.theme import Theme


PROGRESS_THEME = Theme({
    "bar.back": "grey23",
    "bar.complete": "rgb(165,66,129)",
    "bar.finished": "rgb(114,156,31)",
    "bar.pulse": "rgb(165,66,129)",
    "progress.percentage": "white",
})


class SizedTextColumn(ProgressColumn):
    """
    Text column with a fixed width.

    Text longer than the width is truncated with the given overflow method.
    """

    def __init__(
        self,
        text_format: str,
        style: StyleType = "none",
        justify: JustifyMethod = "left",
        markup: bool = True,
        highlighter: Highlighter | None = None,
        overflow: OverflowMethod | None = None,
        width: int = 20,
    ) -> None:
        self.text_format = text_format
        self.justify: JustifyMethod = justify
        self.style = style
        self.markup = markup
        self.highlighter = highlighter
        self.overflow: OverflowMethod | None = overflow
        self.width = width
        super().__init__()

    def render(self, task: Task) -> Text:
        _text = self.text_format.format(task=task)
        if self.markup:
            text = Text.from_markup(_text, style=self.style, justify=self.justify)
        else:
            text = Text(_text, style=self.style, justify=self.justify)
        if self.highlighter:
            self.highlighter.highlight(text)

        text.truncate(max_width=self.width, overflow=self.overflow, pad=True)
        return text


class ImportProgressBar:
    """
    Progress bar for playlist videos during import.

    Displays:
    - Description (e.g., "Importing")
    - Status: ✓ added, ↺ already present
    - Progress bar and percentage

    Example:
        Importing       ✓ 45  ↺ 12              ━━━━━━━━━━━━━━━━━  47%
    """

    def __init__(self, total: int, description: str = "Importing", status_width: int = 25) -> None:
        self.total = total
        self.description = description
        self.completed = 0
        self.added = 0
        self.skipped = 0

        self.console = get_console()
        self.console.push_theme(PROGRESS_THEME)

        self.progress = Progress(
            SizedTextColumn(
                "[white]{task.description}",
                overflow="ellipsis",
                width=15,
            ),
            SizedTextColumn(
                "{task.fields[status]}",
                width=status_width,
                style="white",
            ),
            BarColumn(bar_width=40, finished_style="green"),
            "[progress.percentage]{task.percentage:>3.0f}%",
            console=self.console,
            transient=False,
            refresh_per_second=10,
        )

        self.task_id: TaskID | None = None
        self._started = False

    def __enter__(self) -> "ImportProgressBar":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()

    def start(self) -> None:
        if not self._started:
            self.progress.start()
            self.task_id = self.progress.add_task(
                description=self.description,
                total=self.total,
                status=self._get_status_text(),
            )
            self._started = True

    def stop(self) -> None:
        if self._started:
            self.progress.stop()
            self.console.pop_theme()
            self._started = False

    def _get_status_text(self) -> str:
        return f"[green]✓ {self.added}[/green]  [yellow]↺ {self.skipped}[/yellow]"

    def update(self, added: bool) -> None:
        """
        Record one processed video.

        Args:
            added: True if the video was inserted, False if it was already
                   in the local playlist.

        Thread Safety:
            Called from the sync runner's worker thread; Rich's Progress
            serializes updates internally.
        """
        self.completed += 1
        if added:
            self.added += 1
        else:
            self.skipped += 1

        if self.task_id is not None:
            self.progress.update(
                self.task_id,
                completed=self.completed,
                status=self._get_status_text(),
            )
