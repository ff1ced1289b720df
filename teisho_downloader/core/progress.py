"""
Progress bar handling for teisho-downloader using Rich library.

A single styled bar tracks the download-and-tag pass over the episodes.

Usage:
    from teisho_downloader.core.progress import EpisodeProgressBar

    with EpisodeProgressBar(total=len(episodes)) as progress:
        for episode in episodes:
            result = process(episode)
            progress.update(success=result.succeeded)
"""

from typing import Optional

from rich import get_console
from rich.console import JustifyMethod, OverflowMethod
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
    Text column truncated with an ellipsis when wider than `width`.
    """

    def __init__(
        self,
        text_format: str,
        style: StyleType = "none",
        justify: JustifyMethod = "left",
        overflow: Optional[OverflowMethod] = None,
        width: int = 20,
    ) -> None:
        self.text_format = text_format
        self.justify: JustifyMethod = justify
        self.style = style
        self.overflow: Optional[OverflowMethod] = overflow
        self.width = width
        super().__init__()

    def render(self, task: Task) -> Text:
        """Render the column."""
        text = Text.from_markup(
            self.text_format.format(task=task), style=self.style, justify=self.justify
        )
        text.truncate(max_width=self.width, overflow=self.overflow, pad=True)
        return text


class EpisodeProgressBar:
    """
    Progress bar for the download and tagging pass.

    Displays:
    - Description (e.g., "Processing")
    - Status: ✓ downloaded, ✗ failed, ⊘ skipped
    - Progress bar
    - Percentage

    Example:
        Processing      ✓ 120  ✗ 3  ⊘ 5        ━━━━━━━━━━━━━━━━━  64%

    When `enabled` is False every method is a no-op, so callers need no
    special casing for quiet runs.
    """

    def __init__(self, total: int, description: str = "Processing", enabled: bool = True):
        self.total = total
        self.description = description
        self.enabled = enabled
        self.completed = 0
        self.downloaded = 0
        self.failed = 0
        self.skipped = 0

        self.progress: Optional[Progress] = None
        self.task_id: Optional[TaskID] = None
        self._started = False

        if enabled:
            console = get_console()
            console.push_theme(PROGRESS_THEME)
            self.progress = Progress(
                SizedTextColumn(
                    "[white]{task.description}",
                    overflow="ellipsis",
                    width=15,
                ),
                SizedTextColumn(
                    "{task.fields[status]}",
                    width=35,
                    style="white",
                ),
                BarColumn(bar_width=40, finished_style="green"),
                "[progress.percentage]{task.percentage:>3.0f}%",
                console=console,
                transient=False,
                refresh_per_second=10,
            )

    def __enter__(self) -> "EpisodeProgressBar":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()

    def start(self) -> None:
        """Start the progress bar (can be called manually)."""
        if self.progress is not None and not self._started:
            self.progress.start()
            self.task_id = self.progress.add_task(
                description=self.description,
                total=self.total,
                status=self._get_status_text(),
            )
            self._started = True

    def stop(self) -> None:
        """Stop the progress bar."""
        if self.progress is not None and self._started:
            self.progress.stop()
            self._started = False

    def _get_status_text(self) -> str:
        parts = [
            f"[green]✓ {self.downloaded}[/green]",
            f"[red]✗ {self.failed}[/red]",
        ]
        if self.skipped > 0:
            parts.append(f"[yellow]⊘ {self.skipped}[/yellow]")
        return "  ".join(parts)

    def update(self, success: bool, skipped: bool = False) -> None:
        """
        Record one processed episode.

        Args:
            success: Whether the episode was downloaded and tagged.
            skipped: Whether the episode was skipped (already on disk).
        """
        self.completed += 1
        if skipped:
            self.skipped += 1
        elif success:
            self.downloaded += 1
        else:
            self.failed += 1

        if self.progress is not None and self.task_id is not None:
            self.progress.update(
                self.task_id,
                completed=self.completed,
                status=self._get_status_text(),
            )
