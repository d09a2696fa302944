"""Console rendering and progress helpers for the media-up CLI."""
from __future__ import annotations

from typing import Any, Dict, Optional

from rich.console import Console
from rich.live import Live
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table

from .models import UploadCandidate, UploadResult

console = Console()


def _human_size(value: int) -> str:
    size = float(max(value, 0))
    units = ["B", "KB", "MB", "GB", "TB"]
    unit_idx = 0
    while size >= 1024.0 and unit_idx < len(units) - 1:
        size /= 1024.0
        unit_idx += 1
    if unit_idx == 0:
        return f"{int(size)} {units[unit_idx]}"
    return f"{size:.2f} {units[unit_idx]}"


def render_configuration_summary(config: Dict[str, Any]) -> None:
    """Render startup configuration summary."""
    table = Table.grid(padding=(0, 2))
    table.add_column(style="bold cyan", justify="right")
    table.add_column(style="white")

    for key, value in config.items():
        rendered = "-" if value is None else str(value)
        table.add_row(key, rendered)

    panel = Panel(
        table,
        title="[bold green]media-up[/bold green]",
        subtitle="[dim]direct-to-storage uploader[/dim]",
        border_style="blue",
    )
    console.print(panel)


class SingleFileUploadProgress:
    """Percentage progress bar for one upload."""

    def __init__(self, candidate: UploadCandidate, live: bool = True):
        self.filename = candidate.name
        self.file_size = candidate.size_bytes
        self._live_enabled = live
        self._started = False
        self._parts_done = 0
        self._parts_total = 0
        self._last_percent = -1

        self._progress = Progress(
            SpinnerColumn(),
            TextColumn("[bold cyan]{task.fields[filename]}", justify="left"),
            BarColumn(bar_width=42),
            TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
            TextColumn("[dim]{task.fields[detail]}"),
            TimeElapsedColumn(),
            expand=False,
            console=console,
        )
        self._live: Optional[Live] = None
        self._task_id: Optional[TaskID] = None

    def start(self) -> None:
        if self._started:
            return
        if self._live_enabled:
            self._live = Live(self._progress, console=console, refresh_per_second=8)
            self._live.start()
            self._task_id = self._progress.add_task(
                "upload",
                filename=self.filename[:60],
                detail=_human_size(self.file_size),
                total=100,
            )
        else:
            console.print(f"[cyan]Uploading:[/cyan] {self.filename} ({_human_size(self.file_size)})")
        self._started = True

    def on_progress(self, percent: int) -> None:
        if not self._started:
            self.start()
        if self._task_id is not None:
            self._progress.update(self._task_id, completed=percent)
            return
        if percent != self._last_percent and (percent % 10 == 0 or percent >= 100):
            console.print(f"  {percent:3d}%")
            self._last_percent = percent

    def on_part_uploaded(self, part: Any, total_parts: int) -> None:
        self._parts_done = part.part_number
        self._parts_total = total_parts
        if self._task_id is not None:
            self._progress.update(
                self._task_id,
                detail=f"part {self._parts_done}/{self._parts_total}",
            )

    def on_fallback(self, filename: str, error: Exception) -> None:
        message = f"[yellow]Direct upload failed ({error}); retrying through server[/yellow]"
        if self._task_id is not None:
            self._progress.update(self._task_id, detail="server fallback")
        console.print(message)

    def complete(self, result: Optional[UploadResult] = None, error: Optional[str] = None) -> None:
        if self._live is not None:
            self._live.stop()
            self._live = None

        if result is not None:
            route = "fallback" if result.used_fallback else result.strategy.value
            console.print(f"[green]Uploaded:[/green] {self.filename} [dim]({route})[/dim]")
            console.print(f"  {result.url}")
            return

        suffix = f" - {error}" if error else ""
        console.print(f"[red]Failed:[/red] {self.filename}{suffix}")
