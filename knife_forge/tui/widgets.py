"""Custom TUI widgets for progress and result display.

This module provides Textual widgets for the two-stage forge progress with
elapsed time tracking, and a log for saved files and URLs.
"""
from time import perf_counter
from typing import Optional

from textual.widgets import RichLog, Static

from ..models import GenerationStatus, StatusKind
from .views import progress_percent


STAGE_LABELS = {
    1: "Concept image",
    2: "3D mesh",
}


class StageProgress(Static):
    """Percent bar plus per-stage status and elapsed time.

    Example output:
        CASTING 3D MESH VIA HUGGING FACE...                 66%
        ████████████████████░░░░░░░░░░
        ✓ Stage 1/2: Concept image (4s)
        ● Stage 2/2: 3D mesh (2s)
    """

    # Status icons using Rich markup
    ICONS = {
        "waiting": "[dim]⏸[/dim]",
        "running": "[cyan]●[/cyan]",
        "complete": "[green]✓[/green]",
        "error": "[red]✗[/red]",
    }

    BAR_WIDTH = 30

    def __init__(self, id: Optional[str] = None):
        super().__init__(id=id)
        self.percent = 0
        self.message = ""
        self._elapsed_timer = None
        self._stages: dict[int, dict] = {}
        self._reset_stages()

    def _reset_stages(self):
        for stage in STAGE_LABELS:
            self._stages[stage] = {
                "status": "waiting",
                "start_time": None,
                "end_time": None,
            }

    def clear(self):
        """Put every stage back to waiting."""
        self.percent = 0
        self.message = ""
        self._reset_stages()
        self.stop_timer()
        self.refresh()

    def on_mount(self):
        """Create the elapsed time timer; it only ticks while a stage runs."""
        self._elapsed_timer = self.set_interval(1, self.refresh, pause=True)

    def start_timer(self):
        if self._elapsed_timer:
            self._elapsed_timer.resume()

    def stop_timer(self):
        """Stop the elapsed time timer."""
        if self._elapsed_timer:
            self._elapsed_timer.pause()

    def _set_stage(self, stage: int, status: str):
        stage_data = self._stages[stage]
        if stage_data["status"] == status:
            return
        stage_data["status"] = status
        if status == "running":
            stage_data["start_time"] = perf_counter()
        elif status in ("complete", "error"):
            stage_data["end_time"] = perf_counter()

    def show_status(self, status: GenerationStatus):
        """Move the stages along with the generation status."""
        self.percent = progress_percent(status)
        self.message = getattr(status, "message", "")

        if status.kind == StatusKind.IDLE:
            self._reset_stages()
        elif status.kind == StatusKind.GENERATING_IMAGE:
            self._set_stage(1, "running")
        elif status.kind == StatusKind.GENERATING_MESH:
            self._set_stage(1, "complete")
            self._set_stage(2, "running")
        elif status.kind == StatusKind.COMPLETED:
            self._set_stage(2, "complete")
        elif status.kind == StatusKind.FAILED:
            for stage_data in self._stages.values():
                if stage_data["status"] == "running":
                    stage_data["status"] = "error"
                    stage_data["end_time"] = perf_counter()

        if status.kind.in_flight:
            self.start_timer()
        else:
            self.stop_timer()
        self.refresh()

    def render(self) -> str:
        filled = int(self.BAR_WIDTH * self.percent / 100)
        lines = [
            f"[b]{self.message.upper()}[/b]  [cyan]{self.percent}%[/cyan]",
            "[cyan]" + "█" * filled + "[/cyan]" + "░" * (self.BAR_WIDTH - filled),
        ]

        total = len(STAGE_LABELS)
        for stage_num, label in STAGE_LABELS.items():
            stage = self._stages[stage_num]
            icon = self.ICONS.get(stage["status"], " ")

            elapsed = ""
            if stage["start_time"]:
                end = stage["end_time"] or perf_counter()
                elapsed = f" ({int(end - stage['start_time'])}s)"

            lines.append(f"{icon} Stage {stage_num}/{total}: {label}{elapsed}")

        return "\n".join(lines)


class OutputLog(RichLog):
    """Scrolling log for file paths and URLs as they become available.

    Shows entries like:
    - Saved: ./roblox_knife_1760000000000.glb
    - Viewer: file:///tmp/knife_forge_viewer_x/viewer.html
    """

    def __init__(self, **kwargs):
        kwargs.setdefault("markup", True)
        kwargs.setdefault("highlight", True)
        kwargs.setdefault("auto_scroll", True)
        kwargs.setdefault("max_lines", 10)
        kwargs.setdefault("min_width", 40)
        super().__init__(**kwargs)

    def log_saved(self, path: str) -> None:
        """Log a saved file path with green prefix."""
        self.write(f"[green]Saved:[/green] {path}")

    def log_url(self, label: str, url: str) -> None:
        """Log a URL with blue label prefix."""
        self.write(f"[blue]{label}:[/blue] {url}")

    def log_error(self, message: str) -> None:
        self.write(f"[red]Error:[/red] {message}")
