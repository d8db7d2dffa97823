"""TUI application for interactive forging.

The screen follows the session status: the prompt form while idle or after an
error, the two-stage progress while generating, and the result controls once
the mesh is ready.

CRITICAL: Do NOT import Rich console or use console.print() in TUI code.
Rich and Textual cannot mix - terminal state will be corrupted.
"""
import logging
from pathlib import Path

import httpx
from textual import work
from textual.app import App
from textual.containers import Horizontal, Vertical
from textual.widgets import Button, Input, Static

from ..download import save_model
from ..models import Completed, Failed, GenerationStatus
from ..orchestrator import EmptyPromptError, ForgeSession, GenerationInProgressError
from ..viewer import ViewerPage
from .results import ForgeResult
from .views import FORM, PROGRESS, RESULT, render_view
from .widgets import OutputLog, StageProgress

logger = logging.getLogger(__name__)


class ForgeTUI(App[ForgeResult]):
    """Interactive prompt -> concept image -> 3D mesh app.

    Takes ownership of the session and closes it on exit. Returns ForgeResult
    describing the last generation and any downloads.
    """

    TITLE = "Knife Forge"

    BINDINGS = [("escape", "quit_forge", "Quit")]

    CSS = """
    #form, #progress-view, #result-view {
        height: auto;
        padding: 1 2;
    }

    #error-banner {
        color: $error;
        margin-top: 1;
    }

    .panel {
        width: 1fr;
        height: 5;
        border: round $primary;
        content-align: center middle;
        color: $text-muted;
    }

    #result-buttons Button {
        margin-right: 1;
    }

    #output-log {
        height: 5;
        border-top: solid $primary;
    }
    """

    def __init__(
        self,
        session: ForgeSession,
        output_dir: Path = Path("."),
        product: str = "roblox_knife",
    ):
        """Initialize ForgeTUI.

        Args:
            session: ForgeSession that owns the generation status
            output_dir: Directory that downloaded GLB files go to
            product: Download filename prefix
        """
        super().__init__()
        self.session = session
        self.output_dir = output_dir
        self.product = product
        self.viewer = ViewerPage(title=self.TITLE)
        self.downloads: list[str] = []
        self._last_prompt = None
        self._unsubscribe = None

    def compose(self):
        """Create child widgets."""
        with Vertical(id="form"):
            yield Static("Knife Description")
            yield Input(
                placeholder="e.g., A flaming obsidian dagger with a neon blue handle...",
                id="prompt",
            )
            yield Button("Forge My Knife", id="forge", variant="primary", disabled=True)
            yield Static("", id="error-banner")
        with Vertical(id="progress-view"):
            yield StageProgress(id="progress")
            with Horizontal():
                yield Static("", id="concept-panel", classes="panel")
                yield Static("", id="mesh-panel", classes="panel")
        with Vertical(id="result-view"):
            yield Static("", id="result-summary")
            with Horizontal(id="result-buttons"):
                yield Button("Open 3D Viewer", id="open-viewer")
                yield Button("Download .GLB", id="download", variant="success")
                yield Button("Forge New Knife", id="reset")
        yield OutputLog(id="output-log")

    def on_mount(self):
        """Acquire the viewer page and follow the session status."""
        self.viewer.acquire()
        self._unsubscribe = self.session.subscribe(self._show_status)
        self._show_status(self.session.status)

    async def on_unmount(self):
        """Release the viewer page and the session's clients on every exit path."""
        if self._unsubscribe:
            self._unsubscribe()
        try:
            self.viewer.close()
        finally:
            await self.session.aclose()

    def on_input_changed(self, event: Input.Changed):
        self.query_one("#forge", Button).disabled = not event.value.strip()

    def on_input_submitted(self, event: Input.Submitted):
        self.forge(event.value)

    def on_button_pressed(self, event: Button.Pressed):
        button_id = event.button.id
        if button_id == "forge":
            self.forge(self.query_one("#prompt", Input).value)
        elif button_id == "download":
            self.download()
        elif button_id == "open-viewer":
            self._open_viewer()
        elif button_id == "reset":
            self._reset()

    @work(exclusive=True)
    async def forge(self, prompt: str):
        """Run one generation. UI updates arrive through the session listener."""
        try:
            self._last_prompt = prompt
            await self.session.generate(prompt)
        except (EmptyPromptError, GenerationInProgressError) as e:
            logger.debug("Submission ignored: %s", e)

    @work(exclusive=True, group="download")
    async def download(self):
        """Save the current model once as <product>_<epoch-millis>.glb."""
        view = render_view(self.session.status)
        if not view.can_download:
            return

        log = self.query_one("#output-log", OutputLog)
        try:
            path = await save_model(view.model_ref, self.output_dir, self.product)
        except (httpx.HTTPError, OSError) as e:
            log.log_error(f"Download failed: {e}")
            return

        if path is not None:
            self.downloads.append(str(path))
            log.log_saved(str(path))

    def _open_viewer(self):
        if not self.viewer.page_path.exists():
            return
        self.viewer.open()

    def _reset(self):
        try:
            self.session.reset()
        except GenerationInProgressError:
            return
        prompt_input = self.query_one("#prompt", Input)
        prompt_input.value = ""
        self.query_one("#progress", StageProgress).clear()
        prompt_input.focus()

    def _show_status(self, status: GenerationStatus):
        """Redraw for a new status (called on the app's event loop)."""
        view = render_view(status)

        self.query_one("#form").display = view.screen == FORM
        self.query_one("#progress-view").display = view.screen == PROGRESS
        self.query_one("#result-view").display = view.screen == RESULT

        self.query_one("#progress", StageProgress).show_status(status)
        self.query_one("#error-banner", Static).update(
            f"[b]Error:[/b] {view.error}" if view.error else ""
        )
        self.query_one("#concept-panel", Static).update(view.concept_caption)
        self.query_one("#mesh-panel", Static).update(view.mesh_caption)

        log = self.query_one("#output-log", OutputLog)
        if isinstance(status, Completed):
            source = status.model_ref.url if status.model_ref.is_remote else f"{len(status.model_ref.content)} bytes"
            self.query_one("#result-summary", Static).update(
                f"[green]{view.message}[/green]\nConcept image ready. 3D model: {source}"
            )
            try:
                page = self.viewer.show(status.image_ref, status.model_ref)
            except OSError as e:
                log.log_error(f"Viewer page could not be written: {e}")
            else:
                log.log_url("Viewer", page.as_uri())
        elif isinstance(status, Failed):
            log.log_error(status.error)
        elif view.screen == FORM:
            self.query_one("#prompt", Input).focus()

    def action_quit_forge(self):
        status = self.session.status
        self.exit(ForgeResult(
            success=isinstance(status, Completed),
            prompt=self._last_prompt,
            downloads=list(self.downloads),
            error=status.error if isinstance(status, Failed) else None,
        ))
