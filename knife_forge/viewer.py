"""Browser-based 3D viewer for generated knives.

The interactive viewer is the `<model-viewer>` web component, loaded from its
CDN by a script tag in a temporary HTML page. The page and any GLB written
next to it live in a temporary directory that exists only while the
ViewerPage is open.
"""

import html
import logging
import shutil
import tempfile
import webbrowser
from pathlib import Path
from typing import Optional

from .models import ModelReference

logger = logging.getLogger(__name__)

MODEL_VIEWER_SCRIPT = "https://ajax.googleapis.com/ajax/libs/model-viewer/3.5.0/model-viewer.min.js"

PAGE_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>{title}</title>
<script type="module" src="{script}"></script>
<style>
body {{ background: #0f172a; color: #cbd5e1; font-family: sans-serif; margin: 2rem; }}
main {{ display: flex; flex-wrap: wrap; gap: 2rem; }}
section {{ flex: 1 1 320px; }}
img, model-viewer {{ width: 100%; aspect-ratio: 1; background: #1e293b; border-radius: 12px; }}
</style>
</head>
<body>
<h1>{title}</h1>
<main>
{image_section}
<section>
<h3>3D Model Preview</h3>
<model-viewer src="{model_src}" alt="A 3D model of a knife" auto-rotate camera-controls shadow-intensity="1" environment-image="neutral" exposure="1"></model-viewer>
</section>
</main>
</body>
</html>
"""

IMAGE_SECTION = """<section>
<h3>Concept Image</h3>
<img src="{image_src}" alt="Knife Concept">
</section>"""


class ViewerPage:
    """Scoped viewer page.

    Usage:
        with ViewerPage() as viewer:
            viewer.show(status.image_ref, status.model_ref)
            viewer.open()
    """

    def __init__(self, title: str = "Knife Forge"):
        self.title = title
        self._directory: Optional[Path] = None

    @property
    def is_open(self) -> bool:
        return self._directory is not None

    @property
    def directory(self) -> Path:
        if self._directory is None:
            raise RuntimeError("ViewerPage is not open")
        return self._directory

    @property
    def page_path(self) -> Path:
        return self.directory / "viewer.html"

    def acquire(self) -> "ViewerPage":
        """Create the temporary directory backing the page."""
        if self._directory is None:
            self._directory = Path(tempfile.mkdtemp(prefix="knife_forge_viewer_"))
            logger.debug("Viewer directory created at %s", self._directory)
        return self

    def close(self) -> None:
        """Remove the page, its model file and the directory."""
        if self._directory is not None:
            shutil.rmtree(self._directory, ignore_errors=True)
            logger.debug("Viewer directory removed: %s", self._directory)
            self._directory = None

    def render(self, model_src: str, image_ref: Optional[str] = None) -> str:
        """Render the page HTML for a model source and optional concept image."""
        image_section = ""
        if image_ref:
            image_section = IMAGE_SECTION.format(image_src=html.escape(image_ref, quote=True))
        return PAGE_TEMPLATE.format(
            title=html.escape(self.title),
            script=MODEL_VIEWER_SCRIPT,
            image_section=image_section,
            model_src=html.escape(model_src, quote=True),
        )

    def show(self, image_ref: Optional[str], model_ref: ModelReference) -> Path:
        """
        Write the viewer page for a generated model.

        Args:
            image_ref: Concept image data URI, shown beside the model
            model_ref: Model to display

        Returns:
            Path of the written HTML page
        """
        directory = self.directory

        if model_ref.is_remote:
            model_src = model_ref.url
        else:
            model_path = directory / "model.glb"
            model_path.write_bytes(model_ref.content)
            model_src = model_path.name

        self.page_path.write_text(self.render(model_src, image_ref), encoding="utf-8")
        return self.page_path

    def open(self) -> bool:
        """Open the page in the system browser."""
        if not self.page_path.exists():
            raise RuntimeError("Nothing to view yet, call show() first")
        return webbrowser.open(self.page_path.as_uri())

    def __enter__(self):
        return self.acquire()

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
