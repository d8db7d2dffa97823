"""What to show for each generation status.

`render_view` is a pure function of the status: the TUI and the line-by-line
CLI output both draw from the ViewState it returns.
"""
from dataclasses import dataclass
from typing import Optional

from ..models import (
    Completed,
    Failed,
    GeneratingImage,
    GeneratingMesh,
    GenerationStatus,
    ModelReference,
    StatusKind,
)

FORM = "form"
PROGRESS = "progress"
RESULT = "result"

PROGRESS_PERCENT = {
    StatusKind.IDLE: 0,
    StatusKind.GENERATING_IMAGE: 33,
    StatusKind.GENERATING_MESH: 66,
    StatusKind.COMPLETED: 100,
    StatusKind.FAILED: 0,
}

CONCEPT_PLACEHOLDER = "Generating Concept..."
MESH_PLACEHOLDER = "Awaiting Mesh..."


def progress_percent(status: GenerationStatus) -> int:
    """Percentage shown by the progress indicator."""
    return PROGRESS_PERCENT[status.kind]


@dataclass(frozen=True)
class ViewState:
    """Everything the presentation needs to draw one status."""

    screen: str
    percent: int = 0
    message: str = ""
    error: Optional[str] = None
    image_ref: Optional[str] = None
    model_ref: Optional[ModelReference] = None
    concept_caption: str = ""
    mesh_caption: str = ""

    @property
    def can_download(self) -> bool:
        return self.model_ref is not None


def render_view(status: GenerationStatus) -> ViewState:
    """Map a generation status to the view that displays it."""
    percent = progress_percent(status)

    if isinstance(status, Failed):
        return ViewState(screen=FORM, error=status.error)

    if isinstance(status, (GeneratingImage, GeneratingMesh)):
        return ViewState(
            screen=PROGRESS,
            percent=percent,
            message=status.message,
            concept_caption=CONCEPT_PLACEHOLDER,
            mesh_caption=MESH_PLACEHOLDER,
        )

    if isinstance(status, Completed):
        return ViewState(
            screen=RESULT,
            percent=percent,
            message=status.message,
            image_ref=status.image_ref,
            model_ref=status.model_ref,
        )

    return ViewState(screen=FORM)
