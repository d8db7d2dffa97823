"""
Data models for Knife Forge.

The generation status is a closed set of variants. Exactly one is active at a
time and each carries only the fields that are valid for it.
"""

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Optional, Union


class StatusKind(str, Enum):
    """Discriminator for the generation status variants."""

    IDLE = "idle"
    GENERATING_IMAGE = "generating-image"
    GENERATING_MESH = "generating-mesh"
    COMPLETED = "completed"
    FAILED = "error"

    @property
    def in_flight(self) -> bool:
        return self in (StatusKind.GENERATING_IMAGE, StatusKind.GENERATING_MESH)

    @property
    def terminal(self) -> bool:
        return self in (StatusKind.COMPLETED, StatusKind.FAILED)


# Forward edges are driven by a submission, the two edges back to IDLE only
# by a user-initiated reset.
TRANSITIONS: dict[StatusKind, frozenset[StatusKind]] = {
    StatusKind.IDLE: frozenset({StatusKind.GENERATING_IMAGE}),
    StatusKind.GENERATING_IMAGE: frozenset({StatusKind.GENERATING_MESH, StatusKind.FAILED}),
    StatusKind.GENERATING_MESH: frozenset({StatusKind.COMPLETED, StatusKind.FAILED}),
    StatusKind.COMPLETED: frozenset({StatusKind.IDLE}),
    StatusKind.FAILED: frozenset({StatusKind.IDLE}),
}


def can_transition(source: StatusKind, target: StatusKind) -> bool:
    """Check whether the status machine allows moving from source to target."""
    return target in TRANSITIONS[source]


@dataclass(frozen=True)
class ModelReference:
    """Reference to a generated GLB asset.

    Either a remote URL (the placeholder asset) or the GLB bytes returned by
    the mesh provider, never both.
    """

    url: Optional[str] = None
    content: Optional[bytes] = None

    def __post_init__(self):
        if (self.url is None) == (self.content is None):
            raise ValueError("ModelReference needs exactly one of url or content")
        if self.url is not None and not self.url:
            raise ValueError("ModelReference url must not be empty")

    @property
    def is_remote(self) -> bool:
        return self.url is not None

    def to_dict(self) -> dict:
        if self.is_remote:
            return {"url": self.url}
        return {"bytes": len(self.content)}


@dataclass(frozen=True)
class Idle:
    """Nothing is being generated."""

    kind: ClassVar[StatusKind] = StatusKind.IDLE

    def to_dict(self) -> dict:
        return {"status": self.kind.value}


@dataclass(frozen=True)
class GeneratingImage:
    """Waiting on the image provider."""

    message: str

    kind: ClassVar[StatusKind] = StatusKind.GENERATING_IMAGE

    def to_dict(self) -> dict:
        return {"status": self.kind.value, "message": self.message}


@dataclass(frozen=True)
class GeneratingMesh:
    """Concept image is ready, waiting on the mesh provider."""

    image_ref: str
    message: str

    kind: ClassVar[StatusKind] = StatusKind.GENERATING_MESH

    def __post_init__(self):
        if not self.image_ref:
            raise ValueError("GeneratingMesh requires an image reference")

    def to_dict(self) -> dict:
        return {
            "status": self.kind.value,
            "message": self.message,
            "image_ref": self.image_ref,
        }


@dataclass(frozen=True)
class Completed:
    """Both the concept image and the mesh are available."""

    image_ref: str
    model_ref: ModelReference
    message: str

    kind: ClassVar[StatusKind] = StatusKind.COMPLETED

    def __post_init__(self):
        if not self.image_ref:
            raise ValueError("Completed requires an image reference")
        if not isinstance(self.model_ref, ModelReference):
            raise ValueError("Completed requires a model reference")

    def to_dict(self) -> dict:
        return {
            "status": self.kind.value,
            "message": self.message,
            "image_ref": self.image_ref,
            "model_ref": self.model_ref.to_dict(),
        }


@dataclass(frozen=True)
class Failed:
    """Generation stopped with an error. Terminal until the user resets."""

    error: str

    kind: ClassVar[StatusKind] = StatusKind.FAILED

    def __post_init__(self):
        if not self.error:
            raise ValueError("Failed requires an error description")

    def to_dict(self) -> dict:
        return {"status": self.kind.value, "error": self.error}


GenerationStatus = Union[Idle, GeneratingImage, GeneratingMesh, Completed, Failed]
