"""
Knife Forge - text prompt to concept image to downloadable 3D mesh.

A prompt is turned into a Roblox-style concept image with Gemini, then into
a GLB mesh with a Hugging Face image-to-3D model.
"""

from pathlib import Path

# Read version from VERSION file (single source of truth)
_version_file = Path(__file__).parent.parent / "VERSION"
if _version_file.exists():
    __version__ = _version_file.read_text().strip()
else:
    __version__ = "0.1.0"  # Fallback for development

from knife_forge.models import (
    GenerationStatus,
    Idle,
    GeneratingImage,
    GeneratingMesh,
    Completed,
    Failed,
    ModelReference,
)
from knife_forge.orchestrator import ForgeSession, build_session
from knife_forge.config import Config

__all__ = [
    "__version__",
    "GenerationStatus",
    "Idle",
    "GeneratingImage",
    "GeneratingMesh",
    "Completed",
    "Failed",
    "ModelReference",
    "ForgeSession",
    "build_session",
    "Config",
]
