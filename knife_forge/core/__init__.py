"""
Core API clients for Knife Forge.
"""

from .mesh import (
    MeshConverter,
    HuggingFaceConverter,
    PlaceholderConverter,
    MeshError,
    ModelLoadingError,
    ProviderError,
    get_mesh_converter,
)

__all__ = [
    "MeshConverter",
    "HuggingFaceConverter",
    "PlaceholderConverter",
    "MeshError",
    "ModelLoadingError",
    "ProviderError",
    "get_mesh_converter",
]
