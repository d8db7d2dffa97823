"""Result types for TUI apps."""
from dataclasses import dataclass, field
from typing import Optional


@dataclass
class ForgeResult:
    """Result from ForgeTUI execution.

    - success: Whether the last generation completed
    - prompt: Prompt of the last generation
    - downloads: GLB files written by the download action
    - error: Error message if the last generation failed
    """
    success: bool
    prompt: Optional[str] = None
    downloads: list[str] = field(default_factory=list)
    error: Optional[str] = None
