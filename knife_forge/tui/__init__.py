"""TUI components for Knife Forge.

This module provides the Textual app that shows the prompt form, the
generation progress and the finished result.

CRITICAL: Rich and Textual cannot mix in the same command execution.
Use Rich console.print() ONLY before or after TUI execution, never during.
"""
from .apps import ForgeTUI
from .results import ForgeResult
from .views import ViewState, render_view, progress_percent

__all__ = ["ForgeTUI", "ForgeResult", "ViewState", "render_view", "progress_percent"]
