"""Inline concept image preview for terminals that support it."""

import logging
import os
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

# (env var, expected value or None for "just set")
_IMAGE_TERMINALS = (
    ("TERM_PROGRAM", "iTerm.app"),
    ("ITERM_SESSION_ID", None),
    ("TERM", "xterm-kitty"),
    ("KITTY_WINDOW_ID", None),
    ("TERM_PROGRAM", "WezTerm"),
)


def supports_inline_images(environ: Optional[dict] = None) -> bool:
    """Detect iTerm2, Kitty or WezTerm from the environment."""
    environ = os.environ if environ is None else environ
    for name, expected in _IMAGE_TERMINALS:
        value = environ.get(name)
        if value is None:
            continue
        if expected is None or value == expected:
            return True
    return False


class TerminalDisplay:
    """Draws the concept image inline when the terminal can show images."""

    def __init__(self, environ: Optional[dict] = None):
        self._can_display_images = supports_inline_images(environ)

    @property
    def can_display_images(self) -> bool:
        return self._can_display_images

    def show_concept(self, image_path: Path, max_width: Optional[int] = 40) -> bool:
        """Display the saved concept image.

        Returns:
            True if the image was drawn, False if the caller should fall back
            to printing the path.
        """
        if not self._can_display_images:
            return False

        from term_image.exceptions import TermImageError
        from term_image.image import from_file

        try:
            image = from_file(str(image_path))
            if max_width:
                image.set_size(width=max_width)
            image.draw()
        except (TermImageError, OSError) as e:
            logger.debug("Inline preview failed for %s: %s", image_path, e)
            return False
        return True


display = TerminalDisplay()
