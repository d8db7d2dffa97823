"""
Image generators for Knife Forge.
"""

from abc import ABC, abstractmethod


class GenerationError(Exception):
    """The image provider answered without any usable image data."""
    pass


class ImageGenerator(ABC):
    """Abstract base class for image generators."""

    @abstractmethod
    async def generate(self, prompt: str) -> str:
        """Generate a concept image from a prompt.

        Args:
            prompt: The user's description

        Returns:
            The image as a `data:image/png;base64,...` URI
        """
        pass

    @abstractmethod
    def name(self) -> str:
        """Return the generator name."""
        pass

    async def aclose(self) -> None:
        """Release any open connections."""

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()


# Lazy import to avoid loading httpx-backed generators at startup
def get_gemini_generator():
    from .gemini import GeminiGenerator
    return GeminiGenerator
