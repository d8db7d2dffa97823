"""
Gemini 2.5 Flash image generator for Knife Forge.

Produces the 2D concept image that is later converted to a mesh.
"""

import logging
import os
from typing import Optional

import httpx

from . import GenerationError, ImageGenerator


logger = logging.getLogger(__name__)

# Gemini 2.5 Flash Image - image output model
GEMINI_MODEL = "gemini-2.5-flash-image"
GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta/models"

STYLE_PROMPT = (
    "A single Roblox-style low poly knife, {prompt}. "
    "The knife should be shown from a side profile view, centered on a plain solid white background. "
    "High quality, clean topology aesthetic, vibrant colors, stylized 3D render look."
)


def build_style_prompt(prompt: str) -> str:
    """Wrap the user's description in the fixed visual style."""
    return STYLE_PROMPT.format(prompt=prompt.strip())


def extract_inline_image(data: dict) -> Optional[str]:
    """Return the base64 payload of the first inline image part, if any.

    Response format: candidates[].content.parts[].inlineData.data
    """
    for candidate in data.get("candidates") or []:
        content = candidate.get("content") or {}
        for part in content.get("parts") or []:
            inline_data = part.get("inlineData") or {}
            if inline_data.get("data"):
                return inline_data["data"]
    return None


class GeminiGenerator(ImageGenerator):
    """
    Gemini 2.5 Flash image generator.

    Sends the style-wrapped prompt to the generateContent endpoint asking for
    a square image and returns the first inline image as a data URI.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = GEMINI_MODEL,
        client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
    ):
        """
        Initialize the Gemini generator.

        Args:
            api_key: Google API key. If not provided, reads from GOOGLE_API_KEY
                     or API_KEY env vars.
            model: Gemini model identifier
            client: Optional preconfigured httpx client (owned by the caller)
            timeout: Request timeout in seconds, None to wait indefinitely
        """
        self.api_key = api_key or os.environ.get("GOOGLE_API_KEY") or os.environ.get("API_KEY")
        if not self.api_key:
            raise ValueError(
                "Google API key not provided. Set GOOGLE_API_KEY environment variable "
                "or pass api_key parameter."
            )
        self.model = model
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    def name(self) -> str:
        return "gemini"

    @property
    def endpoint(self) -> str:
        return f"{GEMINI_API_BASE}/{self.model}:generateContent"

    def build_payload(self, prompt: str) -> dict:
        """Build the generateContent request body for a square image."""
        return {
            "contents": [{
                "parts": [{"text": build_style_prompt(prompt)}]
            }],
            "generationConfig": {
                "responseModalities": ["IMAGE"],
                "imageConfig": {
                    "aspectRatio": "1:1",
                },
            },
        }

    async def generate(self, prompt: str) -> str:
        """
        Generate a concept image for the prompt.

        Args:
            prompt: The user's knife description

        Returns:
            `data:image/png;base64,...` URI

        Raises:
            ValueError: If the prompt is blank
            RuntimeError: If the API answers with an error status
            GenerationError: If the response holds no inline image data
        """
        if not prompt or not prompt.strip():
            raise ValueError("Prompt must not be empty")

        logger.debug("Requesting concept image from %s", self.model)
        response = await self._client.post(
            self.endpoint,
            params={"key": self.api_key},
            json=self.build_payload(prompt),
            headers={"Content-Type": "application/json"},
        )

        if not response.is_success:
            raise RuntimeError(f"Gemini API error {response.status_code}: {response.text}")

        data = response.json()

        image_data = extract_inline_image(data)
        if image_data:
            return f"data:image/png;base64,{image_data}"

        # Check for blocked content
        candidates = data.get("candidates") or []
        if candidates and candidates[0].get("finishReason") == "SAFETY":
            raise GenerationError("Image generation blocked by safety filters.")

        raise GenerationError("Failed to generate image data from Gemini.")

    async def aclose(self) -> None:
        """Close the HTTP client if this generator created it."""
        if self._owns_client:
            await self._client.aclose()
