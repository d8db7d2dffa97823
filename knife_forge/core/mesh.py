"""
Image-to-3D clients for Knife Forge.

Converts a concept image into a GLB mesh via the Hugging Face inference API,
or hands back a placeholder asset when no Hugging Face token is configured.
"""

import asyncio
import logging
import os
from abc import ABC, abstractmethod
from typing import Optional

import httpx

from ..config import DEFAULT_INFERENCE_URL, DEFAULT_MESH_MODEL, DEFAULT_PLACEHOLDER_URL
from ..data_uri import decode_data_uri
from ..models import ModelReference


logger = logging.getLogger(__name__)

MODEL_LOADING_MESSAGE = "The 3D generation model is currently loading. Please try again in a minute."


class MeshError(Exception):
    """Base exception for mesh provider errors."""
    pass


class ModelLoadingError(MeshError):
    """The inference model is still being loaded (HTTP 503)."""
    pass


class ProviderError(MeshError):
    """Any other non-success answer from the mesh provider."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class MeshConverter(ABC):
    """Abstract base class for image-to-3D converters."""

    @abstractmethod
    async def convert(self, image_ref: str) -> ModelReference:
        """Convert a concept image (data URI) to a GLB model reference."""
        pass

    @abstractmethod
    def name(self) -> str:
        """Return the converter name."""
        pass

    async def aclose(self) -> None:
        """Release any open connections."""

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()


class HuggingFaceConverter(MeshConverter):
    """Client for a Hugging Face image-to-3D inference endpoint."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model_id: str = DEFAULT_MESH_MODEL,
        base_url: str = DEFAULT_INFERENCE_URL,
        client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
    ):
        """
        Initialize the converter.

        Args:
            api_key: Hugging Face token. If not provided, reads from
                     HUGGINGFACE_API_KEY or HF_TOKEN env vars.
            model_id: Inference model, e.g. "google/shap-e"
            base_url: Inference host
            client: Optional preconfigured httpx client (owned by the caller)
            timeout: Request timeout in seconds, None to wait indefinitely
        """
        self.api_key = api_key or os.environ.get("HUGGINGFACE_API_KEY") or os.environ.get("HF_TOKEN")
        if not self.api_key:
            raise ValueError(
                "Hugging Face token not provided. Set HUGGINGFACE_API_KEY environment variable "
                "or pass api_key parameter."
            )
        self.model_id = model_id
        self.base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    def name(self) -> str:
        return "huggingface"

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model_id}"

    async def convert(self, image_ref: str) -> ModelReference:
        """
        Submit the image bytes and return the GLB the model produces.

        Args:
            image_ref: Concept image as a base64 data URI

        Returns:
            ModelReference holding the GLB bytes

        Raises:
            ValueError: If image_ref is not a base64 data URI
            ModelLoadingError: If the model is still loading (503)
            ProviderError: For any other non-success status
        """
        _, image_bytes = decode_data_uri(image_ref)

        logger.debug("Submitting %d image bytes to %s", len(image_bytes), self.model_id)
        response = await self._client.post(
            self.endpoint,
            content=image_bytes,
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
        )

        if not response.is_success:
            if response.status_code == 503:
                raise ModelLoadingError(MODEL_LOADING_MESSAGE)
            detail = response.text or response.reason_phrase
            raise ProviderError(f"Hugging Face API Error: {detail}", status_code=response.status_code)

        return ModelReference(content=response.content)

    async def aclose(self) -> None:
        """Close the HTTP client if this converter created it."""
        if self._owns_client:
            await self._client.aclose()


class PlaceholderConverter(MeshConverter):
    """Offline stand-in used when no Hugging Face token is configured.

    Waits a fixed delay and returns a static sample GLB. Demonstration only.
    """

    def __init__(self, delay: float = 3.0, placeholder_url: str = DEFAULT_PLACEHOLDER_URL):
        self.delay = delay
        self.placeholder_url = placeholder_url

    def name(self) -> str:
        return "placeholder"

    async def convert(self, image_ref: str) -> ModelReference:
        logger.warning("HUGGINGFACE_API_KEY missing. Providing placeholder GLB.")
        await asyncio.sleep(self.delay)
        return ModelReference(url=self.placeholder_url)


def get_mesh_converter(
    api_key: Optional[str],
    model_id: str = DEFAULT_MESH_MODEL,
    base_url: str = DEFAULT_INFERENCE_URL,
    fallback_delay: float = 3.0,
    placeholder_url: str = DEFAULT_PLACEHOLDER_URL,
    timeout: Optional[float] = None,
) -> MeshConverter:
    """Pick the Hugging Face converter when a token is present, else the placeholder."""
    if api_key:
        return HuggingFaceConverter(
            api_key=api_key,
            model_id=model_id,
            base_url=base_url,
            timeout=timeout,
        )
    return PlaceholderConverter(delay=fallback_delay, placeholder_url=placeholder_url)
