"""
Saving generated assets to disk.
"""

import time
from pathlib import Path
from typing import Optional

import httpx

from .data_uri import decode_data_uri
from .models import ModelReference


def download_filename(product: str, now: Optional[float] = None, suffix: str = ".glb") -> str:
    """Build `<product>_<epoch-millis><suffix>`."""
    seconds = time.time() if now is None else now
    return f"{product}_{int(seconds * 1000)}{suffix}"


async def save_model(
    model_ref: Optional[ModelReference],
    output_dir: Path,
    product: str,
    client: Optional[httpx.AsyncClient] = None,
) -> Optional[Path]:
    """
    Write the GLB behind a model reference to a timestamped file.

    Args:
        model_ref: Reference to save. None makes this a no-op.
        output_dir: Directory to write into (created if missing)
        product: Filename prefix
        client: Optional httpx client for remote references

    Returns:
        Path of the written file, or None if there was nothing to save
    """
    if model_ref is None:
        return None

    if model_ref.is_remote:
        if client is None:
            async with httpx.AsyncClient() as own_client:
                response = await own_client.get(model_ref.url, follow_redirects=True)
        else:
            response = await client.get(model_ref.url, follow_redirects=True)
        response.raise_for_status()
        content = response.content
    else:
        content = model_ref.content

    output_dir.mkdir(parents=True, exist_ok=True)
    output_path = output_dir / download_filename(product)
    with open(output_path, "wb") as f:
        f.write(content)

    return output_path


def save_concept_image(image_ref: str, output_dir: Path, product: str) -> Path:
    """Write the concept image data URI to `<product>_<epoch-millis>.png`."""
    _, image_bytes = decode_data_uri(image_ref)

    output_dir.mkdir(parents=True, exist_ok=True)
    output_path = output_dir / download_filename(product, suffix=".png")
    with open(output_path, "wb") as f:
        f.write(image_bytes)

    return output_path
