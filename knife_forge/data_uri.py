"""Helpers for `data:<mime>;base64,<payload>` strings."""

import base64
import binascii


def encode_data_uri(data: bytes, mime_type: str = "image/png") -> str:
    """Wrap raw bytes in a base64 data URI."""
    return f"data:{mime_type};base64,{base64.b64encode(data).decode()}"


def decode_data_uri(uri: str) -> tuple[str, bytes]:
    """Split a base64 data URI into (mime_type, raw bytes).

    Raises:
        ValueError: If the string is not a base64 data URI.
    """
    if not uri.startswith("data:") or "," not in uri:
        raise ValueError("Not a data URI")

    header, payload = uri[len("data:"):].split(",", 1)
    if not header.endswith(";base64"):
        raise ValueError("Only base64 data URIs are supported")

    mime_type = header[: -len(";base64")] or "application/octet-stream"
    try:
        return mime_type, base64.b64decode(payload, validate=True)
    except binascii.Error as e:
        raise ValueError(f"Malformed base64 payload: {e}") from e
