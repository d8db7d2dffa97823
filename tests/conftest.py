"""Shared fakes for Knife Forge tests."""

import pytest

from knife_forge.core import MeshConverter
from knife_forge.data_uri import encode_data_uri
from knife_forge.generators import ImageGenerator
from knife_forge.models import ModelReference


PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-png"
GLB_BYTES = b"glTF\x02\x00\x00\x00fake-glb"
IMAGE_URI = encode_data_uri(PNG_BYTES)


class FakeGenerator(ImageGenerator):
    """Image generator that returns a fixed data URI or raises."""

    def __init__(self, result: str = IMAGE_URI, error: Exception = None):
        self.result = result
        self.error = error
        self.calls = []
        self.closed = False

    def name(self) -> str:
        return "fake-image"

    async def generate(self, prompt: str) -> str:
        self.calls.append(prompt)
        if self.error:
            raise self.error
        return self.result

    async def aclose(self) -> None:
        self.closed = True


class FakeConverter(MeshConverter):
    """Mesh converter that returns in-memory GLB bytes or raises."""

    def __init__(self, result: ModelReference = None, error: Exception = None):
        self.result = result or ModelReference(content=GLB_BYTES)
        self.error = error
        self.calls = []
        self.closed = False

    def name(self) -> str:
        return "fake-mesh"

    async def convert(self, image_ref: str) -> ModelReference:
        self.calls.append(image_ref)
        if self.error:
            raise self.error
        return self.result

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def generator():
    return FakeGenerator()


@pytest.fixture
def converter():
    return FakeConverter()
