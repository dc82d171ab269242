"""
Shared fixtures and helpers for the poster generator tests.
"""

import base64
import os
import sys
from io import BytesIO

# Ensure project root is in path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from PIL import Image

TEST_PROMPT = "test prompt"
TEST_API_KEY = "test-key"


def create_test_image_bytes(fmt: str = "PNG", color: str = "blue") -> bytes:
    """Create a small test image and return its encoded bytes."""
    img = Image.new("RGB", (16, 16), color=color)
    buffer = BytesIO()
    img.save(buffer, format=fmt)
    return buffer.getvalue()


def create_test_image_base64(fmt: str = "PNG") -> str:
    return base64.b64encode(create_test_image_bytes(fmt)).decode("ascii")


class FakeUpload:
    """Mimics streamlit's UploadedFile (sync read, .name, .type)."""

    def __init__(self, content: bytes, name: str = "photo.jpg", type: str = "image/jpeg"):
        self._content = content
        self.name = name
        self.type = type

    def read(self):
        return self._content


class FakeAsyncUpload:
    """Mimics starlette's UploadFile (async read, .filename, .content_type)."""

    def __init__(self, content: bytes, filename: str = "photo.jpg", content_type: str = "image/jpeg"):
        self._content = content
        self.filename = filename
        self.content_type = content_type

    async def read(self):
        return self._content
