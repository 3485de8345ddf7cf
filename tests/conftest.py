"""Shared test fixtures for the document verification test suite."""

import io
from pathlib import Path

import numpy as np
import pytest
from PIL import Image


def encode_image(
    width: int = 1000,
    height: int = 700,
    fmt: str = "PNG",
    dpi: tuple[int, int] | None = None,
) -> bytes:
    """Encode a synthetic document-like image (dark text band on white)."""
    pixels = np.full((height, width, 3), 240, dtype=np.uint8)
    pixels[height // 3 : height // 2, width // 10 : width - width // 10] = (20, 20, 20)
    buf = io.BytesIO()
    options = {"dpi": dpi} if dpi else {}
    Image.fromarray(pixels).save(buf, format=fmt, **options)
    return buf.getvalue()


@pytest.fixture
def make_image():
    """Factory fixture building encoded test images."""
    return encode_image


@pytest.fixture
def document_image_bytes() -> bytes:
    """A 1000x700 PNG photo without density information."""
    return encode_image()


@pytest.fixture
def small_image_bytes() -> bytes:
    """A 300x200 PNG photo, below every resolution bucket."""
    return encode_image(width=300, height=200)


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent
