"""Image preparation pipeline for identity document OCR.

Decodes an uploaded image buffer, brings it to a bounded canonical size,
normalizes contrast, sharpens, converts to grayscale and re-encodes it as
a high-quality JPEG, keeping track of image metadata along the way.
"""

import io
from dataclasses import dataclass

import numpy as np
from PIL import Image, ImageOps

from docverify.utils.config import PreprocessingConfig
from docverify.utils.logger import get_logger

from .enhance import normalize_contrast, resize_within, sharpen, to_gray

logger = get_logger(__name__)


@dataclass
class ImageMetadata:
    """Dimensions and pixel density read from an encoded image."""

    width: int
    height: int
    density: float | None
    format: str | None


@dataclass
class PreparedImage:
    """An image ready for OCR, both encoded and as pixels.

    ``pixels`` is decoded from ``data``, so recognition sees the same JPEG
    that quality and density checks read.
    """

    data: bytes
    pixels: np.ndarray
    source_metadata: ImageMetadata


def read_metadata(data: bytes) -> ImageMetadata:
    """Read image dimensions and density without decoding pixels.

    Args:
        data: Encoded image bytes (JPEG, PNG, ...).

    Returns:
        Image metadata. ``density`` is ``None`` when the file carries none.

    Raises:
        PIL.UnidentifiedImageError: If the bytes are not a readable image.
    """
    with Image.open(io.BytesIO(data)) as img:
        return _metadata_of(img)


def decode_pixels(data: bytes) -> np.ndarray:
    """Decode an encoded image into a pixel array."""
    with Image.open(io.BytesIO(data)) as img:
        return np.array(img)


def _metadata_of(img: Image.Image) -> ImageMetadata:
    dpi = img.info.get("dpi")
    return ImageMetadata(
        width=img.width,
        height=img.height,
        density=float(dpi[0]) if dpi else None,
        format=img.format,
    )


class PreprocessingPipeline:
    """Prepares document photos for character recognition.

    Args:
        config: Preprocessing configuration controlling size and filters.
    """

    def __init__(self, config: PreprocessingConfig) -> None:
        self.config = config

    def process(self, image_bytes: bytes) -> PreparedImage:
        """Run the full preparation sequence on an encoded image.

        Args:
            image_bytes: Raw uploaded image bytes.

        Returns:
            The prepared grayscale image, re-encoded as JPEG.

        Raises:
            PIL.UnidentifiedImageError: If the bytes cannot be decoded.
        """
        with Image.open(io.BytesIO(image_bytes)) as img:
            source = _metadata_of(img)
            pixels = np.array(ImageOps.exif_transpose(img).convert("RGB"))

        result = resize_within(pixels, self.config.max_width, self.config.max_height)

        if self.config.normalize_enabled:
            result = normalize_contrast(result)

        if self.config.sharpen_enabled:
            result = sharpen(
                result,
                sigma=self.config.sharpen_sigma,
                amount=self.config.sharpen_amount,
            )

        result = to_gray(result)
        data = self._encode(result, source.density)

        logger.info(
            "Prepared image %dx%d -> %dx%d (%d bytes)",
            source.width,
            source.height,
            result.shape[1],
            result.shape[0],
            len(data),
        )
        return PreparedImage(
            data=data, pixels=decode_pixels(data), source_metadata=source
        )

    def _encode(self, pixels: np.ndarray, density: float | None) -> bytes:
        """Encode grayscale pixels as JPEG, preserving the source density.

        Args:
            pixels: Grayscale image.
            density: Source pixel density in DPI, if known.

        Returns:
            JPEG bytes.
        """
        options: dict[str, object] = {"quality": self.config.jpeg_quality}
        if density:
            options["dpi"] = (round(density), round(density))

        buf = io.BytesIO()
        Image.fromarray(pixels).save(buf, format="JPEG", **options)
        return buf.getvalue()
