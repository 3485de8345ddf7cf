"""Image enhancement primitives for identity document photos.

Provides bounded resizing, contrast normalization, unsharp-mask
sharpening, and grayscale conversion to improve text readability for OCR.
"""

import cv2
import numpy as np

from docverify.utils.logger import get_logger

logger = get_logger(__name__)


def to_gray(image: np.ndarray) -> np.ndarray:
    """Convert an image to grayscale if it has color channels.

    Args:
        image: Input image (RGB or grayscale).

    Returns:
        Grayscale image.
    """
    if len(image.shape) == 3:
        return cv2.cvtColor(image, cv2.COLOR_RGB2GRAY)
    return image


def resize_within(image: np.ndarray, max_width: int, max_height: int) -> np.ndarray:
    """Shrink an image to fit inside a bounding box, never enlarging it.

    Args:
        image: Input image.
        max_width: Maximum output width in pixels.
        max_height: Maximum output height in pixels.

    Returns:
        The resized image, or the input unchanged if it already fits.
    """
    height, width = image.shape[:2]
    scale = min(max_width / width, max_height / height, 1.0)
    if scale >= 1.0:
        return image

    size = (max(1, round(width * scale)), max(1, round(height * scale)))
    logger.debug("Resizing %dx%d -> %dx%d", width, height, size[0], size[1])
    return cv2.resize(image, size, interpolation=cv2.INTER_AREA)


def normalize_contrast(
    image: np.ndarray, low_percentile: float = 1.0, high_percentile: float = 99.0
) -> np.ndarray:
    """Stretch pixel intensities so the given percentiles span 0-255.

    Args:
        image: Input image (RGB or grayscale).
        low_percentile: Percentile mapped to black.
        high_percentile: Percentile mapped to white.

    Returns:
        Contrast-normalized image of the same shape.
    """
    low, high = np.percentile(to_gray(image), (low_percentile, high_percentile))
    if high <= low:
        return image

    stretched = (image.astype(np.float32) - low) * (255.0 / (high - low))
    logger.debug("Normalized contrast (low=%.1f, high=%.1f)", low, high)
    return np.clip(stretched, 0, 255).astype(np.uint8)


def sharpen(image: np.ndarray, sigma: float = 1.0, amount: float = 1.0) -> np.ndarray:
    """Sharpen an image with an unsharp mask.

    Args:
        image: Input image (RGB or grayscale).
        sigma: Gaussian blur sigma used to build the mask.
        amount: Strength of the sharpening.

    Returns:
        Sharpened image.
    """
    blurred = cv2.GaussianBlur(image, (0, 0), sigma)
    result = cv2.addWeighted(image, 1.0 + amount, blurred, -amount, 0)
    logger.debug("Applied unsharp mask (sigma=%.1f, amount=%.1f)", sigma, amount)
    return result
