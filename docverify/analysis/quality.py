"""Image and text quality scoring.

Combines three independent signals: image resolution, OCR confidence and
the number of recognized words. A metadata read failure does not abort
the assessment; the resolution signal is then dropped and the result is
marked as degraded.
"""

from dataclasses import dataclass
from enum import StrEnum

from docverify.ocr.tesseract_engine import OCRResult
from docverify.preprocessing.pipeline import read_metadata
from docverify.utils.logger import get_logger

logger = get_logger(__name__)


class QualityStatus(StrEnum):
    """Whether every quality signal could be measured."""

    SCORED = "scored"
    DEGRADED = "degraded"


@dataclass
class QualityAssessment:
    """Quality score in [0, 1] with its per-signal breakdown."""

    score: float
    status: QualityStatus
    resolution_points: float = 0.0
    ocr_points: float = 0.0
    text_points: float = 0.0


def resolution_points(width: int, height: int) -> float:
    if width >= 800 and height >= 600:
        return 0.3
    if width >= 400 and height >= 300:
        return 0.15
    return 0.0


def ocr_confidence_points(confidence: float) -> float:
    if confidence > 80:
        return 0.4
    if confidence > 60:
        return 0.2
    if confidence > 40:
        return 0.1
    return 0.0


def word_count_points(word_count: int) -> float:
    if word_count > 50:
        return 0.3
    if word_count > 20:
        return 0.2
    if word_count > 10:
        return 0.1
    return 0.0


def assess_quality(image_data: bytes, ocr_result: OCRResult) -> QualityAssessment:
    """Score the prepared image and its recognition output.

    Args:
        image_data: Encoded prepared image.
        ocr_result: Recognition output for that image.

    Returns:
        The quality assessment, clamped to [0, 1].
    """
    status = QualityStatus.SCORED
    res_points = 0.0
    try:
        metadata = read_metadata(image_data)
        res_points = resolution_points(metadata.width, metadata.height)
    except Exception as exc:
        logger.warning("Image metadata unavailable for quality scoring: %s", exc)
        status = QualityStatus.DEGRADED

    ocr_points = ocr_confidence_points(ocr_result.confidence)
    text_points = word_count_points(len(ocr_result.words))
    score = min(max(res_points + ocr_points + text_points, 0.0), 1.0)

    logger.debug(
        "Quality %.2f (resolution %.2f, ocr %.2f, text %.2f)",
        score,
        res_points,
        ocr_points,
        text_points,
    )
    return QualityAssessment(
        score=score,
        status=status,
        resolution_points=res_points,
        ocr_points=ocr_points,
        text_points=text_points,
    )
