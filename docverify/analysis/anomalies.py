"""Suspicious indicator detection on recognized documents.

Runs independent heuristic checks on the OCR output and image metadata.
Each triggered check contributes one human-readable indicator.
"""

import re

from docverify.ocr.tesseract_engine import OCRResult
from docverify.preprocessing.pipeline import read_metadata
from docverify.utils.logger import get_logger

logger = get_logger(__name__)

NON_STANDARD_CHARACTERS = "Caractères non-standards détectés"
REPEATED_WORDS = "Répétitions de mots suspectes"
LOW_QUALITY_ZONES = "Nombreuses zones de faible qualité"
LOW_DENSITY = "Résolution très faible (possible capture d'écran)"
ANALYSIS_ERROR = "Erreur lors de l'analyse - vérification manuelle recommandée"

_NON_ASCII = re.compile(r"[^\x00-\x7F]")

MIN_TEXT_LENGTH_FOR_CHARSET = 50
MIN_WORDS_FOR_REPETITION = 20
MIN_DISTINCT_RATIO = 0.5
LOW_WORD_CONFIDENCE = 50
MAX_LOW_CONFIDENCE_SHARE = 0.3
MIN_DENSITY_DPI = 72


def has_non_standard_characters(text: str) -> bool:
    return len(text) > MIN_TEXT_LENGTH_FOR_CHARSET and bool(_NON_ASCII.search(text))


def has_repeated_words(text: str) -> bool:
    words = text.split()
    if len(words) <= MIN_WORDS_FOR_REPETITION:
        return False
    return len(set(words)) / len(words) < MIN_DISTINCT_RATIO


def has_low_quality_zones(ocr_result: OCRResult) -> bool:
    low = [w for w in ocr_result.words if w.confidence < LOW_WORD_CONFIDENCE]
    return len(low) > len(ocr_result.words) * MAX_LOW_CONFIDENCE_SHARE


def detect_anomalies(ocr_result: OCRResult, image_data: bytes) -> list[str]:
    """Collect suspicious indicators for one analyzed document.

    A failure while checking is itself reported as an indicator.

    Args:
        ocr_result: Recognition output.
        image_data: Encoded prepared image.

    Returns:
        Ordered list of indicator descriptions, empty when clean.
    """
    suspicious: list[str] = []

    try:
        text = ocr_result.text

        if has_non_standard_characters(text):
            suspicious.append(NON_STANDARD_CHARACTERS)

        if has_repeated_words(text):
            suspicious.append(REPEATED_WORDS)

        if has_low_quality_zones(ocr_result):
            suspicious.append(LOW_QUALITY_ZONES)

        # A density under 72 DPI usually means a photo of a screen.
        density = read_metadata(image_data).density
        if density and density < MIN_DENSITY_DPI:
            suspicious.append(LOW_DENSITY)

    except Exception as exc:
        logger.warning("Anomaly detection failed: %s", exc)
        suspicious.append(ANALYSIS_ERROR)

    if suspicious:
        logger.info("Detected %d suspicious indicators", len(suspicious))
    return suspicious
