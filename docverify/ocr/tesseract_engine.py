"""Tesseract OCR engine wrapper with word-level extraction.

Runs bilingual (French + English) recognition over prepared document
images and reports full text, a mean confidence and per-word records.
"""

from dataclasses import dataclass, field
from enum import StrEnum

import numpy as np
import pytesseract
from PIL import Image

from docverify.utils.logger import get_logger

logger = get_logger(__name__)


class OCRStatus(StrEnum):
    """Outcome of a recognition run."""

    RECOGNIZED = "recognized"
    FAILED = "failed"


@dataclass
class BoundingBox:
    """Axis-aligned bounding box for a detected element."""

    x: int
    y: int
    width: int
    height: int


@dataclass
class OCRWord:
    """A single word extracted by OCR with position and confidence (0-100)."""

    text: str
    bbox: BoundingBox
    confidence: float
    line_num: int = 0


@dataclass
class OCRResult:
    """Complete OCR result for a document image.

    ``confidence`` is the mean word confidence on Tesseract's 0-100 scale.
    """

    text: str
    words: list[OCRWord] = field(default_factory=list)
    language: str = "fra+eng"
    confidence: float = 0.0
    status: OCRStatus = OCRStatus.RECOGNIZED

    @classmethod
    def failed(cls, language: str) -> "OCRResult":
        """Empty result standing in for a recognition failure."""
        return cls(text="", language=language, status=OCRStatus.FAILED)


class TesseractEngine:
    """Wrapper around Tesseract OCR for identity document text extraction.

    Args:
        tesseract_cmd: Path to the Tesseract executable.
            If ``None``, uses the system default.
        languages: Tesseract language string, e.g. ``"fra+eng"``.
        timeout: Seconds before a recognition call is aborted (0 disables).
    """

    def __init__(
        self,
        tesseract_cmd: str | None = None,
        languages: str = "fra+eng",
        timeout: float = 0,
    ) -> None:
        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd
        self.languages = languages
        self.timeout = timeout

    def is_available(self) -> bool:
        """Check that the Tesseract binary can be invoked."""
        try:
            version = pytesseract.get_tesseract_version()
        except pytesseract.TesseractNotFoundError:
            logger.warning("Tesseract executable not found")
            return False
        logger.debug("Tesseract version %s", version)
        return True

    def extract_text(self, image: np.ndarray, psm: int = 3) -> OCRResult:
        """Extract text from an image with word-level confidences.

        Args:
            image: Input image as a numpy array.
            psm: Tesseract page segmentation mode.

        Returns:
            OCRResult containing full text, word details, and confidence.

        Raises:
            pytesseract.TesseractError: If Tesseract fails on the image.
            RuntimeError: If the recognition exceeds the configured timeout.
        """
        config = f"--psm {psm}"

        pil_image = Image.fromarray(image)
        text = pytesseract.image_to_string(
            pil_image, lang=self.languages, config=config, timeout=self.timeout
        )

        data = pytesseract.image_to_data(
            pil_image,
            lang=self.languages,
            config=config,
            timeout=self.timeout,
            output_type=pytesseract.Output.DICT,
        )

        words: list[OCRWord] = []
        total_conf = 0.0

        for i in range(len(data["text"])):
            conf = float(data["conf"][i])
            word_text = str(data["text"][i]).strip()

            if conf >= 0 and word_text:
                words.append(
                    OCRWord(
                        text=word_text,
                        bbox=BoundingBox(
                            x=data["left"][i],
                            y=data["top"][i],
                            width=data["width"][i],
                            height=data["height"][i],
                        ),
                        confidence=conf,
                        line_num=data["line_num"][i],
                    )
                )
                total_conf += conf

        avg_conf = total_conf / len(words) if words else 0.0

        logger.info(
            "OCR extracted %d words with average confidence %.1f",
            len(words),
            avg_conf,
        )
        return OCRResult(
            text=text,
            words=words,
            language=self.languages,
            confidence=avg_conf,
        )
