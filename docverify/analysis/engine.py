"""Autonomous identity document analysis engine.

Turns an uploaded photo into a heuristic judgment: prepares the image,
recognizes text, classifies the document, extracts identity fields,
scores quality, flags anomalies and derives a confidence score with
recommendations. No network calls and no persistence.
"""

import io
from typing import Any

import numpy as np
from PIL import Image

from docverify.ocr.tesseract_engine import OCRResult, TesseractEngine
from docverify.preprocessing.pipeline import PreparedImage, PreprocessingPipeline
from docverify.utils.config import AppConfig
from docverify.utils.logger import get_logger

from .anomalies import detect_anomalies
from .classifier import DocumentClassifier
from .field_extractor import FieldExtractor
from .quality import assess_quality
from .result import AnalysisResult
from .scoring import TECHNICAL_ERROR, calculate_confidence, generate_recommendations

logger = get_logger(__name__)


class DocumentAnalysisEngine:
    """Rule-based OCR and classification engine for identity documents.

    The engine holds no per-call state, so one instance can serve
    concurrent calls.

    Args:
        config: Application configuration object.
        ocr_engine: OCR backend; built from ``config.ocr`` when omitted.
    """

    def __init__(
        self,
        config: AppConfig | None = None,
        ocr_engine: TesseractEngine | None = None,
    ) -> None:
        self.config = config or AppConfig()
        self.preprocessing = PreprocessingPipeline(self.config.preprocessing)
        self.ocr_engine = ocr_engine or TesseractEngine(
            tesseract_cmd=self.config.ocr.tesseract_cmd,
            languages=self.config.ocr.languages,
            timeout=self.config.ocr.timeout,
        )
        self.classifier = DocumentClassifier(self.config.analysis.min_pattern_matches)
        self.field_extractor = FieldExtractor()

    def initialize(self) -> bool:
        """Check that image processing and OCR are usable.

        Returns:
            ``True`` when the engine is ready. Failures are logged, never raised.
        """
        logger.info("Initializing autonomous analysis engine")
        try:
            self._check_capabilities()
        except Exception as exc:
            logger.warning("Analysis engine self-check failed: %s", exc)
            return False

        if not self.ocr_engine.is_available():
            logger.warning("Analysis engine started without OCR support")
            return False

        logger.info("Autonomous analysis engine ready")
        return True

    def _check_capabilities(self) -> None:
        buf = io.BytesIO()
        Image.fromarray(np.full((8, 8), 255, dtype=np.uint8)).save(buf, format="PNG")
        self.preprocessing.process(buf.getvalue())

    def analyze_document(
        self, image_bytes: bytes, options: dict[str, Any] | None = None
    ) -> AnalysisResult:
        """Analyze one identity document photo.

        Args:
            image_bytes: Raw uploaded image (JPEG, PNG, ...).
            options: Caller context such as ``userId`` or ``originalName``;
                only logged.

        Returns:
            The analysis result. On an unexpected failure, the partially
            filled result with a technical-error recommendation.
        """
        logger.info("Autonomous analysis started (%d bytes)", len(image_bytes))
        if options:
            logger.debug("Analysis options: %s", options)

        analysis = AnalysisResult()

        try:
            prepared = self.preprocessing.process(image_bytes)

            ocr_result = self._recognize(prepared)
            analysis.extracted_text = ocr_result.text
            analysis.ocr_status = ocr_result.status

            analysis.document_type = self.classifier.classify(ocr_result.text)
            analysis.detected_fields = self.field_extractor.extract(
                ocr_result.text, analysis.document_type
            )

            quality = assess_quality(prepared.data, ocr_result)
            analysis.quality_score = quality.score
            analysis.quality_status = quality.status

            analysis.suspicious_indicators = detect_anomalies(ocr_result, prepared.data)

            analysis.confidence = calculate_confidence(analysis)
            analysis.is_valid_document = (
                analysis.confidence > self.config.analysis.validity_threshold
            )
            analysis.recommendations = generate_recommendations(analysis)

            logger.info(
                "Analysis complete: %s, confidence %.1f%%",
                analysis.document_type,
                analysis.confidence * 100,
            )
        except Exception:
            logger.exception("Autonomous analysis failed")
            analysis.recommendations.append(TECHNICAL_ERROR)

        return analysis

    def _recognize(self, prepared: PreparedImage) -> OCRResult:
        """Run OCR, turning any failure into an empty result."""
        try:
            return self.ocr_engine.extract_text(prepared.pixels, psm=self.config.ocr.psm)
        except Exception as exc:
            logger.error("OCR failed: %s", exc)
            return OCRResult.failed(self.config.ocr.languages)
