"""Result type produced by the document analysis engine."""

from dataclasses import dataclass, field
from typing import Any

from docverify.ocr.tesseract_engine import OCRStatus

from .catalog import DocumentType
from .quality import QualityStatus


@dataclass
class AnalysisResult:
    """Heuristic judgment of one identity document photo.

    Filled stage by stage while the engine runs; stages that never ran
    leave their defaults in place.
    """

    document_type: DocumentType = DocumentType.UNKNOWN
    confidence: float = 0.0
    is_valid_document: bool = False
    extracted_text: str = ""
    detected_fields: dict[str, str | None] = field(default_factory=dict)
    quality_score: float = 0.0
    suspicious_indicators: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)
    ocr_status: OCRStatus = OCRStatus.FAILED
    quality_status: QualityStatus = QualityStatus.DEGRADED

    @property
    def field_count(self) -> int:
        """Number of fields extracted for the detected type, found or not.

        A classified document always carries its full key set, so only an
        unknown document counts zero.
        """
        return len(self.detected_fields)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-serializable form with camelCase keys."""
        return {
            "documentType": self.document_type.value,
            "confidence": self.confidence,
            "isValidDocument": self.is_valid_document,
            "extractedText": self.extracted_text,
            "detectedFields": dict(self.detected_fields),
            "qualityScore": self.quality_score,
            "suspiciousIndicators": list(self.suspicious_indicators),
            "recommendations": list(self.recommendations),
            "ocrStatus": self.ocr_status.value,
            "qualityStatus": self.quality_status.value,
        }
