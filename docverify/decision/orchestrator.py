"""Hybrid decision layer around the autonomous analysis engine.

Wraps one engine call with an approval policy: clean, highly confident
results are approved automatically, weak ones are routed to manual review
with a priority. Results are enriched with presentation metadata and the
instance keeps running usage statistics.
"""

import threading
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import StrEnum
from typing import Any

from docverify.analysis.engine import DocumentAnalysisEngine
from docverify.analysis.result import AnalysisResult
from docverify.utils.config import AppConfig
from docverify.utils.logger import get_logger

logger = get_logger(__name__)

ERROR_RECOMMENDATION = "Erreur technique - vérification manuelle obligatoire"

STEP_MARK_VERIFIED = "Marquer l'utilisateur comme vérifié"
STEP_SEND_NOTIFICATION = "Envoyer notification de validation"
STEP_CREATE_TICKET = "Créer ticket de review manuelle"
STEP_NOTIFY_MODERATION = "Notifier l'équipe de modération"
STEP_BETTER_PHOTO = "Demander à l'utilisateur une photo de meilleure qualité"

CAPABILITIES = [
    "document_classification",
    "field_extraction",
    "quality_assessment",
    "fraud_detection",
    "auto_validation",
]


class Provider(StrEnum):
    """Which path produced a verdict."""

    AUTONOMOUS = "autonomous"
    AUTONOMOUS_ONLY = "autonomous_only"
    ERROR = "error"


class ReviewPriority(StrEnum):
    """Urgency of a manual review."""

    HIGH = "high"
    NORMAL = "normal"


@dataclass
class RunningStats:
    """Usage counters of one verifier instance, safe to share across threads."""

    total_analyses: int = 0
    autonomous_successes: int = 0
    fallback_to_manual: int = 0
    _lock: threading.Lock = field(
        default_factory=threading.Lock, init=False, repr=False, compare=False
    )

    def record_analysis(self) -> int:
        """Count a new analysis and return its sequence number."""
        with self._lock:
            self.total_analyses += 1
            return self.total_analyses

    def record_autonomous_success(self) -> None:
        with self._lock:
            self.autonomous_successes += 1

    def record_manual_fallback(self) -> None:
        with self._lock:
            self.fallback_to_manual += 1

    def snapshot(self) -> dict[str, int]:
        """Return a consistent copy of the counters."""
        with self._lock:
            return {
                "totalAnalyses": self.total_analyses,
                "autonomousSuccesses": self.autonomous_successes,
                "fallbackToManual": self.fallback_to_manual,
            }


@dataclass
class VerificationResult:
    """Final verdict returned to callers.

    ``analysis`` is ``None`` only for the error verdict.
    """

    provider: Provider
    analysis: AnalysisResult | None = None
    processing_time: float = 0.0
    analysis_path: list[str] = field(default_factory=list)
    cost_estimate: float = 0
    requires_manual_review: bool = False
    manual_review_priority: ReviewPriority | None = None
    overall_quality: float | None = None
    next_steps: list[str] = field(default_factory=list)
    estimated_review_time: str | None = None
    timestamp: str | None = None
    version: str | None = None
    stats: dict[str, int] = field(default_factory=dict)
    success: bool = True
    error: str | None = None
    error_recommendations: list[str] = field(default_factory=list)

    @property
    def confidence(self) -> float:
        return self.analysis.confidence if self.analysis else 0.0

    @property
    def recommendations(self) -> list[str]:
        if self.analysis is None:
            return self.error_recommendations
        return self.analysis.recommendations

    @classmethod
    def failure(
        cls, message: str, analysis_path: list[str], processing_time: float
    ) -> "VerificationResult":
        """Terminal verdict for an analysis that raised."""
        return cls(
            provider=Provider.ERROR,
            processing_time=processing_time,
            analysis_path=analysis_path,
            requires_manual_review=True,
            manual_review_priority=ReviewPriority.HIGH,
            success=False,
            error=message,
            error_recommendations=[ERROR_RECOMMENDATION],
        )

    def to_dict(self) -> dict[str, Any]:
        """Return the flat, JSON-serializable verdict with camelCase keys."""
        if self.analysis is None:
            return {
                "success": self.success,
                "error": self.error,
                "provider": self.provider.value,
                "analysisPath": list(self.analysis_path),
                "processingTime": self.processing_time,
                "requiresManualReview": self.requires_manual_review,
                "manualReviewPriority": self.manual_review_priority.value
                if self.manual_review_priority
                else None,
                "recommendations": list(self.error_recommendations),
            }

        data = self.analysis.to_dict()
        data.update(
            {
                "success": self.success,
                "provider": self.provider.value,
                "processingTime": self.processing_time,
                "analysisPath": list(self.analysis_path),
                "costEstimate": self.cost_estimate,
                "requiresManualReview": self.requires_manual_review,
                "overallQuality": self.overall_quality,
                "nextSteps": list(self.next_steps),
                "timestamp": self.timestamp,
                "version": self.version,
                "stats": dict(self.stats),
            }
        )
        if self.requires_manual_review:
            data["manualReviewPriority"] = (
                self.manual_review_priority.value if self.manual_review_priority else None
            )
            data["estimatedReviewTime"] = self.estimated_review_time
        return data

    def audit_summary(self) -> dict[str, Any]:
        """Compact record to persist next to the user's document."""
        if self.analysis is None:
            return {
                "error": self.error,
                "fallbackReason": "analysis unavailable",
                "timestamp": self.timestamp
                or datetime.now(timezone.utc).isoformat(),
            }
        return {
            "confidence": self.analysis.confidence,
            "documentType": self.analysis.document_type.value,
            "qualityScore": self.analysis.quality_score,
            "provider": self.provider.value,
            "processingTime": self.processing_time,
            "timestamp": self.timestamp,
            "recommendations": list(self.analysis.recommendations),
            "suspiciousIndicators": len(self.analysis.suspicious_indicators),
        }


class HybridDocumentVerifier:
    """Decides between automatic approval and manual review.

    Args:
        config: Application configuration object.
        engine: Analysis engine; built from ``config`` when omitted.
    """

    def __init__(
        self,
        config: AppConfig | None = None,
        engine: DocumentAnalysisEngine | None = None,
    ) -> None:
        self.config = config or AppConfig()
        self.engine = engine or DocumentAnalysisEngine(self.config)
        self.thresholds = self.config.decision
        self.stats = RunningStats()
        # Tuning knob set by adapt_to_volume; not read by the decision branches.
        self.autonomous_threshold = self.thresholds.auto_approve_threshold

    def initialize(self) -> dict[str, bool]:
        """Initialize the underlying engine and report readiness."""
        logger.info("Initializing hybrid document verifier")
        autonomous_ready = self.engine.initialize()
        logger.info("Autonomous engine: %s", "OK" if autonomous_ready else "KO")
        return {"autonomousReady": autonomous_ready}

    def analyze_document(
        self, image_bytes: bytes, options: dict[str, Any] | None = None
    ) -> VerificationResult:
        """Analyze a document photo and decide how it should be handled.

        Args:
            image_bytes: Raw uploaded image.
            options: Caller context forwarded to the engine.

        Returns:
            The enriched verdict, or an error verdict. Never raises.
        """
        number = self.stats.record_analysis()
        logger.info("Hybrid analysis #%d", number)

        start = time.perf_counter()
        analysis_path: list[str] = []

        try:
            analysis = self.engine.analyze_document(image_bytes, options)
            analysis_path.append("autonomous")

            if (
                analysis.confidence > self.thresholds.auto_approve_threshold
                and not analysis.suspicious_indicators
            ):
                logger.info("Autonomous result sufficient, approving directly")
                self.stats.record_autonomous_success()
                result = VerificationResult(
                    provider=Provider.AUTONOMOUS,
                    analysis=analysis,
                    processing_time=_elapsed_ms(start),
                    analysis_path=["autonomous"],
                    cost_estimate=0,
                )
                return self.enrich_result(result)

            result = VerificationResult(
                provider=Provider.AUTONOMOUS_ONLY,
                analysis=analysis,
                processing_time=_elapsed_ms(start),
                analysis_path=analysis_path,
                cost_estimate=0,
            )

            if analysis.confidence < self.thresholds.manual_review_threshold:
                logger.info("Routing document to manual review")
                self.stats.record_manual_fallback()
                result.requires_manual_review = True
                result.manual_review_priority = (
                    ReviewPriority.HIGH
                    if analysis.confidence < self.thresholds.high_priority_threshold
                    else ReviewPriority.NORMAL
                )

            return self.enrich_result(result)

        except Exception as exc:
            logger.exception("Hybrid analysis failed")
            return VerificationResult.failure(str(exc), analysis_path, _elapsed_ms(start))

    def enrich_result(self, result: VerificationResult) -> VerificationResult:
        """Stamp provenance and derive presentation fields in place.

        Args:
            result: Verdict carrying an engine analysis.

        Returns:
            The same verdict, enriched.
        """
        result.timestamp = datetime.now(timezone.utc).isoformat()
        result.version = self.thresholds.version
        result.stats = self.stats.snapshot()
        result.overall_quality = self.calculate_overall_quality(result)
        result.next_steps = self.generate_next_steps(result)

        if result.requires_manual_review:
            result.estimated_review_time = self.estimate_review_time(result)

        return result

    def calculate_overall_quality(self, result: VerificationResult) -> float:
        """Weighted blend of confidence, image quality, fields and cleanliness."""
        analysis = result.analysis
        if analysis is None:
            return 0.0

        quality = analysis.confidence * 0.4
        quality += analysis.quality_score * 0.3
        quality += min(analysis.field_count / 5, 1.0) * 0.2
        quality += 0.1 if not analysis.suspicious_indicators else 0.0
        return min(1.0, quality)

    def generate_next_steps(self, result: VerificationResult) -> list[str]:
        steps: list[str] = []

        if result.provider == Provider.AUTONOMOUS:
            steps.append(STEP_MARK_VERIFIED)
            steps.append(STEP_SEND_NOTIFICATION)
        elif result.requires_manual_review:
            steps.append(STEP_CREATE_TICKET)
            steps.append(STEP_NOTIFY_MODERATION)

            if result.analysis and result.analysis.quality_score < 0.5:
                steps.append(STEP_BETTER_PHOTO)

        return steps

    def estimate_review_time(self, result: VerificationResult) -> str:
        if result.manual_review_priority == ReviewPriority.HIGH:
            return "1-2 heures"
        if result.confidence > 0.5:
            return "2-6 heures"
        return "6-24 heures"

    def get_performance_stats(self) -> dict[str, Any] | None:
        """Summarize usage since the verifier was created.

        Returns:
            Rates as percentage strings, or ``None`` before the first analysis.
        """
        counters = self.stats.snapshot()
        total = counters["totalAnalyses"]
        if total == 0:
            return None

        return {
            "totalAnalyses": total,
            "autonomousSuccessRate": f"{counters['autonomousSuccesses'] / total * 100:.1f}%",
            "manualReviewRate": f"{counters['fallbackToManual'] / total * 100:.1f}%",
            "avgCostPerAnalysis": "0€",
        }

    def adapt_to_volume(self, daily_volume: int) -> float:
        """Tune the autonomous threshold to the expected daily volume.

        Args:
            daily_volume: Expected number of analyses per day.

        Returns:
            The new threshold.
        """
        if daily_volume < 100:
            self.autonomous_threshold = 0.7
            logger.info("Volume mode: small (autonomous approval favored)")
        elif daily_volume < 1000:
            self.autonomous_threshold = 0.8
            logger.info("Volume mode: medium (autonomous approval tuned)")
        else:
            self.autonomous_threshold = 0.85
            logger.info("Volume mode: large (strict validation)")
        return self.autonomous_threshold


def _elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 2)
