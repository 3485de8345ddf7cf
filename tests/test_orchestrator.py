"""Tests for the hybrid decision orchestrator."""

import threading
from unittest.mock import MagicMock

import pytest

from docverify.analysis.catalog import DocumentType
from docverify.analysis.result import AnalysisResult
from docverify.decision.orchestrator import (
    ERROR_RECOMMENDATION,
    STEP_BETTER_PHOTO,
    STEP_CREATE_TICKET,
    STEP_MARK_VERIFIED,
    STEP_NOTIFY_MODERATION,
    STEP_SEND_NOTIFICATION,
    HybridDocumentVerifier,
    Provider,
    ReviewPriority,
    RunningStats,
    VerificationResult,
)

FULL_FIELDS = {
    "nom": "DUPONT",
    "prenom": "Jean",
    "dateNaissance": "01/02/1990",
    "numeroDocument": "123456789012",
}


def _analysis(confidence: float, **overrides) -> AnalysisResult:
    """Build an engine result with the given confidence."""
    values = {
        "document_type": DocumentType.CIN_FRANCE,
        "confidence": confidence,
        "is_valid_document": confidence > 0.6,
        "detected_fields": dict(FULL_FIELDS),
        "quality_score": 1.0,
    }
    values.update(overrides)
    return AnalysisResult(**values)


def _make_verifier(*results) -> tuple[HybridDocumentVerifier, MagicMock]:
    """Build a verifier whose engine returns ``results`` in order."""
    engine = MagicMock()
    engine.analyze_document.side_effect = list(results)
    engine.initialize.return_value = True
    return HybridDocumentVerifier(engine=engine), engine


class TestDecisionPolicy:
    """Tests for approval and manual review routing."""

    def test_confident_clean_result_approved(self) -> None:
        verifier, _ = _make_verifier(_analysis(0.9))
        result = verifier.analyze_document(b"img")

        assert result.provider == Provider.AUTONOMOUS
        assert result.requires_manual_review is False
        assert result.analysis_path == ["autonomous"]
        assert result.cost_estimate == 0
        assert result.next_steps == [STEP_MARK_VERIFIED, STEP_SEND_NOTIFICATION]
        assert result.estimated_review_time is None

    def test_threshold_is_exclusive(self) -> None:
        verifier, _ = _make_verifier(_analysis(0.8))
        result = verifier.analyze_document(b"img")

        assert result.provider == Provider.AUTONOMOUS_ONLY
        assert result.requires_manual_review is False
        assert result.next_steps == []

    def test_indicators_block_approval(self) -> None:
        verifier, _ = _make_verifier(
            _analysis(0.95, suspicious_indicators=["Répétitions de mots suspectes"])
        )
        result = verifier.analyze_document(b"img")

        assert result.provider == Provider.AUTONOMOUS_ONLY
        assert result.requires_manual_review is False
        assert verifier.stats.autonomous_successes == 0

    def test_low_confidence_normal_priority(self) -> None:
        verifier, _ = _make_verifier(_analysis(0.45))
        result = verifier.analyze_document(b"img")

        assert result.requires_manual_review is True
        assert result.manual_review_priority == ReviewPriority.NORMAL
        assert result.next_steps == [STEP_CREATE_TICKET, STEP_NOTIFY_MODERATION]
        assert result.estimated_review_time == "6-24 heures"

    def test_very_low_confidence_high_priority(self) -> None:
        verifier, _ = _make_verifier(_analysis(0.1, quality_score=0.2))
        result = verifier.analyze_document(b"img")

        assert result.manual_review_priority == ReviewPriority.HIGH
        assert result.estimated_review_time == "1-2 heures"
        assert result.next_steps == [
            STEP_CREATE_TICKET,
            STEP_NOTIFY_MODERATION,
            STEP_BETTER_PHOTO,
        ]

    def test_review_time_above_half(self) -> None:
        verifier, _ = _make_verifier(_analysis(0.55))
        result = verifier.analyze_document(b"img")
        assert result.estimated_review_time == "2-6 heures"

    def test_options_forwarded(self) -> None:
        verifier, engine = _make_verifier(_analysis(0.9))
        verifier.analyze_document(b"img", {"userId": "7"})
        engine.analyze_document.assert_called_once_with(b"img", {"userId": "7"})


class TestErrorVerdict:
    """Tests for engine failures surfacing as error verdicts."""

    def test_engine_exception(self) -> None:
        verifier, _ = _make_verifier(RuntimeError("engine exploded"))
        result = verifier.analyze_document(b"img")

        assert result.success is False
        assert result.provider == Provider.ERROR
        assert result.error == "engine exploded"
        assert result.requires_manual_review is True
        assert result.manual_review_priority == ReviewPriority.HIGH
        assert result.recommendations == [ERROR_RECOMMENDATION]
        assert result.confidence == 0.0
        assert result.analysis_path == []

    def test_error_counted_in_total_only(self) -> None:
        verifier, _ = _make_verifier(RuntimeError("boom"))
        verifier.analyze_document(b"img")
        assert verifier.stats.snapshot() == {
            "totalAnalyses": 1,
            "autonomousSuccesses": 0,
            "fallbackToManual": 0,
        }

    def test_error_to_dict(self) -> None:
        verifier, _ = _make_verifier(RuntimeError("boom"))
        data = verifier.analyze_document(b"img").to_dict()

        assert data["success"] is False
        assert data["error"] == "boom"
        assert data["provider"] == "error"
        assert data["manualReviewPriority"] == "high"
        assert data["recommendations"] == [ERROR_RECOMMENDATION]


class TestRunningStats:
    """Tests for usage statistics."""

    def test_mixed_batch(self) -> None:
        verifier, _ = _make_verifier(_analysis(0.9), _analysis(0.4), _analysis(0.7))
        for _ in range(3):
            verifier.analyze_document(b"img")

        assert verifier.stats.snapshot() == {
            "totalAnalyses": 3,
            "autonomousSuccesses": 1,
            "fallbackToManual": 1,
        }

    def test_stats_snapshot_in_result(self) -> None:
        verifier, _ = _make_verifier(_analysis(0.9), _analysis(0.4))
        verifier.analyze_document(b"img")
        second = verifier.analyze_document(b"img")

        assert second.stats["totalAnalyses"] == 2
        assert second.stats["autonomousSuccesses"] == 1
        assert second.stats["fallbackToManual"] == 1

    def test_record_analysis_sequence(self) -> None:
        stats = RunningStats()
        assert stats.record_analysis() == 1
        assert stats.record_analysis() == 2

    def test_concurrent_updates(self) -> None:
        stats = RunningStats()

        def worker() -> None:
            for _ in range(500):
                stats.record_analysis()
                stats.record_manual_fallback()

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        snapshot = stats.snapshot()
        assert snapshot["totalAnalyses"] == 4000
        assert snapshot["fallbackToManual"] == 4000

    def test_performance_stats_empty(self) -> None:
        verifier, _ = _make_verifier()
        assert verifier.get_performance_stats() is None

    def test_performance_stats(self) -> None:
        verifier, _ = _make_verifier(_analysis(0.9), _analysis(0.4), _analysis(0.7))
        for _ in range(3):
            verifier.analyze_document(b"img")

        assert verifier.get_performance_stats() == {
            "totalAnalyses": 3,
            "autonomousSuccessRate": "33.3%",
            "manualReviewRate": "33.3%",
            "avgCostPerAnalysis": "0€",
        }


class TestEnrichment:
    """Tests for presentation fields added to verdicts."""

    def test_overall_quality_full(self) -> None:
        verifier, _ = _make_verifier()
        result = VerificationResult(provider=Provider.AUTONOMOUS, analysis=_analysis(0.9))
        # 0.9*0.4 + 1.0*0.3 + (4/5)*0.2 + 0.1
        assert verifier.calculate_overall_quality(result) == pytest.approx(0.92)

    def test_overall_quality_counts_empty_fields(self) -> None:
        verifier, _ = _make_verifier()
        result = VerificationResult(
            provider=Provider.AUTONOMOUS,
            analysis=_analysis(0.9, detected_fields=dict.fromkeys(FULL_FIELDS)),
        )
        assert verifier.calculate_overall_quality(result) == pytest.approx(0.92)

    def test_overall_quality_capped(self) -> None:
        verifier, _ = _make_verifier()
        fields = dict(FULL_FIELDS, extra="x", other="y")
        result = VerificationResult(
            provider=Provider.AUTONOMOUS,
            analysis=_analysis(1.0, detected_fields=fields),
        )
        assert verifier.calculate_overall_quality(result) == pytest.approx(1.0)

    def test_overall_quality_with_indicators(self) -> None:
        verifier, _ = _make_verifier()
        result = VerificationResult(
            provider=Provider.AUTONOMOUS_ONLY,
            analysis=_analysis(0.5, quality_score=0.5, detected_fields={}, suspicious_indicators=["x"]),
        )
        assert verifier.calculate_overall_quality(result) == pytest.approx(0.35)

    def test_enriched_fields(self) -> None:
        verifier, _ = _make_verifier(_analysis(0.9))
        result = verifier.analyze_document(b"img")

        assert result.timestamp is not None
        assert result.version == "1.0.0"
        assert result.overall_quality == pytest.approx(0.92)
        assert result.processing_time >= 0

    def test_to_dict_flattens_analysis(self) -> None:
        verifier, _ = _make_verifier(_analysis(0.9))
        data = verifier.analyze_document(b"img").to_dict()

        assert data["documentType"] == "cinFrance"
        assert data["confidence"] == 0.9
        assert data["provider"] == "autonomous"
        assert data["nextSteps"] == [STEP_MARK_VERIFIED, STEP_SEND_NOTIFICATION]
        assert "manualReviewPriority" not in data
        assert "estimatedReviewTime" not in data

    def test_to_dict_review_fields(self) -> None:
        verifier, _ = _make_verifier(_analysis(0.4))
        data = verifier.analyze_document(b"img").to_dict()

        assert data["requiresManualReview"] is True
        assert data["manualReviewPriority"] == "normal"
        assert data["estimatedReviewTime"] == "6-24 heures"

    def test_audit_summary(self) -> None:
        verifier, _ = _make_verifier(_analysis(0.9, suspicious_indicators=[]))
        summary = verifier.analyze_document(b"img").audit_summary()

        assert summary["confidence"] == 0.9
        assert summary["documentType"] == "cinFrance"
        assert summary["provider"] == "autonomous"
        assert summary["suspiciousIndicators"] == 0

    def test_audit_summary_for_error(self) -> None:
        verifier, _ = _make_verifier(RuntimeError("boom"))
        summary = verifier.analyze_document(b"img").audit_summary()

        assert summary["error"] == "boom"
        assert summary["timestamp"]


class TestLifecycle:
    """Tests for initialization and volume tuning."""

    def test_initialize(self) -> None:
        verifier, _ = _make_verifier()
        assert verifier.initialize() == {"autonomousReady": True}

    def test_initialize_not_ready(self) -> None:
        verifier, engine = _make_verifier()
        engine.initialize.return_value = False
        assert verifier.initialize() == {"autonomousReady": False}

    @pytest.mark.parametrize(
        ("volume", "expected"),
        [(0, 0.7), (99, 0.7), (100, 0.8), (999, 0.8), (1000, 0.85)],
    )
    def test_adapt_to_volume(self, volume: int, expected: float) -> None:
        verifier, _ = _make_verifier()
        assert verifier.adapt_to_volume(volume) == expected
        assert verifier.autonomous_threshold == expected

    def test_adapted_threshold_keeps_approval_policy(self) -> None:
        verifier, _ = _make_verifier(_analysis(0.75))
        verifier.adapt_to_volume(10)
        result = verifier.analyze_document(b"img")
        assert result.provider == Provider.AUTONOMOUS_ONLY
