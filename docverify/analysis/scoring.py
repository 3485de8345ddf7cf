"""Confidence scoring and recommendation generation."""

from .catalog import DocumentType
from .result import AnalysisResult

NOT_RECOGNIZED = "Document non reconnu - vérification manuelle obligatoire"
LOW_CONFIDENCE = "Confiance faible - review manuelle recommandée"
PROBABLY_VALID = "Document probablement valide - validation rapide possible"
AUTO_VALIDATED = "Document validé automatiquement"
BETTER_PHOTO = "Demander une photo de meilleure qualité"
NO_STANDARD_FIELD = "Aucun champ standard détecté - vérifier le type de document"
TECHNICAL_ERROR = "Erreur technique - vérification manuelle requise"

MIN_TEXT_LENGTH_BONUS = 100
EXPECTED_FIELDS = 4


def calculate_confidence(analysis: AnalysisResult) -> float:
    """Compute the overall trust score of an analysis.

    Args:
        analysis: Result with type, fields, quality and indicators filled.

    Returns:
        Confidence clamped to [0, 1].
    """
    confidence = 0.0

    if analysis.document_type != DocumentType.UNKNOWN:
        confidence += 0.3

    confidence += analysis.quality_score * 0.3
    confidence += min(analysis.field_count / EXPECTED_FIELDS, 1.0) * 0.2
    confidence -= len(analysis.suspicious_indicators) * 0.1

    if len(analysis.extracted_text) > MIN_TEXT_LENGTH_BONUS:
        confidence += 0.1

    return max(0.0, min(1.0, confidence))


def generate_recommendations(analysis: AnalysisResult) -> list[str]:
    """Build ordered next-step guidance for a scored analysis."""
    recommendations: list[str] = []

    if analysis.confidence < 0.3:
        recommendations.append(NOT_RECOGNIZED)
    elif analysis.confidence < 0.6:
        recommendations.append(LOW_CONFIDENCE)
    elif analysis.confidence < 0.8:
        recommendations.append(PROBABLY_VALID)
    else:
        recommendations.append(AUTO_VALIDATED)

    if analysis.quality_score < 0.5:
        recommendations.append(BETTER_PHOTO)

    if analysis.suspicious_indicators:
        recommendations.append(
            f"{len(analysis.suspicious_indicators)} indicateurs suspects détectés"
        )

    if analysis.field_count == 0:
        recommendations.append(NO_STANDARD_FIELD)

    return recommendations
