"""Document type classification by pattern voting.

Counts how many catalog patterns match the normalized OCR text for each
document type and picks the first type reaching the vote threshold,
falling back to plain keyword checks.
"""

import re
import unicodedata

from docverify.utils.logger import get_logger

from .catalog import DOCUMENT_CATALOG, KEYWORD_FALLBACKS, DocumentType

logger = get_logger(__name__)

_NON_ALNUM = re.compile(r"[^A-Z0-9\s]")


def normalize_text(text: str) -> str:
    """Fold accents, uppercase, and blank out punctuation.

    Line breaks are kept and each line is stripped so anchored patterns
    can match a whole line.

    Args:
        text: Raw OCR text.

    Returns:
        Normalized text containing only ``A-Z``, digits and whitespace.
    """
    folded = unicodedata.normalize("NFKD", text)
    folded = "".join(c for c in folded if not unicodedata.combining(c))
    cleaned = _NON_ALNUM.sub(" ", folded.upper())
    return "\n".join(line.strip() for line in cleaned.split("\n"))


class DocumentClassifier:
    """Classifies identity documents from their recognized text.

    Args:
        min_matches: Number of catalog patterns that must match for a type
            to be selected.
    """

    def __init__(self, min_matches: int = 2) -> None:
        self.min_matches = min_matches

    def count_matches(self, text: str) -> dict[DocumentType, int]:
        """Count matching patterns per document type on normalized text."""
        return {
            doc_type: sum(1 for p in profile.patterns if p.search(text))
            for doc_type, profile in DOCUMENT_CATALOG.items()
        }

    def classify(self, text: str) -> DocumentType:
        """Determine the document type of OCR text.

        Types are tried in catalog order; the first one with enough matching
        patterns wins even if a later type matches more.

        Args:
            text: Raw OCR text.

        Returns:
            The detected document type, or ``DocumentType.UNKNOWN``.
        """
        clean = normalize_text(text)

        for doc_type, count in self.count_matches(clean).items():
            if count >= self.min_matches:
                logger.info("Document detected: %s (%d patterns)", doc_type, count)
                return doc_type

        for doc_type, groups in KEYWORD_FALLBACKS:
            if any(all(word in clean for word in group) for group in groups):
                logger.info("Document detected by keywords: %s", doc_type)
                return doc_type

        logger.info("Document type not recognized")
        return DocumentType.UNKNOWN
