"""Static catalog of supported identity document types.

Each document type carries the regular expressions used to recognize it
and the field name and pattern of its document number. The catalog is
declared once, in priority order, and never modified at runtime.
"""

import re
from dataclasses import dataclass
from enum import StrEnum


class DocumentType(StrEnum):
    """Identity document types recognized by the analysis engine."""

    CIN_FRANCE = "cinFrance"
    PASSEPORT_FRANCE = "passeportFrance"
    PERMIS = "permis"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class DocumentProfile:
    """Recognition patterns and numbering scheme of one document type."""

    patterns: tuple[re.Pattern[str], ...]
    number_field: str
    number_pattern: re.Pattern[str]


_TWELVE_DIGITS = re.compile(r"^[0-9]{12}$")
_PASSPORT_NUMBER = re.compile(r"^[0-9]{2}[A-Z]{2}[0-9]{5}$")

# Patterns run against normalized text (see classifier.normalize_text), so
# anchored ones match a whole line.
DOCUMENT_CATALOG: dict[DocumentType, DocumentProfile] = {
    DocumentType.CIN_FRANCE: DocumentProfile(
        patterns=(
            re.compile(r"CARTE\s+NATIONALE\s+D['\s]IDENTITE", re.IGNORECASE),
            re.compile(r"REPUBLIQUE\s+FRANCAISE", re.IGNORECASE),
            re.compile(r"LIBERTE\s+EGALITE\s+FRATERNITE", re.IGNORECASE),
            re.compile(r"^[0-9]{12}$", re.MULTILINE),
        ),
        number_field="numeroDocument",
        number_pattern=_TWELVE_DIGITS,
    ),
    DocumentType.PASSEPORT_FRANCE: DocumentProfile(
        patterns=(
            re.compile(r"PASSEPORT", re.IGNORECASE),
            re.compile(r"PASSPORT", re.IGNORECASE),
            re.compile(r"REPUBLIQUE\s+FRANCAISE", re.IGNORECASE),
            re.compile(r"^[0-9]{2}[A-Z]{2}[0-9]{5}$", re.MULTILINE),
        ),
        number_field="numeroPasseport",
        number_pattern=_PASSPORT_NUMBER,
    ),
    DocumentType.PERMIS: DocumentProfile(
        patterns=(
            re.compile(r"PERMIS\s+DE\s+CONDUIRE", re.IGNORECASE),
            re.compile(r"DRIVING\s+LICENCE", re.IGNORECASE),
            re.compile(r"^[0-9]{12}$", re.MULTILINE),
        ),
        number_field="numeroPermis",
        number_pattern=_TWELVE_DIGITS,
    ),
}

# Fallback keywords when no type reaches the pattern threshold: every word
# of a group must be present.
KEYWORD_FALLBACKS: tuple[tuple[DocumentType, tuple[tuple[str, ...], ...]], ...] = (
    (DocumentType.CIN_FRANCE, (("CARTE", "IDENTITE"),)),
    (DocumentType.PASSEPORT_FRANCE, (("PASSEPORT",), ("PASSPORT",))),
    (DocumentType.PERMIS, (("PERMIS",),)),
)
