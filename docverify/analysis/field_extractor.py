"""Line-level identity field extraction.

Extracts last name, first name, birth date and document number from OCR
text using per-field regular expressions. Each extractor returns the
first match found, scanning lines top to bottom.
"""

import re

from docverify.utils.logger import get_logger

from .catalog import DOCUMENT_CATALOG, DocumentType

logger = get_logger(__name__)


_NAME_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"^NOM[\s:]+(.+)$", re.IGNORECASE),
    re.compile(r"^SURNAME[\s:]+(.+)$", re.IGNORECASE),
    # An all-caps line is often the holder's name.
    re.compile(r"^([A-Z\s-]+)$"),
]

_FIRST_NAME_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"^PRENOM[\s:]+(.+)$", re.IGNORECASE),
    re.compile(r"^GIVEN\s+NAME[\s:]+(.+)$", re.IGNORECASE),
    re.compile(r"^FIRST\s+NAME[\s:]+(.+)$", re.IGNORECASE),
]

_DATE_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"(\d{1,2})[/\-.](\d{1,2})[/\-.](\d{4})"),
    re.compile(r"(\d{4})[/\-.](\d{1,2})[/\-.](\d{1,2})"),
    re.compile(r"NE[\s(]*LE[\s:]*(\d{1,2})[/\-.](\d{1,2})[/\-.](\d{4})", re.IGNORECASE),
]

_WHITESPACE = re.compile(r"\s")


def split_lines(text: str) -> list[str]:
    """Split text into stripped, non-empty lines."""
    return [line.strip() for line in text.split("\n") if line.strip()]


def extract_name(lines: list[str]) -> str | None:
    """Return the holder's last name, or ``None``."""
    for line in lines:
        for pattern in _NAME_PATTERNS:
            match = pattern.match(line)
            if match and len(match.group(1)) > 1:
                return match.group(1).strip()
    return None


def extract_first_name(lines: list[str]) -> str | None:
    """Return the holder's first name, or ``None``."""
    for line in lines:
        for pattern in _FIRST_NAME_PATTERNS:
            match = pattern.match(line)
            if match and match.group(1):
                return match.group(1).strip()
    return None


def extract_birth_date(lines: list[str]) -> str | None:
    """Return the first date-looking text, as written on the document."""
    for line in lines:
        for pattern in _DATE_PATTERNS:
            match = pattern.search(line)
            if match:
                return match.group(0)
    return None


def extract_document_number(lines: list[str], pattern: re.Pattern[str]) -> str | None:
    """Return the first line that, without whitespace, is a document number.

    Args:
        lines: Stripped OCR lines.
        pattern: Full-line pattern of the document number.

    Returns:
        The whitespace-free number, or ``None``.
    """
    for line in lines:
        clean_line = _WHITESPACE.sub("", line)
        if pattern.match(clean_line):
            return clean_line
    return None


class FieldExtractor:
    """Extracts the standard identity fields of a classified document."""

    def extract(self, text: str, document_type: DocumentType) -> dict[str, str | None]:
        """Extract the fields relevant to a document type.

        Unknown documents yield no fields. Extraction errors are logged and
        produce an empty mapping.

        Args:
            text: Raw OCR text.
            document_type: Type returned by the classifier.

        Returns:
            Mapping of field name to extracted value (``None`` if absent).
        """
        profile = DOCUMENT_CATALOG.get(document_type)
        if profile is None:
            return {}

        lines = split_lines(text)
        try:
            fields = {
                "nom": extract_name(lines),
                "prenom": extract_first_name(lines),
                "dateNaissance": extract_birth_date(lines),
                profile.number_field: extract_document_number(
                    lines, profile.number_pattern
                ),
            }
        except Exception as exc:
            logger.warning("Field extraction failed: %s", exc)
            return {}

        found = sum(1 for value in fields.values() if value is not None)
        logger.info("Extracted %d/%d fields for %s", found, len(fields), document_type)
        return fields
