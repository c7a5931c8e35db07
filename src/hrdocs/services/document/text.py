"""
Best-effort text approximation for uploaded files.

No real OCR or PDF parsing happens here: printable runs are pulled out of
the raw byte stream, then a fixed battery of bilingual label patterns is
re-run against the raw stream so that well-known HR labels survive even
when the run extraction mangled them.
"""

import logging
import re

from ...core.resilience import fail_soft

logger = logging.getLogger(__name__)

_PRINTABLE_RUN = re.compile(r'[\x20-\x7E\u0600-\u06FF\s]{3,}')
_WHITESPACE = re.compile(r'\s+')
_DISALLOWED = re.compile(r'[^\x20-\x7E\u0600-\u06FF\s]')

_NUMERIC_DATE = r'(\d{1,2}[/\-]\d{1,2}[/\-]\d{4})'

RESCUE_PATTERNS = tuple(re.compile(pattern, re.IGNORECASE) for pattern in (
    r'Employee\s+Number[:\s]+([A-Z0-9]+)',
    r'Name[:\s]+([A-Z][a-z]+(?:\s+[A-Z][a-z]+)+)',
    r'Position[:\s]+([A-Za-z\s]+?)(?:\n|$)',
    r'Salary[:\s]+([0-9,]+(?:\.\d{2})?)',
    r'Start\s+Date[:\s]+' + _NUMERIC_DATE,
    r'End\s+Date[:\s]+' + _NUMERIC_DATE,
    r'Contract\s+Date[:\s]+' + _NUMERIC_DATE,
    r'(?:رقم|رقم الموظف)[:\s]+([A-Z0-9\-/]+)',
    r'(?:الاسم|اسم الموظف|اسم العامل)[:\s]+([\u0600-\u06FF\s]+)',
    r'(?:المسمى الوظيفي|الوظيفة|المنصب)[:\s]+([\u0600-\u06FF\s]+)',
    r'(?:الراتب|الأجر|المرتب)[:\s]+([0-9,]+(?:\.\d{2})?)',
    r'(?:تاريخ البدء|تاريخ البداية|من تاريخ)[:\s]+' + _NUMERIC_DATE,
    r'(?:تاريخ الانتهاء|تاريخ النهاية|إلى تاريخ)[:\s]+' + _NUMERIC_DATE,
    r'(?:تاريخ العقد|تاريخ التوقيع)[:\s]+' + _NUMERIC_DATE,
    r'(?:الجنسية)[:\s]+([\u0600-\u06FF]+)',
    r'(?:رقم الهوية|رقم الإقامة|رقم الجواز)[:\s]+([0-9]+)',
))


@fail_soft(default="", operation="text approximation")
def approximate_text(data: bytes, mime_type: str) -> str:
    """
    Produce a best-effort plain-text rendering of an uploaded file.

    Args:
        data: Raw file contents
        mime_type: Declared MIME type of the upload

    Returns:
        Approximated text, possibly empty
    """
    # One character per byte whatever the declared type
    raw = data.decode('latin-1')

    text = ' '.join(_PRINTABLE_RUN.findall(raw))
    text = _WHITESPACE.sub(' ', text)
    text = _DISALLOWED.sub('', text).strip()

    rescued = 0
    seen = set()
    for pattern in RESCUE_PATTERNS:
        for match in pattern.finditer(raw):
            label = match.group(0)
            if not label or label in seen:
                continue
            seen.add(label)
            if label not in text:
                text += ' ' + label
                rescued += 1

    logger.debug(f"Approximated {len(text)} characters from {len(data)} bytes of {mime_type} ({rescued} rescued labels)")
    return text
