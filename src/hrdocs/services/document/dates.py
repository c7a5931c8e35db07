"""
Date normalization for extracted document fields.

Three spellings are recognised: day-first numeric (``5/3/2023``), year-first
numeric (``2023-3-5``) and day + English month word (``5 March 2023``). All
are emitted as ``YYYY-MM-DD``.
"""

import logging
import re
from typing import List, Optional

from ...core.models import DateScanResult

logger = logging.getLogger(__name__)

MIN_YEAR = 1900
MAX_YEAR = 2100

MONTHS = ('jan', 'feb', 'mar', 'apr', 'may', 'jun', 'jul', 'aug', 'sep', 'oct', 'nov', 'dec')

# Raw date token shared by every labelled date pattern in the extractor
DATE_TOKEN = r'(\d{1,2}[/\-]\d{1,2}[/\-]\d{4}|\d{4}[/\-]\d{1,2}[/\-]\d{1,2}|\d{1,2}\s+\w+\s+\d{4})'

_DAY_FIRST = re.compile(r'(\d{1,2})[/\-](\d{1,2})[/\-](\d{4})')
_YEAR_FIRST = re.compile(r'(\d{4})[/\-](\d{1,2})[/\-](\d{1,2})')
_DAY_MONTH_NAME = re.compile(r'(\d{1,2})\s+(\w+)\s+(\d{4})')

_MONTH_WORD = r'(Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)[a-z]*'

# Every date in free text, for the date scan
_ANY_DAY_FIRST = re.compile(r'\b\d{1,2}[/\-]\d{1,2}[/\-]\d{4}\b')
_ANY_YEAR_FIRST = re.compile(r'\b\d{4}[/\-]\d{1,2}[/\-]\d{1,2}\b')
_ANY_DAY_MONTH = re.compile(r'\b(\d{1,2})\s+' + _MONTH_WORD + r'\s+(\d{4})\b', re.IGNORECASE)
_ANY_MONTH_DAY = re.compile(r'\b' + _MONTH_WORD + r'\s+(\d{1,2}),?\s+(\d{4})\b', re.IGNORECASE)

_SCAN_START = re.compile(r'\b(?:start|commencement|effective|from)\s*(?:date)?[:\s]*' + DATE_TOKEN, re.IGNORECASE)
_SCAN_END = re.compile(r'\b(?:end|expiry|expiration|valid\s*until|to)\s*(?:date)?[:\s]*' + DATE_TOKEN, re.IGNORECASE)
_SCAN_EXPIRY = re.compile(r'\b(?:expir(?:y|es|ation)|valid\s*until)\s*(?:date)?[:\s]*' + DATE_TOKEN, re.IGNORECASE)
_SCAN_ISSUE = re.compile(r'\b(?:issue|issued)\s*(?:date)?[:\s]*' + DATE_TOKEN, re.IGNORECASE)


def _iso(year: int, month: int, day: int) -> str:
    return f"{year:04d}-{month:02d}-{day:02d}"


def normalize_date(raw: Optional[str]) -> Optional[str]:
    """
    Convert a raw date token to ``YYYY-MM-DD``.

    Numeric spellings are rejected when the year falls outside
    [1900, 2100]. Day and month values are not calendar-checked.

    Args:
        raw: Date token as captured from the document text

    Returns:
        Normalized date, or None if the token matches no supported spelling
    """
    if not raw:
        return None

    try:
        value = raw.strip()

        match = _DAY_FIRST.fullmatch(value)
        if match:
            day, month, year = (int(part) for part in match.groups())
            if MIN_YEAR <= year <= MAX_YEAR:
                return _iso(year, month, day)

        match = _YEAR_FIRST.fullmatch(value)
        if match:
            year, month, day = (int(part) for part in match.groups())
            if MIN_YEAR <= year <= MAX_YEAR:
                return _iso(year, month, day)

        match = _DAY_MONTH_NAME.fullmatch(value)
        if match:
            month_token = match.group(2)[:3].lower()
            if month_token in MONTHS:
                return _iso(int(match.group(3)), MONTHS.index(month_token) + 1, int(match.group(1)))
    except (TypeError, ValueError) as e:
        logger.debug(f"Date normalization failed for {raw!r}: {str(e)}")

    return None


def _labelled(pattern: re.Pattern, text: str) -> Optional[str]:
    match = pattern.search(text)
    return normalize_date(match.group(1)) if match else None


def _all_dates(text: str) -> List[str]:
    found = []
    for pattern in (_ANY_DAY_FIRST, _ANY_YEAR_FIRST):
        for match in pattern.finditer(text):
            found.append(normalize_date(match.group(0)))
    for match in _ANY_DAY_MONTH.finditer(text):
        found.append(normalize_date(f"{match.group(1)} {match.group(2)} {match.group(3)}"))
    for match in _ANY_MONTH_DAY.finditer(text):
        found.append(normalize_date(f"{match.group(2)} {match.group(1)} {match.group(3)}"))
    # ISO strings order chronologically
    return sorted(date for date in found if date)


def scan_dates(text: str, preview_length: int = 500) -> DateScanResult:
    """
    Locate contract-style dates anywhere in the text.

    Labelled dates win; without a start label the earliest date found is
    used, and without an end label the latest one (when at least two dates
    were found).

    Args:
        text: Approximated document text
        preview_length: Number of leading characters echoed back

    Returns:
        Dates found with a fill-rate confidence
    """
    dates = {
        'start_date': _labelled(_SCAN_START, text),
        'end_date': _labelled(_SCAN_END, text),
        'expiry_date': _labelled(_SCAN_EXPIRY, text),
        'issue_date': _labelled(_SCAN_ISSUE, text),
    }

    all_dates = _all_dates(text)
    if all_dates:
        if not dates['start_date']:
            dates['start_date'] = all_dates[0]
        if not dates['end_date'] and len(all_dates) > 1:
            dates['end_date'] = all_dates[-1]

    filled = sum(1 for value in dates.values() if value)

    return DateScanResult(
        **dates,
        confidence=round(filled / len(dates) * 100),
        extracted_text=text[:preview_length]
    )
