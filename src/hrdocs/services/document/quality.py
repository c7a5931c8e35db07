"""
Quality and confidence scoring for extracted document fields.
"""

import logging
import math
from datetime import date, datetime, timezone
from typing import List, Optional

from ...core.models import ExtractedFields, QualityAnalysis

logger = logging.getLogger(__name__)

CONTRACT_EXPECTED_FIELDS = 8
IDENTITY_EXPECTED_FIELDS = 10
DEFAULT_EXPECTED_FIELDS = 15

SHORT_TEXT_LENGTH = 100
DEFAULT_CURRENCY = 'SAR'


def round_half_up(value: float) -> int:
    """Round halves upwards (62.5 -> 63), unlike Python's banker's rounding."""
    return int(math.floor(value + 0.5))


def format_amount(value: float) -> str:
    """Render a number with thousands separators and at most three decimals."""
    return f"{value:,.3f}".rstrip('0').rstrip('.')


def _hint_has(hint: str, *needles: str) -> bool:
    return any(needle in hint for needle in needles)


def _text_bonus(length: int, tiers: List[tuple], fallback: int) -> int:
    for threshold, bonus in tiers:
        if length > threshold:
            return bonus
    return fallback


class DocumentClassification:
    """Document family flags derived from the type hint and the text."""

    def __init__(self, text: str, doc_type_hint: Optional[str] = None):
        hint = (doc_type_hint or '').lower()
        lowered = text.lower()

        self.is_contract = (
            'contract' in hint
            or 'employment contract' in lowered
            or 'work contract' in lowered
            or 'عقد عمل' in text
            or 'عقد توظيف' in text
        )
        self.is_visa = 'visa' in hint or 'تأشيرة' in text
        self.is_iqama = _hint_has(hint, 'iqama', 'residence') or 'إقامة' in text or 'هوية مقيم' in text
        self.is_passport = 'passport' in hint or 'جواز سفر' in text

    @property
    def expected_fields(self) -> int:
        if self.is_contract:
            return CONTRACT_EXPECTED_FIELDS
        if self.is_visa or self.is_iqama or self.is_passport:
            return IDENTITY_EXPECTED_FIELDS
        return DEFAULT_EXPECTED_FIELDS


def _confidence(fields: ExtractedFields, classification: DocumentClassification,
                data_points: int, text_length: int) -> int:
    if classification.is_contract and fields.holder_name and (
            fields.start_date or fields.end_date or fields.salary):
        score = data_points * 12 + _text_bonus(text_length, [(500, 30), (200, 20)], 10)
    elif data_points >= 3:
        score = data_points * 10 + _text_bonus(text_length, [(200, 20)], 10)
    else:
        score = data_points * 8 + _text_bonus(text_length, [(200, 15)], 5)
    return min(100, score)


def analyze_quality(
    fields: ExtractedFields,
    text: str,
    doc_type_hint: Optional[str] = None,
    now: Optional[datetime] = None
) -> QualityAnalysis:
    """
    Score an extraction and produce human-readable findings.

    Args:
        fields: Extracted fields
        text: Approximated document text the fields came from
        doc_type_hint: Optional document type hint supplied by the caller
        now: Reference time for expiry countdowns (defaults to the current UTC time)

    Returns:
        Quality analysis with scores, warnings, recommendations and insights
    """
    now = now or datetime.now(timezone.utc)
    classification = DocumentClassification(text, doc_type_hint)
    data_points = fields.populated_count()
    currency = fields.currency or DEFAULT_CURRENCY

    warnings: List[str] = []
    recommendations: List[str] = []
    key_insights: List[str] = []
    missing_fields: List[str] = []

    if fields.holder_name:
        key_insights.append(f"Employee: {fields.holder_name}")
    if fields.document_number:
        key_insights.append(f"Employee Number: {fields.document_number}")
    if fields.position:
        key_insights.append(f"Position: {fields.position}")
    if fields.nationality:
        key_insights.append(f"Nationality: {fields.nationality}")

    if classification.is_contract:
        key_insights.append("Employment contract - defines rights and obligations")

        if fields.start_date:
            key_insights.append(f"Contract Start: {fields.start_date}")
        else:
            missing_fields.append("Start Date")

        if fields.end_date:
            key_insights.append(f"Contract End: {fields.end_date}")
        else:
            missing_fields.append("End Date")

        if fields.salary:
            key_insights.append(f"Salary: {currency} {format_amount(fields.salary)}")
        else:
            missing_fields.append("Salary")

        if not fields.holder_name:
            missing_fields.append("Employee Name")
        if not fields.position:
            missing_fields.append("Position")
    else:
        if fields.expiry_date:
            try:
                days = (date.fromisoformat(fields.expiry_date) - now.date()).days
            except ValueError:
                logger.debug(f"Expiry date {fields.expiry_date!r} is not a calendar date")
                warnings.append("Expiry date could not be interpreted - verify manually")
            else:
                if days < 0:
                    warnings.append("Document has expired")
                    recommendations.append("Immediate renewal required")
                elif days < 30:
                    warnings.append(f"Document expiring in {days} days")
                    recommendations.append("Schedule renewal as soon as possible")
                elif days < 90:
                    recommendations.append(f"Document expires in {days} days - plan for renewal")

                key_insights.append(f"Document validity: {days} days remaining")
        else:
            warnings.append("No expiry date found - cannot track document validity")
            missing_fields.append("Expiry Date")

        if not fields.document_number:
            missing_fields.append("Document Number")
        if not fields.holder_name:
            missing_fields.append("Holder Name")
        if not fields.issue_date:
            missing_fields.append("Issue Date")

    if fields.amount and fields.amount > 0:
        key_insights.append(f"Document contains monetary value: {currency} {format_amount(fields.amount)}")

    if fields.salary and fields.salary > 0:
        key_insights.append(f"Salary mentioned: {currency} {format_amount(fields.salary)}")

    if len(text) < SHORT_TEXT_LENGTH:
        warnings.append("Very little text extracted - document quality may be poor")
        recommendations.append("Consider rescanning with higher resolution")

    completeness = min(100, round_half_up(data_points / classification.expected_fields * 100))
    confidence = _confidence(fields, classification, data_points, len(text))
    quality_score = round_half_up((completeness + confidence) / 2)

    if not key_insights:
        key_insights.append("Document processed - review extracted data")

    if data_points == 0:
        warnings.append("No structured data could be extracted from this document")
        recommendations.append("Verify document quality and format")

    return QualityAnalysis(
        document_type=doc_type_hint or "unknown",
        confidence=confidence,
        completeness=completeness,
        quality_score=quality_score,
        data_points=data_points,
        warnings=warnings,
        recommendations=recommendations,
        key_insights=key_insights,
        missing_fields=missing_fields
    )
