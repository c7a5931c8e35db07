"""
Property-based tests for expiry tracking.

**Feature: hrdocs-analysis, Property 5: Expiry Warning Buckets**

For any non-contract document with an expiry date, exactly one validity
insight is produced and the warning and recommendation follow the number
of whole days remaining.
"""

from datetime import datetime, timedelta, timezone

import pytest
from hypothesis import given, strategies as st

from src.hrdocs.core.models import ExtractedFields
from src.hrdocs.services.document import analyze_quality


NOW = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


def analyze_with_offset(days: int, doc_type: str = "passport"):
    expiry = (NOW.date() + timedelta(days=days)).isoformat()
    fields = ExtractedFields(document_number="A1234567", holder_name="John Doe", expiry_date=expiry)
    return analyze_quality(fields, "x" * 150, doc_type, now=NOW)


@given(
    days=st.integers(min_value=-400, max_value=400),
    doc_type=st.sampled_from(["passport", "iqama", "visa", "certificate", None])
)
def test_expiry_buckets(days, doc_type):
    analysis = analyze_with_offset(days, doc_type)

    validity = [insight for insight in analysis.key_insights if insight.startswith("Document validity")]
    assert validity == [f"Document validity: {days} days remaining"]

    if days < 0:
        assert analysis.warnings == ["Document has expired"]
        assert analysis.recommendations == ["Immediate renewal required"]
    elif days < 30:
        assert analysis.warnings == [f"Document expiring in {days} days"]
        assert analysis.recommendations == ["Schedule renewal as soon as possible"]
    elif days < 90:
        assert analysis.warnings == []
        assert analysis.recommendations == [f"Document expires in {days} days - plan for renewal"]
    else:
        assert analysis.warnings == []
        assert analysis.recommendations == []


@given(days=st.integers(min_value=-400, max_value=400))
def test_contracts_never_track_expiry(days):
    analysis = analyze_with_offset(days, "employment_contract")

    assert not any(insight.startswith("Document validity") for insight in analysis.key_insights)
    assert not any("expir" in warning for warning in analysis.warnings)


@pytest.mark.parametrize("days, warning", [
    (-5, "Document has expired"),
    (0, "Document expiring in 0 days"),
    (29, "Document expiring in 29 days"),
])
def test_bucket_edges_with_warnings(days, warning):
    assert analyze_with_offset(days).warnings == [warning]


@pytest.mark.parametrize("days, recommendations", [
    (30, ["Document expires in 30 days - plan for renewal"]),
    (89, ["Document expires in 89 days - plan for renewal"]),
    (90, []),
    (200, []),
])
def test_bucket_edges_without_warnings(days, recommendations):
    analysis = analyze_with_offset(days)

    assert analysis.warnings == []
    assert analysis.recommendations == recommendations
