"""
Unit tests for extraction quality scoring.
"""

import pytest

from src.hrdocs.core.models import ExtractedFields
from src.hrdocs.services.document import analyze_quality, extract_fields
from src.hrdocs.services.document.quality import format_amount, round_half_up


IDENTITY_FIELDS = dict(document_number="A12345678", holder_name="John Doe", issue_date="2020-01-10")


class TestHelpers:
    """Test rounding and number rendering."""

    @pytest.mark.parametrize("value, expected", [(62.5, 63), (2.5, 3), (66.5, 67), (0.4, 0), (99.5, 100)])
    def test_round_half_up(self, value, expected):
        assert round_half_up(value) == expected

    @pytest.mark.parametrize("value, expected", [
        (12000, "12,000"),
        (1234.5, "1,234.5"),
        (1234.5678, "1,234.568"),
        (5, "5"),
    ])
    def test_format_amount(self, value, expected):
        assert format_amount(value) == expected


class TestContractAnalysis:
    """Test scoring of employment contracts."""

    def test_contract_scores(self, contract_text):
        fields = extract_fields(contract_text)

        analysis = analyze_quality(fields, contract_text)

        assert len(contract_text) < 200
        assert analysis.data_points == 5
        assert analysis.completeness == 63
        assert analysis.confidence == 5 * 12 + 10
        assert analysis.quality_score == 67
        assert analysis.document_type == "unknown"

    def test_contract_messages(self, contract_text):
        fields = extract_fields(contract_text)

        analysis = analyze_quality(fields, contract_text)

        assert analysis.key_insights == [
            "Employee: John Smith",
            "Position: Engineer",
            "Employment contract - defines rights and obligations",
            "Contract Start: 2024-01-01",
            "Contract End: 2025-12-31",
            "Salary: SAR 5,000",
            "Salary mentioned: SAR 5,000",
        ]
        assert analysis.missing_fields == []
        assert analysis.warnings == []

    def test_contract_missing_fields(self):
        analysis = analyze_quality(ExtractedFields(), "x" * 150, "employment_contract")

        assert analysis.missing_fields == ["Start Date", "End Date", "Salary", "Employee Name", "Position"]
        assert analysis.document_type == "employment_contract"

    def test_zero_salary_counts_as_missing(self):
        analysis = analyze_quality(ExtractedFields(salary=0.0), "x" * 150, "contract")

        assert "Salary" in analysis.missing_fields
        assert not any(insight.startswith("Salary mentioned") for insight in analysis.key_insights)

    def test_arabic_contract_marker(self):
        analysis = analyze_quality(ExtractedFields(), "عقد عمل " * 20)

        assert "Employment contract - defines rights and obligations" in analysis.key_insights

    def test_confidence_is_capped(self):
        fields = ExtractedFields(
            holder_name="Ahmed Ali",
            position="Engineer",
            start_date="2024-01-01",
            end_date="2025-01-01",
            salary=9000.0,
            currency="SAR",
            nationality="Saudi",
            document_number="EMP1",
            department="Finance"
        )

        analysis = analyze_quality(fields, "x" * 600, "contract")

        assert analysis.confidence == 100
        assert analysis.completeness == 100
        assert analysis.quality_score == 100


class TestIdentityDocumentAnalysis:
    """Test expiry tracking for non-contract documents."""

    def test_expiring_soon(self, fixed_now):
        fields = ExtractedFields(expiry_date="2024-01-11", **IDENTITY_FIELDS)

        analysis = analyze_quality(fields, "x" * 150, "passport", now=fixed_now)

        assert analysis.warnings == ["Document expiring in 10 days"]
        assert analysis.recommendations == ["Schedule renewal as soon as possible"]
        assert "Document validity: 10 days remaining" in analysis.key_insights
        assert analysis.missing_fields == []

    def test_expired(self, fixed_now):
        fields = ExtractedFields(expiry_date="2023-12-31", **IDENTITY_FIELDS)

        analysis = analyze_quality(fields, "x" * 150, "iqama", now=fixed_now)

        assert analysis.warnings == ["Document has expired"]
        assert analysis.recommendations == ["Immediate renewal required"]
        assert "Document validity: -1 days remaining" in analysis.key_insights

    def test_renewal_window(self, fixed_now):
        fields = ExtractedFields(expiry_date="2024-03-01", **IDENTITY_FIELDS)

        analysis = analyze_quality(fields, "x" * 150, "visa", now=fixed_now)

        assert analysis.warnings == []
        assert analysis.recommendations == ["Document expires in 60 days - plan for renewal"]

    def test_long_validity(self, fixed_now):
        fields = ExtractedFields(expiry_date="2030-01-10", **IDENTITY_FIELDS)

        analysis = analyze_quality(fields, "x" * 150, "passport", now=fixed_now)

        assert analysis.warnings == []
        assert analysis.recommendations == []
        assert "Document validity: 2201 days remaining" in analysis.key_insights

    def test_expiry_that_is_not_a_calendar_date(self, fixed_now):
        fields = ExtractedFields(expiry_date="2024-02-31", **IDENTITY_FIELDS)

        analysis = analyze_quality(fields, "x" * 150, "passport", now=fixed_now)

        assert analysis.warnings == ["Expiry date could not be interpreted - verify manually"]
        assert not any(insight.startswith("Document validity") for insight in analysis.key_insights)

    def test_missing_expiry(self):
        analysis = analyze_quality(ExtractedFields(holder_name="John Doe"), "x" * 150)

        assert "No expiry date found - cannot track document validity" in analysis.warnings
        assert analysis.missing_fields == ["Expiry Date", "Document Number", "Issue Date"]

    def test_identity_documents_expect_ten_fields(self):
        fields = ExtractedFields(holder_name="John Doe", document_number="A1", nationality="Saudi")

        passport = analyze_quality(fields, "x" * 250, "passport")
        generic = analyze_quality(fields, "x" * 250)

        assert passport.completeness == 30
        assert generic.completeness == 20
        assert passport.confidence == generic.confidence == 3 * 10 + 20


class TestGeneralFindings:
    """Test findings shared by every document family."""

    def test_empty_extraction(self):
        analysis = analyze_quality(ExtractedFields(), "")

        assert analysis.data_points == 0
        assert analysis.completeness == 0
        assert analysis.confidence == 5
        assert analysis.quality_score == 3
        assert analysis.warnings == [
            "No expiry date found - cannot track document validity",
            "Very little text extracted - document quality may be poor",
            "No structured data could be extracted from this document",
        ]
        assert analysis.recommendations == [
            "Consider rescanning with higher resolution",
            "Verify document quality and format",
        ]
        assert analysis.key_insights == ["Document processed - review extracted data"]

    def test_low_data_point_bonus(self):
        analysis = analyze_quality(ExtractedFields(email="a@b.co", gender="Male"), "x" * 250)

        assert analysis.confidence == 2 * 8 + 15

    def test_monetary_value_uses_detected_currency(self):
        analysis = analyze_quality(ExtractedFields(amount=1500.0, currency="USD"), "x" * 150)

        assert "Document contains monetary value: USD 1,500" in analysis.key_insights

    def test_monetary_value_defaults_to_riyal(self):
        analysis = analyze_quality(ExtractedFields(amount=1234.5), "x" * 150)

        assert "Document contains monetary value: SAR 1,234.5" in analysis.key_insights

    def test_default_clock_is_used(self):
        fields = ExtractedFields(expiry_date="2999-01-01", **IDENTITY_FIELDS)

        analysis = analyze_quality(fields, "x" * 150, "passport")

        assert analysis.warnings == []
        assert any(insight.startswith("Document validity:") for insight in analysis.key_insights)
