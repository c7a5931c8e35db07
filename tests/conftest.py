"""
Pytest configuration and shared fixtures for HRDocs analysis service tests.
"""

import pytest
from hypothesis import settings, Verbosity
from datetime import datetime, timezone
from unittest.mock import AsyncMock

from src.hrdocs.core.interfaces import DocumentStore
from src.hrdocs.services.storage import InMemoryDocumentStore

# Configure Hypothesis for property-based testing
settings.register_profile("default", max_examples=100, verbosity=Verbosity.normal)
settings.register_profile("ci", max_examples=1000, verbosity=Verbosity.verbose)
settings.register_profile("dev", max_examples=10, verbosity=Verbosity.verbose)

# Load the appropriate profile
settings.load_profile("default")


EMPLOYEE_RECORD_TEXT = (
    "Employee Number: EMP007 Name: Ahmed Ali Position: Engineer "
    "Start Date: 01/06/2023 Salary: SAR 12,000"
)

CONTRACT_TEXT = (
    "Employment Contract Name: John Smith Position: Engineer. "
    "Start Date: 01/01/2024 End Date: 31/12/2025 Salary: 5,000"
)

PASSPORT_TEXT = (
    "PASSPORT Passport No: A12345678 Name: John Michael Doe "
    "Nationality: American Date of Birth: 15/03/1985 "
    "Date of Issue: 10/01/2020 Date of Expiry: 10/01/2030 "
    "Issued By: Department of State."
)


@pytest.fixture
def employee_record_text() -> str:
    """Single-line employee record as produced by text approximation."""
    return EMPLOYEE_RECORD_TEXT


@pytest.fixture
def contract_text() -> str:
    """Employment contract with name, position, dates and salary."""
    return CONTRACT_TEXT


@pytest.fixture
def passport_text() -> str:
    """Passport data page rendered as a single line."""
    return PASSPORT_TEXT


@pytest.fixture
def fixed_now() -> datetime:
    """Reference clock for expiry countdowns."""
    return datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def memory_store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def mock_store() -> AsyncMock:
    """Document store double recording every update call."""
    store = AsyncMock(spec=DocumentStore)
    store.update = AsyncMock(return_value=None)
    return store
