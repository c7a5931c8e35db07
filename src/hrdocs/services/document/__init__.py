"""
Document analysis services.
Provides text approximation, bilingual field extraction, date normalization,
contract term parsing and quality scoring for uploaded HR documents.
"""

from .contract import contract_confidence, parse_contract
from .dates import normalize_date, scan_dates
from .extractor import extract_fields
from .quality import analyze_quality
from .text import approximate_text

__all__ = [
    'approximate_text',
    'extract_fields',
    'normalize_date',
    'scan_dates',
    'analyze_quality',
    'parse_contract',
    'contract_confidence'
]
