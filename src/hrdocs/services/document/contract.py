"""
Contract term parsing for employment contracts.

Unlike the general field extractor this looks only for contract terms:
contract number, salary, dates, position, department, contract type,
weekly hours, probation and notice periods, and allowances.
"""

import logging
import re
from typing import Optional

from ...core.models import ContractBenefits, ContractData, ContractType
from ...core.resilience import fail_soft
from .dates import normalize_date
from .quality import round_half_up

logger = logging.getLogger(__name__)

_I = re.IGNORECASE

_NUMERIC_DATE = r'(\d{1,2}[/\-]\d{1,2}[/\-]\d{4})'
_OPTIONAL_CURRENCY = r'[:\s]*(?:SAR|SR)?\s*'

CONTRACT_NUMBER_PATTERN = re.compile(r'(?:contract|agreement)\s*(?:number|no\.?|#)[:\s]*([A-Z0-9\-]+)', _I)
SALARY_PATTERN = re.compile(r'(?:salary|compensation)' + _OPTIONAL_CURRENCY + r'([\d,]+(?:\.\d{2})?)', _I)
START_DATE_PATTERN = re.compile(r'(?:start|commencement)\s*date[:\s]*' + _NUMERIC_DATE, _I)
END_DATE_PATTERN = re.compile(r'(?:end|expiry)\s*date[:\s]*' + _NUMERIC_DATE, _I)
POSITION_PATTERN = re.compile(r'(?:position|job\s*title|designation)[:\s]*([A-Za-z0-9_\s]+?)(?:\n|\.|,)', _I)
DEPARTMENT_PATTERN = re.compile(r'(?:department|division)[:\s]*([A-Za-z0-9_\s]+?)(?:\n|\.|,)', _I)
WORK_HOURS_PATTERN = re.compile(r'(?<!\d)(\d{1,3})\s*hours?\s*(?:per|a)?\s*week', _I)
PROBATION_PATTERN = re.compile(r'probation(?:ary)?\s*period[:\s]*(\d+)\s*months?', _I)
NOTICE_PATTERN = re.compile(r'notice\s*period[:\s]*(\d+)\s*days?', _I)
HOUSING_PATTERN = re.compile(r'housing\s*(?:allowance)?' + _OPTIONAL_CURRENCY + r'([\d,]+)', _I)
TRANSPORT_PATTERN = re.compile(r'transport(?:ation)?\s*(?:allowance)?' + _OPTIONAL_CURRENCY + r'([\d,]+)', _I)

# Checked in order; the first family mentioned anywhere wins
CONTRACT_TYPE_MARKERS = (
    (ContractType.PERMANENT, re.compile(r'permanent|indefinite', _I)),
    (ContractType.FIXED_TERM, re.compile(r'fixed[\s\-]term|temporary', _I)),
    (ContractType.PART_TIME, re.compile(r'part[\s\-]time', _I)),
)

# Terms counted by the fill-rate confidence
CONFIDENCE_FIELDS = (
    'contract_number',
    'salary',
    'start_date',
    'position',
    'contract_type',
    'work_hours',
    'probation_period',
    'notice_period',
)

DEFAULT_CURRENCY = "SAR"


def _text(pattern: re.Pattern, text: str) -> Optional[str]:
    match = pattern.search(text)
    if match:
        return match.group(1).strip() or None
    return None


def _amount(pattern: re.Pattern, text: str) -> Optional[float]:
    value = _text(pattern, text)
    if value is None:
        return None
    try:
        return float(value.replace(',', ''))
    except ValueError:
        return None


def _whole_number(pattern: re.Pattern, text: str) -> Optional[int]:
    value = _text(pattern, text)
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        # Beyond the interpreter's integer string conversion limit
        return None


def _contract_type(text: str) -> Optional[ContractType]:
    for contract_type, marker in CONTRACT_TYPE_MARKERS:
        if marker.search(text):
            return contract_type
    return None


def contract_confidence(data: ContractData) -> float:
    """Share of the tracked contract terms that were found, as a percentage with two decimals."""
    filled = sum(1 for name in CONFIDENCE_FIELDS if getattr(data, name) is not None)
    return round_half_up(filled / len(CONFIDENCE_FIELDS) * 100 * 100) / 100


@fail_soft(default=ContractData(), operation="contract parsing")
def parse_contract(text: str) -> ContractData:
    """
    Parse employment contract terms from approximated document text.

    Args:
        text: Approximated document text

    Returns:
        Contract terms; terms not found are None
    """
    if not text:
        return ContractData()

    salary = _amount(SALARY_PATTERN, text)

    data = ContractData(
        contract_number=_text(CONTRACT_NUMBER_PATTERN, text),
        position=_text(POSITION_PATTERN, text),
        department=_text(DEPARTMENT_PATTERN, text),
        salary=salary,
        currency=DEFAULT_CURRENCY if salary is not None else None,
        start_date=normalize_date(_text(START_DATE_PATTERN, text)),
        end_date=normalize_date(_text(END_DATE_PATTERN, text)),
        contract_type=_contract_type(text),
        work_hours=_whole_number(WORK_HOURS_PATTERN, text),
        probation_period=_whole_number(PROBATION_PATTERN, text),
        notice_period=_whole_number(NOTICE_PATTERN, text),
        benefits=ContractBenefits(
            housing=_amount(HOUSING_PATTERN, text),
            transport=_amount(TRANSPORT_PATTERN, text)
        )
    )

    logger.debug(f"Parsed contract terms: {sorted(data.to_payload())}")
    return data
