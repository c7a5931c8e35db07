"""
Bilingual field extraction from approximated document text.

Every field owns an ordered tuple of compiled patterns. The first pattern
whose first group captures a non-blank value wins. English labels are
matched case-insensitively at word boundaries; Arabic labels are matched
as-is. Free-text values stop at a newline, a comma, a sentence period, the
end of the text, or the next ``Label:`` token, since approximated text is
usually a single line.
"""

import logging
import re
from typing import Optional, Sequence

from ...core.models import ExtractedFields
from ...core.resilience import fail_soft
from .dates import DATE_TOKEN, normalize_date

logger = logging.getLogger(__name__)

_I = re.IGNORECASE

ARABIC_RUN = r'([\u0600-\u06FF]+(?:[^\S\n]+[\u0600-\u06FF]+)*)'
ARABIC_WORD = r'([\u0600-\u06FF]+)'

# A capitalised label such as "Position:", "Start Date:" or "Place of Birth:"
_NEXT_LABEL = (
    r'\s+(?-i:[A-Z][A-Za-z]*'
    r'(?:\s+(?:of\s+)?(?:Date|Number|No|Name|Title|Type|Category|Group|Birth|Entry|Port|'
    r'Contact|By|ID|Id|Authority|Body|Until|Status|Address)\b)?)\s*:'
)
_FIELD_END = r'(?=\s*(?:,|\.(?=\s|$)|\n|$)|' + _NEXT_LABEL + r')'
_BIRTHPLACE_END = r'(?=\s*(?:\n|\.|date\b|$)|' + _NEXT_LABEL + r')'
_ADDRESS_END = r'(?=\n\n|\s*(?:phone|email|mobile)\b|\s*$|' + _NEXT_LABEL + r')'

_MONEY = r'([\d,]+(?:\.\d{2})?)'
# Unlabelled amounts only start at the beginning of a digit run
_BARE_MONEY = r'(?<![\d,])' + _MONEY
_MONTHLY = r'\s*(?:شهري|شهريا|monthly)?'
_NUMBER_LABEL = r'\s*(?:no\b\.?|number\b|#)'


def _compile(*patterns: str, flags: int = _I) -> tuple:
    return tuple(re.compile(pattern, flags) for pattern in patterns)


def _dated(cues: str) -> re.Pattern:
    return re.compile(r'(?:' + cues + r')\s*(?:date)?[:\s]*' + DATE_TOKEN, _I)


# Identifiers

DOCUMENT_NUMBER_PATTERNS = (
    re.compile(
        r'\b(?:document|passport|iqama|contract|certificate|license|reference)'
        + _NUMBER_LABEL + r'[:\s]*([A-Z0-9\-/]+)', _I
    ),
    re.compile(r'(?:رقم)\s*(?:الوثيقة|الجواز|الإقامة|العقد)[:\s]*([A-Z0-9\-/]+)', _I),
    re.compile(r'\b([A-Z]{1,3}\d{7,10})\b'),
)

EMPLOYEE_NUMBER_PATTERNS = _compile(
    r'\bEmployee\s+Number[:\s]+([A-Z0-9]+)',
    r'(?:رقم الموظف|رقم العامل)[:\s]+([A-Z0-9]+)',
)

# The identifier must carry a digit so that "Iqama ID: 123..." skips "ID"
HOLDER_ID_PATTERNS = _compile(
    r'\b(?:national\s+id|iqama|passport|identification|id)' + r'(?:' + _NUMBER_LABEL + r')?'
    r'[:\s]*([A-Z0-9\-]*\d[A-Z0-9\-]*)',
    r'(?:رقم|هوية|جواز)[:\s]*([A-Z0-9\-]*\d[A-Z0-9\-]*)',
    r'\b(\d{10})\b',
)

LICENSE_NUMBER_PATTERNS = _compile(
    r'\blicen[cs]e' + _NUMBER_LABEL + r'[:\s]*([A-Z0-9\-/]+)',
    r'(?:رقم الترخيص|رقم الرخصة)[:\s]*([A-Z0-9\-/]+)',
)

CERTIFICATE_NUMBER_PATTERNS = _compile(
    r'\bcertificate' + _NUMBER_LABEL + r'[:\s]*([A-Z0-9\-/]+)',
    r'(?:رقم الشهادة)[:\s]*([A-Z0-9\-/]+)',
)

# Names and organisations

HOLDER_NAME_PATTERNS = _compile(
    r'\b(?:name|holder|employee|passenger)[:\s]*([A-Z][a-z]+(?:\s+[A-Z][a-z]+)+?)' + _FIELD_END,
    r'\b(?:name|holder|employee|passenger)[:\s]*([A-Z][a-z]+(?:\s+[A-Z][a-z]+)+)',
    r'\b(?:name|holder|employee)[:\s]*([A-Z\s]+(?:[A-Z][a-z]+)?)',
    r'(?:الاسم|اسم)[:\s]*' + ARABIC_RUN,
    r'\bEmployee[:\s]+([A-Z][A-Z\s]+[A-Z])',
)

ISSUER_PATTERNS = _compile(
    r'\b(?:issued\s+by|issuing\s+authority|issuer)[:\s]*([A-Za-z\s]+?)' + _FIELD_END,
    r'(?:الجهة المصدرة)[:\s]*' + ARABIC_RUN,
    r'\b(?:ministry|government|authority|department)\s+of\s+([A-Za-z\s]+?)' + _FIELD_END,
)

SPONSOR_NAME_PATTERNS = _compile(
    r'\b(?:sponsor|employer|company)(?:\s+name)?[:\s]*([A-Za-z\s&]+?)' + _FIELD_END,
    r'(?:الكفيل|جهة العمل)[:\s]*' + ARABIC_RUN,
)

SPONSOR_ID_PATTERNS = _compile(
    r'\bsponsor\s*(?:id\b|no\b\.?|number\b)[:\s]*([A-Z0-9\-]+)',
    r'(?:رقم الكفيل|هوية الكفيل)[:\s]*([A-Z0-9\-]+)',
)

INSTITUTION_PATTERNS = _compile(
    r'\b(?:institution|university|college|school)[:\s]*([A-Za-z\s]+?)' + _FIELD_END,
    r'(?:الجامعة|المعهد)[:\s]*' + ARABIC_RUN,
)

CERTIFICATION_BODY_PATTERNS = _compile(
    r'\b(?:certified\s+by|certification\s+body|accredited\s+by|awarded\s+by)[:\s]*([A-Za-z\s&]+?)' + _FIELD_END,
    r'(?:جهة الاعتماد|الجهة المانحة)[:\s]*' + ARABIC_RUN,
)

# Dates

ISSUE_DATE_PATTERN = _dated(r'\b(?:issue|issued)|تاريخ الإصدار|تاريخ التوقيع|تاريخ العقد')
START_DATE_PATTERN = _dated(r'\b(?:start|commencement|effective|from)|تاريخ البدء|تاريخ البداية|من تاريخ|يبدأ في')
END_DATE_PATTERN = _dated(r'\b(?:end|termination|to|until)|تاريخ الانتهاء|تاريخ النهاية|إلى تاريخ|ينتهي في|حتى تاريخ')
EXPIRY_DATE_PATTERN = _dated(r'\b(?:expir(?:y|es|ation)|valid\s+until)|تاريخ الصلاحية|صالح حتى|ينتهي|تاريخ الانتهاء')
BIRTH_DATE_PATTERN = re.compile(
    r'(?:\b(?:date\s+of\s+birth|DOB|born)|تاريخ الميلاد|تاريخ المولد|مواليد)[:\s]*' + DATE_TOKEN, _I
)
COMPLETION_DATE_PATTERN = _dated(r'\b(?:completion|completed|graduation)|تاريخ التخرج|تاريخ الإكمال')

# Money

AMOUNT_PATTERNS = _compile(
    r'\b(?:amount|total|payment|fee)[:\s]*(?:SAR|SR|USD|\$|€)?\s*' + _MONEY,
    r'\b(?:SAR|SR)\s*' + _MONEY,
    r'\$\s*' + _MONEY,
)

SALARY_PATTERNS = _compile(
    r'(?:\bsalary|\bwage|\bcompensation|الراتب|الأجر|المرتب)[:\s]*(?:SAR|SR|ريال)?\s*' + _MONEY,
    r'(?:\bSAR|\bSR|ريال)\s*' + _MONEY + _MONTHLY,
    _BARE_MONEY + r'\s*(?:SAR|SR|ريال)' + _MONTHLY,
)

CURRENCY_CODE_PATTERN = re.compile(r'\b(SAR|SR|USD|EUR|GBP|AED)\b', _I)
CURRENCY_SYMBOLS = (('$', 'USD'), ('€', 'EUR'), ('£', 'GBP'), ('ريال', 'SAR'))

# Employment and demographic attributes

POSITION_PATTERNS = _compile(
    r'\b(?:position|job\s+title|designation|occupation|profession)[:\s]*([A-Za-z\s]+?)' + _FIELD_END,
    r'(?:المسمى الوظيفي|الوظيفة)[:\s]*' + ARABIC_RUN,
)

DEPARTMENT_PATTERNS = _compile(
    r'\b(?:department|division|section)[:\s]*([A-Za-z\s]+?)' + _FIELD_END,
    r'(?:القسم|الإدارة)[:\s]*' + ARABIC_RUN,
)

NATIONALITY_PATTERNS = _compile(
    r'\b(?:nationality|citizen)[:\s]*([A-Za-z]+)',
    r'(?:الجنسية)[:\s]*' + ARABIC_WORD,
)

PLACE_OF_BIRTH_PATTERNS = _compile(
    r'\b(?:place|city)\s+of\s+birth[:\s]*([A-Za-z\s,]+?)' + _BIRTHPLACE_END,
    r'(?:مكان الميلاد)[:\s]*' + ARABIC_RUN,
)

GENDER_PATTERNS = _compile(
    r'\b(?:gender|sex)[:\s]*(Male|Female|M|F)\b',
    r'(?:الجنس)[:\s]*(ذكر|أنثى)',
)

BLOOD_GROUP_PATTERNS = _compile(
    r'\bblood\s*(?:group|type)[:\s]*(AB[+\-]|A[+\-]|B[+\-]|O[+\-])',
    r'(?:فصيلة الدم)[:\s]*(AB[+\-]|A[+\-]|B[+\-]|O[+\-])',
)

PHONE_NUMBER_PATTERNS = _compile(
    r'\b(?:phone|mobile|tel|contact)[:\s]*(\+?\d[\d\s\-()]{8,})',
    r'(?:هاتف|جوال)[:\s]*(\+?\d[\d\s\-]+)',
)

# A local part is matched from the start of its run only
EMAIL_PATTERNS = _compile(
    r'(?<![a-zA-Z0-9._%+\-])([a-zA-Z0-9._%+\-]+@[a-zA-Z0-9.\-]+\.[a-zA-Z]{2,})',
    flags=0,
)

ADDRESS_PATTERNS = _compile(
    r'\b(?:address|residence)[:\s]*([A-Za-z0-9\s,.\-]+?)' + _ADDRESS_END,
)

EMERGENCY_CONTACT_PATTERNS = _compile(
    r'\bemergency\s+contact(?:\s+number)?[:\s]*([A-Za-z0-9+\s\-()]+?)' + _FIELD_END,
    r'(?:جهة الاتصال في الطوارئ|رقم الطوارئ)[:\s]*([\u0600-\u06FF0-9+\s\-]+)',
)

PROFESSION_PATTERNS = _compile(
    r'\b(?:profession|occupation)[:\s]*([A-Za-z\s]+?)' + _FIELD_END,
    r'(?:المهنة)[:\s]*' + ARABIC_RUN,
)

QUALIFICATION_PATTERNS = _compile(
    r'\b(?:qualification|degree|education)[:\s]*([A-Za-z.\s]+?)' + _FIELD_END,
    r'(?:المؤهل)[:\s]*' + ARABIC_RUN,
)

GRADE_PATTERNS = _compile(
    r'\b(?:grade|gpa|score)[:\s]*([A-F]\+?(?![A-Za-z])|\d\.\d+)',
    r'(?:التقدير)[:\s]*' + ARABIC_WORD,
)

VISA_TYPE_PATTERNS = _compile(
    r'\bvisa\s+(?:type|category)[:\s]*([A-Za-z0-9\s]+?)' + _FIELD_END,
    r'(?:نوع التأشيرة)[:\s]*' + ARABIC_RUN,
)

ENTRY_PORT_PATTERNS = _compile(
    r'\b(?:port\s+of\s+entry|entry\s+port|point\s+of\s+entry)[:\s]*([A-Za-z\s]+?)' + _FIELD_END,
    r'(?:منفذ الدخول|ميناء الدخول)[:\s]*' + ARABIC_RUN,
)


def _first_match(text: str, patterns: Sequence[re.Pattern]) -> Optional[str]:
    """Return the trimmed first group of the first pattern that captures something non-blank."""
    for pattern in patterns:
        match = pattern.search(text)
        if match and match.group(1):
            value = match.group(1).strip()
            if value:
                return value
    return None


def _first_number(text: str, patterns: Sequence[re.Pattern]) -> Optional[float]:
    for pattern in patterns:
        match = pattern.search(text)
        if not match:
            continue
        try:
            return float(match.group(1).replace(',', ''))
        except ValueError:
            continue
    return None


def _date(text: str, pattern: re.Pattern) -> Optional[str]:
    match = pattern.search(text)
    return normalize_date(match.group(1)) if match else None


def _currency(text: str) -> Optional[str]:
    match = CURRENCY_CODE_PATTERN.search(text)
    if match:
        return match.group(1).upper()
    for symbol, code in CURRENCY_SYMBOLS:
        if symbol in text:
            return code
    return None


def _document_number(text: str) -> Optional[str]:
    # An explicit employee number label overrides any other identifier
    return _first_match(text, EMPLOYEE_NUMBER_PATTERNS) or _first_match(text, DOCUMENT_NUMBER_PATTERNS)


@fail_soft(default=ExtractedFields(), operation="field extraction")
def extract_fields(text: str, doc_type_hint: Optional[str] = None) -> ExtractedFields:
    """
    Populate the fixed field schema from approximated document text.

    Args:
        text: Approximated document text
        doc_type_hint: Optional document type hint supplied by the caller

    Returns:
        Extracted fields; absent values are None
    """
    if not text:
        return ExtractedFields()

    fields = ExtractedFields(
        document_number=_document_number(text),
        holder_id=_first_match(text, HOLDER_ID_PATTERNS),
        license_number=_first_match(text, LICENSE_NUMBER_PATTERNS),
        certificate_number=_first_match(text, CERTIFICATE_NUMBER_PATTERNS),
        holder_name=_first_match(text, HOLDER_NAME_PATTERNS),
        issuer=_first_match(text, ISSUER_PATTERNS),
        sponsor_name=_first_match(text, SPONSOR_NAME_PATTERNS),
        sponsor_id=_first_match(text, SPONSOR_ID_PATTERNS),
        institution=_first_match(text, INSTITUTION_PATTERNS),
        certification_body=_first_match(text, CERTIFICATION_BODY_PATTERNS),
        issue_date=_date(text, ISSUE_DATE_PATTERN),
        start_date=_date(text, START_DATE_PATTERN),
        end_date=_date(text, END_DATE_PATTERN),
        expiry_date=_date(text, EXPIRY_DATE_PATTERN),
        date_of_birth=_date(text, BIRTH_DATE_PATTERN),
        completion_date=_date(text, COMPLETION_DATE_PATTERN),
        amount=_first_number(text, AMOUNT_PATTERNS),
        salary=_first_number(text, SALARY_PATTERNS),
        currency=_currency(text),
        position=_first_match(text, POSITION_PATTERNS),
        department=_first_match(text, DEPARTMENT_PATTERNS),
        nationality=_first_match(text, NATIONALITY_PATTERNS),
        place_of_birth=_first_match(text, PLACE_OF_BIRTH_PATTERNS),
        gender=_first_match(text, GENDER_PATTERNS),
        blood_group=_first_match(text, BLOOD_GROUP_PATTERNS),
        address=_first_match(text, ADDRESS_PATTERNS),
        phone_number=_first_match(text, PHONE_NUMBER_PATTERNS),
        email=_first_match(text, EMAIL_PATTERNS),
        emergency_contact=_first_match(text, EMERGENCY_CONTACT_PATTERNS),
        profession=_first_match(text, PROFESSION_PATTERNS),
        qualification=_first_match(text, QUALIFICATION_PATTERNS),
        grade=_first_match(text, GRADE_PATTERNS),
        visa_type=_first_match(text, VISA_TYPE_PATTERNS),
        entry_port=_first_match(text, ENTRY_PORT_PATTERNS),
    )

    logger.debug(f"Extracted {fields.populated_count()} fields (hint={doc_type_hint!r})")
    return fields
