"""
Core data models for the HRDocs analysis service.
All models use Pydantic for validation and serialization.

Attribute names are snake_case; JSON output uses camelCase aliases so the
wire format matches what the HR frontend and the documents table expect.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ExtractionStatus(str, Enum):
    """Extraction status stored on the document record."""
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    VERIFIED = "verified"


class DocumentLanguage(str, Enum):
    """Dominant script detected in the approximated text."""
    ARABIC = "Arabic"
    ENGLISH = "English"
    MIXED = "Mixed"


class CamelModel(BaseModel):
    """Base model serializing to camelCase and accepting either spelling."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Core Data Models

class ExtractedFields(CamelModel):
    """Fields extracted from a document. Every field is independently optional."""
    model_config = ConfigDict(frozen=True)

    # Identifiers
    document_number: Optional[str] = None
    holder_id: Optional[str] = None
    license_number: Optional[str] = None
    certificate_number: Optional[str] = None

    # Names and organisations
    holder_name: Optional[str] = None
    issuer: Optional[str] = None
    sponsor_name: Optional[str] = None
    sponsor_id: Optional[str] = None
    institution: Optional[str] = None
    certification_body: Optional[str] = None

    # Dates, always YYYY-MM-DD
    issue_date: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    expiry_date: Optional[str] = None
    date_of_birth: Optional[str] = None
    completion_date: Optional[str] = None

    # Money
    amount: Optional[float] = None
    salary: Optional[float] = None
    currency: Optional[str] = None

    # Employment and demographic attributes
    position: Optional[str] = None
    department: Optional[str] = None
    nationality: Optional[str] = None
    place_of_birth: Optional[str] = None
    gender: Optional[str] = None
    blood_group: Optional[str] = None
    address: Optional[str] = None
    phone_number: Optional[str] = None
    email: Optional[str] = None
    emergency_contact: Optional[str] = None
    profession: Optional[str] = None
    qualification: Optional[str] = None
    grade: Optional[str] = None
    visa_type: Optional[str] = None
    entry_port: Optional[str] = None

    def populated_count(self) -> int:
        """Number of fields holding a value."""
        return sum(1 for name in type(self).model_fields if getattr(self, name) is not None)

    def to_payload(self) -> dict:
        """camelCase dict with absent fields dropped."""
        return self.model_dump(by_alias=True, exclude_none=True)


class QualityAnalysis(CamelModel):
    """Quality and confidence assessment of an extraction."""
    model_config = ConfigDict(frozen=True)

    document_type: str = "unknown"
    confidence: int = Field(ge=0, le=100)
    completeness: int = Field(ge=0, le=100)
    quality_score: int = Field(ge=0, le=100)
    data_points: int = Field(ge=0)
    warnings: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    key_insights: List[str] = Field(default_factory=list)
    missing_fields: List[str] = Field(default_factory=list)


class DocumentMetadata(CamelModel):
    """Metadata describing the analysed upload."""
    file_size: int = Field(ge=0)
    file_type: str = ""
    page_count: int = Field(ge=1)
    language: DocumentLanguage
    processing_time: int = Field(ge=0, description="Milliseconds")


class AnalysisResult(CamelModel):
    """Complete result of a document analysis request."""
    extracted_data: ExtractedFields
    extracted_text: str
    ai_analysis: QualityAnalysis
    metadata: DocumentMetadata

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class DateScanResult(CamelModel):
    """Dates located in a document by the lightweight date scan."""
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    expiry_date: Optional[str] = None
    issue_date: Optional[str] = None
    confidence: int = Field(default=0, ge=0, le=100)
    extracted_text: str = ""


class ContractType(str, Enum):
    """Employment contract category recognised in contract text."""
    PERMANENT = "permanent"
    FIXED_TERM = "fixed_term"
    PART_TIME = "part_time"


class ContractBenefits(CamelModel):
    """Monthly allowances stated in a contract."""
    model_config = ConfigDict(frozen=True)

    housing: Optional[float] = None
    transport: Optional[float] = None


class ContractData(CamelModel):
    """Contract terms parsed from an employment contract."""
    model_config = ConfigDict(frozen=True)

    contract_number: Optional[str] = None
    position: Optional[str] = None
    department: Optional[str] = None
    salary: Optional[float] = None
    currency: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    contract_type: Optional[ContractType] = None
    work_hours: Optional[int] = Field(default=None, description="Hours per week")
    probation_period: Optional[int] = Field(default=None, description="Months")
    notice_period: Optional[int] = Field(default=None, description="Days")
    benefits: ContractBenefits = Field(default_factory=ContractBenefits)

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class ContractParseResult(CamelModel):
    """Parsed contract terms with a fill-rate confidence."""
    data: ContractData
    confidence: float = Field(ge=0, le=100)
