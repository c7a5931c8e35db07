"""
Analysis orchestrator for uploaded HR documents.
Runs text approximation, field extraction and quality scoring, then writes
the outcome back to the document record when one is named.
"""

import asyncio
import logging
import re
import time
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional, Tuple

from ...core.interfaces import DocumentAnalysisService, DocumentStore
from ...core.models import (
    AnalysisResult,
    ContractData,
    ContractParseResult,
    DateScanResult,
    DocumentLanguage,
    DocumentMetadata,
    ExtractedFields,
    ExtractionStatus,
    QualityAnalysis
)
from ...core.monitoring import monitor_performance
from ...core.resilience import PersistenceError, best_effort
from ..document import (
    analyze_quality,
    approximate_text,
    contract_confidence,
    extract_fields,
    parse_contract,
    scan_dates
)
from ..document.quality import round_half_up

logger = logging.getLogger(__name__)

CHARS_PER_PAGE = 2000
DATE_SCAN_PREVIEW_LENGTH = 500

# Scalar columns copied out of the extracted fields onto the document record
PROMOTED_COLUMNS = (
    'document_number',
    'issuer',
    'holder_name',
    'holder_id',
    'amount',
    'issue_date',
    'expiry_date',
)

_ARABIC_CHAR = re.compile(r'[\u0600-\u06FF]')
_LATIN_CHAR = re.compile(r'[a-zA-Z]')


def estimate_page_count(text: str) -> int:
    return max(1, round_half_up(len(text) / CHARS_PER_PAGE))


def detect_language(text: str) -> DocumentLanguage:
    """Dominant script by character count; a tie is reported as mixed."""
    arabic = len(_ARABIC_CHAR.findall(text))
    latin = len(_LATIN_CHAR.findall(text))

    if arabic > latin:
        return DocumentLanguage.ARABIC
    if latin > arabic:
        return DocumentLanguage.ENGLISH
    return DocumentLanguage.MIXED


def calculate_overall_confidence(fields: ExtractedFields, analysis: QualityAnalysis) -> int:
    return round_half_up(analysis.confidence)


class DocumentAnalysisOrchestrator(DocumentAnalysisService):
    """
    Coordinates the analysis pipeline and persistence of its results.
    """

    def __init__(
        self,
        document_store: DocumentStore,
        text_preview_length: int = 5000,
        stored_text_length: int = 10000,
        contract_store: Optional[DocumentStore] = None
    ):
        """
        Initialize the orchestrator.

        Args:
            document_store: Store receiving status and result updates
            text_preview_length: Characters of text returned to the caller
            stored_text_length: Characters of text written to the document record
            contract_store: Store receiving contract updates (defaults to document_store)
        """
        self.document_store = document_store
        self.contract_store = contract_store if contract_store is not None else document_store
        self.text_preview_length = text_preview_length
        self.stored_text_length = stored_text_length

        logger.info("Initialized document analysis orchestrator")

    @monitor_performance("document-analysis", "analyze_document")
    async def analyze_document(
        self,
        file_bytes: bytes,
        mime_type: str,
        document_type: Optional[str] = None,
        document_id: Optional[str] = None
    ) -> AnalysisResult:
        """
        Analyze an uploaded file and persist the outcome.

        Args:
            file_bytes: Raw file contents
            mime_type: Declared MIME type of the upload
            document_type: Optional free-text document type hint
            document_id: Optional document record to update with the result

        Returns:
            Analysis result

        Raises:
            PersistenceError: If the final update of the document record fails
        """
        start_time = time.time()

        if document_id:
            await best_effort(
                "mark document processing",
                self.document_store.update,
                document_id,
                {"extraction_status": ExtractionStatus.PROCESSING.value}
            )

        logger.info(f"Analyzing {len(file_bytes)} byte upload ({mime_type}), type hint {document_type!r}")

        text, fields, analysis = await self._offload(self._run_pipeline, file_bytes, mime_type, document_type)

        metadata = DocumentMetadata(
            file_size=len(file_bytes),
            file_type=mime_type or "",
            page_count=estimate_page_count(text),
            language=detect_language(text),
            processing_time=int((time.time() - start_time) * 1000)
        )

        result = AnalysisResult(
            extracted_data=fields,
            extracted_text=text[:self.text_preview_length],
            ai_analysis=analysis,
            metadata=metadata
        )

        logger.info(
            f"Extracted {analysis.data_points} fields with confidence {analysis.confidence} "
            f"in {metadata.processing_time}ms"
        )

        if document_id:
            await self._persist(document_id, result, text)

        return result

    async def scan_document_dates(self, file_bytes: bytes, mime_type: str) -> DateScanResult:
        result = await self._offload(self._scan_dates, file_bytes, mime_type)
        logger.info(f"Date scan found {result.confidence}% of contract dates")
        return result

    @monitor_performance("document-analysis", "parse_contract")
    async def parse_contract(
        self,
        file_bytes: bytes,
        mime_type: str,
        contract_id: str
    ) -> ContractParseResult:
        """
        Parse employment contract terms and write them to the contract record.

        Args:
            file_bytes: Raw file contents
            mime_type: Declared MIME type of the upload
            contract_id: Contract record to update with the parsed terms

        Returns:
            Parsed terms and fill-rate confidence

        Raises:
            PersistenceError: If the final update of the contract record fails
        """
        await best_effort(
            "mark contract processing",
            self.contract_store.update,
            contract_id,
            {"extraction_status": ExtractionStatus.PROCESSING.value}
        )

        data = await self._offload(self._parse_contract_terms, file_bytes, mime_type)
        result = ContractParseResult(data=data, confidence=contract_confidence(data))

        logger.info(f"Parsed contract {contract_id} with confidence {result.confidence}")

        update = {
            "extracted_data": data.to_payload(),
            "extraction_status": ExtractionStatus.COMPLETED.value,
            "extraction_confidence": result.confidence,
            "updated_at": datetime.now(timezone.utc).isoformat()
        }
        try:
            await self.contract_store.update(contract_id, update)
        except Exception as e:
            logger.error(f"Failed to persist contract {contract_id}: {str(e)}")
            raise PersistenceError(f"Failed to persist contract results: {str(e)}")

        return result

    def _run_pipeline(
        self,
        file_bytes: bytes,
        mime_type: str,
        document_type: Optional[str]
    ) -> Tuple[str, ExtractedFields, QualityAnalysis]:
        text = approximate_text(file_bytes, mime_type)
        fields = extract_fields(text, document_type)
        return text, fields, analyze_quality(fields, text, document_type)

    def _scan_dates(self, file_bytes: bytes, mime_type: str) -> DateScanResult:
        return scan_dates(approximate_text(file_bytes, mime_type), DATE_SCAN_PREVIEW_LENGTH)

    def _parse_contract_terms(self, file_bytes: bytes, mime_type: str) -> ContractData:
        return parse_contract(approximate_text(file_bytes, mime_type))

    async def _offload(self, func: Callable, *args):
        # Pattern matching is CPU bound; keep it off the event loop
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(None, func, *args)

    def build_update(self, result: AnalysisResult, text: str) -> Dict[str, Any]:
        """
        Build the document record update for a completed analysis.

        Promoted columns without a value are left out so existing values
        on the record are not overwritten with nulls.
        """
        fields = result.extracted_data
        update: Dict[str, Any] = {
            "extraction_status": ExtractionStatus.COMPLETED.value,
            "extraction_confidence": calculate_overall_confidence(fields, result.ai_analysis),
            "extracted_data": fields.to_payload(),
            "extracted_text": text[:self.stored_text_length],
            "ai_analysis": result.ai_analysis.model_dump(by_alias=True, mode="json"),
        }

        for column in PROMOTED_COLUMNS:
            value = getattr(fields, column)
            if value is not None:
                update[column] = value

        update["metadata"] = result.metadata.model_dump(by_alias=True, mode="json")
        update["updated_at"] = datetime.now(timezone.utc).isoformat()
        return update

    async def _persist(self, document_id: str, result: AnalysisResult, text: str) -> None:
        try:
            await self.document_store.update(document_id, self.build_update(result, text))
        except Exception as e:
            logger.error(f"Failed to persist analysis for document {document_id}: {str(e)}")
            raise PersistenceError(f"Failed to persist analysis results: {str(e)}")

        logger.info(f"Persisted analysis for document {document_id}")
