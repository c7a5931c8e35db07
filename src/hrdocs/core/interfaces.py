"""
Abstract base classes and interfaces for the HRDocs analysis service.
These define the contracts that service and collaborator implementations follow.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from .models import AnalysisResult, ContractParseResult, DateScanResult


class DocumentAnalysisService(ABC):
    """Abstract interface for the document analysis pipeline."""

    @abstractmethod
    async def analyze_document(
        self,
        file_bytes: bytes,
        mime_type: str,
        document_type: Optional[str] = None,
        document_id: Optional[str] = None
    ) -> AnalysisResult:
        """
        Extract fields from an uploaded file and assess extraction quality.

        Args:
            file_bytes: Raw file contents
            mime_type: Declared MIME type of the upload
            document_type: Optional free-text document type hint
            document_id: Optional document record to update with the result

        Returns:
            Extracted fields, text preview, quality analysis and metadata
        """
        pass

    @abstractmethod
    async def scan_document_dates(
        self,
        file_bytes: bytes,
        mime_type: str
    ) -> DateScanResult:
        """
        Locate start, end, expiry and issue dates in an uploaded file.

        Args:
            file_bytes: Raw file contents
            mime_type: Declared MIME type of the upload

        Returns:
            Dates found and a fill-rate confidence
        """
        pass

    @abstractmethod
    async def parse_contract(
        self,
        file_bytes: bytes,
        mime_type: str,
        contract_id: str
    ) -> ContractParseResult:
        """
        Parse employment contract terms and update the contract record.

        Args:
            file_bytes: Raw file contents
            mime_type: Declared MIME type of the upload
            contract_id: Contract record to update

        Returns:
            Contract terms and a fill-rate confidence
        """
        pass


class DocumentStore(ABC):
    """Abstract interface for the external document record store."""

    @abstractmethod
    async def update(self, document_id: str, fields: Dict[str, Any]) -> None:
        """
        Update named columns of a document record.

        Args:
            document_id: Identifier of the document record
            fields: Column values to write

        Raises:
            Exception: When the store rejects or cannot receive the update
        """
        pass


class IdentityVerifier(ABC):
    """Abstract interface for bearer credential verification."""

    @abstractmethod
    async def verify(self, token: str) -> Optional[str]:
        """
        Resolve a bearer token to a principal.

        Args:
            token: Bearer token presented by the caller

        Returns:
            Principal identifier, or None if the token is not valid
        """
        pass
