"""
In-process collaborators for local development and tests.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from ...core.interfaces import DocumentStore, IdentityVerifier

logger = logging.getLogger(__name__)


class StaticTokenVerifier(IdentityVerifier):
    """Accepts a fixed set of API tokens. An empty set rejects everything."""

    def __init__(self, tokens: Iterable[str] = ()):
        self.tokens = {token for token in tokens if token}

    async def verify(self, token: str) -> Optional[str]:
        if token in self.tokens:
            return f"token:{token[:8]}"
        return None


class InMemoryDocumentStore(DocumentStore):
    """Keeps every update per document, merged into a current record."""

    def __init__(self):
        self.records: Dict[str, Dict[str, Any]] = {}
        self.updates: Dict[str, List[Dict[str, Any]]] = {}

    async def update(self, document_id: str, fields: Dict[str, Any]) -> None:
        self.updates.setdefault(document_id, []).append(dict(fields))
        self.records.setdefault(document_id, {}).update(fields)
        logger.debug(f"Stored {len(fields)} columns for document {document_id}")

    def get(self, document_id: str) -> Optional[Dict[str, Any]]:
        return self.records.get(document_id)
