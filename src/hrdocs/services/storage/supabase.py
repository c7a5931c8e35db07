"""
Supabase-backed collaborators: bearer token verification through the auth
API and document record updates through the REST API.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from ...core.interfaces import DocumentStore, IdentityVerifier

logger = logging.getLogger(__name__)


class SupabaseIdentityVerifier(IdentityVerifier):
    """Resolves bearer tokens to user IDs via ``/auth/v1/user``."""

    def __init__(self, url: str, api_key: str, timeout: float = 10.0):
        self.url = url.rstrip('/')
        self.api_key = api_key
        self.timeout = timeout

    async def verify(self, token: str) -> Optional[str]:
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(
                    f"{self.url}/auth/v1/user",
                    headers={
                        "apikey": self.api_key,
                        "Authorization": f"Bearer {token}",
                    },
                )
        except httpx.HTTPError as e:
            logger.warning(f"Token verification request failed: {str(e)}")
            return None

        if response.status_code != 200:
            logger.info(f"Token rejected by auth service (status {response.status_code})")
            return None

        return response.json().get("id")


class SupabaseDocumentStore(DocumentStore):
    """Updates rows of the documents table via the PostgREST endpoint."""

    def __init__(self, url: str, api_key: str, table: str = "documents", timeout: float = 10.0):
        self.url = url.rstrip('/')
        self.api_key = api_key
        self.table = table
        self.timeout = timeout

    async def update(self, document_id: str, fields: Dict[str, Any]) -> None:
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.patch(
                f"{self.url}/rest/v1/{self.table}",
                params={"id": f"eq.{document_id}"},
                json=fields,
                headers={
                    "apikey": self.api_key,
                    "Authorization": f"Bearer {self.api_key}",
                    "Prefer": "return=minimal",
                },
            )
            response.raise_for_status()

        logger.debug(f"Updated {len(fields)} columns on {self.table} row {document_id}")
