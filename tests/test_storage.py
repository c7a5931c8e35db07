"""
Unit tests for the document store and identity verifier implementations.
Supabase requests are served by an httpx mock transport.
"""

import asyncio
import json
import pytest
import httpx

from src.hrdocs.services.storage import (
    InMemoryDocumentStore,
    StaticTokenVerifier,
    SupabaseDocumentStore,
    SupabaseIdentityVerifier
)
from src.hrdocs.services.storage import supabase


@pytest.fixture
def transport(monkeypatch):
    """Route every AsyncClient created by the storage module through a recorder."""
    requests = []
    responses = []
    real_client = httpx.AsyncClient

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        response = responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def client_factory(*args, **kwargs):
        return real_client(*args, transport=httpx.MockTransport(handler), **kwargs)

    monkeypatch.setattr(supabase.httpx, "AsyncClient", client_factory)
    return requests, responses


class TestSupabaseIdentityVerifier:
    """Test token verification against the auth API."""

    def test_valid_token(self, transport):
        async def run_test():
            requests, responses = transport
            responses.append(httpx.Response(200, json={"id": "user-1", "email": "hr@example.com"}))
            verifier = SupabaseIdentityVerifier("https://project.supabase.co/", "anon-key")

            user_id = await verifier.verify("jwt-token")

            assert user_id == "user-1"
            request = requests[0]
            assert str(request.url) == "https://project.supabase.co/auth/v1/user"
            assert request.headers["apikey"] == "anon-key"
            assert request.headers["Authorization"] == "Bearer jwt-token"

        asyncio.run(run_test())

    def test_rejected_token(self, transport):
        async def run_test():
            _, responses = transport
            responses.append(httpx.Response(401, json={"message": "invalid JWT"}))
            verifier = SupabaseIdentityVerifier("https://project.supabase.co", "anon-key")

            assert await verifier.verify("expired") is None

        asyncio.run(run_test())

    def test_unreachable_auth_service(self, transport):
        async def run_test():
            _, responses = transport
            responses.append(httpx.ConnectError("connection refused"))
            verifier = SupabaseIdentityVerifier("https://project.supabase.co", "anon-key")

            assert await verifier.verify("jwt-token") is None

        asyncio.run(run_test())


class TestSupabaseDocumentStore:
    """Test record updates through the REST API."""

    def test_update_request(self, transport):
        async def run_test():
            requests, responses = transport
            responses.append(httpx.Response(204))
            store = SupabaseDocumentStore("https://project.supabase.co", "service-key", table="hr_documents")

            await store.update("doc-1", {"extraction_status": "processing"})

            request = requests[0]
            assert request.method == "PATCH"
            assert request.url.path == "/rest/v1/hr_documents"
            assert request.url.params["id"] == "eq.doc-1"
            assert request.headers["Authorization"] == "Bearer service-key"
            assert request.headers["Prefer"] == "return=minimal"
            assert json.loads(request.content) == {"extraction_status": "processing"}

        asyncio.run(run_test())

    def test_update_failure_raises(self, transport):
        async def run_test():
            _, responses = transport
            responses.append(httpx.Response(500, json={"message": "database unavailable"}))
            store = SupabaseDocumentStore("https://project.supabase.co", "service-key")

            with pytest.raises(httpx.HTTPStatusError):
                await store.update("doc-1", {"extraction_status": "completed"})

        asyncio.run(run_test())


class TestInProcessCollaborators:
    """Test the in-memory store and static token verifier."""

    def test_static_tokens(self):
        async def run_test():
            verifier = StaticTokenVerifier(["secret-token", ""])

            assert await verifier.verify("secret-token") == "token:secret-t"
            assert await verifier.verify("") is None
            assert await verifier.verify("other") is None

        asyncio.run(run_test())

    def test_empty_verifier_rejects_everything(self):
        assert asyncio.run(StaticTokenVerifier().verify("anything")) is None

    def test_updates_merge_into_record(self):
        async def run_test():
            store = InMemoryDocumentStore()

            await store.update("doc-1", {"extraction_status": "processing"})
            await store.update("doc-1", {"extraction_status": "completed", "holder_name": "John Smith"})

            assert store.get("doc-1") == {"extraction_status": "completed", "holder_name": "John Smith"}
            assert len(store.updates["doc-1"]) == 2
            assert store.get("missing") is None

        asyncio.run(run_test())
