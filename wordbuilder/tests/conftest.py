"""
Pytest fixtures for Word Builder tests.

The remote services are replaced by an in-process FastAPI stub reached
through httpx's ASGI transport, so no network is involved.
"""

import httpx
import pytest

from ..api.client import BuilderClient, DictionaryClient
from ..session import MemoryIdentityStore, SessionController, WordDetailsFetcher
from .stub_service import BUILDER_PREFIX, DICTIONARY_PREFIX, StubService

BASE_URL = "http://wordbuilder.test"


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def stub() -> StubService:
    """Fresh stub of the builder and dictionary services."""
    return StubService()


@pytest.fixture
def transport(stub: StubService) -> httpx.ASGITransport:
    return httpx.ASGITransport(app=stub.app)


@pytest.fixture
def builder_client(transport) -> BuilderClient:
    return BuilderClient(BASE_URL + BUILDER_PREFIX, transport=transport)


@pytest.fixture
def dictionary_client(transport) -> DictionaryClient:
    return DictionaryClient(BASE_URL + DICTIONARY_PREFIX, transport=transport)


@pytest.fixture
def identity() -> MemoryIdentityStore:
    return MemoryIdentityStore()


@pytest.fixture
def controller(builder_client, dictionary_client, identity) -> SessionController:
    """Controller wired to the stub, with an empty token store."""
    return SessionController(
        builder=builder_client,
        identity=identity,
        details_fetcher=WordDetailsFetcher(dictionary_client),
    )
