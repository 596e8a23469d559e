import httpx
import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from main import create_app
from src.config import Settings
from tests.utils import FakeUpstream, make_settings


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest_asyncio.fixture
async def http_client(upstream):
    async with httpx.AsyncClient(transport=httpx.MockTransport(upstream)) as client:
        yield client


@pytest.fixture
def client(settings, upstream):
    transport_client = httpx.AsyncClient(transport=httpx.MockTransport(upstream))
    app = create_app(settings, http_client=transport_client)
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
