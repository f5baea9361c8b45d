"""
Marathon Event API — Test Configuration (conftest.py)
=======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   The document store is mongomock-motor's in-memory Motor client, so
       services run real queries without a MongoDB server. HTTP tests drive
       the ASGI app through httpx's ASGITransport with the store injected
       through create_app; startup is exercised by entering main.lifespan
       directly.

Fixtures (function-scoped):
    ├── mongo_client / store: fresh in-memory database per test
    ├── test_settings: Settings with a fixed token secret
    ├── marathon_service / registration_service: services over `store`
    ├── make_marathon: inserts a marathon document, returns its id
    └── test_client: httpx AsyncClient bound to create_app(...)
"""

import os

# Override settings for testing BEFORE any app imports
os.environ["ENVIRONMENT"] = "development"
os.environ["ACCESS_TOKEN_SECRET"] = "test-secret-not-real-0123456789abcdef"
os.environ["MONGODB_URI"] = "mongodb://localhost:27017"
os.environ["PROTECTED_ROUTES"] = ""
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from mongomock_motor import AsyncMongoMockClient

from marathon_api.config import Settings
from marathon_api.database import StoreClient
from marathon_api.main import create_app
from marathon_api.services.marathon_service import MarathonService
from marathon_api.services.registration_service import RegistrationService


@pytest.fixture
def mongo_client():
    return AsyncMongoMockClient()


@pytest.fixture
def store(mongo_client):
    return StoreClient(mongo_client, "marathonDB_test")


@pytest.fixture
def test_settings():
    return Settings(
        environment="development",
        access_token_secret="test-secret-not-real-0123456789abcdef",
        protected_routes="",
        log_level="WARNING",
    )


@pytest.fixture
def marathon_service(store):
    return MarathonService(store, upcoming_sample_size=6)


@pytest.fixture
def registration_service(store):
    return RegistrationService(store)


@pytest.fixture
def make_marathon(store):
    """
    Inserts a marathon directly into the store.

    Usage:
        marathon_id = await make_marathon(title="Spring Run", marathonStartDate="2030-05-01")
    """
    async def _make(**fields):
        doc = {"title": "City Marathon", "totalRegistrationCount": 0}
        doc.update(fields)
        result = await store.marathons.insert_one(doc)
        return str(result.inserted_id)

    return _make


@pytest_asyncio.fixture
async def test_client(test_settings, store):
    """
    Usage:
        async def test_root(test_client):
            response = await test_client.get("/")
            assert response.status_code == 200
    """
    app = create_app(test_settings, store=store)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
