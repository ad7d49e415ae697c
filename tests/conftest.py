"""
Pytest fixtures for ProjectHub tests.
"""

from types import SimpleNamespace
from typing import AsyncGenerator
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from src.config import Settings
from src.database import build_engine
from src.kernel.identity.jwt import JWTManager
from src.kernel.identity.password import hash_password
from src.kernel.store import Document, DocumentStore
from src.main import create_app

TEST_SECRET = "test-secret-key-for-testing-only"
TEST_PASSWORD = "TestPassword123"


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings pointing at a throwaway file-based SQLite database."""
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'projecthub_test.db'}",
        secret_key=TEST_SECRET,
        environment="test",
    )


@pytest_asyncio.fixture
async def store(settings: Settings) -> AsyncGenerator[DocumentStore, None]:
    """A real document store with empty tables."""
    document_store = DocumentStore(build_engine(settings))
    await document_store.init()
    yield document_store
    await document_store.close()


@pytest.fixture
def jwt_manager() -> JWTManager:
    """Create a JWT manager for tests."""
    return JWTManager(
        secret_key=TEST_SECRET,
        algorithm="HS256",
        access_token_expire_minutes=30,
    )


@pytest_asyncio.fixture
async def client(
    settings: Settings,
    store: DocumentStore,
    jwt_manager: JWTManager,
) -> AsyncGenerator[AsyncClient, None]:
    """Async client wired to the test store and token manager."""
    app = create_app(settings)
    app.state.store = store
    app.state.jwt_manager = jwt_manager

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


async def make_user(store: DocumentStore, name: str, password: str = TEST_PASSWORD) -> Document:
    return await store.users.create({
        "name": name,
        "email": f"{name}@example.com",
        "password": hash_password(password),
        "projects": [],
        "contacts": [],
    })


@pytest.fixture
def user_factory(store: DocumentStore):
    """Create extra users: await user_factory("carol")."""
    async def _create(name: str, password: str = TEST_PASSWORD) -> Document:
        return await make_user(store, name, password)
    return _create


@pytest_asyncio.fixture
async def test_user(store: DocumentStore) -> Document:
    """A registered user with no projects or contacts."""
    return await make_user(store, "alice")


@pytest_asyncio.fixture
async def other_user(store: DocumentStore) -> Document:
    return await make_user(store, "bob")


@pytest.fixture
def auth_headers(test_user: Document, jwt_manager: JWTManager) -> dict:
    """Create authentication headers for the test user."""
    token, _ = jwt_manager.issue_token(test_user["id"], test_user["name"])
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def mock_store() -> SimpleNamespace:
    """Store double whose collection primitives are AsyncMocks."""
    return SimpleNamespace(users=AsyncMock(), projects=AsyncMock())


@pytest.fixture
def sample_project() -> dict:
    """Project fields as sent by a client (author_id filled in by the test)."""
    return {
        "name": "Kanban board",
        "description": "Drag and drop task board",
        "repository": "https://github.com/example/kanban",
        "technologies": ["react", "typescript"],
        "logo": "logos/kanban.png",
        "logo_backup": None,
    }
