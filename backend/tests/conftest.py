"""Shared pytest fixtures for Mindplan tests."""

import pytest
from httpx import ASGITransport, AsyncClient

from mindplan.db.connection import Database
from mindplan.main import app
from mindplan.nodes.aggregator import CompletionAggregator
from mindplan.nodes.mutator import TreeMutator
from mindplan.nodes.store import NodeStore
from mindplan.projects.router import get_project_service
from mindplan.projects.service import ProjectService


@pytest.fixture
async def db():
    """In-memory database for tests."""
    database = await Database.connect(":memory:")
    yield database
    await database.close()


@pytest.fixture
async def store(db):
    """NodeStore backed by in-memory database."""
    return NodeStore(db)


@pytest.fixture
async def aggregator(store):
    return CompletionAggregator(store)


@pytest.fixture
async def mutator(store, aggregator):
    return TreeMutator(store, aggregator)


@pytest.fixture
async def service(db):
    """ProjectService backed by in-memory database."""
    return ProjectService(db)


@pytest.fixture
async def client(service):
    """Async test client with in-memory DB wired into the app."""
    app.dependency_overrides[get_project_service] = lambda: service
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client
    app.dependency_overrides.clear()
