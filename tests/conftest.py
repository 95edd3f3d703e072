"""
Pytest configuration and fixtures for StoryBridge tests.
"""

import random
from unittest.mock import AsyncMock, MagicMock

import pytest

from storybridge.api.dependencies import ServiceContainer, build_services
from storybridge.core.config import Settings
from storybridge.graph.paths import PathEngine
from storybridge.graph.repository import GraphRepository
from tests.fakes import InMemoryGraphClient


@pytest.fixture
def settings() -> Settings:
    """Provide test settings without reading a .env file."""
    return Settings(
        _env_file=None,
        neo4j_uri="bolt://localhost:7687",
        neo4j_user="neo4j",
        neo4j_password="testpassword",
        init_schema_on_startup=False,
    )


@pytest.fixture
def graph() -> InMemoryGraphClient:
    """Empty in-memory graph client."""
    return InMemoryGraphClient()


@pytest.fixture
def repository(graph: InMemoryGraphClient) -> GraphRepository:
    return GraphRepository(graph)


@pytest.fixture
def path_engine(graph: InMemoryGraphClient) -> PathEngine:
    return PathEngine(graph)


@pytest.fixture
def services(graph: InMemoryGraphClient, settings: Settings) -> ServiceContainer:
    """Service container wired around the in-memory graph."""
    return build_services(graph, settings, rng=random.Random(7))


@pytest.fixture
def mock_neo4j_driver():
    """Mock async Neo4j driver for unit tests."""
    driver = MagicMock()
    driver.verify_connectivity = AsyncMock(return_value=None)
    driver.close = AsyncMock(return_value=None)

    session = MagicMock()
    session.run = AsyncMock()
    session.execute_write = AsyncMock()
    driver.session = MagicMock(return_value=session)
    session.__aenter__ = AsyncMock(return_value=session)
    session.__aexit__ = AsyncMock(return_value=None)
    return driver
