"""
Unit tests for Neo4jClient.

The async driver is mocked: sessions are async context managers whose
run() returns an async-iterable result of plain dict records.
"""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from neo4j.exceptions import ClientError, ConstraintError, ServiceUnavailable

from storybridge.core.exceptions import StoreError
from storybridge.graph.exceptions import (
    Neo4jConnectionError,
    Neo4jConstraintError,
    Neo4jQueryError,
    Neo4jTransactionError,
)
from storybridge.graph.neo4j_client import Neo4jClient, Neo4jClientProtocol

# =============================================================================
# Test Fixtures
# =============================================================================


class FakeResult:
    """Async-iterable stand-in for neo4j.AsyncResult."""

    def __init__(self, records: list[dict[str, Any]]) -> None:
        self._records = records

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for record in self._records:
            yield record


@pytest.fixture
def mock_settings() -> MagicMock:
    """Create mock settings for Neo4j configuration."""
    settings = MagicMock()
    settings.neo4j_uri = "bolt://localhost:7687"
    settings.neo4j_user = "neo4j"
    settings.neo4j_password = "testpassword"
    settings.neo4j_database = "neo4j"
    return settings


async def connected_client(mock_settings: MagicMock, driver: MagicMock) -> Neo4jClient:
    with patch("storybridge.graph.neo4j_client.AsyncGraphDatabase") as mock_async_db:
        mock_async_db.driver.return_value = driver
        client = Neo4jClient(settings=mock_settings)
        await client.connect()
    return client


# =============================================================================
# Test: Initialization and connection
# =============================================================================


class TestNeo4jClientConnection:
    """Tests for Neo4jClient connection lifecycle."""

    def test_client_lazy_driver_initialization(self, mock_settings: MagicMock) -> None:
        client = Neo4jClient(settings=mock_settings)

        assert client.is_connected is False
        assert client.uri == "bolt://localhost:7687"
        assert client.database == "neo4j"

    def test_client_satisfies_protocol(self, mock_settings: MagicMock) -> None:
        assert isinstance(Neo4jClient(settings=mock_settings), Neo4jClientProtocol)

    @pytest.mark.asyncio
    async def test_connect_creates_and_verifies_driver(self, mock_settings: MagicMock) -> None:
        with patch("storybridge.graph.neo4j_client.AsyncGraphDatabase") as mock_async_db:
            mock_driver = MagicMock()
            mock_driver.verify_connectivity = AsyncMock()
            mock_async_db.driver.return_value = mock_driver

            client = Neo4jClient(settings=mock_settings)
            await client.connect()

            mock_async_db.driver.assert_called_once_with(
                "bolt://localhost:7687",
                auth=("neo4j", "testpassword"),
            )
            mock_driver.verify_connectivity.assert_called_once()
            assert client.is_connected

    @pytest.mark.asyncio
    async def test_connect_failure_raises_connection_error(self, mock_settings: MagicMock) -> None:
        with patch("storybridge.graph.neo4j_client.AsyncGraphDatabase") as mock_async_db:
            mock_driver = MagicMock()
            mock_driver.verify_connectivity = AsyncMock(side_effect=ServiceUnavailable("down"))
            mock_async_db.driver.return_value = mock_driver

            client = Neo4jClient(settings=mock_settings)
            with pytest.raises(Neo4jConnectionError) as exc_info:
                await client.connect()

        assert client.is_connected is False
        assert exc_info.value.status_code == 503
        assert isinstance(exc_info.value, StoreError)

    @pytest.mark.asyncio
    async def test_async_context_manager_closes_on_exit(
        self, mock_settings: MagicMock, mock_neo4j_driver: MagicMock
    ) -> None:
        with patch("storybridge.graph.neo4j_client.AsyncGraphDatabase") as mock_async_db:
            mock_async_db.driver.return_value = mock_neo4j_driver

            async with Neo4jClient(settings=mock_settings) as client:
                assert client.is_connected

        mock_neo4j_driver.close.assert_called_once()
        assert client.is_connected is False

    @pytest.mark.asyncio
    async def test_close_handles_no_driver(self, mock_settings: MagicMock) -> None:
        client = Neo4jClient(settings=mock_settings)

        await client.close()


# =============================================================================
# Test: Queries
# =============================================================================


class TestNeo4jClientQuery:
    """Tests for read query execution."""

    @pytest.mark.asyncio
    async def test_query_returns_records(
        self, mock_settings: MagicMock, mock_neo4j_driver: MagicMock
    ) -> None:
        session = mock_neo4j_driver.session.return_value
        session.run.return_value = FakeResult([{"name": "Rand", "count": 2}])
        client = await connected_client(mock_settings, mock_neo4j_driver)

        results = await client.query("MATCH (u:User) RETURN u.name AS name", {"limit": 1})

        session.run.assert_called_once_with("MATCH (u:User) RETURN u.name AS name", {"limit": 1})
        mock_neo4j_driver.session.assert_called_with(database="neo4j")
        assert results == [{"name": "Rand", "count": 2}]

    @pytest.mark.asyncio
    async def test_query_releases_session_on_failure(
        self, mock_settings: MagicMock, mock_neo4j_driver: MagicMock
    ) -> None:
        session = mock_neo4j_driver.session.return_value
        session.run.side_effect = ClientError("bad syntax")
        client = await connected_client(mock_settings, mock_neo4j_driver)

        with pytest.raises(Neo4jQueryError) as exc_info:
            await client.query("MATCH (")

        session.__aexit__.assert_called_once()
        assert exc_info.value.query == "MATCH ("

    @pytest.mark.asyncio
    async def test_query_maps_unavailable_to_connection_error(
        self, mock_settings: MagicMock, mock_neo4j_driver: MagicMock
    ) -> None:
        session = mock_neo4j_driver.session.return_value
        session.run.side_effect = ServiceUnavailable("gone")
        client = await connected_client(mock_settings, mock_neo4j_driver)

        with pytest.raises(Neo4jConnectionError):
            await client.query("RETURN 1")

    @pytest.mark.asyncio
    async def test_query_raises_without_connection(self, mock_settings: MagicMock) -> None:
        client = Neo4jClient(settings=mock_settings)

        with pytest.raises(Neo4jConnectionError):
            await client.query("MATCH (n) RETURN n")


# =============================================================================
# Test: Writes
# =============================================================================


class TestNeo4jClientWrite:
    """Tests for write transactions."""

    @pytest.mark.asyncio
    async def test_execute_write_runs_in_transaction(
        self, mock_settings: MagicMock, mock_neo4j_driver: MagicMock
    ) -> None:
        session = mock_neo4j_driver.session.return_value
        tx = MagicMock()
        tx.run = AsyncMock(return_value=FakeResult([{"id": "u-1"}]))

        async def run_work(work):
            return await work(tx)

        session.execute_write.side_effect = run_work
        client = await connected_client(mock_settings, mock_neo4j_driver)

        results = await client.execute_write("CREATE (u:User {id: $id}) RETURN u.id AS id", {"id": "u-1"})

        tx.run.assert_called_once_with("CREATE (u:User {id: $id}) RETURN u.id AS id", {"id": "u-1"})
        assert results == [{"id": "u-1"}]

    @pytest.mark.asyncio
    async def test_constraint_violation_raises_constraint_error(
        self, mock_settings: MagicMock, mock_neo4j_driver: MagicMock
    ) -> None:
        session = mock_neo4j_driver.session.return_value
        session.execute_write.side_effect = ConstraintError("already exists")
        client = await connected_client(mock_settings, mock_neo4j_driver)

        with pytest.raises(Neo4jConstraintError):
            await client.execute_write("CREATE (u:User {id: 'dup'})")

    @pytest.mark.asyncio
    async def test_client_error_raises_transaction_error(
        self, mock_settings: MagicMock, mock_neo4j_driver: MagicMock
    ) -> None:
        session = mock_neo4j_driver.session.return_value
        session.execute_write.side_effect = ClientError("failed")
        client = await connected_client(mock_settings, mock_neo4j_driver)

        with pytest.raises(Neo4jTransactionError) as exc_info:
            await client.execute_write("DELETE n")

        assert not isinstance(exc_info.value, Neo4jConstraintError)
        session.__aexit__.assert_called_once()
