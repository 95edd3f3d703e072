"""
Async Neo4j client for the StoryBridge graph.

One AsyncDriver is shared per client (the driver owns the connection
pool); every statement runs in its own session opened with ``async with``,
so the session goes back to the pool whether the statement succeeds,
fails or is cancelled.

Reads run through session.run(); writes run as a managed transaction
(session.execute_write) so the driver retries transient failures.
Records come back as plain dicts whose values are already typed graph
values (GraphNode, GraphEdge, GraphPath) or Python primitives.

Driver errors are translated once, here, into the Neo4jError family:
- ServiceUnavailable        -> Neo4jConnectionError (503)
- ConstraintError (writes)  -> Neo4jConstraintError
- ClientError / other       -> Neo4jQueryError (reads), Neo4jTransactionError (writes)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from neo4j import AsyncGraphDatabase
from neo4j.exceptions import ClientError, ConstraintError, ServiceUnavailable

from storybridge.graph.exceptions import (
    Neo4jConnectionError,
    Neo4jConstraintError,
    Neo4jError,
    Neo4jQueryError,
    Neo4jTransactionError,
)
from storybridge.graph.records import to_graph_value

if TYPE_CHECKING:
    from neo4j import AsyncDriver, AsyncResult

logger = logging.getLogger(__name__)

Record = dict[str, Any]


@runtime_checkable
class Neo4jClientProtocol(Protocol):
    """What the repository, path engine and health checks need from a client.

    Neo4jClient implements it against a server; tests use an in-memory
    double with the same three members.
    """

    @property
    def is_connected(self) -> bool: ...

    async def query(self, cypher: str, parameters: dict[str, Any] | None = None) -> list[Record]: ...

    async def execute_write(self, cypher: str, parameters: dict[str, Any] | None = None) -> list[Record]: ...


async def _collect(result: AsyncResult) -> list[Record]:
    return [
        {key: to_graph_value(value) for key, value in record.items()}
        async for record in result
    ]


def _translate(error: Exception, cypher: str, write: bool) -> Neo4jError:
    """Map a driver error onto the Neo4jError family."""
    if isinstance(error, ServiceUnavailable):
        return Neo4jConnectionError(f"Neo4j unavailable: {error}", cause=error)
    if write:
        if isinstance(error, ConstraintError):
            return Neo4jConstraintError(f"Constraint violated: {error}")
        if isinstance(error, ClientError):
            return Neo4jTransactionError(f"Transaction failed: {error}")
        return Neo4jTransactionError(f"Unexpected error in transaction: {error}")
    if isinstance(error, ClientError):
        return Neo4jQueryError(f"Query failed: {error}", query=cypher, cause=error)
    return Neo4jQueryError(f"Unexpected error executing query: {error}", query=cypher, cause=error)


class Neo4jClient:
    """Connection holder and statement runner for one Neo4j database.

    Usage:
        async with Neo4jClient(settings=settings) as client:
            records = await client.query(cypher.LIST_USERS, {"skip": 0, "limit": 10})

        client = Neo4jClient(settings=settings)
        await client.connect()
        ...
        await client.close()
    """

    def __init__(self, settings: Any) -> None:
        """Read connection details; the driver is created by connect().

        Args:
            settings: Object with neo4j_uri, neo4j_user, neo4j_password
                and neo4j_database attributes
        """
        self._uri = settings.neo4j_uri
        self._auth = (settings.neo4j_user, settings.neo4j_password)
        self._database = settings.neo4j_database
        self._driver: AsyncDriver | None = None

    @property
    def uri(self) -> str:
        return self._uri

    @property
    def database(self) -> str:
        return self._database

    @property
    def is_connected(self) -> bool:
        """True once connect() has verified the server and until close()."""
        return self._driver is not None

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def connect(self) -> None:
        """Create the driver and verify the server answers.

        Raises:
            Neo4jConnectionError: If the driver cannot be created or verified
        """
        driver = None
        try:
            driver = AsyncGraphDatabase.driver(self._uri, auth=self._auth)
            await driver.verify_connectivity()
        except ServiceUnavailable as e:
            raise Neo4jConnectionError(f"Failed to connect to Neo4j at {self._uri}", cause=e) from e
        except Exception as e:
            raise Neo4jConnectionError(f"Unexpected error connecting to Neo4j: {e}", cause=e) from e
        self._driver = driver
        logger.info("Connected to Neo4j at %s", self._uri)

    async def close(self) -> None:
        """Release the driver; a no-op when not connected."""
        driver, self._driver = self._driver, None
        if driver is not None:
            await driver.close()
            logger.info("Neo4j connection closed")

    async def __aenter__(self) -> Neo4jClient:
        await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        await self.close()

    # =========================================================================
    # Statements
    # =========================================================================

    async def query(self, cypher: str, parameters: dict[str, Any] | None = None) -> list[Record]:
        """Run a read statement.

        Raises:
            Neo4jConnectionError: If not connected or the server is unavailable
            Neo4jQueryError: If the statement fails
        """
        return await self._run(cypher, parameters or {}, write=False)

    async def execute_write(self, cypher: str, parameters: dict[str, Any] | None = None) -> list[Record]:
        """Run a write statement in a managed transaction.

        Raises:
            Neo4jConnectionError: If not connected or the server is unavailable
            Neo4jConstraintError: If a uniqueness constraint is violated
            Neo4jTransactionError: If the transaction fails otherwise
        """
        return await self._run(cypher, parameters or {}, write=True)

    async def _run(self, cypher: str, parameters: dict[str, Any], write: bool) -> list[Record]:
        if self._driver is None:
            raise Neo4jConnectionError(
                "Not connected to Neo4j. Call connect() first or use async context manager."
            )

        logger.debug("Executing %s statement with %d parameters", "write" if write else "read", len(parameters))
        try:
            async with self._driver.session(database=self._database) as session:
                if not write:
                    return await _collect(await session.run(cypher, parameters))

                async def work(tx: Any) -> list[Record]:
                    return await _collect(await tx.run(cypher, parameters))

                return await session.execute_write(work)
        except Neo4jError:
            raise
        except Exception as e:
            raise _translate(e, cypher, write) from e
