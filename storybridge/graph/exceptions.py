"""
Graph store errors.

Names carry the Neo4j prefix so they never shadow the builtins
(ConnectionError, TimeoutError). The family derives from StoreError:
anything raised by the client reaches the HTTP layer as a store_error
response, except Neo4jConnectionError which reports 503.
"""

from __future__ import annotations

from storybridge.core.exceptions import StoreError


class Neo4jError(StoreError):
    """Root of every error raised by the graph client."""


class Neo4jConnectionError(Neo4jError):
    """The server could not be reached, or the client was never connected."""

    status_code = 503

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class Neo4jQueryError(Neo4jError):
    """A read statement failed.

    Attributes:
        query: Cypher text of the failing statement, when known
        cause: Driver exception behind the failure
    """

    def __init__(
        self,
        message: str,
        query: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.query = query
        self.cause = cause


class Neo4jTransactionError(Neo4jError):
    """A write transaction did not commit."""


class Neo4jConstraintError(Neo4jTransactionError):
    """A write hit a uniqueness constraint; the repository reports it as a conflict."""
