"""
Graph schema helpers for Neo4j.

Provides:
- Uniqueness constraints on User.id and Story.id
- Lookup indexes on User.name and Story.title
- Schema validation against the expected constraint/index names

All statements use IF NOT EXISTS, so initialisation is idempotent and runs
on every application startup.
"""

from __future__ import annotations

import logging
from typing import Any

from storybridge.graph.cypher import NodeLabels

logger = logging.getLogger(__name__)

# =============================================================================
# Schema Definitions
# =============================================================================

CONSTRAINTS: dict[str, tuple[str, str]] = {
    "user_id_unique": (NodeLabels.USER, "id"),
    "story_id_unique": (NodeLabels.STORY, "id"),
}

INDEXES: dict[str, tuple[str, str]] = {
    "user_name_index": (NodeLabels.USER, "name"),
    "story_title_index": (NodeLabels.STORY, "title"),
}


def generate_constraint_cypher(name: str, label: str, prop: str) -> str:
    """Generate Cypher for a uniqueness constraint.

    Args:
        name: Constraint name
        label: Node label the constraint applies to
        prop: Property that must be unique

    Returns:
        Cypher CREATE CONSTRAINT statement
    """
    return f"CREATE CONSTRAINT {name} IF NOT EXISTS FOR (n:{label}) REQUIRE n.{prop} IS UNIQUE"


def generate_index_cypher(name: str, label: str, prop: str) -> str:
    """Generate Cypher for a single-property range index."""
    return f"CREATE INDEX {name} IF NOT EXISTS FOR (n:{label}) ON (n.{prop})"


# =============================================================================
# Schema Manager Class
# =============================================================================


class SchemaManager:
    """Manages Neo4j schema operations.

    Usage:
        manager = SchemaManager(client=neo4j_client)
        await manager.init_schema()  # Create all constraints and indexes
        report = await manager.validate_schema()
    """

    def __init__(self, client: Any) -> None:
        """Initialize schema manager.

        Args:
            client: Graph client (Neo4jClient or any Neo4jClientProtocol)
        """
        self._client = client

    async def create_all_constraints(self) -> None:
        for name, (label, prop) in CONSTRAINTS.items():
            await self._client.execute_write(generate_constraint_cypher(name, label, prop))

    async def create_all_indexes(self) -> None:
        for name, (label, prop) in INDEXES.items():
            await self._client.execute_write(generate_index_cypher(name, label, prop))

    async def init_schema(self) -> None:
        """Create every constraint and index. Safe to run multiple times."""
        await self.create_all_constraints()
        await self.create_all_indexes()
        logger.info(
            "Graph schema initialised: %d constraints, %d indexes",
            len(CONSTRAINTS),
            len(INDEXES),
        )

    # =========================================================================
    # Schema Validation
    # =========================================================================

    async def validate_schema(self) -> dict[str, Any]:
        """Validate the current schema.

        Returns:
            dict with is_valid, the existing constraints/indexes and the
            names of any missing ones
        """
        constraints = await self.get_existing_constraints()
        indexes = await self.get_existing_indexes()

        existing_constraint_names = {c.get("name", "") for c in constraints}
        existing_index_names = {i.get("name", "") for i in indexes}

        missing_constraints = sorted(set(CONSTRAINTS) - existing_constraint_names)
        missing_indexes = sorted(set(INDEXES) - existing_index_names)

        return {
            "is_valid": not missing_constraints and not missing_indexes,
            "constraints": constraints,
            "indexes": indexes,
            "missing_constraints": missing_constraints,
            "missing_indexes": missing_indexes,
        }

    async def get_existing_constraints(self) -> list[dict[str, Any]]:
        return await self._client.query("SHOW CONSTRAINTS")

    async def get_existing_indexes(self) -> list[dict[str, Any]]:
        return await self._client.query("SHOW INDEXES")
