"""
Graph repository: typed create/read operations for users and stories.

Wraps the injected graph client with a fixed set of named Cypher
statements (storybridge.graph.cypher). Callers never build queries and
never see raw records; lookups return None for absence so the caller
decides whether absence is an error.

Identifiers for every node and edge are UUID4 strings generated here,
so an identifier is never reused, even after clear_all().
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any

from storybridge.core.exceptions import ConflictError, NotFoundError, ValidationError
from storybridge.graph import cypher
from storybridge.graph.cypher import RelationshipKind
from storybridge.graph.exceptions import Neo4jConstraintError
from storybridge.graph.models import (
    GraphStats,
    ShareEvent,
    ShareRecord,
    Story,
    StoryDetail,
    StorySummary,
    User,
)
from storybridge.graph.records import GraphEdge, GraphNode

logger = logging.getLogger(__name__)


def new_identifier() -> str:
    """Fresh identifier for a node or edge."""
    return str(uuid.uuid4())


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_count(value: Any) -> int:
    """Coerce a pagination bound to a non-negative int.

    Numeric strings are truncated like whole numbers ("2.5" is 2);
    non-numeric, non-finite, missing or negative values become 0.
    """
    if isinstance(value, bool):
        return 0
    try:
        count = int(value)
    except (TypeError, ValueError, OverflowError):
        try:
            count = int(float(value))
        except (TypeError, ValueError, OverflowError):
            return 0
    return max(count, 0)


class GraphRepository:
    """Typed operations over the graph store.

    Usage:
        repository = GraphRepository(client=neo4j_client)
        user = await repository.create_user(user_id=new_identifier(), name="Moiraine")
        page = await repository.list_stories(skip=0, limit=10)
    """

    def __init__(self, client: Any) -> None:
        """Initialize repository.

        Args:
            client: Graph client (Neo4jClient or any Neo4jClientProtocol)
        """
        self._client = client

    # =========================================================================
    # Users
    # =========================================================================

    async def create_user(
        self,
        user_id: str,
        name: str,
        bio: str | None = None,
        affiliation: str | None = None,
        nationality: str | None = None,
        gender: str | None = None,
    ) -> User:
        """Create a User node.

        Raises:
            ConflictError: If a user with this identifier already exists
        """
        parameters = {
            "id": user_id,
            "name": name,
            "bio": bio,
            "affiliation": affiliation,
            "nationality": nationality,
            "gender": gender,
            "created_at": utc_now(),
        }
        try:
            records = await self._client.execute_write(cypher.CREATE_USER, parameters)
        except Neo4jConstraintError as e:
            raise ConflictError(f"User with ID {user_id} already exists") from e

        logger.debug("Created user %s (%s)", user_id, name)
        return User.from_node(records[0]["u"])

    async def find_user_by_id(self, user_id: str) -> User | None:
        records = await self._client.query(cypher.FIND_USER_BY_ID, {"id": user_id})
        return User.from_node(records[0]["u"]) if records else None

    async def find_user_by_name(self, name: str) -> User | None:
        """Exact-match lookup; with duplicate names the lowest id wins."""
        records = await self._client.query(cypher.FIND_USER_BY_NAME, {"name": name})
        return User.from_node(records[0]["u"]) if records else None

    async def list_users(self, skip: Any = 0, limit: Any = 50) -> list[User]:
        """Page of users ordered by name."""
        records = await self._client.query(
            cypher.LIST_USERS,
            {"skip": as_count(skip), "limit": as_count(limit)},
        )
        return [User.from_node(record["u"]) for record in records]

    async def create_connection(
        self,
        user_a: str,
        user_b: str,
        kind: RelationshipKind = RelationshipKind.KNOWS,
        story_id: str | None = None,
    ) -> GraphEdge:
        """Create a directed User -> User edge of the given kind.

        Raises:
            ValidationError: If user_a equals user_b or kind is not User -> User
            NotFoundError: If either endpoint does not exist
        """
        try:
            kind = RelationshipKind(kind)
        except ValueError as e:
            raise ValidationError(f"Unknown relationship kind: {kind}") from e
        if kind not in cypher.USER_TO_USER_KINDS:
            raise ValidationError(f"{kind.value} does not connect two users")
        if user_a == user_b:
            raise ValidationError("Cannot connect a user to themselves")

        for label, user_id in (("Source", user_a), ("Target", user_b)):
            if await self.find_user_by_id(user_id) is None:
                raise NotFoundError(f"{label} user with ID {user_id} not found")

        records = await self._client.execute_write(
            cypher.CREATE_CONNECTION[kind],
            {
                "user_a": user_a,
                "user_b": user_b,
                "edge_id": new_identifier(),
                "created_at": utc_now(),
                "story_id": story_id,
            },
        )
        if not records:
            raise NotFoundError(f"Users {user_a} and {user_b} could not be connected")
        return replace(records[0]["r"], start_node_id=user_a, end_node_id=user_b)

    # =========================================================================
    # Stories
    # =========================================================================

    async def create_story(
        self,
        story_id: str,
        title: str,
        content: str,
        author_id: str,
    ) -> Story:
        """Create a Story node and its AUTHORED edge in one write.

        Raises:
            NotFoundError: If the author does not exist (nothing is written)
            ConflictError: If a story with this identifier already exists
        """
        parameters = {
            "id": story_id,
            "title": title,
            "content": content,
            "author_id": author_id,
            "created_at": utc_now(),
            "edge_id": new_identifier(),
        }
        try:
            records = await self._client.execute_write(cypher.CREATE_STORY, parameters)
        except Neo4jConstraintError as e:
            raise ConflictError(f"Story with ID {story_id} already exists") from e

        if not records:
            raise NotFoundError(f"Author with ID {author_id} not found")
        logger.debug("Created story %s by %s", story_id, author_id)
        return Story.from_node(records[0]["s"])

    async def find_story_by_id(self, story_id: str) -> Story | None:
        records = await self._client.query(cypher.FIND_STORY_BY_ID, {"id": story_id})
        return Story.from_node(records[0]["s"]) if records else None

    async def find_story_author(self, story_id: str) -> User | None:
        """Author resolved through the story's AUTHORED edge."""
        records = await self._client.query(cypher.FIND_STORY_AUTHOR, {"story_id": story_id})
        return User.from_node(records[0]["author"]) if records else None

    async def list_stories(self, skip: Any = 0, limit: Any = 50) -> list[StorySummary]:
        """Page of stories, newest first, each with its author."""
        records = await self._client.query(
            cypher.LIST_STORIES,
            {"skip": as_count(skip), "limit": as_count(limit)},
        )
        return [
            StorySummary(story=Story.from_node(record["s"]), author=User.from_node(record["author"]))
            for record in records
        ]

    async def get_story_detail(self, story_id: str) -> StoryDetail | None:
        """Story, author and share events; incomplete share rows are dropped."""
        records = await self._client.query(cypher.GET_STORY_DETAIL, {"id": story_id})
        if not records or records[0].get("s") is None:
            return None

        record = records[0]
        shares = [
            ShareEvent(user=User.from_node(entry["sharer"]), timestamp=entry["shared"].get("timestamp"))
            for entry in record.get("shares") or []
            if isinstance(entry.get("sharer"), GraphNode) and isinstance(entry.get("shared"), GraphEdge)
        ]
        return StoryDetail(
            story=Story.from_node(record["s"]),
            author=User.from_node(record["author"]),
            shares=shares,
        )

    async def record_share(self, story_id: str, sender_id: str, receiver_id: str) -> ShareRecord:
        """Persist SHARED (sender -> story) and SHARED_WITH (sender -> receiver).

        Raises:
            NotFoundError: If any of the three nodes vanished, or sender equals receiver
        """
        records = await self._client.execute_write(
            cypher.RECORD_SHARE,
            {
                "story_id": story_id,
                "sender_id": sender_id,
                "receiver_id": receiver_id,
                "share_id": new_identifier(),
                "connection_id": new_identifier(),
                "timestamp": utc_now(),
            },
        )
        if not records:
            raise NotFoundError(
                f"Story {story_id} could not be shared from {sender_id} to {receiver_id}"
            )

        record = records[0]
        logger.debug("Recorded share of %s from %s to %s", story_id, sender_id, receiver_id)
        return ShareRecord(
            share=replace(record["share"], start_node_id=sender_id, end_node_id=story_id),
            connection=replace(record["connection"], start_node_id=sender_id, end_node_id=receiver_id),
        )

    # =========================================================================
    # Graph slices and maintenance
    # =========================================================================

    async def network_slice(self, limit: Any) -> tuple[list[GraphNode], list[GraphEdge]]:
        """Up to limit users and every relationship among them."""
        records = await self._client.query(cypher.NETWORK_SLICE, {"limit": as_count(limit)})
        if not records:
            return [], []

        record = records[0]
        nodes = [node for node in record.get("nodes") or [] if isinstance(node, GraphNode)]
        edges = [
            replace(entry["relationship"], start_node_id=entry["source"], end_node_id=entry["target"])
            for entry in record.get("relationships") or []
            if isinstance(entry.get("relationship"), GraphEdge)
        ]
        return nodes, edges

    async def graph_stats(self) -> GraphStats:
        records = await self._client.query(cypher.GRAPH_STATS)
        return GraphStats.from_record(records[0] if records else None)

    async def clear_all(self) -> None:
        """Remove every node and edge. Irreversible; test/initialisation use only."""
        await self._client.execute_write(cypher.CLEAR_ALL)
        logger.warning("Cleared all nodes and relationships from the graph")
