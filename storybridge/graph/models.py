"""
Domain entities read from and written to the graph.

These are the typed shapes the repository hands to the rest of the core;
nothing outside storybridge.graph sees raw query records.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from storybridge.graph.records import GraphEdge, GraphNode


@dataclass(frozen=True)
class User:
    """A person in the social graph."""

    id: str
    name: str
    bio: str | None = None
    affiliation: str | None = None
    nationality: str | None = None
    gender: str | None = None
    created_at: datetime | None = None
    is_active: bool = True

    @classmethod
    def from_node(cls, node: GraphNode) -> User:
        return cls(
            id=node.id,
            name=node.get("name", ""),
            bio=node.get("bio"),
            affiliation=node.get("affiliation"),
            nationality=node.get("nationality"),
            gender=node.get("gender"),
            created_at=node.get("created_at"),
            is_active=bool(node.get("is_active", True)),
        )


@dataclass(frozen=True)
class Story:
    """A shareable narrative item authored by one user."""

    id: str
    title: str
    content: str
    author_id: str
    created_at: datetime | None = None

    @classmethod
    def from_node(cls, node: GraphNode) -> Story:
        return cls(
            id=node.id,
            title=node.get("title", ""),
            content=node.get("content", ""),
            author_id=node.get("author_id", ""),
            created_at=node.get("created_at"),
        )


@dataclass(frozen=True)
class StorySummary:
    """A story with its author, as listed on a page of stories."""

    story: Story
    author: User


@dataclass(frozen=True)
class ShareEvent:
    """One SHARED edge: who shared the story, and when."""

    user: User
    timestamp: datetime | None


@dataclass(frozen=True)
class StoryDetail:
    """A story with its author and complete share history."""

    story: Story
    author: User
    shares: list[ShareEvent] = field(default_factory=list)


@dataclass(frozen=True)
class ShareRecord:
    """The two edges persisted by a share action."""

    share: GraphEdge
    connection: GraphEdge

    @property
    def shared_at(self) -> datetime | None:
        return self.share.get("timestamp")

    @property
    def connected_at(self) -> datetime | None:
        return self.connection.get("timestamp")


@dataclass(frozen=True)
class GraphStats:
    """Node and relationship counts for the whole graph."""

    node_count: int = 0
    relationship_count: int = 0
    user_count: int = 0
    story_count: int = 0

    @classmethod
    def from_record(cls, record: dict[str, Any] | None) -> GraphStats:
        if not record:
            return cls()
        return cls(
            node_count=int(record.get("node_count") or 0),
            relationship_count=int(record.get("relationship_count") or 0),
            user_count=int(record.get("user_count") or 0),
            story_count=int(record.get("story_count") or 0),
        )
