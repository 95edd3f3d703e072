"""
Pydantic models for API request/response validation.

Wire field names are camelCase (storyId, pathReduction, ...); Python
attribute names stay snake_case and either form is accepted on input.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from storybridge.graph.models import GraphStats, Story, StoryDetail, StorySummary, User
from storybridge.network.formatter import NetworkModel
from storybridge.services.scoring import ShareOutcome
from storybridge.services.seeding import SeedSummary


class CamelModel(BaseModel):
    """Base model serialising field names as camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# Users and stories
# =============================================================================


class AuthorSummary(CamelModel):
    """Identifier and name of a user."""

    id: str
    name: str

    @classmethod
    def from_user(cls, user: User) -> AuthorSummary:
        return cls(id=user.id, name=user.name)


class UserResponse(CamelModel):
    """Full user profile."""

    id: str
    name: str
    bio: str | None = None
    affiliation: str | None = None
    nationality: str | None = None
    gender: str | None = None
    created_at: datetime | None = None
    is_active: bool = True

    @classmethod
    def from_user(cls, user: User) -> UserResponse:
        return cls(
            id=user.id,
            name=user.name,
            bio=user.bio,
            affiliation=user.affiliation,
            nationality=user.nationality,
            gender=user.gender,
            created_at=user.created_at,
            is_active=user.is_active,
        )


class UserListResponse(CamelModel):
    users: list[UserResponse]
    skip: int
    limit: int


class StoryItem(CamelModel):
    """A story with its author summary."""

    id: str
    title: str
    content: str
    created_at: datetime | None = None
    author: AuthorSummary

    @classmethod
    def from_summary(cls, summary: StorySummary) -> StoryItem:
        return cls(
            id=summary.story.id,
            title=summary.story.title,
            content=summary.story.content,
            created_at=summary.story.created_at,
            author=AuthorSummary.from_user(summary.author),
        )


class StoryListResponse(CamelModel):
    """Page of stories; total counts the stories on this page."""

    stories: list[StoryItem]
    page: int
    limit: int
    total: int


class ShareEventItem(CamelModel):
    user: AuthorSummary
    timestamp: datetime | None = None


class StoryDetailResponse(StoryItem):
    """A story with its author and share history."""

    shares: list[ShareEventItem] = Field(default_factory=list)

    @classmethod
    def from_detail(cls, detail: StoryDetail) -> StoryDetailResponse:
        return cls(
            id=detail.story.id,
            title=detail.story.title,
            content=detail.story.content,
            created_at=detail.story.created_at,
            author=AuthorSummary.from_user(detail.author),
            shares=[
                ShareEventItem(user=AuthorSummary.from_user(event.user), timestamp=event.timestamp)
                for event in detail.shares
            ],
        )


class CreateStoryRequest(CamelModel):
    """Request body for story creation; blank fields are rejected by the service."""

    title: str = Field(default="", description="Story title")
    content: str = Field(default="", description="Story body")
    author_id: str = Field(default="", description="Identifier of the authoring user")


class CreatedStory(CamelModel):
    id: str
    title: str
    content: str
    author_id: str
    created_at: datetime | None = None

    @classmethod
    def from_story(cls, story: Story) -> CreatedStory:
        return cls(
            id=story.id,
            title=story.title,
            content=story.content,
            author_id=story.author_id,
            created_at=story.created_at,
        )


class CreateStoryResponse(CamelModel):
    message: str
    story: CreatedStory


# =============================================================================
# Sharing
# =============================================================================


class ShareRequest(CamelModel):
    """Request body for sharing a story."""

    story_id: str = Field(default="", description="Story being shared")
    sender_id: str = Field(default="", description="User sharing the story")
    receiver_id: str = Field(default="", description="User receiving the story")


class ShareDetails(CamelModel):
    story_id: str
    sender_id: str
    receiver_id: str
    timestamp: datetime | None = None
    connected_at: datetime | None = None


class ShareResponse(CamelModel):
    """Outcome of a share, including the path-reduction reward."""

    message: str
    share: ShareDetails
    path_before: int | None = None
    path_after: int | None = None
    path_reduction: int
    reward_points: int

    @classmethod
    def from_outcome(cls, outcome: ShareOutcome) -> ShareResponse:
        return cls(
            message="Story shared successfully",
            share=ShareDetails(
                story_id=outcome.story_id,
                sender_id=outcome.sender_id,
                receiver_id=outcome.receiver_id,
                timestamp=outcome.shared_at,
                connected_at=outcome.connected_at,
            ),
            path_before=outcome.path_before,
            path_after=outcome.path_after,
            path_reduction=outcome.path_reduction,
            reward_points=outcome.reward_points,
        )


# =============================================================================
# Network
# =============================================================================


class NetworkResponse(CamelModel):
    """Node-link graph; node and link entries carry their flattened properties."""

    nodes: list[dict[str, Any]] = Field(default_factory=list)
    links: list[dict[str, Any]] = Field(default_factory=list)

    @classmethod
    def from_model(cls, model: NetworkModel) -> NetworkResponse:
        data = model.to_dict()
        return cls(nodes=data["nodes"], links=data["links"])


class PathResponse(NetworkResponse):
    """Shortest path as a node-link graph; length is -1 when there is none."""

    message: str
    length: int


class ConnectionsResponse(CamelModel):
    character: UserResponse
    connections: list[UserResponse]
    network: NetworkResponse


# =============================================================================
# Initialisation, health, errors
# =============================================================================


class InitRequest(CamelModel):
    clear: bool = False


class SeedSummaryResponse(CamelModel):
    characters: int
    relationships: int
    stories: int
    shares: int

    @classmethod
    def from_summary(cls, summary: SeedSummary) -> SeedSummaryResponse:
        return cls(
            characters=summary.characters,
            relationships=summary.relationships,
            stories=summary.stories,
            shares=summary.shares,
        )


class InitResponse(CamelModel):
    message: str
    summary: SeedSummaryResponse


class GraphStatsResponse(CamelModel):
    node_count: int = 0
    relationship_count: int = 0
    user_count: int = 0
    story_count: int = 0

    @classmethod
    def from_stats(cls, stats: GraphStats) -> GraphStatsResponse:
        return cls(
            node_count=stats.node_count,
            relationship_count=stats.relationship_count,
            user_count=stats.user_count,
            story_count=stats.story_count,
        )


class InitStatusResponse(CamelModel):
    connected: bool
    stats: GraphStatsResponse


class HealthResponse(CamelModel):
    """Response model for health check endpoint."""

    status: str = Field(description="Overall health status")
    dependencies: dict[str, Any] = Field(
        default_factory=dict,
        description="External dependency statuses (neo4j)",
    )
    version: str = Field(description="API version")


class ErrorResponse(BaseModel):
    """Standard error response model."""

    model_config = ConfigDict(extra="forbid")

    error: str = Field(description="Error type")
    message: str = Field(description="Error message")
