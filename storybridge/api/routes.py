"""
API routes for StoryBridge.

Provides endpoints for stories, sharing, network visualization, demo
initialisation and health. Domain errors propagate to the application's
exception handler, which renders them as {"error": kind, "message": text}.
"""

from __future__ import annotations

import logging
from typing import Literal

from fastapi import APIRouter, Body, Depends, Query, Request, status

from storybridge import __version__
from storybridge.api.dependencies import ServiceContainer
from storybridge.api.models import (
    ConnectionsResponse,
    CreatedStory,
    CreateStoryRequest,
    CreateStoryResponse,
    ErrorResponse,
    GraphStatsResponse,
    HealthResponse,
    InitRequest,
    InitResponse,
    InitStatusResponse,
    NetworkResponse,
    PathResponse,
    SeedSummaryResponse,
    ShareRequest,
    ShareResponse,
    StoryDetailResponse,
    StoryItem,
    StoryListResponse,
    UserListResponse,
    UserResponse,
)
from storybridge.graph.health import check_neo4j_health, check_neo4j_health_detailed
from storybridge.services.network import ByIdentifier, ByName

logger = logging.getLogger(__name__)

router = APIRouter()

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid request"},
    404: {"model": ErrorResponse, "description": "Not found"},
    500: {"model": ErrorResponse, "description": "Internal server error"},
    503: {"model": ErrorResponse, "description": "Service unavailable"},
}


def get_services() -> ServiceContainer:
    """Get service container - injected at runtime."""
    # This is overridden by dependency injection in create_app
    msg = "Services not configured"
    raise RuntimeError(msg)


# ==============================================================================
# Stories
# ==============================================================================


@router.get(
    "/api/stories",
    response_model=StoryListResponse,
    responses=ERROR_RESPONSES,
    tags=["stories"],
    summary="List stories, newest first",
)
async def list_stories(
    page: int = Query(default=0, ge=0, description="Zero-based page number"),
    limit: int | None = Query(default=None, ge=0, description="Stories per page"),
    services: ServiceContainer = Depends(get_services),  # noqa: B008
) -> StoryListResponse:
    """
    Return one page of stories with their authors.

    Pages are zero-based: page N starts at story N * limit.
    """
    page_size = limit if limit is not None else services.settings.default_page_size
    logger.info("Retrieving stories page=%d limit=%d", page, page_size)
    summaries = await services.stories.list_stories(skip=page * page_size, limit=page_size)
    stories = [StoryItem.from_summary(summary) for summary in summaries]
    return StoryListResponse(stories=stories, page=page, limit=page_size, total=len(stories))


@router.post(
    "/api/stories/share",
    response_model=ShareResponse,
    responses=ERROR_RESPONSES,
    tags=["stories"],
    summary="Share a story and score the path reduction",
)
async def share_story(
    request: ShareRequest,
    services: ServiceContainer = Depends(get_services),  # noqa: B008
) -> ShareResponse:
    """
    Record a share from sender to receiver.

    The sender earns reward points per hop the share removes from the
    shortest author -> receiver path.
    """
    logger.info("Sharing story %s from %s to %s", request.story_id, request.sender_id, request.receiver_id)
    outcome = await services.scorer.record_share(request.story_id, request.sender_id, request.receiver_id)
    return ShareResponse.from_outcome(outcome)


@router.get(
    "/api/stories/{story_id}",
    response_model=StoryDetailResponse,
    responses=ERROR_RESPONSES,
    tags=["stories"],
    summary="Get a story with its share history",
)
async def get_story(
    story_id: str,
    services: ServiceContainer = Depends(get_services),  # noqa: B008
) -> StoryDetailResponse:
    detail = await services.stories.get_story(story_id)
    return StoryDetailResponse.from_detail(detail)


@router.post(
    "/api/stories",
    response_model=CreateStoryResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
    tags=["stories"],
    summary="Create a story",
)
async def create_story(
    request: CreateStoryRequest,
    services: ServiceContainer = Depends(get_services),  # noqa: B008
) -> CreateStoryResponse:
    logger.info("Creating story %r by author %s", request.title, request.author_id)
    story = await services.stories.create_story(request.title, request.content, request.author_id)
    return CreateStoryResponse(message="Story created successfully", story=CreatedStory.from_story(story))


# ==============================================================================
# Users and network
# ==============================================================================


@router.get(
    "/api/users",
    response_model=UserListResponse,
    responses=ERROR_RESPONSES,
    tags=["network"],
    summary="List users by name",
)
async def list_users(
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=0),
    services: ServiceContainer = Depends(get_services),  # noqa: B008
) -> UserListResponse:
    users = await services.repository.list_users(skip=skip, limit=limit)
    return UserListResponse(users=[UserResponse.from_user(user) for user in users], skip=skip, limit=limit)


@router.get(
    "/api/network",
    response_model=NetworkResponse,
    responses=ERROR_RESPONSES,
    tags=["network"],
    summary="Graph slice for visualization",
)
async def get_network(
    limit: int | None = Query(default=None, ge=0, description="Maximum number of users"),
    services: ServiceContainer = Depends(get_services),  # noqa: B008
) -> NetworkResponse:
    """
    Return up to limit users and the relationships among them.

    Each pair of users appears at most once among the links.
    """
    network_limit = limit if limit is not None else services.settings.default_network_limit
    logger.info("Retrieving network data with limit %d", network_limit)
    model = await services.network.get_network(network_limit)
    return NetworkResponse.from_model(model)


@router.get(
    "/api/path",
    response_model=PathResponse,
    responses=ERROR_RESPONSES,
    tags=["network"],
    summary="Shortest path between two users",
)
async def find_path(
    source: str = Query(min_length=1, description="Source user name or identifier"),
    target: str = Query(min_length=1, description="Target user name or identifier"),
    by: Literal["name", "id"] = Query(default="name", description="How source and target are matched"),
    services: ServiceContainer = Depends(get_services),  # noqa: B008
) -> PathResponse:
    """
    Find the shortest path between two users.

    A missing path is not an error: the response has length -1 and no
    nodes or links.
    """
    reference = ByIdentifier if by == "id" else ByName
    logger.info("Finding path from %s to %s by %s", source, target, by)
    lookup = await services.network.find_path(reference(source), reference(target))

    if not lookup.found:
        return PathResponse(message="No path found between the specified users", length=lookup.length)

    data = lookup.network.to_dict()
    return PathResponse(
        message=f"Path found with length {lookup.length}",
        length=lookup.length,
        nodes=data["nodes"],
        links=data["links"],
    )


@router.get(
    "/api/connections/{character_name}",
    response_model=ConnectionsResponse,
    responses=ERROR_RESPONSES,
    tags=["network"],
    summary="Connections of a character within a hop depth",
)
async def get_character_connections(
    character_name: str,
    depth: int = Query(default=1, ge=0, description="Maximum hops from the character"),
    services: ServiceContainer = Depends(get_services),  # noqa: B008
) -> ConnectionsResponse:
    logger.info("Getting connections for %s with depth %d", character_name, depth)
    result = await services.network.get_character_connections(character_name, depth)
    return ConnectionsResponse(
        character=UserResponse.from_user(result.character),
        connections=[UserResponse.from_user(user) for user in result.connections],
        network=NetworkResponse.from_model(result.network),
    )


# ==============================================================================
# Initialisation
# ==============================================================================


@router.post(
    "/api/init",
    response_model=InitResponse,
    responses=ERROR_RESPONSES,
    tags=["init"],
    summary="Seed the graph with demo data",
)
async def initialize_database(
    clear: bool = Query(default=False, description="Clear the graph before seeding"),
    request: InitRequest | None = Body(default=None),  # noqa: B008
    services: ServiceContainer = Depends(get_services),  # noqa: B008
) -> InitResponse:
    """
    Seed sample characters, relationships, stories and shares.

    The graph is cleared first when clear is set in the query or body.
    """
    should_clear = clear or (request is not None and request.clear)
    summary = await services.seeder.seed(clear=should_clear)
    logger.info(
        "Database initialised: %d characters, %d relationships, %d stories",
        summary.characters,
        summary.relationships,
        summary.stories,
    )
    return InitResponse(
        message="Database initialized successfully",
        summary=SeedSummaryResponse.from_summary(summary),
    )


@router.get(
    "/api/init/status",
    response_model=InitStatusResponse,
    responses=ERROR_RESPONSES,
    tags=["init"],
    summary="Connectivity and graph counts",
)
async def database_status(
    services: ServiceContainer = Depends(get_services),  # noqa: B008
) -> InitStatusResponse:
    connected = await check_neo4j_health(services.client)
    stats = await services.repository.graph_stats() if connected else None
    return InitStatusResponse(
        connected=connected,
        stats=GraphStatsResponse.from_stats(stats) if stats else GraphStatsResponse(),
    )


# ==============================================================================
# Health and index
# ==============================================================================


@router.get(
    "/health",
    response_model=HealthResponse,
    tags=["health"],
    summary="Health check endpoint",
)
async def health_check(
    services: ServiceContainer = Depends(get_services),  # noqa: B008
) -> HealthResponse:
    """
    Check the health of the graph database.

    Returns "healthy" when Neo4j answers the probe query, else "degraded".
    """
    neo4j = await check_neo4j_health_detailed(services.client, uri=services.settings.neo4j_uri)
    overall_status = "healthy" if neo4j["status"] == "healthy" else "degraded"
    return HealthResponse(status=overall_status, dependencies={"neo4j": neo4j}, version=__version__)


@router.get("/", tags=["health"], summary="Endpoint index")
async def index(request: Request) -> dict[str, object]:
    return {
        "message": "StoryBridge API",
        "version": __version__,
        "endpoints": {
            "network": "/api/network",
            "path": "/api/path",
            "characterConnections": "/api/connections/{characterName}",
            "stories": "/api/stories",
            "shareStory": "/api/stories/share",
            "users": "/api/users",
            "initialize": "/api/init",
            "status": "/api/init/status",
            "health": "/health",
            "docs": request.app.docs_url,
        },
    }
