"""
Dependency injection for API services.

Provides the container the routes depend on and a builder that wires
every service around one graph client.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Any

from storybridge.core.config import Settings
from storybridge.graph.paths import PathEngine
from storybridge.graph.repository import GraphRepository
from storybridge.graph.schema import SchemaManager
from storybridge.services.network import NetworkService
from storybridge.services.scoring import ShareScorer
from storybridge.services.seeding import DemoSeeder
from storybridge.services.stories import StoryService


@dataclass
class ServiceContainer:
    """Container for all service dependencies."""

    settings: Settings
    client: Any
    repository: GraphRepository
    stories: StoryService
    scorer: ShareScorer
    network: NetworkService
    seeder: DemoSeeder
    schema: SchemaManager


def build_services(
    client: Any,
    settings: Settings,
    rng: random.Random | None = None,
) -> ServiceContainer:
    """Wire every service around one graph client.

    Args:
        client: Connected graph client (Neo4jClient or a test double)
        settings: Application settings supplying limits and scoring
        rng: Optional random source for the demo seeder

    Returns:
        ServiceContainer ready for the routes
    """
    repository = GraphRepository(client)
    path_engine = PathEngine(client, max_depth=settings.max_path_depth)
    return ServiceContainer(
        settings=settings,
        client=client,
        repository=repository,
        stories=StoryService(repository),
        scorer=ShareScorer(repository, path_engine, points_per_hop=settings.reward_points_per_hop),
        network=NetworkService(
            repository,
            path_engine,
            max_connection_depth=settings.max_connection_depth,
            neighbor_result_limit=settings.neighbor_result_limit,
        ),
        seeder=DemoSeeder(repository, rng=rng),
        schema=SchemaManager(client),
    )
