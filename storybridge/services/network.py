"""
Network operations: graph slice, path lookup and character connections.

User references for path lookup are an explicit two-variant type:
ByIdentifier(id) or ByName(name). Resolution happens here, never inside
the path engine.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Union

from storybridge.core.exceptions import NotFoundError, ValidationError
from storybridge.graph.models import User
from storybridge.graph.paths import PathEngine
from storybridge.graph.records import GraphEdge
from storybridge.graph.repository import GraphRepository
from storybridge.network.formatter import NetworkFormatter, NetworkModel

logger = logging.getLogger(__name__)

DEFAULT_NETWORK_LIMIT = 100
NO_PATH_LENGTH = -1


@dataclass(frozen=True)
class ByIdentifier:
    """Reference to a user by identifier."""

    id: str


@dataclass(frozen=True)
class ByName:
    """Reference to a user by exact name."""

    name: str


UserReference = Union[ByIdentifier, ByName]


@dataclass(frozen=True)
class PathLookup:
    """Formatted path between two resolved users.

    length is NO_PATH_LENGTH (-1) and network is None when unreachable.
    """

    source: User
    target: User
    length: int
    network: NetworkModel | None

    @property
    def found(self) -> bool:
        return self.network is not None


@dataclass(frozen=True)
class CharacterConnections:
    """A user, the distinct users reachable from them, and the drawn network."""

    character: User
    connections: list[User]
    network: NetworkModel


def dedupe_pairs(edges: list[GraphEdge]) -> list[GraphEdge]:
    """Keep the first edge for each unordered pair of endpoints."""
    seen: set[frozenset[str]] = set()
    unique: list[GraphEdge] = []
    for edge in edges:
        pair = frozenset((edge.start_node_id, edge.end_node_id))
        if pair in seen:
            continue
        seen.add(pair)
        unique.append(edge)
    return unique


class NetworkService:
    """Graph-shaped read operations for visualization.

    Usage:
        service = NetworkService(repository, path_engine)
        model = await service.get_network(limit=100)
        lookup = await service.find_path(ByName("Rand"), ByName("Egwene"))
    """

    def __init__(
        self,
        repository: GraphRepository,
        path_engine: PathEngine,
        formatter: NetworkFormatter | None = None,
        max_connection_depth: int = 4,
        neighbor_result_limit: int = PathEngine.DEFAULT_RESULT_LIMIT,
    ) -> None:
        self._repository = repository
        self._path_engine = path_engine
        self._formatter = formatter or NetworkFormatter()
        self._max_connection_depth = max_connection_depth
        self._neighbor_result_limit = neighbor_result_limit

    async def get_network(self, limit: Any = DEFAULT_NETWORK_LIMIT) -> NetworkModel:
        """Up to limit users and their relationships, one per user pair."""
        nodes, edges = await self._repository.network_slice(limit)
        return self._formatter.format_graph(nodes, dedupe_pairs(edges))

    async def resolve(self, reference: UserReference) -> User:
        """Resolve a user reference.

        Raises:
            NotFoundError: If no user matches
            ValidationError: If the reference is blank or of an unknown type
        """
        if isinstance(reference, ByIdentifier):
            if not reference.id:
                raise ValidationError("User identifier is required")
            user = await self._repository.find_user_by_id(reference.id)
            if user is None:
                raise NotFoundError(f"User with ID {reference.id} not found")
            return user
        if isinstance(reference, ByName):
            if not reference.name:
                raise ValidationError("User name is required")
            user = await self._repository.find_user_by_name(reference.name)
            if user is None:
                raise NotFoundError(f"User '{reference.name}' not found")
            return user
        raise ValidationError(f"Unsupported user reference: {reference!r}")

    async def find_path(self, source: UserReference, target: UserReference) -> PathLookup:
        """Shortest path between two referenced users.

        Raises:
            NotFoundError: If either reference does not resolve
        """
        source_user = await self.resolve(source)
        target_user = await self.resolve(target)

        result = await self._path_engine.shortest_path(source_user.id, target_user.id)
        if not result.found:
            return PathLookup(source=source_user, target=target_user, length=NO_PATH_LENGTH, network=None)

        return PathLookup(
            source=source_user,
            target=target_user,
            length=result.path.length,
            network=self._formatter.format_path(result.path),
        )

    async def get_character_connections(self, name: str, depth: int = 1) -> CharacterConnections:
        """Neighbourhood of a user found by exact name.

        Raises:
            ValidationError: If depth is outside 0..max_connection_depth
            NotFoundError: If no user has this name
        """
        if depth < 0 or depth > self._max_connection_depth:
            raise ValidationError(
                f"Depth must be between 0 and {self._max_connection_depth}, got {depth}"
            )
        character = await self.resolve(ByName(name))

        neighborhood = await self._path_engine.neighbors_within_depth(
            character.id,
            depth,
            result_limit=self._neighbor_result_limit,
        )
        network = self._formatter.format_network(neighborhood.paths)
        logger.debug(
            "Connections for %s at depth %d: %d users, %d paths",
            name,
            depth,
            len(neighborhood.nodes),
            len(neighborhood.paths),
        )
        return CharacterConnections(
            character=character,
            connections=[User.from_node(node) for node in neighborhood.nodes],
            network=network,
        )
