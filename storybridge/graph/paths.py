"""
Path search over the user graph.

Implements breadth-first traversal over KNOWS and SHARED_WITH edges,
followed in either direction:
- shortest_path: minimum-hop path between two users, optionally ignoring
  SHARED_WITH edges tagged with a given story
- neighbors_within_depth: relationship-unique walks from one user, up to
  a hop bound, ordered by length

Search is level-synchronous: each BFS level issues one EXPAND_NEIGHBORS
query for the whole frontier, so a path of length k costs k round trips.

Design follows:
- Duck typing for client (works with Neo4jClient or any in-memory double)
- PathEngine accepts identifiers only; name resolution happens above it
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field, replace
from typing import Any

from storybridge.core.exceptions import ValidationError
from storybridge.graph import cypher
from storybridge.graph.records import GraphEdge, GraphNode, GraphPath, PathSegment

logger = logging.getLogger(__name__)

# =============================================================================
# Data Classes
# =============================================================================


@dataclass(frozen=True)
class PathResult:
    """Outcome of a shortest-path search.

    Attributes:
        source_id: Identifier the search started from
        target_id: Identifier the search was looking for
        path: The path found, or None when the target is unreachable
    """

    source_id: str
    target_id: str
    path: GraphPath | None = None

    @property
    def found(self) -> bool:
        return self.path is not None

    @property
    def length(self) -> int | None:
        """Hop count, or None when no path exists."""
        return self.path.length if self.found else None


@dataclass(frozen=True)
class Neighborhood:
    """Walks from an origin user and the distinct users they reach.

    Attributes:
        origin_id: Identifier of the user the expansion started from
        paths: Walks ending on a user other than the origin, shortest first
        nodes: Distinct end users of those walks, in encounter order
    """

    origin_id: str
    paths: list[GraphPath] = field(default_factory=list)
    nodes: list[GraphNode] = field(default_factory=list)


# =============================================================================
# PathEngine Class
# =============================================================================


class PathEngine:
    """Shortest-path and neighbourhood search over the user graph.

    Usage:
        engine = PathEngine(client=neo4j_client)

        result = await engine.shortest_path("user-a", "user-b")
        before = await engine.shortest_path(
            "user-a", "user-b", exclude_edges_tagged_with="story-1"
        )

        neighborhood = await engine.neighbors_within_depth("user-a", depth=2)
    """

    DEFAULT_RESULT_LIMIT = 50

    def __init__(self, client: Any, max_depth: int | None = None) -> None:
        """Initialize path engine.

        Args:
            client: Graph client (Neo4jClient or any Neo4jClientProtocol)
            max_depth: Optional hop bound on shortest-path search (None = unbounded)
        """
        self._client = client
        self._max_depth = max_depth

    @property
    def max_depth(self) -> int | None:
        return self._max_depth

    # =========================================================================
    # Shortest Path
    # =========================================================================

    async def shortest_path(
        self,
        source_id: str,
        target_id: str,
        exclude_edges_tagged_with: str | None = None,
    ) -> PathResult:
        """Find a minimum-hop path between two users.

        Args:
            source_id: Identifier of the start user
            target_id: Identifier of the end user
            exclude_edges_tagged_with: Story identifier; SHARED_WITH edges
                tagged with it are ignored

        Returns:
            PathResult with the path, or with path None if unreachable.
            source_id == target_id yields the empty path (length 0).
        """
        if source_id == target_id:
            return PathResult(source_id=source_id, target_id=target_id, path=GraphPath())

        visited: set[str] = {source_id}
        frontier: dict[str, GraphPath] = {source_id: GraphPath()}
        depth = 0

        while frontier:
            if self._max_depth is not None and depth >= self._max_depth:
                break
            depth += 1

            next_frontier: dict[str, GraphPath] = {}
            for node, edge, neighbor in await self._expand(frontier, exclude_edges_tagged_with):
                if neighbor.id in visited:
                    continue
                visited.add(neighbor.id)
                path = frontier[node.id].extend(PathSegment(start=node, relationship=edge, end=neighbor))
                if neighbor.id == target_id:
                    logger.debug(
                        "Shortest path %s -> %s has length %d", source_id, target_id, path.length
                    )
                    return PathResult(source_id=source_id, target_id=target_id, path=path)
                next_frontier[neighbor.id] = path
            frontier = next_frontier

        logger.debug("No path %s -> %s", source_id, target_id)
        return PathResult(source_id=source_id, target_id=target_id)

    # =========================================================================
    # Bounded Neighbourhood
    # =========================================================================

    async def neighbors_within_depth(
        self,
        node_id: str,
        depth: int,
        result_limit: int = DEFAULT_RESULT_LIMIT,
    ) -> Neighborhood:
        """Expand walks from node_id up to depth hops.

        A walk never repeats a relationship but may revisit a node. Walks
        returning to the origin are extended but not reported.

        Args:
            node_id: Identifier of the origin user
            depth: Maximum walk length in hops
            result_limit: Maximum number of walks returned

        Returns:
            Neighborhood with walks ordered by length and distinct end users

        Raises:
            ValidationError: If depth is negative
        """
        if depth < 0:
            raise ValidationError(f"Depth must be non-negative, got {depth}")

        paths: list[GraphPath] = []
        nodes: dict[str, GraphNode] = {}
        walks: list[tuple[str, GraphPath]] = [(node_id, GraphPath())]
        level = 0

        while walks and level < depth and len(paths) < result_limit:
            level += 1
            ends = {end_id: GraphPath() for end_id, _ in walks}
            adjacency: dict[str, list[tuple[GraphNode, GraphEdge, GraphNode]]] = defaultdict(list)
            for node, edge, neighbor in await self._expand(ends):
                adjacency[node.id].append((node, edge, neighbor))

            extended: list[tuple[str, GraphPath]] = []
            for end_id, walk in walks:
                used = walk.edge_ids()
                for node, edge, neighbor in adjacency.get(end_id, []):
                    if edge.id in used:
                        continue
                    longer = walk.extend(PathSegment(start=node, relationship=edge, end=neighbor))
                    extended.append((neighbor.id, longer))
                    if neighbor.id != node_id and len(paths) < result_limit:
                        paths.append(longer)
                        nodes.setdefault(neighbor.id, neighbor)
            walks = extended

        return Neighborhood(origin_id=node_id, paths=paths, nodes=list(nodes.values()))

    # =========================================================================
    # Helper Methods
    # =========================================================================

    async def _expand(
        self,
        frontier: dict[str, GraphPath],
        exclude_story_id: str | None = None,
    ) -> list[tuple[GraphNode, GraphEdge, GraphNode]]:
        """One BFS level: (node, oriented edge, neighbour) for every frontier edge."""
        records = await self._client.query(
            cypher.EXPAND_NEIGHBORS,
            {"node_ids": list(frontier), "exclude_story_id": exclude_story_id},
        )

        hops: list[tuple[GraphNode, GraphEdge, GraphNode]] = []
        for record in records:
            node, edge, neighbor = record.get("n"), record.get("r"), record.get("m")
            if not isinstance(node, GraphNode) or not isinstance(neighbor, GraphNode):
                continue
            if not isinstance(edge, GraphEdge) or node.id not in frontier:
                continue
            if record.get("outgoing", True):
                edge = replace(edge, start_node_id=node.id, end_node_id=neighbor.id)
            else:
                edge = replace(edge, start_node_id=neighbor.id, end_node_id=node.id)
            hops.append((node, edge, neighbor))
        return hops
