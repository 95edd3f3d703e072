"""
Typed graph values returned by the graph client.

Raw driver values (neo4j.graph.Node / Relationship / Path, neo4j.time
temporals) are converted once, at the client boundary, into:
- GraphNode: identifier, labels, property map
- GraphEdge: identifier, type, endpoint identifiers, property map
- GraphPath: ordered node/edge/node segments

Identifiers come from the "id" property every node and edge receives at
creation; the driver element id is only a fallback, since the store may
recycle element ids after deletion.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from neo4j.graph import Node, Path, Relationship


@dataclass(frozen=True)
class GraphNode:
    """A node with its labels and properties."""

    id: str
    labels: tuple[str, ...] = ()
    properties: dict[str, Any] = field(default_factory=dict)

    @property
    def label(self) -> str | None:
        """First label, if any."""
        return self.labels[0] if self.labels else None

    def get(self, key: str, default: Any = None) -> Any:
        return self.properties.get(key, default)


@dataclass(frozen=True)
class GraphEdge:
    """A directed, typed relationship between two nodes."""

    id: str
    type: str
    start_node_id: str
    end_node_id: str
    properties: dict[str, Any] = field(default_factory=dict)

    def get(self, key: str, default: Any = None) -> Any:
        return self.properties.get(key, default)


@dataclass(frozen=True)
class PathSegment:
    """One hop of a path, oriented in traversal order.

    start/end follow the path, not the relationship direction; an edge
    traversed backwards has relationship.end_node_id == start.id.
    """

    start: GraphNode
    relationship: GraphEdge
    end: GraphNode


@dataclass(frozen=True)
class GraphPath:
    """Ordered sequence of segments; the empty path has length 0."""

    segments: tuple[PathSegment, ...] = ()

    @property
    def length(self) -> int:
        return len(self.segments)

    @property
    def nodes(self) -> list[GraphNode]:
        if not self.segments:
            return []
        return [self.segments[0].start] + [segment.end for segment in self.segments]

    @property
    def relationships(self) -> list[GraphEdge]:
        return [segment.relationship for segment in self.segments]

    @property
    def end(self) -> GraphNode | None:
        return self.segments[-1].end if self.segments else None

    def edge_ids(self) -> set[str]:
        return {segment.relationship.id for segment in self.segments}

    def extend(self, segment: PathSegment) -> GraphPath:
        """Return a new path with segment appended."""
        return GraphPath(segments=self.segments + (segment,))


# =============================================================================
# Driver value conversion
# =============================================================================


def _native(value: Any) -> Any:
    """Convert neo4j.time temporals (and containers of them) to Python values."""
    if isinstance(value, list):
        return [_native(item) for item in value]
    if hasattr(value, "to_native"):
        return value.to_native()
    return value


def _properties(entity: Any) -> dict[str, Any]:
    return {key: _native(value) for key, value in entity.items()}


def _node_key(node: Any) -> str:
    identifier = node.get("id")
    return str(identifier) if identifier is not None else node.element_id


def node_from_neo4j(node: Node) -> GraphNode:
    """Build a GraphNode from a driver node."""
    return GraphNode(
        id=_node_key(node),
        labels=tuple(node.labels),
        properties=_properties(node),
    )


def edge_from_neo4j(relationship: Relationship) -> GraphEdge:
    """Build a GraphEdge from a driver relationship.

    Endpoint identifiers are best effort: a relationship returned on its
    own carries endpoint nodes without properties, so queries that need
    exact endpoints return them as separate columns.
    """
    start, end = relationship.start_node, relationship.end_node
    identifier = relationship.get("id")
    return GraphEdge(
        id=str(identifier) if identifier is not None else relationship.element_id,
        type=relationship.type or "UNKNOWN",
        start_node_id=_node_key(start) if start is not None else "unknown",
        end_node_id=_node_key(end) if end is not None else "unknown",
        properties=_properties(relationship),
    )


def path_from_neo4j(path: Path) -> GraphPath:
    """Build a GraphPath, orienting each segment along the path."""
    nodes = [node_from_neo4j(node) for node in path.nodes]
    segments = tuple(
        PathSegment(start=nodes[index], relationship=edge_from_neo4j(rel), end=nodes[index + 1])
        for index, rel in enumerate(path.relationships)
    )
    return GraphPath(segments=segments)


def to_graph_value(value: Any) -> Any:
    """Convert any record value into typed graph values or plain Python."""
    if isinstance(value, Node):
        return node_from_neo4j(value)
    if isinstance(value, Relationship):
        return edge_from_neo4j(value)
    if isinstance(value, Path):
        return path_from_neo4j(value)
    if isinstance(value, list):
        return [to_graph_value(item) for item in value]
    if isinstance(value, Mapping):
        return {key: to_graph_value(item) for key, item in value.items()}
    return _native(value)
