"""
Node-link formatting of graph query results.

Converts three raw shapes into a NetworkModel for visualization:
- a flat collection of nodes and edges (format_graph)
- a collection of multi-segment paths (format_network with "paths")
- a single path (format_path, which also carries the hop length)

Rules:
- Nodes are deduplicated by identifier; the first occurrence wins and
  later ones are dropped without merging
- group is the node's first label, else "Unknown"
- name is the node's name property, falling back to title
- Missing identifiers become generated placeholders (node-..., rel-...),
  stable only within one formatting call
- Links keep encounter order and are never deduplicated
- Stored properties take precedence over derived fields when serialized,
  except id
- Canonical input is returned unchanged; malformed input yields an empty model
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from storybridge.graph.records import GraphEdge, GraphNode, GraphPath

logger = logging.getLogger(__name__)

_UNKNOWN_GROUP = "Unknown"

# =============================================================================
# Visualization Model
# =============================================================================


@dataclass(frozen=True)
class VisNode:
    """A node as drawn: required fields plus an open property bag.

    In to_dict() the bag overrides name and group; id is always the resolved key.
    """

    id: str
    name: str | None
    group: str
    properties: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "group": self.group, **self.properties, "id": self.id}


@dataclass(frozen=True)
class VisLink:
    """A directed link between two VisNode identifiers; its bag overrides all but id."""

    source: str
    target: str
    type: str
    id: str
    properties: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source,
            "target": self.target,
            "type": self.type,
            **self.properties,
            "id": self.id,
        }


@dataclass(frozen=True)
class NetworkModel:
    """Deduplicated node-link graph; length is set for a single formatted path."""

    nodes: list[VisNode] = field(default_factory=list)
    links: list[VisLink] = field(default_factory=list)
    length: int | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "nodes": [node.to_dict() for node in self.nodes],
            "links": [link.to_dict() for link in self.links],
        }
        if self.length is not None:
            data["length"] = self.length
        return data


def _is_collection(value: Any) -> bool:
    """True for iterables other than text, bytes and mappings."""
    return isinstance(value, Iterable) and not isinstance(value, (str, bytes, Mapping))


# =============================================================================
# Per-call builder
# =============================================================================


class _NetworkBuilder:
    """Accumulates nodes and links for one formatting call."""

    def __init__(self) -> None:
        self._nodes: dict[str, VisNode] = {}
        self._links: list[VisLink] = []
        self._placeholders: dict[int, str] = {}

    def _key(self, entity: GraphNode | GraphEdge, prefix: str) -> str:
        if entity.id:
            return entity.id
        marker = id(entity)
        if marker not in self._placeholders:
            self._placeholders[marker] = f"{prefix}-{uuid.uuid4().hex[:12]}"
        return self._placeholders[marker]

    def add_node(self, node: GraphNode) -> str:
        node_id = self._key(node, "node")
        if node_id not in self._nodes:
            self._nodes[node_id] = VisNode(
                id=node_id,
                name=node.get("name", node.get("title")),
                group=node.label or _UNKNOWN_GROUP,
                properties=dict(node.properties),
            )
        return node_id

    def add_link(self, edge: GraphEdge, source: str, target: str) -> None:
        self._links.append(
            VisLink(
                source=source,
                target=target,
                type=edge.type,
                id=self._key(edge, "rel"),
                properties=dict(edge.properties),
            )
        )

    def add_path(self, path: GraphPath) -> None:
        for segment in path.segments:
            source = self.add_node(segment.start)
            target = self.add_node(segment.end)
            self.add_link(segment.relationship, source, target)

    def build(self, length: int | None = None) -> NetworkModel:
        return NetworkModel(nodes=list(self._nodes.values()), links=list(self._links), length=length)


# =============================================================================
# NetworkFormatter Class
# =============================================================================


class NetworkFormatter:
    """Normalises raw graph results into a NetworkModel.

    Usage:
        formatter = NetworkFormatter()
        model = formatter.format_graph(nodes, edges)
        model = formatter.format_network({"paths": neighborhood.paths})
        model = formatter.format_path(result.path)
    """

    def format_network(self, data: Any) -> NetworkModel | Mapping[str, Any]:
        """Format a collection of paths.

        Args:
            data: A NetworkModel or a mapping with "nodes" and "links"
                (returned unchanged), a mapping with "paths", or an
                iterable of GraphPath

        Returns:
            The canonical input itself, or a new NetworkModel
        """
        if isinstance(data, NetworkModel):
            return data
        if isinstance(data, Mapping):
            if "nodes" in data and "links" in data:
                return data
            data = data.get("paths")

        if not _is_collection(data):
            return NetworkModel()

        builder = _NetworkBuilder()
        for path in data:
            if isinstance(path, GraphPath):
                builder.add_path(path)
            else:
                logger.debug("Skipping non-path value %r", type(path).__name__)
        return builder.build()

    def format_path(self, path: GraphPath | None) -> NetworkModel:
        """Format one path, carrying its hop length (0 for no path)."""
        if not isinstance(path, GraphPath):
            return NetworkModel(length=0)
        builder = _NetworkBuilder()
        builder.add_path(path)
        return builder.build(length=path.length)

    def format_graph(
        self,
        nodes: Any,
        edges: Any = None,
    ) -> NetworkModel | Mapping[str, Any]:
        """Format a flat node/edge collection.

        Links use each edge's own endpoints; placeholders apply only to the
        edge identifier. A NetworkModel or a mapping with "nodes" and "links"
        passed as nodes is returned unchanged; any other argument that is not
        a collection counts as empty.
        """
        if isinstance(nodes, NetworkModel):
            return nodes
        if isinstance(nodes, Mapping) and "nodes" in nodes and "links" in nodes:
            return nodes

        builder = _NetworkBuilder()
        for node in nodes if _is_collection(nodes) else ():
            if isinstance(node, GraphNode):
                builder.add_node(node)
        for edge in edges if _is_collection(edges) else ():
            if isinstance(edge, GraphEdge):
                builder.add_link(edge, edge.start_node_id, edge.end_node_id)
        return builder.build()
