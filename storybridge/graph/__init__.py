# Graph module for Neo4j integration
"""
Graph layer for Neo4j operations including:
- Neo4jClient: async driver wrapper returning typed graph values
- GraphRepository: named-statement create/read operations
- PathEngine: shortest-path and neighbourhood search
- SchemaManager: constraint and index management
"""

from storybridge.graph.cypher import NodeLabels, RelationshipKind
from storybridge.graph.exceptions import (
    Neo4jConnectionError,
    Neo4jConstraintError,
    Neo4jError,
    Neo4jQueryError,
    Neo4jTransactionError,
)
from storybridge.graph.neo4j_client import Neo4jClient, Neo4jClientProtocol
from storybridge.graph.paths import Neighborhood, PathEngine, PathResult
from storybridge.graph.records import GraphEdge, GraphNode, GraphPath, PathSegment
from storybridge.graph.repository import GraphRepository
from storybridge.graph.schema import SchemaManager

__all__ = [
    # Exceptions
    "Neo4jError",
    "Neo4jConnectionError",
    "Neo4jConstraintError",
    "Neo4jQueryError",
    "Neo4jTransactionError",
    # Client
    "Neo4jClient",
    "Neo4jClientProtocol",
    # Graph values
    "GraphEdge",
    "GraphNode",
    "GraphPath",
    "PathSegment",
    # Repository and traversal
    "GraphRepository",
    "Neighborhood",
    "PathEngine",
    "PathResult",
    # Schema
    "NodeLabels",
    "RelationshipKind",
    "SchemaManager",
]
