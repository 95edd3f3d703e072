"""
Unit tests for NetworkService.
"""

from __future__ import annotations

from itertools import permutations

import pytest

from storybridge.core.exceptions import NotFoundError, ValidationError
from storybridge.graph.cypher import RelationshipKind
from storybridge.graph.paths import PathEngine
from storybridge.graph.records import GraphEdge
from storybridge.graph.repository import GraphRepository
from storybridge.services.network import (
    NO_PATH_LENGTH,
    ByIdentifier,
    ByName,
    NetworkService,
    dedupe_pairs,
)
from tests.fakes import InMemoryGraphClient


@pytest.fixture
def network(repository: GraphRepository, path_engine: PathEngine) -> NetworkService:
    return NetworkService(repository, path_engine, max_connection_depth=4)


def edge(edge_id: str, start: str, end: str) -> GraphEdge:
    return GraphEdge(id=edge_id, type="KNOWS", start_node_id=start, end_node_id=end)


# =============================================================================
# Test: get_network
# =============================================================================


class TestGetNetwork:
    """Tests for the bounded graph slice."""

    def test_dedupe_pairs_keeps_first(self) -> None:
        edges = [edge("r1", "a", "b"), edge("r2", "b", "a"), edge("r3", "a", "c")]

        assert [e.id for e in dedupe_pairs(edges)] == ["r1", "r3"]

    @pytest.mark.asyncio
    async def test_limit_bounds_nodes_and_links(self, network: NetworkService, graph: InMemoryGraphClient) -> None:
        """
        GIVEN five users who all know each other in both directions
        WHEN the network is requested with limit=2
        THEN two nodes and a single link between them come back
        """
        ids = [graph.add_user(name).id for name in ("A", "B", "C", "D", "E")]
        for a, b in permutations(ids, 2):
            graph.add_edge(RelationshipKind.KNOWS, a, b)

        model = await network.get_network(limit=2)

        assert len(model.nodes) == 2
        assert len(model.links) == 1
        link = model.links[0]
        assert {link.source, link.target} == {node.id for node in model.nodes}

    @pytest.mark.asyncio
    async def test_empty_graph(self, network: NetworkService) -> None:
        model = await network.get_network(limit=10)

        assert model.nodes == []
        assert model.links == []


# =============================================================================
# Test: resolve / find_path
# =============================================================================


class TestFindPath:
    """Tests for reference resolution and path lookup."""

    @pytest.mark.asyncio
    async def test_resolve_by_name_and_id(self, network: NetworkService, graph: InMemoryGraphClient) -> None:
        rand = graph.add_user("Rand al'Thor", user_id="rand")

        assert (await network.resolve(ByName("Rand al'Thor"))).id == "rand"
        assert (await network.resolve(ByIdentifier("rand"))).name == "Rand al'Thor"

    @pytest.mark.asyncio
    async def test_resolve_errors(self, network: NetworkService) -> None:
        with pytest.raises(NotFoundError, match="User 'Nobody' not found"):
            await network.resolve(ByName("Nobody"))
        with pytest.raises(NotFoundError, match="User with ID ghost not found"):
            await network.resolve(ByIdentifier("ghost"))
        with pytest.raises(ValidationError):
            await network.resolve(ByName(""))
        with pytest.raises(ValidationError):
            await network.resolve("Rand")

    @pytest.mark.asyncio
    async def test_path_found(self, network: NetworkService, graph: InMemoryGraphClient) -> None:
        a = graph.add_user("A", user_id="a").id
        b = graph.add_user("B", user_id="b").id
        c = graph.add_user("C", user_id="c").id
        graph.add_edge(RelationshipKind.KNOWS, a, b)
        graph.add_edge(RelationshipKind.KNOWS, c, b)

        lookup = await network.find_path(ByName("A"), ByName("C"))

        assert lookup.found
        assert lookup.length == 2
        assert lookup.network.length == 2
        assert [node.id for node in lookup.network.nodes] == ["a", "b", "c"]

    @pytest.mark.asyncio
    async def test_no_path(self, network: NetworkService, graph: InMemoryGraphClient) -> None:
        graph.add_user("A", user_id="a")
        graph.add_user("B", user_id="b")

        lookup = await network.find_path(ByIdentifier("a"), ByIdentifier("b"))

        assert not lookup.found
        assert lookup.length == NO_PATH_LENGTH
        assert lookup.network is None

    @pytest.mark.asyncio
    async def test_same_user_has_length_zero(self, network: NetworkService, graph: InMemoryGraphClient) -> None:
        graph.add_user("A", user_id="a")

        lookup = await network.find_path(ByName("A"), ByIdentifier("a"))

        assert lookup.length == 0
        assert lookup.found


# =============================================================================
# Test: get_character_connections
# =============================================================================


class TestCharacterConnections:
    """Tests for neighbourhood lookup by name."""

    @pytest.mark.asyncio
    async def test_direct_connections(self, network: NetworkService, graph: InMemoryGraphClient) -> None:
        rand = graph.add_user("Rand", user_id="rand").id
        mat = graph.add_user("Mat", user_id="mat").id
        perrin = graph.add_user("Perrin", user_id="perrin").id
        graph.add_edge(RelationshipKind.KNOWS, rand, mat)
        graph.add_edge(RelationshipKind.KNOWS, perrin, rand)
        graph.add_edge(RelationshipKind.KNOWS, mat, perrin)

        result = await network.get_character_connections("Rand", depth=1)

        assert result.character.id == rand
        assert sorted(user.name for user in result.connections) == ["Mat", "Perrin"]
        assert {node.id for node in result.network.nodes} == {rand, mat, perrin}
        assert len(result.network.links) == 2

    @pytest.mark.asyncio
    async def test_depth_zero_is_empty(self, network: NetworkService, graph: InMemoryGraphClient) -> None:
        graph.add_user("Rand")

        result = await network.get_character_connections("Rand", depth=0)

        assert result.connections == []
        assert result.network.nodes == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("depth", [-1, 5])
    async def test_depth_out_of_range(self, network: NetworkService, graph: InMemoryGraphClient, depth: int) -> None:
        graph.add_user("Rand")

        with pytest.raises(ValidationError):
            await network.get_character_connections("Rand", depth=depth)

    @pytest.mark.asyncio
    async def test_unknown_character(self, network: NetworkService) -> None:
        with pytest.raises(NotFoundError):
            await network.get_character_connections("Nobody")
