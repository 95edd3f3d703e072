"""
Unit tests for the StoryBridge HTTP routes.

The app is built with an injected ServiceContainer wired around the
in-memory graph, so requests exercise the real services end to end.
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from storybridge.api.app import create_app
from storybridge.api.dependencies import ServiceContainer
from storybridge.core.config import Settings
from storybridge.graph import cypher
from storybridge.graph.cypher import RelationshipKind
from storybridge.graph.exceptions import Neo4jConnectionError, Neo4jQueryError
from tests.fakes import InMemoryGraphClient

# ==============================================================================
# Fixtures
# ==============================================================================


@pytest.fixture
def client(settings: Settings, services: ServiceContainer) -> TestClient:
    """Test client over an app with injected services."""
    return TestClient(create_app(settings=settings, services=services))


@pytest.fixture
def cast(graph: InMemoryGraphClient) -> dict[str, str]:
    """Rand - Mat - Perrin knows chain plus an unconnected Lan, and one story by Rand."""
    ids = {name: graph.add_user(name, user_id=name.lower()).id for name in ("Rand", "Mat", "Perrin", "Lan")}
    graph.add_edge(RelationshipKind.KNOWS, ids["Rand"], ids["Mat"])
    graph.add_edge(RelationshipKind.KNOWS, ids["Mat"], ids["Perrin"])
    ids["story"] = graph.add_story("The Eye of the World", ids["Rand"], story_id="eye").id
    return ids


# ==============================================================================
# Stories
# ==============================================================================


class TestStoryRoutes:
    """Tests for /api/stories endpoints."""

    def test_list_stories_uses_default_page_size(self, client: TestClient, cast: dict[str, str]) -> None:
        response = client.get("/api/stories")

        assert response.status_code == 200
        data = response.json()
        assert data["page"] == 0
        assert data["limit"] == 10
        assert data["total"] == 1
        story = data["stories"][0]
        assert story["author"] == {"id": "rand", "name": "Rand"}
        assert "createdAt" in story

    def test_list_stories_pagination(self, client: TestClient, graph: InMemoryGraphClient) -> None:
        author = graph.add_user("Rand").id
        for index in range(5):
            graph.add_story(f"Story {index}", author)

        first = client.get("/api/stories", params={"page": 0, "limit": 2}).json()
        last = client.get("/api/stories", params={"page": 2, "limit": 2}).json()

        assert [story["title"] for story in first["stories"]] == ["Story 4", "Story 3"]
        assert [story["title"] for story in last["stories"]] == ["Story 0"]

    def test_negative_page_is_validation_error(self, client: TestClient) -> None:
        response = client.get("/api/stories", params={"page": -1})

        assert response.status_code == 400
        assert response.json()["error"] == "validation"

    def test_get_story_detail(self, client: TestClient, cast: dict[str, str]) -> None:
        client.post(
            "/api/stories/share",
            json={"storyId": "eye", "senderId": "rand", "receiverId": "lan"},
        )

        response = client.get("/api/stories/eye")

        assert response.status_code == 200
        data = response.json()
        assert data["title"] == "The Eye of the World"
        assert [share["user"]["name"] for share in data["shares"]] == ["Rand"]

    def test_get_missing_story(self, client: TestClient) -> None:
        response = client.get("/api/stories/nope")

        assert response.status_code == 404
        assert response.json() == {"error": "not_found", "message": "Story with ID nope not found"}

    def test_create_story(self, client: TestClient, cast: dict[str, str]) -> None:
        response = client.post(
            "/api/stories",
            json={"title": "The Great Hunt", "content": "The Horn is stolen.", "authorId": "mat"},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["message"] == "Story created successfully"
        assert data["story"]["authorId"] == "mat"
        assert data["story"]["id"]

    def test_create_story_blank_fields(self, client: TestClient) -> None:
        response = client.post("/api/stories", json={"title": "Only a title"})

        assert response.status_code == 400
        assert response.json()["message"] == "Missing required fields: content, authorId"

    def test_create_story_unknown_author(self, client: TestClient) -> None:
        response = client.post("/api/stories", json={"title": "T", "content": "C", "authorId": "ghost"})

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"


# ==============================================================================
# Sharing
# ==============================================================================


class TestShareRoute:
    """Tests for POST /api/stories/share."""

    def test_share_reports_reward(self, client: TestClient, cast: dict[str, str]) -> None:
        response = client.post(
            "/api/stories/share",
            json={"storyId": "eye", "senderId": "rand", "receiverId": "perrin"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Story shared successfully"
        assert data["share"]["storyId"] == "eye"
        assert data["share"]["timestamp"] is not None
        assert data["pathBefore"] == 2
        assert data["pathAfter"] == 1
        assert data["pathReduction"] == 1
        assert data["rewardPoints"] == 10

    def test_share_with_unreachable_receiver(self, client: TestClient, cast: dict[str, str]) -> None:
        data = client.post(
            "/api/stories/share",
            json={"storyId": "eye", "senderId": "rand", "receiverId": "lan"},
        ).json()

        assert data["pathBefore"] is None
        assert data["pathAfter"] == 1
        assert data["rewardPoints"] == 0

    def test_share_with_self(self, client: TestClient, cast: dict[str, str]) -> None:
        response = client.post(
            "/api/stories/share",
            json={"storyId": "eye", "senderId": "mat", "receiverId": "mat"},
        )

        assert response.status_code == 400
        assert response.json() == {"error": "validation", "message": "Cannot share a story with yourself"}

    def test_share_missing_fields(self, client: TestClient) -> None:
        response = client.post("/api/stories/share", json={"storyId": "eye"})

        assert response.status_code == 400
        assert "senderId" in response.json()["message"]


# ==============================================================================
# Network
# ==============================================================================


class TestNetworkRoutes:
    """Tests for /api/users, /api/network, /api/path and /api/connections."""

    def test_list_users(self, client: TestClient, cast: dict[str, str]) -> None:
        data = client.get("/api/users", params={"limit": 2}).json()

        assert [user["name"] for user in data["users"]] == ["Lan", "Mat"]
        assert data["users"][0]["isActive"] is True

    def test_network(self, client: TestClient, cast: dict[str, str]) -> None:
        data = client.get("/api/network").json()

        assert {node["id"] for node in data["nodes"]} == {"rand", "mat", "perrin", "lan"}
        assert all(node["group"] == "User" for node in data["nodes"])
        assert all(link["type"] == "KNOWS" for link in data["links"])

    def test_network_limit(self, client: TestClient, cast: dict[str, str]) -> None:
        data = client.get("/api/network", params={"limit": 2}).json()

        assert len(data["nodes"]) == 2

    def test_path_by_name(self, client: TestClient, cast: dict[str, str]) -> None:
        response = client.get("/api/path", params={"source": "Rand", "target": "Perrin"})

        assert response.status_code == 200
        data = response.json()
        assert data["length"] == 2
        assert data["message"] == "Path found with length 2"
        assert [node["name"] for node in data["nodes"]] == ["Rand", "Mat", "Perrin"]
        assert len(data["links"]) == 2

    def test_path_by_id(self, client: TestClient, cast: dict[str, str]) -> None:
        data = client.get("/api/path", params={"source": "perrin", "target": "mat", "by": "id"}).json()

        assert data["length"] == 1

    def test_no_path(self, client: TestClient, cast: dict[str, str]) -> None:
        response = client.get("/api/path", params={"source": "Rand", "target": "Lan"})

        assert response.status_code == 200
        assert response.json() == {
            "nodes": [],
            "links": [],
            "message": "No path found between the specified users",
            "length": -1,
        }

    def test_path_unknown_user(self, client: TestClient, cast: dict[str, str]) -> None:
        response = client.get("/api/path", params={"source": "Rand", "target": "Nobody"})

        assert response.status_code == 404
        assert response.json()["message"] == "User 'Nobody' not found"

    def test_path_requires_source(self, client: TestClient) -> None:
        response = client.get("/api/path", params={"target": "Rand"})

        assert response.status_code == 400

    def test_path_rejects_unknown_lookup_mode(self, client: TestClient) -> None:
        response = client.get("/api/path", params={"source": "a", "target": "b", "by": "email"})

        assert response.status_code == 400

    def test_connections(self, client: TestClient, cast: dict[str, str]) -> None:
        data = client.get("/api/connections/Mat", params={"depth": 1}).json()

        assert data["character"]["name"] == "Mat"
        assert sorted(user["name"] for user in data["connections"]) == ["Perrin", "Rand"]
        assert len(data["network"]["links"]) == 2

    def test_connections_depth_limit(self, client: TestClient, cast: dict[str, str]) -> None:
        response = client.get("/api/connections/Mat", params={"depth": 9})

        assert response.status_code == 400

    def test_connections_unknown_character(self, client: TestClient) -> None:
        response = client.get("/api/connections/Nobody")

        assert response.status_code == 404


# ==============================================================================
# Initialisation and health
# ==============================================================================


class TestInitRoutes:
    """Tests for /api/init and /api/init/status."""

    def test_init_seeds_demo_data(self, client: TestClient, graph: InMemoryGraphClient) -> None:
        response = client.post("/api/init")

        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Database initialized successfully"
        assert data["summary"]["characters"] == 10
        assert data["summary"]["stories"] == 5
        assert graph.calls(cypher.CLEAR_ALL) == []

    @pytest.mark.parametrize(
        ("params", "body"),
        [({"clear": "true"}, None), ({}, {"clear": True})],
    )
    def test_init_clear(self, client: TestClient, graph: InMemoryGraphClient, params, body) -> None:
        client.post("/api/init", params=params, json=body)

        assert len(graph.calls(cypher.CLEAR_ALL)) == 1

    def test_status(self, client: TestClient, cast: dict[str, str]) -> None:
        data = client.get("/api/init/status").json()

        assert data["connected"] is True
        assert data["stats"]["userCount"] == 4
        assert data["stats"]["storyCount"] == 1

    def test_status_disconnected(self, client: TestClient, graph: InMemoryGraphClient) -> None:
        graph.set_connected(False)

        data = client.get("/api/init/status").json()

        assert data == {
            "connected": False,
            "stats": {"nodeCount": 0, "relationshipCount": 0, "userCount": 0, "storyCount": 0},
        }


class TestHealthRoutes:
    """Tests for /health and the index."""

    def test_healthy(self, client: TestClient) -> None:
        data = client.get("/health").json()

        assert data["status"] == "healthy"
        assert data["dependencies"]["neo4j"]["status"] == "healthy"
        assert data["dependencies"]["neo4j"]["uri"] == "bolt://localhost:7687"
        assert data["version"]

    def test_degraded_when_disconnected(self, client: TestClient, graph: InMemoryGraphClient) -> None:
        graph.set_connected(False)

        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "degraded"

    def test_index_lists_endpoints(self, client: TestClient) -> None:
        data = client.get("/").json()

        assert data["endpoints"]["shareStory"] == "/api/stories/share"
        assert data["endpoints"]["docs"] == "/docs"


# ==============================================================================
# Error rendering
# ==============================================================================


class TestErrorRendering:
    """Store failures surface as store errors."""

    def test_query_failure_is_500(self, client: TestClient, graph: InMemoryGraphClient) -> None:
        graph.fail_on(cypher.LIST_STORIES, Neo4jQueryError("boom"))

        response = client.get("/api/stories")

        assert response.status_code == 500
        assert response.json() == {"error": "store_error", "message": "boom"}

    def test_unavailable_store_is_503(self, client: TestClient, graph: InMemoryGraphClient) -> None:
        graph.fail_on(cypher.LIST_USERS, Neo4jConnectionError("Neo4j unavailable"))

        response = client.get("/api/users")

        assert response.status_code == 503
        assert response.json()["error"] == "store_error"
