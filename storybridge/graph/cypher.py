"""
Named Cypher statements used by the repository and the path engine.

Every query the core issues is defined here, once, so parameter names and
return columns have a single source of truth. Relationship types cannot be
parameterised in Cypher; connection statements are therefore generated per
RelationshipKind at import time.
"""

from __future__ import annotations

from enum import Enum

# =============================================================================
# Labels and relationship kinds
# =============================================================================


class NodeLabels:
    """Node label constants for the graph schema."""

    USER = "User"
    STORY = "Story"


class RelationshipKind(str, Enum):
    """Relationship types between nodes.

    - AUTHORED: User -> Story, created with the story
    - KNOWS: User -> User, created by relationship seeding
    - SHARED: User -> Story, created by a share action
    - SHARED_WITH: User -> User, tagged with the shared story's id
    """

    AUTHORED = "AUTHORED"
    KNOWS = "KNOWS"
    SHARED = "SHARED"
    SHARED_WITH = "SHARED_WITH"


USER_TO_USER_KINDS = (RelationshipKind.KNOWS, RelationshipKind.SHARED_WITH)

# =============================================================================
# Users
# =============================================================================

CREATE_USER = """
CREATE (u:User {
    id: $id,
    name: $name,
    bio: $bio,
    affiliation: $affiliation,
    nationality: $nationality,
    gender: $gender,
    created_at: $created_at,
    is_active: true
})
RETURN u
"""

FIND_USER_BY_ID = """
MATCH (u:User {id: $id})
RETURN u
LIMIT 1
"""

FIND_USER_BY_NAME = """
MATCH (u:User {name: $name})
RETURN u
ORDER BY u.id
LIMIT 1
"""

LIST_USERS = """
MATCH (u:User)
RETURN u
ORDER BY u.name, u.id
SKIP $skip
LIMIT $limit
"""


def _connection_statement(kind: RelationshipKind) -> str:
    tag = ", story_id: $story_id" if kind is RelationshipKind.SHARED_WITH else ""
    return f"""
MATCH (a:User {{id: $user_a}})
MATCH (b:User {{id: $user_b}})
WHERE a <> b
CREATE (a)-[r:{kind.value} {{id: $edge_id, created_at: $created_at{tag}}}]->(b)
RETURN a, r, b
"""


CREATE_CONNECTION = {kind: _connection_statement(kind) for kind in USER_TO_USER_KINDS}

# =============================================================================
# Stories
# =============================================================================

CREATE_STORY = """
MATCH (author:User {id: $author_id})
CREATE (s:Story {
    id: $id,
    title: $title,
    content: $content,
    author_id: $author_id,
    created_at: $created_at
})
CREATE (author)-[:AUTHORED {id: $edge_id}]->(s)
RETURN s, author
"""

FIND_STORY_BY_ID = """
MATCH (s:Story {id: $id})
RETURN s
LIMIT 1
"""

FIND_STORY_AUTHOR = """
MATCH (author:User)-[:AUTHORED]->(s:Story {id: $story_id})
RETURN author
LIMIT 1
"""

LIST_STORIES = """
MATCH (s:Story)<-[:AUTHORED]-(author:User)
RETURN s, author
ORDER BY s.created_at DESC, s.id
SKIP $skip
LIMIT $limit
"""

GET_STORY_DETAIL = """
MATCH (s:Story {id: $id})<-[:AUTHORED]-(author:User)
OPTIONAL MATCH (sharer:User)-[shared:SHARED]->(s)
RETURN s, author, collect({sharer: sharer, shared: shared}) AS shares
"""

RECORD_SHARE = """
MATCH (story:Story {id: $story_id})
MATCH (sender:User {id: $sender_id})
MATCH (receiver:User {id: $receiver_id})
WHERE sender <> receiver
CREATE (sender)-[share:SHARED {id: $share_id, timestamp: $timestamp}]->(story)
CREATE (sender)-[connection:SHARED_WITH {
    id: $connection_id,
    timestamp: $timestamp,
    story_id: $story_id
}]->(receiver)
RETURN share, connection
"""

# =============================================================================
# Traversal
# =============================================================================

# One BFS level: every KNOWS/SHARED_WITH edge touching the frontier, in
# either direction. outgoing tells whether n is the edge's start node.
EXPAND_NEIGHBORS = """
MATCH (n:User)-[r:KNOWS|SHARED_WITH]-(m:User)
WHERE n.id IN $node_ids
  AND ($exclude_story_id IS NULL
       OR r.story_id IS NULL
       OR r.story_id <> $exclude_story_id)
RETURN n, r, m, startNode(r) = n AS outgoing
"""

NETWORK_SLICE = """
MATCH (u:User)
WITH u ORDER BY u.name, u.id LIMIT $limit
WITH collect(u) AS users
OPTIONAL MATCH (a:User)-[r]->(b:User)
WHERE a IN users AND b IN users
RETURN users AS nodes, collect({relationship: r, source: a.id, target: b.id}) AS relationships
"""

# =============================================================================
# Maintenance
# =============================================================================

GRAPH_STATS = """
OPTIONAL MATCH (n)
WITH count(n) AS node_count
OPTIONAL MATCH ()-[r]->()
WITH node_count, count(r) AS relationship_count
OPTIONAL MATCH (u:User)
WITH node_count, relationship_count, count(u) AS user_count
OPTIONAL MATCH (s:Story)
RETURN node_count, relationship_count, user_count, count(s) AS story_count
"""

CLEAR_ALL = """
MATCH (n)
DETACH DELETE n
"""

HEALTH_PROBE = "RETURN 1 AS ok"
