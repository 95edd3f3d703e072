"""
Neo4j health checks.

Both checks run a trivial query through an already-connected graph client,
so they exercise the same driver and connection pool as real traffic.
"""

import logging
import time
from typing import Any

from storybridge.graph.cypher import HEALTH_PROBE
from storybridge.graph.exceptions import Neo4jConnectionError, Neo4jError

logger = logging.getLogger(__name__)


async def check_neo4j_health(client: Any) -> bool:
    """
    Check if Neo4j is healthy and reachable.

    Args:
        client: Graph client (Neo4jClient or any Neo4jClientProtocol)

    Returns:
        True if the probe query succeeds, False otherwise
    """
    if not client.is_connected:
        return False
    try:
        records = await client.query(HEALTH_PROBE)
    except Neo4jError as e:
        logger.warning("Neo4j health probe failed: %s", e)
        return False
    return bool(records) and records[0].get("ok") == 1


async def check_neo4j_health_detailed(client: Any, uri: str | None = None) -> dict[str, Any]:
    """
    Check Neo4j health with detailed information.

    Args:
        client: Graph client (Neo4jClient or any Neo4jClientProtocol)
        uri: Connection URI to report; defaults to the client's own

    Returns:
        Dictionary with status, uri, and latency or error
    """
    uri = uri if uri is not None else getattr(client, "uri", None)
    if not client.is_connected:
        return {"status": "unhealthy", "uri": uri, "error": "Not connected"}

    start_time = time.perf_counter()
    try:
        await client.query(HEALTH_PROBE)
    except Neo4jConnectionError as e:
        return {"status": "unhealthy", "uri": uri, "error": f"Service unavailable: {e}"}
    except Neo4jError as e:
        return {"status": "unhealthy", "uri": uri, "error": str(e)}

    latency_ms = (time.perf_counter() - start_time) * 1000
    return {"status": "healthy", "uri": uri, "latency_ms": round(latency_ms, 2)}
