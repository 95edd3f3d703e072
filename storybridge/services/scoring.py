"""
Share scoring.

A share from sender to receiver rewards the sender when it brings the
receiver closer to the story's author:

    before = shortest_path(author, receiver) ignoring this story's SHARED_WITH edges
    after  = shortest_path(author, receiver) after the share is persisted
    path_reduction = before - after   (0 unless both paths exist)
    reward_points  = points_per_hop * path_reduction   (never negative)

The steps run as independent store calls. If a later step fails the
edges already written stay in the graph.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from storybridge.core.exceptions import NotFoundError, ValidationError
from storybridge.graph.paths import PathEngine
from storybridge.graph.repository import GraphRepository
from storybridge.services.stories import require_text

logger = logging.getLogger(__name__)

DEFAULT_POINTS_PER_HOP = 10


@dataclass(frozen=True)
class ShareOutcome:
    """Result of a recorded share.

    Attributes:
        shared_at: Timestamp on the SHARED edge
        connected_at: Timestamp on the SHARED_WITH edge
        path_before: Author -> receiver hops before the share, None if unreachable
        path_after: Author -> receiver hops after the share, None if unreachable
        path_reduction: before - after when both exist, else 0
        reward_points: Points earned by the sender
    """

    story_id: str
    sender_id: str
    receiver_id: str
    shared_at: datetime | None
    connected_at: datetime | None
    path_before: int | None
    path_after: int | None
    path_reduction: int
    reward_points: int


def compute_reward(
    before: int | None,
    after: int | None,
    points_per_hop: int = DEFAULT_POINTS_PER_HOP,
) -> tuple[int, int]:
    """Return (path_reduction, reward_points) for two path lengths."""
    if before is None or after is None:
        return 0, 0
    reduction = before - after
    reward = points_per_hop * reduction if reduction > 0 else 0
    return reduction, reward


class ShareScorer:
    """Records shares and scores them by author -> receiver distance.

    Usage:
        scorer = ShareScorer(repository, path_engine)
        outcome = await scorer.record_share(story_id, sender_id, receiver_id)
        outcome.reward_points
    """

    def __init__(
        self,
        repository: GraphRepository,
        path_engine: PathEngine,
        points_per_hop: int = DEFAULT_POINTS_PER_HOP,
    ) -> None:
        self._repository = repository
        self._path_engine = path_engine
        self._points_per_hop = points_per_hop

    async def record_share(self, story_id: str, sender_id: str, receiver_id: str) -> ShareOutcome:
        """Persist a share and compute its reward.

        Raises:
            ValidationError: If an identifier is blank, or sender equals receiver
            NotFoundError: If the story, sender, receiver or author is missing
        """
        require_text(storyId=story_id, senderId=sender_id, receiverId=receiver_id)

        if await self._repository.find_story_by_id(story_id) is None:
            raise NotFoundError(f"Story with ID {story_id} not found")
        if await self._repository.find_user_by_id(sender_id) is None:
            raise NotFoundError(f"Sender with ID {sender_id} not found")
        if await self._repository.find_user_by_id(receiver_id) is None:
            raise NotFoundError(f"Receiver with ID {receiver_id} not found")
        if sender_id == receiver_id:
            raise ValidationError("Cannot share a story with yourself")

        author = await self._repository.find_story_author(story_id)
        if author is None:
            raise NotFoundError(f"Author of story {story_id} not found")

        before = await self._path_engine.shortest_path(
            author.id, receiver_id, exclude_edges_tagged_with=story_id
        )
        record = await self._repository.record_share(story_id, sender_id, receiver_id)
        after = await self._path_engine.shortest_path(author.id, receiver_id)

        reduction, reward = compute_reward(before.length, after.length, self._points_per_hop)
        logger.info(
            "Share of %s from %s to %s: path %s -> %s, reward %d",
            story_id,
            sender_id,
            receiver_id,
            before.length,
            after.length,
            reward,
        )
        return ShareOutcome(
            story_id=story_id,
            sender_id=sender_id,
            receiver_id=receiver_id,
            shared_at=record.shared_at,
            connected_at=record.connected_at,
            path_before=before.length,
            path_after=after.length,
            path_reduction=reduction,
            reward_points=reward,
        )
