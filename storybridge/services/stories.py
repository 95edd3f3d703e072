"""
Story operations: paginated listing, detail lookup and creation.
"""

from __future__ import annotations

import logging
from typing import Any

from storybridge.core.exceptions import NotFoundError, ValidationError
from storybridge.graph.models import Story, StoryDetail, StorySummary
from storybridge.graph.repository import GraphRepository, new_identifier

logger = logging.getLogger(__name__)


def require_text(**values: Any) -> None:
    """Raise ValidationError naming every blank or missing field."""
    missing = [name for name, value in values.items() if not isinstance(value, str) or not value.strip()]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")


class StoryService:
    """Story use cases over the graph repository.

    Usage:
        service = StoryService(repository)
        page = await service.list_stories(skip=0, limit=10)
        story = await service.create_story("Title", "Content", author_id)
    """

    def __init__(self, repository: GraphRepository) -> None:
        self._repository = repository

    async def list_stories(self, skip: int = 0, limit: int = 10) -> list[StorySummary]:
        """Newest stories first, each with its author."""
        return await self._repository.list_stories(skip=skip, limit=limit)

    async def get_story(self, story_id: str) -> StoryDetail:
        """Story with its author and every complete share event.

        Raises:
            NotFoundError: If no story has this identifier
        """
        detail = await self._repository.get_story_detail(story_id)
        if detail is None:
            raise NotFoundError(f"Story with ID {story_id} not found")
        return detail

    async def create_story(self, title: str, content: str, author_id: str) -> Story:
        """Create a story under a fresh identifier.

        Raises:
            ValidationError: If any field is blank
            NotFoundError: If the author does not exist
        """
        require_text(title=title, content=content, authorId=author_id)

        if await self._repository.find_user_by_id(author_id) is None:
            raise NotFoundError(f"Author with ID {author_id} not found")

        story = await self._repository.create_story(
            story_id=new_identifier(),
            title=title,
            content=content,
            author_id=author_id,
        )
        logger.info("Story %s created by %s", story.id, author_id)
        return story
