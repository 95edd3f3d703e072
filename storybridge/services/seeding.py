"""
Demo data seeding.

Populates the graph with:
- User nodes for a cast of sample characters
- KNOWS relationships from each character's association list
- Story nodes authored by the main characters
- SHARED / SHARED_WITH edges from each author to random recipients

Associations naming a character that is not in the cast are skipped.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from storybridge.graph.cypher import RelationshipKind
from storybridge.graph.models import User
from storybridge.graph.repository import GraphRepository, new_identifier

logger = logging.getLogger(__name__)

# =============================================================================
# Sample Data
# =============================================================================


@dataclass(frozen=True)
class CharacterData:
    """A character to seed as a User node."""

    name: str
    description: str = ""
    gender: str | None = None
    nationality: str | None = None
    affiliation: str | None = None
    associations: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> CharacterData:
        return cls(
            name=data["name"],
            description=data.get("description", ""),
            gender=data.get("gender"),
            nationality=data.get("nationality"),
            affiliation=data.get("affiliation"),
            associations=tuple(data.get("associations", ())),
        )


SAMPLE_CHARACTERS: tuple[CharacterData, ...] = (
    CharacterData(
        name="Rand al'Thor",
        description="The Dragon Reborn, a farm boy from the Two Rivers who discovers he is the reincarnation of the Dragon.",
        gender="Male",
        nationality="Andoran/Aiel",
        affiliation="Dragon Reborn",
        associations=("Matrim Cauthon", "Perrin Aybara", "Egwene al'Vere", "Moiraine Damodred"),
    ),
    CharacterData(
        name="Matrim Cauthon",
        description="A gambler and trickster from the Two Rivers with incredible luck.",
        gender="Male",
        nationality="Andoran",
        affiliation="Band of the Red Hand",
        associations=("Rand al'Thor", "Perrin Aybara", "Tuon Athaem Kore Paendrag"),
    ),
    CharacterData(
        name="Perrin Aybara",
        description="A blacksmith from the Two Rivers with the ability to communicate with wolves.",
        gender="Male",
        nationality="Andoran",
        affiliation="Wolf Brother",
        associations=("Rand al'Thor", "Matrim Cauthon", "Faile Bashere"),
    ),
    CharacterData(
        name="Egwene al'Vere",
        description="An innkeeper's daughter who becomes the Amyrlin Seat.",
        gender="Female",
        nationality="Andoran",
        affiliation="Aes Sedai (White Tower)",
        associations=("Rand al'Thor", "Nynaeve al'Meara", "Elayne Trakand"),
    ),
    CharacterData(
        name="Nynaeve al'Meara",
        description="The former Wisdom of Emond's Field who becomes a powerful Aes Sedai.",
        gender="Female",
        nationality="Andoran",
        affiliation="Aes Sedai (Yellow Ajah)",
        associations=("Lan Mandragoran", "Egwene al'Vere", "Elayne Trakand"),
    ),
    CharacterData(
        name="Moiraine Damodred",
        description="An Aes Sedai of the Blue Ajah who guides the young heroes from the Two Rivers.",
        gender="Female",
        nationality="Cairhienin",
        affiliation="Aes Sedai (Blue Ajah)",
        associations=("Lan Mandragoran", "Rand al'Thor", "Siuan Sanche"),
    ),
    CharacterData(
        name="Lan Mandragoran",
        description="The uncrowned king of Malkier and Moiraine's Warder.",
        gender="Male",
        nationality="Malkieri",
        affiliation="Warder",
        associations=("Moiraine Damodred", "Nynaeve al'Meara"),
    ),
    CharacterData(
        name="Elayne Trakand",
        description="Daughter-Heir of Andor who becomes a queen and Aes Sedai.",
        gender="Female",
        nationality="Andoran",
        affiliation="Aes Sedai (Green Ajah)/Queen of Andor",
        associations=("Rand al'Thor", "Egwene al'Vere", "Nynaeve al'Meara"),
    ),
    CharacterData(
        name="Min Farshaw",
        description="A young woman with the ability to see visions about people's futures.",
        gender="Female",
        nationality="Andoran",
        affiliation="Rand al'Thor",
        associations=("Rand al'Thor", "Elayne Trakand", "Aviendha"),
    ),
    CharacterData(
        name="Aviendha",
        description="A Maiden of the Spear who becomes a Wise One.",
        gender="Female",
        nationality="Aiel",
        affiliation="Wise One",
        associations=("Rand al'Thor", "Elayne Trakand", "Min Farshaw"),
    ),
)

STORY_TITLES: tuple[str, ...] = (
    "The Dragon Reborn",
    "The Eye of the World",
    "The Great Hunt",
    "The Shadow Rising",
    "The Fires of Heaven",
)

MAIN_CHARACTERS = frozenset(
    {"Rand al'Thor", "Matrim Cauthon", "Perrin Aybara", "Egwene al'Vere", "Nynaeve al'Meara"}
)

STORY_CONTENT = "This is a sample story about the adventures in the world of the Wheel of Time."
DEFAULT_BIO = "A character from the Wheel of Time series"
RECIPIENTS_PER_STORY = 5


@dataclass
class SeedSummary:
    """Counts of what a seeding run created."""

    characters: int = 0
    relationships: int = 0
    stories: int = 0
    shares: int = 0
    skipped_associations: list[str] = field(default_factory=list)


# =============================================================================
# DemoSeeder Class
# =============================================================================


class DemoSeeder:
    """Seeds the graph with sample characters, relationships and stories.

    Usage:
        seeder = DemoSeeder(repository)
        summary = await seeder.seed(clear=True)
    """

    def __init__(self, repository: GraphRepository, rng: random.Random | None = None) -> None:
        """Initialize seeder.

        Args:
            repository: Graph repository to write through
            rng: Random source for picking share recipients
        """
        self._repository = repository
        self._rng = rng or random.Random()

    async def seed(
        self,
        characters: Iterable[CharacterData] | None = None,
        clear: bool = False,
    ) -> SeedSummary:
        """Create the demo graph.

        Args:
            characters: Cast to seed (default: SAMPLE_CHARACTERS)
            clear: Remove every node and edge first

        Returns:
            SeedSummary with creation counts
        """
        cast = list(characters if characters is not None else SAMPLE_CHARACTERS)
        summary = SeedSummary()
        logger.info("Starting demo seeding with %d characters", len(cast))

        if clear:
            await self._repository.clear_all()

        users: dict[str, User] = {}
        for character in cast:
            users[character.name.lower()] = await self._repository.create_user(
                user_id=new_identifier(),
                name=character.name,
                bio=character.description or DEFAULT_BIO,
                affiliation=character.affiliation,
                nationality=character.nationality,
                gender=character.gender,
            )
            summary.characters += 1
        logger.info("Created %d character nodes", summary.characters)

        for character in cast:
            user = users[character.name.lower()]
            for association in character.associations:
                associated = users.get(association.lower())
                if associated is None or associated.id == user.id:
                    summary.skipped_associations.append(association)
                    continue
                await self._repository.create_connection(user.id, associated.id, RelationshipKind.KNOWS)
                summary.relationships += 1
        logger.info("Created %d character relationships", summary.relationships)

        everyone = list(users.values())
        authors = [user for user in everyone if user.name in MAIN_CHARACTERS] or everyone[:5]
        if not authors:
            return summary

        for index, title in enumerate(STORY_TITLES):
            author = authors[index % len(authors)]
            story = await self._repository.create_story(
                story_id=new_identifier(),
                title=title,
                content=STORY_CONTENT,
                author_id=author.id,
            )
            summary.stories += 1

            others = [user for user in everyone if user.id != author.id]
            for recipient in self._rng.sample(others, min(RECIPIENTS_PER_STORY, len(others))):
                await self._repository.record_share(story.id, author.id, recipient.id)
                summary.shares += 1
        logger.info("Created %d stories with %d shares", summary.stories, summary.shares)

        return summary
