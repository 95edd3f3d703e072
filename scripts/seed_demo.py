#!/usr/bin/env python3
"""
Seed the StoryBridge graph with demo data.

Seeds the Neo4j graph database with:
- User nodes for sample characters
- KNOWS relationships from character associations
- Story nodes authored by the main characters
- SHARED / SHARED_WITH edges to random recipients

Usage:
    python scripts/seed_demo.py              # Sample cast, keep existing data
    python scripts/seed_demo.py --clear      # Clear the graph first
    python scripts/seed_demo.py --json /path/to/characters.json
    python scripts/seed_demo.py --seed 42    # Reproducible share recipients

Environment Variables:
    NEO4J_URI: Neo4j connection URI (default: bolt://localhost:7687)
    NEO4J_USER: Neo4j username (default: neo4j)
    NEO4J_PASSWORD: Neo4j password
"""

import argparse
import asyncio
import json
import random
import sys
from pathlib import Path

from storybridge.core.config import get_settings
from storybridge.graph.exceptions import Neo4jConnectionError
from storybridge.graph.neo4j_client import Neo4jClient
from storybridge.graph.repository import GraphRepository
from storybridge.graph.schema import SchemaManager
from storybridge.services.seeding import SAMPLE_CHARACTERS, CharacterData, DemoSeeder


def load_characters_from_json(json_path: Path) -> list[CharacterData]:
    """Load a cast from a JSON list (or {"characters": [...]})."""
    with open(json_path, "r", encoding="utf-8") as f:
        data = json.load(f)

    if isinstance(data, dict):
        data = data.get("characters", [])
    return [CharacterData.from_dict(entry) for entry in data]


async def seed_database(
    characters: list[CharacterData],
    clear: bool = False,
    seed: int | None = None,
) -> None:
    """Connect, initialise the schema and seed the graph."""
    settings = get_settings()
    print(f"\nConnecting to Neo4j at {settings.neo4j_uri}...")

    try:
        async with Neo4jClient(settings=settings) as client:
            print("✓ Connected to Neo4j")
            await SchemaManager(client).init_schema()

            seeder = DemoSeeder(GraphRepository(client), rng=random.Random(seed))
            summary = await seeder.seed(characters=characters, clear=clear)
    except Neo4jConnectionError as e:
        print(f"\n✗ Failed to connect to Neo4j: {e}")
        print("  Make sure Neo4j is running on", settings.neo4j_uri)
        sys.exit(1)

    print("\n" + "=" * 50)
    print("SEEDING SUMMARY")
    print("=" * 50)
    print(f"Characters:    {summary.characters}")
    print(f"Relationships: {summary.relationships}")
    print(f"Stories:       {summary.stories}")
    print(f"Shares:        {summary.shares}")
    if summary.skipped_associations:
        print(f"Skipped associations: {', '.join(sorted(set(summary.skipped_associations)))}")
    print("=" * 50)
    print("\n✓ Seeding complete!")


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Seed the StoryBridge graph with demo data",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--json",
        type=Path,
        help="Path to a JSON file with the characters to seed",
    )
    parser.add_argument(
        "--clear",
        action="store_true",
        help="Remove every node and relationship before seeding",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for share recipients",
    )

    args = parser.parse_args()

    if args.json:
        if not args.json.exists():
            print(f"✗ JSON file not found: {args.json}")
            sys.exit(1)
        characters = load_characters_from_json(args.json)
        print(f"Loaded {len(characters)} characters from {args.json}")
    else:
        characters = list(SAMPLE_CHARACTERS)
        print("No input specified, using sample characters...")

    asyncio.run(seed_database(characters, clear=args.clear, seed=args.seed))


if __name__ == "__main__":
    main()
