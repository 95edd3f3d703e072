"""
Use-case services composed from the graph layer:
- StoryService: story listing, detail and creation
- ShareScorer: share recording with path-reduction reward
- NetworkService: network slice, path lookup, character connections
- DemoSeeder: sample data population
"""

from storybridge.services.network import (
    ByIdentifier,
    ByName,
    CharacterConnections,
    NetworkService,
    PathLookup,
)
from storybridge.services.scoring import ShareOutcome, ShareScorer, compute_reward
from storybridge.services.seeding import DemoSeeder, SeedSummary
from storybridge.services.stories import StoryService

__all__ = [
    "ByIdentifier",
    "ByName",
    "CharacterConnections",
    "DemoSeeder",
    "NetworkService",
    "PathLookup",
    "SeedSummary",
    "ShareOutcome",
    "ShareScorer",
    "StoryService",
    "compute_reward",
]
