"""HTTP API for StoryBridge."""

from storybridge.api.app import create_app
from storybridge.api.dependencies import ServiceContainer, build_services

__all__ = ["ServiceContainer", "build_services", "create_app"]
