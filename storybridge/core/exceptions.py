"""
Domain error taxonomy for StoryBridge.

Every error raised by the core derives from StoryBridgeError and carries:
- kind: short machine-readable error type rendered at the HTTP boundary
- status_code: HTTP status the API layer maps the error to

Names avoid shadowing Python builtins (no bare ConnectionError/LookupError).
"""

from __future__ import annotations


class StoryBridgeError(Exception):
    """Base exception for all StoryBridge errors."""

    kind = "internal_error"
    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(StoryBridgeError):
    """Raised when required input is missing or malformed.

    Also covers rule violations on otherwise well-formed input,
    e.g. a story shared by a user with themselves.
    """

    kind = "validation"
    status_code = 400


class NotFoundError(StoryBridgeError):
    """Raised when a referenced user, story or lookup token does not resolve."""

    kind = "not_found"
    status_code = 404


class ConflictError(StoryBridgeError):
    """Raised when creating an entity whose identifier already exists."""

    kind = "conflict"
    status_code = 409


class StoreError(StoryBridgeError):
    """Raised when an underlying graph-store operation fails.

    The Neo4j client errors in storybridge.graph.exceptions subclass this,
    so store failures surface with this kind without re-wrapping.
    """

    kind = "store_error"
    status_code = 500
