"""StoryBridge: a social graph of stories, shares and connection distance."""

__version__ = "1.0.0"
