"""
Main entry point for StoryBridge.

Configures structured logging and creates the FastAPI application
instance for uvicorn:

    uvicorn storybridge.main:app --port 3000
"""

from storybridge.api.app import create_app
from storybridge.core.config import get_settings
from storybridge.core.logging import get_log_level_from_env, setup_structured_logging

settings = get_settings()

setup_structured_logging(
    log_file_path=settings.log_file_path,
    log_level=get_log_level_from_env(default=settings.log_level),
)

# Create application instance
app = create_app(settings=settings)


def run() -> None:
    """Serve the application with uvicorn on the configured port."""
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=settings.service_port)  # noqa: S104


if __name__ == "__main__":
    run()
