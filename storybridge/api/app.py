"""
FastAPI application factory for StoryBridge.

Creates and configures the FastAPI application with routes, middleware,
the domain error handler and dependency injection.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from storybridge import __version__
from storybridge.api.dependencies import ServiceContainer, build_services
from storybridge.core.config import Settings, get_settings
from storybridge.core.exceptions import StoryBridgeError, ValidationError
from storybridge.core.logging import correlation_scope
from storybridge.graph.neo4j_client import Neo4jClient

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


async def handle_domain_error(request: Request, exc: StoryBridgeError) -> JSONResponse:
    """Render a StoryBridgeError as {"error": kind, "message": text}."""
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.info("%s %s rejected: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.kind, "message": exc.message},
    )


async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render malformed query/body input as a 400 validation error."""
    details = "; ".join(
        f"{'.'.join(str(part) for part in error.get('loc', ()))}: {error.get('msg', 'invalid')}"
        for error in exc.errors()
    )
    logger.info("%s %s rejected: %s", request.method, request.url.path, details)
    return JSONResponse(
        status_code=ValidationError.status_code,
        content={"error": ValidationError.kind, "message": details or "Invalid request"},
    )


async def correlation_id_middleware(
    request: Request,
    call_next: Callable[[Request], Awaitable[Response]],
) -> Response:
    """Bind X-Request-ID (or a fresh one) to the request's log records."""
    correlation_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
    with correlation_scope(correlation_id):
        response = await call_next(request)
    response.headers[REQUEST_ID_HEADER] = correlation_id
    return response


def create_app(
    settings: Settings | None = None,
    services: ServiceContainer | None = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Optional settings (default: get_settings())
        services: Optional pre-configured service container; when given,
                  the lifespan does not connect to Neo4j

    Returns:
        Configured FastAPI application
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if app.state.services is not None:
            yield
            return

        client = Neo4jClient(settings=settings)
        await client.connect()
        try:
            container = build_services(client, settings)
            if settings.init_schema_on_startup:
                await container.schema.init_schema()
            app.state.services = container
            logger.info("StoryBridge API started")
            yield
        finally:
            app.state.services = None
            await client.close()

    app = FastAPI(
        title="StoryBridge",
        description="Social graph of stories, shares and connection distance",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.middleware("http")(correlation_id_middleware)
    app.add_exception_handler(StoryBridgeError, handle_domain_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)

    # Store services in app state for dependency injection
    app.state.services = services

    # Import routes here to avoid circular imports
    from storybridge.api.routes import get_services, router

    # Override the dependency to return our services
    def _get_services() -> ServiceContainer:
        return app.state.services

    app.dependency_overrides[get_services] = _get_services

    app.include_router(router)

    return app
