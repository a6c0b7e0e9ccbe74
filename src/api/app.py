"""FastAPI application factory for the meter control API."""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.routes import trip
from engine.thread_coordinator import ThreadCoordinator
from settings import Settings, get_settings

logger = logging.getLogger(__name__)


def create_app(coordinator: ThreadCoordinator, settings: Settings | None = None) -> FastAPI:
    """Create FastAPI application bound to a running engine's coordinator.

    Handlers never touch the lifecycle directly; each request becomes a
    command executed on the engine thread.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Taximeter Control API",
        version="1.0.0",
        description="REST API for driving the trip meter and reading its state",
    )

    # Set immediately (not in lifespan) so it is available for testing
    app.state.coordinator = coordinator

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors.origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(trip.router, prefix="/trip", tags=["trip"])

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """Health check endpoint for monitoring."""
        return {"status": "healthy"}

    return app
