"""FastAPI dependency injection providers."""

from typing import Any

from fastapi import Request


def get_coordinator(request: Request) -> Any:
    """Retrieve the engine's ThreadCoordinator from app state."""
    return request.app.state.coordinator
