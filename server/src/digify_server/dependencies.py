"""Request-scoped dependencies."""

from typing import Annotated

from fastapi import Depends, Request

from digify import Tracker


def get_tracker(request: Request) -> Tracker:
    """Get the attribution tracker from app state."""
    return request.app.state.tracker


TrackerDep = Annotated[Tracker, Depends(get_tracker)]
