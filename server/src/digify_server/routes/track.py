"""Navigation beacon route - visit tracking for client-side navigations."""

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from digify_server.config import settings
from digify_server.cookies import set_attribution_cookie
from digify_server.dependencies import TrackerDep
from digify_server.models import NavigationBeacon

logger = logging.getLogger(__name__)

router = APIRouter(tags=["tracking"])


@router.post("/api/digify/track")
async def track_navigation(request: Request, tracker: TrackerDep) -> JSONResponse:
    """Advance visit time and page sequence for a navigation without a document load.

    Corrupt or missing cookies are treated as fresh state. Only the visit
    fields and the current touch's live fields change.
    """
    try:
        body = await request.json()
    except ValueError:
        return JSONResponse({"ok": False, "error": "bad request"}, status_code=400)

    try:
        beacon = NavigationBeacon.model_validate(body)
    except ValidationError:
        return JSONResponse({"ok": False, "error": "missing pathname"}, status_code=400)

    try:
        outcome = tracker.track_navigation(beacon.pathname, beacon.ts, request.cookies)
    except Exception:
        logger.exception("Navigation beacon failed for %s", beacon.pathname)
        return JSONResponse({"ok": False, "error": "bad request"}, status_code=400)

    response = JSONResponse({"ok": True})
    set_attribution_cookie(response, outcome, secure=settings.cookie_secure)
    return response
