"""Attribution middleware: run the tracker on every request, fail open."""

import logging

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from digify import TrackedRequest, TrackingOutcome
from digify_server.cookies import set_tracking_cookies
from digify_server.dependencies import get_tracker

logger = logging.getLogger(__name__)


class AttributionMiddleware(BaseHTTPMiddleware):
    """
    Maintain session and attribution cookies on every request.

    Tracking is best effort: if computing or writing the new state fails the
    error is logged and the response goes out without tracking cookies.
    Errors raised by the downstream application are not intercepted.
    """

    def __init__(self, app: ASGIApp, secure: bool = True) -> None:
        super().__init__(app)
        self.secure = secure

    def _track(self, request: Request) -> TrackingOutcome | None:
        try:
            return get_tracker(request).track_request(
                TrackedRequest(
                    method=request.method,
                    url=str(request.url),
                    headers=dict(request.headers),
                    cookies=dict(request.cookies),
                )
            )
        except Exception:
            logger.exception("Attribution tracking failed for %s %s", request.method, request.url.path)
            return None

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        outcome = self._track(request)
        response = await call_next(request)
        if outcome is None:
            return response

        try:
            set_tracking_cookies(response, outcome, secure=self.secure)
        except Exception:
            logger.exception("Failed to write attribution cookies for %s", request.url.path)
        return response
