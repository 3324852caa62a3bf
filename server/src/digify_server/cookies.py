"""Writing attribution state back to the browser."""

from starlette.responses import Response

from digify.sessions import SESSION_COOKIE, SESSION_ID_COOKIE
from digify.tracker import ATTRIBUTION_COOKIE, NavigationOutcome, TrackingOutcome


def set_attribution_cookie(response: Response, outcome: NavigationOutcome, secure: bool = True) -> None:
    """Write the `_digify` cookie.

    Readable by client scripts. Without persistence consent it is a session
    cookie (no Max-Age); with consent it lives for ``outcome.attribution_max_age``.
    """
    response.set_cookie(
        ATTRIBUTION_COOKIE,
        outcome.attribution_cookie,
        max_age=outcome.attribution_max_age,
        path="/",
        secure=secure,
        httponly=False,
        samesite="lax",
    )


def set_tracking_cookies(response: Response, outcome: TrackingOutcome, secure: bool = True) -> None:
    """Write the session cookies, the attribution cookie and the debug headers."""
    response.set_cookie(
        SESSION_COOKIE,
        outcome.session_cookie,
        max_age=outcome.session_max_age,
        path="/",
        secure=secure,
        httponly=True,
        samesite="lax",
    )
    # Bare sid for client scripts binding visit state to the session
    response.set_cookie(
        SESSION_ID_COOKIE,
        outcome.session.sid or "",
        max_age=outcome.session_max_age,
        path="/",
        secure=secure,
        httponly=False,
        samesite="lax",
    )
    set_attribution_cookie(response, outcome, secure=secure)

    for name, value in outcome.headers.items():
        response.headers[name] = value
