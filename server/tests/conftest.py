"""Pytest fixtures for Digify Attribution Server tests."""

from collections.abc import AsyncIterator
from datetime import UTC, datetime, timedelta
from http.cookies import Morsel, SimpleCookie
from itertools import count

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient, Response

from digify import Tracker
from digify_server.config import settings
from digify_server.main import app

T0 = datetime(2025, 3, 1, 12, 0, 0, tzinfo=UTC)


class FakeClock:
    """Settable clock for the tracker under test."""

    def __init__(self, start: datetime = T0) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


def set_cookies(response: Response) -> dict[str, Morsel]:
    """Parse the Set-Cookie headers of a response by cookie name."""
    jar: SimpleCookie = SimpleCookie()
    for header in response.headers.get_list("set-cookie"):
        jar.load(header)
    return dict(jar)


@pytest.fixture
def clock() -> FakeClock:
    """Clock starting at T0."""
    return FakeClock()


@pytest.fixture
def tracker(clock: FakeClock) -> Tracker:
    """Tracker with a fake clock and sequential ids (id-1, id-2, ...)."""
    counter = count(1)
    return Tracker(clock=clock, id_factory=lambda: f"id-{next(counter)}")


@pytest.fixture
def email_disabled(monkeypatch: pytest.MonkeyPatch) -> None:
    """Run with contact email delivery switched off."""
    monkeypatch.setattr(settings, "resend_api_key", None)


@pytest.fixture
def email_enabled(monkeypatch: pytest.MonkeyPatch) -> None:
    """Run with contact email delivery configured."""
    monkeypatch.setattr(settings, "resend_api_key", "re_test_key")
    monkeypatch.setattr(settings, "contact_to_email", "sales@example.com")
    monkeypatch.setattr(settings, "contact_from_email", "site@example.com")


@pytest_asyncio.fixture
async def client(tracker: Tracker) -> AsyncIterator[AsyncClient]:
    """Create an async HTTP client for testing.

    HTTPS base URL so Secure cookies round-trip through the client jar.
    """
    previous = app.state.tracker
    app.state.tracker = tracker

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="https://example.com",
    ) as client:
        yield client

    app.state.tracker = previous


@pytest.fixture
def navigation_headers() -> dict[str, str]:
    """Fetch metadata sent by a browser for a top-level navigation."""
    return {"sec-fetch-dest": "document", "sec-fetch-mode": "navigate", "sec-fetch-user": "?1"}


@pytest.fixture
def parse_cookies():
    """Set-Cookie parser, by cookie name."""
    return set_cookies
