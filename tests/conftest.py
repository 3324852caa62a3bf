"""Pytest fixtures for the digify core tests."""

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from itertools import count

import pytest

from digify import Tracker, TrackedRequest

T0 = datetime(2025, 3, 1, 12, 0, 0, tzinfo=UTC)


class FakeClock:
    """Settable clock for deterministic time-dependent tests."""

    def __init__(self, start: datetime = T0) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    """Clock starting at T0."""
    return FakeClock()


@pytest.fixture
def id_factory() -> Callable[[], str]:
    """Sequential identifiers: id-1, id-2, ..."""
    counter = count(1)
    return lambda: f"id-{next(counter)}"


@pytest.fixture
def tracker(clock: FakeClock, id_factory: Callable[[], str]) -> Tracker:
    """Tracker with a fake clock and predictable ids."""
    return Tracker(clock=clock, id_factory=id_factory)


@pytest.fixture
def navigation_headers() -> dict[str, str]:
    """Fetch metadata sent by a browser for a top-level navigation."""
    return {"sec-fetch-dest": "document", "sec-fetch-mode": "navigate", "sec-fetch-user": "?1"}


@pytest.fixture
def navigate(navigation_headers: dict[str, str]) -> Callable[..., TrackedRequest]:
    """Factory for document navigation requests."""

    def _navigate(
        url: str,
        cookies: dict[str, str] | None = None,
        referrer: str | None = None,
        method: str = "GET",
        headers: dict[str, str] | None = None,
    ) -> TrackedRequest:
        merged = dict(navigation_headers if headers is None else headers)
        if referrer is not None:
            merged["referer"] = referrer
        return TrackedRequest(method=method, url=url, headers=merged, cookies=cookies or {})

    return _navigate
