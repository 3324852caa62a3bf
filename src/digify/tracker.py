"""
Per-request attribution transform.

The Tracker folds the session manager, request filter, classifier, visit
accumulator, touch ledger and consent gate into one pure function of the
incoming request's URL, headers and cookies. It holds no state between
calls; everything it knows arrives in cookies and leaves in a
TrackingOutcome for the host framework to write back.
"""

import logging
from collections.abc import Callable, Mapping
from datetime import datetime
from urllib.parse import urlsplit

from pydantic import BaseModel, Field, field_validator

from digify._time import parse_ts, utc_now
from digify.classifier import classify
from digify.codec import encode, read_cookie_json
from digify.config import DEFAULT_CONFIG, TrackingConfig
from digify.consent import attribution_max_age, read_consent
from digify.filters import is_trackable_request
from digify.schema import AttributionRecord, ConsentState, SessionRecord
from digify.sessions import SESSION_COOKIE, SESSION_ID_COOKIE, new_session_id, resolve_session, session_max_age
from digify.touches import append_or_merge, build_touch, mirror_live_state
from digify.visits import tick

logger = logging.getLogger(__name__)

ATTRIBUTION_COOKIE = "_digify"
CONSENT_COOKIE = "consent_state"

VISITOR_HEADER = "x-dfy-visitor"
SESSION_HEADER = "x-dfy-session"


# =============================================================================
# Inputs and outputs
# =============================================================================


class TrackedRequest(BaseModel):
    """The parts of an HTTP request the tracker reads."""

    method: str
    url: str
    headers: dict[str, str] = Field(default_factory=dict)
    cookies: dict[str, str] = Field(default_factory=dict)

    @field_validator("headers", mode="before")
    @classmethod
    def _lowercase_names(cls, value: Mapping[str, str]) -> dict[str, str]:
        return {name.lower(): header for name, header in dict(value).items()}

    @property
    def path(self) -> str:
        return urlsplit(self.url).path or "/"

    @property
    def host(self) -> str:
        return urlsplit(self.url).hostname or ""

    @property
    def referrer(self) -> str | None:
        return self.headers.get("referer")


class NavigationOutcome(BaseModel):
    """Result of a SPA navigation beacon: the attribution cookie to write back."""

    record: AttributionRecord
    consent: ConsentState
    attribution_max_age: int | None = None

    @property
    def attribution_cookie(self) -> str:
        return encode(self.record.to_cookie())


class TrackingOutcome(NavigationOutcome):
    """Result of tracking a document request: session plus attribution state.

    Attributes:
        session: Session record to write back (sliding expiry).
        session_max_age: Lifetime of the session cookies in seconds.
        tracked: Whether the request qualified as a trackable navigation.
    """

    session: SessionRecord
    session_max_age: int
    tracked: bool = False

    @property
    def session_cookie(self) -> str:
        return encode(self.session.to_cookie())

    @property
    def headers(self) -> dict[str, str]:
        return {
            VISITOR_HEADER: self.record.visitor_id or "",
            SESSION_HEADER: self.session.sid or "",
        }


# =============================================================================
# Tracker
# =============================================================================


class Tracker:
    """
    Stateless attribution tracker.

    Usage:
        tracker = Tracker()
        outcome = tracker.track_request(
            TrackedRequest(method="GET", url=url, headers=headers, cookies=cookies)
        )
        if outcome is not None:
            ...  # write outcome.session_cookie, outcome.attribution_cookie, ...

    Args:
        config: Tracking configuration.
        clock: Returns the current UTC time.
        id_factory: Mints visitor and session identifiers.
    """

    def __init__(
        self,
        config: TrackingConfig = DEFAULT_CONFIG,
        clock: Callable[[], datetime] = utc_now,
        id_factory: Callable[[], str] = new_session_id,
    ) -> None:
        self.config = config
        self.clock = clock
        self.id_factory = id_factory

    def load_record(self, cookies: Mapping[str, str]) -> AttributionRecord:
        """Attribution record from the request cookies, fresh when absent or corrupt."""
        return AttributionRecord.from_cookie(read_cookie_json(cookies.get(ATTRIBUTION_COOKIE)))

    def load_session(self, cookies: Mapping[str, str]) -> SessionRecord:
        """Session record from the request cookies, empty when absent or corrupt."""
        return SessionRecord.from_cookie(read_cookie_json(cookies.get(SESSION_COOKIE)))

    def track_request(self, request: TrackedRequest) -> TrackingOutcome | None:
        """Apply one request to the cookie-carried state.

        Returns None for non-GET requests, which must leave every cookie
        alone. For GET requests the session is always renewed; the visit and
        touch ledger only move for trackable navigations.
        """
        if request.method.upper() != "GET":
            return None

        now = self.clock()
        session = resolve_session(self.load_session(request.cookies), now, self.config, self.id_factory)
        record = self.load_record(request.cookies)

        tracked = is_trackable_request(request.method, request.path, request.headers, self.config)
        if tracked:
            classification = classify(request.url, request.referrer, request.host, self.config)
            record = tick(record, session.sid, now, request.path, self.config)
            touch = build_touch(now, request.url, classification, record, self.config)
            record = record.model_copy(
                update={"touches": append_or_merge(record.touches, touch, self.config)}
            )
            logger.debug(
                "Tracked %s as %s/%s/%s",
                request.path,
                classification.channel,
                classification.source,
                classification.medium,
            )

        if not record.visitor_id:
            record = record.model_copy(update={"visitor_id": self.id_factory()})

        consent = read_consent(request.cookies.get(CONSENT_COOKIE), self.config)
        return TrackingOutcome(
            record=record,
            consent=consent,
            attribution_max_age=attribution_max_age(consent, self.config),
            session=session,
            session_max_age=session_max_age(self.config),
            tracked=tracked,
        )

    def track_navigation(
        self,
        pathname: str,
        ts: str | None,
        cookies: Mapping[str, str],
    ) -> NavigationOutcome:
        """Apply a client-side navigation (no document load) to the visit state.

        Args:
            pathname: Path the client navigated to.
            ts: Client timestamp of the navigation; the clock is used when
                it is missing or unparsable.
            cookies: Request cookies.

        Returns:
            NavigationOutcome with the updated attribution record.
        """
        event_ts = parse_ts(ts) or self.clock()
        record = self.load_record(cookies)
        record = tick(record, cookies.get(SESSION_ID_COOKIE) or None, event_ts, pathname, self.config)
        record = record.model_copy(update={"touches": mirror_live_state(record.touches, record)})

        consent = read_consent(cookies.get(CONSENT_COOKIE), self.config)
        return NavigationOutcome(
            record=record,
            consent=consent,
            attribution_max_age=attribution_max_age(consent, self.config),
        )
