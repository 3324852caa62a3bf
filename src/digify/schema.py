"""
Digify Attribution Schema

Data types carried in the attribution cookies. Field names (and aliases)
are the wire format: the `_digify` cookie holds an AttributionRecord, the
`_digify_session` cookie holds a SessionRecord.

Loading never fails: malformed fields fall back to their defaults and
input that is not a mapping yields a fresh record.
"""

import logging
import math
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

# =============================================================================
# TYPE DEFINITIONS
# =============================================================================

Channel = Literal["paid", "organic", "direct", "referral"]
"""
Top-level traffic buckets.

- paid: Landed with an ad-platform click identifier
- organic: Referred by a search engine or a social platform
- direct: No referrer, or an internal referrer
- referral: Any other referring site
"""


# =============================================================================
# COOKIE MODELS
# =============================================================================

class Touch(BaseModel):
    """
    One attributed navigation.

    Touches are frozen. The two live-mirror fields (total_time_sec and
    page_paths) of the newest touch are refreshed by the touch ledger,
    which swaps in an updated copy rather than editing history.

    Attributes:
        ts: When the navigation happened (ISO-8601 UTC).
        lp: Landing path, without the query string.
        src: Traffic source (e.g. "google", "(direct)", "news.example.org").
        med: Traffic medium (e.g. "cpc", "organic", "referral").
        ch: Channel (see Channel).
        total_time_sec: Time on site for the visit, in whole seconds.
        page_paths: Pages visited during the visit, oldest first.
        utm_src: utm_source, if present.
        utm_med: utm_medium, if present.
        utm_cmp: utm_campaign, if present.
        utm_term: utm_term, if present.
        utm_cnt: utm_content, if present.

    Click identifiers are stored under their query parameter name (gclid,
    fbclid, ...). Unknown keys are kept so configured identifiers outside the
    defaults survive a round trip.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    ts: str
    lp: str
    src: str
    med: str
    ch: str
    total_time_sec: int = 0
    page_paths: list[str] = Field(default_factory=list)

    # UTM annotations
    utm_src: str | None = None
    utm_med: str | None = None
    utm_cmp: str | None = None
    utm_term: str | None = None
    utm_cnt: str | None = None

    # Click identifiers
    gclid: str | None = None
    wbraid: str | None = None
    gbraid: str | None = None
    msclkid: str | None = None
    fbclid: str | None = None
    ttclid: str | None = None
    uetmsclkid: str | None = None
    li_fat_id: str | None = None
    twclid: str | None = None

    @property
    def attributes(self) -> tuple[str, str, str, str]:
        """The (lp, src, med, ch) tuple used for redirect de-duplication."""
        return (self.lp, self.src, self.med, self.ch)


class AttributionRecord(BaseModel):
    """
    State carried in the `_digify` cookie.

    Attributes:
        visitor_id: Stable pseudo-identifier, minted once.
        touches: Attribution trail, oldest first.
        visit_total_ms: Engaged time for the current session's visit.
        visit_last_ts: Timestamp of the last time-accumulation tick.
        visit_pages: Pages visited during the current visit.
        visit_bound_sid: Session id the visit fields belong to
            (serialized as `_visit_bound_sid`).
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    visitor_id: str | None = None
    touches: list[Touch] = Field(default_factory=list)
    visit_bound_sid: str | None = Field(default=None, alias="_visit_bound_sid")
    visit_last_ts: str | None = None
    visit_total_ms: int = 0
    visit_pages: list[str] = Field(default_factory=list)

    @field_validator("visitor_id", "visit_bound_sid", "visit_last_ts", mode="before")
    @classmethod
    def _string_or_none(cls, value: Any) -> str | None:
        return value if isinstance(value, str) and value else None

    @field_validator("visit_total_ms", mode="before")
    @classmethod
    def _non_negative_millis(cls, value: Any) -> int:
        if isinstance(value, bool) or not isinstance(value, int | float):
            return 0
        if not math.isfinite(value) or value < 0:
            return 0
        return int(value)

    @field_validator("visit_pages", mode="before")
    @classmethod
    def _string_list(cls, value: Any) -> list[str]:
        if not isinstance(value, list):
            return []
        return [page for page in value if isinstance(page, str)]

    @field_validator("touches", mode="before")
    @classmethod
    def _valid_touches(cls, value: Any) -> list[Touch]:
        if not isinstance(value, list):
            return []
        touches = []
        for item in value:
            try:
                touches.append(Touch.model_validate(item))
            except ValidationError:
                logger.debug("Dropping malformed touch from attribution cookie")
        return touches

    @classmethod
    def from_cookie(cls, data: Any) -> "AttributionRecord":
        """Build a record from decoded cookie data, falling back to a fresh record."""
        if not isinstance(data, dict):
            return cls()
        try:
            return cls.model_validate(data)
        except ValidationError:
            logger.debug("Attribution cookie did not validate, starting fresh")
            return cls()

    def to_cookie(self) -> dict:
        """Wire form: aliased keys, absent values omitted."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class SessionRecord(BaseModel):
    """
    State carried in the `_digify_session` cookie.

    Attributes:
        sid: Opaque session identifier.
        started_at: Session start (serialized as `startedAt`).
        last_at: Last qualifying request (serialized as `lastAt`).
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    sid: str | None = None
    started_at: str | None = Field(default=None, alias="startedAt")
    last_at: str | None = Field(default=None, alias="lastAt")

    @field_validator("sid", "started_at", "last_at", mode="before")
    @classmethod
    def _string_or_none(cls, value: Any) -> str | None:
        return value if isinstance(value, str) and value else None

    @classmethod
    def from_cookie(cls, data: Any) -> "SessionRecord":
        """Build a record from decoded cookie data, falling back to an empty record."""
        if not isinstance(data, dict):
            return cls()
        try:
            return cls.model_validate(data)
        except ValidationError:
            logger.debug("Session cookie did not validate, starting fresh")
            return cls()

    def to_cookie(self) -> dict:
        """Wire form: aliased keys."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# =============================================================================
# DERIVED VALUES
# =============================================================================

class ConsentState(BaseModel):
    """Consent reduced to the two decisions the tracker cares about."""

    model_config = ConfigDict(frozen=True)

    analytics_allowed: bool = False
    ads_allowed: bool = False

    @property
    def persist(self) -> bool:
        """Whether the attribution cookie may outlive the browser session."""
        return self.analytics_allowed or self.ads_allowed


class Classification(BaseModel):
    """Traffic source attributes for a navigation."""

    model_config = ConfigDict(frozen=True)

    channel: Channel
    source: str
    medium: str


class LeadAttribution(BaseModel):
    """
    Flattened attribution attached to a lead submission.

    Attributes:
        digify_visitor_id: Visitor id from the attribution record.
        touches_json: JSON array of at most ten touches.
        latest_channel: Channel of the newest touch.
        latest_source: Source of the newest touch.
        latest_medium: Medium of the newest touch.
        latest_total_time_sec: Time on site recorded on the newest touch.
    """

    digify_visitor_id: str | None = None
    touches_json: str = "[]"
    latest_channel: str | None = None
    latest_source: str | None = None
    latest_medium: str | None = None
    latest_total_time_sec: int | None = None
