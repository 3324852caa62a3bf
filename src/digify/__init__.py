"""
Digify - cookie-carried marketing attribution.

Digify attributes website visits to marketing channels and tracks
per-session engagement using nothing but request metadata and cookies the
browser round-trips. There is no server-side store: every request is a pure
transform of the previous cookie state.

Example:
    >>> from digify import Tracker, TrackedRequest
    >>> tracker = Tracker()
    >>> outcome = tracker.track_request(
    ...     TrackedRequest(
    ...         method="GET",
    ...         url="https://example.com/pricing?gclid=abc",
    ...         headers={"sec-fetch-dest": "document", "sec-fetch-mode": "navigate"},
    ...     )
    ... )
    >>> outcome.record.touches[-1].ch
    'paid'
"""

from digify.classifier import classify
from digify.codec import decode, encode, read_cookie_json
from digify.config import DEFAULT_CONFIG, TrackingConfig
from digify.consent import attribution_max_age, read_consent
from digify.filters import is_trackable_request
from digify.leads import lead_attribution, sanitize_attribution
from digify.schema import (
    AttributionRecord,
    # Type aliases
    Channel,
    Classification,
    ConsentState,
    LeadAttribution,
    SessionRecord,
    # Models
    Touch,
)
from digify.sessions import resolve_session
from digify.touches import append_or_merge, mirror_live_state
from digify.tracker import NavigationOutcome, TrackedRequest, Tracker, TrackingOutcome
from digify.visits import tick

__all__ = [
    # Tracker
    "Tracker",
    "TrackedRequest",
    "TrackingOutcome",
    "NavigationOutcome",
    # Configuration
    "TrackingConfig",
    "DEFAULT_CONFIG",
    # Components
    "encode",
    "decode",
    "read_cookie_json",
    "read_consent",
    "attribution_max_age",
    "resolve_session",
    "is_trackable_request",
    "classify",
    "tick",
    "append_or_merge",
    "mirror_live_state",
    "lead_attribution",
    "sanitize_attribution",
    # Type aliases
    "Channel",
    # Models
    "Touch",
    "AttributionRecord",
    "SessionRecord",
    "ConsentState",
    "Classification",
    "LeadAttribution",
]

__version__ = "0.1.0"
