"""Consent gate: reduce an external consent record to storage decisions."""

from collections.abc import Mapping
from typing import Any

from digify.codec import read_cookie_json
from digify.config import DEFAULT_CONFIG, TrackingConfig
from digify.schema import ConsentState


def read_consent(raw: Any, config: TrackingConfig = DEFAULT_CONFIG) -> ConsentState:
    """Reduce a consent record to analytics/ads decisions.

    Args:
        raw: The `consent_state` cookie value (encoded, raw or percent-encoded
            JSON), an already-parsed mapping, or None.
        config: Tracking configuration naming the consent keys.

    Returns:
        ConsentState with nothing granted unless the record says so.
    """
    if isinstance(raw, Mapping):
        record = raw
    else:
        record = read_cookie_json(raw) if isinstance(raw, str) else None
    if not isinstance(record, Mapping):
        return ConsentState()

    def granted(key: str) -> bool:
        value = record.get(key)
        return value is True or (isinstance(value, str) and value in config.consent_granted_values)

    return ConsentState(
        analytics_allowed=any(granted(key) for key in config.analytics_consent_keys),
        ads_allowed=any(granted(key) for key in config.ads_consent_keys),
    )


def attribution_max_age(consent: ConsentState, config: TrackingConfig = DEFAULT_CONFIG) -> int | None:
    """Lifetime in seconds for the attribution cookie, or None for a session cookie."""
    if not consent.persist:
        return None
    return int(config.persist_max_age.total_seconds())
