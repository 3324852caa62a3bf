"""
Traffic classifier.

Derives channel/source/medium for a navigation from its URL and referrer.
Decision order, first match wins:

1. Paid: a click identifier is present in the query string.
2. Direct: no referrer, or the referrer is this site.
3. Organic search: the referrer is a known search engine.
4. Organic social: the referrer is a known social platform.
5. Referral: anything else.

UTM parameters never change the classification; they are captured as
annotations on the touch.
"""

import re
from functools import lru_cache
from urllib.parse import parse_qs, urlsplit

from digify.config import DEFAULT_CONFIG, TrackingConfig
from digify.schema import Classification

DIRECT = Classification(channel="direct", source="(direct)", medium="(none)")


@lru_cache(maxsize=32)
def _compile(patterns: tuple[str, ...]) -> tuple[re.Pattern[str], ...]:
    return tuple(re.compile(pattern, re.IGNORECASE) for pattern in patterns)


def strip_www(host: str) -> str:
    """Lowercase a host and drop a leading ``www.``."""
    host = host.lower()
    return host[4:] if host.startswith("www.") else host


def query_params(url: str) -> dict[str, list[str]]:
    """Query parameters of a URL, blank values included."""
    return parse_qs(urlsplit(url).query, keep_blank_values=True)


def _first(params: dict[str, list[str]], name: str) -> str:
    values = params.get(name)
    return values[0] if values else ""


def ad_platform(params: dict[str, list[str]], config: TrackingConfig = DEFAULT_CONFIG) -> str | None:
    """Name the ad platform whose click identifier carries a value, if any."""
    for platform, identifiers in config.click_id_platforms:
        if any(_first(params, identifier) for identifier in identifiers):
            return platform
    return None


def referrer_host(referrer: str | None) -> str | None:
    """Hostname of a referrer URL, or None when there is no usable referrer."""
    if not referrer:
        return None
    try:
        return urlsplit(referrer.strip()).hostname or None
    except ValueError:
        return None


def classify(
    url: str,
    referrer: str | None,
    self_host: str,
    config: TrackingConfig = DEFAULT_CONFIG,
) -> Classification:
    """Classify a navigation into channel, source and medium.

    Args:
        url: Full URL of the requested page.
        referrer: Referer header value, if any.
        self_host: Host serving the page; referrers from it count as direct.
        config: Tracking configuration supplying identifiers and domains.

    Returns:
        The Classification for the navigation.
    """
    params = query_params(url)
    if any(identifier in params for identifier in config.click_ids):
        return Classification(
            channel="paid",
            source=ad_platform(params, config) or config.fallback_ad_platform,
            medium="cpc",
        )

    ref_host = referrer_host(referrer)
    if ref_host is None or strip_www(ref_host) == strip_www(self_host):
        return DIRECT

    host = strip_www(ref_host)
    if any(pattern.search(ref_host) for pattern in _compile(config.search_engines)):
        return Classification(channel="organic", source=host.split(".")[0], medium="organic")

    for needle, platform in config.social_platforms:
        if needle in host:
            return Classification(channel="organic", source=platform, medium="social")

    return Classification(channel="referral", source=host, medium="referral")


def extract_utm(url: str, config: TrackingConfig = DEFAULT_CONFIG) -> dict[str, str]:
    """UTM parameters with a value, keyed by their touch field name."""
    params = query_params(url)
    return {
        field: value
        for param, field in config.utm_params
        if (value := _first(params, param))
    }


def extract_click_ids(url: str, config: TrackingConfig = DEFAULT_CONFIG) -> dict[str, str]:
    """Click identifiers with a value, keyed by parameter name."""
    params = query_params(url)
    return {
        identifier: value
        for identifier in config.click_ids
        if (value := _first(params, identifier))
    }
