"""Tracking configuration.

Every list and limit the attribution pipeline consults lives here so callers
(and tests) can swap in their own domains, identifiers and thresholds.
"""

from datetime import timedelta

from pydantic import BaseModel, ConfigDict

# =============================================================================
# DEFAULTS
# =============================================================================

CLICK_IDS: tuple[str, ...] = (
    "gclid",
    "wbraid",
    "gbraid",
    "msclkid",
    "fbclid",
    "ttclid",
    "uetmsclkid",
    "li_fat_id",
    "twclid",
)

# Checked in order; the first platform with a non-empty identifier wins.
CLICK_ID_PLATFORMS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("google", ("gclid", "gbraid", "wbraid")),
    ("bing", ("msclkid", "uetmsclkid")),
    ("facebook", ("fbclid",)),
    ("tiktok", ("ttclid",)),
    ("linkedin", ("li_fat_id",)),
    ("twitter", ("twclid",)),
)

SEARCH_ENGINES: tuple[str, ...] = (
    r"(^|\.)google\.",
    r"(^|\.)bing\.",
    r"(^|\.)yahoo\.",
    r"(^|\.)duckduckgo\.",
    r"(^|\.)baidu\.",
    r"(^|\.)yandex\.",
    r"(^|\.)ecosia\.",
    r"(^|\.)ask\.",
)

SOCIAL_PLATFORMS: tuple[tuple[str, str], ...] = (
    ("facebook.com", "facebook"),
    ("twitter.com", "twitter"),
    ("x.com", "twitter"),
    ("linkedin.com", "linkedin"),
    ("tiktok.com", "tiktok"),
)

# Query parameter -> touch field
UTM_PARAMS: tuple[tuple[str, str], ...] = (
    ("utm_source", "utm_src"),
    ("utm_medium", "utm_med"),
    ("utm_campaign", "utm_cmp"),
    ("utm_term", "utm_term"),
    ("utm_content", "utm_cnt"),
)

ASSET_EXTENSIONS: tuple[str, ...] = (
    ".js", ".css", ".map", ".ico", ".png", ".jpg", ".jpeg", ".gif", ".webp",
    ".svg", ".avif", ".woff", ".woff2", ".ttf", ".otf", ".eot", ".txt",
    ".xml", ".json",
)

IGNORE_PATH_PREFIXES: tuple[str, ...] = ("/_next/", "/assets/", "/static/")

IGNORE_PATHS: tuple[str, ...] = (
    "/consent-shim.js",
    "/favicon.ico",
    "/robots.txt",
    "/sitemap.xml",
)


class TrackingConfig(BaseModel):
    """
    Tunables for the attribution pipeline.

    Attributes:
        max_touches: Maximum number of touches kept in the ledger.
        visit_page_limit: Maximum number of page paths kept for a visit.
        step_cap: Largest single time step credited to a visit.
        visit_total_cap: Ceiling for the accumulated visit time.
        dedupe_window: Touches closer than this with identical attributes merge.
        idle_timeout: Inactivity after which a new session starts.
        persist_max_age: Attribution cookie lifetime when consent allows it.
        click_ids: Query parameters that mark a click from an ad platform.
        click_id_platforms: Ordered (platform, identifiers) lookup table.
        fallback_ad_platform: Source used when no platform lookup matches.
        search_engines: Case-insensitive regexes matched against referrer hosts.
        social_platforms: Ordered (host substring, platform) pairs.
        utm_params: (query parameter, touch field) pairs captured as metadata.
        ignore_path_prefixes: Path prefixes never tracked.
        ignore_paths: Exact paths never tracked.
        asset_extensions: File extensions never tracked.
        consent_granted_values: Consent values that count as granted.
        analytics_consent_keys: Keys granting analytics storage.
        ads_consent_keys: Keys granting ad storage.
    """

    model_config = ConfigDict(frozen=True)

    max_touches: int = 10
    visit_page_limit: int = 20
    step_cap: timedelta = timedelta(minutes=30)
    visit_total_cap: timedelta = timedelta(hours=24)
    dedupe_window: timedelta = timedelta(seconds=2)
    idle_timeout: timedelta = timedelta(minutes=30)
    persist_max_age: timedelta = timedelta(days=365)

    click_ids: tuple[str, ...] = CLICK_IDS
    click_id_platforms: tuple[tuple[str, tuple[str, ...]], ...] = CLICK_ID_PLATFORMS
    fallback_ad_platform: str = "ad_platform"
    search_engines: tuple[str, ...] = SEARCH_ENGINES
    social_platforms: tuple[tuple[str, str], ...] = SOCIAL_PLATFORMS
    utm_params: tuple[tuple[str, str], ...] = UTM_PARAMS

    ignore_path_prefixes: tuple[str, ...] = IGNORE_PATH_PREFIXES
    ignore_paths: tuple[str, ...] = IGNORE_PATHS
    asset_extensions: tuple[str, ...] = ASSET_EXTENSIONS

    consent_granted_values: tuple[str, ...] = ("granted",)
    analytics_consent_keys: tuple[str, ...] = ("analytics_storage",)
    ads_consent_keys: tuple[str, ...] = ("ad_storage", "ad_user_data", "ad_personalization")


DEFAULT_CONFIG = TrackingConfig()
