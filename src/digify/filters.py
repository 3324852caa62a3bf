"""Request filter: decide whether a request is a real document navigation."""

from collections.abc import Mapping

from digify.config import DEFAULT_CONFIG, TrackingConfig


def _header(headers: Mapping[str, str], name: str) -> str:
    value = headers.get(name)
    if value is None:
        # Plain dicts are not case-insensitive
        for key, candidate in headers.items():
            if key.lower() == name:
                return candidate
        return ""
    return value


def is_trackable_path(path: str, config: TrackingConfig = DEFAULT_CONFIG) -> bool:
    """Whether a path can be content (not a static asset or an ignored endpoint)."""
    if any(path.startswith(prefix) for prefix in config.ignore_path_prefixes):
        return False
    if path in config.ignore_paths:
        return False
    return not path.endswith(config.asset_extensions)


def is_document_navigation(headers: Mapping[str, str]) -> bool:
    """Whether fetch metadata marks the request as a navigation loading a document."""
    if _header(headers, "sec-fetch-dest") != "document":
        return False
    return _header(headers, "sec-fetch-mode") == "navigate" or _header(headers, "sec-fetch-user") == "?1"


def is_prefetch(headers: Mapping[str, str]) -> bool:
    """Whether the request is a prefetch or prerender probe."""
    if _header(headers, "purpose").lower() == "prefetch":
        return True
    if _header(headers, "x-middleware-prefetch") == "1":
        return True
    sec_purpose = _header(headers, "sec-purpose").lower()
    return "prefetch" in sec_purpose or "prerender" in sec_purpose


def is_trackable_request(
    method: str,
    path: str,
    headers: Mapping[str, str],
    config: TrackingConfig = DEFAULT_CONFIG,
) -> bool:
    """Whether a request should produce attribution side effects.

    Only GET navigations that load a content document qualify; prefetches,
    sub-resource fetches and asset paths never do.
    """
    if method.upper() != "GET":
        return False
    if not is_trackable_path(path, config):
        return False
    if not is_document_navigation(headers):
        return False
    return not is_prefetch(headers)
