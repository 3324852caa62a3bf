"""
Touch ledger.

An append-only, bounded trail of touches where only the newest entry (the
current touch) may change, and only in its live-mirror fields.
"""

from datetime import datetime
from urllib.parse import urlsplit

from digify._time import format_ts, parse_ts
from digify.classifier import extract_click_ids, extract_utm
from digify.config import DEFAULT_CONFIG, TrackingConfig
from digify.schema import AttributionRecord, Classification, Touch
from digify.visits import live_state


def build_touch(
    ts: datetime,
    url: str,
    classification: Classification,
    record: AttributionRecord,
    config: TrackingConfig = DEFAULT_CONFIG,
) -> Touch:
    """Create the touch for a navigation to ``url``.

    The landing path drops the query string; time on site and page sequence
    are snapshotted from the visit state in ``record``.
    """
    total_time_sec, page_paths = live_state(record)
    return Touch(
        ts=format_ts(ts),
        lp=urlsplit(url).path or "/",
        src=classification.source,
        med=classification.medium,
        ch=classification.channel,
        total_time_sec=total_time_sec,
        page_paths=page_paths,
        **extract_utm(url, config),
        **extract_click_ids(url, config),
    )


def _with_live_state(touch: Touch, total_time_sec: int, page_paths: list[str]) -> Touch:
    return touch.model_copy(update={"total_time_sec": total_time_sec, "page_paths": list(page_paths)})


def is_redirect_hop(last: Touch, candidate: Touch, config: TrackingConfig = DEFAULT_CONFIG) -> bool:
    """Whether ``candidate`` repeats ``last`` within the de-duplication window."""
    if last.attributes != candidate.attributes:
        return False
    last_ts = parse_ts(last.ts)
    candidate_ts = parse_ts(candidate.ts)
    if last_ts is None or candidate_ts is None:
        return False
    return candidate_ts - last_ts < config.dedupe_window


def append_or_merge(
    touches: list[Touch],
    candidate: Touch,
    config: TrackingConfig = DEFAULT_CONFIG,
) -> list[Touch]:
    """Record ``candidate`` in the ledger.

    A candidate repeating the current touch within the de-duplication window
    is a redirect hop: no touch is added and the current touch only takes
    over the candidate's live fields. Otherwise the candidate is appended and
    the oldest touches are dropped beyond ``config.max_touches``.

    Returns a new list; ``touches`` is not modified.
    """
    if touches and is_redirect_hop(touches[-1], candidate, config):
        merged = _with_live_state(touches[-1], candidate.total_time_sec, candidate.page_paths)
        return [*touches[:-1], merged]

    ledger = [*touches, candidate]
    return ledger[-config.max_touches:] if config.max_touches > 0 else []


def mirror_live_state(touches: list[Touch], record: AttributionRecord) -> list[Touch]:
    """Copy the record's visit time and page sequence onto the current touch."""
    if not touches:
        return []
    total_time_sec, page_paths = live_state(record)
    return [*touches[:-1], _with_live_state(touches[-1], total_time_sec, page_paths)]
