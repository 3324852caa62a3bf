"""
Visit accumulator.

Tracks engaged time and the page sequence of the current session's visit.
The same ``tick`` runs for full document navigations and for the SPA
navigation beacon so both paths account time identically.
"""

from datetime import datetime

from digify._time import format_ts, parse_ts, to_millis
from digify.config import DEFAULT_CONFIG, TrackingConfig
from digify.schema import AttributionRecord


def clamp_step(previous: str | None, current: str | None, cap_ms: int) -> int:
    """Milliseconds between two timestamps, clamped to ``[0, cap_ms]``.

    Missing or unparsable timestamps and non-positive steps contribute 0.
    """
    start = parse_ts(previous)
    end = parse_ts(current)
    if start is None or end is None or end <= start:
        return 0
    return min(to_millis(end - start), cap_ms)


def tick(
    record: AttributionRecord,
    session_id: str | None,
    event_ts: datetime,
    path: str,
    config: TrackingConfig = DEFAULT_CONFIG,
) -> AttributionRecord:
    """Advance the visit state of ``record`` to ``event_ts`` on ``path``.

    Returns a new record; ``record`` itself is left untouched.
    """
    visit = {
        "visit_bound_sid": record.visit_bound_sid,
        "visit_total_ms": record.visit_total_ms,
        "visit_last_ts": record.visit_last_ts,
        "visit_pages": list(record.visit_pages),
    }

    # New session, new visit
    if record.visit_bound_sid != session_id:
        visit.update(visit_bound_sid=session_id, visit_total_ms=0, visit_last_ts=None, visit_pages=[])

    stamp = format_ts(event_ts)
    if visit["visit_last_ts"]:
        step = clamp_step(visit["visit_last_ts"], stamp, to_millis(config.step_cap))
        visit["visit_total_ms"] = min(visit["visit_total_ms"] + step, to_millis(config.visit_total_cap))
    visit["visit_last_ts"] = stamp

    pages = visit["visit_pages"]
    if not pages or pages[-1] != path:
        pages.append(path)
        del pages[: max(len(pages) - config.visit_page_limit, 0)]

    return record.model_copy(update=visit)


def live_state(record: AttributionRecord) -> tuple[int, list[str]]:
    """Time on site in whole seconds and the page sequence, as mirrored onto touches."""
    return record.visit_total_ms // 1000, list(record.visit_pages)
