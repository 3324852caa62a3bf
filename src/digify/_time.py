"""Timestamp helpers shared by the session and visit logic."""

from datetime import UTC, datetime, timedelta

_ONE_MS = timedelta(milliseconds=1)


def utc_now() -> datetime:
    """Default clock."""
    return datetime.now(UTC)


def format_ts(moment: datetime) -> str:
    """Render a datetime as ISO-8601 UTC with millisecond precision and a Z suffix."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_ts(value: object) -> datetime | None:
    """Parse an ISO-8601 timestamp, returning None for anything unusable.

    Naive values are taken to be UTC.
    """
    if not isinstance(value, str) or not value:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    try:
        return parsed.astimezone(UTC)
    except OverflowError:
        # Offset pushes the instant outside datetime range
        return None


def to_millis(delta: timedelta) -> int:
    """Whole milliseconds in a timedelta, floored."""
    return delta // _ONE_MS
