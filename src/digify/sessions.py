"""Session manager: short-lived session identity with idle-timeout renewal."""

from collections.abc import Callable
from datetime import datetime
from uuid import uuid4

from digify._time import format_ts, parse_ts
from digify.config import DEFAULT_CONFIG, TrackingConfig
from digify.schema import SessionRecord

SESSION_COOKIE = "_digify_session"
SESSION_ID_COOKIE = "_digify_sid"


def new_session_id() -> str:
    """Mint a random session (or visitor) identifier."""
    return str(uuid4())


def is_expired(session: SessionRecord, now: datetime, config: TrackingConfig = DEFAULT_CONFIG) -> bool:
    """Whether a session has no usable id or has been idle longer than the timeout."""
    if not session.sid:
        return True
    last_at = parse_ts(session.last_at)
    if last_at is None:
        return True
    return now - last_at > config.idle_timeout


def resolve_session(
    existing: SessionRecord | None,
    now: datetime,
    config: TrackingConfig = DEFAULT_CONFIG,
    id_factory: Callable[[], str] = new_session_id,
) -> SessionRecord:
    """Continue the existing session or start a new one.

    A new sid is minted when there is none, when `lastAt` is missing or
    unparsable, or when the session has been idle longer than
    ``config.idle_timeout``. `lastAt` is always refreshed to ``now``.
    """
    existing = existing or SessionRecord()
    stamp = format_ts(now)
    if is_expired(existing, now, config):
        return SessionRecord(sid=id_factory(), started_at=stamp, last_at=stamp)
    return SessionRecord(
        sid=existing.sid,
        started_at=existing.started_at or stamp,
        last_at=stamp,
    )


def session_max_age(config: TrackingConfig = DEFAULT_CONFIG) -> int:
    """Cookie lifetime in seconds for the session cookies; equal to the idle timeout."""
    return int(config.idle_timeout.total_seconds())
