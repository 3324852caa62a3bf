"""Cookie codec: JSON values <-> URL-safe, padding-free base64 tokens."""

import base64
import binascii
import json
import logging
from typing import Any
from urllib.parse import unquote

logger = logging.getLogger(__name__)

_LEGACY_DECODE_ATTEMPTS = 3


def encode(value: Any) -> str:
    """Encode a JSON-serializable value as a cookie-safe token."""
    payload = json.dumps(value, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
    return base64.urlsafe_b64encode(payload).decode("ascii").rstrip("=")


def decode(token: str | None) -> Any | None:
    """Decode a token produced by ``encode``.

    Returns None for anything that is not a well-formed token.
    """
    if not token or not isinstance(token, str):
        return None
    padded = token + "=" * (-len(token) % 4)
    try:
        payload = base64.b64decode(padded, altchars=b"-_", validate=True)
        return json.loads(payload.decode("utf-8"))
    except (binascii.Error, ValueError):
        # json.JSONDecodeError and UnicodeDecodeError are both ValueErrors
        return None


def read_cookie_json(raw: str | None) -> Any | None:
    """Read a JSON cookie value written either by ``encode`` or as legacy raw JSON.

    Legacy values may arrive percent-encoded once or more, so parsing is
    retried after each unquoting step.
    """
    if not raw:
        return None
    decoded = decode(raw)
    if decoded is not None:
        return decoded

    value = raw
    for _ in range(_LEGACY_DECODE_ATTEMPTS):
        try:
            return json.loads(value)
        except ValueError:
            pass
        unquoted = unquote(value)
        if unquoted == value:
            break
        value = unquoted

    logger.debug("Ignoring undecodable cookie value (%d chars)", len(raw))
    return None
