"""Flatten attribution state for lead forms and sanitize what comes back."""

import json
import logging
from collections.abc import Mapping
from typing import Any

from digify.schema import AttributionRecord, LeadAttribution

logger = logging.getLogger(__name__)

LEAD_TOUCH_LIMIT = 10


def lead_attribution(record: AttributionRecord) -> dict[str, str]:
    """Flatten an attribution record into the string fields a lead form submits.

    Keys with no value are omitted.
    """
    fields: dict[str, str] = {}
    if record.visitor_id:
        fields["digify_visitor_id"] = record.visitor_id

    if record.touches:
        touches = [touch.model_dump(mode="json", exclude_none=True) for touch in record.touches]
        fields["touches_json"] = json.dumps(touches[-LEAD_TOUCH_LIMIT:], separators=(",", ":"))
        latest = record.touches[-1]
        if latest.ch:
            fields["latest_channel"] = latest.ch
        if latest.src:
            fields["latest_source"] = latest.src
        if latest.med:
            fields["latest_medium"] = latest.med
        fields["latest_total_time_sec"] = str(latest.total_time_sec)
    return fields


def _touches_from_json(raw: Any) -> list:
    if not raw or not isinstance(raw, str):
        return []
    try:
        parsed = json.loads(raw)
    except ValueError:
        logger.debug("Discarding unparsable touches_json on lead submission")
        return []
    return parsed[-LEAD_TOUCH_LIMIT:] if isinstance(parsed, list) else []


def _int_or_none(raw: Any) -> int | None:
    if raw is None or isinstance(raw, bool):
        return None
    try:
        return int(float(raw))
    except (TypeError, ValueError, OverflowError):
        return None


def _text_or_none(raw: Any) -> str | None:
    if raw is None or raw == "":
        return None
    return str(raw)


def sanitize_attribution(attrib: Mapping[str, Any]) -> LeadAttribution:
    """Normalize the flattened attribution a client submitted with a lead."""
    return LeadAttribution(
        digify_visitor_id=_text_or_none(attrib.get("digify_visitor_id")),
        touches_json=json.dumps(_touches_from_json(attrib.get("touches_json"))),
        latest_channel=_text_or_none(attrib.get("latest_channel")),
        latest_source=_text_or_none(attrib.get("latest_source")),
        latest_medium=_text_or_none(attrib.get("latest_medium")),
        latest_total_time_sec=_int_or_none(attrib.get("latest_total_time_sec")),
    )
