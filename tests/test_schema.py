"""Tests for the cookie-carried models."""

import pytest
from pydantic import ValidationError

from digify.schema import AttributionRecord, SessionRecord, Touch

TOUCH = {
    "ts": "2025-03-01T12:00:00.000Z",
    "lp": "/",
    "src": "(direct)",
    "med": "(none)",
    "ch": "direct",
    "total_time_sec": 0,
    "page_paths": ["/"],
}


class TestAttributionRecord:
    """Tests for loading and dumping the `_digify` cookie."""

    def test_wire_form_uses_aliases_and_omits_none(self):
        record = AttributionRecord(visitor_id="v1", visit_bound_sid="s1", touches=[Touch(**TOUCH)])

        data = record.to_cookie()

        assert data["_visit_bound_sid"] == "s1"
        assert "visit_bound_sid" not in data
        assert "visit_last_ts" not in data
        assert "gclid" not in data["touches"][0]

    def test_loads_aliased_key(self):
        record = AttributionRecord.from_cookie({"_visit_bound_sid": "s1", "visit_pages": ["/"]})
        assert record.visit_bound_sid == "s1"
        assert record.visit_pages == ["/"]

    @pytest.mark.parametrize("data", [None, "text", 42, ["a"]])
    def test_non_mapping_gives_fresh_record(self, data):
        assert AttributionRecord.from_cookie(data) == AttributionRecord()

    def test_malformed_fields_fall_back(self):
        record = AttributionRecord.from_cookie(
            {
                "visitor_id": 12,
                "touches": "nope",
                "visit_total_ms": -5,
                "visit_pages": ["/a", 3, None, "/b"],
                "visit_last_ts": "",
            }
        )
        assert record.visitor_id is None
        assert record.touches == []
        assert record.visit_total_ms == 0
        assert record.visit_pages == ["/a", "/b"]
        assert record.visit_last_ts is None

    def test_malformed_touch_is_dropped(self):
        record = AttributionRecord.from_cookie({"touches": [TOUCH, {"lp": "/missing-fields"}, "x"]})
        assert len(record.touches) == 1
        assert record.touches[0].lp == "/"

    def test_fractional_total_is_truncated(self):
        assert AttributionRecord.from_cookie({"visit_total_ms": 1500.9}).visit_total_ms == 1500

    def test_unknown_keys_ignored(self):
        assert AttributionRecord.from_cookie({"legacy": True}) == AttributionRecord()


class TestTouch:
    """Tests for touch entries."""

    def test_touches_are_frozen(self):
        touch = Touch(**TOUCH)
        with pytest.raises(ValidationError):
            touch.lp = "/other"

    def test_unknown_click_id_survives_round_trip(self):
        touch = Touch(**TOUCH, zzclid="abc")
        record = AttributionRecord.from_cookie(AttributionRecord(touches=[touch]).to_cookie())
        assert record.touches[0].model_dump()["zzclid"] == "abc"

    def test_attributes(self):
        assert Touch(**TOUCH).attributes == ("/", "(direct)", "(none)", "direct")


class TestSessionRecord:
    """Tests for the `_digify_session` cookie."""

    def test_wire_form(self):
        session = SessionRecord(sid="s1", started_at="2025-03-01T12:00:00.000Z", last_at="2025-03-01T12:05:00.000Z")
        assert session.to_cookie() == {
            "sid": "s1",
            "startedAt": "2025-03-01T12:00:00.000Z",
            "lastAt": "2025-03-01T12:05:00.000Z",
        }

    def test_loads_wire_form(self):
        session = SessionRecord.from_cookie({"sid": "s1", "startedAt": "a", "lastAt": "b"})
        assert (session.sid, session.started_at, session.last_at) == ("s1", "a", "b")

    def test_garbage_gives_empty_session(self):
        assert SessionRecord.from_cookie("garbage") == SessionRecord()
        assert SessionRecord.from_cookie({"sid": 5}).sid is None


class TestNonFiniteFields:
    """Cookie JSON may carry numbers outside the integer range."""

    def test_infinite_total_falls_back_to_zero(self):
        # json.loads turns 1e999 into inf
        record = AttributionRecord.from_cookie({"visitor_id": "v1", "visit_total_ms": float("inf")})
        assert record.visitor_id == "v1"
        assert record.visit_total_ms == 0

    def test_nan_total_falls_back_to_zero(self):
        assert AttributionRecord.from_cookie({"visit_total_ms": float("nan")}).visit_total_ms == 0

    def test_touch_with_infinite_time_is_dropped(self):
        broken = {**TOUCH, "total_time_sec": float("inf")}
        assert AttributionRecord.from_cookie({"touches": [broken, TOUCH]}).touches == [Touch(**TOUCH)]
