"""Tests for the attribution middleware."""

from httpx import AsyncClient

from digify import Tracker
from digify.codec import decode, encode
from digify_server.main import app


class ExplodingTracker(Tracker):
    def track_request(self, request):
        raise RuntimeError("tracker exploded")


class TestDocumentNavigation:
    """Tests for cookies written on page loads."""

    async def test_first_visit_sets_cookies(self, client: AsyncClient, navigation_headers, parse_cookies):
        """GIVEN a browser with no cookies
        WHEN it loads a page
        SHOULD receive session, sid and attribution cookies."""
        response = await client.get("/pricing?utm_source=news", headers=navigation_headers)

        cookies = parse_cookies(response)
        assert set(cookies) == {"_digify_session", "_digify_sid", "_digify"}

        session = cookies["_digify_session"]
        assert session["httponly"] is True
        assert session["max-age"] == "1800"
        assert session["path"] == "/"
        assert session["secure"] is True
        assert session["samesite"].lower() == "lax"

        sid = cookies["_digify_sid"]
        assert sid.value == "id-1"
        assert not sid["httponly"]
        assert sid["max-age"] == "1800"

        attribution = cookies["_digify"]
        assert not attribution["httponly"]
        assert attribution["max-age"] == ""
        record = decode(attribution.value)
        assert record["visitor_id"] == "id-2"
        assert record["touches"][0]["lp"] == "/pricing"
        assert record["touches"][0]["utm_src"] == "news"

        assert response.headers["x-dfy-visitor"] == "id-2"
        assert response.headers["x-dfy-session"] == "id-1"

    async def test_consent_makes_attribution_persistent(
        self, client: AsyncClient, navigation_headers, parse_cookies
    ):
        client.cookies.set("consent_state", encode({"analytics_storage": "granted"}), domain="example.com")

        response = await client.get("/", headers=navigation_headers)

        assert parse_cookies(response)["_digify"]["max-age"] == "31536000"

    async def test_state_round_trips_through_browser(self, client: AsyncClient, clock, navigation_headers):
        await client.get("/", headers=navigation_headers)
        clock.advance(seconds=5)
        await client.get("/pricing", headers={**navigation_headers, "referer": "https://example.com/"})

        record = decode(client.cookies["_digify"])
        assert len(record["touches"]) == 2
        assert record["visit_total_ms"] == 5000
        assert record["visit_pages"] == ["/", "/pricing"]
        assert record["_visit_bound_sid"] == client.cookies["_digify_sid"] == "id-1"

    async def test_malformed_cookies_are_replaced(self, client: AsyncClient, navigation_headers):
        client.cookies.set("_digify", "not-base64!!", domain="example.com")
        client.cookies.set("_digify_session", "%%%", domain="example.com")

        response = await client.get("/", headers=navigation_headers)

        assert response.headers["x-dfy-session"] == "id-1"
        assert len(decode(client.cookies["_digify"])["touches"]) == 1


class TestUntrackedRequests:
    """Tests for requests that must not add touches."""

    async def test_sub_resource_refreshes_session(self, client: AsyncClient, parse_cookies):
        response = await client.get("/health")

        assert response.status_code == 200
        cookies = parse_cookies(response)
        assert "_digify_session" in cookies
        record = decode(cookies["_digify"].value)
        assert record["visitor_id"] == "id-2"
        assert "touches" not in record or record["touches"] == []

    async def test_post_leaves_cookies_alone(self, client: AsyncClient):
        response = await client.post("/api/contact", content=b"not json")

        assert response.status_code == 400
        assert response.headers.get_list("set-cookie") == []
        assert "x-dfy-visitor" not in response.headers

    async def test_ignored_path(self, client: AsyncClient, navigation_headers):
        await client.get("/favicon.ico", headers=navigation_headers)
        record = decode(client.cookies["_digify"])
        assert record.get("touches", []) == []


class TestFailOpen:
    """Tracking errors never break the response."""

    async def test_tracker_failure_still_serves_request(self, client: AsyncClient, navigation_headers):
        app.state.tracker = ExplodingTracker()

        response = await client.get("/health", headers=navigation_headers)

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}
        assert response.headers.get_list("set-cookie") == []
