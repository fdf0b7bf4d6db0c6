import unittest
from datetime import datetime, timedelta, timezone

from fastapi.testclient import TestClient

from siteapi.app import create_app
from siteapi.db import InMemoryDbClient
from siteapi.dependencies import get_db_client
from siteapi.middleware import CorsMiddleware


class FailingDbClient(InMemoryDbClient):
    def list_mobs(self, stage=None):
        raise RuntimeError("connection refused")


class SiteApiTestCase(unittest.TestCase):
    def setUp(self):
        self.app = create_app()
        self.db = InMemoryDbClient()
        self.app.dependency_overrides[get_db_client] = lambda: self.db
        self.client = TestClient(self.app)


class SessionRegistrationTests(SiteApiTestCase):
    def test_register_twice_increments_page_count(self):
        body = {"userId": "visitor-1", "utmSource": "instagram", "deviceType": "mobile"}
        first = self.client.post("/api/sessions/register", json=body)
        self.assertEqual(first.status_code, 201)
        self.assertTrue(first.json()["success"])
        self.assertEqual(first.json()["data"]["pageCount"], 1)

        second = self.client.post("/api/sessions/register", json=body)
        self.assertEqual(second.status_code, 201)
        self.assertEqual(second.json()["data"]["pageCount"], 2)
        self.assertEqual(
            second.json()["data"]["sessionId"], first.json()["data"]["sessionId"]
        )
        self.assertEqual(len(self.db.sessions), 1)

    def test_reregistration_clears_session_end(self):
        self.client.post("/api/sessions/register", json={"userId": "visitor-2"})
        self.db.sessions["visitor-2"].session_end = self.db.sessions["visitor-2"].created_at

        self.client.post("/api/sessions/register", json={"userId": "visitor-2"})

        resp = self.client.get("/api/sessions/visitor-2")
        self.assertEqual(resp.status_code, 200)
        data = resp.json()["data"]
        self.assertIsNone(data["sessionEnd"])
        self.assertEqual(data["pageCount"], 2)

    def test_first_attribution_is_kept(self):
        self.client.post(
            "/api/sessions/register",
            json={"userId": "visitor-3", "utmSource": "google"},
        )
        self.client.post(
            "/api/sessions/register",
            json={"userId": "visitor-3", "utmSource": "facebook"},
        )
        data = self.client.get("/api/sessions/visitor-3").json()["data"]
        self.assertEqual(data["utmSource"], "google")

    def test_missing_user_id_is_rejected(self):
        resp = self.client.post("/api/sessions/register", json={"utmSource": "x"})
        self.assertEqual(resp.status_code, 400)
        payload = resp.json()
        self.assertFalse(payload["success"])
        self.assertIn("userId", payload["message"])
        self.assertEqual(len(self.db.sessions), 0)

    def test_empty_user_id_is_rejected(self):
        resp = self.client.post("/api/sessions/register", json={"userId": ""})
        self.assertEqual(resp.status_code, 400)
        self.assertFalse(resp.json()["success"])

    def test_unknown_session(self):
        resp = self.client.get("/api/sessions/nobody")
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json(), {"success": False, "error": "Session not found"})


class BookingTests(SiteApiTestCase):
    def test_create_booking(self):
        resp = self.client.post(
            "/api/create-booking",
            json={
                "name": "Sam",
                "email": "sam@example.com",
                "date": "2026-11-02",
                "time": "18:30",
                "appointmentType": "dinner",
            },
        )
        self.assertEqual(resp.status_code, 201)
        payload = resp.json()
        self.assertTrue(payload["success"])
        self.assertEqual(payload["message"], "Booking created successfully")
        self.assertEqual(payload["data"]["status"], "confirmed")
        self.assertEqual(payload["data"]["paymentStatus"], "pending")
        self.assertEqual(payload["data"]["date"], "2026-11-02")
        self.assertTrue(payload["data"]["reference"].startswith("booking-"))
        self.assertEqual(len(self.db.bookings), 1)

    def test_missing_fields_are_rejected(self):
        resp = self.client.post(
            "/api/create-booking", json={"name": "Sam", "email": "sam@example.com"}
        )
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(
            resp.json(),
            {
                "success": False,
                "error": "Validation error",
                "message": "Name, email, date, and time are required",
            },
        )
        self.assertEqual(len(self.db.bookings), 0)

    def test_unknown_session_id_is_stored_unlinked(self):
        resp = self.client.post(
            "/api/create-booking",
            json={
                "name": "Sam",
                "email": "sam@example.com",
                "date": "2026-11-02",
                "time": "18:30",
                "sessionId": 42,
            },
        )
        self.assertEqual(resp.status_code, 201)
        self.assertIsNone(resp.json()["data"]["sessionId"])


class AnalyticsTests(SiteApiTestCase):
    def test_groups_sessions_and_bookings(self):
        ids = []
        for user, source in (("a", "facebook"), ("b", "facebook"), ("c", None)):
            body = {"userId": user}
            if source:
                body["utmSource"] = source
            resp = self.client.post("/api/sessions/register", json=body)
            ids.append(resp.json()["data"]["sessionId"])
        booking = self.client.post(
            "/api/create-booking",
            json={
                "name": "A",
                "email": "a@example.com",
                "date": "2026-11-02",
                "time": "19:00",
                "sessionId": ids[0],
            },
        ).json()["data"]
        self.db.bookings[booking["id"]].payment_status = "paid"

        resp = self.client.get("/api/analytics/bookings")
        self.assertEqual(resp.status_code, 200)
        data = resp.json()["data"]
        self.assertEqual(data["groupBy"], "utm_source")
        self.assertEqual(data["totalSessions"], 3)
        self.assertEqual(data["totalBookings"], 1)
        first, second = data["rows"]
        self.assertEqual(first["category"], "facebook")
        self.assertEqual(first["sessions"], 2)
        self.assertEqual(first["bookings"], 1)
        self.assertEqual(first["conversion_rate"], 50.0)
        self.assertEqual(first["paid_bookings"], 1)
        self.assertEqual(second["category"], "Direct")
        self.assertEqual(second["bookings"], 0)

    def test_invalid_group_by(self):
        resp = self.client.get("/api/analytics/bookings", params={"groupBy": "email"})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"], "Invalid groupBy parameter")

    def test_explicit_range_includes_end_date(self):
        self.client.post("/api/sessions/register", json={"userId": "a"})
        today = datetime.now(timezone.utc).date()
        yesterday = today - timedelta(days=1)
        tomorrow = today + timedelta(days=1)

        def total(start, end):
            resp = self.client.get(
                "/api/analytics/bookings",
                params={"startDate": start.isoformat(), "endDate": end.isoformat()},
            )
            self.assertEqual(resp.status_code, 200)
            return resp.json()["data"]["totalSessions"]

        self.assertEqual(total(today, today), 1)
        self.assertEqual(total(yesterday, today), 1)
        self.assertEqual(total(yesterday, yesterday), 0)
        self.assertEqual(total(tomorrow, tomorrow), 0)


class MobTests(SiteApiTestCase):
    def _create(self, **overrides):
        body = {"mob_name": "North Paddock Ewes", "breed_name": "Merino", "ewes_joined": 420}
        body.update(overrides)
        return self.client.post("/api/mobs", json=body)

    def test_create_mob_returns_generated_fields(self):
        resp = self._create()
        self.assertEqual(resp.status_code, 201)
        payload = resp.json()
        self.assertTrue(payload["success"])
        self.assertEqual(payload["message"], "Mob created successfully")
        data = payload["data"]
        self.assertEqual(data["mob_id"], 1)
        self.assertEqual(data["current_stage"], "Pre-Joining")
        self.assertTrue(data["is_active"])
        self.assertIsNotNone(data["created_at"])
        self.assertIsNotNone(data["last_updated"])

    def test_create_mob_requires_name(self):
        resp = self.client.post("/api/mobs", json={"breed_name": "Merino"})
        self.assertEqual(resp.status_code, 400)
        self.assertFalse(resp.json()["success"])
        self.assertIn("mob_name", resp.json()["message"])

    def test_list_and_get(self):
        self._create(mob_name="A")
        self._create(mob_name="B", current_stage="Joining")

        listing = self.client.get("/api/mobs").json()
        self.assertEqual(listing["count"], 2)

        joining = self.client.get("/api/mobs", params={"stage": "Joining"}).json()
        self.assertEqual([m["mob_name"] for m in joining["data"]], ["B"])

        self.assertEqual(self.client.get("/api/mobs/1").json()["data"]["mob_name"], "A")
        missing = self.client.get("/api/mobs/99")
        self.assertEqual(missing.status_code, 404)
        self.assertEqual(missing.json()["error"], "Mob not found")

    def test_update_mob(self):
        self._create()
        resp = self.client.patch(
            "/api/mobs/1", json={"current_stage": "Scanning", "colour": "blue"}
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["data"]["current_stage"], "Scanning")

        put = self.client.put("/api/mobs/1", json={"scanning_percent": 142.5})
        self.assertEqual(put.status_code, 200)
        self.assertEqual(put.json()["data"]["scanning_percent"], 142.5)

    def test_update_without_valid_fields(self):
        self._create()
        resp = self.client.patch("/api/mobs/1", json={"colour": "blue"})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"], "No valid fields to update")

    def test_update_unknown_mob(self):
        resp = self.client.patch("/api/mobs/7", json={"mob_name": "X"})
        self.assertEqual(resp.status_code, 404)

    def test_breeding_events_and_history(self):
        self._create()
        for day in ("2026-03-01", "2026-04-15"):
            resp = self.client.post(
                "/api/breeding-events",
                json={
                    "mob_id": 1,
                    "event_type": "scanning",
                    "event_date": day,
                    "event_data": {"pregnant": 380},
                },
            )
            self.assertEqual(resp.status_code, 201)

        history = self.client.get("/api/mobs/1/history").json()
        self.assertEqual(history["count"], 2)
        self.assertEqual(history["data"][0]["event_date"], "2026-04-15")
        self.assertEqual(history["data"][0]["event_data"], {"pregnant": 380})

    def test_breeding_event_for_unknown_mob(self):
        resp = self.client.post(
            "/api/breeding-events",
            json={"mob_id": 5, "event_type": "joining", "event_date": "2026-01-01"},
        )
        self.assertEqual(resp.status_code, 404)

    def test_persistence_failure_returns_500(self):
        self.app.dependency_overrides[get_db_client] = lambda: FailingDbClient()
        resp = self.client.get("/api/mobs")
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(
            resp.json(),
            {
                "success": False,
                "error": "Failed to fetch mobs",
                "message": "connection refused",
            },
        )


class FarmStatisticsTests(SiteApiTestCase):
    def test_empty_statistics(self):
        resp = self.client.get("/api/farm-statistics")
        self.assertEqual(resp.status_code, 200)
        data = resp.json()["data"]
        self.assertEqual(data["total_mobs"], 0)
        self.assertIsNone(data["avg_scanning_percent"])

    def test_statistics_and_stage_distribution(self):
        self.client.post(
            "/api/mobs",
            json={"mob_name": "A", "ewes_joined": 100, "scanning_percent": 150},
        )
        self.client.post(
            "/api/mobs",
            json={
                "mob_name": "B",
                "ewes_joined": 200,
                "scanning_percent": 120,
                "current_stage": "Lambing",
            },
        )
        data = self.client.get("/api/farm-statistics").json()["data"]
        self.assertEqual(data["total_mobs"], 2)
        self.assertEqual(data["total_ewes"], 300)
        self.assertEqual(data["avg_scanning_percent"], 135.0)
        self.assertEqual(data["best_scanning_percent"], 150.0)
        self.assertEqual(data["worst_scanning_percent"], 120.0)

        stages = self.client.get("/api/farm-statistics/stage-distribution").json()
        self.assertEqual(
            [s["current_stage"] for s in stages["data"]], ["Pre-Joining", "Lambing"]
        )


class HealthAndCorsTests(SiteApiTestCase):
    def test_health(self):
        resp = self.client.get("/api/health")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["status"], "healthy")
        self.assertEqual(resp.headers["access-control-allow-origin"], "*")

    def test_options_returns_empty_body_everywhere(self):
        for path in (
            "/api/mobs",
            "/api/sessions/register?userId=x",
            "/api/create-booking",
            "/api/does-not-exist",
        ):
            resp = self.client.options(path, headers={"Origin": "https://example.test"})
            self.assertEqual(resp.status_code, 204, path)
            self.assertEqual(resp.content, b"", path)
            self.assertEqual(resp.headers["access-control-allow-origin"], "*")
            self.assertIn("POST", resp.headers["access-control-allow-methods"])
            self.assertIn("Content-Type", resp.headers["access-control-allow-headers"])

    def test_unknown_route(self):
        resp = self.client.get("/api/nope")
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(
            resp.json(),
            {
                "success": False,
                "error": "Not Found",
                "message": "Route GET /api/nope not found",
            },
        )

    def test_origin_allow_list(self):
        cors = CorsMiddleware(app=None, allowed_origins=["https://site.test"])
        allowed = cors.cors_headers("https://site.test")
        self.assertEqual(allowed["Access-Control-Allow-Origin"], "https://site.test")
        self.assertEqual(allowed["Vary"], "Origin")
        blocked = cors.cors_headers("https://evil.test")
        self.assertNotIn("Access-Control-Allow-Origin", blocked)

    def test_unhandled_error_keeps_cors_headers(self):
        def unreachable_database():
            raise RuntimeError("could not connect to server")

        self.app.dependency_overrides[get_db_client] = unreachable_database
        client = TestClient(self.app, raise_server_exceptions=False)
        resp = client.get("/api/mobs", headers={"Origin": "https://site.test"})
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(
            resp.json(),
            {
                "success": False,
                "error": "Internal server error",
                "message": "could not connect to server",
            },
        )
        self.assertEqual(resp.headers["access-control-allow-origin"], "*")
        self.assertIn("GET", resp.headers["access-control-allow-methods"])


if __name__ == "__main__":
    unittest.main()
