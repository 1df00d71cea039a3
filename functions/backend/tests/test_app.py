import os
import tempfile
import time
import unittest
from unittest.mock import patch

from fastapi.testclient import TestClient

from backend.app import create_app
from backend.config import Settings
from backend.contact_log import FileContactLog, InMemoryContactLog
from backend.dependencies import get_contact_log


class BackendApiTests(unittest.TestCase):
    def setUp(self):
        self.contact_log = InMemoryContactLog()
        app = create_app()
        app.dependency_overrides[get_contact_log] = lambda: self.contact_log
        self.client = TestClient(app)

    def test_health_reports_ok(self):
        response = self.client.get("/api/health")
        self.assertEqual(response.status_code, 200)
        payload = response.json()
        self.assertEqual(payload["status"], "OK")
        self.assertEqual(payload["version"], "1.0.0")
        self.assertIn("running", payload["message"])
        self.assertTrue(payload["timestamp"].endswith("Z"))

    def test_health_is_ok_after_other_requests(self):
        self.client.post("/api/contact", json={"name": ""})
        self.client.get("/api/nope")
        self.client.post("/api/contact", json={"name": "A", "email": "a@b.com", "message": "hi"})
        self.assertEqual(self.client.get("/api/health").json()["status"], "OK")

    def test_requests_are_logged_with_local_time(self):
        local = time.struct_time((2026, 1, 2, 13, 14, 15, 4, 2, 0))
        with patch("backend.app.time.localtime", return_value=local):
            with self.assertLogs("backend.app", level="INFO") as logs:
                self.client.get("/api/health")
        self.assertTrue(
            any("13:14:15 - GET /api/health" in line for line in logs.output)
        )

    def test_contact_appends_record(self):
        response = self.client.post(
            "/api/contact",
            json={"name": " Ada ", "email": "ada@example.com", "subject": "Hello", "message": "Hi!"},
        )
        self.assertEqual(response.status_code, 200)
        payload = response.json()
        self.assertTrue(payload["success"])
        self.assertEqual(payload["data"], {"name": "Ada", "email": "ada@example.com"})

        self.assertEqual(len(self.contact_log.records), 1)
        record = self.contact_log.records[0]
        self.assertEqual(record["name"], "Ada")
        self.assertEqual(record["subject"], "Hello")
        self.assertEqual(record["message"], "Hi!")
        self.assertIn("timestamp", record)
        self.assertIn("ip", record)

    def test_contact_defaults_subject(self):
        self.client.post(
            "/api/contact",
            json={"name": "Ada", "email": "ada@example.com", "message": "Hi!"},
        )
        self.assertEqual(self.contact_log.records[0]["subject"], "No subject")

    def test_contact_rejects_empty_name_without_logging(self):
        response = self.client.post(
            "/api/contact", json={"name": "", "email": "a@b.com", "message": "hi"}
        )
        self.assertEqual(response.status_code, 400)
        payload = response.json()
        self.assertFalse(payload["success"])
        self.assertEqual(payload["message"], "Name, email, and message are required")
        self.assertEqual(self.contact_log.records, [])

    def test_contact_rejects_missing_message(self):
        response = self.client.post("/api/contact", json={"name": "A", "email": "a@b.com"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(self.contact_log.records, [])

    def test_contact_rejects_malformed_body(self):
        response = self.client.post(
            "/api/contact",
            content=b"not json",
            headers={"Content-Type": "application/json"},
        )
        self.assertEqual(response.status_code, 400)
        self.assertFalse(response.json()["success"])
        self.assertEqual(self.contact_log.records, [])

    def test_contact_log_failure_returns_500(self):
        app = create_app()
        app.dependency_overrides[get_contact_log] = lambda: self.contact_log
        client = TestClient(app, raise_server_exceptions=False)
        with patch.object(self.contact_log, "append", side_effect=OSError("disk full")):
            response = client.post(
                "/api/contact", json={"name": "A", "email": "a@b.com", "message": "hi"}
            )
        self.assertEqual(response.status_code, 500)
        self.assertEqual(
            response.json(), {"success": False, "message": "Internal server error"}
        )

    def test_analytics_acknowledges_anything(self):
        response = self.client.post(
            "/api/analytics/view", json={"page": "/", "screenSize": "800x600"}
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"success": True})

        response = self.client.post("/api/analytics/view", content=b"garbage")
        self.assertEqual(response.json(), {"success": True})

    def test_unknown_api_route_is_json_404(self):
        response = self.client.get("/api/does-not-exist")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(
            response.json(), {"success": False, "message": "API endpoint not found"}
        )

    def test_unknown_route_is_json_404(self):
        response = self.client.get("/somewhere")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {"success": False, "message": "Route not found"})


class StaticSiteTests(unittest.TestCase):
    def test_unknown_site_path_serves_index(self):
        with tempfile.TemporaryDirectory() as tmp:
            with open(os.path.join(tmp, "index.html"), "w", encoding="utf-8") as f:
                f.write("<html>portfolio</html>")
            settings = Settings(static_dir=tmp)
            with patch("backend.app.get_settings", return_value=settings):
                client = TestClient(create_app())

            self.assertIn("portfolio", client.get("/").text)
            self.assertIn("portfolio", client.get("/projects/three").text)
            response = client.get("/api/missing")
            self.assertEqual(response.status_code, 404)
            self.assertEqual(response.json()["message"], "API endpoint not found")


class FileContactLogTests(unittest.TestCase):
    def test_appends_json_lines(self):
        with tempfile.TemporaryDirectory() as tmp:
            log = FileContactLog(os.path.join(tmp, "contacts.log"))
            self.assertEqual(log.read_all(), [])
            log.append({"name": "A", "message": "one"})
            log.append({"name": "B", "message": "two"})
            self.assertEqual([r["name"] for r in log.read_all()], ["A", "B"])
            with open(log.path, encoding="utf-8") as f:
                self.assertEqual(len(f.read().splitlines()), 2)


if __name__ == "__main__":
    unittest.main()
