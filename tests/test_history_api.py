import unittest

from fastapi.testclient import TestClient

from support import configure_test_env

configure_test_env()

from app.ai.types import ProviderError  # noqa: E402
from app.core.history_store import clear_history  # noqa: E402
from app.core.user_store import clear_users  # noqa: E402
from app.enhance import EnhancementOrchestrator  # noqa: E402
from app.main import app  # noqa: E402
from app.services.enhance_service import get_orchestrator  # noqa: E402


class HistoryApiTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.client = TestClient(app)

    def setUp(self):
        clear_history()
        clear_users()
        app.dependency_overrides[get_orchestrator] = lambda: EnhancementOrchestrator()

    def tearDown(self):
        app.dependency_overrides.clear()

    def _auth_headers(self, email="owner@example.com"):
        response = self.client.post(
            "/v1/auth/signup",
            json={"name": "Owner", "email": email, "password": "secret1"},
        )
        return {"Authorization": f"Bearer {response.json()['token']}"}

    def _enhance(self, text, headers=None):
        response = self.client.post("/v1/resume/enhance", json={"text": text}, headers=headers or {})
        self.assertEqual(response.status_code, 200)
        return response.json()["history_id"]

    def test_list_newest_first(self):
        first = self._enhance("first resume")
        second = self._enhance("second resume")
        entries = self.client.get("/v1/history").json()
        self.assertEqual([e["id"] for e in entries], [second, first])
        self.assertEqual(entries[0]["source_provider"], "local")

    def test_history_is_per_user(self):
        headers = self._auth_headers()
        owned = self._enhance("owned resume", headers=headers)
        self._enhance("anonymous resume")

        mine = self.client.get("/v1/history", headers=headers).json()
        self.assertEqual([e["id"] for e in mine], [owned])
        self.assertEqual(self.client.get(f"/v1/history/{owned}").status_code, 404)

    def test_get_missing_item(self):
        response = self.client.get("/v1/history/does-not-exist")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["detail"], "History item not found")

    def test_delete_item(self):
        entry_id = self._enhance("to delete")
        response = self.client.delete(f"/v1/history/{entry_id}")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"success": True})
        self.assertEqual(self.client.get(f"/v1/history/{entry_id}").status_code, 404)

    def test_clear_only_touches_caller(self):
        headers = self._auth_headers()
        self._enhance("owned resume", headers=headers)
        self._enhance("anonymous resume")

        response = self.client.delete("/v1/history", headers=headers)
        self.assertEqual(response.json(), {"success": True})
        self.assertEqual(self.client.get("/v1/history", headers=headers).json(), [])
        self.assertEqual(len(self.client.get("/v1/history").json()), 1)


class AnalyticsApiTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.client = TestClient(app)

    def setUp(self):
        app.dependency_overrides[get_orchestrator] = lambda: EnhancementOrchestrator()

    def tearDown(self):
        app.dependency_overrides.clear()

    def test_summary_counts_runs(self):
        before = self.client.get("/v1/analytics/summary").json()
        self.client.post("/v1/resume/enhance", json={"text": "analytics resume"})
        after = self.client.get("/v1/analytics/summary").json()

        self.assertTrue(after["enabled"])
        self.assertEqual(after["total"], before["total"] + 1)
        self.assertGreaterEqual(after["by_provider"].get("local", 0), 1)

    def test_latest_runs_include_attempts(self):
        providers = [StubFailingProvider()]
        app.dependency_overrides[get_orchestrator] = lambda: EnhancementOrchestrator(providers)
        self.client.post("/v1/resume/enhance", json={"text": "latest resume"})

        runs = self.client.get("/v1/analytics/latest", params={"limit": 1}).json()
        self.assertEqual(len(runs), 1)
        self.assertEqual(runs[0]["source_provider"], "local")
        self.assertEqual(runs[0]["attempts"][0]["provider"], "jules")
        self.assertEqual(runs[0]["attempts"][0]["outcome"], "error")
        self.assertNotIn("text", runs[0]["attempts"][0])

    def test_latest_limit_validated(self):
        self.assertEqual(self.client.get("/v1/analytics/latest", params={"limit": 0}).status_code, 422)


class StubFailingProvider:
    name = "jules"

    async def enhance(self, request):
        raise ProviderError("unavailable", provider="jules", code="http_503")


if __name__ == "__main__":
    unittest.main()
