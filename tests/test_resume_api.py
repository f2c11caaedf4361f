import unittest

from fastapi.testclient import TestClient

from support import configure_test_env

configure_test_env()

from app.ai.types import ProviderError  # noqa: E402
from app.core.history_store import clear_history  # noqa: E402
from app.enhance import EnhancementOrchestrator  # noqa: E402
from app.main import app  # noqa: E402
from app.services.enhance_service import get_orchestrator  # noqa: E402
from app.services.pdf_render import render_resume_pdf  # noqa: E402


class StubProvider:
    def __init__(self, name, reply=None, error=None):
        self.name = name
        self.reply = reply
        self.error = error

    async def enhance(self, request):
        if self.error is not None:
            raise self.error
        return self.reply


class ResumeApiTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.client = TestClient(app)

    def setUp(self):
        clear_history()
        app.dependency_overrides[get_orchestrator] = lambda: EnhancementOrchestrator()

    def tearDown(self):
        app.dependency_overrides.clear()

    def test_health_lists_local_fallback(self):
        response = self.client.get("/v1/health")
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["status"], "healthy")
        self.assertEqual(body["providers"][-1], "local")

    def test_enhance_without_providers(self):
        response = self.client.post("/v1/resume/enhance", json={"text": "i worked on a project"})
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["enhanced"], "RESUME\n\nI developed on a project")
        self.assertEqual(body["source_provider"], "local")
        self.assertEqual(body["attempts"], [])
        self.assertTrue(body["history_id"])

    def test_enhance_rejects_blank_text(self):
        response = self.client.post("/v1/resume/enhance", json={"text": "   "})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["detail"], "No text provided")

    def test_enhance_falls_back_through_providers(self):
        providers = [
            StubProvider("jules", error=ProviderError("down", provider="jules", code="network")),
            StubProvider("openai", reply="Enhanced text."),
        ]
        app.dependency_overrides[get_orchestrator] = lambda: EnhancementOrchestrator(providers)

        response = self.client.post("/v1/resume/enhance", json={"text": "Resume body"})
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["enhanced"], "Enhanced text.")
        self.assertEqual(body["source_provider"], "openai")
        self.assertEqual(body["attempts"][0]["provider"], "jules")
        self.assertEqual(body["attempts"][0]["outcome"], "error")
        self.assertEqual(body["attempts"][0]["error_code"], "network")
        self.assertNotIn("text", body["attempts"][1])

    def test_enhance_records_history(self):
        response = self.client.post("/v1/resume/enhance", json={"text": "Resume\n*  did reporting"})
        history_id = response.json()["history_id"]

        entry = self.client.get(f"/v1/history/{history_id}").json()
        self.assertEqual(entry["full_original_text"], "Resume\n- did reporting")
        self.assertEqual(entry["full_enhanced_text"], "Resume\n- executed reporting")
        self.assertEqual(entry["user_id"], "anonymous")

    def test_upload_pdf(self):
        pdf_bytes = render_resume_pdf("Jane Doe\n- Developed payment APIs")
        response = self.client.post(
            "/v1/resume/upload",
            files={"file": ("cv.pdf", pdf_bytes, "application/pdf")},
        )
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["source_type"], "pdf")
        self.assertEqual(body["pages"], 1)
        self.assertIn("payment", body["text"])

    def test_upload_text(self):
        response = self.client.post(
            "/v1/resume/upload",
            files={"file": ("cv.txt", b"Jane   Doe\r\n\r\n\r\n* Built things", "text/plain")},
        )
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["text"], "Jane Doe\n\n- Built things")
        self.assertEqual(body["source_type"], "text")

    def test_upload_with_very_long_filename(self):
        response = self.client.post(
            "/v1/resume/upload",
            files={"file": ("r" * 300 + ".txt", b"Jane Doe", "text/plain")},
        )
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertLessEqual(len(body["filename"]), 255)
        self.assertTrue(body["filename"].endswith(".txt"))
        self.assertEqual(body["text"], "Jane Doe")

    def test_upload_rejects_unsupported_type(self):
        response = self.client.post(
            "/v1/resume/upload",
            files={"file": ("cv.exe", b"MZ\x00\x00", "application/octet-stream")},
        )
        self.assertEqual(response.status_code, 400)

    def test_upload_rejects_fake_pdf(self):
        response = self.client.post(
            "/v1/resume/upload",
            files={"file": ("cv.pdf", b"hello", "application/pdf")},
        )
        self.assertEqual(response.status_code, 400)

    def test_upload_requires_file(self):
        response = self.client.post("/v1/resume/upload")
        self.assertEqual(response.status_code, 422)

    def test_download_pdf(self):
        response = self.client.post(
            "/v1/resume/download",
            json={"enhanced_text": "RESUME\n\n- Developed APIs", "filename": "jane cv"},
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.headers["content-type"], "application/pdf")
        self.assertIn('filename="jane cv.pdf"', response.headers["content-disposition"])
        self.assertTrue(response.content.startswith(b"%PDF-"))

    def test_download_requires_text(self):
        response = self.client.post("/v1/resume/download", json={"enhanced_text": " "})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["detail"], "No enhanced text provided")


if __name__ == "__main__":
    unittest.main()
