import inspect
import os
import sys
import unittest
from contextlib import ExitStack
from io import BytesIO
from pathlib import Path

os.environ.setdefault("LLM_ENABLED", "0")
os.environ.setdefault("RATE_LIMIT_ENABLED", "0")

from fastapi.testclient import TestClient  # noqa: E402
from pypdf import PdfWriter  # noqa: E402

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from resume_ranker.api.v1 import health, resumes  # noqa: E402
from resume_ranker.main import app  # noqa: E402
from resume_ranker.services.analyzer import ResumeAnalyzer, get_resume_analyzer  # noqa: E402
from resume_ranker.services.extractor import ResumeExtractor  # noqa: E402
from resume_ranker.services.recommender import RecommendationGenerator  # noqa: E402
from resume_ranker.store import score_store  # noqa: E402
from tests.fakes import temporary_score_store  # noqa: E402


def _blank_pdf() -> bytes:
    writer = PdfWriter()
    writer.add_blank_page(width=612, height=792)
    buffer = BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


class ResumesApiTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        app.dependency_overrides[get_resume_analyzer] = lambda: ResumeAnalyzer(
            ResumeExtractor(), RecommendationGenerator()
        )
        cls.client = TestClient(app)

    @classmethod
    def tearDownClass(cls):
        app.dependency_overrides.pop(get_resume_analyzer, None)

    def setUp(self):
        stack = ExitStack()
        stack.enter_context(temporary_score_store())
        self.addCleanup(stack.close)
        score_store.clear_resume_scores()

    def _analyze(self, text: str, file_name: str = "resume.txt"):
        return self.client.post("/v1/resumes/analyze", json={"resume_text": text, "file_name": file_name})

    def test_health(self):
        response = self.client.get("/v1/health")
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["status"], "healthy")
        self.assertEqual(body["resumesRanked"], 0)
        self.assertIn("llmConfigured", body)

    def test_analyze_ranks_against_stored_corpus(self):
        first = self._analyze("Looking for a job", "first.txt")
        self.assertEqual(first.status_code, 200)
        body = first.json()
        self.assertEqual(body["fileName"], "first.txt")
        self.assertEqual(body["scores"]["overallScore"], "14")
        self.assertEqual(body["scores"]["experienceScore"], "40")
        self.assertEqual(body["ranking"], {"globalRank": 1, "globalPercentile": 0, "totalResumesRanked": 1})
        self.assertEqual(len(body["recommendations"]), 5)
        self.assertIn("structuredFields", body)

        second = self._analyze("Skills: Python", "second.txt").json()
        self.assertEqual(second["scores"]["overallScore"], "10")
        self.assertEqual(second["ranking"], {"globalRank": 2, "globalPercentile": 0, "totalResumesRanked": 2})

        third = self._analyze("Skills: Python, Docker\nLooking for a job", "third.txt").json()
        self.assertEqual(third["scores"]["overallScore"], "25")
        self.assertEqual(third["ranking"], {"globalRank": 1, "globalPercentile": 67, "totalResumesRanked": 3})

        fetched = self.client.get(f"/v1/resumes/{third['resumeId']}")
        self.assertEqual(fetched.status_code, 200)
        self.assertEqual(fetched.json()["scores"], third["scores"])
        self.assertEqual(fetched.json()["ranking"], third["ranking"])

        board = self.client.get("/v1/leaderboard")
        self.assertEqual(board.status_code, 200)
        stats = board.json()
        self.assertEqual(stats["total"], 3)
        self.assertEqual(stats["avgScore"], 16.3)
        self.assertEqual(stats["topScore"], 25.0)
        self.assertEqual([entry["fileName"] for entry in stats["rankings"]], ["third.txt", "first.txt", "second.txt"])
        self.assertEqual(stats["scoreDistribution"][-1], {"range": "0-49", "count": 3, "percentage": 100.0})

        page = self.client.get("/v1/leaderboard", params={"limit": 1, "offset": 1}).json()
        self.assertEqual([entry["fileName"] for entry in page["rankings"]], ["first.txt"])

    def test_unknown_resume_is_404(self):
        response = self.client.get("/v1/resumes/does-not-exist")
        self.assertEqual(response.status_code, 404)

    def test_leaderboard_rejects_bad_paging(self):
        self.assertEqual(self.client.get("/v1/leaderboard", params={"limit": 0}).status_code, 422)
        self.assertEqual(self.client.get("/v1/leaderboard", params={"offset": -1}).status_code, 422)

    def test_blank_text_is_422(self):
        self.assertEqual(self._analyze("   \n  ").status_code, 422)
        self.assertEqual(self._analyze("").status_code, 422)
        self.assertEqual(score_store.list_overall_scores(), [])

    def test_upload_rejects_non_pdf(self):
        response = self.client.post(
            "/v1/resumes/upload",
            files={"file": ("resume.docx", b"PK\x03\x04", "application/octet-stream")},
        )
        self.assertEqual(response.status_code, 400)

    def test_upload_rejects_bad_magic_bytes(self):
        response = self.client.post(
            "/v1/resumes/upload",
            files={"file": ("resume.pdf", b"not a pdf at all", "application/pdf")},
        )
        self.assertEqual(response.status_code, 400)

    def test_upload_without_text_is_422(self):
        response = self.client.post(
            "/v1/resumes/upload",
            files={"file": ("resume.pdf", _blank_pdf(), "application/pdf")},
        )
        self.assertEqual(response.status_code, 422)
        self.assertEqual(score_store.list_overall_scores(), [])

    def test_store_reads_run_off_the_event_loop(self):
        for handler in (resumes.get_resume, resumes.leaderboard, health.health_check):
            self.assertFalse(inspect.iscoroutinefunction(handler), handler.__name__)


if __name__ == "__main__":
    unittest.main()
