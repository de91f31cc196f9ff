"""
Test suite for the HTTP endpoints.

The app's workflow and gateway dependencies are overridden with instances
wired to an in-memory database and a scripted model endpoint.

Run tests with: pytest backend/tests/test_api.py -v
"""

import pytest
from fastapi.testclient import TestClient

from api import app
from services.ai_gateway import get_ai_gateway
from services.session_identity import SESSION_HEADER, SESSION_KEY
from services.workflows import get_workflows


PARSED_RESUME = {"personalInfo": {"name": "Jane Doe"}, "skills": ["Python", "SQL"], "experience": []}


# ============================================================================
# FIXTURES - Reusable test setup components
# ============================================================================

@pytest.fixture
def test_client(workflows, gateway):
    """
    TestClient with the app's services swapped for test instances.
    """
    app.dependency_overrides[get_workflows] = lambda: workflows
    app.dependency_overrides[get_ai_gateway] = lambda: gateway
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def session_headers():
    return {SESSION_HEADER: "session_1700000000000_testtesttest1"}


# ============================================================================
# AI gateway endpoint
# ============================================================================

class TestGatewayEndpoint:

    def test_success_envelope(self, test_client, fake_model):
        fake_model.reply_json(PARSED_RESUME)

        response = test_client.post(
            "/api/ai-career-assistant",
            json={"action": "parse_resume", "data": {"resumeText": "Jane Doe"}},
        )

        assert response.status_code == 200
        assert response.json() == {"success": True, "data": PARSED_RESUME}

    def test_invalid_action_is_400(self, test_client):
        response = test_client.post("/api/ai-career-assistant", json={"action": "nope", "data": {}})

        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "Invalid action type"}

    def test_non_object_data_is_400(self, test_client):
        response = test_client.post("/api/ai-career-assistant", json={"action": "match_jobs", "data": [1, 2]})

        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "Request data must be a JSON object"}

    def test_upstream_error_is_500(self, test_client, fake_model):
        fake_model.reply_raw(500, b"boom")

        response = test_client.post("/api/ai-career-assistant", json={"action": "match_jobs", "data": {}})

        assert response.status_code == 500
        assert response.json() == {"success": False, "error": "Model API error: boom"}

    def test_degraded_payload_is_200(self, test_client, fake_model):
        fake_model.reply_text("plain words")

        response = test_client.post("/api/ai-career-assistant", json={"action": "career_guidance"})

        assert response.status_code == 200
        assert response.json()["data"]["rawResponse"] == "plain words"

    def test_missing_action_is_validation_error(self, test_client):
        response = test_client.post("/api/ai-career-assistant", json={"data": {}})
        assert response.status_code == 422


# ============================================================================
# Session handling
# ============================================================================

class TestSession:

    def test_new_visitor_gets_cookie_and_header(self, test_client, persistence):
        response = test_client.get("/api/session")

        assert response.status_code == 200
        token = response.json()["sessionId"]
        assert response.headers[SESSION_HEADER] == token
        assert response.cookies.get(SESSION_KEY) == token
        assert persistence.get_session(token).is_ok

    def test_cookie_is_reused(self, test_client):
        first = test_client.get("/api/session").json()["sessionId"]
        second = test_client.get("/api/session").json()["sessionId"]
        assert first == second

    def test_header_wins(self, test_client, session_headers):
        response = test_client.get("/api/session", headers=session_headers)
        assert response.json()["sessionId"] == session_headers[SESSION_HEADER]

    def test_malformed_header_is_ignored(self, test_client):
        response = test_client.get("/api/session", headers={SESSION_HEADER: "../../bad"})
        assert response.json()["sessionId"] != "../../bad"

    def test_health(self, test_client):
        assert test_client.get("/health").json() == {"status": "ok"}


# ============================================================================
# Resumes
# ============================================================================

class TestResumeEndpoints:

    def test_upload_text_file(self, test_client, fake_model, session_headers):
        fake_model.reply_json(PARSED_RESUME)

        response = test_client.post(
            "/api/resumes",
            files={"file": ("resume.txt", b"Jane Doe\nPython, SQL", "text/plain")},
            headers=session_headers,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["parsed_data"] == PARSED_RESUME
        assert body["file_name"] == "resume.txt"
        assert body["session_id"] == session_headers[SESSION_HEADER]

    def test_upload_docx_is_415(self, test_client, session_headers):
        response = test_client.post(
            "/api/resumes",
            files={"file": ("cv.docx", b"PK\x03\x04", "application/vnd.openxmlformats-officedocument.wordprocessingml.document")},
            headers=session_headers,
        )

        assert response.status_code == 415
        assert "paste your resume text" in response.json()["detail"]

    def test_upload_too_large_is_413(self, test_client, session_headers):
        response = test_client.post(
            "/api/resumes",
            files={"file": ("big.txt", b"a" * (1024 * 1024 + 10), "text/plain")},
            headers=session_headers,
        )
        assert response.status_code == 413

    def test_paste_then_list_and_latest(self, test_client, fake_model, session_headers):
        fake_model.reply_json(PARSED_RESUME)

        created = test_client.post("/api/resumes/text", json={"text": "Jane Doe"}, headers=session_headers)
        listed = test_client.get("/api/resumes", headers=session_headers)
        latest = test_client.get("/api/resumes/latest", headers=session_headers)

        assert created.status_code == 200
        assert [r["id"] for r in listed.json()] == [created.json()["id"]]
        assert latest.json()["file_name"] == "pasted-resume.txt"

    def test_latest_without_resume_is_404(self, test_client, session_headers):
        response = test_client.get("/api/resumes/latest", headers=session_headers)
        assert response.status_code == 404

    def test_sessions_do_not_see_each_other(self, test_client, fake_model, session_headers):
        fake_model.reply_json(PARSED_RESUME)
        test_client.post("/api/resumes/text", json={"text": "Jane Doe"}, headers=session_headers)

        other = test_client.get("/api/resumes", headers={SESSION_HEADER: "session_someone_else"})

        assert other.json() == []


# ============================================================================
# Feature flows
# ============================================================================

class TestFeatureEndpoints:

    @pytest.fixture
    def with_resume(self, test_client, fake_model, session_headers):
        fake_model.reply_json(PARSED_RESUME)
        test_client.post("/api/resumes/text", json={"text": "Jane Doe"}, headers=session_headers)

    def test_skill_gap_and_learning_path(self, test_client, fake_model, session_headers, with_resume):
        fake_model.reply_json({"skillGaps": [{"skill": "Spark"}], "marketDemand": {}})
        gap = test_client.post("/api/skill-gaps", json={"targetRole": "Data Engineer"}, headers=session_headers)
        assert gap.status_code == 200
        assert gap.json()["identified_gaps"] == [{"skill": "Spark"}]

        assert test_client.get("/api/skill-gaps/latest", headers=session_headers).json()["id"] == gap.json()["id"]
        assert len(test_client.get("/api/skill-gaps", headers=session_headers).json()) == 1

        fake_model.reply_json({"learningPath": [{"skill": "Spark"}], "totalDuration": "3 months"})
        path = test_client.post("/api/learning-paths", headers=session_headers)
        assert path.json()["priority_order"] == ["Spark"]
        assert len(test_client.get("/api/learning-paths", headers=session_headers).json()) == 1

    def test_jobs(self, test_client, fake_model, session_headers, with_resume):
        fake_model.reply_json({"jobs": [{"title": "A", "compatibilityScore": 60}, {"title": "B", "compatibilityScore": 90}]})

        matched = test_client.post("/api/jobs/match", json={"location": "Pune"}, headers=session_headers)
        listed = test_client.get("/api/jobs?limit=1", headers=session_headers)

        assert matched.status_code == 200
        assert [j["job_title"] for j in listed.json()] == ["B"]

    def test_career_guidance(self, test_client, fake_model, session_headers, with_resume):
        fake_model.reply_json({"recommendedCareers": [{"title": "SRE"}]})

        response = test_client.post("/api/career-guidance", headers=session_headers)

        assert response.json()["recommendedCareers"] == [{"title": "SRE"}]

    def test_mock_interview_flow(self, test_client, fake_model, session_headers):
        fake_model.reply_json({"questions": [{"id": 1, "question": "Why us?"}]})
        started = test_client.post("/api/mock-interviews", json={"jobRole": "QA", "questionCount": 1}, headers=session_headers)
        interview_id = started.json()["id"]

        fake_model.reply_json({"score": 90, "feedback": "Great"})
        answered = test_client.post(
            f"/api/mock-interviews/{interview_id}/answers", json={"answer": "Mission"}, headers=session_headers,
        )

        assert answered.status_code == 200
        assert answered.json()["interview"]["completed"] is True
        assert answered.json()["interview"]["score"] == 90
        assert len(test_client.get("/api/mock-interviews", headers=session_headers).json()) == 1

    def test_assessment_flow(self, test_client, fake_model, session_headers):
        fake_model.reply_json({"questions": [{"question": "True or false?", "correctAnswer": True}]})
        started = test_client.post("/api/assessments", json={"skillCategory": "Logic"}, headers=session_headers)
        assessment_id = started.json()["id"]

        answered = test_client.post(
            f"/api/assessments/{assessment_id}/answers", json={"answer": "true"}, headers=session_headers,
        )

        assert answered.json()["isCorrect"] is True
        assert answered.json()["assessment"]["results"]["score"] == 100
        assert len(test_client.get("/api/assessments", headers=session_headers).json()) == 1

    def test_answer_for_unknown_assessment_is_404(self, test_client, session_headers):
        response = test_client.post("/api/assessments/missing/answers", json={"answer": "x"}, headers=session_headers)
        assert response.status_code == 404

    def test_dashboard(self, test_client, session_headers, with_resume):
        response = test_client.get("/api/dashboard", headers=session_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["resume"]["file_name"] == "pasted-resume.txt"
        assert body["stats"]["completedInterviews"] == 0
