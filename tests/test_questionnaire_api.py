import json

from fastapi import FastAPI
from fastapi.testclient import TestClient

from marketing_planner.api.questionnaire import get_questionnaire_service, router
from marketing_planner.models.question import Question, QuestionType
from marketing_planner.repositories.base import DraftMedium
from marketing_planner.services.draft_store import DraftStore
from marketing_planner.services.questionnaire_service import QuestionnaireService


class MemoryMedium(DraftMedium):
    def __init__(self):
        self.data = {}

    async def get(self, key):
        return self.data.get(key)

    async def set(self, key, value):
        self.data[key] = value
        return True

    async def delete(self, key):
        return self.data.pop(key, None) is not None


QUESTIONS = [
    Question(id="industry", square=0, text="Industry?", type=QuestionType.TEXT, required=True),
    Question(
        id="current-channels", square=1, text="Channels?", type=QuestionType.MULTISELECT,
        options=["SEO", "Paid advertising"],
    ),
]


class FlakySubmitterFactory:
    def __init__(self, failures=0):
        self.failures = failures
        self.submissions = []

    def __call__(self, user_id):
        async def submit(answers):
            self.submissions.append((user_id, dict(answers)))
            if len(self.submissions) <= self.failures:
                raise RuntimeError("AI providers unavailable")
            return f"plan-{len(self.submissions)}"
        return submit


def _client(medium, factory):
    service = QuestionnaireService(QUESTIONS, DraftStore(medium), factory)
    app = FastAPI()
    app.include_router(router, prefix="/api/v1")
    app.dependency_overrides[get_questionnaire_service] = lambda: service
    return TestClient(app)


def test_list_questions():
    with _client(MemoryMedium(), FlakySubmitterFactory()) as client:
        resp = client.get("/api/v1/questionnaire/questions")
    assert resp.status_code == 200
    body = resp.json()
    assert body["total"] == 2
    assert [q["id"] for q in body["questions"]] == ["industry", "current-channels"]


def test_full_session_submits_and_clears_draft():
    medium = MemoryMedium()
    factory = FlakySubmitterFactory()
    with _client(medium, factory) as client:
        resp = client.post("/api/v1/questionnaire/sessions", json={"session_id": "s1", "user_id": "u1"})
        assert resp.status_code == 201
        assert resp.json()["state"] == "navigating"
        assert resp.json()["is_first"] is True

        resp = client.put("/api/v1/questionnaire/sessions/s1/answers/industry", json={"value": "Retail"})
        assert resp.json()["answers"] == {"industry": "Retail"}

        resp = client.post("/api/v1/questionnaire/sessions/s1/advance")
        assert resp.json()["current_index"] == 1
        assert resp.json()["completed_squares"] == [0]

        client.put(
            "/api/v1/questionnaire/sessions/s1/answers/current-channels",
            json={"value": ["SEO", "Paid advertising"]},
        )
        resp = client.post("/api/v1/questionnaire/sessions/s1/advance")
        body = resp.json()
        assert resp.status_code == 200
        assert body["state"] == "submitting"
        assert body["plan_id"] == "plan-1"
        assert body["completed_squares"] == [0, 1]

        # A submitted session is released; the id now opens a blank questionnaire
        resp = client.get("/api/v1/questionnaire/sessions/s1")
        assert resp.json()["state"] == "navigating"
        assert resp.json()["answers"] == {}
        assert resp.json()["plan_id"] is None

    assert factory.submissions == [("u1", {"industry": "Retail", "current-channels": ["SEO", "Paid advertising"]})]
    assert medium.data == {}


def test_new_session_gets_generated_id():
    with _client(MemoryMedium(), FlakySubmitterFactory()) as client:
        resp = client.post("/api/v1/questionnaire/sessions", json={})
    assert resp.status_code == 201
    assert resp.json()["session_id"]


def test_session_resumes_from_saved_draft():
    medium = MemoryMedium()
    medium.data["questionnaire_draft:s2"] = json.dumps({"industry": "Retail"})
    with _client(medium, FlakySubmitterFactory()) as client:
        resp = client.get("/api/v1/questionnaire/sessions/s2")
    assert resp.json()["answers"] == {"industry": "Retail"}
    assert resp.json()["current_index"] == 0


def test_unknown_question_is_404():
    with _client(MemoryMedium(), FlakySubmitterFactory()) as client:
        resp = client.put("/api/v1/questionnaire/sessions/s1/answers/nope", json={"value": "x"})
    assert resp.status_code == 404


def test_failed_submission_is_502_and_retryable():
    factory = FlakySubmitterFactory(failures=1)
    with _client(MemoryMedium(), factory) as client:
        client.post("/api/v1/questionnaire/sessions", json={"session_id": "s3"})
        client.put("/api/v1/questionnaire/sessions/s3/answers/industry", json={"value": "Retail"})
        client.post("/api/v1/questionnaire/sessions/s3/advance")

        resp = client.post("/api/v1/questionnaire/sessions/s3/advance")
        assert resp.status_code == 502

        resp = client.get("/api/v1/questionnaire/sessions/s3")
        assert resp.json()["state"] == "failed"
        assert resp.json()["answers"] == {"industry": "Retail"}
        assert "AI providers unavailable" in resp.json()["last_error"]

        resp = client.post("/api/v1/questionnaire/sessions/s3/retry")
        assert resp.json()["state"] == "navigating"
        assert resp.json()["is_last"] is True

        resp = client.post("/api/v1/questionnaire/sessions/s3/advance")
        assert resp.status_code == 200
        assert resp.json()["plan_id"] == "plan-2"


def test_retreat_and_restart():
    with _client(MemoryMedium(), FlakySubmitterFactory()) as client:
        client.post("/api/v1/questionnaire/sessions", json={"session_id": "s4"})
        client.put("/api/v1/questionnaire/sessions/s4/answers/industry", json={"value": "Retail"})
        client.post("/api/v1/questionnaire/sessions/s4/advance")

        resp = client.post("/api/v1/questionnaire/sessions/s4/retreat")
        assert resp.json()["current_index"] == 0

        resp = client.post("/api/v1/questionnaire/sessions/s4/restart")
        assert resp.json()["answers"] == {}
        assert resp.json()["completed_squares"] == []

        resp = client.post("/api/v1/questionnaire/sessions/s4/retry")
        assert resp.status_code == 409


def test_session_of_another_user_is_403():
    medium = MemoryMedium()
    factory = FlakySubmitterFactory()
    with _client(medium, factory) as client:
        client.post("/api/v1/questionnaire/sessions", json={"session_id": "s5", "user_id": "u1"})
        client.put("/api/v1/questionnaire/sessions/s5/answers/industry", json={"value": "Retail"})

        resp = client.post("/api/v1/questionnaire/sessions", json={"session_id": "s5", "user_id": "u2"})
        assert resp.status_code == 403

        # The owner can still resume it
        resp = client.post("/api/v1/questionnaire/sessions", json={"session_id": "s5", "user_id": "u1"})
        assert resp.status_code == 201
        assert resp.json()["answers"] == {"industry": "Retail"}
