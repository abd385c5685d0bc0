"""
tests/unit/test_api.py

FastAPI routes via TestClient. Client factories on the global services are
monkeypatched so no request reaches a real LLM or people-search endpoint.
"""
import pytest
from fastapi.testclient import TestClient

from ats_matcher.ai_analysis import NO_CLIENT_WARNING
from ats_matcher.config import load_settings
from ats_matcher.contacts import Contact
from ats_matcher.errors import ConfigurationError, ContactSearchError, LLMError
from backend import services
from backend.api import app
from backend.services import NO_CONTACTS_MESSAGE
from conftest import LONG_JOB, LONG_RESUME, VOCAB_JOB, VOCAB_RESUME, reply_json


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def no_llm(monkeypatch):
    """Analysis runs without any LLM client."""
    monkeypatch.setattr(services.analysis_service, "_client_factory", lambda settings, key=None: None)


@pytest.fixture
def llm_factory(monkeypatch):
    """
    Returns install(fake): routes every LLM client lookup to fake and
    records the request-scoped keys the factories received.
    """
    received = []

    def install(fake):
        def factory(settings, key=None):
            received.append(key)
            return fake
        monkeypatch.setattr(services.analysis_service, "_client_factory", factory)
        monkeypatch.setattr(services.generation_service, "_client_factory", factory)
        return received

    return install


def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


# ------------------------------------------------------------------
# Analysis
# ------------------------------------------------------------------

def test_analyze_local(client, no_llm):
    response = client.post(
        "/api/analyze",
        json={"resumeText": VOCAB_RESUME, "jobDescription": VOCAB_JOB, "useAi": False},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["source"] == "local"
    assert body["warning"] is None
    assert body["result"]["score"] == 67
    assert body["result"]["missingKeywords"] == ["react"]
    assert body["matchedByCategory"] == {"frameworks": ["node.js"], "cloud_devops": ["aws"]}
    assert body["missingByCategory"] == {"frameworks": ["react"]}


def test_analyze_accepts_snake_case_and_strategy(client, no_llm):
    response = client.post(
        "/api/analyze",
        json={
            "resume_text": VOCAB_RESUME,
            "job_description": VOCAB_JOB,
            "use_ai": False,
            "strategy": "frequency",
        },
    )
    assert response.status_code == 200
    assert "suggestions" in response.json()["result"]


def test_analyze_without_key_warns(client, no_llm):
    response = client.post("/api/analyze", json={"resumeText": VOCAB_RESUME, "jobDescription": VOCAB_JOB})

    assert response.status_code == 200
    assert response.json()["warning"] == NO_CLIENT_WARNING


def test_analyze_with_header_key_uses_ai(client, llm_factory, make_llm, ai_reply):
    received = llm_factory(make_llm(ai_reply(score=81)))

    response = client.post(
        "/api/analyze",
        json={"resumeText": VOCAB_RESUME, "jobDescription": VOCAB_JOB},
        headers={"X-LLM-API-Key": "sk-session"},
    )

    assert response.status_code == 200
    assert response.json()["source"] == "ai"
    assert response.json()["result"]["score"] == 81
    assert received == ["sk-session"]


def test_analyze_ai_failure_falls_back(client, llm_factory, make_llm):
    llm_factory(make_llm(LLMError("boom", status_code=500)))

    response = client.post("/api/analyze", json={"resumeText": VOCAB_RESUME, "jobDescription": VOCAB_JOB})

    assert response.status_code == 200
    assert response.json()["source"] == "local"
    assert response.json()["result"]["score"] == 67


@pytest.mark.parametrize(
    "payload",
    [
        {"resumeText": VOCAB_RESUME, "jobDescription": "Too short"},
        {"resumeText": "  ", "jobDescription": VOCAB_JOB},
    ],
)
def test_analyze_rejects_bad_input(client, no_llm, payload):
    assert client.post("/api/analyze", json=payload).status_code == 400


def test_analyze_rejects_unknown_strategy(client, no_llm):
    response = client.post(
        "/api/analyze",
        json={"resumeText": VOCAB_RESUME, "jobDescription": VOCAB_JOB, "strategy": "semantic"},
    )
    assert response.status_code == 422


def test_unknown_configured_strategy_does_not_break_analysis(client, no_llm, monkeypatch):
    monkeypatch.setenv("MATCH_STRATEGY", "bogus")
    monkeypatch.setattr(services.analysis_service, "settings", load_settings())
    payload = {"resumeText": VOCAB_RESUME, "jobDescription": VOCAB_JOB, "useAi": False}
    draft = {"draft": {"name": "Jane", "skills": "Node.js, AWS"}, "jobDescription": VOCAB_JOB}
    pair = {
        "resumes": [{"name": "a.txt", "text": VOCAB_RESUME}, {"name": "b.txt", "text": "Python"}],
        "jobDescription": VOCAB_JOB,
        "useAi": False,
    }

    analyzed = client.post("/api/analyze", json=payload)
    scored = client.post("/api/resume-builder/score", json=draft)
    compared = client.post("/api/compare", json=pair)

    assert analyzed.status_code == 200
    assert analyzed.json()["result"]["score"] == 67
    assert scored.status_code == 200
    assert compared.status_code == 200


def test_analyze_upload(client, no_llm):
    response = client.post(
        "/api/analyze/upload",
        files={"resume": ("resume.txt", VOCAB_RESUME.encode("utf-8"), "text/plain")},
        data={"job_description": VOCAB_JOB, "use_ai": "false"},
    )

    assert response.status_code == 200
    assert response.json()["result"]["score"] == 67


def test_analyze_upload_unreadable_file(client, no_llm):
    response = client.post(
        "/api/analyze/upload",
        files={"resume": ("resume.bin", b"\xff\xfe\x00\x81", "application/octet-stream")},
        data={"job_description": VOCAB_JOB},
    )
    assert response.status_code == 422


def test_analyze_upload_unknown_strategy(client, no_llm):
    response = client.post(
        "/api/analyze/upload",
        files={"resume": ("resume.txt", b"Python", "text/plain")},
        data={"job_description": VOCAB_JOB, "strategy": "semantic"},
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Unknown strategy: semantic"


# ------------------------------------------------------------------
# Comparison and resume builder
# ------------------------------------------------------------------

def test_compare_local(client, no_llm):
    response = client.post(
        "/api/compare",
        json={
            "resumes": [
                {"name": "weak.txt", "text": "Python only"},
                {"name": "strong.txt", "text": LONG_RESUME + " AWS React"},
            ],
            "jobDescription": LONG_JOB,
        },
    )

    assert response.status_code == 200
    body = response.json()
    assert [entry["name"] for entry in body["entries"]] == ["weak.txt", "strong.txt"]
    assert [entry["name"] for entry in body["ranked"]] == ["strong.txt", "weak.txt"]
    assert body["ranked"][0]["result"]["score"] == 100
    assert body["failed"] == []
    assert body["warning"] == NO_CLIENT_WARNING


def test_compare_without_ai_has_no_warning(client, no_llm):
    response = client.post(
        "/api/compare",
        json={
            "resumes": [{"name": "a.txt", "text": "Python"}, {"name": "b.txt", "text": "Django"}],
            "jobDescription": LONG_JOB,
            "useAi": False,
        },
    )

    assert response.status_code == 200
    assert response.json()["warning"] is None


def test_compare_reports_failures(client, llm_factory, make_llm):
    def reply(prompt):
        if "BROKEN" in prompt:
            raise LLMError("boom")
        return reply_json({"score": 60})

    llm_factory(make_llm(reply))

    response = client.post(
        "/api/compare",
        json={
            "resumes": [{"name": "ok.txt", "text": "fine"}, {"name": "bad.txt", "text": "BROKEN"}],
            "jobDescription": LONG_JOB,
        },
    )

    body = response.json()
    assert body["failed"] == ["bad.txt"]
    assert body["entries"][1]["error"] == "Failed to analyze bad.txt"
    assert [entry["name"] for entry in body["ranked"]] == ["ok.txt"]
    assert body["warning"] is None


def test_compare_needs_two_resumes(client, no_llm):
    response = client.post(
        "/api/compare",
        json={"resumes": [{"name": "a.txt", "text": "Python"}], "jobDescription": LONG_JOB},
    )
    assert response.status_code == 400


def test_resume_builder_score(client, no_llm):
    draft = {"name": "Jane", "skills": "Node.js, AWS"}

    empty_job = client.post("/api/resume-builder/score", json={"draft": draft, "jobDescription": ""})
    scored = client.post("/api/resume-builder/score", json={"draft": draft, "jobDescription": VOCAB_JOB})

    assert empty_job.json()["result"]["score"] == 0
    assert scored.json()["result"]["score"] == 67


def test_resume_builder_export(client):
    response = client.post(
        "/api/resume-builder/export",
        json={"name": "Jane Doe", "skills": "Python", "experiences": []},
    )

    assert response.status_code == 200
    assert response.json()["filename"] == "Jane_Doe_Resume.txt"
    assert response.json()["text"].startswith("Jane Doe\n")


def test_resume_builder_add_skill(client):
    response = client.post("/api/resume-builder/add-skill", json={"skills": "Python", "skill": "Go"})
    assert response.json() == {"skills": "Python, Go"}


# ------------------------------------------------------------------
# Generation
# ------------------------------------------------------------------

def test_cover_letter(client, llm_factory, make_llm):
    llm_factory(make_llm(reply_json({"coverLetter": "Dear team"})))

    response = client.post(
        "/api/cover-letter",
        json={"resumeText": LONG_RESUME, "jobDescription": LONG_JOB, "companyName": "Acme"},
    )

    assert response.status_code == 200
    assert response.json() == {"coverLetter": "Dear team"}


def test_cover_letter_upstream_failure(client, llm_factory, make_llm):
    llm_factory(make_llm(LLMError("boom", status_code=500)))

    response = client.post("/api/cover-letter", json={"resumeText": LONG_RESUME, "jobDescription": LONG_JOB})

    assert response.status_code == 502


def test_generation_without_key(client, monkeypatch):
    def factory(settings, key=None):
        raise ConfigurationError("LLM API key not found")

    monkeypatch.setattr(services.generation_service, "_client_factory", factory)

    response = client.post("/api/optimize-skills", json={"jobDescription": LONG_JOB})

    assert response.status_code == 500
    assert "API key" in response.json()["detail"]


def test_cold_email(client, llm_factory, make_llm):
    llm_factory(make_llm(reply_json({"subject": "Hello", "body": "Hi Sam"})))

    response = client.post(
        "/api/cold-email",
        json={
            "resumeText": LONG_RESUME,
            "jobDescription": LONG_JOB,
            "recipientName": "Sam",
            "recipientTitle": "Recruiter",
            "companyName": "Acme",
        },
    )

    assert response.json() == {"subject": "Hello", "body": "Hi Sam"}


def test_optimize_skills(client, llm_factory, make_llm):
    llm_factory(make_llm(reply_json({"suggestedSkills": ["python", "Kafka"]})))

    response = client.post("/api/optimize-skills", json={"currentSkills": "Python", "jobDescription": LONG_JOB})

    assert response.json() == {"suggestedSkills": ["Kafka"]}


def test_smart_autofill(client, llm_factory, make_llm):
    llm_factory(make_llm(reply_json({"name": "Jane", "skills": ["Python"], "experiences": []})))

    response = client.post("/api/smart-autofill", json={"prompt": "Python developer, 5 years"})

    assert response.status_code == 200
    assert response.json()["name"] == "Jane"
    assert response.json()["skills"] == "Python"


def test_smart_autofill_empty_prompt(client, llm_factory, make_llm):
    llm_factory(make_llm(""))
    assert client.post("/api/smart-autofill", json={"prompt": " "}).status_code == 400


# ------------------------------------------------------------------
# Contacts
# ------------------------------------------------------------------

class _FakeContactClient:
    def __init__(self, contacts=None, error=None):
        self.contacts = contacts or []
        self.error = error
        self.queries = []

    def __call__(self, settings):
        return self

    def search(self, query):
        self.queries.append(query)
        if self.error:
            raise self.error
        return self.contacts


def test_contacts_search(client, monkeypatch):
    fake = _FakeContactClient([Contact(name="Sam", linkedin_url="https://linkedin.com/in/sam")])
    monkeypatch.setattr(services.contact_service, "_client_factory", fake)

    response = client.post("/api/contacts/search", json={"companyName": " Acme ", "country": "Germany"})

    assert response.status_code == 200
    body = response.json()
    assert body["contacts"][0]["linkedinUrl"] == "https://linkedin.com/in/sam"
    assert body["contacts"][0]["email"] == "N/A"
    assert body["message"] is None
    assert fake.queries[0].company_name == "Acme"


def test_contacts_search_empty(client, monkeypatch):
    monkeypatch.setattr(services.contact_service, "_client_factory", _FakeContactClient())

    response = client.post("/api/contacts/search", json={"companyName": "Acme"})

    assert response.json() == {"contacts": [], "message": NO_CONTACTS_MESSAGE}


@pytest.mark.parametrize("status,expected", [(401, 401), (429, 429), (500, 502), (None, 502)])
def test_contacts_search_errors(client, monkeypatch, status, expected):
    fake = _FakeContactClient(error=ContactSearchError("upstream", status_code=status))
    monkeypatch.setattr(services.contact_service, "_client_factory", fake)

    response = client.post("/api/contacts/search", json={"companyName": "Acme"})

    assert response.status_code == expected


def test_contacts_search_requires_company(client, monkeypatch):
    monkeypatch.setattr(services.contact_service, "_client_factory", _FakeContactClient())
    assert client.post("/api/contacts/search", json={"companyName": "  "}).status_code == 400
