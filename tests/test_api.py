from __future__ import annotations

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import text

from careerdesk.api import create_app
from careerdesk.errors import PersistenceError
from careerdesk.generation import TextGenerator

from tests.conftest import SAMPLE_PROFILE, FakeGenerator, FakeMail, make_message

JOB_DATA = {
    "title": "Frontend Engineer",
    "company": "Globex",
    "description": "Looking for a React and AWS expert",
}


@pytest.fixture
def mail():
    messages = {
        "a": make_message(
            "We are hiring a Senior Backend Engineer at Acme Corp, apply here: https://acme.com/careers/123",
            subject="New role",
            sender="talent@acme.com",
        ),
        "b": make_message("Lunch on Friday?"),
    }
    return FakeMail(results={"general": ["a", "b"]}, messages=messages)


@pytest.fixture
def tokens_seen():
    return []


@pytest.fixture
def generator():
    return FakeGenerator()


@pytest.fixture
def client(store, mail, generator, tokens_seen):
    def factory(access_token):
        tokens_seen.append(access_token)
        return mail

    return TestClient(create_app(store=store, mail_client_factory=factory, generator=generator))


@pytest.fixture
def auth(user):
    _, token = user
    return {"Authorization": f"Bearer {token}"}


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"
    assert r.headers["access-control-allow-origin"] == "*"


def test_preflight_returns_empty_cors_response(client):
    r = client.options("/extract-gmail-jobs")
    assert r.status_code == 200
    assert r.content == b""
    assert r.headers["access-control-allow-origin"] == "*"
    assert "authorization" in r.headers["access-control-allow-headers"]


def test_missing_authorization_is_rejected_before_mail_access(client, mail):
    r = client.post("/extract-gmail-jobs", json={"accessToken": "g-token", "sources": ["general"]})
    assert r.status_code == 401
    assert r.json() == {"error": "No authorization header"}
    assert r.headers["access-control-allow-origin"] == "*"
    assert mail.queries == []


def test_unknown_session_token_is_rejected(client, mail):
    r = client.post(
        "/extract-gmail-jobs",
        json={"accessToken": "g-token", "sources": ["general"]},
        headers={"Authorization": "Bearer nope"},
    )
    assert r.status_code == 401
    assert r.json() == {"error": "Invalid authentication"}
    assert mail.queries == []


def test_extract_persists_and_reports(client, auth, tokens_seen):
    r = client.post(
        "/extract-gmail-jobs",
        json={"accessToken": "g-token", "sources": ["general"]},
        headers=auth,
    )

    assert r.status_code == 200
    body = r.json()
    assert body["message"] == "Successfully extracted job opportunities"
    assert body["count"] == 1
    job = body["jobs"][0]
    assert job["job_title"] == "Senior Backend Engineer"
    assert job["company_name"] == "Acme Corp"
    assert job["job_link"] == "https://acme.com/careers/123"
    assert tokens_seen == ["g-token"]

    listed = client.get("/job-opportunities", headers=auth).json()["jobs"]
    assert [j["id"] for j in listed] == [job["id"]]


def test_extract_with_no_matches(client, auth):
    r = client.post(
        "/extract-gmail-jobs",
        json={"accessToken": "g-token", "sources": ["linkedin"]},
        headers=auth,
    )
    assert r.status_code == 200
    assert r.json()["count"] == 0
    assert r.json()["jobs"] == []


def test_extract_persistence_failure(client, auth, store, monkeypatch):
    def fail(user_id, results):
        raise PersistenceError("Failed to save job opportunities")

    monkeypatch.setattr(store, "insert_job_opportunities", fail)
    r = client.post(
        "/extract-gmail-jobs",
        json={"accessToken": "g-token", "sources": ["general"]},
        headers=auth,
    )
    assert r.status_code == 500
    assert r.json() == {"error": "Failed to save job opportunities"}


def test_invalid_body_is_a_400(client, auth):
    r = client.post("/extract-gmail-jobs", json={"sources": ["general"]}, headers=auth)
    assert r.status_code == 400
    assert r.json()["error"].startswith("Invalid request")


def test_generate_documents(client, auth, store, user, generator):
    user_id, _ = user
    store.save_profile(user_id, SAMPLE_PROFILE)

    r = client.post("/generate-application-documents", json={"jobData": JOB_DATA}, headers=auth)

    assert r.status_code == 200
    assert r.json() == {
        "coverLetterPdf": "generated cover_letter",
        "cvPdf": "generated cv",
        "keywords": ["react", "aws"],
    }
    assert "Name: Jane Doe" in generator.prompt_for("cover_letter")


def test_generate_without_api_key(store, auth, monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    client = TestClient(create_app(store=store, mail_client_factory=lambda t: FakeMail()))

    r = client.post("/generate-application-documents", json={"jobData": JOB_DATA}, headers=auth)

    assert r.status_code == 500
    assert r.json() == {"error": "OpenAI API key not configured"}


def test_generate_upstream_failure(store, auth):
    client = TestClient(create_app(
        store=store,
        mail_client_factory=lambda t: FakeMail(),
        generator=FakeGenerator(fail_on="cv"),
    ))
    r = client.post("/generate-application-documents", json={"jobData": JOB_DATA}, headers=auth)
    assert r.status_code == 502
    assert "Text generation failed" in r.json()["error"]


def test_generate_requires_job_data(client, auth):
    r = client.post("/generate-application-documents", json={"jobData": {"title": "x"}}, headers=auth)
    assert r.status_code == 400


def test_profile_endpoint(client, auth, store, user):
    user_id, _ = user
    store.save_profile(user_id, SAMPLE_PROFILE)

    body = client.get("/profile", headers=auth).json()

    assert body["personal_details"]["full_name"] == "Jane Doe"
    assert body["experiences"][0]["start_date"] == "2021-03-01"


def test_static_opportunities(client):
    everything = client.get("/opportunities").json()["opportunities"]
    assert [o["id"] for o in everything] == ["static-1", "static-2", "static-3"]
    figma = client.get("/opportunities", params={"q": "figma"}).json()["opportunities"]
    assert [o["id"] for o in figma] == ["static-3"]


def test_application_tracking(client, auth):
    created = client.post(
        "/applications",
        json={"job_title": "Backend Engineer", "company_name": "Acme Corp", "application_date": "2026-09-01"},
        headers=auth,
    )
    assert created.status_code == 201
    app_id = created.json()["id"]
    assert created.json()["status"] == "applied"

    client.post(
        "/applications",
        json={"job_title": "Analyst", "company_name": "Globex", "application_date": "2026-10-01"},
        headers=auth,
    )
    acme = client.get("/applications", params={"company": "acme"}, headers=auth).json()["applications"]
    assert [a["id"] for a in acme] == [app_id]

    patched = client.patch(f"/applications/{app_id}", json={"status": "interviewed"}, headers=auth)
    assert patched.status_code == 200
    assert patched.json()["status"] == "interviewed"

    interviewed = client.get(
        "/applications", params={"status": "interviewed"}, headers=auth,
    ).json()["applications"]
    assert [a["id"] for a in interviewed] == [app_id]


def test_application_errors(client, auth):
    assert client.patch("/applications/999", json={"status": "offered"}, headers=auth).status_code == 404
    r = client.post(
        "/applications",
        json={"job_title": "SRE", "company_name": "Hooli", "status": "ghosted"},
        headers=auth,
    )
    assert r.status_code == 400


def test_extract_closes_the_mail_client(client, auth, mail):
    client.post(
        "/extract-gmail-jobs",
        json={"accessToken": "g-token", "sources": ["general"]},
        headers=auth,
    )
    assert mail.closed


class CrashingGenerator(TextGenerator):
    def complete(self, messages, *, temperature=0.7, max_tokens=1000) -> str:
        raise RuntimeError("model backend exploded")


def test_unexpected_error_keeps_envelope_and_cors(store, auth):
    client = TestClient(create_app(
        store=store,
        mail_client_factory=lambda t: FakeMail(),
        generator=CrashingGenerator(),
    ))

    r = client.post("/generate-application-documents", json={"jobData": JOB_DATA}, headers=auth)

    assert r.status_code == 500
    assert r.json() == {"error": "model backend exploded"}
    assert r.headers["access-control-allow-origin"] == "*"


def test_database_read_failure_is_reported(client, auth, store):
    with store.engine.begin() as conn:
        conn.execute(text("DROP TABLE experiences"))

    r = client.get("/profile", headers=auth)

    assert r.status_code == 500
    assert r.json() == {"error": "Failed to load experiences"}
    assert r.headers["access-control-allow-origin"] == "*"


def test_profile_can_be_replaced_over_http(client, auth, generator):
    profile = {
        "personal_details": {"full_name": "Ada Lovelace", "email": "ada@example.com"},
        "experiences": [
            {"company_name": "Analytical Engines", "position": "Programmer",
             "start_date": "2020-01-01", "is_current": True},
        ],
        "education": [
            {"institution": "Home Tutoring", "degree": "Mathematics", "start_date": "2010-01-01",
             "end_date": "2014-01-01"},
        ],
    }

    put = client.put("/profile", json=profile, headers=auth)
    assert put.status_code == 200
    assert put.json()["personal_details"]["full_name"] == "Ada Lovelace"

    stored = client.get("/profile", headers=auth).json()
    assert stored["experiences"][0]["company_name"] == "Analytical Engines"
    assert stored["education"][0]["end_date"] == "2014-01-01"

    client.post("/generate-application-documents", json={"jobData": JOB_DATA}, headers=auth)
    letter = generator.prompt_for("cover_letter")
    assert "Name: Ada Lovelace" in letter
    assert "Programmer at Analytical Engines (2020-01-01 - Present)" in letter

    cleared = client.put("/profile", json={}, headers=auth).json()
    assert cleared == {"personal_details": None, "experiences": [], "education": []}


def test_profile_update_is_validated(client, auth):
    r = client.put("/profile", json={"experiences": [{"company_name": "Acme"}]}, headers=auth)
    assert r.status_code == 400
