from __future__ import annotations

import base64
import os

os.environ.setdefault("LOG_TO_FILE", "false")
os.environ.pop("OPENAI_API_KEY", None)

import pytest

from careerdesk.db import make_engine
from careerdesk.errors import UpstreamServiceError
from careerdesk.generation import TextGenerator
from careerdesk.mail.base import MailClient
from careerdesk.store import Store


def b64url(text: str) -> str:
    return base64.urlsafe_b64encode(text.encode("utf-8")).decode("ascii").rstrip("=")


def make_message(body: str, subject: str = "", sender: str = "", *, multipart: bool = False) -> dict:
    headers = [{"name": "Subject", "value": subject}, {"name": "From", "value": sender}]
    if multipart:
        payload = {
            "headers": headers,
            "mimeType": "multipart/alternative",
            "body": {"size": 0},
            "parts": [
                {"mimeType": "text/plain", "body": {"data": b64url(body)}},
                {"mimeType": "text/html", "body": {"data": b64url(f"<p>{body}</p>")}},
            ],
        }
    else:
        payload = {"headers": headers, "mimeType": "text/plain", "body": {"data": b64url(body)}}
    return {"id": "m", "payload": payload}


class FakeMail(MailClient):
    """Answers searches by source keyword found in the query."""

    def __init__(self, results: dict[str, list[str]] | None = None, messages: dict[str, dict] | None = None,
                 broken: set[str] | None = None, failing_sources: set[str] | None = None) -> None:
        self.results = results or {}
        self.messages = messages or {}
        self.broken = broken or set()
        self.failing_sources = failing_sources or set()
        self.queries: list[tuple[str, int]] = []
        self.fetched: list[str] = []
        self.closed = False

    def _source_of(self, query: str) -> str:
        if "linkedin" in query:
            return "linkedin"
        if "glassdoor" in query:
            return "glassdoor"
        return "general"

    def search(self, query: str, max_results: int = 50) -> list[str]:
        self.queries.append((query, max_results))
        source = self._source_of(query)
        if source in self.failing_sources:
            raise UpstreamServiceError("Gmail API returned 500")
        return list(self.results.get(source, []))[:max_results]

    def get_message(self, message_id: str) -> dict:
        self.fetched.append(message_id)
        if message_id in self.broken:
            raise UpstreamServiceError("Gmail API returned 404")
        return self.messages[message_id]

    def close(self) -> None:
        self.closed = True


class FakeGenerator(TextGenerator):
    def __init__(self, fail_on: str | None = None) -> None:
        self.fail_on = fail_on
        self.calls: list[dict] = []

    def complete(self, messages, *, temperature=0.7, max_tokens=1000) -> str:
        self.calls.append({"messages": messages, "temperature": temperature, "max_tokens": max_tokens})
        prompt = messages[-1]["content"]
        kind = "cv" if prompt.startswith("Generate a professional CV") else "cover_letter"
        if kind == self.fail_on:
            raise UpstreamServiceError("Text generation failed: boom")
        return f"generated {kind}"

    def prompt_for(self, kind: str) -> str:
        marker = "Generate a professional CV" if kind == "cv" else "Generate a professional cover letter"
        for call in self.calls:
            if call["messages"][-1]["content"].startswith(marker):
                return call["messages"][-1]["content"]
        raise AssertionError(f"no {kind} prompt sent")


@pytest.fixture
def store(tmp_path) -> Store:
    return Store(make_engine(f"sqlite:///{tmp_path / 'test.db'}"))


@pytest.fixture
def user(store) -> tuple[str, str]:
    user_id = store.create_user("jane@example.com")
    return user_id, store.issue_token(user_id)


SAMPLE_PROFILE = {
    "personal_details": {
        "full_name": "Jane Doe",
        "email": "jane.doe@example.com",
        "phone": "+1 555 0100",
        "address": "Berlin",
        "summary": "Backend engineer.",
    },
    "experiences": [
        {"company_name": "Initech", "position": "Software Engineer",
         "start_date": "2017-09-01", "end_date": "2021-02-28", "description": "REST APIs"},
        {"company_name": "Acme Corp", "position": "Senior Backend Engineer",
         "start_date": "2021-03-01", "end_date": None, "is_current": True, "description": "Pipelines on AWS"},
    ],
    "education": [
        {"institution": "TU Berlin", "degree": "MSc", "field_of_study": "Computer Science",
         "start_date": "2015-10-01", "end_date": "2017-07-31", "grade": "1.3"},
        {"institution": "Uni Potsdam", "degree": "BSc",
         "start_date": "2012-10-01", "end_date": "2015-07-31"},
    ],
}
