"""Data models for profiles, job opportunities and applications."""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from typing import Any

# Sender matching tries these in order; the last one is the fallback
SOURCES: tuple[str, ...] = ("linkedin", "glassdoor", "gmail")

APPLICATION_STATUSES: tuple[str, ...] = (
    "applied", "interviewed", "offered", "rejected", "withdrawn",
)

DEFAULT_JOB_TITLE = "Job Opportunity"
DEFAULT_COMPANY_NAME = "Unknown Company"
RAW_EMAIL_LIMIT = 2000


@dataclass
class ExtractionResult:
    job_title: str
    company_name: str
    job_link: str
    source: str
    email_subject: str
    email_sender: str
    extracted_keywords: list[str] = field(default_factory=list)
    raw_email_content: str = ""


@dataclass
class JobOpportunity:
    id: int
    user_id: str
    job_title: str
    company_name: str
    job_link: str
    source: str
    email_subject: str
    email_sender: str
    extracted_keywords: list[str]
    raw_email_content: str
    created_at: datetime

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["created_at"] = self.created_at.isoformat()
        return data


@dataclass
class PersonalDetails:
    full_name: str | None = None
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    summary: str | None = None
    profile_picture_url: str | None = None


@dataclass
class Experience:
    company_name: str
    position: str
    start_date: date | None = None
    end_date: date | None = None
    is_current: bool = False
    description: str | None = None


@dataclass
class Education:
    institution: str
    degree: str
    field_of_study: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    grade: str | None = None


@dataclass
class CandidateProfile:
    personal_details: PersonalDetails | None = None
    experiences: list[Experience] = field(default_factory=list)
    education: list[Education] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return _jsonable(asdict(self))


@dataclass
class JobDescriptor:
    title: str
    company: str
    description: str
    skills: list[str] = field(default_factory=list)


@dataclass
class GeneratedDocuments:
    cover_letter: str
    cv: str
    keywords: list[str]


@dataclass
class Application:
    id: int
    user_id: str
    job_title: str
    company_name: str
    application_date: date
    status: str = "applied"
    job_url: str | None = None
    notes: str | None = None
    salary_range: str | None = None
    location: str | None = None
    application_method: str | None = None
    follow_up_date: date | None = None

    def to_dict(self) -> dict[str, Any]:
        return _jsonable(asdict(self))


@dataclass
class Opportunity:
    id: str
    title: str
    company: str
    location: str
    type: str
    salary: str
    posted: str
    description: str
    skills: list[str] = field(default_factory=list)


def _jsonable(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_jsonable(v) for v in value]
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value
