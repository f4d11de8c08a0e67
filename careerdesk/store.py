"""Persist users, profiles, extracted job opportunities and tracked applications."""
from __future__ import annotations

import secrets
import uuid
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from datetime import date
from typing import Any, Iterable, Iterator

from sqlalchemy import delete, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from careerdesk.db import (
    ApplicationRow,
    EducationRow,
    ExperienceRow,
    JobOpportunityRow,
    PersonalDetailsRow,
    SessionToken,
    User,
    make_engine,
    make_session_factory,
)
from careerdesk.errors import NotFoundError, PersistenceError
from careerdesk.log import get_logger
from careerdesk.models import (
    APPLICATION_STATUSES,
    Application,
    CandidateProfile,
    Education,
    ExtractionResult,
    Experience,
    JobOpportunity,
    PersonalDetails,
)

log = get_logger(__name__)

_PERSONAL_FIELDS = ("full_name", "email", "phone", "address", "summary", "profile_picture_url")


def _to_date(value: Any) -> date | None:
    if value in (None, ""):
        return None
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value).strip())


class Store:
    """Row access for one database; safe to share across request threads."""

    def __init__(self, engine: Engine | None = None) -> None:
        self.engine = engine or make_engine()
        self._session = make_session_factory(self.engine)

    @contextmanager
    def _db(self, action: str) -> Iterator[Session]:
        """A session whose database errors surface as PersistenceError."""
        try:
            with self._session() as s:
                yield s
        except SQLAlchemyError as exc:
            log.error("Database error while trying to %s: %s", action, exc)
            raise PersistenceError(f"Failed to {action}") from exc

    # ── Users and session tokens ─────────────────────────────────────────

    def create_user(self, email: str) -> str:
        user_id = str(uuid.uuid4())
        with self._db("save user") as s:
            s.add(User(id=user_id, email=email.strip().lower()))
            s.commit()
        log.info("Created user %s (%s)", user_id, email)
        return user_id

    def find_user(self, email: str) -> str | None:
        with self._db("load user") as s:
            return s.scalar(select(User.id).where(User.email == email.strip().lower()))

    def issue_token(self, user_id: str) -> str:
        token = secrets.token_urlsafe(32)
        with self._db("save session token") as s:
            s.add(SessionToken(token=token, user_id=user_id))
            s.commit()
        return token

    def resolve_token(self, token: str) -> str | None:
        if not token:
            return None
        with self._db("check session token") as s:
            return s.scalar(
                select(SessionToken.user_id)
                .join(User, User.id == SessionToken.user_id)
                .where(SessionToken.token == token)
            )

    # ── Profile ──────────────────────────────────────────────────────────

    def save_profile(self, user_id: str, profile: dict[str, Any]) -> None:
        """Replace the stored profile with *profile* (the YAML file layout)."""
        personal = profile.get("personal_details") or None
        try:
            with self._session.begin() as s:
                for model in (PersonalDetailsRow, ExperienceRow, EducationRow):
                    s.execute(delete(model).where(model.user_id == user_id))
                if personal:
                    s.add(PersonalDetailsRow(
                        user_id=user_id,
                        **{k: personal.get(k) for k in _PERSONAL_FIELDS},
                    ))
                for exp in profile.get("experiences", []):
                    s.add(ExperienceRow(
                        user_id=user_id,
                        company_name=exp["company_name"],
                        position=exp["position"],
                        start_date=_to_date(exp.get("start_date")),
                        end_date=_to_date(exp.get("end_date")),
                        is_current=bool(exp.get("is_current", False)),
                        description=exp.get("description"),
                    ))
                for edu in profile.get("education", []):
                    s.add(EducationRow(
                        user_id=user_id,
                        institution=edu["institution"],
                        degree=edu["degree"],
                        field_of_study=edu.get("field_of_study"),
                        start_date=_to_date(edu.get("start_date")),
                        end_date=_to_date(edu.get("end_date")),
                        grade=edu.get("grade"),
                    ))
        except SQLAlchemyError as exc:
            log.error("Profile save failed for %s: %s", user_id, exc)
            raise PersistenceError("Failed to save profile") from exc
        log.info(
            "Saved profile for %s: %d experience(s), %d education entr(ies)",
            user_id, len(profile.get("experiences", [])), len(profile.get("education", [])),
        )

    def get_personal_details(self, user_id: str) -> PersonalDetails | None:
        with self._db("load personal details") as s:
            row = s.scalars(
                select(PersonalDetailsRow).where(PersonalDetailsRow.user_id == user_id)
            ).first()
        if row is None:
            return None
        return PersonalDetails(**{k: getattr(row, k) for k in _PERSONAL_FIELDS})

    def list_experiences(self, user_id: str) -> list[Experience]:
        with self._db("load experiences") as s:
            rows = s.scalars(
                select(ExperienceRow)
                .where(ExperienceRow.user_id == user_id)
                .order_by(ExperienceRow.start_date.desc(), ExperienceRow.id)
            ).all()
        return [
            Experience(
                company_name=r.company_name,
                position=r.position,
                start_date=r.start_date,
                end_date=r.end_date,
                is_current=bool(r.is_current),
                description=r.description,
            )
            for r in rows
        ]

    def list_education(self, user_id: str) -> list[Education]:
        with self._db("load education") as s:
            rows = s.scalars(
                select(EducationRow)
                .where(EducationRow.user_id == user_id)
                .order_by(EducationRow.start_date.desc(), EducationRow.id)
            ).all()
        return [
            Education(
                institution=r.institution,
                degree=r.degree,
                field_of_study=r.field_of_study,
                start_date=r.start_date,
                end_date=r.end_date,
                grade=r.grade,
            )
            for r in rows
        ]

    def load_profile(self, user_id: str) -> CandidateProfile:
        """Run the three profile queries in parallel and join them."""
        with ThreadPoolExecutor(max_workers=3) as pool:
            personal = pool.submit(self.get_personal_details, user_id)
            experiences = pool.submit(self.list_experiences, user_id)
            education = pool.submit(self.list_education, user_id)
            return CandidateProfile(
                personal_details=personal.result(),
                experiences=experiences.result(),
                education=education.result(),
            )

    # ── Job opportunities ────────────────────────────────────────────────

    def insert_job_opportunities(
        self, user_id: str, results: Iterable[ExtractionResult],
    ) -> list[JobOpportunity]:
        """Insert all *results* in one transaction; nothing is kept on failure."""
        rows = [
            JobOpportunityRow(
                user_id=user_id,
                job_title=r.job_title,
                company_name=r.company_name,
                job_link=r.job_link,
                source=r.source,
                email_subject=r.email_subject,
                email_sender=r.email_sender,
                extracted_keywords=list(r.extracted_keywords),
                raw_email_content=r.raw_email_content,
            )
            for r in results
        ]
        if not rows:
            return []
        try:
            with self._session.begin() as s:
                s.add_all(rows)
        except SQLAlchemyError as exc:
            log.error("Database error saving %d job opportunities: %s", len(rows), exc)
            raise PersistenceError("Failed to save job opportunities") from exc
        log.info("Saved %d job opportunities for %s", len(rows), user_id)
        return [_job_from_row(r) for r in rows]

    def list_job_opportunities(self, user_id: str) -> list[JobOpportunity]:
        with self._db("load job opportunities") as s:
            rows = s.scalars(
                select(JobOpportunityRow)
                .where(JobOpportunityRow.user_id == user_id)
                .order_by(JobOpportunityRow.created_at.desc(), JobOpportunityRow.id.desc())
            ).all()
        return [_job_from_row(r) for r in rows]

    # ── Applications ─────────────────────────────────────────────────────

    def record_application(
        self,
        user_id: str,
        *,
        job_title: str,
        company_name: str,
        application_date: date | None = None,
        status: str = "applied",
        **extra: Any,
    ) -> Application:
        if status not in APPLICATION_STATUSES:
            raise ValueError(f"Unknown application status: {status}")
        row = ApplicationRow(
            user_id=user_id,
            job_title=job_title,
            company_name=company_name,
            application_date=application_date or date.today(),
            status=status,
            job_url=extra.get("job_url"),
            notes=extra.get("notes"),
            salary_range=extra.get("salary_range"),
            location=extra.get("location"),
            application_method=extra.get("application_method"),
            follow_up_date=_to_date(extra.get("follow_up_date")),
        )
        try:
            with self._session.begin() as s:
                s.add(row)
        except SQLAlchemyError as exc:
            log.error("Failed to record application %s @ %s: %s", job_title, company_name, exc)
            raise PersistenceError("Failed to save application") from exc
        log.debug("Tracked: %s @ %s [%s]", job_title, company_name, status)
        return _application_from_row(row)

    def list_applications(
        self,
        user_id: str,
        *,
        company: str | None = None,
        status: str | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> list[Application]:
        stmt = select(ApplicationRow).where(ApplicationRow.user_id == user_id)
        if company:
            stmt = stmt.where(ApplicationRow.company_name.ilike(f"%{company}%"))
        if status:
            stmt = stmt.where(ApplicationRow.status == status)
        if start_date:
            stmt = stmt.where(ApplicationRow.application_date >= start_date)
        if end_date:
            stmt = stmt.where(ApplicationRow.application_date <= end_date)
        stmt = stmt.order_by(ApplicationRow.application_date.desc(), ApplicationRow.id.desc())
        with self._db("load applications") as s:
            rows = s.scalars(stmt).all()
        return [_application_from_row(r) for r in rows]

    def update_application_status(self, user_id: str, application_id: int, status: str) -> Application:
        """Update status of an existing application (e.g. applied -> interviewed)."""
        if status not in APPLICATION_STATUSES:
            raise ValueError(f"Unknown application status: {status}")
        with self._db("update application") as s, s.begin():
            row = s.scalars(
                select(ApplicationRow).where(
                    ApplicationRow.id == application_id,
                    ApplicationRow.user_id == user_id,
                )
            ).first()
            if row is None:
                raise NotFoundError(f"Application {application_id} not found")
            row.status = status
        log.debug("Updated application %s → %s", application_id, status)
        return _application_from_row(row)


def _job_from_row(r: JobOpportunityRow) -> JobOpportunity:
    return JobOpportunity(
        id=r.id,
        user_id=r.user_id,
        job_title=r.job_title,
        company_name=r.company_name,
        job_link=r.job_link or "",
        source=r.source,
        email_subject=r.email_subject or "",
        email_sender=r.email_sender or "",
        extracted_keywords=list(r.extracted_keywords or []),
        raw_email_content=r.raw_email_content or "",
        created_at=r.created_at,
    )


def _application_from_row(r: ApplicationRow) -> Application:
    return Application(
        id=r.id,
        user_id=r.user_id,
        job_title=r.job_title,
        company_name=r.company_name,
        application_date=r.application_date,
        status=r.status,
        job_url=r.job_url,
        notes=r.notes,
        salary_range=r.salary_range,
        location=r.location,
        application_method=r.application_method,
        follow_up_date=r.follow_up_date,
    )
