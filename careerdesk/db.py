"""SQLAlchemy tables and engine/session factory."""
from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    create_engine,
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from careerdesk.config import DEFAULT_DATABASE_URL, database_url, ensure_dirs
from careerdesk.log import get_logger

log = get_logger(__name__)

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True)
    email = Column(String, unique=True, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow)


class SessionToken(Base):
    __tablename__ = "session_tokens"

    token = Column(String, primary_key=True)
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow)


class PersonalDetailsRow(Base):
    __tablename__ = "personal_details"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, ForeignKey("users.id"), unique=True, nullable=False)
    full_name = Column(String)
    email = Column(String)
    phone = Column(String)
    address = Column(String)
    summary = Column(Text)
    profile_picture_url = Column(String)


class ExperienceRow(Base):
    __tablename__ = "experiences"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    company_name = Column(String, nullable=False)
    position = Column(String, nullable=False)
    start_date = Column(Date)
    end_date = Column(Date)
    is_current = Column(Boolean, default=False)
    description = Column(Text)


class EducationRow(Base):
    __tablename__ = "education"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    institution = Column(String, nullable=False)
    degree = Column(String, nullable=False)
    field_of_study = Column(String)
    start_date = Column(Date)
    end_date = Column(Date)
    grade = Column(String)


class JobOpportunityRow(Base):
    __tablename__ = "job_opportunities"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    job_title = Column(String, nullable=False)
    company_name = Column(String, nullable=False)
    job_link = Column(String, default="")
    source = Column(String, nullable=False)
    email_subject = Column(String, default="")
    email_sender = Column(String, default="")
    extracted_keywords = Column(JSON, default=list)
    raw_email_content = Column(Text, default="")
    created_at = Column(DateTime(timezone=True), default=_utcnow)


class ApplicationRow(Base):
    __tablename__ = "applications"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    job_title = Column(String, nullable=False)
    company_name = Column(String, nullable=False)
    application_date = Column(Date, nullable=False)
    status = Column(String, nullable=False, default="applied")
    job_url = Column(String)
    notes = Column(Text)
    salary_range = Column(String)
    location = Column(String)
    application_method = Column(String)
    follow_up_date = Column(Date)


def make_engine(url: str | None = None) -> Engine:
    url = url or database_url()
    if url == DEFAULT_DATABASE_URL:
        ensure_dirs()
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    engine = create_engine(url, pool_pre_ping=True, connect_args=connect_args)
    Base.metadata.create_all(engine)
    log.debug("Database ready (%s)", engine.url.render_as_string(hide_password=True))
    return engine


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(engine, expire_on_commit=False)
