"""Request bodies accepted by the HTTP API."""
from __future__ import annotations

from datetime import date
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

ApplicationStatus = Literal["applied", "interviewed", "offered", "rejected", "withdrawn"]


class ExtractRequest(BaseModel):
    accessToken: str = Field(min_length=1)
    sources: List[str] = []


class JobData(BaseModel):
    title: str
    company: str
    description: str
    skills: List[str] = []


class GenerateRequest(BaseModel):
    jobData: JobData


class ApplicationCreate(BaseModel):
    job_title: str = Field(min_length=1)
    company_name: str = Field(min_length=1)
    application_date: Optional[date] = None
    status: ApplicationStatus = "applied"
    job_url: Optional[str] = None
    notes: Optional[str] = None
    salary_range: Optional[str] = None
    location: Optional[str] = None
    application_method: Optional[str] = None
    follow_up_date: Optional[date] = None


class ApplicationStatusUpdate(BaseModel):
    status: ApplicationStatus


class PersonalDetailsIn(BaseModel):
    full_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    summary: Optional[str] = None
    profile_picture_url: Optional[str] = None


class ExperienceIn(BaseModel):
    company_name: str = Field(min_length=1)
    position: str = Field(min_length=1)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    is_current: bool = False
    description: Optional[str] = None


class EducationIn(BaseModel):
    institution: str = Field(min_length=1)
    degree: str = Field(min_length=1)
    field_of_study: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    grade: Optional[str] = None


class ProfileUpdate(BaseModel):
    """The whole profile; stored rows are replaced by these."""

    personal_details: Optional[PersonalDetailsIn] = None
    experiences: List[ExperienceIn] = []
    education: List[EducationIn] = []
