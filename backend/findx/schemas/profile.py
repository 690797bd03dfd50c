from datetime import datetime
from pydantic import BaseModel, Field, field_validator
from typing import Optional
from uuid import UUID

from findx.enums import EmploymentType, Gender, JobType, Pronouns, Qualification, WorkEnvironment

EMAIL_PATTERN = r"^\S+@\S+\.\S+$"


class Relocation(BaseModel):
    class Config:
        extra = "forbid"

    preferred_location: list[str] = []
    willing_to_relocate: Optional[bool] = None
    willing_to_travel: Optional[bool] = None


class EmergencyContact(BaseModel):
    class Config:
        extra = "forbid"

    emergency_contact_number: Optional[str] = None
    emergency_contact_name: Optional[str] = None
    emergency_contact_relationship: Optional[str] = None


class ExternalLinks(BaseModel):
    class Config:
        extra = "forbid"

    personal_website_link: Optional[str] = None
    github_link: Optional[str] = None
    linkedin_link: Optional[str] = None
    twitter_link: Optional[str] = None


class Education(BaseModel):
    class Config:
        extra = "forbid"

    institute_name: Optional[str] = None
    course_name: Optional[str] = None
    description: Optional[str] = None
    year_of_graduation: Optional[str] = None
    grade: Optional[str] = None
    currently_pursuing: Optional[bool] = None


class WorkHistory(BaseModel):
    class Config:
        extra = "forbid"

    past_job_title: str
    past_company_name: str
    past_job_location: str
    past_job_start_date: datetime
    past_job_end_date: datetime
    past_employment_type: EmploymentType
    past_job_leave_reason: str
    past_job_reference_person: str
    notice_period: str


class NotInterestedCategory(BaseModel):
    category: str = Field(min_length=1)
    subcategory: str = ""


class ProfileUpdate(BaseModel):
    """
    Shape of every field PATCH /auth/user/me accepts.

    Lists and nested objects replace the stored value wholesale. work_domain
    is deliberately a plain string: catalog membership is checked by the
    domain service so the error can list the valid domains.
    """

    class Config:
        extra = "forbid"

    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    email: Optional[str] = Field(default=None, pattern=EMAIL_PATTERN, max_length=320)
    gender: Optional[Gender] = None
    preferred_pronouns: Optional[Pronouns] = None
    nationality: Optional[str] = None
    resident_country: Optional[str] = None
    known_language: Optional[list[str]] = None
    preferred_time_zone: Optional[str] = None
    highest_qualification: Optional[Qualification] = None
    achievements: Optional[list[str]] = None
    skills_and_capabilities: Optional[list[str]] = None
    resume: Optional[str] = None
    resume_downloadable: Optional[bool] = None
    cover_letter: Optional[str] = None
    dream_job_title: Optional[str] = None
    preferred_job_types: Optional[list[JobType]] = None
    work_env_preferences: Optional[list[WorkEnvironment]] = None
    relocation: Optional[Relocation] = None
    personal_branding_statement: Optional[str] = None
    hobbies: Optional[list[str]] = None
    emergency_contact_info: Optional[EmergencyContact] = None
    external_links: Optional[ExternalLinks] = None
    education: Optional[list[Education]] = None
    work_history: Optional[list[WorkHistory]] = None
    saved_jobs: Optional[list[UUID]] = None
    is_profile_completed: Optional[bool] = None
    applied_jobs: Optional[list[str]] = None
    work_domain: Optional[str] = None

    @field_validator("saved_jobs")
    @classmethod
    def dedupe_saved_jobs(cls, value: Optional[list[UUID]]) -> Optional[list[UUID]]:
        if value is None:
            return value
        return list(dict.fromkeys(value))


class SavedJobUpdate(BaseModel):
    job_id: str
    action: str


class ResumeResponse(BaseModel):
    id: str
    name: str
    url: str
    size: int
    mime_type: Optional[str] = None
    extension: str
    uploaded_at: datetime
    is_primary: bool
    is_downloadable: bool

    class Config:
        from_attributes = True


class UserResponse(BaseModel):
    """Public view of a user; secret fields are never part of it."""

    id: str
    name: str
    email: str
    is_profile_completed: bool
    gender: Optional[str] = None
    preferred_pronouns: Optional[str] = None
    nationality: Optional[str] = None
    resident_country: Optional[str] = None
    known_language: list[str] = []
    preferred_time_zone: str = "UTC"
    highest_qualification: Optional[str] = None
    achievements: list[str] = []
    skills_and_capabilities: list[str] = []
    resume: Optional[str] = None
    resume_downloadable: bool = True
    cover_letter: Optional[str] = None
    dream_job_title: Optional[str] = None
    preferred_job_types: list[str] = []
    work_env_preferences: list[str] = []
    relocation: dict = {}
    personal_branding_statement: Optional[str] = None
    hobbies: list[str] = []
    emergency_contact_info: dict = {}
    external_links: dict = {}
    education: list[dict] = []
    work_history: list[dict] = []
    saved_jobs: list[str] = []
    applied_jobs: list[str] = []
    not_interested_job_categories: list[NotInterestedCategory] = []
    work_domain: Optional[str] = None
    resumes: list[ResumeResponse] = []
    version: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class UserEnvelope(BaseModel):
    success: bool
    message: Optional[str] = None
    user: UserResponse


class UserListResponse(BaseModel):
    success: bool
    count: int
    users: list[UserResponse]


class SavedJobsResponse(BaseModel):
    success: bool
    message: str
    saved_jobs: list[str]
    user: UserResponse
