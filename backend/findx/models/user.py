"""
User Model - job seeker identity, profile and resume collection

The users table is the credential store: it holds the bcrypt password hash
and the transient password-reset code (stored hashed, cleared after use).

Profile collections and nested objects are JSON columns. They are always
written by reassigning the whole value, never mutated in place, so that
SQLAlchemy sees the change.

Optimistic concurrency:
    `version` is the mapper's version_id_col. Every UPDATE of a users row
    checks it, and a concurrent writer fails with StaleDataError instead
    of silently overwriting.
"""

import uuid

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, JSON, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from findx.database import Base


class User(Base):
    """
    Job seeker account.

    Attributes:
        email: Lower-cased, unique login identifier
        work_domain: One WorkDomain value or None; mirrored in domain_members
        resume / resume_downloadable: Legacy single-resume fields, kept for
            older clients. The resumes relationship is the source of truth.
        resume_storage_id: Blob behind the legacy field; set only by uploads
        resumes: Ordered resume entries (at most settings.max_resumes)
    """

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(200), nullable=False)
    email = Column(String(320), nullable=False, unique=True, index=True)
    password_hash = Column(String(200), nullable=False)
    password_reset_code_hash = Column(String(64), nullable=True)
    password_reset_expires_at = Column(DateTime(timezone=True), nullable=True)

    is_profile_completed = Column(Boolean, nullable=False, default=False)
    gender = Column(String(20), nullable=True)
    preferred_pronouns = Column(String(20), nullable=True)
    nationality = Column(String(100), nullable=True)
    resident_country = Column(String(100), nullable=True)
    preferred_time_zone = Column(String(64), nullable=False, default="UTC")
    highest_qualification = Column(String(32), nullable=True)
    dream_job_title = Column(String(200), nullable=True)
    personal_branding_statement = Column(Text, nullable=True)
    cover_letter = Column(Text, nullable=True)

    known_language = Column(JSON, nullable=False, default=list)
    achievements = Column(JSON, nullable=False, default=list)
    skills_and_capabilities = Column(JSON, nullable=False, default=list)
    hobbies = Column(JSON, nullable=False, default=list)
    preferred_job_types = Column(JSON, nullable=False, default=list)
    work_env_preferences = Column(JSON, nullable=False, default=list)
    education = Column(JSON, nullable=False, default=list)
    work_history = Column(JSON, nullable=False, default=list)

    relocation = Column(JSON, nullable=False, default=dict)
    emergency_contact_info = Column(JSON, nullable=False, default=dict)
    external_links = Column(JSON, nullable=False, default=dict)

    saved_jobs = Column(JSON, nullable=False, default=list)
    applied_jobs = Column(JSON, nullable=False, default=list)
    not_interested_job_categories = Column(JSON, nullable=False, default=list)

    work_domain = Column(String(100), nullable=True, index=True)

    resume = Column(String(2000), nullable=True)
    resume_storage_id = Column(String(500), nullable=True)
    resume_downloadable = Column(Boolean, nullable=False, default=True)

    version = Column(Integer, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    resumes = relationship(
        "Resume",
        back_populates="user",
        order_by="Resume.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    __mapper_args__ = {"version_id_col": version, "eager_defaults": True}


class Resume(Base):
    """
    One uploaded resume document.

    Attributes:
        url: Public download URL (always ends with the file extension)
        storage_id: Blob storage identifier used for deletion
        position: Insertion order within the user's collection
        is_primary: Default resume; at most one per user
        is_downloadable: Whether employers may download the file
    """

    __tablename__ = "resumes"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    name = Column(String(500), nullable=False)
    url = Column(String(2000), nullable=False)
    storage_id = Column(String(500), nullable=True)
    size = Column(Integer, nullable=False, default=0)
    mime_type = Column(String(200), nullable=True)
    extension = Column(String(20), nullable=False, default="")
    uploaded_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    is_primary = Column(Boolean, nullable=False, default=False)
    is_downloadable = Column(Boolean, nullable=False, default=True)
    cover_letter = Column(Text, nullable=True)
    cover_letter_updated_at = Column(DateTime(timezone=True), nullable=True)

    user = relationship("User", back_populates="resumes")
