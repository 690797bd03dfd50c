from datetime import datetime
from pydantic import BaseModel
from typing import Optional

from findx.schemas.profile import ResumeResponse, UserResponse


class VisibilityUpdate(BaseModel):
    is_downloadable: bool


class CoverLetterUpdate(BaseModel):
    cover_letter: str


class CoverLetterResponse(BaseModel):
    success: bool
    cover_letter: str
    cover_letter_updated_at: Optional[datetime] = None


class ResumeFileInfo(BaseModel):
    original_name: str
    size: int
    type: Optional[str] = None
    extension: str


class ResumeUploadResponse(BaseModel):
    success: bool
    message: str
    resume_url: str
    file_info: ResumeFileInfo
    user: UserResponse


class ResumeListResponse(BaseModel):
    success: bool
    resumes: list[ResumeResponse]
