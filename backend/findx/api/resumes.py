from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from findx.auth import get_current_user
from findx.config import get_settings
from findx.database import get_db
from findx.errors import InvalidInputError
from findx.models import Resume, User
from findx.schemas import (
    CoverLetterResponse,
    CoverLetterUpdate,
    ResumeFileInfo,
    ResumeListResponse,
    ResumeResponse,
    ResumeUploadResponse,
    UserEnvelope,
    UserResponse,
    VisibilityUpdate,
)
from findx.services import resumes
from findx.services.resumes import ResumeUpload
from findx.services.storage import BlobStorage, get_blob_storage

router = APIRouter()

settings = get_settings()

ALLOWED_MIME_TYPES = {
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}


async def read_resume_upload(resume: Optional[UploadFile] = File(None)) -> ResumeUpload:
    """Multipart field "resume": PDF, DOC or DOCX up to settings.max_resume_size_mb."""
    if resume is None or not resume.filename:
        raise InvalidInputError("No file uploaded")

    if resume.content_type not in ALLOWED_MIME_TYPES:
        raise InvalidInputError("Invalid file type. Only PDF, DOC, and DOCX files are allowed.")

    data = await resume.read()
    if len(data) > settings.max_resume_size_mb * 1024 * 1024:
        raise InvalidInputError(f"File too large. Maximum size is {settings.max_resume_size_mb}MB.")
    if not data:
        raise InvalidInputError("Uploaded file is empty")

    return ResumeUpload(filename=resume.filename, content_type=resume.content_type, data=data)


def _upload_response(user: User, resume: Resume) -> ResumeUploadResponse:
    return ResumeUploadResponse(
        success=True,
        message="Resume uploaded successfully",
        resume_url=resume.url,
        file_info=ResumeFileInfo(
            original_name=resume.name,
            size=resume.size,
            type=resume.mime_type,
            extension=resume.extension,
        ),
        user=UserResponse.model_validate(user),
    )


# Single resume routes, kept for older clients

@router.post("/upload", response_model=ResumeUploadResponse)
async def upload_resume(
    upload: ResumeUpload = Depends(read_resume_upload),
    db: AsyncSession = Depends(get_db),
    storage: BlobStorage = Depends(get_blob_storage),
    current_user: User = Depends(get_current_user),
):
    user, resume = await resumes.add_resume(db, storage, current_user, upload)
    return _upload_response(user, resume)


@router.delete("", response_model=UserEnvelope)
async def delete_resume(
    db: AsyncSession = Depends(get_db),
    storage: BlobStorage = Depends(get_blob_storage),
    current_user: User = Depends(get_current_user),
):
    user = await resumes.delete_legacy_resume(db, storage, current_user)
    return UserEnvelope(success=True, message="Resume deleted successfully", user=UserResponse.model_validate(user))


@router.patch("/visibility", response_model=UserEnvelope)
async def update_resume_visibility(
    body: VisibilityUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    user = await resumes.set_legacy_downloadable(db, current_user, body.is_downloadable)
    return UserEnvelope(
        success=True,
        message="Resume visibility updated successfully",
        user=UserResponse.model_validate(user),
    )


# Multiple resumes

@router.post("/upload-multiple", response_model=ResumeUploadResponse)
async def upload_multiple_resume(
    upload: ResumeUpload = Depends(read_resume_upload),
    db: AsyncSession = Depends(get_db),
    storage: BlobStorage = Depends(get_blob_storage),
    current_user: User = Depends(get_current_user),
):
    user, resume = await resumes.add_resume(db, storage, current_user, upload)
    return _upload_response(user, resume)


@router.get("/list", response_model=ResumeListResponse)
async def get_resumes(current_user: User = Depends(get_current_user)):
    return ResumeListResponse(
        success=True,
        resumes=[ResumeResponse.model_validate(resume) for resume in current_user.resumes],
    )


@router.delete("/{resume_id}", response_model=UserEnvelope)
async def delete_resume_by_id(
    resume_id: str,
    db: AsyncSession = Depends(get_db),
    storage: BlobStorage = Depends(get_blob_storage),
    current_user: User = Depends(get_current_user),
):
    user = await resumes.remove_resume(db, storage, current_user, resume_id)
    return UserEnvelope(success=True, message="Resume deleted successfully", user=UserResponse.model_validate(user))


@router.patch("/{resume_id}/primary", response_model=UserEnvelope)
async def set_primary_resume(
    resume_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    user = await resumes.set_primary(db, current_user, resume_id)
    return UserEnvelope(
        success=True,
        message="Primary resume updated successfully",
        user=UserResponse.model_validate(user),
    )


@router.patch("/{resume_id}/visibility", response_model=UserEnvelope)
async def update_resume_visibility_by_id(
    resume_id: str,
    body: VisibilityUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    user = await resumes.set_downloadable(db, current_user, resume_id, body.is_downloadable)
    return UserEnvelope(
        success=True,
        message="Resume visibility updated successfully",
        user=UserResponse.model_validate(user),
    )


@router.get("/{resume_id}/cover-letter", response_model=CoverLetterResponse)
async def get_cover_letter(resume_id: str, current_user: User = Depends(get_current_user)):
    text, updated_at = resumes.get_cover_letter(current_user, resume_id)
    return CoverLetterResponse(success=True, cover_letter=text, cover_letter_updated_at=updated_at)


@router.patch("/{resume_id}/cover-letter", response_model=UserEnvelope)
async def update_cover_letter(
    resume_id: str,
    body: CoverLetterUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    user = await resumes.update_cover_letter(db, current_user, resume_id, body.cover_letter)
    return UserEnvelope(
        success=True,
        message="Cover letter updated successfully",
        user=UserResponse.model_validate(user),
    )
