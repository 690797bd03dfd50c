"""
Resume Collection Manager

Per-user list of uploaded resumes, capped at settings.max_resumes, with one
primary entry and an independent download flag on each entry.

The legacy single-resume fields (User.resume, User.resume_downloadable)
mirror the most recent upload so older clients keep working; the resumes
table is the source of truth.

Blob deletes are best-effort everywhere: a storage failure is logged and
counted but never fails the caller's operation. Uploads are not: a failed
upload aborts before anything is written.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Tuple

from sqlalchemy import case, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from findx.config import get_settings
from findx.errors import ExternalServiceError, InvalidInputError, LimitExceededError, NotFoundError
from findx.middleware.metrics import record_blob_delete_failure, record_resume_upload
from findx.models import Resume, User
from findx.services.storage import BlobStorage
from findx.services.users import load_user, user_transaction

logger = logging.getLogger(__name__)

settings = get_settings()


@dataclass
class ResumeUpload:
    filename: str
    content_type: Optional[str]
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


def file_extension(filename: str) -> str:
    """Lower-cased extension without the dot; "" when the name has none."""
    name = filename.rsplit("/", 1)[-1]
    if "." not in name:
        return ""
    return name.rsplit(".", 1)[1].lower()


def ensure_extension_in_url(url: str, extension: str) -> str:
    """Raw uploads come back without an extension, which breaks downloads."""
    last = url.rpartition("/")[2]
    if not extension or last.lower().endswith(f".{extension}"):
        return url
    return f"{url}.{extension}"


def _limit_message() -> str:
    return (
        f"Maximum limit of {settings.max_resumes} resumes reached. "
        "Please delete some resumes before uploading a new one."
    )


def _find_resume(user: User, resume_id: str) -> Resume:
    for resume in user.resumes:
        if resume.id == resume_id:
            return resume
    raise NotFoundError("Resume not found")


async def _discard_blob(storage: BlobStorage, storage_id: Optional[str]) -> None:
    if not storage_id:
        return

    try:
        deleted = await storage.delete(storage_id, kind="raw")
    except ExternalServiceError as e:
        logger.warning(f"Could not delete blob {storage_id}: {e.message}")
        record_blob_delete_failure()
        return

    if not deleted:
        logger.warning(f"Blob store did not delete {storage_id}")
        record_blob_delete_failure()


def _legacy_only_storage_id(user: User) -> Optional[str]:
    """Blob uploaded for the legacy field, unless a list entry still uses it."""
    if not user.resume_storage_id:
        return None
    if any(resume.storage_id == user.resume_storage_id for resume in user.resumes):
        return None
    return user.resume_storage_id


async def add_resume(
    db: AsyncSession,
    storage: BlobStorage,
    user: User,
    upload: ResumeUpload,
) -> Tuple[User, Resume]:
    """
    Upload a file and append it to the user's resumes.

    The first resume ever added becomes primary. The legacy mirror is pointed
    at the new URL and any blob only the legacy field referenced is removed.

    Raises:
        LimitExceededError: the user already holds settings.max_resumes entries
        ExternalServiceError: the blob store rejected the upload
    """
    if len(user.resumes) >= settings.max_resumes:
        record_resume_upload("rejected")
        raise LimitExceededError(_limit_message())

    await _discard_blob(storage, _legacy_only_storage_id(user))

    extension = file_extension(upload.filename)
    logger.info(
        f"Uploading resume {upload.filename} ({upload.size} bytes, {upload.content_type}) for user {user.id}"
    )
    try:
        blob = await storage.upload(upload.data, upload.filename, kind="raw")
    except ExternalServiceError:
        record_resume_upload("failed")
        raise

    url = ensure_extension_in_url(blob.url, extension)
    resume = Resume(
        user_id=user.id,
        position=max((r.position for r in user.resumes), default=-1) + 1,
        name=upload.filename,
        url=url,
        storage_id=blob.storage_id,
        size=upload.size,
        mime_type=upload.content_type,
        extension=extension,
        uploaded_at=datetime.now(timezone.utc),
        is_primary=not user.resumes,
        is_downloadable=True,
    )

    try:
        async with user_transaction(db):
            user.resumes.append(resume)
            user.resume = url
            user.resume_storage_id = blob.storage_id
            await db.flush()

            count = await db.scalar(
                select(func.count()).select_from(Resume).where(Resume.user_id == user.id)
            )
            if count > settings.max_resumes:
                raise LimitExceededError(_limit_message())
    except Exception:
        record_resume_upload("failed")
        await _discard_blob(storage, blob.storage_id)
        raise

    record_resume_upload("success")
    user = await load_user(db, user.id, refresh=True)
    return user, _find_resume(user, resume.id)


async def remove_resume(db: AsyncSession, storage: BlobStorage, user: User, resume_id: str) -> User:
    """
    Delete one resume and its blob.

    A removed primary is not replaced; the user picks a new one explicitly.
    """
    resume = _find_resume(user, resume_id)

    await _discard_blob(storage, resume.storage_id or storage.storage_id_from_url(resume.url))

    async with user_transaction(db):
        if user.resume == resume.url:
            user.resume = None
        if user.resume_storage_id == resume.storage_id:
            user.resume_storage_id = None
        user.resumes.remove(resume)

    logger.info(f"Removed resume {resume_id} for user {user.id}")
    return await load_user(db, user.id, refresh=True)


async def set_primary(db: AsyncSession, user: User, resume_id: str) -> User:
    _find_resume(user, resume_id)

    # One statement flips every row, so there is never zero or two primaries.
    async with user_transaction(db):
        await db.execute(
            update(Resume)
            .where(Resume.user_id == user.id)
            .values(is_primary=case((Resume.id == resume_id, True), else_=False))
            .execution_options(synchronize_session=False)
        )

    return await load_user(db, user.id, refresh=True)


async def set_downloadable(db: AsyncSession, user: User, resume_id: str, flag: bool) -> User:
    resume = _find_resume(user, resume_id)

    async with user_transaction(db):
        resume.is_downloadable = flag

    return await load_user(db, user.id, refresh=True)


async def update_cover_letter(db: AsyncSession, user: User, resume_id: str, text: Optional[str]) -> User:
    if not isinstance(text, str) or not text.strip():
        raise InvalidInputError("Cover letter content is required and must be a string")

    resume = _find_resume(user, resume_id)

    async with user_transaction(db):
        resume.cover_letter = text
        resume.cover_letter_updated_at = datetime.now(timezone.utc)

    return await load_user(db, user.id, refresh=True)


def get_cover_letter(user: User, resume_id: str) -> Tuple[str, Optional[datetime]]:
    resume = _find_resume(user, resume_id)
    return resume.cover_letter or "", resume.cover_letter_updated_at


async def delete_legacy_resume(db: AsyncSession, storage: BlobStorage, user: User) -> User:
    """Clear the legacy resume field; its blob goes too unless a list entry shares it."""
    await _discard_blob(storage, _legacy_only_storage_id(user))

    async with user_transaction(db):
        user.resume = None
        user.resume_storage_id = None

    return await load_user(db, user.id, refresh=True)


async def set_legacy_downloadable(db: AsyncSession, user: User, flag: bool) -> User:
    async with user_transaction(db):
        user.resume_downloadable = flag

    return await load_user(db, user.id, refresh=True)
