"""
Profile Field Updater

apply_update() takes a flat {field: value} mapping from PATCH /auth/user/me.
Everything is validated before anything is written:

    1. every key must be in ALLOWED_FIELDS (one error names all bad keys)
    2. values must match ProfileUpdate (types, enums, nested shapes)
    3. work_domain must be in the catalog
    4. If-Match version, when given, must match users.version
    5. a changed email must not belong to another user

List and object fields are replaced wholesale. work_domain goes through the
domain service so the registry moves in the same transaction.
"""

import logging
import uuid
from typing import Any, Dict, List, Optional

from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from findx.errors import (
    ConflictError,
    DuplicateKeyError,
    ForbiddenError,
    InvalidInputError,
    NotFoundError,
    ProfileValidationError,
    UnknownFieldError,
)
from findx.models import User
from findx.schemas.profile import NotInterestedCategory, ProfileUpdate
from findx.services.domains import parse_domain, replace_member_email, set_user_domain
from findx.services.users import get_user_by_email, load_user, normalize_email, user_transaction

logger = logging.getLogger(__name__)

ALLOWED_FIELDS = frozenset(ProfileUpdate.model_fields)

# Columns that may be changed but never cleared
NON_NULLABLE_FIELDS = frozenset(
    column.name for column in User.__table__.columns if not column.nullable
) & ALLOWED_FIELDS

SAVED_JOB_ACTIONS = ("add", "remove")


def _validation_errors(exc: ValidationError) -> List[Dict[str, Any]]:
    return [
        {"loc": list(error["loc"]), "msg": error["msg"], "type": error["type"]}
        for error in exc.errors()
    ]


def validate_profile_fields(fields: Dict[str, Any]) -> Dict[str, Any]:
    """Check a raw update and return the JSON-ready values to write."""
    unknown = set(fields) - ALLOWED_FIELDS
    if unknown:
        raise UnknownFieldError(unknown, ALLOWED_FIELDS)

    try:
        update = ProfileUpdate.model_validate(fields)
    except ValidationError as e:
        raise ProfileValidationError(_validation_errors(e))

    values = update.model_dump(exclude_unset=True, mode="json")

    nulls = sorted(key for key in NON_NULLABLE_FIELDS if key in values and values[key] is None)
    if nulls:
        raise ProfileValidationError(
            [{"loc": [key], "msg": "Field cannot be null", "type": "null_not_allowed"} for key in nulls]
        )

    if "work_domain" in values:
        parse_domain(values["work_domain"])

    if values.get("email"):
        values["email"] = normalize_email(values["email"])

    return values


async def apply_update(
    db: AsyncSession,
    user: User,
    fields: Dict[str, Any],
    expected_version: Optional[int] = None,
) -> User:
    """
    Write an allow-listed set of profile fields in one transaction.

    Raises:
        UnknownFieldError: a key outside ALLOWED_FIELDS; nothing is written
        ProfileValidationError: a value has the wrong shape or enum
        InvalidDomainError: work_domain is not in the catalog
        ConflictError: the row changed since the caller read it
        DuplicateKeyError: the new email belongs to someone else
    """
    values = validate_profile_fields(fields)

    if expected_version is not None and expected_version != user.version:
        raise ConflictError()

    old_email = user.email
    new_email = values.get("email", old_email)
    if new_email != old_email and await get_user_by_email(db, new_email) is not None:
        raise DuplicateKeyError("Email is already in use")

    new_domain = values.pop("work_domain", None)
    domain_requested = "work_domain" in fields

    async with user_transaction(db):
        for key, value in values.items():
            setattr(user, key, value)

        if new_email != old_email and user.work_domain:
            await replace_member_email(db, user.work_domain, old_email, new_email)

        if domain_requested:
            await set_user_domain(db, user, new_domain, commit=False)

    logger.info(f"Updated profile fields {sorted(fields)} for user {user.id}")
    return await load_user(db, user.id, refresh=True)


async def update_saved_jobs(
    db: AsyncSession,
    actor: User,
    user_id: str,
    job_id: str,
    action: str,
) -> User:
    """Add or remove one job id; adding twice or removing a missing id is a no-op."""
    if actor.id != user_id:
        raise ForbiddenError("You're not authorized to update this user's saved jobs")

    try:
        job_id = str(uuid.UUID(job_id))
    except (TypeError, ValueError):
        raise InvalidInputError("Invalid job ID")

    if action not in SAVED_JOB_ACTIONS:
        raise InvalidInputError("Action must be 'add' or 'remove'")

    user = await load_user(db, user_id)
    if user is None:
        raise NotFoundError("User not found")

    saved = list(user.saved_jobs or [])
    if action == "add" and job_id not in saved:
        saved.append(job_id)
    elif action == "remove":
        saved = [saved_id for saved_id in saved if saved_id != job_id]

    if saved != (user.saved_jobs or []):
        async with user_transaction(db):
            user.saved_jobs = saved
        user = await load_user(db, user_id, refresh=True)

    return user


async def add_not_interested_category(db: AsyncSession, user: User, category: NotInterestedCategory) -> User:
    entry = category.model_dump()
    current = list(user.not_interested_job_categories or [])
    if entry in current:
        return user

    async with user_transaction(db):
        user.not_interested_job_categories = current + [entry]

    return await load_user(db, user.id, refresh=True)


async def remove_not_interested_category(db: AsyncSession, user: User, category: NotInterestedCategory) -> User:
    entry = category.model_dump()
    current = list(user.not_interested_job_categories or [])
    if entry not in current:
        return user

    async with user_transaction(db):
        user.not_interested_job_categories = [item for item in current if item != entry]

    return await load_user(db, user.id, refresh=True)
