"""
Account lifecycle: registration, login and password reset by one-time code.

Reset codes are six digits, stored only as a SHA-256 digest, and expire
after settings.reset_code_ttl_minutes. A new request overwrites any pending
code; a successful reset clears it.
"""

import hashlib
import hmac
import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from findx.auth import hash_password, issue_token, verify_password
from findx.config import get_settings
from findx.errors import DuplicateKeyError, InvalidInputError, NotFoundError, UnauthorizedError
from findx.models import User
from findx.services.users import get_user_by_email, load_user, normalize_email, user_transaction

logger = logging.getLogger(__name__)

settings = get_settings()

INVALID_CODE_MESSAGE = "Invalid or expired OTP"


def generate_reset_code() -> str:
    return f"{secrets.randbelow(1_000_000):06d}"


def hash_reset_code(code: str) -> str:
    return hashlib.sha256(code.encode("utf-8")).hexdigest()


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands timestamps back naive
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


async def register(db: AsyncSession, name: str, email: str, password: str) -> Tuple[User, str]:
    email = normalize_email(email)
    if await get_user_by_email(db, email) is not None:
        raise DuplicateKeyError("User already exists")

    user = User(name=name.strip(), email=email, password_hash=hash_password(password))
    async with user_transaction(db):
        db.add(user)

    logger.info(f"Registered user {user.id}")
    user = await load_user(db, user.id, refresh=True)
    return user, issue_token(user.id)


async def authenticate(db: AsyncSession, email: str, password: str) -> Tuple[User, str]:
    user = await get_user_by_email(db, email)
    if user is None:
        raise NotFoundError("No such user exists")

    if not verify_password(password, user.password_hash):
        raise UnauthorizedError("Invalid credentials")

    return user, issue_token(user.id)


async def get_user(db: AsyncSession, user_id: str) -> User:
    user = await load_user(db, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


async def request_password_reset(db: AsyncSession, email: str) -> str:
    """
    Issue a fresh reset code and queue the email that carries it.

    Returns the plain code so callers (and tests) can hand it on; it is never
    persisted in clear.
    """
    user = await get_user_by_email(db, email)
    if user is None:
        raise NotFoundError("No such user exists")

    code = generate_reset_code()
    async with user_transaction(db):
        user.password_reset_code_hash = hash_reset_code(code)
        user.password_reset_expires_at = datetime.now(timezone.utc) + timedelta(
            minutes=settings.reset_code_ttl_minutes
        )

    # Imported here so the API process only needs the broker when a mail is sent
    from findx.tasks.mail import send_password_reset_email

    send_password_reset_email.delay(user.email, user.name, code)
    logger.info(f"Password reset requested for user {user.id}")
    return code


async def _user_for_code(db: AsyncSession, email: str, code: str) -> User:
    user = await get_user_by_email(db, email)
    if user is None or not user.password_reset_code_hash:
        raise InvalidInputError(INVALID_CODE_MESSAGE)

    expires_at = _as_utc(user.password_reset_expires_at)
    if expires_at is None or expires_at <= datetime.now(timezone.utc):
        raise InvalidInputError(INVALID_CODE_MESSAGE)

    if not hmac.compare_digest(user.password_reset_code_hash, hash_reset_code(code)):
        raise InvalidInputError(INVALID_CODE_MESSAGE)

    return user


async def verify_reset_code(db: AsyncSession, email: str, code: str) -> None:
    await _user_for_code(db, email, code)


async def reset_password(db: AsyncSession, email: str, code: str, new_password: str) -> str:
    user = await _user_for_code(db, email, code)

    async with user_transaction(db):
        user.password_hash = hash_password(new_password)
        user.password_reset_code_hash = None
        user.password_reset_expires_at = None

    logger.info(f"Password reset for user {user.id}")
    return issue_token(user.id)


async def purge_expired_reset_codes(db: AsyncSession) -> int:
    """Clear reset codes whose expiry has passed. Returns rows touched."""
    result = await db.execute(
        update(User)
        .where(
            User.password_reset_expires_at.is_not(None),
            User.password_reset_expires_at < datetime.now(timezone.utc),
        )
        .values(password_reset_code_hash=None, password_reset_expires_at=None)
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    return result.rowcount or 0
