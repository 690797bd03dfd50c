import logging
from contextlib import asynccontextmanager
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy.orm.exc import StaleDataError

from findx.errors import ConflictError, DuplicateKeyError
from findx.models import User

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


@asynccontextmanager
async def user_transaction(db: AsyncSession):
    """
    Commit on success, roll back on any failure.

    Storage-level failures are translated on the way out:
        StaleDataError -> ConflictError (users.version moved underneath us)
        IntegrityError -> DuplicateKeyError (unique email)
    """
    try:
        yield
        await db.commit()
    except StaleDataError:
        await db.rollback()
        raise ConflictError()
    except IntegrityError as e:
        await db.rollback()
        logger.info(f"Integrity error: {e.orig}")
        raise DuplicateKeyError("Email is already in use")
    except Exception:
        await db.rollback()
        raise


async def load_user(db: AsyncSession, user_id: str, refresh: bool = False) -> Optional[User]:
    """
    Load a user with its resumes.

    refresh=True overwrites anything already in the session's identity map,
    which is needed after bulk UPDATE/DELETE statements on resumes.
    """
    query = select(User).options(selectinload(User.resumes)).where(User.id == user_id)
    if refresh:
        query = query.execution_options(populate_existing=True)
    result = await db.execute(query)
    return result.scalar_one_or_none()


async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    result = await db.execute(
        select(User).options(selectinload(User.resumes)).where(User.email == normalize_email(email))
    )
    return result.scalar_one_or_none()


async def list_users(db: AsyncSession) -> List[User]:
    result = await db.execute(
        select(User).options(selectinload(User.resumes)).order_by(User.created_at)
    )
    return list(result.scalars().all())
