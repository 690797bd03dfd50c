"""
Domain Membership Synchronizer

Keeps User.work_domain and the domain_members reverse index consistent:
for every user U with work_domain D, U.email is a member of D and of no
other domain.

A domain change is a single transaction containing, in order:
    1. the users row update
    2. removal of the email from the previous domain (idempotent)
    3. upsert of the target catalog row and add-to-set of the email

rebuild_registry() recomputes the whole index from users.work_domain. The
scheduler runs it periodically to repair drift from out-of-band edits.
"""

import logging
from typing import Dict, List, Optional, Set, Tuple

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from findx.enums import WorkDomain
from findx.errors import InvalidDomainError, NotFoundError
from findx.middleware.metrics import record_domain_change
from findx.models import Domain, DomainMember, User
from findx.services.users import load_user, user_transaction

logger = logging.getLogger(__name__)


def parse_domain(value: Optional[str]) -> WorkDomain:
    """Return the catalog entry for value or raise InvalidDomainError listing the catalog."""
    try:
        return WorkDomain(value)
    except ValueError:
        raise InvalidDomainError(valid_domains=WorkDomain.names())


async def _ensure_domain(db: AsyncSession, name: str) -> None:
    existing = await db.get(Domain, name)
    if existing is None:
        db.add(Domain(name=name))
        await db.flush()


async def _remove_member(db: AsyncSession, name: str, email: str) -> None:
    await db.execute(
        delete(DomainMember).where(
            DomainMember.domain_name == name,
            DomainMember.email == email,
        )
    )


async def _add_member(db: AsyncSession, name: str, email: str) -> None:
    await _ensure_domain(db, name)
    existing = await db.get(DomainMember, (name, email))
    if existing is None:
        db.add(DomainMember(domain_name=name, email=email))
        await db.flush()


async def _move_user(db: AsyncSession, user: User, previous: Optional[str], domain: str) -> None:
    user.work_domain = domain

    if previous:
        await _remove_member(db, previous, user.email)
    await _add_member(db, domain, user.email)


async def seed_domains(db: AsyncSession) -> int:
    """Upsert a catalog row for every WorkDomain. Returns how many were created."""
    result = await db.execute(select(Domain.name))
    existing = set(result.scalars().all())

    created = 0
    for name in WorkDomain.names():
        if name not in existing:
            db.add(Domain(name=name))
            created += 1

    await db.commit()
    if created:
        logger.info(f"Seeded {created} work domains")
    return created


async def list_domains(db: AsyncSession) -> List[Tuple[str, int]]:
    result = await db.execute(
        select(Domain.name, func.count(DomainMember.email))
        .outerjoin(DomainMember, DomainMember.domain_name == Domain.name)
        .group_by(Domain.name)
        .order_by(Domain.name)
    )
    return [(row[0], row[1]) for row in result.all()]


async def get_domain_members(db: AsyncSession, name: str) -> List[str]:
    domain = parse_domain(name)
    if await db.get(Domain, domain.value) is None:
        raise NotFoundError("Domain not found")

    result = await db.execute(
        select(DomainMember.email)
        .where(DomainMember.domain_name == domain.value)
        .order_by(DomainMember.email)
    )
    return list(result.scalars().all())


async def set_user_domain(
    db: AsyncSession,
    user: User,
    new_domain: Optional[str],
    commit: bool = True,
) -> User:
    """
    Move user into new_domain and keep the registry in step.

    With commit=False the changes are only flushed, so the caller can fold
    them into a larger transaction.

    Raises:
        InvalidDomainError: new_domain is not in the catalog; nothing changes
    """
    domain = parse_domain(new_domain).value
    previous = user.work_domain

    if previous == domain:
        return user

    if commit:
        async with user_transaction(db):
            await _move_user(db, user, previous, domain)
        user = await load_user(db, user.id, refresh=True)
    else:
        await _move_user(db, user, previous, domain)

    record_domain_change(domain)
    logger.info(f"User {user.id} moved from {previous or '-'} to {domain}")
    return user


async def replace_member_email(db: AsyncSession, name: str, old_email: str, new_email: str) -> None:
    """Swap a member's email in place, used when a user changes address."""
    await _remove_member(db, name, old_email)
    await _add_member(db, name, new_email)


async def rebuild_registry(db: AsyncSession) -> Dict[str, int]:
    """
    Recompute domain_members from users.work_domain.

    Returns:
        {"added": n, "removed": m} membership rows changed
    """
    result = await db.execute(
        select(User.email, User.work_domain).where(User.work_domain.is_not(None))
    )
    expected: Set[Tuple[str, str]] = {(row[1], row[0]) for row in result.all()}

    result = await db.execute(select(DomainMember.domain_name, DomainMember.email))
    actual: Set[Tuple[str, str]] = {(row[0], row[1]) for row in result.all()}

    stale = actual - expected
    missing = expected - actual

    for name, email in stale:
        await _remove_member(db, name, email)
    for name, email in missing:
        await _add_member(db, name, email)

    await db.commit()

    stats = {"added": len(missing), "removed": len(stale)}
    if missing or stale:
        logger.warning(f"Domain registry drift repaired: {stats}")
    return stats
