"""
Tests for the Domain Membership Synchronizer

Tests cover:
- Catalog validation and seeding
- Moving a user between domains keeps exactly one membership
- Idempotent and rejected changes leave the registry untouched
- Registry rebuild repairs drift
"""

import pytest
from sqlalchemy import delete, select

from findx.enums import WorkDomain
from findx.errors import InvalidDomainError, NotFoundError
from findx.models import Domain, DomainMember
from findx.services import domains


async def memberships(db, email):
    result = await db.execute(
        select(DomainMember.domain_name).where(DomainMember.email == email)
    )
    return sorted(result.scalars().all())


class TestParseDomain:
    """Test catalog lookups."""

    def test_known_domain(self):
        assert domains.parse_domain("Engineering") is WorkDomain.ENGINEERING

    def test_unknown_domain_lists_catalog(self):
        with pytest.raises(InvalidDomainError) as exc_info:
            domains.parse_domain("NotARealDomain")

        assert exc_info.value.valid_domains == WorkDomain.names()
        assert exc_info.value.status_code == 400

    def test_none_is_rejected(self):
        with pytest.raises(InvalidDomainError):
            domains.parse_domain(None)

    def test_catalog_has_31_unique_names(self):
        names = WorkDomain.names()
        assert len(names) == 31
        assert len(set(names)) == 31


class TestSeedDomains:
    """Test catalog seeding."""

    @pytest.mark.asyncio
    async def test_seed_creates_every_domain_once(self, db):
        assert await domains.seed_domains(db) == 31
        assert await domains.seed_domains(db) == 0

        result = await db.execute(select(Domain.name))
        assert sorted(result.scalars().all()) == sorted(WorkDomain.names())

    @pytest.mark.asyncio
    async def test_list_domains_counts_members(self, db, make_user):
        await domains.seed_domains(db)
        ada = await make_user("ada@example.com")
        grace = await make_user("grace@example.com", name="Grace Hopper")
        await domains.set_user_domain(db, ada, "Engineering")
        await domains.set_user_domain(db, grace, "Engineering")

        counts = dict(await domains.list_domains(db))

        assert len(counts) == 31
        assert counts["Engineering"] == 2
        assert counts["Legal"] == 0


class TestSetUserDomain:
    """Test domain changes and registry consistency."""

    @pytest.mark.asyncio
    async def test_first_domain_adds_membership(self, db, make_user):
        user = await make_user()

        user = await domains.set_user_domain(db, user, "Engineering")

        assert user.work_domain == "Engineering"
        assert await memberships(db, user.email) == ["Engineering"]

    @pytest.mark.asyncio
    async def test_missing_catalog_row_is_created(self, db, make_user):
        user = await make_user()
        assert await db.get(Domain, "Legal") is None

        await domains.set_user_domain(db, user, "Legal")

        assert await db.get(Domain, "Legal") is not None
        assert await domains.get_domain_members(db, "Legal") == [user.email]

    @pytest.mark.asyncio
    async def test_move_removes_previous_membership(self, db, make_user):
        user = await make_user()
        user = await domains.set_user_domain(db, user, "Engineering")

        user = await domains.set_user_domain(db, user, "Legal")

        assert await memberships(db, user.email) == ["Legal"]
        assert await domains.get_domain_members(db, "Engineering") == []

    @pytest.mark.asyncio
    async def test_same_domain_twice_is_idempotent(self, db, make_user):
        user = await make_user()
        user = await domains.set_user_domain(db, user, "Engineering")
        version = user.version

        user = await domains.set_user_domain(db, user, "Engineering")

        assert user.version == version
        assert await memberships(db, user.email) == ["Engineering"]

    @pytest.mark.asyncio
    async def test_invalid_domain_changes_nothing(self, db, make_user):
        user = await make_user()
        user = await domains.set_user_domain(db, user, "Engineering")

        with pytest.raises(InvalidDomainError):
            await domains.set_user_domain(db, user, "NotARealDomain")

        assert user.work_domain == "Engineering"
        assert await memberships(db, user.email) == ["Engineering"]

    @pytest.mark.asyncio
    async def test_other_members_are_untouched(self, db, make_user):
        ada = await make_user("ada@example.com")
        grace = await make_user("grace@example.com", name="Grace Hopper")
        await domains.set_user_domain(db, grace, "Engineering")
        ada = await domains.set_user_domain(db, ada, "Engineering")

        await domains.set_user_domain(db, ada, "Sales")

        assert await domains.get_domain_members(db, "Engineering") == ["grace@example.com"]
        assert await domains.get_domain_members(db, "Sales") == ["ada@example.com"]


class TestGetDomainMembers:
    """Test member lookups."""

    @pytest.mark.asyncio
    async def test_unseeded_domain_is_not_found(self, db):
        with pytest.raises(NotFoundError):
            await domains.get_domain_members(db, "Engineering")

    @pytest.mark.asyncio
    async def test_unknown_domain_is_invalid(self, db):
        with pytest.raises(InvalidDomainError):
            await domains.get_domain_members(db, "Basket Weaving")

    @pytest.mark.asyncio
    async def test_members_are_sorted(self, db, make_user):
        for email in ("zed@example.com", "amy@example.com"):
            user = await make_user(email)
            await domains.set_user_domain(db, user, "Sales")

        assert await domains.get_domain_members(db, "Sales") == ["amy@example.com", "zed@example.com"]


class TestRebuildRegistry:
    """Test registry reconciliation."""

    @pytest.mark.asyncio
    async def test_consistent_registry_is_left_alone(self, db, make_user):
        user = await make_user()
        await domains.set_user_domain(db, user, "Engineering")

        assert await domains.rebuild_registry(db) == {"added": 0, "removed": 0}

    @pytest.mark.asyncio
    async def test_drift_is_repaired(self, db, make_user):
        await domains.seed_domains(db)
        user = await make_user()
        await domains.set_user_domain(db, user, "Engineering")

        # Simulate out-of-band edits: a stray membership and a lost one
        db.add(DomainMember(domain_name="Legal", email=user.email))
        await db.execute(
            delete(DomainMember).where(DomainMember.domain_name == "Engineering")
        )
        await db.commit()

        stats = await domains.rebuild_registry(db)

        assert stats == {"added": 1, "removed": 1}
        assert await memberships(db, user.email) == ["Engineering"]
