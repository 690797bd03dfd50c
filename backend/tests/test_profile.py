"""
Tests for the Profile Field Updater

Tests cover:
- Allow-list rejection of unknown fields (whole batch)
- Shape and enum validation
- Wholesale replace of lists and objects
- work_domain delegation and email changes keeping the registry consistent
- Duplicate emails and optimistic concurrency
- Saved jobs and not-interested categories
"""

import uuid

import pytest
from sqlalchemy import select, update

from findx.errors import (
    ConflictError,
    DuplicateKeyError,
    ForbiddenError,
    InvalidDomainError,
    InvalidInputError,
    ProfileValidationError,
    UnknownFieldError,
)
from findx.models import DomainMember, User
from findx.schemas import NotInterestedCategory
from findx.services import domains, profile
from findx.services.users import load_user


async def memberships(db, email):
    result = await db.execute(select(DomainMember.domain_name).where(DomainMember.email == email))
    return sorted(result.scalars().all())


class TestAllowList:
    """Test field allow-listing."""

    def test_allow_list_has_28_fields(self):
        assert len(profile.ALLOWED_FIELDS) == 28
        assert "work_domain" in profile.ALLOWED_FIELDS
        assert "password_hash" not in profile.ALLOWED_FIELDS

    @pytest.mark.asyncio
    async def test_unknown_field_rejects_whole_update(self, db, make_user):
        user = await make_user()

        with pytest.raises(UnknownFieldError) as exc_info:
            await profile.apply_update(db, user, {"name": "Changed", "notAField": 1, "password_hash": "x"})

        assert exc_info.value.invalid_fields == ["notAField", "password_hash"]
        assert exc_info.value.message == "Invalid fields in request: notAField, password_hash"
        assert exc_info.value.extra["allowed_fields"] == sorted(profile.ALLOWED_FIELDS)

        user = await load_user(db, user.id, refresh=True)
        assert user.name == "Ada Lovelace"


class TestValidation:
    """Test value validation."""

    @pytest.mark.asyncio
    async def test_out_of_enum_gender(self, db, make_user):
        user = await make_user()

        with pytest.raises(ProfileValidationError) as exc_info:
            await profile.apply_update(db, user, {"gender": "Robot"})

        assert exc_info.value.errors[0]["loc"] == ["gender"]
        assert user.gender is None

    @pytest.mark.asyncio
    async def test_nested_object_shape(self, db, make_user):
        user = await make_user()

        with pytest.raises(ProfileValidationError):
            await profile.apply_update(db, user, {"relocation": {"willing_to_fly": True}})

    @pytest.mark.asyncio
    async def test_work_history_requires_fields(self, db, make_user):
        user = await make_user()

        with pytest.raises(ProfileValidationError):
            await profile.apply_update(db, user, {"work_history": [{"past_job_title": "Engineer"}]})

    @pytest.mark.asyncio
    async def test_required_column_cannot_be_cleared(self, db, make_user):
        user = await make_user()

        with pytest.raises(ProfileValidationError) as exc_info:
            await profile.apply_update(db, user, {"name": None})

        assert exc_info.value.errors[0]["type"] == "null_not_allowed"

    @pytest.mark.asyncio
    async def test_invalid_domain_writes_nothing(self, db, make_user):
        user = await make_user()

        with pytest.raises(InvalidDomainError):
            await profile.apply_update(db, user, {"name": "Changed", "work_domain": "NotARealDomain"})

        user = await load_user(db, user.id, refresh=True)
        assert user.name == "Ada Lovelace"
        assert user.work_domain is None


class TestApplyUpdate:
    """Test writes."""

    @pytest.mark.asyncio
    async def test_scalars_and_enums(self, db, make_user):
        user = await make_user()

        user = await profile.apply_update(
            db,
            user,
            {"gender": "Female", "highest_qualification": "Masters", "dream_job_title": "CTO"},
        )

        assert user.gender == "Female"
        assert user.highest_qualification == "Masters"
        assert user.dream_job_title == "CTO"

    @pytest.mark.asyncio
    async def test_lists_are_replaced_not_merged(self, db, make_user):
        user = await make_user()
        user = await profile.apply_update(db, user, {"known_language": ["English", "French"]})

        user = await profile.apply_update(db, user, {"known_language": ["German"]})

        assert user.known_language == ["German"]

    @pytest.mark.asyncio
    async def test_objects_are_replaced_not_merged(self, db, make_user):
        user = await make_user()
        user = await profile.apply_update(
            db, user, {"external_links": {"github_link": "https://github.com/ada"}}
        )

        user = await profile.apply_update(
            db, user, {"external_links": {"linkedin_link": "https://linkedin.com/in/ada"}}
        )

        assert user.external_links == {"linkedin_link": "https://linkedin.com/in/ada"}

    @pytest.mark.asyncio
    async def test_work_history_is_stored_as_json(self, db, make_user):
        user = await make_user()
        entry = {
            "past_job_title": "Engineer",
            "past_company_name": "Analytical Engines",
            "past_job_location": "London",
            "past_job_start_date": "2020-01-01T00:00:00",
            "past_job_end_date": "2022-06-30T00:00:00",
            "past_employment_type": "Remote",
            "past_job_leave_reason": "Growth",
            "past_job_reference_person": "Charles Babbage",
            "notice_period": "1 month",
        }

        user = await profile.apply_update(db, user, {"work_history": [entry]})

        assert user.work_history[0]["past_employment_type"] == "Remote"
        assert user.work_history[0]["past_job_start_date"].startswith("2020-01-01")

    @pytest.mark.asyncio
    async def test_version_increments(self, db, make_user):
        user = await make_user()
        version = user.version

        user = await profile.apply_update(db, user, {"nationality": "British"})

        assert user.version == version + 1


class TestDomainDelegation:
    """Test work_domain and email changes against the registry."""

    @pytest.mark.asyncio
    async def test_register_then_change_domain_twice(self, db, make_user):
        user = await make_user()

        user = await profile.apply_update(db, user, {"work_domain": "Engineering"})
        assert await memberships(db, user.email) == ["Engineering"]

        user = await profile.apply_update(db, user, {"work_domain": "Legal"})
        assert await memberships(db, user.email) == ["Legal"]
        assert await domains.get_domain_members(db, "Engineering") == []

    @pytest.mark.asyncio
    async def test_email_change_moves_membership(self, db, make_user):
        user = await make_user()
        user = await profile.apply_update(db, user, {"work_domain": "Engineering"})

        user = await profile.apply_update(db, user, {"email": "Ada@Analytical.org"})

        assert user.email == "ada@analytical.org"
        assert await domains.get_domain_members(db, "Engineering") == ["ada@analytical.org"]

    @pytest.mark.asyncio
    async def test_email_and_domain_change_together(self, db, make_user):
        user = await make_user()
        user = await profile.apply_update(db, user, {"work_domain": "Engineering"})

        user = await profile.apply_update(db, user, {"email": "ada@new.org", "work_domain": "Sales"})

        assert await memberships(db, "ada@example.com") == []
        assert await memberships(db, "ada@new.org") == ["Sales"]


class TestConflicts:
    """Test uniqueness and concurrency failures."""

    @pytest.mark.asyncio
    async def test_duplicate_email(self, db, make_user):
        await make_user("grace@example.com", name="Grace Hopper")
        user = await make_user()

        with pytest.raises(DuplicateKeyError):
            await profile.apply_update(db, user, {"email": "GRACE@example.com"})

    @pytest.mark.asyncio
    async def test_stale_if_match_version(self, db, make_user):
        user = await make_user()

        with pytest.raises(ConflictError):
            await profile.apply_update(db, user, {"name": "Changed"}, expected_version=user.version + 5)

    @pytest.mark.asyncio
    async def test_matching_if_match_version(self, db, make_user):
        user = await make_user()

        user = await profile.apply_update(db, user, {"name": "Changed"}, expected_version=user.version)

        assert user.name == "Changed"

    @pytest.mark.asyncio
    async def test_concurrent_write_is_detected(self, db, make_user):
        user = await make_user()
        # Another writer bumps the row behind this session's back
        await db.execute(
            update(User)
            .where(User.id == user.id)
            .values(version=User.version + 1)
            .execution_options(synchronize_session=False)
        )

        with pytest.raises(ConflictError):
            await profile.apply_update(db, user, {"name": "Changed"})


class TestSavedJobs:
    """Test saved job set semantics."""

    @pytest.mark.asyncio
    async def test_add_ignores_duplicates(self, db, make_user):
        user = await make_user()
        job_id = str(uuid.uuid4())

        user = await profile.update_saved_jobs(db, user, user.id, job_id, "add")
        user = await profile.update_saved_jobs(db, user, user.id, job_id, "add")

        assert user.saved_jobs == [job_id]

    @pytest.mark.asyncio
    async def test_remove_is_idempotent(self, db, make_user):
        user = await make_user()
        job_id = str(uuid.uuid4())
        user = await profile.update_saved_jobs(db, user, user.id, job_id, "add")

        user = await profile.update_saved_jobs(db, user, user.id, job_id, "remove")
        user = await profile.update_saved_jobs(db, user, user.id, job_id, "remove")

        assert user.saved_jobs == []

    @pytest.mark.asyncio
    async def test_other_users_jobs_are_forbidden(self, db, make_user):
        user = await make_user()

        with pytest.raises(ForbiddenError):
            await profile.update_saved_jobs(db, user, "someone-else", str(uuid.uuid4()), "add")

    @pytest.mark.asyncio
    async def test_invalid_job_id(self, db, make_user):
        user = await make_user()

        with pytest.raises(InvalidInputError):
            await profile.update_saved_jobs(db, user, user.id, "not-a-uuid", "add")

    @pytest.mark.asyncio
    async def test_invalid_action(self, db, make_user):
        user = await make_user()

        with pytest.raises(InvalidInputError):
            await profile.update_saved_jobs(db, user, user.id, str(uuid.uuid4()), "toggle")

    @pytest.mark.asyncio
    async def test_replace_dedupes_job_ids(self, db, make_user):
        user = await make_user()
        job_id = str(uuid.uuid4())
        other_id = str(uuid.uuid4())

        user = await profile.apply_update(db, user, {"saved_jobs": [job_id, other_id, job_id.upper()]})

        assert user.saved_jobs == [job_id, other_id]

    @pytest.mark.asyncio
    async def test_replace_rejects_invalid_job_ids(self, db, make_user):
        user = await make_user()

        with pytest.raises(ProfileValidationError):
            await profile.apply_update(db, user, {"saved_jobs": ["not-a-uuid"]})

        user = await load_user(db, user.id, refresh=True)
        assert user.saved_jobs == []


class TestNotInterestedCategories:
    """Test category pair set semantics."""

    @pytest.mark.asyncio
    async def test_pairs_are_deduplicated(self, db, make_user):
        user = await make_user()
        pair = NotInterestedCategory(category="Sales", subcategory="Retail")

        user = await profile.add_not_interested_category(db, user, pair)
        user = await profile.add_not_interested_category(db, user, pair)
        user = await profile.add_not_interested_category(db, user, NotInterestedCategory(category="Sales"))

        assert user.not_interested_job_categories == [
            {"category": "Sales", "subcategory": "Retail"},
            {"category": "Sales", "subcategory": ""},
        ]

    @pytest.mark.asyncio
    async def test_remove_matches_whole_pair(self, db, make_user):
        user = await make_user()
        user = await profile.add_not_interested_category(
            db, user, NotInterestedCategory(category="Sales", subcategory="Retail")
        )

        user = await profile.remove_not_interested_category(db, user, NotInterestedCategory(category="Sales"))
        assert len(user.not_interested_job_categories) == 1

        user = await profile.remove_not_interested_category(
            db, user, NotInterestedCategory(category="Sales", subcategory="Retail")
        )
        assert user.not_interested_job_categories == []
