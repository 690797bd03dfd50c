from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from findx.auth import get_current_user
from findx.database import get_db
from findx.errors import ForbiddenError
from findx.models import User
from findx.schemas import (
    DomainListResponse,
    DomainMembersResponse,
    DomainSummary,
    DomainUpdate,
    MessageResponse,
    UserEnvelope,
    UserResponse,
)
from findx.services import domains

router = APIRouter()


@router.get("", response_model=DomainListResponse)
async def get_all_domains(db: AsyncSession = Depends(get_db)):
    rows = await domains.list_domains(db)
    return DomainListResponse(
        success=True,
        domains=[DomainSummary(name=name, member_count=count) for name, count in rows],
    )


@router.post("/initialize", response_model=MessageResponse)
async def initialize_domains(
    db: AsyncSession = Depends(get_db),
    _: User = Depends(get_current_user),
):
    created = await domains.seed_domains(db)
    return MessageResponse(success=True, message=f"Domains initialized ({created} created)")


@router.put("/my-domain", response_model=UserEnvelope)
async def update_my_domain(
    body: DomainUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    user = await domains.set_user_domain(db, current_user, body.domain)
    return UserEnvelope(
        success=True,
        message="Domain updated successfully",
        user=UserResponse.model_validate(user),
    )


@router.put("/user/{user_id}", response_model=UserEnvelope)
async def update_user_domain(
    user_id: str,
    body: DomainUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if current_user.id != user_id:
        raise ForbiddenError("You can only change your own domain")

    user = await domains.set_user_domain(db, current_user, body.domain)
    return UserEnvelope(
        success=True,
        message="Domain updated successfully",
        user=UserResponse.model_validate(user),
    )


@router.get("/{name}", response_model=DomainMembersResponse)
async def get_domain(
    name: str,
    db: AsyncSession = Depends(get_db),
    _: User = Depends(get_current_user),
):
    emails = await domains.get_domain_members(db, name)
    return DomainMembersResponse(success=True, name=name, user_emails=emails)
