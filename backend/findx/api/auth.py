from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Header, status
from sqlalchemy.ext.asyncio import AsyncSession

from findx.auth import get_current_user
from findx.database import get_db
from findx.errors import InvalidInputError
from findx.models import User
from findx.schemas import (
    AuthResponse,
    ForgotPasswordRequest,
    LoginRequest,
    MessageResponse,
    NotInterestedCategory,
    RegisterRequest,
    ResetPasswordRequest,
    SavedJobsResponse,
    SavedJobUpdate,
    TokenResponse,
    UserEnvelope,
    UserListResponse,
    UserResponse,
    VerifyOtpRequest,
)
from findx.services import accounts, profile
from findx.services.users import list_users

router = APIRouter()


def parse_if_match(value: Optional[str]) -> Optional[int]:
    """If-Match carries users.version, optionally quoted or weak (W/"3")."""
    if value is None:
        return None
    tag = value.strip()
    if tag.startswith("W/"):
        tag = tag[2:]
    tag = tag.strip('"')
    try:
        return int(tag)
    except ValueError:
        raise InvalidInputError("If-Match must carry the profile version")


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(body: RegisterRequest, db: AsyncSession = Depends(get_db)):
    user, token = await accounts.register(db, body.name, body.email, body.password)
    return AuthResponse(
        success=True,
        message="User registered successfully",
        token=token,
        user=UserResponse.model_validate(user),
    )


@router.post("/login", response_model=AuthResponse)
async def login(body: LoginRequest, db: AsyncSession = Depends(get_db)):
    if not body.email or not body.password:
        raise InvalidInputError("Please provide email and password")

    user, token = await accounts.authenticate(db, body.email, body.password)
    return AuthResponse(
        success=True,
        message="Logged in successfully",
        token=token,
        user=UserResponse.model_validate(user),
    )


@router.post("/forgotpassword", response_model=MessageResponse)
async def forgot_password(body: ForgotPasswordRequest, db: AsyncSession = Depends(get_db)):
    await accounts.request_password_reset(db, body.email)
    return MessageResponse(success=True, message="Password reset code sent to your email")


@router.post("/verifyotp", response_model=MessageResponse)
async def verify_otp(body: VerifyOtpRequest, db: AsyncSession = Depends(get_db)):
    await accounts.verify_reset_code(db, body.email, body.otp)
    return MessageResponse(success=True, message="OTP verified successfully")


@router.post("/resetpassword", response_model=TokenResponse)
async def reset_password(body: ResetPasswordRequest, db: AsyncSession = Depends(get_db)):
    token = await accounts.reset_password(db, body.email, body.otp, body.new_password)
    return TokenResponse(success=True, message="Password reset successful", token=token)


@router.get("/users", response_model=UserListResponse)
async def get_all_users(
    db: AsyncSession = Depends(get_db),
    _: User = Depends(get_current_user),
):
    users = await list_users(db)
    return UserListResponse(
        success=True,
        count=len(users),
        users=[UserResponse.model_validate(user) for user in users],
    )


@router.get("/user/me", response_model=UserEnvelope)
async def get_me(current_user: User = Depends(get_current_user)):
    return UserEnvelope(success=True, user=UserResponse.model_validate(current_user))


@router.patch("/user/me", response_model=UserEnvelope)
async def update_me(
    fields: Dict[str, Any] = Body(...),
    if_match: Optional[str] = Header(None, alias="If-Match"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    user = await profile.apply_update(db, current_user, fields, expected_version=parse_if_match(if_match))
    return UserEnvelope(
        success=True,
        message="Profile updated successfully",
        user=UserResponse.model_validate(user),
    )


@router.put("/user/me/not-interested-categories", response_model=UserEnvelope)
async def add_not_interested_category(
    body: NotInterestedCategory,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    user = await profile.add_not_interested_category(db, current_user, body)
    return UserEnvelope(success=True, message="Category hidden", user=UserResponse.model_validate(user))


@router.delete("/user/me/not-interested-categories", response_model=UserEnvelope)
async def remove_not_interested_category(
    body: NotInterestedCategory,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    user = await profile.remove_not_interested_category(db, current_user, body)
    return UserEnvelope(success=True, message="Category restored", user=UserResponse.model_validate(user))


@router.get("/user/{user_id}", response_model=UserEnvelope)
async def get_user(user_id: str, db: AsyncSession = Depends(get_db)):
    user = await accounts.get_user(db, user_id)
    return UserEnvelope(
        success=True,
        message="User found successfully",
        user=UserResponse.model_validate(user),
    )


@router.put("/users/{user_id}/saved-jobs", response_model=SavedJobsResponse)
async def update_saved_jobs(
    user_id: str,
    body: SavedJobUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    user = await profile.update_saved_jobs(db, current_user, user_id, body.job_id, body.action)
    return SavedJobsResponse(
        success=True,
        message="Saved jobs updated",
        saved_jobs=list(user.saved_jobs or []),
        user=UserResponse.model_validate(user),
    )
