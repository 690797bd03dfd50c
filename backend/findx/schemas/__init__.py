from findx.schemas.profile import (
    ProfileUpdate,
    UserResponse,
    ResumeResponse,
    SavedJobUpdate,
    NotInterestedCategory,
    UserEnvelope,
    UserListResponse,
    SavedJobsResponse,
)
from findx.schemas.auth import (
    RegisterRequest,
    LoginRequest,
    ForgotPasswordRequest,
    VerifyOtpRequest,
    ResetPasswordRequest,
    AuthResponse,
    MessageResponse,
    TokenResponse,
)
from findx.schemas.domain import (
    DomainUpdate,
    DomainSummary,
    DomainListResponse,
    DomainMembersResponse,
)
from findx.schemas.resume import (
    VisibilityUpdate,
    CoverLetterUpdate,
    CoverLetterResponse,
    ResumeFileInfo,
    ResumeUploadResponse,
    ResumeListResponse,
)

__all__ = [
    "ProfileUpdate",
    "UserResponse",
    "ResumeResponse",
    "SavedJobUpdate",
    "NotInterestedCategory",
    "UserEnvelope",
    "UserListResponse",
    "SavedJobsResponse",
    "RegisterRequest",
    "LoginRequest",
    "ForgotPasswordRequest",
    "VerifyOtpRequest",
    "ResetPasswordRequest",
    "AuthResponse",
    "MessageResponse",
    "TokenResponse",
    "DomainUpdate",
    "DomainSummary",
    "DomainListResponse",
    "DomainMembersResponse",
    "VisibilityUpdate",
    "CoverLetterUpdate",
    "CoverLetterResponse",
    "ResumeFileInfo",
    "ResumeUploadResponse",
    "ResumeListResponse",
]
