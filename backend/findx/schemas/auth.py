from pydantic import BaseModel, Field

from findx.schemas.profile import EMAIL_PATTERN, UserResponse


class RegisterRequest(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    email: str = Field(pattern=EMAIL_PATTERN, max_length=320)
    password: str = Field(min_length=6)


class LoginRequest(BaseModel):
    email: str
    password: str


class ForgotPasswordRequest(BaseModel):
    email: str


class VerifyOtpRequest(BaseModel):
    email: str
    otp: str


class ResetPasswordRequest(BaseModel):
    email: str
    otp: str
    new_password: str = Field(min_length=6)


class AuthResponse(BaseModel):
    success: bool
    message: str
    token: str
    user: UserResponse


class MessageResponse(BaseModel):
    success: bool
    message: str


class TokenResponse(BaseModel):
    success: bool
    message: str
    token: str
