"""Request and response models for the Auth Service RPC surface."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from library_core.domain_enums import UserRole
from library_core.validation import OtpCode, Password, Username
from pydantic import UUID4, BaseModel, ConfigDict, EmailStr, Field


class RegisterRequest(BaseModel):
    email: EmailStr
    username: Username
    password: Password


class UserResponse(BaseModel):
    """User as returned to callers; never carries the hash or refresh token."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    username: str
    role: UserRole
    verified: bool
    last_login_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class SendOtpRequest(BaseModel):
    email: EmailStr


class VerifyEmailRequest(BaseModel):
    email: EmailStr
    otp: OtpCode


class StatusResponse(BaseModel):
    message: str


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class TokenPair(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "Bearer"
    expires_in: int


class LoginResponse(TokenPair):
    user: UserResponse


class ValidateTokenRequest(BaseModel):
    token: str = Field(min_length=1)


class ValidateTokenResponse(BaseModel):
    valid: bool
    user_id: UUID
    role: UserRole
    email: str


class RefreshTokenRequest(BaseModel):
    user_id: UUID4
    refresh_token: str = Field(min_length=1)


class LogoutRequest(BaseModel):
    user_id: UUID4
