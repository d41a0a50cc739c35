"""Client-facing request bodies.

Field rules match the back-end RPC schemas so that an invalid body is
rejected at the edge with field-level errors instead of a remote
INVALID_ARGUMENT.
"""

from __future__ import annotations

from library_core.domain_enums import LoanStatus
from library_core.validation import BookTitle, OtpCode, Password, Username
from pydantic import UUID4, BaseModel, EmailStr, Field


class RegisterBody(BaseModel):
    email: EmailStr
    username: Username
    password: Password


class SendOtpBody(BaseModel):
    email: EmailStr


class VerifyEmailBody(BaseModel):
    email: EmailStr
    otp: OtpCode


class LoginBody(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class ValidateTokenBody(BaseModel):
    token: str = Field(min_length=1)


class RefreshTokenBody(BaseModel):
    refresh_token: str = Field(min_length=1)


class AuthorBody(BaseModel):
    name: str = Field(min_length=3, max_length=255)
    biography: str = Field(min_length=1)


class AuthorUpdateBody(AuthorBody):
    version: int = Field(ge=1)


class CategoryBody(BaseModel):
    name: str = Field(min_length=3, max_length=100)


class CategoryUpdateBody(CategoryBody):
    version: int = Field(ge=1)


class BookBody(BaseModel):
    title: BookTitle
    author_id: UUID4
    category_id: UUID4
    stock: int = Field(ge=0)


class BookUpdateBody(BookBody):
    version: int = Field(ge=1)


class DeleteBody(BaseModel):
    """Optimistic delete: the caller states the version it last read."""

    version: int = Field(ge=1)


class LoanBody(BaseModel):
    book_id: UUID4


class LoanStatusBody(BaseModel):
    status: LoanStatus
