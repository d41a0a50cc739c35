from __future__ import annotations

from datetime import datetime
from uuid import UUID

from library_core.domain_enums import UserRole
from library_core.pagination import DEFAULT_PAGE, DEFAULT_PAGE_SIZE, PageInfo
from pydantic import UUID4, BaseModel, ConfigDict, EmailStr, Field


class GetUserByIdRequest(BaseModel):
    id: UUID4


class GetUserByEmailRequest(BaseModel):
    email: EmailStr


class ListUsersRequest(BaseModel):
    page: int = Field(default=DEFAULT_PAGE, ge=1)
    page_size: int = Field(default=DEFAULT_PAGE_SIZE, ge=1, le=100)


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    username: str
    role: UserRole
    verified: bool
    last_login_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class ListUsersResponse(BaseModel):
    users: list[UserResponse]
    pagination: PageInfo
