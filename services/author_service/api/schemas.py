"""Request and response models for the Author Service RPC surface."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from library_core.pagination import DEFAULT_PAGE, DEFAULT_PAGE_SIZE, PageInfo
from pydantic import UUID4, BaseModel, ConfigDict, Field


class CreateAuthorRequest(BaseModel):
    name: str = Field(min_length=3, max_length=255)
    biography: str = Field(min_length=1)


class GetAuthorRequest(BaseModel):
    id: UUID4


class UpdateAuthorRequest(BaseModel):
    id: UUID4
    name: str = Field(min_length=3, max_length=255)
    biography: str = Field(min_length=1)
    version: int = Field(ge=1)


class DeleteAuthorRequest(BaseModel):
    id: UUID4
    version: int = Field(ge=1)


class ListAuthorsRequest(BaseModel):
    page: int = Field(default=DEFAULT_PAGE, ge=1)
    page_size: int = Field(default=DEFAULT_PAGE_SIZE, ge=1, le=100)


class AuthorResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    biography: str
    version: int
    created_at: datetime
    updated_at: datetime


class DeleteAuthorResponse(BaseModel):
    id: UUID
    deleted: bool = True


class ListAuthorsResponse(BaseModel):
    authors: list[AuthorResponse]
    pagination: PageInfo
