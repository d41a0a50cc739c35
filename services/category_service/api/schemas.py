"""Category Service RPC models."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated
from uuid import UUID

from library_core.pagination import DEFAULT_PAGE, DEFAULT_PAGE_SIZE, PageInfo
from pydantic import UUID4, BaseModel, ConfigDict, Field

CategoryName = Annotated[str, Field(min_length=3, max_length=100)]


class CreateCategoryRequest(BaseModel):
    name: CategoryName


class GetCategoryRequest(BaseModel):
    id: UUID4


class UpdateCategoryRequest(BaseModel):
    id: UUID4
    name: CategoryName
    version: int = Field(ge=1)


class DeleteCategoryRequest(BaseModel):
    id: UUID4
    version: int = Field(ge=1)


class ListCategoriesRequest(BaseModel):
    page: int = Field(default=DEFAULT_PAGE, ge=1)
    page_size: int = Field(default=DEFAULT_PAGE_SIZE, ge=1, le=100)


class CategoryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    version: int
    created_at: datetime
    updated_at: datetime


class DeleteCategoryResponse(BaseModel):
    id: UUID
    deleted: bool = True


class ListCategoriesResponse(BaseModel):
    categories: list[CategoryResponse]
    pagination: PageInfo
