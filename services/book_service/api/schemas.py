"""Request and response models for the Book Service RPC surface."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from library_core.pagination import DEFAULT_PAGE, DEFAULT_PAGE_SIZE, PageInfo
from library_core.validation import BookTitle
from pydantic import UUID4, BaseModel, ConfigDict, Field


class CreateBookRequest(BaseModel):
    title: BookTitle
    author_id: UUID4
    category_id: UUID4
    stock: int = Field(ge=0)


class GetBookRequest(BaseModel):
    id: UUID4


class UpdateBookRequest(BaseModel):
    id: UUID4
    title: BookTitle
    author_id: UUID4
    category_id: UUID4
    stock: int = Field(ge=0)
    version: int = Field(ge=1)


class DeleteBookRequest(BaseModel):
    id: UUID4
    version: int = Field(ge=1)


class UpdateBookStockRequest(BaseModel):
    id: UUID4
    new_stock: int = Field(ge=0)
    version: int = Field(ge=1)


class AdjustBookStockRequest(BaseModel):
    """Increment/decrement request; without ``version`` the current one is used."""

    id: UUID4
    version: int | None = Field(default=None, ge=1)


class ListBooksRequest(BaseModel):
    page: int = Field(default=DEFAULT_PAGE, ge=1)
    page_size: int = Field(default=DEFAULT_PAGE_SIZE, ge=1, le=100)


class ListBooksByAuthorRequest(ListBooksRequest):
    author_id: UUID4


class ListBooksByCategoryRequest(ListBooksRequest):
    category_id: UUID4


class BookResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    author_id: UUID
    category_id: UUID
    stock: int
    version: int
    created_at: datetime
    updated_at: datetime


class DeleteBookResponse(BaseModel):
    id: UUID
    deleted: bool = True


class ListBooksResponse(BaseModel):
    books: list[BookResponse]
    pagination: PageInfo
