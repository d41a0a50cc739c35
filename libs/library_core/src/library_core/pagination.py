"""Pagination metadata shared by every list operation."""

from __future__ import annotations

import math

from pydantic import BaseModel, Field

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 10


class PageInfo(BaseModel):
    page: int = Field(ge=1)
    page_size: int = Field(ge=1)
    total_items: int = Field(ge=0)
    total_pages: int = Field(ge=0)

    @classmethod
    def build(cls, page: int, page_size: int, total_items: int) -> PageInfo:
        return cls(
            page=page,
            page_size=page_size,
            total_items=total_items,
            total_pages=math.ceil(total_items / page_size),
        )


def page_offset(page: int, page_size: int) -> int:
    return (page - 1) * page_size
