"""Shared helpers for the client-facing routes.

Private module with the success envelope and the pagination query
parameters used by every list endpoint.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from fastapi import Query
from fastapi.responses import JSONResponse
from library_core.pagination import DEFAULT_PAGE, DEFAULT_PAGE_SIZE
from library_service_libs.error_handling.fastapi import envelope


def success(message: str, data: Any = None, status_code: int = 200) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=envelope(True, message, data))


@dataclass(frozen=True)
class Pagination:
    page: int
    page_size: int

    def as_payload(self) -> dict[str, int]:
        return {"page": self.page, "page_size": self.page_size}


def pagination_params(
    page: int = Query(DEFAULT_PAGE, ge=1),
    page_size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=100, alias="pageSize"),
) -> Pagination:
    return Pagination(page=page, page_size=page_size)


# Books embedded in an author or category when includeBooks=true
SAMPLE_BOOKS_PAGE = {"page": 1, "page_size": 5}
