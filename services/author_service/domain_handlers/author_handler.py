"""Domain handler for author CRUD operations."""

from __future__ import annotations

from library_core.pagination import PageInfo
from library_service_libs.error_handling import CorrelationContext
from library_service_libs.logging_utils import create_service_logger

from services.author_service.api.schemas import (
    AuthorResponse,
    CreateAuthorRequest,
    DeleteAuthorRequest,
    DeleteAuthorResponse,
    GetAuthorRequest,
    ListAuthorsRequest,
    ListAuthorsResponse,
    UpdateAuthorRequest,
)
from services.author_service.protocols import AuthorRepositoryProtocol

logger = create_service_logger("author_service.author_handler")


class AuthorHandler:
    def __init__(self, repository: AuthorRepositoryProtocol) -> None:
        self._repository = repository

    async def create_author(
        self, request: CreateAuthorRequest, correlation: CorrelationContext
    ) -> AuthorResponse:
        author = await self._repository.create(request.name, request.biography, correlation.uuid)
        logger.info("Author created", author_id=str(author.id))
        return AuthorResponse.model_validate(author)

    async def get_author(
        self, request: GetAuthorRequest, correlation: CorrelationContext
    ) -> AuthorResponse:
        author = await self._repository.get(request.id, correlation.uuid)
        return AuthorResponse.model_validate(author)

    async def update_author(
        self, request: UpdateAuthorRequest, correlation: CorrelationContext
    ) -> AuthorResponse:
        author = await self._repository.update(
            request.id, request.version, request.name, request.biography, correlation.uuid
        )
        logger.info("Author updated", author_id=str(author.id), version=author.version)
        return AuthorResponse.model_validate(author)

    async def delete_author(
        self, request: DeleteAuthorRequest, correlation: CorrelationContext
    ) -> DeleteAuthorResponse:
        await self._repository.delete(request.id, request.version, correlation.uuid)
        logger.info("Author deleted", author_id=str(request.id))
        return DeleteAuthorResponse(id=request.id)

    async def list_authors(
        self, request: ListAuthorsRequest, correlation: CorrelationContext
    ) -> ListAuthorsResponse:
        authors, total = await self._repository.list(
            request.page, request.page_size, correlation.uuid
        )
        return ListAuthorsResponse(
            authors=[AuthorResponse.model_validate(a) for a in authors],
            pagination=PageInfo.build(request.page, request.page_size, total),
        )
