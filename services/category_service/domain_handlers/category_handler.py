from __future__ import annotations

from library_core.pagination import PageInfo
from library_service_libs.error_handling import CorrelationContext
from library_service_libs.logging_utils import create_service_logger

from services.category_service.api.schemas import (
    CategoryResponse,
    CreateCategoryRequest,
    DeleteCategoryRequest,
    DeleteCategoryResponse,
    GetCategoryRequest,
    ListCategoriesRequest,
    ListCategoriesResponse,
    UpdateCategoryRequest,
)
from services.category_service.protocols import CategoryRepositoryProtocol

logger = create_service_logger("category_service.category_handler")


class CategoryHandler:
    """Thin domain layer between the RPC routes and the versioned store."""

    def __init__(self, repository: CategoryRepositoryProtocol) -> None:
        self._repository = repository

    async def create_category(
        self, request: CreateCategoryRequest, correlation: CorrelationContext
    ) -> CategoryResponse:
        category = await self._repository.create(request.name, correlation.uuid)
        logger.info("Category created", category_id=str(category.id), name=category.name)
        return CategoryResponse.model_validate(category)

    async def get_category(
        self, request: GetCategoryRequest, correlation: CorrelationContext
    ) -> CategoryResponse:
        return CategoryResponse.model_validate(
            await self._repository.get(request.id, correlation.uuid)
        )

    async def update_category(
        self, request: UpdateCategoryRequest, correlation: CorrelationContext
    ) -> CategoryResponse:
        category = await self._repository.rename(
            request.id, request.version, request.name, correlation.uuid
        )
        logger.info("Category updated", category_id=str(category.id), version=category.version)
        return CategoryResponse.model_validate(category)

    async def delete_category(
        self, request: DeleteCategoryRequest, correlation: CorrelationContext
    ) -> DeleteCategoryResponse:
        await self._repository.delete(request.id, request.version, correlation.uuid)
        logger.info("Category deleted", category_id=str(request.id))
        return DeleteCategoryResponse(id=request.id)

    async def list_categories(
        self, request: ListCategoriesRequest, correlation: CorrelationContext
    ) -> ListCategoriesResponse:
        categories, total = await self._repository.list(
            request.page, request.page_size, correlation.uuid
        )
        return ListCategoriesResponse(
            categories=[CategoryResponse.model_validate(c) for c in categories],
            pagination=PageInfo.build(request.page, request.page_size, total),
        )
