"""Domain handler for user profile lookups."""

from __future__ import annotations

from library_core.pagination import PageInfo
from library_service_libs.error_handling import CorrelationContext, raise_resource_not_found

from services.user_service.api.schemas import (
    GetUserByEmailRequest,
    GetUserByIdRequest,
    ListUsersRequest,
    ListUsersResponse,
    UserResponse,
)
from services.user_service.models_db import UserProfile
from services.user_service.protocols import UserDirectoryProtocol


class UserHandler:
    def __init__(self, directory: UserDirectoryProtocol, service_name: str) -> None:
        self._directory = directory
        self._service_name = service_name

    async def get_user_by_id(
        self, request: GetUserByIdRequest, correlation: CorrelationContext
    ) -> UserResponse:
        user = await self._directory.get_by_id(request.id, correlation.uuid)
        return self._found(user, str(request.id), "GetUserById", correlation)

    async def get_user_by_email(
        self, request: GetUserByEmailRequest, correlation: CorrelationContext
    ) -> UserResponse:
        user = await self._directory.get_by_email(request.email, correlation.uuid)
        return self._found(user, request.email.lower(), "GetUserByEmail", correlation)

    async def list_users(
        self, request: ListUsersRequest, correlation: CorrelationContext
    ) -> ListUsersResponse:
        users, total = await self._directory.list(
            request.page, request.page_size, correlation.uuid
        )
        return ListUsersResponse(
            users=[UserResponse.model_validate(u) for u in users],
            pagination=PageInfo.build(request.page, request.page_size, total),
        )

    def _found(
        self,
        user: UserProfile | None,
        identifier: str,
        operation: str,
        correlation: CorrelationContext,
    ) -> UserResponse:
        if user is None:
            raise_resource_not_found(
                service=self._service_name,
                operation=operation,
                resource_type="User",
                resource_id=identifier,
                correlation_id=correlation.uuid,
            )
        return UserResponse.model_validate(user)
