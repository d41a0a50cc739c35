"""Loan routes, forwarded to the loan service.

Every loan route needs an authenticated caller. The borrower id and email
always come from the validated token, so a user can only borrow and return
under their own identity. ``/loans/all`` is declared before ``/loans/{id}``
so it is not captured as an id.
"""

from __future__ import annotations

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from library_core.domain_enums import LoanStatus
from library_service_libs.error_handling import CorrelationContext
from library_service_libs.logging_utils import create_service_logger
from pydantic import UUID4

from ..app.auth_provider import AdminUser, AuthenticatedUser
from ..implementations.rpc_client import ServiceClients
from ..models.requests import LoanBody, LoanStatusBody
from ._route_utils import Pagination, pagination_params, success

router = APIRouter(prefix="/loans", route_class=DishkaRoute)
logger = create_service_logger("api_gateway.loan_routes")


def _list_payload(pagination: Pagination, status: LoanStatus | None) -> dict:
    payload: dict = pagination.as_payload()
    if status is not None:
        payload["status"] = status.value
    return payload


@router.post("", status_code=201)
async def create_loan(
    body: LoanBody,
    user: FromDishka[AuthenticatedUser],
    clients: FromDishka[ServiceClients],
    correlation: FromDishka[CorrelationContext],
) -> JSONResponse:
    payload = {"user_id": str(user.user_id), "email": user.email, "book_id": str(body.book_id)}
    loan = await clients.loan.call("CreateLoan", payload, correlation)
    logger.info("Loan created", loan_id=loan.get("id"), user_id=str(user.user_id))
    return success("Loan created successfully", loan, status_code=201)


@router.get("")
async def list_user_loans(
    user: FromDishka[AuthenticatedUser],
    clients: FromDishka[ServiceClients],
    correlation: FromDishka[CorrelationContext],
    pagination: Pagination = Depends(pagination_params),
    status: LoanStatus | None = Query(None),
) -> JSONResponse:
    payload = {"user_id": str(user.user_id), **_list_payload(pagination, status)}
    result = await clients.loan.call("ListUserLoans", payload, correlation)
    return success("List user loans fetched successfully", result)


@router.get("/all")
async def list_all_loans(
    _admin: FromDishka[AdminUser],
    clients: FromDishka[ServiceClients],
    correlation: FromDishka[CorrelationContext],
    pagination: Pagination = Depends(pagination_params),
    status: LoanStatus | None = Query(None),
) -> JSONResponse:
    result = await clients.loan.call("ListLoans", _list_payload(pagination, status), correlation)
    return success("List loans fetched successfully", result)


@router.get("/{loan_id}")
async def get_loan(
    loan_id: UUID4,
    user: FromDishka[AuthenticatedUser],
    clients: FromDishka[ServiceClients],
    correlation: FromDishka[CorrelationContext],
) -> JSONResponse:
    payload = {
        "loan_id": str(loan_id),
        "user_id": str(user.user_id),
        "role": user.role.value,
    }
    loan = await clients.loan.call("GetLoan", payload, correlation)
    return success(f"Loan data with id '{loan_id}' fetched successfully", loan)


@router.patch("/{loan_id}/status")
async def update_loan_status(
    loan_id: UUID4,
    body: LoanStatusBody,
    admin: FromDishka[AdminUser],
    clients: FromDishka[ServiceClients],
    correlation: FromDishka[CorrelationContext],
) -> JSONResponse:
    payload = {"loan_id": str(loan_id), "status": body.status.value}
    loan = await clients.loan.call("UpdateLoanStatus", payload, correlation)
    logger.info(
        "Loan status updated",
        loan_id=str(loan_id),
        status=body.status.value,
        admin_id=str(admin.user_id),
    )
    return success("Loan status updated successfully", loan)


@router.post("/{loan_id}/return")
async def return_loan(
    loan_id: UUID4,
    user: FromDishka[AuthenticatedUser],
    clients: FromDishka[ServiceClients],
    correlation: FromDishka[CorrelationContext],
) -> JSONResponse:
    payload = {
        "loan_id": str(loan_id),
        "user_id": str(user.user_id),
        "email": user.email,
        "role": user.role.value,
    }
    loan = await clients.loan.call("ReturnLoan", payload, correlation)
    return success("Loan returned successfully", loan)
