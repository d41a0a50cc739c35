"""RPC routes for the Loan Service."""

from __future__ import annotations

from typing import Any

from dishka import FromDishka
from library_service_libs.error_handling import CorrelationContext
from library_service_libs.rpc import parse_rpc_request, rpc_blueprint, rpc_response
from quart_dishka import inject

from services.loan_service.api.schemas import (
    CreateLoanRequest,
    GetLoanRequest,
    ListLoansRequest,
    ListUserLoansRequest,
    ReturnLoanRequest,
    UpdateLoanStatusRequest,
)
from services.loan_service.domain_handlers.loan_handler import LoanHandler

bp = rpc_blueprint("loan")

RpcResult = tuple[dict[str, Any], int]


@bp.post("/CreateLoan")
@inject
async def create_loan(
    handler: FromDishka[LoanHandler], correlation: FromDishka[CorrelationContext]
) -> RpcResult:
    req = await parse_rpc_request(CreateLoanRequest)
    return rpc_response(await handler.create_loan(req, correlation))


@bp.post("/ReturnLoan")
@inject
async def return_loan(
    handler: FromDishka[LoanHandler], correlation: FromDishka[CorrelationContext]
) -> RpcResult:
    req = await parse_rpc_request(ReturnLoanRequest)
    return rpc_response(await handler.return_loan(req, correlation))


@bp.post("/UpdateLoanStatus")
@inject
async def update_loan_status(
    handler: FromDishka[LoanHandler], correlation: FromDishka[CorrelationContext]
) -> RpcResult:
    req = await parse_rpc_request(UpdateLoanStatusRequest)
    return rpc_response(await handler.update_loan_status(req, correlation))


@bp.post("/GetLoan")
@inject
async def get_loan(
    handler: FromDishka[LoanHandler], correlation: FromDishka[CorrelationContext]
) -> RpcResult:
    req = await parse_rpc_request(GetLoanRequest)
    return rpc_response(await handler.get_loan(req, correlation))


@bp.post("/ListUserLoans")
@inject
async def list_user_loans(
    handler: FromDishka[LoanHandler], correlation: FromDishka[CorrelationContext]
) -> RpcResult:
    req = await parse_rpc_request(ListUserLoansRequest)
    return rpc_response(await handler.list_user_loans(req, correlation))


@bp.post("/ListLoans")
@inject
async def list_loans(
    handler: FromDishka[LoanHandler], correlation: FromDishka[CorrelationContext]
) -> RpcResult:
    req = await parse_rpc_request(ListLoansRequest)
    return rpc_response(await handler.list_loans(req, correlation))
