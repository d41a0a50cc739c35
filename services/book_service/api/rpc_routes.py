"""RPC routes for the Book Service: catalog CRUD and stock operations."""

from __future__ import annotations

from typing import Any

from dishka import FromDishka
from library_service_libs.error_handling import CorrelationContext
from library_service_libs.rpc import parse_rpc_request, rpc_blueprint, rpc_response
from quart_dishka import inject

from services.book_service.api.schemas import (
    AdjustBookStockRequest,
    CreateBookRequest,
    DeleteBookRequest,
    GetBookRequest,
    ListBooksByAuthorRequest,
    ListBooksByCategoryRequest,
    ListBooksRequest,
    UpdateBookRequest,
    UpdateBookStockRequest,
)
from services.book_service.domain_handlers.book_handler import BookHandler

bp = rpc_blueprint("book")

RpcResult = tuple[dict[str, Any], int]


@bp.post("/CreateBook")
@inject
async def create_book(
    handler: FromDishka[BookHandler], correlation: FromDishka[CorrelationContext]
) -> RpcResult:
    req = await parse_rpc_request(CreateBookRequest)
    return rpc_response(await handler.create_book(req, correlation))


@bp.post("/GetBook")
@inject
async def get_book(
    handler: FromDishka[BookHandler], correlation: FromDishka[CorrelationContext]
) -> RpcResult:
    req = await parse_rpc_request(GetBookRequest)
    return rpc_response(await handler.get_book(req, correlation))


@bp.post("/UpdateBook")
@inject
async def update_book(
    handler: FromDishka[BookHandler], correlation: FromDishka[CorrelationContext]
) -> RpcResult:
    req = await parse_rpc_request(UpdateBookRequest)
    return rpc_response(await handler.update_book(req, correlation))


@bp.post("/DeleteBook")
@inject
async def delete_book(
    handler: FromDishka[BookHandler], correlation: FromDishka[CorrelationContext]
) -> RpcResult:
    req = await parse_rpc_request(DeleteBookRequest)
    return rpc_response(await handler.delete_book(req, correlation))


@bp.post("/ListBooks")
@inject
async def list_books(
    handler: FromDishka[BookHandler], correlation: FromDishka[CorrelationContext]
) -> RpcResult:
    req = await parse_rpc_request(ListBooksRequest)
    return rpc_response(await handler.list_books(req, correlation))


@bp.post("/ListBooksByAuthor")
@inject
async def list_books_by_author(
    handler: FromDishka[BookHandler], correlation: FromDishka[CorrelationContext]
) -> RpcResult:
    req = await parse_rpc_request(ListBooksByAuthorRequest)
    return rpc_response(await handler.list_books_by_author(req, correlation))


@bp.post("/ListBooksByCategory")
@inject
async def list_books_by_category(
    handler: FromDishka[BookHandler], correlation: FromDishka[CorrelationContext]
) -> RpcResult:
    req = await parse_rpc_request(ListBooksByCategoryRequest)
    return rpc_response(await handler.list_books_by_category(req, correlation))


# Stock operations


@bp.post("/UpdateBookStock")
@inject
async def update_book_stock(
    handler: FromDishka[BookHandler], correlation: FromDishka[CorrelationContext]
) -> RpcResult:
    req = await parse_rpc_request(UpdateBookStockRequest)
    return rpc_response(await handler.update_stock(req, correlation))


@bp.post("/IncrementBookStock")
@inject
async def increment_book_stock(
    handler: FromDishka[BookHandler], correlation: FromDishka[CorrelationContext]
) -> RpcResult:
    req = await parse_rpc_request(AdjustBookStockRequest)
    return rpc_response(await handler.increment_stock(req, correlation))


@bp.post("/DecrementBookStock")
@inject
async def decrement_book_stock(
    handler: FromDishka[BookHandler], correlation: FromDishka[CorrelationContext]
) -> RpcResult:
    req = await parse_rpc_request(AdjustBookStockRequest)
    return rpc_response(await handler.decrement_stock(req, correlation))
