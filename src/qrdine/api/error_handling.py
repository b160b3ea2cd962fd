from __future__ import annotations

from typing import Any, cast

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from qrdine.api.dependencies import InvalidPrincipalError
from qrdine.api.middleware.request_id import get_request_id
from qrdine.application.auth import AdminAccessRequiredError, AuthenticationRequiredError
from qrdine.application.errors import (
    ConflictError,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from qrdine.application.use_cases.claim_table import (
    MissingSessionTokenError,
    TableInUseError,
    TableLockedError,
    TableNotFoundError,
)
from qrdine.application.use_cases.get_menu import MenuNotFoundError
from qrdine.application.use_cases.get_order import OrderNotFoundError
from qrdine.application.use_cases.manage_tables import TableOccupiedError, TableUsernameTakenError
from qrdine.application.use_cases.order_action import (
    InvalidOrderTransitionError,
    OrderConflictError,
    OrderOwnershipError,
)
from qrdine.application.use_cases.place_order import (
    CustomerLoginRequiredError,
    InvalidOrderRequestError,
    MenuItemUnavailableError,
    RestaurantNotFoundError,
    TableNotActiveError,
)
from qrdine.application.use_cases.reviews import InvalidReviewError, ReviewNotFoundError
from qrdine.application.use_cases.staff_calls import StaffCallNotFoundError
from qrdine.application.use_cases.table_access import TableLockBlockedError, TableStateChangedError


def _error_response(
    *,
    status_code: int,
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": {
                "code": code,
                "message": message,
                "details": jsonable_encoder(details or {}),
            },
            "requestId": get_request_id(),
        },
    )


def _exception_handler(status_code: int, code: str):
    async def handler(_: Request, exc: Exception) -> JSONResponse:
        details = getattr(exc, "details", None)
        return _error_response(
            status_code=status_code,
            code=code,
            message=str(exc),
            details=details if isinstance(details, dict) else None,
        )

    return handler


async def _http_exception_handler(_: Request, exc: Exception) -> JSONResponse:
    http_exc = cast(StarletteHTTPException, exc)
    message = str(http_exc.detail) if http_exc.detail else "request failed"
    code = "HTTP_ERROR"
    if http_exc.status_code == 404:
        code = "NOT_FOUND"
    elif http_exc.status_code == 405:
        code = "METHOD_NOT_ALLOWED"
    elif http_exc.status_code == 400:
        code = "BAD_REQUEST"
    return _error_response(
        status_code=http_exc.status_code,
        code=code,
        message=message,
    )


async def _validation_exception_handler(_: Request, exc: Exception) -> JSONResponse:
    validation_exc = cast(RequestValidationError, exc)
    return _error_response(
        status_code=400,
        code="INVALID_REQUEST",
        message="request validation failed",
        details={"errors": validation_exc.errors()},
    )


def register_exception_handlers(app: FastAPI) -> None:
    mappings: list[tuple[type[Exception], int, str]] = [
        (TableNotFoundError, 404, "TABLE_NOT_FOUND"),
        (RestaurantNotFoundError, 404, "RESTAURANT_NOT_FOUND"),
        (MenuNotFoundError, 404, "MENU_NOT_FOUND"),
        (OrderNotFoundError, 404, "ORDER_NOT_FOUND"),
        (StaffCallNotFoundError, 404, "STAFF_CALL_NOT_FOUND"),
        (ReviewNotFoundError, 404, "REVIEW_NOT_FOUND"),
        (TableLockedError, 403, "TABLE_LOCKED"),
        (TableInUseError, 403, "TABLE_IN_USE"),
        (TableLockBlockedError, 400, "TABLE_LOCK_BLOCKED"),
        (TableStateChangedError, 409, "TABLE_STATE_CHANGED"),
        (TableNotActiveError, 400, "TABLE_NOT_ACTIVE"),
        (TableUsernameTakenError, 409, "TABLE_USERNAME_TAKEN"),
        (TableOccupiedError, 409, "TABLE_OCCUPIED"),
        (MenuItemUnavailableError, 400, "MENU_ITEM_UNAVAILABLE"),
        (InvalidOrderTransitionError, 409, "INVALID_ORDER_TRANSITION"),
        (OrderConflictError, 409, "CONFLICT"),
        (OrderOwnershipError, 403, "ORDER_NOT_OWNED"),
        (CustomerLoginRequiredError, 401, "CUSTOMER_LOGIN_REQUIRED"),
        (MissingSessionTokenError, 400, "INVALID_REQUEST"),
        (InvalidOrderRequestError, 400, "INVALID_REQUEST"),
        (InvalidReviewError, 400, "INVALID_REQUEST"),
        (InvalidPrincipalError, 401, "UNAUTHORIZED"),
        (AuthenticationRequiredError, 401, "UNAUTHORIZED"),
        (AdminAccessRequiredError, 403, "FORBIDDEN"),
    ]
    # anything a use case raises without an explicit row falls back to its kind
    fallbacks: list[tuple[type[Exception], int, str]] = [
        (NotFoundError, 404, "NOT_FOUND"),
        (UnauthorizedError, 401, "UNAUTHORIZED"),
        (ForbiddenError, 403, "FORBIDDEN"),
        (ConflictError, 409, "CONFLICT"),
        (InvalidStateError, 409, "INVALID_STATE"),
        (ValidationError, 400, "INVALID_REQUEST"),
    ]

    for exc_cls, status_code, code in mappings + fallbacks:
        app.add_exception_handler(exc_cls, _exception_handler(status_code, code))

    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
