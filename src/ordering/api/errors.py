"""Map ordering failures to HTTP error responses.

Every error body has the same shape::

    {"success": false, "statusCode": 400, "message": "...", "details": {...}}
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from protean.exceptions import ObjectNotFoundError, ValidationError

from ordering.errors import (
    InvalidLineItem,
    NotAuthenticated,
    NotAuthorized,
    OrderingError,
    OutOfStock,
    ProductNotFound,
    StockContention,
)

logger = structlog.get_logger(__name__)

ERROR_STATUS_CODES = {
    ProductNotFound: 404,
    ObjectNotFoundError: 404,
    OutOfStock: 400,
    InvalidLineItem: 400,
    ValidationError: 400,
    NotAuthenticated: 401,
    NotAuthorized: 403,
    StockContention: 503,
}


def status_for(exc: Exception) -> int:
    for cls in type(exc).__mro__:
        if cls in ERROR_STATUS_CODES:
            return ERROR_STATUS_CODES[cls]
    return 500


def _message_of(exc: Exception, default: str) -> str:
    message = getattr(exc, "message", None)
    if isinstance(message, str) and message:
        return message
    messages = getattr(exc, "messages", None)
    if isinstance(messages, str) and messages:
        return messages
    if exc.args and isinstance(exc.args[0], str):
        return exc.args[0]
    return default


def _details_of(exc: Exception):
    messages = getattr(exc, "messages", None)
    if isinstance(messages, dict):
        return messages
    if exc.args and isinstance(exc.args[0], dict):
        return exc.args[0]
    return None


def error_response(status_code: int, message: str, details=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "statusCode": status_code,
            "message": message,
            "details": details,
        },
    )


async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return error_response(status_for(exc), _message_of(exc, "Validation failed"), _details_of(exc))


async def not_found_handler(request: Request, exc: ObjectNotFoundError) -> JSONResponse:
    return error_response(status_for(exc), _message_of(exc, "Resource not found"), _details_of(exc))


async def ordering_error_handler(request: Request, exc: OrderingError) -> JSONResponse:
    status_code = status_for(exc)
    if status_code >= 500:
        logger.warning("request_failed", path=request.url.path, error=type(exc).__name__, message=exc.message)
    return error_response(status_code, exc.message)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = {
        ".".join(str(part) for part in error["loc"]): [error["msg"]]
        for error in exc.errors()
    }
    return error_response(400, "Invalid request", details)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(ObjectNotFoundError, not_found_handler)
    app.add_exception_handler(OrderingError, ordering_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
