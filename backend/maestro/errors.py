"""
Central mapping from exceptions to JSON error responses.

Every error body has the same shape::

    {"error": "<CODE>", "message": "<text>", "details": {...}}

5xx responses never carry exception text; the cause is logged instead.
"""

import logging
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.exceptions import DomainException, RepositoryException

logger = logging.getLogger(__name__)

STATUS_CODES = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
}


def _error(status: int, code: str, message: str, details: Optional[Any] = None) -> JSONResponse:
    body = {
        "error": code,
        "message": message,
        "details": jsonable_encoder(details) if details is not None else {},
    }
    return JSONResponse(body, status_code=status)


def _internal_error() -> JSONResponse:
    return _error(500, "INTERNAL_ERROR", "Internal server error")


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(DomainException)
    async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error(f"{exc.code} on {request.url.path}: {exc.message}")
            return _internal_error()
        return JSONResponse(jsonable_encoder(exc.to_response_body()), status_code=exc.status_code)

    @app.exception_handler(RepositoryException)
    async def repository_exception_handler(
        request: Request, exc: RepositoryException
    ) -> JSONResponse:
        logger.error(f"Repository failure on {request.url.path}: {exc}")
        return _internal_error()

    # Also receives fastapi.HTTPException, which subclasses the Starlette one
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        message = exc.detail if isinstance(exc.detail, str) else ""
        details = exc.detail if isinstance(exc.detail, dict) else None
        code = STATUS_CODES.get(exc.status_code, "ERROR")
        return _error(exc.status_code, code, message, details)

    @app.exception_handler(RequestValidationError)
    async def request_validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return _error(
            400,
            "VALIDATION_ERROR",
            "Request validation failed",
            {"errors": exc.errors()},
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(f"Unhandled error on {request.url.path}")
        return _internal_error()
