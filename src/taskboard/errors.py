"""Application-level exception handling helpers."""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any, Mapping

from fastapi import FastAPI, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.requests import Request

from .core.context import REQUEST_ID_HEADER, request_id_scope
from .schemas.system import ResponseEnvelope

logger = logging.getLogger(__name__)

SERVER_ERROR_MESSAGE = "Server error"


class ApplicationError(Exception):
    """Base class for domain-specific errors."""

    def __init__(
        self,
        message: str,
        *,
        code: str = "application_error",
        status_code: int = status.HTTP_400_BAD_REQUEST,
        details: Any | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details


class ValidationError(ApplicationError):
    """Missing or malformed input, or a reference to a document that does not exist."""

    def __init__(
        self,
        message: str = "Validation failed.",
        *,
        code: str = "validation_error",
        details: Any | None = None,
    ) -> None:
        super().__init__(
            message,
            code=code,
            status_code=status.HTTP_400_BAD_REQUEST,
            details=details,
        )


class NotFoundError(ApplicationError):
    """Error representing missing resources."""

    def __init__(
        self,
        message: str = "Resource not found.",
        *,
        code: str = "not_found",
        details: Any | None = None,
    ) -> None:
        super().__init__(
            message,
            code=code,
            status_code=status.HTTP_404_NOT_FOUND,
            details=details,
        )


class ServerError(ApplicationError):
    """Error representing unexpected server failures."""

    def __init__(
        self,
        message: str = SERVER_ERROR_MESSAGE,
        *,
        code: str = "server_error",
        details: Any | None = None,
    ) -> None:
        super().__init__(
            message,
            code=code,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            details=details,
        )


def _request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


def _error_response(
    request: Request,
    *,
    status_code: int,
    message: str,
    headers: Mapping[str, str] | None = None,
) -> JSONResponse:
    payload = ResponseEnvelope(message=message, data={})
    response = JSONResponse(status_code=status_code, content=payload.model_dump())
    if headers:
        response.headers.update(headers)
    request_id = _request_id(request)
    if request_id:
        response.headers.setdefault(REQUEST_ID_HEADER, request_id)
    return response


def _http_exception_message(status_code: int, detail: Any) -> str:
    if isinstance(detail, str) and detail:
        return detail
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return "Error"


def register_exception_handlers(app: FastAPI) -> None:
    """Register exception handlers with the provided FastAPI app."""

    @app.exception_handler(ApplicationError)
    async def _handle_application_error(
        request: Request,
        exc: ApplicationError,
    ) -> JSONResponse:
        with request_id_scope(_request_id(request)):
            log = logger.error if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR else logger.warning
            log(
                exc.message,
                extra={"code": exc.code, "status_code": exc.status_code, "path": str(request.url.path)},
            )
            return _error_response(request, status_code=exc.status_code, message=exc.message)

    @app.exception_handler(RequestValidationError)
    async def _handle_request_validation_error(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        with request_id_scope(_request_id(request)):
            logger.warning(
                "Request validation failed",
                extra={"errors": exc.errors()},
            )
            return _error_response(
                request,
                status_code=status.HTTP_400_BAD_REQUEST,
                message="Invalid request",
            )

    @app.exception_handler(PyMongoError)
    async def _handle_store_error(
        request: Request,
        exc: PyMongoError,
    ) -> JSONResponse:
        with request_id_scope(_request_id(request)):
            logger.error("Document store operation failed.", exc_info=exc)
            return _error_response(
                request,
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                message=SERVER_ERROR_MESSAGE,
            )

    @app.exception_handler(StarletteHTTPException)
    async def _handle_http_exception(
        request: Request,
        exc: StarletteHTTPException,
    ) -> JSONResponse:
        with request_id_scope(_request_id(request)):
            log = logger.error if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR else logger.warning
            log(
                "HTTP exception raised",
                extra={"status_code": exc.status_code, "path": str(request.url.path)},
            )
            return _error_response(
                request,
                status_code=exc.status_code,
                message=_http_exception_message(exc.status_code, exc.detail),
                headers=exc.headers or None,
            )

    @app.exception_handler(Exception)
    async def _handle_unhandled_exception(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        with request_id_scope(_request_id(request)):
            logger.exception("Unhandled application error.")
            return _error_response(
                request,
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                message=SERVER_ERROR_MESSAGE,
            )


__all__ = [
    "ApplicationError",
    "NotFoundError",
    "SERVER_ERROR_MESSAGE",
    "ServerError",
    "ValidationError",
    "register_exception_handlers",
]
