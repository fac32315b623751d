"""Domain exceptions and the handlers that render them as JSON error envelopes.

Every failure leaves the service as ``{"code", "message", "details"}``, with
the request's correlation id folded into ``details`` so clients can quote it
when reporting a problem.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from http import HTTPStatus
from typing import Any

from fastapi import FastAPI, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.requests import Request

from .core.context import REQUEST_ID_HEADER, bind_request_id, reset_request_id
from .schemas.system import ErrorResponse

logger = logging.getLogger(__name__)


class ApplicationError(Exception):
    """An error the service expects and knows how to report to the caller."""

    def __init__(
        self,
        message: str,
        *,
        code: str = "application_error",
        status_code: int = status.HTTP_400_BAD_REQUEST,
        details: Any | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details
        self.headers = dict(headers) if headers else None


class ValidationError(ApplicationError):
    """Malformed or missing input, carrying field-level messages."""

    def __init__(
        self,
        message: str = "Request validation failed.",
        *,
        errors: list[dict[str, Any]] | None = None,
        code: str = "validation_error",
    ) -> None:
        self.errors = list(errors or [])
        super().__init__(
            message,
            code=code,
            status_code=status.HTTP_400_BAD_REQUEST,
            details={"errors": self.errors},
        )


class AuthenticationError(ApplicationError):
    """Bad credentials, or a missing, expired or invalid bearer token."""

    def __init__(self, message: str = "Not authorized.", *, code: str = "unauthorized") -> None:
        super().__init__(
            message,
            code=code,
            status_code=status.HTTP_401_UNAUTHORIZED,
            headers={"WWW-Authenticate": "Bearer"},
        )


class NotFoundError(ApplicationError):
    """Resource absent, or present but owned by somebody else."""

    def __init__(self, message: str = "Resource not found.", *, code: str = "not_found") -> None:
        super().__init__(message, code=code, status_code=status.HTTP_404_NOT_FOUND)


class ConflictError(ApplicationError):
    """Uniqueness violation such as a duplicate account email."""

    def __init__(self, message: str = "Resource already exists.", *, code: str = "conflict") -> None:
        super().__init__(message, code=code, status_code=status.HTTP_409_CONFLICT)


class InternalError(ApplicationError):
    """Unexpected fault; the message returned to clients is always generic."""

    def __init__(self, message: str = "Internal server error.", *, code: str = "server_error") -> None:
        super().__init__(message, code=code, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


_HTTP_ERROR_CODES: dict[int, str] = {
    status.HTTP_400_BAD_REQUEST: "bad_request",
    status.HTTP_401_UNAUTHORIZED: "unauthorized",
    status.HTTP_403_FORBIDDEN: "forbidden",
    status.HTTP_404_NOT_FOUND: "not_found",
    status.HTTP_405_METHOD_NOT_ALLOWED: "method_not_allowed",
    status.HTTP_409_CONFLICT: "conflict",
}


def _request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


@contextmanager
def _request_context(request: Request) -> Iterator[None]:
    """Rebind the correlation id while a handler runs outside the middleware's scope."""
    request_id = _request_id(request)
    token = bind_request_id(request_id) if request_id else None
    try:
        yield
    finally:
        if token is not None:
            reset_request_id(token)


def _with_request_id(details: Any | None, request_id: str | None) -> Any | None:
    if not request_id:
        return details
    if details is None:
        return {"request_id": request_id}
    if isinstance(details, dict):
        return {"request_id": request_id, **details} if "request_id" not in details else details
    return {"request_id": request_id, "detail": details}


def _render(request: Request, error: ApplicationError) -> JSONResponse:
    request_id = _request_id(request)
    envelope = ErrorResponse(
        code=error.code,
        message=error.message,
        details=_with_request_id(error.details, request_id),
    )
    response = JSONResponse(status_code=error.status_code, content=envelope.model_dump(mode="json"))
    for name, value in (error.headers or {}).items():
        response.headers[name] = value
    if request_id:
        response.headers.setdefault(REQUEST_ID_HEADER, request_id)
    return response


def _log_client_or_server_error(error: ApplicationError, request: Request) -> None:
    level = logging.ERROR if error.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR else logging.INFO
    logger.log(
        level,
        "Request failed",
        extra={"code": error.code, "status_code": error.status_code, "path": request.url.path},
    )


def _field_errors(exc: RequestValidationError) -> list[dict[str, Any]]:
    errors: list[dict[str, Any]] = []
    for error in exc.errors():
        location, *path = [str(part) for part in error.get("loc", ())] or ["body"]
        errors.append(
            {
                "field": ".".join(path) or location,
                "message": error.get("msg", "Invalid value."),
                "location": location,
            }
        )
    return errors


def _from_http_exception(exc: StarletteHTTPException) -> ApplicationError:
    if isinstance(exc.detail, str):
        message = exc.detail
    else:
        try:
            message = HTTPStatus(exc.status_code).phrase
        except ValueError:
            message = "Error"
    return ApplicationError(
        message,
        code=_HTTP_ERROR_CODES.get(exc.status_code, "http_error"),
        status_code=exc.status_code,
        headers=exc.headers or None,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register exception handlers with the provided FastAPI app."""

    @app.exception_handler(ApplicationError)
    async def _handle_application_error(request: Request, exc: ApplicationError) -> JSONResponse:
        with _request_context(request):
            _log_client_or_server_error(exc, request)
            return _render(request, exc)

    @app.exception_handler(RequestValidationError)
    async def _handle_request_validation_error(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        with _request_context(request):
            error = ValidationError(errors=_field_errors(exc))
            logger.info("Request validation failed", extra={"errors": error.errors})
            return _render(request, error)

    @app.exception_handler(IntegrityError)
    async def _handle_integrity_error(request: Request, exc: IntegrityError) -> JSONResponse:
        with _request_context(request):
            logger.error("Database integrity error", exc_info=exc)
            return _render(request, InternalError())

    @app.exception_handler(StarletteHTTPException)
    async def _handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        with _request_context(request):
            error = _from_http_exception(exc)
            _log_client_or_server_error(error, request)
            return _render(request, error)

    @app.exception_handler(Exception)
    async def _handle_unhandled_exception(request: Request, exc: Exception) -> JSONResponse:
        with _request_context(request):
            logger.exception("Unhandled error while serving %s %s", request.method, request.url.path)
            return _render(request, InternalError())


__all__ = [
    "ApplicationError",
    "AuthenticationError",
    "ConflictError",
    "InternalError",
    "NotFoundError",
    "ValidationError",
    "register_exception_handlers",
]
