"""Request-scoped context helpers."""

from __future__ import annotations

from contextvars import ContextVar, Token

REQUEST_ID_HEADER = "X-Request-ID"

_request_id_ctx_var: ContextVar[str] = ContextVar("request_id", default="-")
_user_id_ctx_var: ContextVar[str] = ContextVar("user_id", default="-")


def get_request_id() -> str:
    """Return the request identifier for the current execution context."""
    return _request_id_ctx_var.get()


def bind_request_id(request_id: str) -> Token[str]:
    """Bind a request identifier to the current execution context."""
    return _request_id_ctx_var.set(request_id)


def reset_request_id(token: Token[str]) -> None:
    _request_id_ctx_var.reset(token)


def get_user_id() -> str:
    """Return the authenticated user id bound to this context, or ``"-"``."""
    return _user_id_ctx_var.get()


def bind_user_id(user_id: int | str) -> Token[str]:
    """Record the caller identity resolved by the authentication dependency."""
    return _user_id_ctx_var.set(str(user_id))


def reset_user_id(token: Token[str]) -> None:
    _user_id_ctx_var.reset(token)


__all__ = [
    "REQUEST_ID_HEADER",
    "bind_request_id",
    "bind_user_id",
    "get_request_id",
    "get_user_id",
    "reset_request_id",
    "reset_user_id",
]
