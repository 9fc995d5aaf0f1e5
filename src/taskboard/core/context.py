"""Request-scoped context helpers."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar, Token

REQUEST_ID_HEADER = "X-Request-ID"
UNBOUND_REQUEST_ID = "-"

_request_id: ContextVar[str] = ContextVar("taskboard_request_id", default=UNBOUND_REQUEST_ID)


def get_request_id() -> str:
    return _request_id.get()


def bind_request_id(request_id: str) -> Token[str]:
    return _request_id.set(request_id)


def reset_request_id(token: Token[str]) -> None:
    _request_id.reset(token)


@contextmanager
def request_id_scope(request_id: str | None) -> Iterator[str]:
    """Bind ``request_id`` for the body of the block; no-op when it is empty."""

    if not request_id:
        yield get_request_id()
        return
    token = bind_request_id(request_id)
    try:
        yield request_id
    finally:
        reset_request_id(token)


__all__ = [
    "REQUEST_ID_HEADER",
    "UNBOUND_REQUEST_ID",
    "bind_request_id",
    "get_request_id",
    "request_id_scope",
    "reset_request_id",
]
