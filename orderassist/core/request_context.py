from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator


_REQUEST_ID_CTX: ContextVar[str | None] = ContextVar("request_id", default=None)
_SESSION_ID_CTX: ContextVar[str | None] = ContextVar("session_id", default=None)


def set_request_context(*, request_id: str | None = None, session_id: str | None = None) -> None:
    if request_id is not None:
        _REQUEST_ID_CTX.set(request_id)
    if session_id is not None:
        _SESSION_ID_CTX.set(session_id)


def get_request_id() -> str | None:
    return _REQUEST_ID_CTX.get()


def get_session_id() -> str | None:
    return _SESSION_ID_CTX.get()


def clear_request_context() -> None:
    _REQUEST_ID_CTX.set(None)
    _SESSION_ID_CTX.set(None)


@contextmanager
def bind_session_id(session_id: str) -> Iterator[None]:
    """Scope ``session_id`` to the block, restoring whatever was bound before."""
    token = _SESSION_ID_CTX.set(session_id)
    try:
        yield
    finally:
        _SESSION_ID_CTX.reset(token)
