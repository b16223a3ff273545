from __future__ import annotations

from contextvars import ContextVar, Token

_REQUEST_ID: ContextVar[str] = ContextVar("costchart_request_id", default="-")


def current_request_id() -> str:
    request_id = str(_REQUEST_ID.get() or "").strip()
    return request_id or "-"


def set_request_id(request_id: str) -> Token[str]:
    value = str(request_id or "").strip() or "-"
    return _REQUEST_ID.set(value)


def reset_request_id(token: Token[str]) -> None:
    _REQUEST_ID.reset(token)
