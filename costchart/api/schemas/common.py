from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


class RequestModel(BaseModel):
    """Base for filter request bodies; unknown fields are rejected."""

    model_config = ConfigDict(extra="forbid")


def ok(payload: Any, *, request_id: str, meta: dict[str, Any] | None = None) -> dict[str, Any]:
    """Success envelope: ``{"data": ..., "meta": {"request_id": ...}}``."""
    return {"data": payload, "meta": {"request_id": request_id, **(meta or {})}}


def err(*, request_id: str, code: str, message: str, details: Any | None = None) -> dict[str, Any]:
    """Error envelope used by every exception handler."""
    return {
        "error": {"code": code, "message": message, "details": details},
        "request_id": request_id,
    }
