from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from costchart.api.dependencies import ApiContext, get_ctx
from costchart.api.schemas.common import ok
from costchart.api.schemas.filters import ModePayload, SearchPayload, TogglePayload
from costchart.application.services.filter_state import TOP_N_DEFAULT
from costchart.domain.enums import Dimension
from costchart.observability.request_context import current_request_id

router = APIRouter(tags=["filters"])


def _filters(ctx: ApiContext) -> dict:
    return ok(ctx.session.filters_payload(), request_id=current_request_id())


@router.get("/filters")
def get_filters(ctx: Annotated[ApiContext, Depends(get_ctx)]) -> dict:
    return _filters(ctx)


@router.put("/filters/mode")
def put_mode(
    payload: ModePayload,
    ctx: Annotated[ApiContext, Depends(get_ctx)],
) -> dict:
    ctx.session.set_mode(payload.mode)
    return _filters(ctx)


@router.post("/filters/services/top")
def select_top(
    ctx: Annotated[ApiContext, Depends(get_ctx)],
    n: int = Query(default=TOP_N_DEFAULT, ge=0, le=1000),
) -> dict:
    ctx.session.select_top(n)
    return _filters(ctx)


@router.post("/filters/{dimension}/toggle")
def toggle(
    dimension: Dimension,
    payload: TogglePayload,
    ctx: Annotated[ApiContext, Depends(get_ctx)],
) -> dict:
    ctx.session.toggle(dimension, payload.key)
    return _filters(ctx)


@router.post("/filters/{dimension}/select-all")
def select_all(dimension: Dimension, ctx: Annotated[ApiContext, Depends(get_ctx)]) -> dict:
    ctx.session.select_all(dimension)
    return _filters(ctx)


@router.post("/filters/{dimension}/clear")
def clear_selection(
    dimension: Dimension, ctx: Annotated[ApiContext, Depends(get_ctx)]
) -> dict:
    ctx.session.clear_selection(dimension)
    return _filters(ctx)


@router.put("/filters/{dimension}/search")
def put_search(
    dimension: Dimension,
    payload: SearchPayload,
    ctx: Annotated[ApiContext, Depends(get_ctx)],
) -> dict:
    ctx.session.set_search(dimension, payload.text)
    return _filters(ctx)
