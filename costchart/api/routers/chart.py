from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from costchart.api.dependencies import ApiContext, get_ctx
from costchart.api.schemas.common import ok
from costchart.application.services.aggregator import chart_frame
from costchart.observability.request_context import current_request_id

router = APIRouter(tags=["chart"])


@router.get("/chart")
def get_chart(ctx: Annotated[ApiContext, Depends(get_ctx)]) -> dict:
    view = ctx.session.chart()
    return ok(view.to_payload(), request_id=current_request_id())


@router.get("/chart.csv")
def get_chart_csv(ctx: Annotated[ApiContext, Depends(get_ctx)]) -> Response:
    frame = chart_frame(ctx.session.chart())
    return Response(
        content=frame.to_csv(),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": 'attachment; filename="chart.csv"'},
    )


@router.get("/summary")
def get_summary(ctx: Annotated[ApiContext, Depends(get_ctx)]) -> dict:
    return ok(ctx.session.summary(), request_id=current_request_id())


@router.get("/years")
def get_years(ctx: Annotated[ApiContext, Depends(get_ctx)]) -> dict:
    years = [item.to_payload() for item in ctx.session.years()]
    return ok({"years": years}, request_id=current_request_id())


@router.get("/ranking")
def get_ranking(ctx: Annotated[ApiContext, Depends(get_ctx)]) -> dict:
    ranking = [{"service": name, "total": float(total)} for name, total in ctx.session.ranking()]
    return ok({"services": ranking}, request_id=current_request_id())
