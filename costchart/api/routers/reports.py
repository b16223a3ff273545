from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile
from starlette.concurrency import run_in_threadpool

from costchart.api.dependencies import ApiContext, get_ctx
from costchart.api.schemas.common import ok
from costchart.application.services.import_service import UploadedFile
from costchart.observability.request_context import current_request_id

router = APIRouter(tags=["reports"])


@router.get("/reports")
def get_reports(ctx: Annotated[ApiContext, Depends(get_ctx)]) -> dict:
    return ok(ctx.session.store.to_payload(), request_id=current_request_id())


@router.post("/reports")
async def upload_reports(
    ctx: Annotated[ApiContext, Depends(get_ctx)],
    request: Request,
    files: list[UploadFile] = File(...),
) -> dict:
    max_bytes = ctx.settings.max_upload_bytes
    content_length = request.headers.get("content-length", "")
    if content_length.isdigit() and int(content_length) > max_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"payload too large: {content_length} > {max_bytes}",
        )

    uploads: list[UploadedFile] = []
    total_bytes = 0
    for item in files:
        content = await item.read()
        total_bytes += len(content)
        if total_bytes > max_bytes:
            raise HTTPException(
                status_code=413,
                detail=f"payload too large: {total_bytes} > {max_bytes}",
            )
        uploads.append(UploadedFile(name=item.filename or "", content=content))

    result = await run_in_threadpool(ctx.session.import_files, uploads)
    return ok(
        result.to_payload(),
        request_id=current_request_id(),
        meta={"months_loaded": len(ctx.session.store.months())},
    )


@router.delete("/reports")
def clear_reports(ctx: Annotated[ApiContext, Depends(get_ctx)]) -> dict:
    ctx.session.clear()
    return ok({"ok": True}, request_id=current_request_id())
