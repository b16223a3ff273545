from __future__ import annotations

import threading
import webbrowser
from time import perf_counter
from uuid import uuid4

import uvicorn
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, Response

from costchart.api.dependencies import build_context
from costchart.api.error_handlers import register_error_handlers
from costchart.api.routers.chart import router as chart_router
from costchart.api.routers.filters import router as filters_router
from costchart.api.routers.health import router as health_router
from costchart.api.routers.reports import router as reports_router
from costchart.observability.logging import get_logger, setup_logging
from costchart.observability.request_context import reset_request_id, set_request_id
from costchart.settings import Settings, load_settings

API_PREFIX = "/api/v1"


def create_app(settings: Settings | None = None) -> FastAPI:
    config = settings or load_settings()
    setup_logging(config)

    app = FastAPI(title="costchart API", version="1.0.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.ctx = build_context(config)

    logger = get_logger()

    @app.middleware("http")
    async def request_log_middleware(request: Request, call_next):
        request_id = (
            str(request.headers.get("x-request-id", "") or "").strip()
            or uuid4().hex[:16]
        )
        token = set_request_id(request_id)
        started = perf_counter()
        req_logger = logger.bind(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )
        try:
            response = await call_next(request)
        except Exception:
            duration_ms = (perf_counter() - started) * 1000
            req_logger.bind(status_code=500).opt(exception=True).error(
                f"request failed duration_ms={duration_ms:.2f}"
            )
            reset_request_id(token)
            raise

        duration_ms = (perf_counter() - started) * 1000
        response.headers["X-Request-Id"] = request_id
        status_code = int(response.status_code)
        message = (
            f"{request.method} {request.url.path} status={status_code} "
            f"duration_ms={duration_ms:.2f}"
        )
        if status_code >= 500:
            req_logger.bind(status_code=status_code).error(message)
        elif status_code >= 400:
            req_logger.bind(status_code=status_code).warning(message)
        else:
            req_logger.bind(status_code=status_code).info(message)
        reset_request_id(token)
        return response

    register_error_handlers(app)

    app.include_router(health_router, prefix=API_PREFIX)
    app.include_router(reports_router, prefix=API_PREFIX)
    app.include_router(filters_router, prefix=API_PREFIX)
    app.include_router(chart_router, prefix=API_PREFIX)

    @app.api_route(
        f"{API_PREFIX}/{{rest:path}}",
        methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
        include_in_schema=False,
    )
    async def api_not_found(rest: str) -> Response:
        raise HTTPException(status_code=404, detail=f"route not found: {API_PREFIX}/{rest}")

    @app.get("/{full_path:path}", include_in_schema=False)
    async def fallback(full_path: str) -> Response:
        if full_path.startswith("api/"):
            return HTMLResponse(
                f"<html><body><h3>Not Found</h3><p>Use {API_PREFIX}/* endpoints.</p></body></html>",
                status_code=404,
            )
        return HTMLResponse(
            "<html><body>"
            "<h3>costchart server is running.</h3>"
            f"<p>Upload monthly-report CSV files to <code>{API_PREFIX}/reports</code> "
            f"and read the chart from <code>{API_PREFIX}/chart</code>.</p>"
            "</body></html>"
        )

    return app


def serve(host: str = "127.0.0.1", port: int = 8000, open_browser: bool = True) -> None:
    settings: Settings = load_settings()
    setup_logging(settings)
    app = create_app(settings)
    url = f"http://{host}:{port}"
    get_logger().info(f"serving costchart at {url}")
    if open_browser:
        threading.Timer(0.5, lambda: webbrowser.open(url)).start()
    uvicorn.run(
        app,
        host=host,
        port=port,
        log_level=settings.log_level.lower(),
        log_config=None,
    )
