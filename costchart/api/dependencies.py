from __future__ import annotations

from dataclasses import dataclass

from fastapi import Request

from costchart.application.services.session import CostSession
from costchart.settings import Settings, load_settings


@dataclass(slots=True)
class ApiContext:
    settings: Settings
    session: CostSession


def build_context(settings: Settings | None = None) -> ApiContext:
    config = settings or load_settings()
    session = CostSession(config)
    return ApiContext(settings=config, session=session)


def get_ctx(request: Request) -> ApiContext:
    return request.app.state.ctx
