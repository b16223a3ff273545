from __future__ import annotations

from pydantic import Field

from costchart.api.schemas.common import RequestModel
from costchart.domain.enums import AggregationMode


class TogglePayload(RequestModel):
    key: str = Field(min_length=1)


class SearchPayload(RequestModel):
    text: str = Field(default="", max_length=200)


class ModePayload(RequestModel):
    mode: AggregationMode
