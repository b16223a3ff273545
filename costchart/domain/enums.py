from __future__ import annotations

from enum import StrEnum


class AggregationMode(StrEnum):
    SERVICE = "service"
    ACCOUNT = "account"


class Dimension(StrEnum):
    ACCOUNTS = "accounts"
    MONTHS = "months"
    SERVICES = "services"
