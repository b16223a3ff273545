from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from types import MappingProxyType
from typing import Mapping


@dataclass(frozen=True, slots=True)
class AccountIdentity:
    account_id: str

    def key(self) -> str:
        return self.account_id


@dataclass(frozen=True, slots=True)
class FileIdentity:
    file_name: str

    def key(self) -> str:
        return self.file_name


Identity = AccountIdentity | FileIdentity


@dataclass(frozen=True, slots=True)
class MonthlyReport:
    """One parsed billing file: per-service cost totals for a single month.

    ``total`` is derived from ``services`` at construction time, so the two
    can never disagree. ``services`` is exposed as a read-only mapping.
    """

    month: str
    file_name: str
    services: Mapping[str, Decimal]
    account_id: str | None = None
    total: Decimal = field(init=False)

    def __post_init__(self) -> None:
        frozen = MappingProxyType(dict(self.services))
        object.__setattr__(self, "services", frozen)
        object.__setattr__(self, "total", sum(frozen.values(), Decimal(0)))

    @property
    def identity(self) -> Identity:
        if self.account_id:
            return AccountIdentity(self.account_id)
        return FileIdentity(self.file_name)

    @property
    def key(self) -> str:
        return self.identity.key()

    @property
    def year(self) -> str:
        return self.month.split("-", 1)[0]

    def to_payload(self) -> dict[str, object]:
        return {
            "month": self.month,
            "account_id": self.account_id,
            "file_name": self.file_name,
            "key": self.key,
            "services": {name: float(cost) for name, cost in self.services.items()},
            "total": float(self.total),
        }
