from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal


@dataclass(slots=True)
class ChartRow:
    month: str
    series: dict[str, Decimal] = field(default_factory=dict)

    def to_payload(self) -> dict[str, object]:
        return {
            "month": self.month,
            "series": {name: float(value) for name, value in self.series.items()},
        }


@dataclass(slots=True)
class ChartView:
    rows: list[ChartRow]
    series: list[str]

    def to_payload(self) -> dict[str, object]:
        return {
            "rows": [row.to_payload() for row in self.rows],
            "series": list(self.series),
        }


@dataclass(slots=True)
class YearTotals:
    year: str
    months: list[str]
    services: dict[str, Decimal] = field(default_factory=dict)
    total: Decimal = Decimal(0)

    def to_payload(self) -> dict[str, object]:
        return {
            "year": self.year,
            "months": list(self.months),
            "services": {name: float(value) for name, value in self.services.items()},
            "total": float(self.total),
        }
