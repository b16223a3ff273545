from __future__ import annotations

from typing import Iterator

from costchart.domain.models.report import MonthlyReport


class ReportStore:
    """Month -> ordered reports, at most one per (month, identity key).

    Reports are immutable; upsert swaps a matching entry in place so list
    order stays stable across re-uploads. ``version`` increases on every
    write and is what derived-view caches key on.
    """

    def __init__(self) -> None:
        self._by_month: dict[str, list[MonthlyReport]] = {}
        self.version = 0

    def upsert(self, report: MonthlyReport) -> bool:
        """Insert or replace; returns True when an existing entry was replaced."""
        entries = self._by_month.setdefault(report.month, [])
        key = report.key
        replaced = False
        for idx, existing in enumerate(entries):
            if existing.key == key:
                entries[idx] = report
                replaced = True
                break
        else:
            entries.append(report)
        self.version += 1
        return replaced

    def clear(self) -> None:
        self._by_month = {}
        self.version += 1

    def months(self) -> list[str]:
        # YYYY-MM sorts chronologically as a string.
        return sorted(self._by_month)

    def reports(self, month: str) -> tuple[MonthlyReport, ...]:
        return tuple(self._by_month.get(month, ()))

    def iter_reports(self) -> Iterator[MonthlyReport]:
        for month in self.months():
            yield from self._by_month[month]

    def accounts(self) -> list[str]:
        return sorted({report.key for report in self.iter_reports()})

    def services(self) -> list[str]:
        seen: dict[str, None] = {}
        for report in self.iter_reports():
            for service in report.services:
                seen.setdefault(service, None)
        return list(seen)

    def __len__(self) -> int:
        return sum(len(entries) for entries in self._by_month.values())

    def to_payload(self) -> dict[str, object]:
        return {
            "months": self.months(),
            "reports": {
                month: [report.to_payload() for report in self._by_month[month]]
                for month in self.months()
            },
        }
