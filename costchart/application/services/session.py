from __future__ import annotations

import threading
from decimal import Decimal
from typing import Any, Callable, Sequence, TypeVar

from costchart.application.dto.imports import BatchResult
from costchart.application.services import aggregator
from costchart.application.services.filter_state import TOP_N_DEFAULT, FilterState
from costchart.application.services.import_service import UploadedFile, import_files
from costchart.application.services.report_store import ReportStore
from costchart.domain.enums import AggregationMode, Dimension
from costchart.domain.errors import ValidationError
from costchart.domain.models.chart import ChartView, YearTotals
from costchart.observability.logging import get_logger
from costchart.settings import Settings, load_settings

T = TypeVar("T")

_MEMO_LIMIT = 256


class CostSession:
    """The store, the filter state and memoized views for one running session.

    Writes go through this object only. Derived views are cached per
    ``(store version, filters, query)`` and the cache is dropped as soon as
    the store version moves.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or load_settings()
        self.store = ReportStore()
        self.filters = FilterState()
        self._lock = threading.RLock()
        self._memo: dict[tuple[int, FilterState, str], Any] = {}
        self._memo_version = self.store.version
        self._logger = get_logger()

    # ------------------------------------------------------------------
    # universes

    def universes(self) -> dict[Dimension, list[str]]:
        with self._lock:
            return self._memoized("universes", self._fresh_universes)

    def universe(self, dim: Dimension) -> list[str]:
        return self.universes()[dim]

    # ------------------------------------------------------------------
    # writes

    def import_files(self, files: Sequence[UploadedFile]) -> BatchResult:
        # Parsing happens outside the lock; only the commit is serialized.
        staging = ReportStore()
        result = import_files(
            staging,
            files,
            max_workers=self.settings.import_workers,
            max_warnings=self.settings.max_batch_warnings,
        )
        with self._lock:
            result.replaced = []
            for report in staging.iter_reports():
                if self.store.upsert(report):
                    result.replaced.append(report.file_name)
            self._reconcile()
        return result

    def clear(self) -> None:
        with self._lock:
            self.store.clear()
            self.filters = self.filters.reset()
            self._logger.info("store cleared")

    def toggle(self, dim: Dimension, key: str) -> FilterState:
        with self._lock:
            if key not in self.universe(dim) and key not in self.filters.get(dim).selected:
                raise ValidationError(f"unknown {dim.value} key: {key}", details={"key": key})
            return self._set_filters(self.filters.toggle(dim, key))

    def select_all(self, dim: Dimension) -> FilterState:
        with self._lock:
            return self._set_filters(self.filters.select_all(dim, self.universe(dim)))

    def clear_selection(self, dim: Dimension) -> FilterState:
        with self._lock:
            return self._set_filters(self.filters.clear(dim))

    def select_top(self, n: int = TOP_N_DEFAULT) -> FilterState:
        with self._lock:
            return self._set_filters(self.filters.top(self.universe(Dimension.SERVICES), n))

    def set_search(self, dim: Dimension, text: str) -> FilterState:
        with self._lock:
            return self._set_filters(self.filters.set_search(dim, text))

    def set_mode(self, mode: AggregationMode | str) -> FilterState:
        with self._lock:
            return self._set_filters(self.filters.set_mode(mode))

    # ------------------------------------------------------------------
    # reads

    def chart(self) -> ChartView:
        with self._lock:
            return self._memoized("chart", lambda: aggregator.chart_view(self.store, self.filters))

    def grand_total(self) -> Decimal:
        with self._lock:
            return self._memoized(
                "grand_total", lambda: aggregator.grand_total(self.store, self.filters)
            )

    def years(self) -> list[YearTotals]:
        with self._lock:
            return self._memoized(
                "years",
                lambda: aggregator.yearly_totals(self.store, self.filters.accounts.selected),
            )

    def ranking(self) -> list[tuple[str, Decimal]]:
        with self._lock:
            return self._memoized(
                "ranking",
                lambda: aggregator.ranked_service_totals(
                    self.store, self.filters.accounts.selected
                ),
            )

    def summary(self) -> dict[str, object]:
        with self._lock:
            universes = self.universes()
            return {
                "months": len(universes[Dimension.MONTHS]),
                "services": len(universes[Dimension.SERVICES]),
                "accounts": len(universes[Dimension.ACCOUNTS]),
                "reports": len(self.store),
                "mode": self.filters.mode.value,
                "grand_total": float(self.grand_total()),
            }

    def filters_payload(self) -> dict[str, object]:
        with self._lock:
            return self.filters.to_payload(self.universes())

    # ------------------------------------------------------------------

    def _fresh_universes(self) -> dict[Dimension, list[str]]:
        return {
            Dimension.ACCOUNTS: aggregator.ranked_accounts(self.store),
            Dimension.MONTHS: self.store.months(),
            Dimension.SERVICES: aggregator.ranked_services(
                self.store, self.filters.accounts.selected
            ),
        }

    def _reconcile(self) -> None:
        universes = self._fresh_universes()
        filters = self.filters.reconcile(universes)
        if filters.accounts.selected != self.filters.accounts.selected:
            # Service ranking depends on the account selection that was just settled.
            universes[Dimension.SERVICES] = aggregator.ranked_services(
                self.store, filters.accounts.selected
            )
            filters = self.filters.reconcile(universes)
        self.filters = filters

    def _set_filters(self, filters: FilterState) -> FilterState:
        self.filters = filters
        return filters

    def _memoized(self, name: str, compute: Callable[[], T]) -> T:
        if self._memo_version != self.store.version:
            self._memo = {}
            self._memo_version = self.store.version
        key = (self.store.version, self.filters, name)
        if key not in self._memo:
            if len(self._memo) >= _MEMO_LIMIT:
                self._memo = {}
            self._memo[key] = compute()
        return self._memo[key]
