"""Derived views over a ReportStore.

Every function here is pure: results are recomputed from the store's current
contents and the given selections. An empty selection means "nothing", never
"everything".
"""

from __future__ import annotations

from decimal import Decimal
from typing import Collection

import pandas as pd

from costchart.application.services.filter_state import FilterState
from costchart.application.services.report_store import ReportStore
from costchart.domain.enums import AggregationMode
from costchart.domain.models.chart import ChartRow, ChartView, YearTotals


def service_totals(store: ReportStore, selected_accounts: Collection[str]) -> list[ChartRow]:
    allowed = set(selected_accounts)
    rows: list[ChartRow] = []
    for month in store.months():
        series: dict[str, Decimal] = {}
        for report in store.reports(month):
            if report.key not in allowed:
                continue
            for service, cost in report.services.items():
                series[service] = series.get(service, Decimal(0)) + cost
        rows.append(ChartRow(month=month, series=series))
    return rows


def account_totals(store: ReportStore, selected_services: Collection[str]) -> list[ChartRow]:
    allowed = set(selected_services)
    rows: list[ChartRow] = []
    for month in store.months():
        series: dict[str, Decimal] = {}
        for report in store.reports(month):
            amount = Decimal(0)
            matched = False
            for service, cost in report.services.items():
                if service in allowed:
                    amount += cost
                    matched = True
            if matched:
                series[report.key] = series.get(report.key, Decimal(0)) + amount
        rows.append(ChartRow(month=month, series=series))
    return rows


def ranked_service_totals(
    store: ReportStore, selected_accounts: Collection[str]
) -> list[tuple[str, Decimal]]:
    allowed = set(selected_accounts)
    totals: dict[str, Decimal] = {}
    for report in store.iter_reports():
        included = report.key in allowed
        for service, cost in report.services.items():
            current = totals.setdefault(service, Decimal(0))
            if included:
                totals[service] = current + cost
    # sorted() is stable, so ties keep encounter order.
    return sorted(totals.items(), key=lambda item: item[1], reverse=True)


def ranked_services(store: ReportStore, selected_accounts: Collection[str]) -> list[str]:
    return [service for service, _ in ranked_service_totals(store, selected_accounts)]


def ranked_accounts(store: ReportStore) -> list[str]:
    return store.accounts()


def grand_total(store: ReportStore, filters: FilterState) -> Decimal:
    months = filters.months.selected
    services = filters.services.selected
    accounts = filters.accounts.selected
    if not months or not services or not accounts:
        return Decimal(0)

    month_set = set(months)
    account_set = set(accounts)
    total = Decimal(0)

    if filters.mode == AggregationMode.ACCOUNT:
        for row in account_totals(store, services):
            if row.month not in month_set:
                continue
            for account, amount in row.series.items():
                if account in account_set:
                    total += amount
        return total

    for month in months:
        for report in store.reports(month):
            if report.key not in account_set:
                continue
            for service in services:
                total += report.services.get(service, Decimal(0))
    return total


def yearly_totals(store: ReportStore, selected_accounts: Collection[str]) -> list[YearTotals]:
    allowed = set(selected_accounts)
    years: dict[str, YearTotals] = {}
    for month in store.months():
        year = month.split("-", 1)[0]
        slot = years.get(year)
        if slot is None:
            slot = YearTotals(year=year, months=[])
            years[year] = slot
        slot.months.append(month)
        for report in store.reports(month):
            if report.key not in allowed:
                continue
            slot.total += report.total
            for service, cost in report.services.items():
                slot.services[service] = slot.services.get(service, Decimal(0)) + cost
    return [years[year] for year in sorted(years)]


def chart_view(store: ReportStore, filters: FilterState) -> ChartView:
    months = set(filters.months.selected)
    if filters.mode == AggregationMode.ACCOUNT:
        rows = account_totals(store, filters.services.selected)
        series = list(filters.accounts.selected)
    else:
        rows = service_totals(store, filters.accounts.selected)
        series = list(filters.services.selected)
    return ChartView(rows=[row for row in rows if row.month in months], series=series)


def chart_frame(view: ChartView) -> pd.DataFrame:
    """Month-indexed table with one float column per displayed series."""
    data = [
        [float(row.series.get(name, Decimal(0))) for name in view.series]
        for row in view.rows
    ]
    frame = pd.DataFrame(
        data,
        index=pd.Index([row.month for row in view.rows], name="month"),
        columns=list(view.series),
        dtype=float,
    )
    return frame.fillna(0.0)
