from __future__ import annotations

import csv
import io
import re
from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import PurePath
from typing import Any, Iterable, Mapping

from costchart.application.services.normalizer import COST_COLUMN, SERVICE_COLUMN, normalize_row
from costchart.domain.errors import MissingMonthError, ReportReadError
from costchart.domain.models.report import MonthlyReport

MAX_FILE_WARNINGS = 5

_MONTH_RE = re.compile(r"monthly-report-(\d{4})-(\d{2})(?!\d)")
_ACCOUNT_RE = re.compile(r"monthly-report-\d{4}-\d{2}-(\d+)\.csv$")


@dataclass(frozen=True, slots=True)
class RowIssue:
    """A malformed-row notice raised by the CSV layer; ``row`` is None when unknown."""

    message: str
    row: int | None = None


@dataclass(slots=True)
class ParsedCsv:
    rows: list[dict[str, str]] = field(default_factory=list)
    issues: list[RowIssue] = field(default_factory=list)


@dataclass(slots=True)
class ParseSuccess:
    report: MonthlyReport
    warnings: list[str]


def base_name(file_name: str) -> str:
    name = str(file_name or "").replace("\\", "/")
    return PurePath(name).name or name


def extract_month(file_name: str) -> str | None:
    match = _MONTH_RE.search(base_name(file_name))
    if match is None:
        return None
    year, month = match.group(1), match.group(2)
    if not 1 <= int(month) <= 12:
        return None
    return f"{year}-{month}"


def extract_account(file_name: str) -> str | None:
    match = _ACCOUNT_RE.search(base_name(file_name))
    return match.group(1) if match else None


def _decode(file_name: str, content: bytes | str) -> str:
    if isinstance(content, str):
        return content.lstrip("\ufeff")
    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise ReportReadError(file_name, f"not valid UTF-8 ({exc.reason})") from exc


def parse_csv(file_name: str, content: bytes | str) -> ParsedCsv:
    """Read CSV text into header-keyed rows, noting malformed rows.

    Blank lines are skipped. Rows whose field count differs from the header
    are kept (missing fields read as absent, extras are dropped) and reported
    as issues tagged with their line number.
    """
    text = _decode(file_name, content)
    parsed = ParsedCsv()
    reader = csv.reader(io.StringIO(text, newline=""))
    header: list[str] | None = None
    try:
        for record in reader:
            if not record or all(not cell.strip() for cell in record):
                continue
            if header is None:
                header = [cell.strip() for cell in record]
                for column in (SERVICE_COLUMN, COST_COLUMN):
                    if column not in header:
                        parsed.issues.append(RowIssue(f"missing required column '{column}'"))
                continue
            line = reader.line_num
            if len(record) > len(header):
                parsed.issues.append(
                    RowIssue(
                        f"too many fields: expected {len(header)} fields but parsed {len(record)}",
                        row=line,
                    )
                )
            elif len(record) < len(header):
                parsed.issues.append(
                    RowIssue(
                        f"too few fields: expected {len(header)} fields but parsed {len(record)}",
                        row=line,
                    )
                )
            parsed.rows.append(dict(zip(header, record)))
    except csv.Error as exc:
        raise ReportReadError(file_name, f"line {reader.line_num}: {exc}") from exc
    return parsed


def format_warning(file_name: str, issue: RowIssue) -> str:
    label = f"row {issue.row}" if issue.row is not None else "unknown row"
    return f"{file_name} {label}: {issue.message}"


def build_report(
    file_name: str,
    rows: Iterable[Mapping[str, Any]],
    issues: Iterable[RowIssue] = (),
) -> ParseSuccess:
    """Build one MonthlyReport from already-parsed rows.

    Raises MissingMonthError before touching any row when the name has no
    month, so a bad file never yields a partial report.
    """
    name = base_name(file_name)
    month = extract_month(name)
    if month is None:
        raise MissingMonthError(name)
    account_id = extract_account(name)

    services: dict[str, Decimal] = {}
    for row in rows:
        normalized = normalize_row(row)
        if normalized is None:
            continue
        service, cost = normalized
        services[service] = services.get(service, Decimal(0)) + cost

    warnings = [format_warning(name, issue) for issue in list(issues)[:MAX_FILE_WARNINGS]]
    report = MonthlyReport(
        month=month,
        file_name=name,
        services=services,
        account_id=account_id,
    )
    return ParseSuccess(report=report, warnings=warnings)


def parse_monthly_report(file_name: str, content: bytes | str) -> ParseSuccess:
    name = base_name(file_name)
    if extract_month(name) is None:
        raise MissingMonthError(name)
    parsed = parse_csv(name, content)
    return build_report(name, parsed.rows, parsed.issues)
