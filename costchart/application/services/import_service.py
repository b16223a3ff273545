from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from functools import partial
from typing import Any, Sequence

from costchart.application.dto.imports import BatchResult
from costchart.application.services.report_builder import ParseSuccess, base_name, parse_monthly_report
from costchart.application.services.report_store import ReportStore
from costchart.domain.errors import DomainError
from costchart.observability.logging import get_logger


@dataclass(frozen=True, slots=True)
class UploadedFile:
    name: str
    content: bytes | str


@dataclass(slots=True)
class _Outcome:
    name: str
    success: ParseSuccess | None = None
    error: str = ""


def _parse_one(upload: UploadedFile, base_logger: Any) -> _Outcome:
    name = base_name(upload.name) or "unknown file"
    logger = base_logger.bind(file_name=name)
    try:
        success = parse_monthly_report(name, upload.content)
    except DomainError as exc:
        logger.warning(f"import rejected: {exc.message}")
        return _Outcome(name=name, error=exc.message)
    except Exception:
        logger.opt(exception=True).error("import failed unexpectedly")
        return _Outcome(name=name, error=f"unexpected error while importing {name}")
    report = success.report
    logger.info(
        f"parsed month={report.month} key={report.key} "
        f"services={len(report.services)} total={report.total}"
    )
    return _Outcome(name=name, success=success)


def import_files(
    store: ReportStore,
    files: Sequence[UploadedFile],
    *,
    max_workers: int = 4,
    max_warnings: int = 5,
) -> BatchResult:
    """Parse a batch concurrently, then commit every success in batch order.

    One bad file never blocks the others; its failure is reported alongside
    the rest once the whole batch has resolved.
    """
    result = BatchResult()
    if not files:
        return result

    logger = get_logger()
    workers = max(1, min(max_workers, len(files)))
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="costchart-import") as pool:
        outcomes = list(pool.map(partial(_parse_one, base_logger=logger), files))

    warnings: list[str] = []
    for outcome in outcomes:
        if outcome.success is None:
            result.errors.append(outcome.error)
            continue
        report = outcome.success.report
        if store.upsert(report):
            result.replaced.append(outcome.name)
        result.imported.append(outcome.name)
        warnings.extend(outcome.success.warnings)

    result.warnings = warnings[:max_warnings]
    result.months = sorted({o.success.report.month for o in outcomes if o.success is not None})
    logger.info(
        f"import batch done files={len(files)} imported={len(result.imported)} "
        f"failed={len(result.errors)} warnings={len(warnings)}"
    )
    return result
