"""Command-line entry point.

- `costchart serve` starts the HTTP API.
- `costchart summarize monthly-report-2024-05-123456789012.csv ...` prints the
  per-month cost table for local files, with every account, month and service
  selected.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Sequence

from costchart.application.services.aggregator import chart_frame
from costchart.application.services.import_service import UploadedFile
from costchart.application.services.session import CostSession
from costchart.domain.enums import AggregationMode
from costchart.settings import load_settings


def make_parser() -> argparse.ArgumentParser:
    settings = load_settings()
    parser = argparse.ArgumentParser(
        prog="costchart",
        description="Aggregate monthly cloud-billing CSV exports by service and account.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="run the HTTP API")
    serve.add_argument("--host", default=settings.host)
    serve.add_argument("--port", type=int, default=settings.port)
    serve.add_argument(
        "--no-browser",
        dest="open_browser",
        action="store_false",
        default=settings.open_browser,
        help="do not open a browser window",
    )

    summarize = sub.add_parser("summarize", help="print the monthly cost table for CSV files")
    summarize.add_argument("files", nargs="+", type=Path)
    summarize.add_argument(
        "--mode",
        choices=[mode.value for mode in AggregationMode],
        default=AggregationMode.SERVICE.value,
    )
    summarize.add_argument("--csv", dest="csv_out", type=Path, default=None, help="write the table as CSV")
    return parser


def _read_uploads(paths: Sequence[Path]) -> tuple[list[UploadedFile], list[str]]:
    uploads: list[UploadedFile] = []
    errors: list[str] = []
    for path in paths:
        try:
            uploads.append(UploadedFile(name=path.name, content=path.read_bytes()))
        except OSError as exc:
            errors.append(f"failed to read {path}: {exc.strerror or exc}")
    return uploads, errors


def summarize(paths: Sequence[Path], *, mode: str, csv_out: Path | None = None) -> int:
    uploads, read_errors = _read_uploads(paths)
    session = CostSession()
    result = session.import_files(uploads)
    session.set_mode(mode)

    for message in read_errors + result.errors:
        print(f"error: {message}", file=sys.stderr)
    for message in result.warnings:
        print(f"warning: {message}", file=sys.stderr)
    if not result.imported:
        return 1

    frame = chart_frame(session.chart())
    if csv_out is not None:
        csv_out.parent.mkdir(parents=True, exist_ok=True)
        frame.to_csv(csv_out, encoding="utf-8")
    print(frame.to_string(float_format=lambda v: f"{v:,.2f}"))
    print(f"total: {session.grand_total():,.2f}")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    args = make_parser().parse_args(argv)
    if args.command == "serve":
        from costchart.api.app import serve

        serve(host=args.host, port=args.port, open_browser=args.open_browser)
        return 0
    return summarize(args.files, mode=args.mode, csv_out=args.csv_out)


if __name__ == "__main__":
    raise SystemExit(main())
