from __future__ import annotations

import logging
import sys
from functools import lru_cache
from pathlib import Path
from typing import cast

from loguru import logger as loguru_logger

from costchart.observability.request_context import current_request_id
from costchart.settings import Settings, load_settings

_LOGGING_CONFIGURED = False


class _InterceptHandler(logging.Handler):
    """Route stdlib logging records (uvicorn, fastapi) into loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            target_level: str | int = loguru_logger.level(record.levelname).name
        except ValueError:
            target_level = record.levelno

        frame = logging.currentframe()
        depth = 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        loguru_logger.opt(depth=depth, exception=record.exc_info).log(target_level, record.getMessage())


def _patch_record(record: dict[str, object]) -> None:
    extra = cast(dict[str, object], record["extra"])
    request_id = str(extra.get("request_id", "") or "").strip()
    if request_id in {"", "-"}:
        request_id = current_request_id()
    file_name = str(extra.get("file_name", "-") or "-").strip() or "-"
    extra["request_id"] = request_id
    extra["file_name"] = file_name


def setup_logging(settings: Settings | None = None) -> None:
    global _LOGGING_CONFIGURED
    if _LOGGING_CONFIGURED:
        return

    config = settings or load_settings()

    loguru_logger.remove()
    loguru_logger.configure(patcher=_patch_record)
    format_text = (
        "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
        "<level>{level: <8}</level> | "
        "rid=<yellow>{extra[request_id]}</yellow> "
        "file=<cyan>{extra[file_name]}</cyan> | "
        "{message}"
    )
    loguru_logger.add(
        sys.stdout,
        level=config.log_level,
        format=format_text,
        colorize=not config.log_json,
        serialize=config.log_json,
        enqueue=True,
        backtrace=True,
        diagnose=False,
    )

    if config.log_path:
        path = Path(config.log_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        loguru_logger.add(
            str(path),
            level=config.log_level,
            serialize=True,
            enqueue=True,
            backtrace=True,
            diagnose=False,
            rotation=f"{config.log_rotation_mb} MB",
            retention=f"{config.log_retention_days} days",
            compression="gz",
        )

    intercept = _InterceptHandler()
    root_logger = logging.getLogger()
    root_logger.handlers = [intercept]
    root_logger.setLevel(config.log_level)

    for name in ("uvicorn", "uvicorn.error", "uvicorn.access", "fastapi", "starlette", "asyncio"):
        logger_obj = logging.getLogger(name)
        logger_obj.handlers = [intercept]
        logger_obj.propagate = False
        logger_obj.setLevel(config.log_level)

    _LOGGING_CONFIGURED = True


@lru_cache(maxsize=1)
def get_logger():
    setup_logging(load_settings())
    return loguru_logger.bind(request_id="-", file_name="-")
