from __future__ import annotations

import os
from dataclasses import dataclass


def _env(key: str, default: str | None = None) -> str | None:
    """
    Read an env var, treating empty strings as "unset".

    Users often export variables but forget to assign values; falling back to
    the default is less surprising than failing on an empty string.
    """
    v = os.environ.get(key)
    if v is not None and str(v).strip() != "":
        return v
    return default


def _parse_bool(v: str | None, default: bool) -> bool:
    if v is None:
        return default
    s = str(v).strip().lower()
    if s in {"1", "true", "yes", "y", "on"}:
        return True
    if s in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _parse_int(v: str | None, default: int) -> int:
    if v is None:
        return default
    try:
        return int(str(v).strip())
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    host: str
    port: int
    open_browser: bool
    log_level: str
    log_json: bool
    log_path: str | None
    log_rotation_mb: int
    log_retention_days: int
    max_upload_bytes: int
    max_batch_warnings: int
    import_workers: int


def load_settings() -> Settings:
    host = _env("COSTCHART_HOST", "127.0.0.1") or "127.0.0.1"
    port = _parse_int(_env("COSTCHART_PORT", "8000"), 8000)

    open_browser = _parse_bool(_env("COSTCHART_OPEN_BROWSER", None), True)

    log_level = (_env("COSTCHART_LOG_LEVEL", "INFO") or "INFO").upper()
    log_json = _parse_bool(_env("COSTCHART_LOG_JSON", None), False)
    log_path = _env("COSTCHART_LOG_PATH", None)
    log_rotation_mb = max(1, _parse_int(_env("COSTCHART_LOG_ROTATION_MB", "20"), 20))
    log_retention_days = max(1, _parse_int(_env("COSTCHART_LOG_RETENTION_DAYS", "14"), 14))

    max_upload_mb = _parse_int(_env("COSTCHART_MAX_UPLOAD_MB", "50"), 50)
    if max_upload_mb <= 0:
        # "0" is a foot-gun; keep a conservative default.
        max_upload_mb = 50
    max_upload_bytes = max_upload_mb * 1024 * 1024

    max_batch_warnings = _parse_int(_env("COSTCHART_MAX_BATCH_WARNINGS", "5"), 5)
    if max_batch_warnings < 0:
        max_batch_warnings = 5

    import_workers = _parse_int(_env("COSTCHART_IMPORT_WORKERS", "4"), 4)
    if import_workers <= 0:
        import_workers = 4

    return Settings(
        host=host,
        port=port,
        open_browser=open_browser,
        log_level=log_level,
        log_json=log_json,
        log_path=log_path,
        log_rotation_mb=log_rotation_mb,
        log_retention_days=log_retention_days,
        max_upload_bytes=max_upload_bytes,
        max_batch_warnings=max_batch_warnings,
        import_workers=import_workers,
    )
