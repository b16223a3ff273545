from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(slots=True)
class DomainError(Exception):
    code: str
    message: str
    details: Any = None
    status_code: int = 400

    def __str__(self) -> str:
        return self.message


class NotFoundError(DomainError):
    def __init__(self, message: str, *, details: Any = None) -> None:
        super().__init__(
            code="not_found",
            message=message,
            details=details,
            status_code=404,
        )


class ValidationError(DomainError):
    def __init__(self, message: str, *, details: Any = None) -> None:
        super().__init__(
            code="validation_error",
            message=message,
            details=details,
            status_code=400,
        )


class MissingMonthError(DomainError):
    """The file name carries no usable ``YYYY-MM`` month token."""

    def __init__(self, file_name: str) -> None:
        super().__init__(
            code="missing_month",
            message=f"could not determine the month from file name: {file_name}",
            details={"file_name": file_name},
            status_code=400,
        )


class ReportReadError(DomainError):
    """The file content could not be read as CSV at all."""

    def __init__(self, file_name: str, reason: str) -> None:
        super().__init__(
            code="report_read_error",
            message=f"failed to read {file_name}: {reason}",
            details={"file_name": file_name, "reason": reason},
            status_code=400,
        )
