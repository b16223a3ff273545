from __future__ import annotations

import math
import re
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping

SERVICE_COLUMN = "product_name"
COST_COLUMN = "cost"

# Longest leading decimal literal, e.g. "12.5" out of "12.50 USD".
_LEADING_NUMBER_RE = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def normalize_cost(value: Any) -> Decimal:
    """Parse a billing cost string such as ``"$1,234.56"``.

    ``$`` and ``,`` are dropped and the longest leading decimal literal is
    parsed without rounding. Anything that does not yield a finite number,
    including values beyond the float range such as ``"1e400"``, normalizes
    to zero.
    """
    if value is None:
        return Decimal(0)
    text = str(value).replace("$", "").replace(",", "").strip()
    match = _LEADING_NUMBER_RE.match(text)
    if match is None:
        return Decimal(0)
    try:
        parsed = Decimal(match.group(0))
    except InvalidOperation:
        return Decimal(0)
    if not parsed.is_finite() or not math.isfinite(float(parsed)):
        return Decimal(0)
    return parsed


def normalize_row(row: Mapping[str, Any]) -> tuple[str, Decimal] | None:
    """Return ``(service, cost)`` for a usable row, or ``None`` to skip it."""
    service = str(row.get(SERVICE_COLUMN) or "").strip()
    if not service:
        return None
    cost = normalize_cost(row.get(COST_COLUMN))
    if cost == 0:
        return None
    return service, cost
