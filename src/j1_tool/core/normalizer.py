"""J1QL query normalization.

Turns raw query text plus an optional user limit into a QuerySpec.
Result sizing is driven by cursor pagination, so a trailing LIMIT
clause is always removed: left in place it would cap every page.
"""

from __future__ import annotations

import re
from typing import Any

from j1_tool.core.exceptions import ValidationError
from j1_tool.core.models import QuerySpec

MAX_CAP = 10_000

_TRAILING_LIMIT = re.compile(r"(?:\s+LIMIT\s+\d+\s*;?)+\s*$", re.IGNORECASE)


def strip_limit(text: str) -> str:
    """Remove trailing ``LIMIT <n>`` clauses, case-insensitively."""
    return _TRAILING_LIMIT.sub("", text.strip()).strip()


def _coerce_limit(limit: Any) -> int | None:
    if limit is None or isinstance(limit, bool):
        return None
    if isinstance(limit, int):
        return limit
    if isinstance(limit, str):
        try:
            limit = float(limit.strip())
        except ValueError:
            return None
    if isinstance(limit, float):
        return int(limit) if limit.is_integer() else None
    return None


def effective_cap(limit: Any, max_cap: int = MAX_CAP) -> int:
    """Resolve the row cap for a user-supplied limit.

    Absent, non-positive and non-numeric limits fall back to max_cap.
    Raises ValidationError when the limit exceeds max_cap.
    """
    value = _coerce_limit(limit)
    if value is None or value <= 0:
        return max_cap
    if value > max_cap:
        msg = f"Limit {value} exceeds the maximum of {max_cap} rows"
        raise ValidationError(msg)
    return value


def normalize_query(
    text: str, limit: Any = None, *, max_cap: int = MAX_CAP
) -> QuerySpec:
    if not text or not text.strip():
        raise ValidationError("Query text is empty. Provide a J1QL query.")
    cap = effective_cap(limit, max_cap)
    return QuerySpec(text=strip_limit(text), cap=cap)
