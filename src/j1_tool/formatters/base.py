"""Formatter protocol, registry and record flattening helpers."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Iterator

    from j1_tool.core.models import ResultEnvelope

VALUE_COLUMN = "value"


@runtime_checkable
class Formatter(Protocol):
    """Protocol for output formatters.

    Each formatter transforms a ResultEnvelope into lines of text.
    """

    def format(self, result: ResultEnvelope) -> Iterator[str]:
        """Transform a ResultEnvelope into formatted output lines."""
        ...


class FormatterRegistry:
    """Registry for looking up formatters by name."""

    def __init__(self) -> None:
        self._formatters: dict[str, type[Formatter]] = {}

    def register(self, name: str, formatter_class: type[Formatter]) -> None:
        self._formatters[name] = formatter_class

    def get(self, name: str, **kwargs: object) -> Formatter:
        """Return a formatter instance by name.

        Raises KeyError if the format name is not registered.
        """
        if name not in self._formatters:
            available = ", ".join(sorted(self._formatters))
            msg = f"Unknown format {name!r}. Available: {available}"
            raise KeyError(msg)
        return self._formatters[name](**kwargs)

    @property
    def available(self) -> list[str]:
        return sorted(self._formatters)


def columns_for(rows: list[Any]) -> list[str]:
    """Column names in first-seen order across all record keys.

    Non-mapping rows are shown under a single "value" column.
    """
    columns: dict[str, None] = {}
    for row in rows:
        if isinstance(row, dict):
            for key in row:
                columns.setdefault(str(key), None)
        else:
            columns.setdefault(VALUE_COLUMN, None)
    return list(columns)


def cell(row: Any, column: str) -> str:
    """Render one cell; nested values are shown as compact JSON."""
    if isinstance(row, dict):
        value = row.get(column)
    else:
        value = row if column == VALUE_COLUMN else None
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(",", ":"), default=str)
    return str(value)


# Global registry instance populated by formatter modules.
registry = FormatterRegistry()
