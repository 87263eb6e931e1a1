"""CSV formatter for ResultEnvelope rows (RFC 4180 compliant)."""

from __future__ import annotations

import csv
from io import StringIO
from typing import TYPE_CHECKING

from j1_tool.formatters.base import cell, columns_for, registry

if TYPE_CHECKING:
    from collections.abc import Iterator

    from j1_tool.core.models import ResultEnvelope


def _write_row(values: list[str]) -> str:
    buf = StringIO()
    writer = csv.writer(buf)
    writer.writerow(values)
    return buf.getvalue().rstrip("\r\n")


class CSVFormatter:
    def __init__(self, no_header: bool = False) -> None:
        self.no_header = no_header

    def format(self, result: ResultEnvelope) -> Iterator[str]:
        columns = columns_for(result.rows)
        if not columns:
            return
        if not self.no_header:
            yield _write_row(columns)

        for row in result.rows:
            yield _write_row([cell(row, col) for col in columns])


registry.register("csv", CSVFormatter)
