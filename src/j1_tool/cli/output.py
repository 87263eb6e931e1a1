"""Output format selection and TTY auto-detection."""

from __future__ import annotations

import json
import sys
from enum import StrEnum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from j1_tool.formatters.base import Formatter


class OutputFormat(StrEnum):
    TABLE = "table"
    JSON = "json"
    CSV = "csv"


def detect_tty() -> bool:
    return sys.stdout.isatty()


def resolve_format(format_flag: str | None, default: str = "table") -> str:
    """Determine the output format.

    Explicit --format overrides TTY detection.
    Default: the configured format for TTY, json for pipes.
    """
    if format_flag is not None:
        return format_flag
    return default if detect_tty() else "json"


def get_formatter(
    format_flag: str | None = None,
    *,
    default: str = "table",
    compact: bool = False,
    width: int = 40,
    no_header: bool = False,
) -> Formatter:
    """Build and return the appropriate formatter instance."""
    # Import here to trigger registry population from formatter modules.
    import j1_tool.formatters.csv  # noqa: F401
    import j1_tool.formatters.json  # noqa: F401
    import j1_tool.formatters.table  # noqa: F401
    from j1_tool.formatters.base import registry

    fmt_name = resolve_format(format_flag, default)

    kwargs: dict[str, object] = {}
    if fmt_name == "table":
        kwargs["width"] = width
    elif fmt_name == "json":
        kwargs["compact"] = compact
    elif fmt_name == "csv":
        kwargs["no_header"] = no_header

    return registry.get(fmt_name, **kwargs)


def write_output(formatter: Formatter, result: object) -> None:
    """Write formatted output to stdout."""
    for line in formatter.format(result):  # type: ignore[arg-type]
        sys.stdout.write(line + "\n")


def write_json(payload: Any, compact: bool = False) -> None:
    """Write an arbitrary JSON document to stdout."""
    indent = None if compact else 2
    sys.stdout.write(json.dumps(payload, indent=indent, default=str) + "\n")
