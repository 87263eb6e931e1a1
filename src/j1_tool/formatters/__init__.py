"""Output formatters for j1-tool."""

from j1_tool.formatters.base import Formatter, FormatterRegistry, registry
from j1_tool.formatters.csv import CSVFormatter
from j1_tool.formatters.json import JSONFormatter
from j1_tool.formatters.table import TableFormatter

__all__ = [
    "CSVFormatter",
    "Formatter",
    "FormatterRegistry",
    "JSONFormatter",
    "TableFormatter",
    "registry",
]
