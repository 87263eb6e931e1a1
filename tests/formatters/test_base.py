"""Tests for the formatter registry and record flattening helpers."""

import pytest

from j1_tool.formatters.base import (
    VALUE_COLUMN,
    Formatter,
    FormatterRegistry,
    cell,
    columns_for,
)


class _Dummy:
    def __init__(self, flag: bool = False) -> None:
        self.flag = flag

    def format(self, result):
        yield "x"


@pytest.mark.unit
class TestRegistry:
    def test_register_and_get(self):
        reg = FormatterRegistry()
        reg.register("dummy", _Dummy)
        fmt = reg.get("dummy", flag=True)
        assert isinstance(fmt, _Dummy)
        assert fmt.flag is True
        assert isinstance(fmt, Formatter)

    def test_unknown_format(self):
        reg = FormatterRegistry()
        reg.register("json", _Dummy)
        with pytest.raises(KeyError, match="Unknown format 'xml'. Available: json"):
            reg.get("xml")

    def test_available_sorted(self):
        reg = FormatterRegistry()
        reg.register("table", _Dummy)
        reg.register("csv", _Dummy)
        assert reg.available == ["csv", "table"]


@pytest.mark.unit
class TestColumns:
    def test_first_seen_order_across_rows(self):
        rows = [{"id": 1, "name": "a"}, {"name": "b", "_class": ["User"]}]
        assert columns_for(rows) == ["id", "name", "_class"]

    def test_scalar_rows_use_value_column(self):
        assert columns_for([1, 2]) == [VALUE_COLUMN]

    def test_empty(self):
        assert columns_for([]) == []


@pytest.mark.unit
class TestCell:
    def test_missing_key_is_blank(self):
        assert cell({"id": 1}, "name") == ""

    def test_nested_values_compact_json(self):
        assert cell({"tags": {"env": "prod"}}, "tags") == '{"env":"prod"}'
        assert cell({"_class": ["User", "Person"]}, "_class") == '["User","Person"]'

    def test_scalar_row(self):
        assert cell(42, VALUE_COLUMN) == "42"
        assert cell(42, "id") == ""

    def test_bool(self):
        assert cell({"active": True}, "active") == "True"
