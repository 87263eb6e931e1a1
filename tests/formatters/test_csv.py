"""Tests for CSVFormatter."""

from datetime import UTC, datetime

import pytest

from j1_tool.core.models import ResultEnvelope
from j1_tool.formatters.csv import CSVFormatter


def _make_envelope(rows):
    return ResultEnvelope(
        query="FIND User", rows=rows, cap=10, generated_at=datetime.now(UTC)
    )


@pytest.mark.unit
def test_csv_header_and_rows():
    envelope = _make_envelope([{"id": "u1", "name": "alice"}, {"id": "u2"}])
    lines = list(CSVFormatter().format(envelope))
    assert lines == ["id,name", "u1,alice", "u2,"]


@pytest.mark.unit
def test_csv_no_header():
    envelope = _make_envelope([{"id": "u1"}])
    assert list(CSVFormatter(no_header=True).format(envelope)) == ["u1"]


@pytest.mark.unit
def test_csv_quotes_nested_values():
    envelope = _make_envelope([{"id": "u1", "_class": ["User", "Person"]}])
    lines = list(CSVFormatter().format(envelope))
    assert lines[1] == 'u1,"[""User"",""Person""]"'


@pytest.mark.unit
def test_csv_empty_result_outputs_nothing():
    assert list(CSVFormatter().format(_make_envelope([]))) == []
