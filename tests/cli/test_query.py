"""Tests for the query and batch commands."""

import json

import pytest

from j1_tool.cli.main import app
from j1_tool.core.exceptions import CredentialError, InputError, QueryError, ValidationError
from tests.fakes import page


@pytest.mark.unit
def test_query_help(runner):
    result = runner.invoke(app, ["query", "--help"])
    assert result.exit_code == 0
    assert "Execute a J1QL query" in result.stdout
    assert "--limit" in result.stdout


@pytest.mark.unit
def test_query_inline_json(runner, scripted, cred_args):
    scripted.queue(*page([{"id": "u1"}, {"id": "u2"}], cursor="a"), *page([{"id": "u3"}]))

    result = runner.invoke(
        app, [*cred_args, "--format", "json", "query", "-e", "FIND User LIMIT 1"]
    )

    assert result.exit_code == 0, result.stdout
    parsed = json.loads(result.stdout)
    assert parsed["query"] == "FIND User"
    assert parsed["cap"] == 10_000
    assert [r["id"] for r in parsed["rows"]] == ["u1", "u2", "u3"]
    assert scripted.calls[0].body["variables"]["query"] == "FIND User"


@pytest.mark.unit
def test_query_limit_trims(runner, scripted, cred_args):
    scripted.queue(*page([1, 2, 3], cursor="a"), *page([4, 5, 6]))

    result = runner.invoke(
        app, [*cred_args, "--format", "json", "query", "-e", "FIND User", "-n", "4"]
    )

    assert result.exit_code == 0
    assert json.loads(result.stdout)["rows"] == [1, 2, 3, 4]


@pytest.mark.unit
def test_query_csv(runner, scripted, cred_args):
    scripted.queue(*page([{"id": "u1", "name": "alice"}]))

    result = runner.invoke(
        app, [*cred_args, "--format", "csv", "query", "-e", "FIND User"]
    )

    assert result.exit_code == 0
    assert result.stdout.splitlines() == ["id,name", "u1,alice"]


@pytest.mark.unit
def test_query_from_file(runner, scripted, cred_args, temp_dir):
    path = temp_dir / "hosts.j1ql"
    path.write_text("FIND Host\n")
    scripted.queue(*page([{"id": "h1"}]))

    result = runner.invoke(app, [*cred_args, "--format", "json", "query", str(path)])

    assert result.exit_code == 0
    assert json.loads(result.stdout)["rows"] == [{"id": "h1"}]


@pytest.mark.unit
def test_query_file_not_found(runner, cred_args):
    result = runner.invoke(app, [*cred_args, "query", "/nonexistent/file.j1ql"])
    assert result.exit_code != 0


@pytest.mark.unit
def test_query_over_max_cap(runner, scripted, cred_args):
    result = runner.invoke(app, [*cred_args, "query", "-e", "FIND User", "-n", "10001"])
    assert isinstance(result.exception, ValidationError)
    assert scripted.calls == []


@pytest.mark.unit
def test_query_missing_credentials(runner, scripted):
    result = runner.invoke(app, ["query", "-e", "FIND User"])
    assert isinstance(result.exception, CredentialError)
    assert scripted.calls == []


@pytest.mark.unit
def test_query_server_error(runner, scripted, cred_args):
    scripted.queue((200, {"errors": [{"message": "bad J1QL"}]}))
    result = runner.invoke(app, [*cred_args, "query", "-e", "FIND Userr"])
    assert isinstance(result.exception, QueryError)


@pytest.mark.unit
def test_query_continue_on_fail_prints_record(runner, scripted, cred_args):
    scripted.queue((500, "internal error"))

    result = runner.invoke(
        app,
        [*cred_args, "--compact", "query", "-e", "FIND User", "--continue-on-fail"],
    )

    assert result.exit_code == 0
    record = json.loads(result.stdout)
    assert record["query"] == "FIND User"
    assert record["errorType"] == "TransportError"
    assert "timestamp" in record


@pytest.mark.unit
def test_batch_runs_each_query(runner, scripted, cred_args, temp_dir):
    path = temp_dir / "batch.txt"
    path.write_text("# checks\nFIND User\nFIND Host\n")
    scripted.queue(*page([1]), *page([2, 3]))

    result = runner.invoke(app, [*cred_args, "batch", str(path)])

    assert result.exit_code == 0
    parsed = json.loads(result.stdout)
    assert [item["query"] for item in parsed] == ["FIND User", "FIND Host"]
    assert parsed[1]["rows"] == [2, 3]


@pytest.mark.unit
def test_batch_continue_on_fail(runner, scripted, cred_args, temp_dir):
    path = temp_dir / "batch.txt"
    path.write_text("FIND User\nFIND Host\n")
    scripted.queue((503, "unavailable"), *page([2]))

    result = runner.invoke(
        app, [*cred_args, "batch", str(path), "--continue-on-fail"]
    )

    assert result.exit_code == 0
    parsed = json.loads(result.stdout)
    assert parsed[0]["errorType"] == "TransportError"
    assert parsed[1]["rows"] == [2]


@pytest.mark.unit
def test_batch_empty_file(runner, cred_args, temp_dir):
    path = temp_dir / "batch.txt"
    path.write_text("# nothing\n\n")
    result = runner.invoke(app, [*cred_args, "batch", str(path)])
    assert isinstance(result.exception, InputError)
