"""Shared test fixtures for j1-tool."""

from pathlib import Path
from tempfile import TemporaryDirectory

import pytest
from typer.testing import CliRunner

from j1_tool.cli.main import app
from j1_tool.core.client import J1Client
from j1_tool.core.config import ResolvedConfig
from tests.fakes import (
    TEST_ACCOUNT,
    TEST_BASE_URL,
    TEST_TOKEN,
    FakeClock,
    ScriptedTransport,
)


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch, tmp_path):
    """Keep real credentials, profiles and Sentry out of every test."""
    for var in (
        "JUPITERONE_ACCOUNT_ID",
        "JUPITERONE_API_TOKEN",
        "JUPITERONE_API_BASE_URL",
        "J1_PROFILE",
        "J1_TOOL_SENTRY_DSN",
        "J1_WEBHOOK_SECRET",
    ):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setattr(
        "j1_tool.core.config.DEFAULT_CONFIG_PATH", tmp_path / "missing.toml"
    )


@pytest.fixture
def runner():
    """Typer CLI test runner."""
    return CliRunner()


@pytest.fixture
def cli_runner(runner):
    """Invoke the CLI app with the given arguments."""

    def invoke(*args: str, **kwargs):
        return runner.invoke(app, list(args), **kwargs)

    return invoke


@pytest.fixture
def temp_dir():
    """Temporary directory for test files."""
    with TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def config():
    return ResolvedConfig(
        account_id=TEST_ACCOUNT,
        access_token=TEST_TOKEN,
        api_base_url=TEST_BASE_URL,
        poll_interval=1.0,
        query_timeout=10.0,
    )


@pytest.fixture
def transport():
    return ScriptedTransport()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def client(config, transport, clock):
    with J1Client(config, transport, sleep=clock.sleep, clock=clock) as c:
        yield c


@pytest.fixture
def cred_args():
    """Global CLI flags carrying test credentials."""
    return ["--account-id", TEST_ACCOUNT, "--token", TEST_TOKEN]


@pytest.fixture
def scripted(monkeypatch):
    """Scripted transport shared by every client the CLI builds."""
    cli_transport = ScriptedTransport()
    cli_clock = FakeClock()

    def make_client(config, _transport=None):
        return J1Client(config, cli_transport, sleep=cli_clock.sleep, clock=cli_clock)

    monkeypatch.setattr(
        "j1_tool.cli.commands._shared.HttpxTransport", lambda **kwargs: None
    )
    monkeypatch.setattr("j1_tool.cli.commands._shared.J1Client", make_client)
    return cli_transport
