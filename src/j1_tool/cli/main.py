"""j1-tool main entry point and command registration."""

from __future__ import annotations

import atexit
from pathlib import Path  # noqa: TC003
from typing import Annotated

import sentry_sdk
import typer

from j1_tool.__about__ import __version__
from j1_tool.cli.commands.config import config_app
from j1_tool.cli.commands.query import batch_command, query_command
from j1_tool.cli.commands.webhook import webhook_command
from j1_tool.cli.output import OutputFormat  # noqa: TC001
from j1_tool.core.exceptions import J1ToolError
from j1_tool.core.logging import setup_logging
from j1_tool.core.monitoring import setup_sentry

app = typer.Typer(
    help="j1-tool - JupiterOne J1QL query and alert webhook tool",
    no_args_is_help=True,
)

app.add_typer(config_app, name="config")
app.command("query")(query_command)
app.command("batch")(batch_command)
app.command("webhook")(webhook_command)


def version_callback(value: bool) -> None:
    if value:
        typer.echo(f"j1-tool {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Enable verbose logging"),
    ] = False,
    profile: Annotated[
        str | None,
        typer.Option("--profile", "-P", help="Named account profile"),
    ] = None,
    account_id: Annotated[
        str | None,
        typer.Option("--account-id", "-A", help="JupiterOne account ID"),
    ] = None,
    token: Annotated[
        str | None,
        typer.Option("--token", help="JupiterOne API token"),
    ] = None,
    api_base_url: Annotated[
        str | None,
        typer.Option("--api-base-url", help="JupiterOne API base URL"),
    ] = None,
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to config file"),
    ] = None,
    format: Annotated[
        OutputFormat | None,
        typer.Option("--format", "-f", help="Output format: table|json|csv"),
    ] = None,
    compact: Annotated[
        bool,
        typer.Option("--compact", help="Compact JSON output (no indentation)"),
    ] = False,
    width: Annotated[
        int,
        typer.Option("--width", help="Column width for table format"),
    ] = 40,
    no_header: Annotated[
        bool,
        typer.Option("--no-header", help="Suppress header row in CSV output"),
    ] = False,
) -> None:
    """j1-tool - JupiterOne J1QL query and alert webhook tool."""
    setup_logging(verbose)
    setup_sentry()

    transaction = sentry_sdk.start_transaction(
        op="cli", name=ctx.invoked_subcommand or "j1-tool"
    )
    transaction.__enter__()

    def cleanup() -> None:
        transaction.__exit__(None, None, None)
        sentry_sdk.flush(timeout=2)

    atexit.register(cleanup)

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["profile"] = profile
    ctx.obj["account_id"] = account_id
    ctx.obj["token"] = token
    ctx.obj["api_base_url"] = api_base_url
    ctx.obj["config_file"] = config_file

    ctx.obj["format"] = format.value if format else None
    ctx.obj["compact"] = compact
    ctx.obj["width"] = width
    ctx.obj["no_header"] = no_header


def run() -> None:
    """Entry point with global error handling."""
    try:
        app()
    except J1ToolError as e:
        sentry_sdk.capture_exception(e)
        typer.echo(f"Error: {e.message}", err=True)
        raise SystemExit(e.exit_code) from None
    except SystemExit:
        raise
    except KeyboardInterrupt:
        raise SystemExit(130) from None
    except Exception as e:
        sentry_sdk.capture_exception(e)
        typer.echo(f"Error: {e}", err=True)
        raise SystemExit(1) from None
