from __future__ import annotations

import sys
from typing import Annotated

import typer

from j1_tool.cli.commands._shared import get_client, output_json, output_result
from j1_tool.core.exceptions import InputError
from j1_tool.core.exit_codes import ExitCode
from j1_tool.core.pager import execute_items, execute_query
from j1_tool.core.query_source import read_query_file, resolve_query_source, split_batch


def query_command(
    ctx: typer.Context,
    file: Annotated[
        str | None,
        typer.Argument(help="J1QL file to execute"),
    ] = None,
    execute: Annotated[
        str | None,
        typer.Option("--execute", "-e", help="Execute inline J1QL query"),
    ] = None,
    limit: Annotated[
        str | None,
        typer.Option("--limit", "-n", help="Maximum number of rows to return"),
    ] = None,
    timeout: Annotated[
        float | None,
        typer.Option("--timeout", "-t", help="Deferred result timeout in seconds"),
    ] = None,
    continue_on_fail: Annotated[
        bool,
        typer.Option(
            "--continue-on-fail",
            help="Print a failure record instead of exiting with an error",
        ),
    ] = False,
) -> None:
    """Execute a J1QL query from file, inline (-e), or stdin."""
    try:
        is_tty = sys.stdin.isatty()
    except (ValueError, AttributeError):
        is_tty = False
    if execute is None and file is None and is_tty:
        typer.echo(ctx.get_help())
        raise typer.Exit()

    try:
        text = resolve_query_source(inline=execute, file_path=file)
    except InputError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(ExitCode.INPUT_ERROR) from exc

    with get_client(ctx, timeout=timeout) as client:
        result = execute_query(
            client, text, limit, continue_on_failure=continue_on_fail
        )

    output_result(ctx, result)


def batch_command(
    ctx: typer.Context,
    file: Annotated[
        str,
        typer.Argument(help="File with one J1QL query per line ('-' for stdin)"),
    ],
    limit: Annotated[
        str | None,
        typer.Option("--limit", "-n", help="Maximum number of rows per query"),
    ] = None,
    timeout: Annotated[
        float | None,
        typer.Option("--timeout", "-t", help="Deferred result timeout in seconds"),
    ] = None,
    continue_on_fail: Annotated[
        bool,
        typer.Option(
            "--continue-on-fail",
            help="Record failed queries and keep running the rest",
        ),
    ] = False,
) -> None:
    """Run several J1QL queries in sequence and print a JSON array of results."""
    text = sys.stdin.read() if file == "-" else read_query_file(file)
    queries = split_batch(text)
    if not queries:
        raise InputError(f"No queries found in {file}")

    with get_client(ctx, timeout=timeout) as client:
        results = execute_items(
            client, queries, limit, continue_on_failure=continue_on_fail
        )

    output_json(ctx, [r.model_dump(mode="json", by_alias=True) for r in results])
