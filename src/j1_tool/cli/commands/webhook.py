"""Webhook payload validation command."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Annotated

import typer

from j1_tool.cli.commands._shared import output_json
from j1_tool.core.exceptions import InputError
from j1_tool.core.exit_codes import ExitCode
from j1_tool.core.webhook import DEFAULT_HEADER_NAME, WebhookSettings, handle_webhook


def _parse_headers(values: list[str]) -> dict[str, str]:
    headers: dict[str, str] = {}
    for item in values:
        name, sep, value = item.partition("=")
        if not sep or not name.strip():
            raise InputError(f"Invalid header '{item}'. Expected NAME=VALUE")
        headers[name.strip()] = value
    return headers


def webhook_command(
    ctx: typer.Context,
    payload: Annotated[
        str,
        typer.Argument(help="JSON payload file ('-' for stdin)"),
    ],
    secret: Annotated[
        str | None,
        typer.Option(
            "--secret",
            envvar="J1_WEBHOOK_SECRET",
            help="Shared secret; enables header authentication",
        ),
    ] = None,
    header_name: Annotated[
        str,
        typer.Option("--header-name", help="Header carrying the shared secret"),
    ] = DEFAULT_HEADER_NAME,
    header: Annotated[
        list[str] | None,
        typer.Option("--header", help="Request header as NAME=VALUE (repeatable)"),
    ] = None,
) -> None:
    """Validate a JupiterOne alert webhook payload and print the normalized alert."""
    if payload == "-":
        raw = sys.stdin.read()
    else:
        path = Path(payload)
        if not path.exists():
            raise InputError(f"Payload file not found: {payload}")
        raw = path.read_text()

    try:
        body = json.loads(raw)
    except json.JSONDecodeError:
        body = None

    settings = WebhookSettings(
        authentication="header" if secret else "none",
        secret=secret,
        header_name=header_name,
    )
    response = handle_webhook(body, _parse_headers(header or []), settings)

    output_json(ctx, response.model_dump(mode="json"))
    if response.status_code != 200:
        raise typer.Exit(ExitCode.GENERAL_ERROR)
