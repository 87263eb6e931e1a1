"""Configuration management CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING

import typer

from j1_tool.cli.commands._shared import get_client, get_resolved_config
from j1_tool.core.config import DEFAULT_CONFIG_PATH, load_config

if TYPE_CHECKING:
    from pathlib import Path

    from pydantic import SecretStr

config_app = typer.Typer(help="Configuration management commands")


@config_app.callback(invoke_without_command=True)
def config_callback(ctx: typer.Context) -> None:
    if not ctx.invoked_subcommand:
        typer.echo(ctx.get_help())
        raise typer.Exit()


def _mask_secret(value: SecretStr | None) -> str:
    if value is None or not value.get_secret_value():
        return "not set"
    return "***"


@config_app.command("show")
def config_show(ctx: typer.Context) -> None:
    """Display resolved configuration with source attribution."""
    resolved = get_resolved_config(ctx)
    config_path: Path | None = ctx.obj.get("config_file")
    sources = resolved.sources

    typer.echo("Account Settings (resolved):")
    account_fields = [
        ("account_id", resolved.account_id or "not set"),
        ("access_token", _mask_secret(resolved.access_token)),
        ("api_base_url", resolved.api_base_url),
    ]
    for field_name, value in account_fields:
        source = sources.get(field_name, "default")
        typer.echo(f"  {field_name}: {value} ({source})")

    typer.echo("")
    typer.echo("Polling:")
    polling_fields = [
        ("poll_interval", f"{resolved.poll_interval}s"),
        ("query_timeout", f"{resolved.query_timeout}s"),
        ("http_timeout", f"{resolved.http_timeout}s"),
        ("max_cap", str(resolved.max_cap)),
        ("default_format", resolved.default_format),
    ]
    for field_name, value in polling_fields:
        source = sources.get(field_name, "default")
        typer.echo(f"  {field_name}: {value} ({source})")

    typer.echo("")
    if resolved.active_profile:
        typer.echo(f"Active Profile: {resolved.active_profile}")
    else:
        typer.echo("Active Profile: none")

    display_path = config_path or DEFAULT_CONFIG_PATH
    typer.echo(f"Config File: {display_path}")


@config_app.command("profiles")
def config_profiles(ctx: typer.Context) -> None:
    """List available account profiles."""
    config_path: Path | None = ctx.obj.get("config_file")
    app_config = load_config(config_path)
    active_profile = ctx.obj.get("profile") or app_config.default_profile

    if not app_config.profiles:
        typer.echo("No profiles configured.")
        display_path = config_path or DEFAULT_CONFIG_PATH
        typer.echo(f"Add profiles to: {display_path}")
        return

    typer.echo("Available Profiles:")
    typer.echo("")
    for name, profile in sorted(app_config.profiles.items()):
        is_active = name == active_profile
        marker = "* " if is_active else "  "
        label = " (active)" if is_active else ""
        typer.echo(f"{marker}{name}{label}")
        typer.echo(f"      account_id: {profile.account_id or 'not set'}")
        typer.echo(f"      access_token: {_mask_secret(profile.access_token)}")
        typer.echo(f"      api_base_url: {profile.api_base_url}")
        typer.echo("")


@config_app.command("test")
def config_test(ctx: typer.Context) -> None:
    """Verify the resolved credentials against the JupiterOne API."""
    with get_client(ctx) as client:
        client.check_credentials()
        typer.echo(
            f"Credentials OK for account {client.config.account_id} "
            f"({client.config.api_base_url})"
        )
