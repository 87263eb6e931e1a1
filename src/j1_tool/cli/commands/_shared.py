"""Shared CLI plumbing for command modules.

Client creation, format-option handling, and output helpers.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from j1_tool.cli.output import get_formatter, write_json, write_output
from j1_tool.core.client import J1Client
from j1_tool.core.config import load_config, resolve_config
from j1_tool.core.models import FailureRecord
from j1_tool.core.transport import HttpxTransport

if TYPE_CHECKING:
    import typer

    from j1_tool.core.config import ResolvedConfig
    from j1_tool.core.models import ResultEnvelope


def get_resolved_config(
    ctx: typer.Context, timeout: float | None = None
) -> ResolvedConfig:
    obj = ctx.ensure_object(dict)
    config = load_config(obj.get("config_file"))

    cli_overrides: dict[str, Any] = {}
    for key in ("account_id", "token", "api_base_url"):
        val = obj.get(key)
        if val is not None:
            cli_overrides[key] = val
    if timeout is not None:
        cli_overrides["timeout"] = timeout

    return resolve_config(config, profile_name=obj.get("profile"), **cli_overrides)


def get_client(ctx: typer.Context, timeout: float | None = None) -> J1Client:
    resolved = get_resolved_config(ctx, timeout=timeout)
    ctx.ensure_object(dict)["default_format"] = resolved.default_format
    return J1Client(resolved, HttpxTransport(timeout=resolved.http_timeout))


def format_options(ctx: typer.Context) -> dict[str, Any]:
    obj = ctx.ensure_object(dict)
    return {
        "format_flag": obj.get("format"),
        "default": obj.get("default_format", "table"),
        "compact": obj.get("compact", False),
        "width": obj.get("width", 40),
        "no_header": obj.get("no_header", False),
    }


def output_result(ctx: typer.Context, result: ResultEnvelope | FailureRecord) -> None:
    if isinstance(result, FailureRecord):
        output_json(ctx, result.model_dump(mode="json", by_alias=True))
        return
    opts = format_options(ctx)
    formatter = get_formatter(**opts)
    write_output(formatter, result)


def output_json(ctx: typer.Context, payload: Any) -> None:
    write_json(payload, compact=ctx.ensure_object(dict).get("compact", False))
