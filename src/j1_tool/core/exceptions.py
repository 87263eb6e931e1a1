"""Exception hierarchy for j1-tool.

All exceptions carry an exit_code for CLI return value mapping.
None of them is retried: every error aborts the current query pipeline.
"""

from __future__ import annotations

from typing import Any

from j1_tool.core.exit_codes import ExitCode

REDACTED = "[REDACTED]"


def redact(text: str, secret: str | None) -> str:
    """Replace every occurrence of secret in text with a placeholder."""
    if not secret:
        return text
    return text.replace(secret, REDACTED)


class J1ToolError(Exception):
    """Base exception for all j1-tool errors."""

    exit_code: int = ExitCode.GENERAL_ERROR

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ValidationError(J1ToolError):
    """Bad limit or query text, detected before any network call."""

    exit_code: int = ExitCode.INPUT_ERROR


class InputError(J1ToolError):
    """File not found, no query source."""

    exit_code: int = ExitCode.INPUT_ERROR


class ConfigError(J1ToolError):
    """Malformed config, missing profile."""

    exit_code: int = ExitCode.CONFIG_ERROR


class CredentialError(ConfigError):
    """Missing or rejected account id / access token."""


class TransportError(J1ToolError):
    """Network failure or non-2xx HTTP response."""

    exit_code: int = ExitCode.NETWORK_ERROR

    def __init__(
        self, message: str, status_code: int | None = None, body: Any = None
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class TimeoutError(J1ToolError):
    """Deferred result polling exceeded the query timeout."""

    exit_code: int = ExitCode.TIMEOUT

    def __init__(self, message: str, timeout: float | None = None) -> None:
        super().__init__(message)
        self.timeout = timeout


class QueryError(J1ToolError):
    """GraphQL errors or a FAILED deferred job reported by the server."""

    exit_code: int = ExitCode.QUERY_ERROR

    def __init__(
        self, message: str, query: str | None = None, detail: str | None = None
    ) -> None:
        super().__init__(message)
        self.query = query
        self.detail = detail


class ProtocolError(J1ToolError):
    """Successful HTTP response with an unexpected shape."""

    exit_code: int = ExitCode.PROTOCOL_ERROR

    def __init__(self, message: str, response: Any = None) -> None:
        super().__init__(message)
        self.response = response
