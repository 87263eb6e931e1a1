"""Sentry integration for error tracking and performance monitoring.

Initialized from J1_TOOL_SENTRY_DSN; without it Sentry stays disabled
and spans/captures become no-ops.
"""

import os

import sentry_sdk

from j1_tool.__about__ import __version__

SENTRY_DSN_ENV = "J1_TOOL_SENTRY_DSN"


def setup_sentry(environment: str = "local") -> bool:
    """Initialize Sentry. Returns True when a DSN was configured."""
    dsn = os.environ.get(SENTRY_DSN_ENV) or None
    sentry_sdk.init(
        dsn=dsn,
        traces_sample_rate=0.03,
        environment=environment,
        release=__version__,
        attach_stacktrace=True,
        send_default_pii=False,
    )
    return dsn is not None
