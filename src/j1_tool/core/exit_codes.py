"""Standard exit codes for j1-tool.

Exit codes follow Unix conventions; 8 and 9 cover server-side
query failures and malformed API responses.
"""

from enum import IntEnum


class ExitCode(IntEnum):
    """Exit codes for j1-tool commands."""

    SUCCESS = 0
    GENERAL_ERROR = 1
    USAGE_ERROR = 2
    INPUT_ERROR = 3
    OUTPUT_ERROR = 4
    NETWORK_ERROR = 5
    TIMEOUT = 6
    CONFIG_ERROR = 7
    QUERY_ERROR = 8
    PROTOCOL_ERROR = 9
