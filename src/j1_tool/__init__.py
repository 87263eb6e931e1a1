"""j1-tool - JupiterOne J1QL query and alert webhook tool."""

from j1_tool.__about__ import __version__

__all__ = ["__version__"]
