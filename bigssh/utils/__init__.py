"""Utilities for bigssh."""

from bigssh.utils.console import ColorfulFormatter, MCPRequestFormatter
from bigssh.utils.shell import build_command_line, escape_arg, preview

__all__ = [
    "build_command_line",
    "ColorfulFormatter",
    "escape_arg",
    "MCPRequestFormatter",
    "preview",
]
