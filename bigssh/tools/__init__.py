"""MCP tools for bigssh."""

from bigssh.tools.execute import bigssh

__all__ = ["bigssh"]
