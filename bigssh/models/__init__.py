"""Data models for bigssh."""

from bigssh.models.command import (
    CommandSpec,
    CompletionStatus,
    FailureEvent,
    RunResult,
)
from bigssh.models.ssh import ConnectionParams, SSHCredentials

__all__ = [
    "CommandSpec",
    "CompletionStatus",
    "ConnectionParams",
    "FailureEvent",
    "RunResult",
    "SSHCredentials",
]
