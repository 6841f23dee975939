"""Command execution data models."""

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from bigssh.services.errors import ExecutionError


@dataclass(frozen=True)
class CommandSpec:
    """Base command line plus ordered arguments."""

    command_line: str
    command_args: Sequence[str] = field(default_factory=tuple)


@dataclass(frozen=True)
class CompletionStatus:
    """Raw exit status reported when the remote command stream closes."""

    exit_code: int | None
    signal: str | None = None


@dataclass(frozen=True)
class FailureEvent:
    """Terminal failure of an execution."""

    cause: "ExecutionError"


@dataclass
class RunResult:
    """Collected result of a remote command run to completion."""

    output: str
    error: str
    status: CompletionStatus | None = None
    failure: FailureEvent | None = None
    policy_error: str | None = None

    @property
    def success(self) -> bool:
        """True when the command completed and passed the return code policy."""
        return (
            self.status is not None
            and self.failure is None
            and self.policy_error is None
        )
