"""Protocol interfaces for the execution pipeline's collaborators.

The adapter depends on these rather than on asyncssh or on any particular
orchestration layer, so tests can pass plain fakes:

    class RecordingReporter:
        def __init__(self):
            self.messages = []

        async def working(self, text):
            self.messages.append(text)

    adapter = DeferredStreamAdapter(factory, reporter=RecordingReporter())
"""

from typing import Any, Protocol, runtime_checkable

from bigssh.models import CompletionStatus, ConnectionParams


@runtime_checkable
class StatusReporter(Protocol):
    """Receives human-readable progress text for an execution."""

    async def working(self, text: str) -> None:
        """Report the phase an execution has reached.

        Args:
            text: Progress message, e.g. ``"Connecting to host..."``
        """
        ...


@runtime_checkable
class CompletionSink(Protocol):
    """Receives the completion status of successful executions."""

    async def stats(self, status: CompletionStatus) -> None:
        """Record the raw exit status of a finished command.

        Called at most once per execution, never after a failure.
        """
        ...


@runtime_checkable
class RemoteProcess(Protocol):
    """A running remote command.

    ``stdin``/``stdout`` form the combined stream; ``stderr`` is the separate
    error-output channel. ``asyncssh.SSHClientProcess`` satisfies this.
    """

    stdin: Any
    stdout: Any
    stderr: Any

    @property
    def exit_status(self) -> int | None: ...

    @property
    def exit_signal(self) -> tuple[str, bool, str, str] | None: ...

    async def wait_closed(self) -> None:
        """Wait until the remote channel has closed."""
        ...


@runtime_checkable
class RemoteSession(Protocol):
    """An authenticated SSH session able to run one command."""

    async def exec(self, command: str) -> RemoteProcess:
        """Start ``command`` and return its process streams.

        Raises:
            ExecLaunchError: If the remote side refuses the command
        """
        ...

    async def close(self) -> None:
        """Close the session and wait for it to shut down."""
        ...


@runtime_checkable
class SessionConnector(Protocol):
    """Opens remote sessions."""

    async def connect(self, params: ConnectionParams) -> RemoteSession:
        """Open exactly one session.

        Raises:
            ConnectionError: If the connection cannot be established
        """
        ...
