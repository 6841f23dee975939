"""Exceptions raised along the remote execution pipeline.

Every failure an execution can hit is an ``ExecutionError`` subclass so that
callers only need one handler for the terminal ``FailureEvent``.
"""


class ExecutionError(Exception):
    """Base class for remote execution failures."""

    phase = "execution"

    def __init__(
        self,
        host: str,
        message: str,
        original_error: BaseException | None = None,
    ):
        """Initialize execution error.

        Args:
            host: Host the execution was targeting
            message: Human-readable description
            original_error: Underlying exception, if any
        """
        self.host = host
        self.original_error = original_error
        super().__init__(message)


class CredentialLoadError(ExecutionError):
    """Private key could not be read or parsed."""

    phase = "credentials"

    def __init__(self, host: str, path: str | None, original_error: BaseException):
        self.path = path
        super().__init__(host, f"Private Key: {original_error}", original_error)


class ConnectionError(ExecutionError):
    """SSH session could not be established."""

    phase = "connect"

    def __init__(self, host: str, original_error: BaseException):
        super().__init__(host, f"Cannot connect to {host}: {original_error}", original_error)


class ExecLaunchError(ExecutionError):
    """Remote side refused to start the command."""

    phase = "exec"

    def __init__(self, host: str, command: str, original_error: BaseException):
        self.command = command
        super().__init__(
            host, f"Cannot execute command on {host}: {original_error}", original_error
        )


class StreamTransportError(ExecutionError):
    """Stream failed after the command was running."""

    phase = "stream"

    def __init__(self, host: str, original_error: BaseException):
        super().__init__(host, f"Stream error on {host}: {original_error}", original_error)


class ExecutionCancelledError(ExecutionError):
    """Execution was cancelled by its owner before reaching a terminal state."""

    phase = "cancelled"

    def __init__(self, host: str):
        super().__init__(host, f"Execution on {host} cancelled")


class ChannelClosedError(Exception):
    """Write attempted on a closed input channel."""
