"""Run a remote command to completion and collect its output."""

import asyncio
import logging
from typing import TYPE_CHECKING

from bigssh.models import CommandSpec, CompletionStatus, FailureEvent, RunResult, SSHCredentials

if TYPE_CHECKING:
    from bigssh.protocols import StatusReporter
    from bigssh.services.adapter import DeferredStreamAdapter

logger = logging.getLogger(__name__)


def classify(status: CompletionStatus, min_error: int = 1) -> str | None:
    """Apply the return code threshold to a completion status.

    Args:
        status: Raw completion status
        min_error: Lowest exit code treated as a failure

    Returns:
        Error message if the exit code is at or above ``min_error``, else None
    """
    if status.exit_code is not None and status.exit_code >= min_error:
        return f"Return code {status.exit_code}"
    return None


def _decode(data: bytes) -> str:
    return data.decode("utf-8", errors="replace")


async def run_remote(
    adapter: "DeferredStreamAdapter",
    command: CommandSpec,
    credentials: SSHCredentials,
    stdin: bytes | None = None,
    min_error: int = 1,
    reporter: "StatusReporter | None" = None,
) -> RunResult:
    """Execute ``command`` and wait for its terminal event.

    Args:
        adapter: Adapter used to start the execution
        command: Command to run
        credentials: Target host credentials
        stdin: Data sent to the remote command before EOF
        min_error: Lowest exit code classified as a failure
        reporter: Receives progress text

    Returns:
        RunResult with decoded stdout/stderr and the terminal event
    """
    handles = adapter.execute(command, credentials, reporter=reporter)
    if stdin:
        handles.input.write(stdin)
    handles.input.close()

    try:
        output, error = await asyncio.gather(
            handles.output.read_all(),
            handles.error_side.read_all(),
        )
        event = await handles.wait()
    except asyncio.CancelledError:
        logger.info("Run on %s cancelled by caller", credentials.name)
        handles.cancel()
        raise

    result = RunResult(output=_decode(output), error=_decode(error))
    if isinstance(event, FailureEvent):
        result.failure = event
        return result

    result.status = event
    result.policy_error = classify(event, min_error)
    if result.policy_error:
        logger.info(
            "Command on %s classified as failed: %s (min_error=%d)",
            credentials.name,
            result.policy_error,
            min_error,
        )
    return result
