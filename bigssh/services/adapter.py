"""Deferred stream adapter: stream handles first, SSH connection later.

``DeferredStreamAdapter.execute`` returns input, output and error-side handles
immediately and runs the rest of the job in a background task:

    load key -> connect -> exec -> splice streams -> close/error

Input written before the remote command is running is queued and replayed in
order. Each execution ends in exactly one terminal event, either a
``CompletionStatus`` or a ``FailureEvent``, delivered through
``ExecutionHandles.terminal``.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any

from bigssh.models import (
    CommandSpec,
    CompletionStatus,
    ConnectionParams,
    FailureEvent,
    SSHCredentials,
)
from bigssh.protocols import CompletionSink, RemoteProcess, SessionConnector, StatusReporter
from bigssh.services.channels import DeferredChannel, InputSink, OutputSource
from bigssh.services.errors import (
    ConnectionError,
    CredentialLoadError,
    ExecLaunchError,
    ExecutionCancelledError,
    ExecutionError,
    StreamTransportError,
)
from bigssh.services.session import load_private_key
from bigssh.utils.shell import build_command_line, preview

logger = logging.getLogger(__name__)

CHUNK_SIZE = 65536

TerminalEvent = CompletionStatus | FailureEvent


class TerminalSlot:
    """Holds the single terminal event of an execution.

    The first call to ``complete`` or ``fail`` wins; later calls are ignored
    and return False.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop) -> None:
        self._future: asyncio.Future[TerminalEvent] = loop.create_future()

    @property
    def settled(self) -> bool:
        return self._future.done()

    @property
    def event(self) -> TerminalEvent | None:
        """The terminal event, or None while the execution is running."""
        return self._future.result() if self._future.done() else None

    @property
    def status(self) -> CompletionStatus | None:
        event = self.event
        return event if isinstance(event, CompletionStatus) else None

    @property
    def failure(self) -> FailureEvent | None:
        event = self.event
        return event if isinstance(event, FailureEvent) else None

    def complete(self, status: CompletionStatus) -> bool:
        """Record successful completion. Returns False if already settled."""
        if self._future.done():
            return False
        self._future.set_result(status)
        return True

    def fail(self, cause: ExecutionError) -> bool:
        """Record a failure. Returns False if already settled."""
        if self._future.done():
            return False
        self._future.set_result(FailureEvent(cause=cause))
        return True

    async def wait(self) -> TerminalEvent:
        """Wait for the terminal event."""
        return await asyncio.shield(self._future)


@dataclass
class ExecutionHandles:
    """Caller-owned handles of one execution.

    Attributes:
        input: Writer for the remote command's stdin
        output: Reader for the remote command's stdout
        error_side: Reader for the remote command's stderr
        terminal: Slot receiving the single terminal event
    """

    input: InputSink
    output: OutputSource
    error_side: OutputSource
    terminal: TerminalSlot
    host: str = ""
    pipeline: "asyncio.Task[None] | None" = field(default=None, repr=False)

    async def wait(self) -> TerminalEvent:
        """Wait for the execution to reach its terminal event."""
        return await self.terminal.wait()

    def cancel(self) -> None:
        """Abort the execution.

        The execution settles with an ``ExecutionCancelledError`` failure
        unless it already reached a terminal event.
        """
        if self.pipeline is not None and not self.pipeline.done():
            logger.info("Cancelling execution on %s", self.host)
            self.pipeline.cancel()


class _Execution:
    """Producer side of one execution, owned by the pipeline task."""

    def __init__(
        self,
        connector: SessionConnector,
        command: CommandSpec,
        host: str,
        params: ConnectionParams | None,
        key_error: CredentialLoadError | None,
        channels: tuple[DeferredChannel, DeferredChannel, DeferredChannel],
        terminal: TerminalSlot,
        reporter: StatusReporter | None,
        completion_sink: CompletionSink | None,
    ) -> None:
        self._connector = connector
        self._command = command
        self.host = host
        self._params = params
        self._key_error = key_error
        self._stdin, self._stdout, self._stderr = channels
        self._terminal = terminal
        self._reporter = reporter
        self._completion_sink = completion_sink
        self._session: Any = None

    async def run(self) -> None:
        outcome: CompletionStatus | ExecutionError | None = None
        try:
            outcome = await self._drive()
        except ExecutionError as e:
            logger.error("Execution on %s failed (%s): %s", self.host, e.phase, e)
            outcome = e
        except asyncio.CancelledError:
            outcome = ExecutionCancelledError(self.host)
            raise
        finally:
            # Teardown survives cancellation; a reached outcome is always settled
            try:
                await asyncio.shield(self._teardown())
            finally:
                if outcome is not None:
                    await self._settle(outcome)

    def on_done(self, task: "asyncio.Task[None]") -> None:
        """Settle executions whose task ended without reaching ``_settle``.

        Covers tasks cancelled before their first step and unexpected errors.
        """
        if self._terminal.settled:
            return
        for channel in (self._stdin, self._stdout, self._stderr):
            channel.close()
        if task.cancelled():
            self._terminal.fail(ExecutionCancelledError(self.host))
            return
        exc = task.exception()
        logger.error("Execution on %s crashed: %r", self.host, exc)
        self._terminal.fail(ExecutionError(self.host, f"Unexpected error: {exc}", exc))

    async def _drive(self) -> CompletionStatus:
        if self._key_error is not None:
            raise self._key_error
        params = self._params
        if params is None:
            raise ExecutionError(self.host, "No connection parameters for execution")

        await self._report(f"Connecting to {params.host}...")
        try:
            self._session = await self._connector.connect(params)
        except ExecutionError:
            raise
        except Exception as e:
            raise ConnectionError(self.host, e) from e

        command = build_command_line(self._command.command_line, self._command.command_args)
        await self._report(f"Executing {preview(command)}...")
        logger.info("Executing on %s: %s", self.host, command)
        try:
            process = await self._session.exec(command)
        except ExecutionError:
            raise
        except Exception as e:
            raise ExecLaunchError(self.host, command, e) from e

        await self._report("Launched, waiting for data...")
        return await self._splice(process)

    async def _splice(self, process: RemoteProcess) -> CompletionStatus:
        loop = asyncio.get_running_loop()
        input_task = loop.create_task(self._pump_input(process))
        output_task = loop.create_task(self._collect(process))
        try:
            done, _ = await asyncio.wait(
                {input_task, output_task}, return_when=asyncio.FIRST_COMPLETED
            )
            if input_task in done:
                input_task.result()
            return await output_task
        finally:
            for task in (input_task, output_task):
                task.cancel()
            await asyncio.gather(input_task, output_task, return_exceptions=True)

    async def _pump_input(self, process: RemoteProcess) -> None:
        writer = process.stdin
        while chunk := await self._stdin.get():
            try:
                writer.write(chunk)
                await writer.drain()
            except (BrokenPipeError, ConnectionResetError):
                # Remote side stopped reading; remaining input is discarded
                logger.debug("Remote stdin on %s closed, dropping input", self.host)
                return
            except Exception as e:
                raise StreamTransportError(self.host, e) from e
        try:
            writer.write_eof()
        except (BrokenPipeError, ConnectionResetError):
            logger.debug("Remote stdin on %s closed before EOF", self.host)
        except Exception as e:
            raise StreamTransportError(self.host, e) from e

    async def _pump_output(self, reader: Any, channel: DeferredChannel) -> None:
        while True:
            try:
                chunk = await reader.read(CHUNK_SIZE)
            except Exception as e:
                raise StreamTransportError(self.host, e) from e
            if not chunk:
                break
            channel.put(chunk)
        channel.close()

    async def _collect(self, process: RemoteProcess) -> CompletionStatus:
        loop = asyncio.get_running_loop()
        pumps = [
            loop.create_task(self._pump_output(process.stdout, self._stdout)),
            loop.create_task(self._pump_output(process.stderr, self._stderr)),
        ]
        try:
            await asyncio.gather(*pumps)
        finally:
            for pump in pumps:
                pump.cancel()
            await asyncio.gather(*pumps, return_exceptions=True)

        try:
            await process.wait_closed()
        except Exception as e:
            raise StreamTransportError(self.host, e) from e

        exit_signal = process.exit_signal
        return CompletionStatus(
            exit_code=process.exit_status,
            signal=exit_signal[0] if exit_signal else None,
        )

    async def _teardown(self) -> None:
        self._stdin.close()
        self._stdout.close()
        self._stderr.close()
        if self._session is not None:
            try:
                await self._session.close()
            except Exception as e:
                logger.warning("Error closing session to %s: %s", self.host, e)
            self._session = None

    async def _settle(self, outcome: CompletionStatus | ExecutionError) -> None:
        if isinstance(outcome, ExecutionError):
            self._terminal.fail(outcome)
            return

        if not self._terminal.complete(outcome):
            return
        logger.info(
            "Command on %s finished (rc=%s, signal=%s)",
            self.host,
            outcome.exit_code,
            outcome.signal,
        )
        if self._completion_sink is not None:
            try:
                await self._completion_sink.stats(outcome)
            except Exception as e:
                logger.warning("Completion sink failed: %s", e)

    async def _report(self, text: str) -> None:
        logger.debug("[%s] %s", self.host, text)
        if self._reporter is None:
            return
        try:
            await self._reporter.working(text)
        except Exception as e:
            logger.warning("Status reporter failed: %s", e)


class DeferredStreamAdapter:
    """Runs remote commands behind immediately usable stream handles."""

    def __init__(
        self,
        connector: SessionConnector,
        reporter: StatusReporter | None = None,
        completion_sink: CompletionSink | None = None,
    ) -> None:
        """Initialize the adapter.

        Args:
            connector: Opens one remote session per execution
            reporter: Default receiver of progress text
            completion_sink: Default receiver of completion status
        """
        self._connector = connector
        self._reporter = reporter
        self._completion_sink = completion_sink

    def execute(
        self,
        command: CommandSpec,
        credentials: SSHCredentials,
        reporter: StatusReporter | None = None,
        completion_sink: CompletionSink | None = None,
    ) -> ExecutionHandles:
        """Start ``command`` on the credentials' host and return its handles.

        Must be called from a running event loop. Never raises for key,
        connection, launch or stream failures; those arrive as a
        ``FailureEvent`` on ``handles.terminal``.

        Args:
            command: Command line and arguments
            credentials: Host, user and private key path
            reporter: Overrides the adapter's default status reporter
            completion_sink: Overrides the adapter's default completion sink

        Returns:
            Handles for stdin, stdout, stderr and the terminal event
        """
        loop = asyncio.get_running_loop()
        host = credentials.hostname

        params: ConnectionParams | None = None
        key_error: CredentialLoadError | None = None
        try:
            params = ConnectionParams(
                host=host,
                port=credentials.port,
                username=credentials.user,
                private_key=load_private_key(host, credentials.identity_file),
            )
        except CredentialLoadError as e:
            logger.error("Cannot load private key for %s: %s", credentials.name, e)
            key_error = e

        stdin = DeferredChannel("stdin")
        stdout = DeferredChannel("stdout")
        stderr = DeferredChannel("stderr")
        terminal = TerminalSlot(loop)

        handles = ExecutionHandles(
            input=InputSink(stdin),
            output=OutputSource(stdout),
            error_side=OutputSource(stderr),
            terminal=terminal,
            host=host,
        )

        execution = _Execution(
            connector=self._connector,
            command=command,
            host=host,
            params=params,
            key_error=key_error,
            channels=(stdin, stdout, stderr),
            terminal=terminal,
            reporter=reporter or self._reporter,
            completion_sink=completion_sink or self._completion_sink,
        )
        handles.pipeline = loop.create_task(execution.run(), name=f"bigssh:{host}")
        handles.pipeline.add_done_callback(execution.on_done)
        return handles
