"""Shared fakes for remote sessions and processes."""

import asyncio
from pathlib import Path
from typing import Any

import asyncssh
import pytest

from bigssh.models import CommandSpec, SSHCredentials


class FakeWriter:
    """Records bytes written to remote stdin."""

    def __init__(self, process: "FakeProcess") -> None:
        self._process = process
        self.data = bytearray()
        self.chunks: list[bytes] = []
        self.eof = asyncio.Event()
        self.broken = False

    def write(self, data: bytes) -> None:
        if self.broken:
            raise BrokenPipeError("Channel not open for sending")
        self.data += data
        self.chunks.append(data)

    async def drain(self) -> None:
        await asyncio.sleep(0)

    def write_eof(self) -> None:
        self.eof.set()
        if self._process.finish_on_eof:
            self._process.finish()


class FakeProcess:
    """Remote process with scripted output and exit status."""

    def __init__(
        self,
        stdout: bytes = b"",
        stderr: bytes = b"",
        exit_status: int | None = 0,
        exit_signal: tuple[str, bool, str, str] | None = None,
        finish_on_eof: bool = False,
    ) -> None:
        self.stdin = FakeWriter(self)
        self.stdout = asyncio.StreamReader()
        self.stderr = asyncio.StreamReader()
        self.exit_status = exit_status
        self.exit_signal = exit_signal
        self.finish_on_eof = finish_on_eof
        self._scripted = (stdout, stderr)
        self._closed = asyncio.Event()

    def finish(self) -> None:
        """Emit scripted output, then EOF and close."""
        stdout, stderr = self._scripted
        if stdout:
            self.stdout.feed_data(stdout)
        if stderr:
            self.stderr.feed_data(stderr)
        self.stdout.feed_eof()
        self.stderr.feed_eof()
        self._closed.set()

    async def wait_closed(self) -> None:
        await self._closed.wait()


class FakeSession:
    """Session that hands out one prepared process."""

    def __init__(self, process: FakeProcess | None = None, exec_error: Exception | None = None):
        self.process = process
        self.exec_error = exec_error
        self.commands: list[str] = []
        self.closed = False

    async def exec(self, command: str) -> FakeProcess:
        self.commands.append(command)
        if self.exec_error is not None:
            raise self.exec_error
        assert self.process is not None
        return self.process

    async def close(self) -> None:
        self.closed = True


class FakeConnector:
    """Connector with an optional gate that holds connect() until released."""

    def __init__(
        self,
        session: FakeSession | None = None,
        error: Exception | None = None,
        gated: bool = False,
    ) -> None:
        self.session = session
        self.error = error
        self.calls: list[Any] = []
        self.gate = asyncio.Event()
        if not gated:
            self.gate.set()

    async def connect(self, params: Any) -> FakeSession:
        self.calls.append(params)
        await self.gate.wait()
        if self.error is not None:
            raise self.error
        assert self.session is not None
        return self.session


class RecordingReporter:
    """Status reporter collecting progress text."""

    def __init__(self) -> None:
        self.messages: list[str] = []

    async def working(self, text: str) -> None:
        self.messages.append(text)


class RecordingSink:
    """Completion sink collecting statuses."""

    def __init__(self) -> None:
        self.statuses: list[Any] = []

    async def stats(self, status: Any) -> None:
        self.statuses.append(status)


@pytest.fixture(scope="session")
def private_key_bytes() -> bytes:
    """A freshly generated OpenSSH private key."""
    return asyncssh.generate_private_key("ssh-ed25519").export_private_key()


@pytest.fixture
def key_file(tmp_path: Path, private_key_bytes: bytes) -> Path:
    """Private key written to disk."""
    path = tmp_path / "id_ed25519"
    path.write_bytes(private_key_bytes)
    return path


@pytest.fixture
def credentials(key_file: Path) -> SSHCredentials:
    """Credentials pointing at a valid key file."""
    return SSHCredentials(
        name="web1",
        hostname="10.0.0.5",
        user="deploy",
        port=2222,
        identity_file=str(key_file),
    )


@pytest.fixture
def command() -> CommandSpec:
    return CommandSpec(command_line="ls", command_args=("a b", "c"))


@pytest.fixture
def fakes() -> Any:
    """Namespace of fake classes, instantiated inside async tests."""

    class Fakes:
        Process = FakeProcess
        Session = FakeSession
        Connector = FakeConnector
        Reporter = RecordingReporter
        Sink = RecordingSink

    return Fakes
