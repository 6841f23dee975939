"""Queue-backed stream handles that exist before their peer does.

An execution hands these out before any SSH connection is made. Each wraps an
unbounded ``asyncio.Queue`` of byte chunks terminated by a ``None`` marker;
the adapter attaches to the other end once the remote process is running.
"""

import asyncio
import logging
from collections.abc import AsyncIterator

from bigssh.services.errors import ChannelClosedError

logger = logging.getLogger(__name__)

_EOF = None


class DeferredChannel:
    """Unbounded FIFO of byte chunks with an end-of-stream marker."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._queue: asyncio.Queue[bytes | None] = asyncio.Queue()
        self._closed = False
        self._eof_seen = False

    @property
    def closed(self) -> bool:
        """Whether no more chunks will be accepted."""
        return self._closed

    @property
    def pending(self) -> int:
        """Number of queued items, including the end marker if queued."""
        return self._queue.qsize()

    def put(self, data: bytes) -> None:
        """Queue a chunk.

        Raises:
            ChannelClosedError: If the channel was already closed
        """
        if self._closed:
            raise ChannelClosedError(f"{self.name} channel is closed")
        if data:
            self._queue.put_nowait(bytes(data))

    def close(self) -> None:
        """Queue the end marker. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(_EOF)
        logger.debug("Closed %s channel (pending=%d)", self.name, self._queue.qsize())

    async def get(self) -> bytes:
        """Return the next chunk, or ``b""`` once the end marker is reached."""
        if self._eof_seen:
            return b""
        chunk = await self._queue.get()
        if chunk is _EOF:
            self._eof_seen = True
            return b""
        return chunk


class InputSink:
    """Caller-side writer for the remote command's stdin.

    Writes are buffered until the remote process accepts input and are then
    replayed in order. Closing the sink sends EOF to the remote process.
    """

    def __init__(self, channel: DeferredChannel) -> None:
        self._channel = channel

    def write(self, data: bytes) -> None:
        """Buffer ``data`` for delivery to the remote process."""
        self._channel.put(data)

    def writelines(self, lines: list[bytes]) -> None:
        for line in lines:
            self.write(line)

    def close(self) -> None:
        """Signal end of input."""
        self._channel.close()

    @property
    def closed(self) -> bool:
        return self._channel.closed


class OutputSource:
    """Caller-side reader for one of the remote command's output channels."""

    def __init__(self, channel: DeferredChannel) -> None:
        self._channel = channel

    async def read(self) -> bytes:
        """Return the next chunk of output, or ``b""`` at end of stream."""
        return await self._channel.get()

    async def read_all(self) -> bytes:
        """Read until end of stream and return everything received."""
        return b"".join([chunk async for chunk in self])

    def __aiter__(self) -> AsyncIterator[bytes]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[bytes]:
        while chunk := await self._channel.get():
            yield chunk
