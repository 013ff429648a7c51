"""Concrete response sinks consumed by the file deliverer."""

import asyncio
import logging
from pathlib import Path
from typing import Optional

import aiofiles

from httpkit.domain.correlation_id import CorrelationLoggerAdapter
from httpkit.domain.response_builders import serialize_head

SINK_LOGGER = CorrelationLoggerAdapter(logging.getLogger("httpkit.transport.sink"), {})
FLUSH_POLL_INTERVAL = 0.005


class HeadersAlreadySent(RuntimeError):
    """Raised when a second header block is written to a sink."""


class StreamWriterSink:
    """Sink writing an HTTP/1.1 response onto an asyncio stream."""

    def __init__(self, writer: asyncio.StreamWriter):
        self._writer = writer
        self.headers_sent = False
        self.status: Optional[int] = None

    def write_header(self, status: int, headers: dict[str, str]) -> None:
        if self.headers_sent:
            raise HeadersAlreadySent(f"status {self.status} already sent")
        self._ensure_open()
        self._writer.write(serialize_head(status, headers))
        self.headers_sent = True
        self.status = status

    async def write(self, chunk: bytes) -> None:
        self._ensure_open()
        self._writer.write(chunk)
        await self._writer.drain()

    async def finish(self) -> None:
        """Resolve once the transport buffer has been handed to the socket."""
        self._ensure_open()
        await self._writer.drain()
        # drain() only waits for the low-water mark.
        while self._writer.transport.get_write_buffer_size() > 0:
            await asyncio.sleep(FLUSH_POLL_INTERVAL)
            self._ensure_open()

    def _ensure_open(self) -> None:
        if self._writer.is_closing():
            raise ConnectionResetError("response stream closed by peer")


class FileSink:
    """Sink storing the response body in a local file."""

    def __init__(self, path: str):
        self.path = Path(path)
        self.headers_sent = False
        self.status: Optional[int] = None
        self.headers: dict[str, str] = {}
        self.bytes_written = 0
        self._handle = None

    def write_header(self, status: int, headers: dict[str, str]) -> None:
        if self.headers_sent:
            raise HeadersAlreadySent(f"status {self.status} already sent")
        self.status = status
        self.headers = dict(headers)
        self.headers_sent = True

    async def write(self, chunk: bytes) -> None:
        if self._handle is None:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._handle = await aiofiles.open(self.path, "wb")
        await self._handle.write(chunk)
        self.bytes_written += len(chunk)

    async def finish(self) -> None:
        if self._handle is None:
            # Zero-length bodies still produce an output file.
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._handle = await aiofiles.open(self.path, "wb")
        await self._handle.flush()
        await self.close()
        if SINK_LOGGER.logger.isEnabledFor(logging.DEBUG):
            SINK_LOGGER.debug(
                "File sink flushed",
                extra={"path": self.path.as_posix(), "bytes_out": self.bytes_written},
            )

    async def close(self) -> None:
        if self._handle is not None:
            await self._handle.close()
            self._handle = None


class BufferSink:
    """In-memory sink collecting the whole response."""

    def __init__(self):
        self.headers_sent = False
        self.status: Optional[int] = None
        self.headers: dict[str, str] = {}
        self.chunks: list[bytes] = []
        self.finished = False

    def write_header(self, status: int, headers: dict[str, str]) -> None:
        if self.headers_sent:
            raise HeadersAlreadySent(f"status {self.status} already sent")
        self.status = status
        self.headers = dict(headers)
        self.headers_sent = True

    async def write(self, chunk: bytes) -> None:
        self.chunks.append(chunk)

    async def finish(self) -> None:
        self.finished = True

    @property
    def body(self) -> bytes:
        return b"".join(self.chunks)
