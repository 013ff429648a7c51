"""Static file delivery handlers."""

import asyncio
import logging
import mimetypes
import stat
from pathlib import Path

import aiofiles
import aiofiles.os

from httpkit.bootstrap.config import CHUNK_SIZE
from httpkit.domain.correlation_id import CorrelationLoggerAdapter
from httpkit.domain.errors import (
    FileUnavailable,
    IllegalPath,
    IsADirectory,
    StreamFailure,
)
from httpkit.domain.http_types import ResponseSink
from httpkit.domain.sandbox import PathSandbox

FILE_LOGGER = CorrelationLoggerAdapter(
    logging.getLogger("httpkit.handlers.file"), {}
)

TEXTUAL_TYPES = {
    "application/javascript",
    "application/json",
    "application/xml",
    "image/svg+xml",
}


def content_type_for_path(filepath: Path) -> str:
    """Return the Content-Type for ``filepath`` or an empty string when unknown."""
    mime_type, _ = mimetypes.guess_type(filepath.as_posix())
    if not mime_type:
        return ""
    if mime_type.startswith("text/") or mime_type in TEXTUAL_TYPES:
        return f"{mime_type}; charset=utf-8"
    return mime_type


class FileDeliverer:
    """Streams files found under a sandboxed root into response sinks."""

    def __init__(self, root: str, chunk_size: int = CHUNK_SIZE):
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        self.sandbox = PathSandbox(root)
        self.chunk_size = chunk_size

    @property
    def root_path(self) -> str:
        return self.sandbox.root_path

    async def deliver(self, sub_path: str, sink: ResponseSink) -> None:
        """Send the file at ``sub_path`` to ``sink``.

        Returns once the sink reports every byte flushed. Raises IllegalPath,
        FileUnavailable or IsADirectory before any header is written, and
        StreamFailure when the body cannot be completed.
        """
        if not self.sandbox.contains(sub_path):
            FILE_LOGGER.warning(
                "Illegal path access blocked",
                extra={"event": "illegal_path", "path": sub_path},
            )
            raise IllegalPath()

        full_path = self.sandbox.join(sub_path)
        try:
            file_stat = await aiofiles.os.stat(full_path)
        except OSError as exc:
            FILE_LOGGER.info(
                "File unavailable",
                extra={
                    "event": "file_unavailable",
                    "path": full_path.as_posix(),
                    "error_type": type(exc).__name__,
                    "errno": exc.errno,
                },
            )
            raise FileUnavailable(str(exc)) from exc

        if stat.S_ISDIR(file_stat.st_mode):
            FILE_LOGGER.info(
                "Directory requested",
                extra={"event": "directory_requested", "path": full_path.as_posix()},
            )
            raise IsADirectory()

        size = file_stat.st_size
        sink.write_header(
            200,
            {
                "Content-Type": content_type_for_path(full_path),
                "Content-Length": str(size),
            },
        )
        if FILE_LOGGER.logger.isEnabledFor(logging.DEBUG):
            FILE_LOGGER.debug(
                "Delivery started",
                extra={
                    "event": "delivery_started",
                    "path": full_path.as_posix(),
                    "bytes": size,
                },
            )

        sent = await self._stream(full_path, size, sink)
        FILE_LOGGER.info(
            "Delivery complete",
            extra={
                "event": "delivery_complete",
                "path": full_path.as_posix(),
                "bytes_out": sent,
            },
        )

    async def _stream(self, full_path: Path, size: int, sink: ResponseSink) -> int:
        sent = 0
        try:
            async with aiofiles.open(full_path, "rb") as file_handle:
                # Never write past the Content-Length already announced.
                while sent < size:
                    chunk = await file_handle.read(min(self.chunk_size, size - sent))
                    if not chunk:
                        break
                    await sink.write(chunk)
                    sent += len(chunk)
                    if FILE_LOGGER.logger.isEnabledFor(logging.DEBUG):
                        FILE_LOGGER.debug(
                            "File chunk sent",
                            extra={"event": "file_chunk_sent", "bytes": len(chunk)},
                        )
                if sent != size:
                    raise StreamFailure(f"expected {size} bytes, read {sent}")
                if await file_handle.read(1):
                    raise StreamFailure("file grew during delivery")
            await sink.finish()
        except asyncio.CancelledError:
            raise
        except StreamFailure as exc:
            self._log_stream_failure(full_path, sent, exc)
            raise
        except Exception as exc:
            self._log_stream_failure(full_path, sent, exc)
            raise StreamFailure(str(exc) or type(exc).__name__) from exc
        return sent

    @staticmethod
    def _log_stream_failure(full_path: Path, sent: int, exc: Exception) -> None:
        FILE_LOGGER.error(
            "Stream failed",
            extra={
                "event": "stream_failed",
                "path": full_path.as_posix(),
                "bytes_out": sent,
                "error_type": type(exc).__name__,
            },
        )
