"""Shared HTTP type definitions to avoid circular imports."""

from http import HTTPStatus
from typing import Protocol


class ResponseSink(Protocol):
    """Destination of a streamed response.

    ``write`` suspends while the sink applies backpressure and ``finish``
    resolves only once everything written has been flushed.
    """

    headers_sent: bool

    def write_header(self, status: int, headers: dict[str, str]) -> None:
        ...

    async def write(self, chunk: bytes) -> None:
        ...

    async def finish(self) -> None:
        ...


def status_line(status: int) -> str:
    """Return the HTTP/1.1 status line for a numeric status."""
    try:
        reason = HTTPStatus(status).phrase
    except ValueError:
        reason = "Unknown"
    return f"HTTP/1.1 {status} {reason}"
