"""Pure HTTP response builders."""

from typing import Tuple

from httpkit.domain.errors import BadRequest, HttpError
from httpkit.domain.http_types import status_line


def serialize_head(status: int, headers: dict[str, str]) -> bytes:
    """Serialize a status line and header block terminated by a blank line."""
    header_lines = [status_line(status)]
    header_lines.extend(f"{name}: {value}" for name, value in headers.items())
    return "\r\n".join(header_lines).encode("latin-1") + b"\r\n\r\n"


def error_body(error: HttpError) -> bytes:
    """Return the text/plain payload describing ``error``."""
    if isinstance(error, BadRequest) and error.detail:
        return f"{error.title}\n{error.detail}".encode()
    return error.message.encode()


def error_response(error: HttpError) -> Tuple[int, dict[str, str], bytes]:
    """Build status, headers and body for an error raised before headers went out."""
    payload = error_body(error)
    headers = {
        "Content-Type": "text/plain; charset=utf-8",
        "Content-Length": str(len(payload)),
    }
    return error.status, headers, payload
