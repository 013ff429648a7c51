"""Static route adapter mapping request URLs onto the file deliverer."""

import logging
import urllib.parse

from httpkit.bootstrap.config import CHUNK_SIZE
from httpkit.domain.correlation_id import (
    CorrelationLoggerAdapter,
    generate_correlation_id,
    get_correlation_id,
    set_correlation_id,
)
from httpkit.domain.errors import HttpError, IllegalPath
from httpkit.domain.http_types import ResponseSink
from httpkit.domain.response_builders import error_response
from httpkit.handlers.file_handler import FileDeliverer

ROUTER_LOGGER = CorrelationLoggerAdapter(
    logging.getLogger("httpkit.pipeline.router"), {}
)


def url_path(url: str) -> str:
    """Return the decoded path component of a request target."""
    path = urllib.parse.urlsplit(url).path or "/"
    return urllib.parse.unquote(path)


class StaticRoute:
    """Serves files from ``folder`` for URLs below ``base_url``."""

    def __init__(self, base_url: str, folder: str, chunk_size: int = CHUNK_SIZE):
        self.base_url = base_url.strip().lower()
        self._prefix = self.base_url.rstrip("/")
        self.deliverer = FileDeliverer(folder, chunk_size)

    def matches(self, url: str) -> bool:
        return url_path(url).lower().startswith(self.base_url)

    def sub_path_for(self, url: str) -> str:
        """Swap the base URL prefix for ``.`` to obtain a sandbox sub-path."""
        path = url_path(url)
        if path.lower().startswith(self._prefix):
            path = path[len(self._prefix) :]
        return "." + path

    async def handle(self, url: str, sink: ResponseSink) -> None:
        """Deliver the file addressed by ``url`` into ``sink``.

        URLs outside ``base_url`` are rejected as illegal paths. Errors raised
        before the headers went out are answered on the sink; later failures
        are re-raised to the caller.
        """
        if get_correlation_id() is None:
            set_correlation_id(generate_correlation_id())
        try:
            if not self.matches(url):
                raise IllegalPath()
            sub_path = self.sub_path_for(url)
            if ROUTER_LOGGER.logger.isEnabledFor(logging.DEBUG):
                ROUTER_LOGGER.debug(
                    "Route matched",
                    extra={
                        "event": "route_matched",
                        "route": self.base_url,
                        "url": url,
                    },
                )
            await self.deliverer.deliver(sub_path, sink)
        except HttpError as exc:
            ROUTER_LOGGER.warning(
                "Static delivery failed",
                extra={
                    "event": "route_error",
                    "url": url,
                    "status_code": exc.status,
                    "error_type": type(exc).__name__,
                },
            )
            if sink.headers_sent:
                raise
            status, headers, payload = error_response(exc)
            sink.write_header(status, headers)
            await sink.write(payload)
            await sink.finish()
