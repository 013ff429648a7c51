"""Shared pytest fixtures for integration and unit tests."""

from __future__ import annotations

import asyncio
import functools
import logging
import threading
from pathlib import Path
from typing import Generator, Optional, TypedDict

import pytest

from httpkit.domain.correlation_id import clear_correlation_id
from httpkit.pipeline.router import StaticRoute
from httpkit.transport.sinks import StreamWriterSink

PROJECT_ROOT = Path(__file__).resolve().parent.parent
STATIC_BASE_URL = "/static/"
SERVER_CHUNK_SIZE = 4096


class StaticServerInfo(TypedDict):
    """Metadata describing a running static server fixture instance."""

    base_url: str
    host: str
    port: int
    directory: Path


async def _handle_connection(
    route: StaticRoute, reader: asyncio.StreamReader, writer: asyncio.StreamWriter
) -> None:
    try:
        request_line = await reader.readline()
        while True:
            line = await reader.readline()
            if line in (b"\r\n", b"\n", b""):
                break
        _, target, _ = request_line.decode("latin-1").split(" ", 2)
        await route.handle(target, StreamWriterSink(writer))
    finally:
        writer.close()
        try:
            await writer.wait_closed()
        except ConnectionError:
            pass


class _ServerThread(threading.Thread):
    """Runs an asyncio server on its own event loop."""

    def __init__(self, route: StaticRoute, host: str):
        super().__init__(daemon=True)
        self.route = route
        self.host = host
        self.port = 0
        self.ready = threading.Event()
        self.loop: Optional[asyncio.AbstractEventLoop] = None

    def run(self) -> None:
        self.loop = asyncio.new_event_loop()
        asyncio.set_event_loop(self.loop)
        server = self.loop.run_until_complete(
            asyncio.start_server(
                functools.partial(_handle_connection, self.route), self.host, 0
            )
        )
        self.port = server.sockets[0].getsockname()[1]
        self.ready.set()
        try:
            self.loop.run_forever()
        finally:
            server.close()
            self.loop.run_until_complete(server.wait_closed())
            self.loop.close()

    def stop(self) -> None:
        if self.loop is not None:
            self.loop.call_soon_threadsafe(self.loop.stop)
        self.join(timeout=5)


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Expose the repository root path to tests."""

    return PROJECT_ROOT


@pytest.fixture(autouse=True)
def enable_log_propagation():
    """Ensure logs propagate to root so caplog can catch them."""
    logger = logging.getLogger("httpkit")
    old_propagate = logger.propagate
    logger.propagate = True
    yield
    logger.propagate = old_propagate


@pytest.fixture(autouse=True)
def reset_correlation_id():
    """Start every test without a bound correlation ID."""
    clear_correlation_id()
    yield
    clear_correlation_id()


@pytest.fixture(name="static_root")
def _static_root(tmp_path: Path) -> Path:
    """Populate a sandbox directory with a few assets."""

    root = tmp_path / "public"
    (root / "css").mkdir(parents=True)
    (root / "index.html").write_text("<h1>hello</h1>")
    (root / "css" / "site.css").write_text("body { color: red; }")
    (root / "blob.zzqx").write_bytes(b"\x00\x01\x02")
    (tmp_path / "secret.txt").write_text("outside the sandbox")
    return root


@pytest.fixture(name="static_server")
def _static_server(static_root: Path) -> Generator[StaticServerInfo, None, None]:
    """Serve ``static_root`` below /static/ on an ephemeral port."""

    host = "127.0.0.1"
    route = StaticRoute(STATIC_BASE_URL, str(static_root), SERVER_CHUNK_SIZE)
    thread = _ServerThread(route, host)
    thread.start()
    if not thread.ready.wait(timeout=5):
        raise RuntimeError("Static server did not start")
    yield {
        "base_url": f"http://{host}:{thread.port}",
        "host": host,
        "port": thread.port,
        "directory": static_root,
    }
    thread.stop()
