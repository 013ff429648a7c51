"""Deliver a single static asset from a sandboxed directory into a file."""

import asyncio
import logging
import sys

from httpkit.bootstrap.config import parse_cli_args
from httpkit.bootstrap.logging_setup import configure_logging
from httpkit.domain.correlation_id import CorrelationLoggerAdapter
from httpkit.domain.errors import HttpError
from httpkit.pipeline.router import StaticRoute
from httpkit.transport.sinks import FileSink

CLI_LOGGER = CorrelationLoggerAdapter(logging.getLogger("httpkit.cli"), {})


async def deliver_to_file(
    url: str, directory: str, base_url: str, output: str, chunk_size: int
) -> FileSink:
    """Route ``url`` through a static route and store the response in ``output``."""
    route = StaticRoute(base_url, directory, chunk_size)
    sink = FileSink(output)
    try:
        await route.handle(url, sink)
    finally:
        await sink.close()
    return sink


def main(argv: list[str] | None = None) -> int:
    args = parse_cli_args(sys.argv[1:] if argv is None else argv)
    configure_logging(args.log_level, args.log_destination)
    CLI_LOGGER.info(
        "Delivering static asset",
        extra={"url": args.url, "directory": args.directory},
    )
    try:
        sink = asyncio.run(
            deliver_to_file(
                args.url, args.directory, args.base_url, args.output, args.chunk_size
            )
        )
    except HttpError as exc:
        CLI_LOGGER.error(
            "Static asset delivery aborted",
            extra={"url": args.url, "status_code": exc.status},
        )
        return 1
    if sink.status != 200:
        CLI_LOGGER.error(
            "Static asset not delivered",
            extra={"url": args.url, "status_code": sink.status},
        )
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
