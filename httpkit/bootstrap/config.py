"""Configuration constants and CLI argument parsing."""

import argparse
import os


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    return int(value) if value is not None else default


def _env_str(name: str, default: str) -> str:
    value = os.getenv(name)
    return value if value else default


CHUNK_SIZE = _env_int("HTTPKIT_CHUNK_SIZE", 64 * 1024)
DEFAULT_BASE_URL = _env_str("HTTPKIT_BASE_URL", "/")
LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def parse_cli_args(argv: list[str]) -> argparse.Namespace:
    """Return parsed CLI arguments for a one-shot static delivery."""
    parser = argparse.ArgumentParser(
        description="Deliver a static asset from a sandboxed directory"
    )
    parser.add_argument("url", help="Request URL or path, e.g. /static/app.js")
    parser.add_argument("--directory", default=".")
    parser.add_argument(
        "--base-url",
        default=DEFAULT_BASE_URL,
        help="URL prefix mapped onto the directory",
    )
    parser.add_argument(
        "--output", required=True, help="File receiving the response body"
    )
    parser.add_argument(
        "--chunk-size",
        type=int,
        default=CHUNK_SIZE,
        help="Bytes read from disk per chunk",
    )
    default_log_level = os.getenv("HTTPKIT_LOG_LEVEL", "INFO").upper()
    default_destination = os.getenv("HTTPKIT_LOG_DESTINATION", "stderr")
    parser.add_argument(
        "--log-level",
        default=default_log_level,
        choices=LOG_LEVELS,
        type=str.upper,
    )
    parser.add_argument(
        "--log-destination",
        default=default_destination,
        help="stdout, stderr or a file path",
    )
    return parser.parse_args(argv)
