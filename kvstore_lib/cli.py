"""Command line entrypoint for the KV document store server.

Parses a handful of overrides, loads configuration, configures logging and
runs the app under uvicorn. uvicorn installs the SIGINT/SIGTERM handlers;
in-flight requests get a short grace period before the process exits.
"""
from __future__ import annotations
import argparse
import dataclasses
from pathlib import Path
from typing import Iterable, Optional

import uvicorn

from kvstore_lib.config.config import load_config
from kvstore_lib.logging_config import configure_logging
from kvstore_lib.main import create_app

GRACEFUL_SHUTDOWN_SECONDS = 5


def get_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="kvstore", description="Run the KV document store HTTP server")
    p.add_argument("--config", type=Path, default=None, help="Path to a YAML config file")
    p.add_argument("--host", default="0.0.0.0", help="Interface to listen on")
    p.add_argument("--port", type=int, default=None, help="HTTP port (overrides HTTP_PORT)")
    p.add_argument("--backend", choices=("tarantool", "memory"), default=None,
                   help="Storage backend (overrides STORAGE_BACKEND)")
    return p


def parse_args(argv: Optional[Iterable[str]] = None) -> argparse.Namespace:
    return get_parser().parse_args(list(argv) if argv is not None else None)


def main(argv: Optional[Iterable[str]] = None) -> int:
    args = parse_args(argv)
    config = load_config(args.config)
    overrides = {}
    if args.port is not None:
        overrides['http_port'] = args.port
    if args.backend is not None:
        overrides['storage_backend'] = args.backend
    if overrides:
        config = dataclasses.replace(config, **overrides)

    logger = configure_logging(config.log_level)
    logger.info("Listening on %s:%d", args.host, config.http_port)

    app = create_app(config)
    uvicorn.run(
        app,
        host=args.host,
        port=config.http_port,
        log_config=None,
        timeout_graceful_shutdown=GRACEFUL_SHUTDOWN_SECONDS,
    )
    logger.info("Server stopped")
    return 0
