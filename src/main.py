"""
main.py — Application entry point for the cube state engine API
===============================================================

This module starts the HTTP API for a single puzzle and keeps it running
until interrupted.

Features & behavior:
 - CLI flags for the bind address, port, debug logging and the debug log
   file written by POST /write-log.
 - `--no-verify` turns off the per-move position bijection check.
 - Robust startup/shutdown: the server is shut down on exit, SIGINT/SIGTERM
   are handled, and exceptions are logged.
 - Debug mode is explicitly opt-in (`--debug`)

------------------------------------------------------------------

Copyright (c) 2025 Facundo Gauna & Ulises Carnevale. MIT License.
"""

from __future__ import annotations

import argparse
import atexit
import logging
import signal
import sys
from typing import Optional, Sequence

import config
from api import APIServer

logger = logging.getLogger("main")


def create_arg_parser() -> argparse.ArgumentParser:
    """
    Build and return the CLI argument parser.
    """
    p = argparse.ArgumentParser(
        description="3x3x3 cube state engine API",
        allow_abbrev=False,
    )

    p.add_argument("--host", default=config.API_HOST, help="Address to bind the API server to.")
    p.add_argument("--port", type=int, default=config.API_PORT, help="Port of the API server.")
    p.add_argument("--debug", action="store_true", help="Enable debug logging.")
    p.add_argument(
        "--log-file",
        default=str(config.LOG_FILE_PATH),
        help="File that POST /write-log appends to."
    )
    p.add_argument(
        "--no-verify",
        dest="verify",
        action="store_false",
        help="Skip the position bijection check after every move."
    )
    p.set_defaults(verify=config.VERIFY_INVARIANTS)

    return p


def _install_signal_handlers(shutdown_callable):
    """
    Install safe signal handlers for SIGINT & SIGTERM.
    """
    def _handler(signum, frame):
        logger.info("Received signal %s, initiating shutdown...", signum)
        try:
            shutdown_callable()
        except Exception as e:
            logger.exception("Error during shutdown handler: %s", e)
        raise SystemExit(0)

    for sig_name in ("SIGINT", "SIGTERM"):
        if hasattr(signal, sig_name):
            signal.signal(getattr(signal, sig_name), _handler)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Main entry point. Returns integer exit code.
    """
    args = create_arg_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format=config.LOG_FORMAT,
    )
    if args.debug:
        logger.debug("Debug mode enabled (verbose logging).")

    config.VERIFY_INVARIANTS = bool(args.verify)
    if not args.verify:
        logger.warning("Invariant verification disabled.")

    server: Optional[APIServer] = None
    try:
        server = APIServer(host=args.host, port=args.port, log_file=args.log_file)
    except Exception as e:
        logger.exception("Failed to initialize API: %s", e)
        return 3

    def _shutdown_safely():
        nonlocal server
        if server:
            try:
                server.shutdown()
            except Exception as e:
                logger.exception("Exception during APIServer.shutdown(): %s", e)
            finally:
                server = None

    atexit.register(_shutdown_safely)
    _install_signal_handlers(_shutdown_safely)

    try:
        if not server.start():
            return 2
        while server is not None and server.is_running():
            server.join(0.5)
    except SystemExit:
        logger.info("Shutdown requested (SystemExit).")
    except Exception as e:
        logger.exception("Unhandled exception while serving: %s", e)
        return 1
    finally:
        _shutdown_safely()

    return 0


if __name__ == "__main__":
    sys.exit(main())
