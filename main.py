"""aesdsocket — TCP server that logs newline-terminated packets and echoes the whole log."""

import dataclasses
import logging
import sys
from argparse import ArgumentParser

from packetlog.config import LOG_LEVELS, Config, load_config
from packetlog.logging_setup import configure_logging
from packetlog.server import PacketLogServer
from packetlog.shutdown import ShutdownController
from packetlog.store import LogStore

logger = logging.getLogger(__name__)


def build_parser() -> ArgumentParser:
    """Build the CLI argument parser. Flags override environment variables."""
    parser = ArgumentParser(
        prog="aesdsocket",
        description="Append newline-terminated packets to a shared log and "
                    "reply with the full log after each packet.",
    )
    parser.add_argument("--host", help="Address to bind (default: 0.0.0.0)")
    parser.add_argument("-p", "--port", type=int, help="TCP port (default: 9000)")
    parser.add_argument("--data-file", help="Path of the packet log file")
    parser.add_argument(
        "--concurrent",
        action="store_true",
        help="Serve each client in its own thread",
    )
    parser.add_argument(
        "--truncate",
        action="store_true",
        help="Empty an existing data file at startup instead of appending to it",
    )
    parser.add_argument(
        "--syslog",
        action="store_true",
        help="Also send log records to syslog",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        help="Minimum log level (default: INFO)",
    )
    return parser


def apply_overrides(config: Config, args) -> Config:
    """Return config with any CLI flags that were given applied on top."""
    changes = {}
    if args.host is not None:
        changes["host"] = args.host
    if args.port is not None:
        changes["port"] = args.port
    if args.data_file is not None:
        changes["data_file"] = args.data_file
    if args.concurrent:
        changes["concurrent"] = True
    if args.truncate:
        changes["truncate_on_start"] = True
    if args.syslog:
        changes["log_to_syslog"] = True
    if args.log_level is not None:
        changes["log_level"] = args.log_level
    return dataclasses.replace(config, **changes)


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    try:
        config = apply_overrides(load_config(), args)
        config.validate()
    except ValueError as exc:
        print(f"aesdsocket: invalid configuration: {exc}", file=sys.stderr)
        return 2

    configure_logging(config)
    controller = ShutdownController()
    controller.install()

    store = LogStore(config.data_file, fsync=config.fsync)
    server = PacketLogServer(config, store, controller.shutdown_event)

    status = 0
    try:
        store.prepare(truncate=config.truncate_on_start)
        server.start()
    except OSError as exc:
        logger.error("Startup failed: %s", exc)
        status = 1
    finally:
        controller.finalize(server, store)
    return status


if __name__ == "__main__":
    sys.exit(main())
