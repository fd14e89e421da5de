"""Logging facility — stderr records tagged with the process name, optional syslog."""

import logging
import logging.handlers
import sys

from packetlog.config import Config

PROCESS_TAG = "aesdsocket"
STDERR_FORMAT = f"%(asctime)s [{PROCESS_TAG}] %(levelname)s %(message)s"
SYSLOG_FORMAT = f"{PROCESS_TAG}[%(process)d]: %(levelname)s %(message)s"
SYSLOG_ADDRESS = "/dev/log"


def configure_logging(config: Config):
    """Install root handlers once, before the server starts."""
    logging.basicConfig(
        level=config.log_level,
        format=STDERR_FORMAT,
        stream=sys.stderr,
    )

    if config.log_to_syslog:
        try:
            handler = logging.handlers.SysLogHandler(
                address=SYSLOG_ADDRESS,
                facility=logging.handlers.SysLogHandler.LOG_USER,
            )
        except OSError as exc:
            logging.getLogger(__name__).warning(
                "syslog unavailable at %s: %s", SYSLOG_ADDRESS, exc
            )
            return
        handler.setFormatter(logging.Formatter(SYSLOG_FORMAT))
        logging.getLogger().addHandler(handler)


def close_logging():
    """Flush and close every handler."""
    logging.shutdown()
