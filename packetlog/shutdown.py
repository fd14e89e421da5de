"""Signal-driven shutdown: SIGINT/SIGTERM set a flag, cleanup runs on the main thread."""

import logging
import signal
import threading

from packetlog.logging_setup import close_logging
from packetlog.server import PacketLogServer
from packetlog.store import LogStore

logger = logging.getLogger(__name__)

SHUTDOWN_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class ShutdownController:
    """Bridges termination signals to a threading.Event read by the server loops."""

    def __init__(self, shutdown_event: threading.Event | None = None):
        if shutdown_event is None:
            shutdown_event = threading.Event()
        self.shutdown_event = shutdown_event
        self.signal_received = None

    def install(self):
        """Register the handler. Must be called from the main thread."""
        for signum in SHUTDOWN_SIGNALS:
            signal.signal(signum, self._handle_signal)

    def _handle_signal(self, signum, frame):
        # No logging or I/O here: this can interrupt any blocking call.
        self.signal_received = signum
        if not self.shutdown_event.is_set():
            self.shutdown_event.set()

    def finalize(self, server: PacketLogServer, store: LogStore):
        """Release resources in order: listener, then data file, then logging."""
        # Event.set() takes a lock a repeated signal would also need.
        if not self.shutdown_event.is_set():
            self.shutdown_event.set()
        server.stop()
        if self.signal_received is not None:
            logger.info("Caught signal, exiting")
        if not store.reset():
            logger.error("Data file %s was not removed", store.path)
        close_logging()
