"""TCP accept loop — serves clients one at a time or one thread per client."""

import logging
import socket
import threading

from packetlog.config import Config
from packetlog.handler import handle_client
from packetlog.store import LogStore

logger = logging.getLogger(__name__)


class PacketLogServer:
    """TCP server that appends newline-terminated packets to a shared log."""

    def __init__(self, config: Config, store: LogStore,
                 shutdown_event: threading.Event):
        self._config = config
        self._store = store
        self._shutdown_event = shutdown_event
        self._sock = None
        self._server_address = None
        self._handlers: list[threading.Thread] = []
        self._handlers_lock = threading.Lock()

    @property
    def server_address(self) -> tuple:
        """Return (host, port) the server is bound to. Useful when port=0."""
        return self._server_address

    def start(self):
        """Bind, listen, and accept connections until shutdown.

        Raises OSError if the listening socket cannot be set up.
        """
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.settimeout(self._config.poll_interval)
            sock.bind((self._config.host, self._config.port))
            sock.listen(self._config.backlog)
        except OSError:
            sock.close()
            raise
        self._sock = sock

        self._server_address = sock.getsockname()
        logger.info("Server listening on %s:%d (%s)", *self._server_address,
                    "concurrent" if self._config.concurrent else "sequential")

        try:
            self._serve(sock)
        finally:
            self._join_handlers()

    def _serve(self, sock: socket.socket):
        while not self._shutdown_event.is_set():
            try:
                conn, addr = sock.accept()
            except socket.timeout:
                continue
            except InterruptedError:
                continue
            except OSError as exc:
                if self._shutdown_event.is_set() or sock.fileno() == -1:
                    break
                logger.error("accept() failed: %s", exc)
                continue

            if self._config.concurrent:
                self._dispatch(conn, addr)
            else:
                handle_client(conn, addr, self._config, self._store,
                              self._shutdown_event)

    def _dispatch(self, conn: socket.socket, addr: tuple):
        t = threading.Thread(
            target=handle_client,
            args=(conn, addr, self._config, self._store, self._shutdown_event),
            daemon=True,
        )
        with self._handlers_lock:
            self._handlers = [h for h in self._handlers if h.is_alive()]
            self._handlers.append(t)
        t.start()

    def _join_handlers(self):
        with self._handlers_lock:
            handlers, self._handlers = self._handlers, []
        for t in handlers:
            t.join()

    def stop(self) -> bool:
        """Signal shutdown, close the listen socket and wait for handlers.

        Returns False if closing the socket failed.
        """
        if not self._shutdown_event.is_set():
            self._shutdown_event.set()
        ok = True
        if self._sock is not None:
            try:
                self._sock.close()
            except OSError as exc:
                logger.error("close(listen socket) failed: %s", exc)
                ok = False
            self._sock = None
        self._join_handlers()
        return ok
