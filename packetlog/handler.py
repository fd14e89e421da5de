"""Per-client connection handler — newline framing over TCP."""

import logging
import socket
import threading

from packetlog.config import Config
from packetlog.framer import PacketBuffer
from packetlog.store import LogStore

logger = logging.getLogger(__name__)


def peer_ip(addr) -> str:
    """Return the peer's IP string, or "unknown"."""
    if addr and addr[0]:
        return str(addr[0])
    return "unknown"


def send_all(conn: socket.socket, payload: bytes, client_ip: str,
             shutdown_event: threading.Event) -> bool:
    """Send the whole payload, resuming after partial sends.

    Returns False on a send error, or when shutdown is requested while the
    peer is not draining its receive window.
    """
    view = memoryview(payload)
    while view:
        try:
            sent = conn.send(view)
        except socket.timeout:
            if shutdown_event.is_set():
                logger.warning("Reply to %s cut short by shutdown", client_ip)
                return False
            continue
        except InterruptedError:
            continue
        except OSError as exc:
            logger.error("send() to %s failed: %s", client_ip, exc)
            return False
        view = view[sent:]
    return True


def handle_client(conn: socket.socket, addr: tuple, config: Config,
                  store: LogStore, shutdown_event: threading.Event):
    """Serve one client until it disconnects, fails, or shutdown is requested."""
    client_ip = peer_ip(addr)
    logger.info("Accepted connection from %s", client_ip)
    conn.settimeout(config.poll_interval)

    buffer = PacketBuffer()
    try:
        while not shutdown_event.is_set():
            try:
                data = conn.recv(config.buffer_size)
            except socket.timeout:
                continue
            except InterruptedError:
                continue
            except OSError as exc:
                logger.error("recv() from %s failed: %s", client_ip, exc)
                break

            if not data:
                break

            packets = buffer.push(data)
            if not _process_packets(conn, packets, client_ip, store,
                                    shutdown_event):
                break

        if len(buffer):
            logger.debug("Discarding %d unterminated bytes from %s",
                         len(buffer), client_ip)
    finally:
        buffer.clear()
        try:
            conn.close()
        except OSError as exc:
            logger.error("close() for %s failed: %s", client_ip, exc)
        logger.info("Closed connection from %s", client_ip)


def _process_packets(conn: socket.socket, packets: list[bytes], client_ip: str,
                     store: LogStore, shutdown_event: threading.Event) -> bool:
    """Commit each packet and reply with the full log. False abandons the connection."""
    for index, packet in enumerate(packets):
        contents = store.commit(packet)
        if contents is None:
            logger.error("Abandoning connection from %s after log store failure",
                         client_ip)
            return False

        if not send_all(conn, contents, client_ip, shutdown_event):
            if shutdown_event.is_set():
                _persist_remaining(packets[index + 1:], client_ip, store)
            return False
    return True


def _persist_remaining(packets: list[bytes], client_ip: str, store: LogStore):
    """Append already-framed packets without replying."""
    for packet in packets:
        if not store.append(packet):
            logger.error("Dropped framed packet from %s during shutdown", client_ip)
            return
