"""Newline framing — splits a byte stream into delimiter-terminated packets."""

DELIMITER = b"\n"


def _scan(buf, start: int) -> tuple[list[bytes], int]:
    """Collect packets in buf, searching for delimiters from start onward.

    Returns the packets and the offset just past the last delimiter.
    """
    packets = []
    consumed = 0
    pos = buf.find(DELIMITER, start)
    while pos != -1:
        packets.append(bytes(buf[consumed:pos + 1]))
        consumed = pos + 1
        pos = buf.find(DELIMITER, consumed)
    return packets, consumed


def feed(residual: bytes, data: bytes) -> tuple[list[bytes], bytes]:
    """Split residual + data into complete packets and a new residual.

    Each packet keeps its trailing delimiter. Bytes after the last
    delimiter are returned as the new residual. Content is never altered.
    """
    buf = bytes(residual) + bytes(data)
    packets, consumed = _scan(buf, 0)
    return packets, buf[consumed:]


class PacketBuffer:
    """Per-connection accumulator for bytes not yet resolved into a packet."""

    def __init__(self):
        self._buf = bytearray()

    def __len__(self) -> int:
        return len(self._buf)

    @property
    def residual(self) -> bytes:
        return bytes(self._buf)

    def push(self, data: bytes) -> list[bytes]:
        """Append a received chunk and return every packet it completes."""
        # Everything held before this call follows the last delimiter seen.
        scan_from = len(self._buf)
        self._buf += data
        packets, consumed = _scan(self._buf, scan_from)
        if consumed:
            del self._buf[:consumed]
        return packets

    def clear(self):
        self._buf.clear()
