"""Standalone smoke-test client — sends packets and prints the log the server echoes back."""

import socket
import sys

SAMPLE_PACKETS = [b"hello\n", b"world\n", b"split ", b"packet\n"]


def read_reply(sock: socket.socket, minimum: int, suffix: bytes) -> bytes:
    """Read until at least minimum bytes ending in suffix arrived, or EOF."""
    reply = b""
    while len(reply) < minimum or not reply.endswith(suffix):
        chunk = sock.recv(4096)
        if not chunk:
            break
        reply += chunk
    return reply


def main():
    host = sys.argv[1] if len(sys.argv) > 1 else "localhost"
    port = int(sys.argv[2]) if len(sys.argv) > 2 else 9000

    print(f"Connecting to {host}:{port}...")
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.settimeout(5.0)
    sock.connect((host, port))
    print("Connected!\n")

    # Replies carry no length prefix. Earlier clients may have filled the log,
    # so only a lower bound on the reply size is known.
    submitted = 0
    pending = b""
    try:
        for packet in SAMPLE_PACKETS:
            sock.sendall(packet)
            print(f"  Sent: {packet!r}")
            pending += packet
            if not packet.endswith(b"\n"):
                continue
            submitted += len(pending)
            reply = read_reply(sock, submitted, pending)
            pending = b""
            print(f"  Recv: {reply!r}")
            print()
    finally:
        sock.close()
        print("Connection closed.")


if __name__ == "__main__":
    main()
