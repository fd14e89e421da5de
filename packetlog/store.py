"""Append-only packet log on disk, shared by every connection."""

import logging
import os
import threading

logger = logging.getLogger(__name__)

READ_CHUNK = 64 * 1024


class LogStore:
    """Durable append-only byte log with thread-safe access.

    The file is opened per operation, so a store whose backing file was
    removed is recreated by the next append.
    """

    def __init__(self, path: str, fsync: bool = True):
        self._path = path
        self._fsync = fsync
        self._lock = threading.Lock()

    @property
    def path(self) -> str:
        return self._path

    def prepare(self, truncate: bool = False):
        """Create the data file and its directory, or deal with a stale one.

        By default an existing file is kept and appended to.
        """
        parent = os.path.dirname(self._path)
        if parent:
            os.makedirs(parent, exist_ok=True)

        with self._lock:
            if not os.path.exists(self._path):
                os.close(os.open(self._path, os.O_WRONLY | os.O_CREAT, 0o644))
                return
            if truncate:
                logger.info("Truncating stale data file %s", self._path)
                with open(self._path, "wb"):
                    pass
            else:
                logger.warning(
                    "Reusing existing data file %s (%d bytes)",
                    self._path, os.path.getsize(self._path),
                )

    def append(self, data: bytes) -> bool:
        """Append data to the end of the log. Returns False on I/O failure."""
        with self._lock:
            return self._append(data)

    def read_all(self) -> bytes | None:
        """Return the whole log, or None on I/O failure."""
        with self._lock:
            return self._read_all()

    def commit(self, packet: bytes) -> bytes | None:
        """Append a packet and read the log back as one locked step.

        The returned contents always end with this packet. Returns None if
        either the append or the read fails.
        """
        with self._lock:
            if not self._append(packet):
                return None
            return self._read_all()

    def reset(self) -> bool:
        """Delete the backing file. A missing file is not an error."""
        with self._lock:
            try:
                os.remove(self._path)
            except FileNotFoundError:
                return True
            except OSError as exc:
                logger.error('remove("%s") failed: %s', self._path, exc)
                return False
            return True

    def _append(self, data: bytes) -> bool:
        try:
            fd = os.open(self._path, os.O_WRONLY | os.O_CREAT | os.O_APPEND, 0o644)
        except OSError as exc:
            logger.error('open("%s") failed: %s', self._path, exc)
            return False

        ok = True
        start = None
        try:
            start = os.fstat(fd).st_size
            view = memoryview(data)
            while view:
                try:
                    written = os.write(fd, view)
                except InterruptedError:
                    continue
                view = view[written:]
            if self._fsync:
                os.fsync(fd)
        except OSError as exc:
            logger.error('write("%s") failed: %s', self._path, exc)
            if start is not None:
                self._rollback(fd, start)
            ok = False

        try:
            os.close(fd)
        except OSError as exc:
            logger.error('close("%s") failed: %s', self._path, exc)
            ok = False
        return ok

    def _rollback(self, fd: int, size: int):
        """Cut off a partially written packet."""
        try:
            os.ftruncate(fd, size)
        except OSError as exc:
            logger.error('truncate("%s") to %d bytes failed: %s', self._path, size, exc)

    def _read_all(self) -> bytes | None:
        chunks = []
        try:
            with open(self._path, "rb") as f:
                while True:
                    chunk = f.read(READ_CHUNK)
                    if not chunk:
                        break
                    chunks.append(chunk)
        except OSError as exc:
            logger.error('read("%s") failed: %s', self._path, exc)
            return None
        return b"".join(chunks)
