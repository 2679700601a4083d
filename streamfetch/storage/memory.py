"""Storage layer interface and a thread-safe in-memory implementation.

If the content length is known, the buffer starts at that size, but it grows
beyond it whenever a write needs more room.
"""

from __future__ import annotations

import io
import threading
from abc import ABC, abstractmethod
from typing import Any


class StorageProvider(ABC):
    """Creates a reader and a writer over one storage area.

    The reader and the writer track their positions independently.
    """

    @abstractmethod
    def into_reader_writer(self, content_length: int | None) -> tuple[Any, Any]:
        """Return a ``(reader, writer)`` pair sized for ``content_length``."""


def _resolve_seek(offset: int, whence: int, current: int, end: int | None) -> int:
    if whence == io.SEEK_SET:
        position = offset
    elif whence == io.SEEK_CUR:
        position = current + offset
    elif whence == io.SEEK_END:
        if end is None:
            raise io.UnsupportedOperation("seek from end not supported")
        position = end + offset
    else:
        raise ValueError(f"invalid whence value: {whence}")
    if position < 0:
        raise ValueError(f"negative seek position {position}")
    return position


class _SharedBuffer:
    __slots__ = ("data", "written", "lock")

    def __init__(self, size: int) -> None:
        self.data = bytearray(size)
        self.written = 0
        self.lock = threading.Lock()


class MemoryStorageProvider(StorageProvider):
    """Creates a pair of :class:`MemoryStorage` handles sharing one buffer."""

    def into_reader_writer(
        self, content_length: int | None
    ) -> tuple[MemoryStorage, MemoryStorage]:
        initial_size = 0 if content_length is None else content_length
        if initial_size < 0:
            raise ValueError(f"invalid buffer size {initial_size}")
        shared = _SharedBuffer(initial_size)
        return MemoryStorage(shared), MemoryStorage(shared)

    def __repr__(self) -> str:
        return "MemoryStorageProvider()"


class MemoryStorage:
    """A handle onto a shared in-memory buffer with its own position."""

    def __init__(self, shared: _SharedBuffer) -> None:
        self._shared = shared
        self._position = 0

    def read(self, size: int = -1) -> bytes:
        """Read up to ``size`` bytes (all available bytes if negative)."""
        shared = self._shared
        with shared.lock:
            available = min(max(len(shared.data) - self._position, 0), shared.written)
            count = available if size < 0 else min(available, size)
            chunk = bytes(shared.data[self._position : self._position + count])
        self._position += count
        return chunk

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        """Move the position; ``SEEK_END`` is relative to the buffer length."""
        with self._shared.lock:
            length = len(self._shared.data)
        self._position = _resolve_seek(offset, whence, self._position, length)
        return self._position

    def tell(self) -> int:
        """Return the current position."""
        return self._position

    def write(self, data: bytes) -> int:
        """Write all of ``data`` at the current position, growing the buffer."""
        shared = self._shared
        count = len(data)
        end = self._position + count
        with shared.lock:
            if end > len(shared.data):
                shared.data.extend(bytes(end - len(shared.data)))
            shared.data[self._position : end] = data
            shared.written += count
        self._position = end
        return count

    def flush(self) -> int:
        """Writes land in the shared buffer at once; return the bytes written so far."""
        with self._shared.lock:
            return self._shared.written

    def __repr__(self) -> str:
        return f"MemoryStorage(position={self._position})"