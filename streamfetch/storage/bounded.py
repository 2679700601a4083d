"""Storage wrappers that restrict the underlying storage to a fixed size.

The underlying storage is used as a circular buffer: once it reaches
capacity, old data is overwritten. If the reader falls too far behind, the
writer accepts fewer bytes (or none) until the reader catches up. Seeking
back further than the buffer size makes reads fail, since that data has
already been overwritten.
"""

from __future__ import annotations

import io
import logging
import threading
from dataclasses import dataclass, field
from typing import Any

from .memory import StorageProvider, _resolve_seek

_log = logging.getLogger(__name__)


@dataclass
class _SharedInfo:
    size: int
    read: int = 0
    written: int = 0
    read_position: int = 0
    write_position: int = 0
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def mapped_read_position(self, offset: int) -> int:
        return (offset + self.read_position % self.size) % self.size

    def mapped_write_position(self, offset: int) -> int:
        return (offset + self.write_position % self.size) % self.size


def _read_exact(inner: Any, count: int, context: str) -> bytes:
    parts = []
    remaining = count
    while remaining > 0:
        chunk = inner.read(remaining)
        if not chunk:
            raise OSError(f"{context}: unexpected end of storage")
        parts.append(chunk)
        remaining -= len(chunk)
    return b"".join(parts)


def _write_all(inner: Any, data: bytes, context: str) -> None:
    view = memoryview(data)
    while view:
        count = inner.write(bytes(view))
        if count == 0:
            raise OSError(f"{context}: failed to write whole buffer")
        view = view[count:]


class BoundedStorageProvider(StorageProvider):
    """Wraps another provider so that its storage never exceeds ``buffer_size``.

    When the content length is known and smaller than ``buffer_size``, the
    content length is used instead.
    """

    def __init__(self, inner: StorageProvider, buffer_size: int) -> None:
        if buffer_size <= 0:
            raise ValueError("buffer size must be greater than zero")
        self.inner = inner
        self.buffer_size = buffer_size

    def into_reader_writer(
        self, content_length: int | None
    ) -> tuple[BoundedStorageReader, BoundedStorageWriter]:
        size = (
            self.buffer_size
            if content_length is None
            else min(content_length, self.buffer_size)
        )
        reader, writer = self.inner.into_reader_writer(size)
        shared = _SharedInfo(size=size)
        return BoundedStorageReader(reader, shared), BoundedStorageWriter(writer, shared)

    def __repr__(self) -> str:
        return f"BoundedStorageProvider({self.inner!r}, buffer_size={self.buffer_size})"


class BoundedStorageReader:
    """Reads from a fixed-size circular buffer."""

    def __init__(self, inner: Any, shared: _SharedInfo) -> None:
        self._inner = inner
        self._shared = shared

    def read(self, size: int = -1) -> bytes:
        """Read up to ``size`` bytes; a negative size means up to the buffer size."""
        if size == 0:
            return b""
        info = self._shared
        with info.lock:
            if size < 0:
                size = info.size
            if size > info.size:
                raise ValueError(
                    f"read size {size} is greater than buffer size {info.size}"
                )
            if max(info.write_position - info.read_position, 0) > info.size:
                raise ValueError(
                    f"read position {info.read_position} is too far behind write "
                    f"position {info.write_position}, size {info.size}"
                )
            if info.read >= info.written:
                _log.debug("read bytes >= written bytes, ending read")
                return b""
            available = info.write_position - info.read_position
            if available <= 0:
                return b""

            count = min(size, available)
            limit = min(info.size, info.write_position)
            start = info.mapped_read_position(0)
            end = info.mapped_read_position(count - 1) + 1

            if start < end:
                self._inner.seek(start)
                data = _read_exact(self._inner, end - start, "error reading mapped positions")
            else:
                # The requested span wraps around the end of the buffer.
                self._inner.seek(start)
                first = _read_exact(
                    self._inner, limit - start, "error reading first mapped segment"
                )
                self._inner.seek(0)
                second = _read_exact(
                    self._inner, end, "error reading second mapped segment"
                )
                data = first + second

            info.read_position += len(data)
            info.read += len(data)
            return data

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        """Move the read position; seeking from the end is unsupported."""
        info = self._shared
        with info.lock:
            info.read_position = _resolve_seek(offset, whence, info.read_position, None)
            return info.read_position

    def tell(self) -> int:
        """Return the logical read position."""
        with self._shared.lock:
            return self._shared.read_position

    def __repr__(self) -> str:
        return f"BoundedStorageReader({self._shared!r})"


class BoundedStorageWriter:
    """Writes to a fixed-size circular buffer."""

    def __init__(self, inner: Any, shared: _SharedInfo) -> None:
        self._inner = inner
        self._shared = shared

    def write(self, data: bytes) -> int:
        """Write as much of ``data`` as fits without overtaking the reader."""
        info = self._shared
        with info.lock:
            taken = max(info.write_position - info.read_position, 0)
            count = min(max(info.size - taken, 0), len(data))
            if count == 0:
                return 0
            chunk = bytes(data[:count])

            start = info.mapped_write_position(0)
            end = info.mapped_write_position(count - 1) + 1
            self._inner.seek(start)
            if start < end:
                _write_all(self._inner, chunk, "error writing mapped segment")
            else:
                first_len = info.size - start
                _write_all(self._inner, chunk[:first_len], "error writing first mapped segment")
                self._inner.seek(0)
                _write_all(self._inner, chunk[first_len:], "error writing second mapped segment")

            info.write_position += count
            info.written += count
            self._inner.flush()
            return count

    def flush(self) -> None:
        """Flush the underlying storage."""
        with self._shared.lock:
            self._inner.flush()

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        """Move the write position; seeking from the end is unsupported."""
        info = self._shared
        with info.lock:
            info.write_position = _resolve_seek(offset, whence, info.write_position, None)
            return info.write_position

    def tell(self) -> int:
        """Return the logical write position."""
        with self._shared.lock:
            return self._shared.write_position

    def __repr__(self) -> str:
        return f"BoundedStorageWriter({self._shared!r})"