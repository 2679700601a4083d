"""Stream settings, progress reporting types and a cancellation token."""

from __future__ import annotations

import asyncio
import dataclasses
import enum
import threading
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Callable, Optional


def _wake(loop: asyncio.AbstractEventLoop, future: asyncio.Future) -> None:
    def resolve() -> None:
        if not future.done():
            future.set_result(None)

    try:
        loop.call_soon_threadsafe(resolve)
    except RuntimeError:
        # The loop has been closed; nobody is left waiting.
        pass


class CancellationToken:
    """A thread-safe flag that can be awaited until it is set."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._cancelled = False
        self._waiters: list[tuple[asyncio.AbstractEventLoop, asyncio.Future]] = []

    def cancel(self) -> None:
        """Cancel the token and wake everything waiting on it."""
        with self._lock:
            if self._cancelled:
                return
            self._cancelled = True
            waiters, self._waiters = self._waiters, []
        for loop, future in waiters:
            _wake(loop, future)

    def is_cancelled(self) -> bool:
        """Return whether :meth:`cancel` has been called."""
        return self._cancelled

    async def cancelled(self) -> None:
        """Wait until the token is cancelled; returns at once if it already is."""
        loop = asyncio.get_running_loop()
        with self._lock:
            if self._cancelled:
                return
            future = loop.create_future()
            entry = (loop, future)
            self._waiters.append(entry)
        try:
            await future
        finally:
            with self._lock:
                if entry in self._waiters:
                    self._waiters.remove(entry)

    def __repr__(self) -> str:
        return f"CancellationToken(cancelled={self._cancelled})"


class PhaseKind(enum.Enum):
    """The kind of phase a download is in."""

    PREFETCHING = "prefetching"
    DOWNLOADING = "downloading"
    COMPLETE = "complete"


@dataclass(frozen=True)
class StreamPhase:
    """Current phase of the download, as seen by a progress callback."""

    kind: PhaseKind
    target: Optional[int] = None
    chunk_size: Optional[int] = None

    @staticmethod
    def prefetching(target: int, chunk_size: int) -> StreamPhase:
        """Prefetching towards ``target`` bytes; ``chunk_size`` is the last chunk's size."""
        return StreamPhase(PhaseKind.PREFETCHING, target=target, chunk_size=chunk_size)

    @staticmethod
    def downloading(chunk_size: int) -> StreamPhase:
        """Downloading; ``chunk_size`` is the size of the last chunk."""
        return StreamPhase(PhaseKind.DOWNLOADING, chunk_size=chunk_size)

    @staticmethod
    def complete() -> StreamPhase:
        """The stream has finished downloading."""
        return StreamPhase(PhaseKind.COMPLETE)


@dataclass(frozen=True)
class StreamState:
    """State of the stream passed to a progress callback.

    ``elapsed`` is the time since the download started, in seconds, and
    ``current_chunk`` the downloaded range holding the current position.
    """

    current_position: int
    elapsed: float
    phase: StreamPhase
    current_chunk: range


ProgressCallback = Callable[[Any, StreamState, CancellationToken], None]
ReconnectCallback = Callable[[Any, CancellationToken], None]


def _seconds(value: float | timedelta) -> float:
    if isinstance(value, timedelta):
        return value.total_seconds()
    return float(value)


@dataclass(frozen=True)
class Settings:
    """Settings that configure how a stream is downloaded.

    ``prefetch_bytes``: bytes to download before reads are allowed, which keeps
    a buffer between the read and download positions.
    ``seek_buffer_size``: how many seek requests may be queued at once.
    ``retry_timeout``: seconds without new data after which a reconnect is tried.
    ``cancel_on_drop``: whether the download stops when the reader is dropped.
    """

    prefetch_bytes: int = 256 * 1024
    seek_buffer_size: int = 128
    retry_timeout: float = 5.0
    cancel_on_drop: bool = True
    on_progress: Optional[ProgressCallback] = field(default=None, repr=False, compare=False)
    on_reconnect: Optional[ReconnectCallback] = field(default=None, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.prefetch_bytes < 0:
            raise ValueError(f"prefetch bytes must not be negative: {self.prefetch_bytes}")
        if self.seek_buffer_size <= 0:
            raise ValueError(
                f"seek buffer size must be greater than zero: {self.seek_buffer_size}"
            )
        object.__setattr__(self, "retry_timeout", _seconds(self.retry_timeout))
        if self.retry_timeout < 0:
            raise ValueError(f"retry timeout must not be negative: {self.retry_timeout}")

    def with_prefetch_bytes(self, prefetch_bytes: int) -> Settings:
        """Return a copy with a different prefetch size."""
        return dataclasses.replace(self, prefetch_bytes=prefetch_bytes)

    def with_seek_buffer_size(self, seek_buffer_size: int) -> Settings:
        """Return a copy with a different seek request buffer size."""
        return dataclasses.replace(self, seek_buffer_size=seek_buffer_size)

    def with_retry_timeout(self, retry_timeout: float | timedelta) -> Settings:
        """Return a copy with a different retry timeout (seconds or a timedelta)."""
        return dataclasses.replace(self, retry_timeout=_seconds(retry_timeout))

    def with_cancel_on_drop(self, cancel_on_drop: bool) -> Settings:
        """Return a copy that does or does not cancel the download on drop."""
        return dataclasses.replace(self, cancel_on_drop=cancel_on_drop)

    def with_on_progress(self, callback: ProgressCallback) -> Settings:
        """Return a copy that calls ``callback(stream, state, token)`` for each chunk."""
        return dataclasses.replace(self, on_progress=callback)

    def with_on_reconnect(self, callback: ReconnectCallback) -> Settings:
        """Return a copy that calls ``callback(stream, token)`` after a reconnect."""
        return dataclasses.replace(self, on_reconnect=callback)