"""Storage that only bounds its size when the content length is unknown.

A stream without a known length is assumed to be infinite, so it gets a
bounded circular buffer; a finite stream uses the inner storage directly.
"""

from __future__ import annotations

from typing import Any

from .bounded import BoundedStorageProvider
from .memory import StorageProvider


class AdaptiveStorageProvider(StorageProvider):
    """Chooses bounded or unbounded storage from the content length."""

    def __init__(self, inner: StorageProvider, size: int) -> None:
        if size <= 0:
            raise ValueError("size must be greater than zero")
        self.inner = inner
        self.size = size

    def into_reader_writer(self, content_length: int | None) -> tuple[Any, Any]:
        if content_length is not None:
            return self.inner.into_reader_writer(content_length)
        return BoundedStorageProvider(self.inner, self.size).into_reader_writer(None)

    def __repr__(self) -> str:
        return f"AdaptiveStorageProvider({self.inner!r}, size={self.size})"