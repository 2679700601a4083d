"""Storage backed by a temporary file.

If the content length is known it is only a hint; the file grows as needed.
The reader and writer use separate handles, so their positions are
independent.
"""

from __future__ import annotations

import contextlib
import io
import os
import tempfile
from dataclasses import dataclass, field
from typing import IO, Any, Callable

from .memory import StorageProvider

TempfileBuilder = Callable[[], Any]


@dataclass(frozen=True)
class TempStorageProvider(StorageProvider):
    """Creates a :class:`TempStorageReader` and a writable file over one temp file."""

    storage_dir: str | os.PathLike[str] | None = None
    prefix: str | None = None
    tempfile_fn: TempfileBuilder | None = field(default=None, repr=False, compare=False)

    @classmethod
    def new_in(cls, path: str | os.PathLike[str]) -> TempStorageProvider:
        """Create temporary files in ``path``."""
        return cls(storage_dir=path)

    @classmethod
    def with_prefix(cls, prefix: str) -> TempStorageProvider:
        """Create temporary files whose names start with ``prefix``."""
        return cls(prefix=prefix)

    @classmethod
    def with_prefix_in(
        cls, prefix: str, path: str | os.PathLike[str]
    ) -> TempStorageProvider:
        """Create temporary files named with ``prefix`` inside ``path``."""
        return cls(storage_dir=path, prefix=prefix)

    @classmethod
    def with_tempfile_builder(cls, builder: TempfileBuilder) -> TempStorageProvider:
        """Use ``builder`` to create the named temporary file.

        The builder must return an open, readable file object with a ``name``.
        """
        return cls(tempfile_fn=builder)

    def into_reader_writer(
        self, content_length: int | None
    ) -> tuple[TempStorageReader, IO[bytes]]:
        if self.tempfile_fn is not None:
            try:
                handle = self.tempfile_fn()
            except OSError as exc:
                raise OSError(f"error creating temp file: {exc}") from exc
            remove_on_close = False
        else:
            try:
                handle = tempfile.NamedTemporaryFile(
                    mode="w+b",
                    prefix=self.prefix,
                    dir=self.storage_dir,
                    delete=False,
                )
            except OSError as exc:
                raise OSError(f"error creating temp file: {exc}") from exc
            remove_on_close = True

        path = handle.name
        try:
            writer = open(path, "r+b")
        except OSError as exc:
            handle.close()
            if remove_on_close:
                with contextlib.suppress(OSError):
                    os.unlink(path)
            raise OSError(f"error reopening temp file: {exc}") from exc
        return TempStorageReader(handle, path, remove_on_close), writer


class TempStorageReader:
    """Reads from the temporary file created by a :class:`TempStorageProvider`."""

    def __init__(self, file: Any, path: str, remove_on_close: bool) -> None:
        self._file = file
        self._path = path
        self._remove_on_close = remove_on_close

    @property
    def name(self) -> str:
        """Path of the underlying temporary file."""
        return self._path

    def read(self, size: int = -1) -> bytes:
        """Read up to ``size`` bytes from the current position."""
        return self._file.read(size)

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        """Move the read position."""
        return self._file.seek(offset, whence)

    def tell(self) -> int:
        """Return the read position."""
        return self._file.tell()

    def close(self) -> None:
        """Close the file and remove it from disk."""
        self._file.close()
        if self._remove_on_close:
            with contextlib.suppress(FileNotFoundError):
                os.unlink(self._path)

    def __enter__(self) -> TempStorageReader:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"TempStorageReader(name={self._path!r})"