"""Commands that run external programs whose stdout is read as a byte stream.

Unless a stderr handle is given explicitly, a child's stderr goes to a
temporary file instead of a pipe: reading stdout and stderr at the same time
while large amounts of data flow through the pipes can deadlock. The captured
output can be inspected once the process has finished.
"""

from __future__ import annotations

import logging
import os
import subprocess
import sys
import tempfile
from collections.abc import Iterable
from typing import IO, Any, Union

_log = logging.getLogger(__name__)

_CREATION_FLAGS = subprocess.CREATE_NO_WINDOW if sys.platform == "win32" else 0

StrOrPath = Union[str, bytes, "os.PathLike[str]", "os.PathLike[bytes]"]


class Command:
    """A program with its arguments and an optional stderr handle."""

    def __init__(self, program: StrOrPath) -> None:
        self.program = os.fspath(program)
        self._args: list[str | bytes] = []
        self._stderr: Any = None

    @property
    def arguments(self) -> tuple[str | bytes, ...]:
        """The arguments passed to the program."""
        return tuple(self._args)

    @property
    def stderr(self) -> Any:
        """The stderr handle, or ``None`` to capture stderr in a temporary file."""
        return self._stderr

    def args(self, args: Iterable[StrOrPath]) -> Command:
        """Append several arguments."""
        for arg in args:
            self.arg(arg)
        return self

    def arg(self, arg: StrOrPath) -> Command:
        """Append a single argument."""
        self._args.append(os.fspath(arg))
        return self

    def stderr_handle(self, stderr_handle: Any) -> Command:
        """Send stderr to ``stderr_handle`` (a file object, descriptor or
        ``subprocess.DEVNULL``) instead of a temporary file."""
        self._stderr = stderr_handle
        return self

    def spawn(self) -> SpawnedCommand:
        """Start the program with its stdout piped."""
        stderr_files: list[IO[bytes]] = []
        try:
            process = _start(self, None, stderr_files)
        except BaseException:
            _discard(stderr_files, [])
            raise
        return SpawnedCommand(process, stderr_files)

    def __repr__(self) -> str:
        return f"Command({self.program!r}, args={self.arguments!r})"


def _as_command(value: Any) -> Command:
    if isinstance(value, Command):
        return value
    into_command = getattr(value, "into_command", None)
    if callable(into_command):
        return into_command()
    raise TypeError(f"cannot build a command from {type(value).__name__}")


def _stderr_tmp_file() -> IO[bytes]:
    try:
        return tempfile.TemporaryFile()
    except OSError as exc:
        raise OSError(f"error creating temp file: {exc}") from exc


def _start(
    command: Command, stdin: IO[bytes] | None, stderr_files: list[IO[bytes]]
) -> subprocess.Popen[bytes]:
    """Start one process; ``stdin`` is handed to the child and closed here."""
    try:
        stderr = command.stderr
        if stderr is None:
            stderr = _stderr_tmp_file()
            stderr_files.append(stderr)
        try:
            return subprocess.Popen(
                [command.program, *command.arguments],
                stdin=stdin,
                stdout=subprocess.PIPE,
                stderr=stderr,
                creationflags=_CREATION_FLAGS,
            )
        except OSError as exc:
            raise OSError(f"error spawning process: {exc}") from exc
    finally:
        if stdin is not None:
            stdin.close()


def _stop(process: subprocess.Popen[bytes]) -> None:
    if process.poll() is None:
        process.kill()
    if process.stdout is not None:
        process.stdout.close()
    process.wait()


def _discard(
    stderr_files: Iterable[IO[bytes]], processes: Iterable[subprocess.Popen[bytes]]
) -> None:
    for process in processes:
        _stop(process)
    for file in stderr_files:
        try:
            file.close()
        except OSError as exc:
            _log.warning("error closing file: %r", exc)


class SpawnedCommand:
    """A running command whose stdout can be read as a byte stream.

    Closing it kills the process if it is still running.
    """

    def __init__(
        self,
        process: subprocess.Popen[bytes],
        stderr_files: Iterable[IO[bytes]] = (),
        upstream: Iterable[subprocess.Popen[bytes]] = (),
    ) -> None:
        self.process = process
        self._stderr_files = list(stderr_files)
        self._upstream = list(upstream)

    @property
    def stdout(self) -> IO[bytes]:
        """The process' stdout pipe."""
        assert self.process.stdout is not None
        return self.process.stdout

    def wait(self) -> int:
        """Wait for the process to exit and return its exit code."""
        return self.process.wait()

    def kill(self) -> None:
        """Kill the process if it is running and wait for it to exit."""
        if self.process.poll() is None:
            self.process.kill()
        self.process.wait()

    def stderr_output(self) -> list[str]:
        """Return what each captured stderr stream holds, in spawn order."""
        outputs = []
        for file in self._stderr_files:
            file.flush()
            file.seek(0)
            outputs.append(file.read().decode("utf-8", errors="replace"))
        return outputs

    def close(self) -> None:
        """Kill the process if still running and release its resources."""
        _stop(self.process)
        files, self._stderr_files = self._stderr_files, []
        upstream, self._upstream = self._upstream, []
        _discard(files, upstream)

    def __enter__(self) -> SpawnedCommand:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"SpawnedCommand(pid={self.process.pid}, returncode={self.process.returncode})"


class ProcessStreamParams:
    """Parameters for reading a stream from a spawned command.

    The command is spawned as soon as the parameters are created.
    """

    def __init__(self, command: Any) -> None:
        self.command: SpawnedCommand = command.spawn()
        self.content_length: int | None = None

    def with_content_length(self, content_length: int | None) -> ProcessStreamParams:
        """Set the content length of the stream, or ``None`` if it is unknown."""
        if content_length is not None and content_length < 0:
            raise ValueError(f"invalid content length {content_length}")
        self.content_length = content_length
        return self

    def __repr__(self) -> str:
        return (
            f"ProcessStreamParams(command={self.command!r}, "
            f"content_length={self.content_length!r})"
        )