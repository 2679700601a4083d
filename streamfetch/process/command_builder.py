"""Pipelines of commands, each one's stdout feeding the next one's stdin."""

from __future__ import annotations

from typing import IO, Any

from .command import Command, SpawnedCommand, _as_command, _discard, _start


class CommandBuilder:
    """Pipes several commands together, like ``cmd1 | cmd2`` in a shell."""

    def __init__(self, command: Any) -> None:
        self._commands: list[Command] = [_as_command(command)]

    @property
    def commands(self) -> tuple[Command, ...]:
        """The commands of the pipeline in order."""
        return tuple(self._commands)

    def pipe(self, command: Any) -> CommandBuilder:
        """Append a command that reads the previous command's stdout."""
        self._commands.append(_as_command(command))
        return self

    def spawn(self) -> SpawnedCommand:
        """Start every command of the pipeline; the last one's stdout is the output."""
        *head, last = self._commands
        stderr_files: list[IO[bytes]] = []
        upstream = []
        previous_stdout = None
        try:
            for command in head:
                process = _start(command, previous_stdout, stderr_files)
                upstream.append(process)
                previous_stdout = process.stdout
            process = _start(last, previous_stdout, stderr_files)
        except BaseException:
            _discard(stderr_files, upstream)
            raise
        return SpawnedCommand(process, stderr_files, upstream)

    def __repr__(self) -> str:
        return f"CommandBuilder({self._commands!r})"