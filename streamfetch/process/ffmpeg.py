"""An ``ffmpeg`` command that converts audio from stdin to stdout."""

from __future__ import annotations

import os

from .command import Command, StrOrPath


class FfmpegConvertAudioCommand:
    """Builds an ``ffmpeg`` command that reads stdin, converts the audio to
    ``format`` and writes the result to stdout."""

    def __init__(self, format: str) -> None:
        # -i pipe: reads stdin, -qscale:a 0 is the highest VBR quality,
        # -map a selects every audio stream and "-" writes to stdout.
        self._command = Command("ffmpeg").args(
            [
                "-i",
                "pipe:",
                "-qscale:a",
                "0",
                "-map",
                "a",
                "-f",
                format,
                "-loglevel",
                "error",
                "-",
            ]
        )

    def ffmpeg_path(self, path: StrOrPath) -> FfmpegConvertAudioCommand:
        """Set the path to the ``ffmpeg`` binary."""
        self._command.program = os.fspath(path)
        return self

    def into_command(self) -> Command:
        """Return the underlying :class:`Command`."""
        return self._command

    def __repr__(self) -> str:
        return f"FfmpegConvertAudioCommand({self._command!r})"