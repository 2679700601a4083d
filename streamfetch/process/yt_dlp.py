"""A ``yt-dlp`` command that writes the downloaded media to stdout."""

from __future__ import annotations

import dataclasses
import os
from dataclasses import dataclass

from .command import Command, SpawnedCommand, StrOrPath


@dataclass(frozen=True)
class YtDlpCommand:
    """Builds a ``yt-dlp`` command for ``url`` that outputs to stdout."""

    url: str
    program: str | bytes = "yt-dlp"
    audio_only: bool = False
    content_format: str | None = None

    def into_command(self) -> Command:
        """Create a :class:`Command` from these parameters."""
        command = Command(self.program).args([self.url, "--quiet", "-o", "-"])
        if self.audio_only:
            command.arg("-x")
        if self.content_format is not None:
            command.args(["-f", self.content_format])
        return command

    def extract_audio(self, extract_audio: bool) -> YtDlpCommand:
        """Extract only the audio from the URL."""
        return dataclasses.replace(self, audio_only=extract_audio)

    def format(self, format: str) -> YtDlpCommand:
        """Download the given format; the command fails if it is unavailable."""
        return dataclasses.replace(self, content_format=format)

    def yt_dlp_path(self, path: StrOrPath) -> YtDlpCommand:
        """Set the path to the ``yt-dlp`` binary."""
        return dataclasses.replace(self, program=os.fspath(path))

    def spawn(self) -> SpawnedCommand:
        """Start the command."""
        return self.into_command().spawn()