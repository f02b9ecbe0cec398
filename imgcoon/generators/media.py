"""Generators for video and audio files, both backed by ffmpeg."""

from __future__ import annotations

from pathlib import Path

from imgcoon.generators.base import Generator

FFMPEG_QUIET = ["-y", "-hide_banner", "-loglevel", "error"]


class VideoGenerator(Generator):
    """Extract a representative frame from a video."""

    name = "video"
    description = "Video frame via ffmpeg"
    MIME_PATTERNS = ("video",)

    def _convert(
        self,
        source_path: Path,
        source_mime: str,
        intermediate_path: Path,
        quality: int,
        size: tuple[int, int] | None,
    ) -> Path:
        # The thumbnail filter picks the most representative of the first frames
        cmd = [
            self.tools.ffmpeg,
            *FFMPEG_QUIET,
            "-i",
            str(source_path),
            "-vf",
            "thumbnail",
            "-frames:v",
            "1",
            "-an",
            str(intermediate_path),
        ]
        self.run_tool(cmd)
        return self.require_output(intermediate_path)


class AudioGenerator(Generator):
    """Extract the embedded cover art of an audio file."""

    name = "audio"
    description = "Embedded cover art via ffmpeg"
    MIME_PATTERNS = ("audio",)

    def _convert(
        self,
        source_path: Path,
        source_mime: str,
        intermediate_path: Path,
        quality: int,
        size: tuple[int, int] | None,
    ) -> Path:
        cmd = [
            self.tools.ffmpeg,
            *FFMPEG_QUIET,
            "-i",
            str(source_path),
            "-an",
            "-map",
            "0:v:0",
            "-frames:v",
            "1",
            str(intermediate_path),
        ]
        self.run_tool(cmd)
        return self.require_output(intermediate_path)
