"""Argument contracts for the external media tools.

The pipeline never builds a command line itself. Stages ask a toolchain for
the argument list of a transcode, probe, or concat step, so the binaries and
the encode profile can be swapped (or faked in tests) in one place.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol


class Toolchain(Protocol):
    @property
    def probe_tool(self) -> str: ...

    def transcode_args(self, source: Path, dest: Path) -> list[str]: ...

    def duration_args(self, path: Path) -> list[str]: ...

    def concat_args(
        self, manifest: Path, metadata: Path, output: Path, overwrite: bool = False
    ) -> list[str]: ...


@dataclass(frozen=True)
class FFmpegToolchain:
    """ffmpeg + ffprobe, one fixed lossy re-encode profile for every input."""

    ffmpeg: str = "ffmpeg"
    ffprobe: str = "ffprobe"
    codec: str = "aac"
    bitrate: str = "64k"

    @property
    def probe_tool(self) -> str:
        return self.ffprobe

    def transcode_args(self, source: Path, dest: Path) -> list[str]:
        # Audio only: cover art / video streams are dropped with -vn
        return [
            self.ffmpeg,
            "-nostdin",
            "-i",
            str(source),
            "-c:a",
            self.codec,
            "-b:a",
            self.bitrate,
            "-vn",
            str(dest),
        ]

    def duration_args(self, path: Path) -> list[str]:
        return [
            self.ffprobe,
            "-v",
            "error",
            "-show_entries",
            "format=duration",
            "-of",
            "default=noprint_wrappers=1:nokey=1",
            str(path),
        ]

    def concat_args(
        self, manifest: Path, metadata: Path, output: Path, overwrite: bool = False
    ) -> list[str]:
        # Stream copy is only valid because every intermediate shares one profile
        return [
            self.ffmpeg,
            "-nostdin",
            "-y" if overwrite else "-n",
            "-f",
            "concat",
            "-safe",
            "0",
            "-i",
            str(manifest),
            "-i",
            str(metadata),
            "-map_metadata",
            "1",
            "-map",
            "0:a",
            "-c",
            "copy",
            str(output),
        ]
