"""Core enums, constants, and data types for the merge pipeline.

Enums:
    PipelineState -- Orchestrator state (idle through done, plus failed).
    MediaFormat   -- Supported input format tags (lowercased extensions).

Types:
    MediaInput       -- A source file and its format tag.
    IntermediateFile -- A normalized copy of one input inside the work area.
    Chapter          -- One [start, end) window of the final audiobook.
    ConversionJob    -- Aggregate root for one run.
    ProgressEvent    -- Observational progress notification.
    PipelineResult   -- What a successful run produced.
    DiscMetadata     -- Release info looked up for a ripped CD.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path


class PipelineState(StrEnum):
    IDLE = "idle"
    TRANSCODING = "transcoding"
    PROBING = "probing"
    BUILDING_METADATA = "building_metadata"
    MERGING = "merging"
    DONE = "done"
    FAILED = "failed"


class MediaFormat(StrEnum):
    MP3 = "mp3"
    OGG = "ogg"
    WAV = "wav"
    FLAC = "flac"
    M4A = "m4a"


SUPPORTED_FORMATS: frozenset[str] = frozenset(f.value for f in MediaFormat)

# Extensions picked up by folder discovery (with leading dot, like Path.suffix)
MEDIA_EXTENSIONS: frozenset[str] = frozenset(f".{f}" for f in SUPPORTED_FORMATS)

INTERMEDIATE_SUFFIX = ".m4a"
TIMEBASE_MS = 1000


@dataclass(frozen=True)
class MediaInput:
    """A source media file. The format tag is its lowercased extension."""

    path: Path
    format: str

    @classmethod
    def from_path(cls, path: Path) -> MediaInput:
        return cls(path=Path(path), format=Path(path).suffix.lower().lstrip("."))

    @property
    def supported(self) -> bool:
        return self.format in SUPPORTED_FORMATS


@dataclass(frozen=True)
class IntermediateFile:
    """Re-encoded copy of ``source``, named by its ordinal ``index``."""

    index: int
    path: Path
    source: MediaInput


@dataclass(frozen=True)
class Chapter:
    index: int
    title: str
    start: float
    end: float

    @property
    def start_ms(self) -> int:
        return round(self.start * TIMEBASE_MS)

    @property
    def end_ms(self) -> int:
        return round(self.end * TIMEBASE_MS)


@dataclass(frozen=True)
class ConversionJob:
    """One conversion run: ordered inputs, optional titles, and the output path.

    ``title_overrides`` win over ``fallback_names``; when no fallback names
    are given, the input file stems are used.
    """

    inputs: tuple[MediaInput, ...]
    output_path: Path
    title_overrides: tuple[str, ...] | None = None
    fallback_names: tuple[str, ...] | None = None
    title: str | None = None
    artist: str | None = None

    @classmethod
    def from_paths(
        cls,
        paths: list[Path],
        output_path: Path,
        title_overrides: list[str] | None = None,
        title: str | None = None,
        artist: str | None = None,
    ) -> ConversionJob:
        return cls(
            inputs=tuple(MediaInput.from_path(p) for p in paths),
            output_path=Path(output_path),
            title_overrides=tuple(title_overrides) if title_overrides else None,
            title=title,
            artist=artist,
        )

    @property
    def chapter_names(self) -> tuple[str, ...]:
        if self.fallback_names is not None:
            return self.fallback_names
        return tuple(i.path.stem for i in self.inputs)


@dataclass(frozen=True)
class ProgressEvent:
    state: PipelineState
    index: int
    total: int
    message: str = ""


@dataclass
class PipelineResult:
    output_path: Path
    log_path: Path | None
    chapters: list[Chapter] = field(default_factory=list)

    @property
    def total_duration(self) -> float:
        return self.chapters[-1].end if self.chapters else 0.0


@dataclass(frozen=True)
class DiscMetadata:
    title: str = ""
    artist: str = ""
    track_titles: tuple[str, ...] = ()
