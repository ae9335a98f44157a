"""Chapter metadata builder -- cumulative chapter windows as an FFMETADATA1 document.

Given per-file durations (in order) and optional titles, each file becomes
one chapter whose start is the sum of all previous durations. Titles are
picked per index: explicit override, then fallback name (usually the source
file stem), then a synthesized "Chapter N".

The rendered document looks like::

    ;FFMETADATA1
    title=Book

    [CHAPTER]
    TIMEBASE=1/1000
    START=0
    END=5000
    title=a

Every chapter carries an explicit END.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from itertools import accumulate
from typing import Sequence

from .models import TIMEBASE_MS, Chapter

HEADER = ";FFMETADATA1"

# Characters FFMETADATA treats as syntax inside values
_SPECIAL = re.compile(r"([=;#\\\n])")


def printable_text(value: str) -> str:
    """Text that encodes cleanly as UTF-8.

    File names that are not valid UTF-8 reach Python with surrogate escapes;
    their undecodable bytes become U+FFFD here.
    """
    return value.encode("utf-8", "surrogateescape").decode("utf-8", "replace")


def escape_value(value: str) -> str:
    """Backslash-escape '=', ';', '#', '\\' and newlines."""
    return _SPECIAL.sub(r"\\\1", printable_text(value))


def _pick(names: Sequence[str] | None, index: int) -> str | None:
    if names is None or index >= len(names):
        return None
    return names[index] or None


def chapter_title(
    index: int,
    title_overrides: Sequence[str] | None = None,
    fallback_names: Sequence[str] | None = None,
) -> str:
    """Title for chapter ``index``: override, else fallback, else "Chapter N"."""
    return printable_text(
        _pick(title_overrides, index)
        or _pick(fallback_names, index)
        or f"Chapter {index + 1}"
    )


def build_chapters(
    durations: Sequence[float],
    title_overrides: Sequence[str] | None = None,
    fallback_names: Sequence[str] | None = None,
) -> list[Chapter]:
    """Fold durations into contiguous chapters starting at 0."""
    for d in durations:
        if not math.isfinite(d) or d < 0:
            raise ValueError(f"Invalid chapter duration: {d!r}")

    ends = list(accumulate(durations))
    starts = [0.0] + ends[:-1]
    return [
        Chapter(
            index=i,
            title=chapter_title(i, title_overrides, fallback_names),
            start=float(start),
            end=float(end),
        )
        for i, (start, end) in enumerate(zip(starts, ends))
    ]


@dataclass
class ChapterMetadataDocument:
    chapters: list[Chapter] = field(default_factory=list)
    title: str | None = None
    artist: str | None = None

    def render(self) -> str:
        lines = [HEADER]
        if self.title:
            lines.append(f"title={escape_value(self.title)}")
        if self.artist:
            lines.append(f"artist={escape_value(self.artist)}")
        lines.append("")

        for ch in self.chapters:
            lines.extend(
                [
                    "[CHAPTER]",
                    f"TIMEBASE=1/{TIMEBASE_MS}",
                    f"START={ch.start_ms}",
                    f"END={ch.end_ms}",
                    f"title={escape_value(ch.title)}",
                    "",
                ]
            )
        return "\n".join(lines)


def build(
    durations: Sequence[float],
    title_overrides: Sequence[str] | None = None,
    fallback_names: Sequence[str] | None = None,
    title: str | None = None,
    artist: str | None = None,
) -> ChapterMetadataDocument:
    """Build the chapter document for the given durations. Pure, no I/O."""
    return ChapterMetadataDocument(
        chapters=build_chapters(durations, title_overrides, fallback_names),
        title=title,
        artist=artist,
    )
