"""Recursive media file discovery."""

from __future__ import annotations

import re
from pathlib import Path

from loguru import logger

from .models import MEDIA_EXTENSIONS

log = logger.bind(stage="discover")


def _natural_sort_key(p: Path) -> list:
    """Extract numeric/text parts for natural sorting of filenames."""
    return [int(c) if c.isdigit() else c.lower() for c in re.split(r"(\d+)", p.name)]


def collect_media_files(
    folder: Path,
    extensions: frozenset[str] = MEDIA_EXTENSIONS,
) -> list[Path]:
    """Return media files under ``folder`` in playback order.

    Entries of each directory are natural-sorted (track2 before track10) and
    subdirectories are expanded in place, so CD1/ comes before CD2/ and a
    folder's own tracks sit where the folder sorts. Extensions compare
    case-insensitively. Unreadable directories are skipped.
    """
    try:
        entries = sorted(folder.iterdir(), key=_natural_sort_key)
    except OSError as exc:
        log.warning(f"Cannot read {folder}: {exc}")
        return []

    files: list[Path] = []
    for entry in entries:
        if entry.is_dir():
            files.extend(collect_media_files(entry, extensions))
        elif entry.suffix.lower() in extensions:
            files.append(entry)
    return files
