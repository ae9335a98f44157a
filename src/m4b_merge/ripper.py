"""Audio CD ripping (cdparanoia) and disc identification (cd-discid)."""

from __future__ import annotations

import re
import subprocess
from pathlib import Path
from typing import Callable

from loguru import logger

from .errors import RipError

log = logger.bind(stage="rip")

# "  1.    16503 [03:40.03]        0 [00:00.00]    no   no  2"
_TOC_LINE = re.compile(r"^\s*(\d+)\.\s+\d+\s+\[", re.MULTILINE)


def _run(args: list[str]) -> subprocess.CompletedProcess:
    try:
        return subprocess.run(
            args,
            stdin=subprocess.DEVNULL,
            capture_output=True,
            text=True,
        )
    except OSError as exc:
        raise RipError(f"Failed to run {args[0]}: {exc}") from exc


def parse_toc(output: str) -> list[int]:
    """Track numbers from a ``cdparanoia -Q`` table of contents."""
    return [int(n) for n in _TOC_LINE.findall(output)]


def list_tracks(device: str, cdparanoia: str = "cdparanoia") -> list[int]:
    """Query the disc's audio tracks. cdparanoia prints its TOC on stderr."""
    result = _run([cdparanoia, "-d", device, "-Q"])
    if result.returncode != 0:
        raise RipError(f"{cdparanoia} could not read {device}: {result.stderr.strip()[-300:]}")
    tracks = parse_toc(result.stderr + result.stdout)
    if not tracks:
        raise RipError(f"No audio tracks found on {device}")
    log.debug(f"{device}: {len(tracks)} audio tracks")
    return tracks


def rip_track(
    track: int, dest: Path, device: str, cdparanoia: str = "cdparanoia"
) -> Path:
    result = _run([cdparanoia, "-d", device, "-w", str(track), str(dest)])
    if result.returncode != 0 or not dest.is_file():
        raise RipError(f"Failed to rip track {track}: {result.stderr.strip()[-300:]}")
    return dest


def rip_cd_to_wav(
    output_folder: Path,
    device: str,
    cdparanoia: str = "cdparanoia",
    progress: Callable[[int, int, int], None] | None = None,
) -> list[Path]:
    """Rip every audio track to ``output_folder/trackNN.wav``, in disc order.

    ``progress`` gets (position, total, track number) before each track.
    Stops at the first track that fails.
    """
    try:
        output_folder.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise RipError(f"Cannot create {output_folder}: {exc}") from exc

    tracks = list_tracks(device, cdparanoia)
    ripped: list[Path] = []
    for position, track in enumerate(tracks, start=1):
        if progress:
            progress(position, len(tracks), track)
        dest = output_folder / f"track{track:02d}.wav"
        ripped.append(rip_track(track, dest, device, cdparanoia))
        log.debug(f"Ripped track {track} -> {dest.name}")

    log.info(f"Ripped {len(ripped)} tracks from {device}")
    return ripped


def get_disc_id(device: str, cd_discid: str = "cd-discid") -> str:
    """Disc id of the inserted CD: the first token ``cd-discid`` prints."""
    result = _run([cd_discid, device])
    if result.returncode != 0:
        raise RipError(f"{cd_discid} failed: {result.stderr.strip()[-300:]}")
    tokens = result.stdout.split()
    if not tokens:
        raise RipError("Could not parse disc ID")
    return tokens[0]
