"""Merge stage -- concat the intermediates and inject chapters in one ffmpeg pass.

Creates ``files.txt`` (ffmpeg concat demuxer list) next to the chapter
document, then stream-copies everything into the final container. No audio
is re-encoded here; the transcode stage guarantees one shared profile.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from loguru import logger

from ..errors import PipelineIOError
from ..models import IntermediateFile
from ..process import run_logged

if TYPE_CHECKING:
    from ..process import PipelineLog
    from ..toolchain import Toolchain

log = logger.bind(stage="merge")

MANIFEST_NAME = "files.txt"


def manifest_line(path: Path) -> str:
    """One concat demuxer entry. Single quotes become '\\''."""
    escaped_path = str(path).replace("'", "'\\''")
    return f"file '{escaped_path}'"


def write_manifest(intermediates: list[IntermediateFile], path: Path) -> Path:
    lines = [manifest_line(item.path) for item in intermediates]
    try:
        path.write_text(
            "\n".join(lines) + "\n", encoding="utf-8", errors="surrogateescape"
        )
    except OSError as exc:
        raise PipelineIOError(path, str(exc)) from exc
    log.debug(f"Wrote {len(lines)} entries to {path.name}")
    return path


def merge(
    intermediates: list[IntermediateFile],
    chapter_doc: Path,
    output_path: Path,
    toolchain: Toolchain,
    log_sink: PipelineLog,
    overwrite: bool = False,
) -> Path:
    """Concatenate ``intermediates`` into ``output_path`` with ``chapter_doc`` as metadata."""
    manifest = write_manifest(intermediates, chapter_doc.parent / MANIFEST_NAME)

    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise PipelineIOError(output_path.parent, str(exc)) from exc

    log.info(f"Merging {len(intermediates)} files into {output_path.name}")
    run_logged(
        toolchain.concat_args(manifest, chapter_doc, output_path, overwrite=overwrite),
        log_sink,
    )
    return output_path
