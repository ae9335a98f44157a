"""Transcode stage -- normalize every input into one shared AAC profile."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Callable

from loguru import logger

from ..errors import ExternalToolError, UnsupportedFormatError
from ..models import (
    INTERMEDIATE_SUFFIX,
    IntermediateFile,
    MediaInput,
    PipelineState,
    ProgressEvent,
)
from ..process import run_logged

if TYPE_CHECKING:
    from ..process import PipelineLog
    from ..toolchain import Toolchain

log = logger.bind(stage="transcode")


def intermediate_path(work_dir: Path, index: int) -> Path:
    return work_dir / f"{index:04d}{INTERMEDIATE_SUFFIX}"


def check_formats(inputs: list[MediaInput]) -> None:
    """Raise UnsupportedFormatError for the first input we cannot transcode."""
    for media in inputs:
        if not media.supported:
            log.error(f"Unsupported format {media.format!r}: {media.path}")
            raise UnsupportedFormatError(media.path)


def normalize(
    inputs: list[MediaInput],
    work_dir: Path,
    toolchain: Toolchain,
    log_sink: PipelineLog,
    progress: Callable[[ProgressEvent], None] | None = None,
) -> list[IntermediateFile]:
    """Transcode ``inputs`` into ``work_dir``, returning intermediates in input order.

    Every supported format goes through the same re-encode profile so the
    merge stage can stream-copy them. The first failure aborts the stage;
    later inputs are not touched.
    """
    check_formats(inputs)

    total = len(inputs)
    intermediates: list[IntermediateFile] = []
    for index, media in enumerate(inputs):
        if progress:
            progress(
                ProgressEvent(
                    PipelineState.TRANSCODING,
                    index=index + 1,
                    total=total,
                    message=f"Processing: {media.path}",
                )
            )
        dest = intermediate_path(work_dir, index)
        log.debug(f"[{index + 1}/{total}] {media.path.name} -> {dest.name}")
        try:
            run_logged(toolchain.transcode_args(media.path, dest), log_sink)
        except ExternalToolError as exc:
            log.error(f"Failed to transcode {media.path}: {exc}")
            exc.path = media.path
            raise
        intermediates.append(IntermediateFile(index=index, path=dest, source=media))

    log.info(f"Transcoded {total} files")
    return intermediates
