"""Probe stage -- read the duration of every intermediate file."""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable

from loguru import logger

from ..errors import PipelineError
from ..ffprobe import duration_to_timestamp, get_duration
from ..models import IntermediateFile, PipelineState, ProgressEvent

if TYPE_CHECKING:
    from ..toolchain import Toolchain

log = logger.bind(stage="probe")


def probe_durations(
    intermediates: list[IntermediateFile],
    toolchain: Toolchain,
    progress: Callable[[ProgressEvent], None] | None = None,
) -> list[float]:
    """Return durations in seconds, in the same order as ``intermediates``."""
    total = len(intermediates)
    durations: list[float] = []
    for item in intermediates:
        if progress:
            progress(
                ProgressEvent(
                    PipelineState.PROBING,
                    index=item.index + 1,
                    total=total,
                    message=f"Probing: {item.source.path.name}",
                )
            )
        try:
            durations.append(get_duration(item.path, toolchain))
        except PipelineError as exc:
            exc.path = item.source.path
            raise

    log.debug(f"Total duration: {duration_to_timestamp(sum(durations))}")
    return durations
