"""Pipeline runner -- sequences transcode, probe, chapter metadata, and merge.

One ``PipelineRunner.run`` call handles one ConversionJob inside a private
work area::

    idle -> transcoding -> probing -> building_metadata -> merging -> done
                 \\            \\               \\              \\
                  +------------+---------------+--------------+--> failed

The first error stops the run and is raised as a StageError naming the
state it happened in. There are no retries. Progress events are purely
observational.
"""

from __future__ import annotations

import shutil
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING, Callable

from loguru import logger

from . import chapters
from .errors import NoMediaFilesError, PipelineError, PipelineIOError, StageError
from .models import (
    Chapter,
    ConversionJob,
    PipelineResult,
    PipelineState,
    ProgressEvent,
)
from .process import PipelineLog
from .stages.merge import merge
from .stages.probe import probe_durations
from .stages.transcode import normalize

if TYPE_CHECKING:
    from .config import MergeConfig
    from .toolchain import Toolchain

log = logger.bind(stage="runner")

LOG_NAME = "ffmpeg.log"
CHAPTER_DOC_NAME = "chapters.ffmeta"


class PipelineRunner:
    """Runs the merge pipeline for a ConversionJob."""

    def __init__(
        self,
        config: MergeConfig,
        toolchain: Toolchain | None = None,
        progress: Callable[[ProgressEvent], None] | None = None,
    ) -> None:
        self.config = config
        self.toolchain = toolchain or config.toolchain()
        self.progress = progress
        self.state = PipelineState.IDLE
        self.failed_stage: PipelineState | None = None

    def run(self, job: ConversionJob) -> PipelineResult:
        """Convert ``job.inputs`` into ``job.output_path``.

        Raises NoMediaFilesError when there are no inputs and PipelineIOError
        when the output exists without ``force``, both before touching
        anything. A failing stage raises StageError with ``log_path`` set.
        """
        self.state = PipelineState.IDLE
        self.failed_stage = None

        if not job.inputs:
            raise NoMediaFilesError()
        if job.output_path.exists() and not self.config.force:
            raise PipelineIOError(
                job.output_path, "output already exists (use --force to overwrite)"
            )

        work_dir = self._create_work_area()
        pipeline_log = PipelineLog(work_dir / LOG_NAME)
        log.info(
            f"Starting run: {len(job.inputs)} files -> {job.output_path} "
            f"(work_dir={work_dir})"
        )

        try:
            chapter_list = self._execute(job, work_dir, pipeline_log)
        except StageError as exc:
            exc.log_path = self._keep_log(pipeline_log, job.output_path)
            raise
        else:
            log_path = self._keep_log(pipeline_log, job.output_path)
        finally:
            self._teardown(work_dir)

        log.info(f"Finished: {job.output_path} ({len(chapter_list)} chapters)")
        return PipelineResult(
            output_path=job.output_path,
            log_path=log_path,
            chapters=chapter_list,
        )

    def _execute(
        self,
        job: ConversionJob,
        work_dir: Path,
        pipeline_log: PipelineLog,
    ) -> list[Chapter]:
        total = len(job.inputs)

        intermediates = self._run_stage(
            PipelineState.TRANSCODING,
            total,
            normalize,
            list(job.inputs),
            work_dir,
            self.toolchain,
            pipeline_log,
            self.progress,
        )

        durations = self._run_stage(
            PipelineState.PROBING,
            total,
            probe_durations,
            intermediates,
            self.toolchain,
            self.progress,
        )

        doc = self._run_stage(
            PipelineState.BUILDING_METADATA,
            total,
            self._write_chapter_doc,
            job,
            durations,
            work_dir / CHAPTER_DOC_NAME,
        )

        self._run_stage(
            PipelineState.MERGING,
            total,
            merge,
            intermediates,
            work_dir / CHAPTER_DOC_NAME,
            job.output_path,
            self.toolchain,
            pipeline_log,
            overwrite=self.config.force,
        )

        self._enter(PipelineState.DONE, total)
        return doc.chapters

    def _run_stage(self, state: PipelineState, total: int, func, *args, **kwargs):
        """Enter ``state`` and run ``func``; any pipeline error moves us to FAILED."""
        self._enter(state, total)
        try:
            return func(*args, **kwargs)
        except (PipelineError, OSError, ValueError) as exc:
            self.failed_stage = state
            self.state = PipelineState.FAILED
            log.error(f"Stage {state.value} failed: {exc}")
            raise StageError(state.value, exc) from exc

    def _enter(self, state: PipelineState, total: int) -> None:
        log.debug(f"State {self.state.value} -> {state.value}")
        self.state = state
        if self.progress:
            self.progress(ProgressEvent(state, index=0, total=total))

    def _write_chapter_doc(
        self,
        job: ConversionJob,
        durations: list[float],
        path: Path,
    ) -> chapters.ChapterMetadataDocument:
        doc = chapters.build(
            durations,
            title_overrides=job.title_overrides,
            fallback_names=job.chapter_names,
            title=job.title,
            artist=job.artist,
        )
        try:
            path.write_text(doc.render(), encoding="utf-8")
        except OSError as exc:
            raise PipelineIOError(path, str(exc)) from exc
        log.debug(f"Wrote {len(doc.chapters)} chapters to {path.name}")
        return doc

    def _create_work_area(self) -> Path:
        base = self.config.work_dir
        try:
            if base is not None:
                base.mkdir(parents=True, exist_ok=True)
            # concat manifest entries must be absolute; ffmpeg resolves relative
            # ones against the manifest directory, not the cwd
            return Path(tempfile.mkdtemp(prefix="m4b-merge-", dir=base)).resolve()
        except OSError as exc:
            raise PipelineIOError(base or Path(tempfile.gettempdir()), str(exc)) from exc

    def _log_destination(self, output_path: Path) -> Path:
        name = f"{output_path.stem}.log"
        if self.config.log_dir is not None:
            return self.config.log_dir / name
        return output_path.with_name(name)

    def _keep_log(self, pipeline_log: PipelineLog, output_path: Path) -> Path | None:
        """Move the run log out of the work area so it outlives teardown."""
        try:
            return pipeline_log.relocate(self._log_destination(output_path))
        except OSError as exc:
            log.warning(f"Could not keep log {pipeline_log.path}: {exc}")
            if self.config.cleanup_work_dir:
                return None
            return pipeline_log.path

    def _teardown(self, work_dir: Path) -> None:
        if not self.config.cleanup_work_dir:
            log.info(f"Keeping work dir: {work_dir}")
            return
        shutil.rmtree(work_dir, ignore_errors=True)
        log.debug(f"Removed work dir: {work_dir}")
