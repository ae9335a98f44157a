"""Exception hierarchy for the merge pipeline."""

from __future__ import annotations

from pathlib import Path


class PipelineError(Exception):
    """Base exception for all pipeline errors.

    Stages set ``path`` to the file they were working on when it is known.
    """

    path: Path | None = None


class ConfigError(PipelineError):
    """Invalid or missing configuration."""


class ExternalToolError(PipelineError):
    """An external tool (ffmpeg, ffprobe, cdparanoia, ...) could not do its job."""

    def __init__(self, tool: str, message: str) -> None:
        super().__init__(message)
        self.tool = tool


class SpawnError(ExternalToolError):
    """The tool could not be started (missing binary, permissions)."""

    def __init__(self, tool: str, reason: str) -> None:
        super().__init__(tool, f"failed to start {tool}: {reason}")
        self.reason = reason


class ExecutionError(ExternalToolError):
    """The tool ran and exited with a non-zero status."""

    def __init__(self, tool: str, exit_code: int, detail: str = "see log") -> None:
        super().__init__(
            tool, f"{tool} failed: non-zero exit ({exit_code}), {detail}"
        )
        self.exit_code = exit_code
        self.reason = "non-zero exit"
        self.detail = detail


class ParseError(PipelineError):
    """Tool output could not be parsed."""

    def __init__(self, tool: str, output: str) -> None:
        super().__init__(f"could not parse {tool} output: {output!r}")
        self.tool = tool
        self.output = output


class UnsupportedFormatError(PipelineError):
    """Input extension is not in the supported set."""

    def __init__(self, path: Path) -> None:
        super().__init__(f"Unsupported file format: {path}")
        self.path = path


class PipelineIOError(PipelineError):
    """Filesystem failure while preparing work-area files."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


class NoMediaFilesError(PipelineError):
    """A conversion was requested with nothing to convert."""

    def __init__(self, folder: Path | str | None = None) -> None:
        if folder is None:
            super().__init__("No media files to convert")
        else:
            super().__init__(f"No media files found in the specified folder: {folder}")
        self.folder = folder


class RipError(PipelineError):
    """CD ripping or disc identification failed."""


class StageError(PipelineError):
    """A pipeline stage failed. The underlying error is ``cause``."""

    def __init__(
        self,
        stage: str,
        cause: Exception,
        log_path: Path | None = None,
    ) -> None:
        super().__init__(f"{stage} failed: {cause}")
        self.stage = stage
        self.cause = cause
        self.log_path = log_path
