"""FFprobe subprocess wrapper for duration probing."""

from __future__ import annotations

import math
import subprocess
from pathlib import Path

from loguru import logger

from .errors import ExecutionError, ParseError, SpawnError
from .toolchain import FFmpegToolchain, Toolchain

log = logger.bind(stage="ffprobe")


def _run_ffprobe(args: list[str]) -> subprocess.CompletedProcess:
    """Run the prober, capturing its output as text."""
    try:
        return subprocess.run(
            args,
            stdin=subprocess.DEVNULL,
            capture_output=True,
            text=True,
        )
    except OSError as exc:
        raise SpawnError(Path(args[0]).name, str(exc)) from exc


def parse_duration(output: str, tool: str = "ffprobe") -> float:
    """Parse a bare decimal seconds value. Raises ParseError if invalid."""
    text = output.strip()
    try:
        value = float(text)
    except ValueError:
        raise ParseError(tool, text) from None
    if not math.isfinite(value) or value < 0:
        raise ParseError(tool, text)
    return value


def get_duration(file: Path, toolchain: Toolchain | None = None) -> float:
    """Get duration in seconds.

    Raises SpawnError/ExecutionError when the prober cannot run or exits
    non-zero, ParseError when it prints anything but a non-negative number.
    """
    toolchain = toolchain or FFmpegToolchain()
    args = toolchain.duration_args(file)
    tool = Path(args[0]).name

    result = _run_ffprobe(args)
    if result.returncode != 0:
        stderr = result.stderr.strip()
        log.error(f"{tool} failed on {file}: {stderr[-500:]}")
        raise ExecutionError(tool, result.returncode, detail=stderr or "no output")

    duration = parse_duration(result.stdout, tool)
    log.debug(f"Duration of {file.name}: {duration:.3f}s")
    return duration


def duration_to_timestamp(seconds: float) -> str:
    """Convert seconds to HH:MM:SS."""
    total = int(seconds)
    h = total // 3600
    m = (total % 3600) // 60
    s = total % 60
    return f"{h:02d}:{m:02d}:{s:02d}"
