"""Subprocess runner that appends everything a tool prints to the run's log."""

from __future__ import annotations

import shlex
import shutil
import subprocess
from pathlib import Path

from loguru import logger

from .errors import ExecutionError, SpawnError

log = logger.bind(stage="process")


class PipelineLog:
    """Append-only log file collecting subprocess output for one run.

    Nothing here ever truncates the file. ``relocate`` copies it out of the
    work area so it survives teardown.
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def append(self, text: str) -> None:
        # surrogateescape writes undecodable filename bytes back unchanged
        with open(self.path, "a", encoding="utf-8", errors="surrogateescape") as fh:
            fh.write(text)
            if not text.endswith("\n"):
                fh.write("\n")

    def read_text(self) -> str:
        if not self.path.exists():
            return ""
        return self.path.read_text(encoding="utf-8", errors="replace")

    def relocate(self, dest: Path) -> Path:
        """Copy the log to ``dest`` and keep appending there from now on."""
        dest.parent.mkdir(parents=True, exist_ok=True)
        if self.path.exists():
            shutil.copy2(self.path, dest)
        else:
            dest.touch()
        log.debug(f"Relocated log {self.path} -> {dest}")
        self.path = dest
        return dest


def run_logged(args: list[str], log_sink: PipelineLog) -> None:
    """Run ``args`` with stdout and stderr streamed into ``log_sink``.

    Returns on exit status 0 whatever the tool printed. Raises SpawnError if
    the binary cannot be started and ExecutionError on a non-zero exit.
    """
    tool = Path(args[0]).name
    args_str = shlex.join(args)
    log_sink.append(f"$ {args_str}")

    if len(args_str) > 100:
        args_str = args_str[:97] + "..."
    log.debug(f"run_logged args={args_str}")

    with open(log_sink.path, "ab") as fh:
        try:
            result = subprocess.run(
                args,
                stdin=subprocess.DEVNULL,
                stdout=fh,
                stderr=fh,
            )
        except OSError as exc:
            log.error(f"Could not start {tool}: {exc}")
            raise SpawnError(tool, str(exc)) from exc

    if result.returncode != 0:
        log.error(f"{tool} exited with code {result.returncode}")
        raise ExecutionError(
            tool,
            exit_code=result.returncode,
            detail=f"see log {log_sink.path}",
        )
