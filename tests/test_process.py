"""Tests for the logged subprocess runner, using real short-lived child processes."""

import os
import sys

import pytest

from m4b_merge.errors import ExecutionError, SpawnError
from m4b_merge.process import PipelineLog, run_logged


def _python(code: str) -> list[str]:
    return [sys.executable, "-c", code]


class TestRunLogged:
    def test_zero_exit_succeeds(self, tmp_path):
        sink = PipelineLog(tmp_path / "run.log")
        run_logged(_python("print('hello')"), sink)
        assert "hello" in sink.read_text()

    def test_zero_exit_ignores_error_output(self, tmp_path):
        sink = PipelineLog(tmp_path / "run.log")
        run_logged(_python("import sys; sys.stderr.write('Error: scary\\n')"), sink)
        assert "Error: scary" in sink.read_text()

    def test_nonzero_exit_raises_and_logs_output(self, tmp_path):
        sink = PipelineLog(tmp_path / "run.log")
        code = "import sys; print('to stdout'); sys.stderr.write('to stderr\\n'); sys.exit(2)"
        with pytest.raises(ExecutionError) as exc_info:
            run_logged(_python(code), sink)

        err = exc_info.value
        assert err.exit_code == 2
        assert err.reason == "non-zero exit"
        assert str(sink.path) in err.detail
        content = sink.read_text()
        assert "to stdout" in content
        assert "to stderr" in content

    def test_missing_binary_is_spawn_error(self, tmp_path):
        sink = PipelineLog(tmp_path / "run.log")
        with pytest.raises(SpawnError) as exc_info:
            run_logged([str(tmp_path / "no-such-tool"), "-i", "x"], sink)
        assert exc_info.value.tool == "no-such-tool"

    def test_log_only_grows(self, tmp_path):
        sink = PipelineLog(tmp_path / "run.log")
        run_logged(_python("print('first')"), sink)
        run_logged(_python("print('second')"), sink)
        content = sink.read_text()
        assert content.index("first") < content.index("second")

    def test_command_line_recorded(self, tmp_path):
        sink = PipelineLog(tmp_path / "run.log")
        run_logged(_python("pass"), sink)
        assert sink.read_text().startswith("$ ")

    def test_stdin_not_inherited(self, tmp_path):
        sink = PipelineLog(tmp_path / "run.log")
        run_logged(_python("import sys; print(repr(sys.stdin.read()))"), sink)
        assert "''" in sink.read_text()


class TestPipelineLog:
    def test_relocate_copies_content(self, tmp_path):
        sink = PipelineLog(tmp_path / "work" / "run.log")
        sink.path.parent.mkdir()
        sink.append("line one")
        dest = sink.relocate(tmp_path / "out" / "book.log")
        assert dest.read_text() == "line one\n"
        assert sink.path == dest

    def test_relocate_empty_log(self, tmp_path):
        sink = PipelineLog(tmp_path / "never-written.log")
        dest = sink.relocate(tmp_path / "book.log")
        assert dest.exists()
        assert dest.read_text() == ""


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX byte filenames")
class TestUndecodableFilenames:
    def test_latin1_argument_logged_byte_for_byte(self, tmp_path):
        sink = PipelineLog(tmp_path / "run.log")
        name = os.fsdecode(b"caf\xe9.mp3")
        run_logged(_python("pass") + [name], sink)
        assert b"caf\xe9.mp3" in sink.path.read_bytes()

    def test_append_keeps_raw_bytes(self, tmp_path):
        sink = PipelineLog(tmp_path / "run.log")
        sink.append(os.fsdecode(b"/music/caf\xe9.ogg"))
        assert sink.path.read_bytes() == b"/music/caf\xe9.ogg\n"
