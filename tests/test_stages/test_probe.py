"""Tests for the probe stage."""

from pathlib import Path
from unittest.mock import patch

import pytest

from m4b_merge.errors import ParseError
from m4b_merge.models import IntermediateFile, MediaInput, PipelineState
from m4b_merge.stages.probe import probe_durations
from m4b_merge.toolchain import FFmpegToolchain


def _intermediates(tmp_path, *names: str) -> list[IntermediateFile]:
    return [
        IntermediateFile(
            index=i,
            path=tmp_path / f"{i:04d}.m4a",
            source=MediaInput.from_path(Path("/src") / name),
        )
        for i, name in enumerate(names)
    ]


class TestProbeStage:
    @patch("m4b_merge.stages.probe.get_duration", side_effect=[5.0, 3.2])
    def test_durations_in_order(self, mock_dur, tmp_path):
        items = _intermediates(tmp_path, "a.ogg", "b.mp3")
        assert probe_durations(items, FFmpegToolchain()) == [5.0, 3.2]
        probed = [c.args[0] for c in mock_dur.call_args_list]
        assert probed == [items[0].path, items[1].path]

    @patch(
        "m4b_merge.stages.probe.get_duration",
        side_effect=[5.0, ParseError("ffprobe", "N/A"), 1.0],
    )
    def test_first_error_aborts(self, mock_dur, tmp_path):
        items = _intermediates(tmp_path, "a.ogg", "b.mp3", "c.mp3")
        with pytest.raises(ParseError) as exc_info:
            probe_durations(items, FFmpegToolchain())
        assert mock_dur.call_count == 2
        assert exc_info.value.path == Path("/src/b.mp3")

    @patch("m4b_merge.stages.probe.get_duration", return_value=1.0)
    def test_progress_events(self, mock_dur, tmp_path):
        events = []
        probe_durations(_intermediates(tmp_path, "a.ogg"), FFmpegToolchain(), events.append)
        assert len(events) == 1
        assert events[0].state == PipelineState.PROBING
        assert (events[0].index, events[0].total) == (1, 1)
