"""Tests for models.py -- enums, constants, data types."""

from pathlib import Path

from m4b_merge.models import (
    MEDIA_EXTENSIONS,
    SUPPORTED_FORMATS,
    Chapter,
    ConversionJob,
    MediaFormat,
    MediaInput,
    PipelineResult,
    PipelineState,
)


class TestPipelineState:
    def test_values(self):
        assert PipelineState.IDLE == "idle"
        assert PipelineState.BUILDING_METADATA == "building_metadata"
        assert PipelineState.FAILED == "failed"

    def test_from_string(self):
        assert PipelineState("merging") is PipelineState.MERGING


class TestFormats:
    def test_original_formats_supported(self):
        for tag in ("mp3", "ogg", "wav"):
            assert tag in SUPPORTED_FORMATS

    def test_extensions_match_formats(self):
        assert MEDIA_EXTENSIONS == {f".{f.value}" for f in MediaFormat}


class TestMediaInput:
    def test_format_from_extension(self):
        media = MediaInput.from_path(Path("/music/01 Intro.MP3"))
        assert media.format == "mp3"
        assert media.supported is True

    def test_unsupported(self):
        media = MediaInput.from_path(Path("/music/cover.jpg"))
        assert media.format == "jpg"
        assert media.supported is False

    def test_no_extension(self):
        assert MediaInput.from_path(Path("/music/README")).format == ""


class TestChapter:
    def test_millisecond_offsets(self):
        ch = Chapter(index=0, title="a", start=5.0, end=8.2)
        assert ch.start_ms == 5000
        assert ch.end_ms == 8200


class TestConversionJob:
    def test_fallback_names_from_stems(self):
        job = ConversionJob.from_paths(
            [Path("/m/a.ogg"), Path("/m/b.mp3")], Path("Book.m4b")
        )
        assert job.chapter_names == ("a", "b")
        assert job.title_overrides is None

    def test_explicit_fallback_names(self):
        job = ConversionJob(
            inputs=(MediaInput.from_path(Path("/m/a.ogg")),),
            output_path=Path("Book.m4b"),
            fallback_names=("Side A",),
        )
        assert job.chapter_names == ("Side A",)

    def test_empty_overrides_normalized(self):
        job = ConversionJob.from_paths([Path("a.mp3")], Path("B.m4b"), title_overrides=[])
        assert job.title_overrides is None


class TestPipelineResult:
    def test_total_duration(self):
        result = PipelineResult(
            output_path=Path("B.m4b"),
            log_path=None,
            chapters=[Chapter(0, "a", 0.0, 5.0), Chapter(1, "b", 5.0, 8.25)],
        )
        assert result.total_duration == 8.25

    def test_empty_duration(self):
        assert PipelineResult(output_path=Path("B.m4b"), log_path=None).total_duration == 0.0
