"""Tests for the chapter metadata builder."""

import pytest

from m4b_merge.chapters import (
    build,
    build_chapters,
    chapter_title,
    escape_value,
    printable_text,
)


class TestBuildChapters:
    def test_cumulative_starts(self):
        durations = [12.5, 3.25, 100.0, 0.75]
        chapters = build_chapters(durations)
        assert len(chapters) == 4
        for i, ch in enumerate(chapters):
            assert ch.start == pytest.approx(sum(durations[:i]))
            assert ch.end == pytest.approx(sum(durations[: i + 1]))

    def test_contiguous_and_non_decreasing(self):
        chapters = build_chapters([1.0, 0.0, 2.5, 7.125])
        assert chapters[0].start == 0.0
        for prev, cur in zip(chapters, chapters[1:]):
            assert cur.start == prev.end
            assert cur.start >= prev.start

    def test_empty(self):
        assert build_chapters([]) == []

    def test_milliseconds_are_rounded(self):
        chapters = build_chapters([1.0004, 1.0006])
        assert chapters[0].end_ms == 1000
        assert chapters[1].start_ms == 1000
        assert chapters[1].end_ms == 2001

    def test_negative_duration_rejected(self):
        with pytest.raises(ValueError):
            build_chapters([1.0, -0.5])

    def test_nan_duration_rejected(self):
        with pytest.raises(ValueError):
            build_chapters([float("nan")])


class TestChapterTitle:
    def test_override_wins(self):
        assert chapter_title(0, ["Intro"], ["track01"]) == "Intro"

    def test_fallback_when_no_override(self):
        assert chapter_title(0, None, ["track01"]) == "track01"

    def test_synthesized_when_nothing(self):
        assert chapter_title(4) == "Chapter 5"

    def test_shorter_lists_resolve_per_index(self):
        overrides = ["One"]
        fallbacks = ["a", "b"]
        titles = [chapter_title(i, overrides, fallbacks) for i in range(3)]
        assert titles == ["One", "b", "Chapter 3"]

    def test_empty_override_falls_through(self):
        assert chapter_title(0, [""], ["a"]) == "a"


class TestBuildDocument:
    def test_two_files_example(self):
        doc = build([5.0, 3.2], fallback_names=["a", "b"])
        text = doc.render()

        assert text.startswith(";FFMETADATA1\n")
        first, second = text.split("[CHAPTER]")[1:]
        assert "START=0\n" in first
        assert "END=5000\n" in first
        assert "title=a" in first
        assert "START=5000\n" in second
        assert "END=8200\n" in second
        assert "title=b" in second

    def test_timebase_per_chapter(self):
        text = build([1.0, 2.0, 3.0]).render()
        assert text.count("[CHAPTER]") == 3
        assert text.count("TIMEBASE=1/1000") == 3

    def test_empty_document_is_well_formed(self):
        text = build([]).render()
        assert text.splitlines()[0] == ";FFMETADATA1"
        assert "[CHAPTER]" not in text

    def test_global_tags(self):
        text = build([1.0], title="My Book", artist="Someone").render()
        lines = text.splitlines()
        assert lines[1] == "title=My Book"
        assert lines[2] == "artist=Someone"

    def test_overrides_reach_document(self):
        doc = build([1.0, 1.0], title_overrides=["Prologue"], fallback_names=["x", "y"])
        assert [c.title for c in doc.chapters] == ["Prologue", "y"]

    def test_special_characters_escaped(self):
        text = build([1.0], fallback_names=["Act 1; Scene=2 #3"]).render()
        assert "title=Act 1\\; Scene\\=2 \\#3" in text


class TestEscapeValue:
    def test_plain_text_unchanged(self):
        assert escape_value("Chapter 01") == "Chapter 01"

    def test_backslash_and_newline(self):
        assert escape_value("a\\b\nc") == "a\\\\b\\\nc"


class TestUndecodableNames:
    def test_fallback_title_made_printable(self):
        name = b"caf\xe9".decode("utf-8", "surrogateescape")
        assert chapter_title(0, fallback_names=[name]) == "caf�"

    def test_rendered_document_encodes_as_utf8(self):
        name = b"caf\xe9".decode("utf-8", "surrogateescape")
        text = build([1.0], fallback_names=[name], title=name).render()
        text.encode("utf-8")
        assert "title=caf�" in text

    def test_printable_text_leaves_valid_text_alone(self):
        assert printable_text("Café") == "Café"
