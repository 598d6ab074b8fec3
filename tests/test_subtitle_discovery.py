from __future__ import annotations

import os
from pathlib import Path

from subsorter.errors import DirectoryError
from subsorter.models import ReconciliationResult
from subsorter.subtitle_discovery import discover_subtitles, subtitle_extension


def _touch(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("1\n00:00:01,000 --> 00:00:02,000\nHi\n", encoding="utf-8")
    return path


class TestSubtitleExtension:
    def test_recognises_known_extensions_case_insensitively(self) -> None:
        assert subtitle_extension("a.SRT") == ".srt"
        assert subtitle_extension("a.en.Ass") == ".ass"
        assert subtitle_extension("movie.idx") == ".idx"

    def test_rejects_other_extensions(self) -> None:
        assert subtitle_extension("a.txt") is None
        assert subtitle_extension("a.nfo") is None
        assert subtitle_extension("srt") is None


class TestDiscoverSubtitles:
    def test_finds_only_subtitles_one_level_down(self, tmp_path: Path) -> None:
        movie_dir = tmp_path / "Foo (2020)"
        _touch(movie_dir / "Foo (2020).mkv")
        _touch(movie_dir / "beside.srt")
        expected = {
            _touch(movie_dir / "Subs" / "English.srt"),
            _touch(movie_dir / "Subs" / "French.SUB"),
            _touch(movie_dir / "Other" / "movie.vtt"),
        }
        _touch(movie_dir / "Subs" / "readme.txt")
        _touch(movie_dir / "Subs" / "Deeper" / "Hidden.srt")

        found = list(discover_subtitles(str(movie_dir)))

        assert {Path(candidate.path) for candidate in found} == expected
        assert {candidate.extension for candidate in found} == {".srt", ".sub", ".vtt"}

    def test_directories_with_subtitle_extension_are_ignored(self, tmp_path: Path) -> None:
        movie_dir = tmp_path / "Foo"
        (movie_dir / "Subs" / "folder.srt").mkdir(parents=True)
        assert list(discover_subtitles(str(movie_dir))) == []

    def test_returns_lazy_iterator(self, tmp_path: Path) -> None:
        movie_dir = tmp_path / "Foo"
        _touch(movie_dir / "Subs" / "a.srt")
        discovered = discover_subtitles(str(movie_dir))
        assert iter(discovered) is discovered

    def test_honours_custom_extension_set(self, tmp_path: Path) -> None:
        movie_dir = tmp_path / "Foo"
        _touch(movie_dir / "Subs" / "a.srt")
        vtt = _touch(movie_dir / "Subs" / "b.vtt")
        found = list(discover_subtitles(str(movie_dir), extensions={".vtt"}))
        assert [Path(candidate.path) for candidate in found] == [vtt]

    def test_missing_movie_directory_is_recorded(self, tmp_path: Path) -> None:
        result = ReconciliationResult()
        missing = tmp_path / "does-not-exist"

        assert list(discover_subtitles(str(missing), result)) == []
        assert len(result.failures) == 1
        assert isinstance(result.failures[0].error, DirectoryError)

    def test_unreadable_subdirectory_does_not_stop_discovery(self, tmp_path: Path, monkeypatch) -> None:
        movie_dir = tmp_path / "Foo"
        broken = movie_dir / "Broken"
        _touch(broken / "a.srt")
        good = _touch(movie_dir / "Good" / "b.srt")
        real_scandir = os.scandir

        def fake_scandir(path):
            if os.fspath(path) == str(broken):
                raise PermissionError(13, "Permission denied", str(broken))
            return real_scandir(path)

        monkeypatch.setattr(os, "scandir", fake_scandir)
        result = ReconciliationResult()

        found = list(discover_subtitles(str(movie_dir), result))

        assert [Path(candidate.path) for candidate in found] == [good]
        assert len(result.failures) == 1
        failure = result.failures[0]
        assert isinstance(failure.error, DirectoryError)
        assert failure.source_path == str(broken)
