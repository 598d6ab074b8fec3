from __future__ import annotations

import pytest

from subsorter.destination_builder import (
    NAMING_APPEND,
    build_destination,
    movie_base,
    strip_extension,
    subtitle_suffix,
)


class TestStripExtension:
    def test_strips_matching_suffix(self) -> None:
        assert strip_extension("/lib/Foo/Foo.mkv", ".mkv") == "/lib/Foo/Foo"

    def test_suffix_match_is_case_sensitive(self) -> None:
        assert strip_extension("/lib/Foo/Foo.MKV", ".mkv") == "/lib/Foo/Foo.MKV"

    def test_empty_extension_leaves_path_unchanged(self) -> None:
        assert strip_extension("/lib/Foo/Foo", "") == "/lib/Foo/Foo"

    def test_movie_base_removes_only_final_extension(self) -> None:
        assert movie_base("/lib/Foo.2020/Foo.2020.1080p.mkv") == "/lib/Foo.2020/Foo.2020.1080p"


class TestSubtitleSuffix:
    def test_keeps_language_tags(self) -> None:
        assert subtitle_suffix("/x/sub/track.en.forced.srt") == ".en.forced.srt"

    def test_plain_extension(self) -> None:
        assert subtitle_suffix("/x/sub/English.srt") == ".srt"


class TestBuildDestination:
    def test_substitutes_movie_base_name(self) -> None:
        destination = build_destination("/L/M (Y)/M (Y).mkv", "/L/M (Y)/sub/track.en.srt")
        assert destination == "/L/M (Y)/M (Y).en.srt"

    def test_same_base_name_keeps_subtitle_name(self) -> None:
        destination = build_destination("/lib/Foo (2020)/Foo.mkv", "/lib/Foo (2020)/sub/Foo.en.srt")
        assert destination == "/lib/Foo (2020)/Foo.en.srt"

    def test_destination_lives_next_to_movie(self) -> None:
        destination = build_destination("/lib/Foo/Foo.mp4", "/lib/Foo/Subs/Deep/English.vtt")
        assert destination == "/lib/Foo/Foo.vtt"

    def test_append_mode_keeps_full_subtitle_name(self) -> None:
        destination = build_destination("/lib/Foo/Foo.mkv", "/lib/Foo/Subs/English.srt", NAMING_APPEND)
        assert destination == "/lib/Foo/Foo.English.srt"

    def test_movie_without_extension(self) -> None:
        assert build_destination("/lib/Foo/Foo", "/lib/Foo/Subs/a.srt") == "/lib/Foo/Foo.srt"

    def test_rejects_unknown_mode(self) -> None:
        with pytest.raises(ValueError, match="Unsupported naming mode"):
            build_destination("/lib/Foo/Foo.mkv", "/lib/Foo/Subs/a.srt", "rename")
