"""Tests for the song and playlist writers."""

import json

import pytest

from conftest import make_song
from sonicprint.core.result_writer import (
    JSONSongWriter,
    M3UPlaylistWriter,
    create_result_writer,
    load_songs,
)
from sonicprint.utils.errors import SonicprintError


@pytest.fixture
def songs():
    return [
        make_song("first", (0.25, -0.5), title="First", artist="Artist", album="Album"),
        make_song("second", (1.0,)),
    ]


class TestJSONSongWriter:
    def test_round_trip(self, tmp_path, songs):
        path = tmp_path / "out" / "songs.json"
        JSONSongWriter().write(songs, path)

        data = json.loads(path.read_text())
        assert data["total_songs"] == 2
        assert load_songs(path) == songs

    def test_load_invalid_file(self, tmp_path):
        path = tmp_path / "songs.json"
        path.write_text("{not json")
        with pytest.raises(SonicprintError, match="Could not read songs"):
            load_songs(path)

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(SonicprintError):
            load_songs(tmp_path / "missing.json")


class TestM3UPlaylistWriter:
    def test_writes_entries_in_order(self, tmp_path, songs):
        path = tmp_path / "playlist.m3u"
        M3UPlaylistWriter().write(songs, path)

        lines = path.read_text().splitlines()
        assert lines == [
            "#EXTM3U",
            "#EXTINF:180,Artist - First",
            "/music/first.flac",
            "#EXTINF:180,second",
            "/music/second.flac",
        ]


class TestCreateResultWriter:
    def test_known_formats(self):
        assert isinstance(create_result_writer("json"), JSONSongWriter)
        assert isinstance(create_result_writer("M3U"), M3UPlaylistWriter)

    def test_unknown_format(self):
        with pytest.raises(ValueError, match="Unknown format"):
            create_result_writer("xml")
