"""Tests for the command-line interface."""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from conftest import make_song
from sonicprint import cli


class TestParser:
    def test_analyze(self):
        args = cli.create_parser().parse_args(["analyze", "-r", "music", "song.flac"])
        assert args.inputs == [Path("music"), Path("song.flac")]
        assert args.recursive is True
        assert args.handler is cli.run_analyze

    def test_playlist(self):
        args = cli.create_parser().parse_args(
            ["playlist", "music", "first.flac", "-n", "5", "--song-to-song", "--no-dedup"]
        )
        assert args.folder == Path("music")
        assert args.first_song == Path("first.flac")
        assert args.length == 5
        assert args.song_to_song is True
        assert args.no_dedup is True

    def test_command_required(self):
        with pytest.raises(SystemExit):
            cli.create_parser().parse_args([])

    def test_unknown_metric(self):
        with pytest.raises(SystemExit):
            cli.create_parser().parse_args(["distance", "a.flac", "b.flac", "--metric", "l1"])


class TestBuildPlaylist:
    @pytest.fixture
    def songs(self):
        return [
            make_song("first", (0.0,)),
            make_song("far", (5.0,)),
            make_song("near", (1.0,)),
            make_song("near_copy", (1.001,)),
            make_song("mid", (2.0,)),
        ]

    def test_starts_with_first_song(self, songs):
        playlist = cli.build_playlist(songs[0], songs, 10, "euclidean", True, None)
        assert [song.path.stem for song in playlist] == ["first", "near", "mid", "far"]

    def test_without_dedup(self, songs):
        playlist = cli.build_playlist(songs[0], songs, 10, "euclidean", False, None)
        assert [song.path.stem for song in playlist] == [
            "first", "near", "near_copy", "mid", "far"
        ]

    def test_length(self, songs):
        playlist = cli.build_playlist(songs[0], songs, 2, "euclidean", True, None)
        assert len(playlist) == 2

    def test_first_song_outside_pool(self, songs):
        outside = make_song("outside", (4.0,))
        playlist = cli.build_playlist(outside, songs[1:], 10, "euclidean", True, 0.05)
        assert [song.path.stem for song in playlist] == ["outside", "far", "mid", "near_copy"]


class TestMain:
    def test_invalid_config(self, tmp_path, capsys):
        config = tmp_path / "config.yaml"
        config.write_text("analysis: [broken")

        assert cli.main(["--config", str(config), "analyze", "song.flac"]) == 2
        assert "Failed to parse" in capsys.readouterr().err

    def test_unknown_distance_in_config(self, tmp_path, capsys):
        config = tmp_path / "config.yaml"
        config.write_text("playlist:\n  distance: manhattan\n")

        code = cli.main(["--config", str(config), "distance", "a.flac", "b.flac"])

        assert code == 2
        assert "playlist.distance" in capsys.readouterr().err

    def test_handler_errors_exit_with_1(self, tmp_path, capsys):
        engine = MagicMock()
        engine.__enter__.return_value = engine
        engine.song_from_path.side_effect = cli.SonicprintError("cannot decode")

        with patch.object(cli, "create_analysis_engine", return_value=engine), \
                patch.object(cli, "setup_logging"):
            code = cli.main(["distance", str(tmp_path / "a.flac"), str(tmp_path / "b.flac")])

        assert code == 1
        assert "cannot decode" in capsys.readouterr().err
