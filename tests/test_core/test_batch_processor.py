"""Tests for BatchProcessor."""

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from conftest import make_song
from sonicprint.core.batch_processor import BatchProcessor, BatchResult
from sonicprint.utils.errors import DecodingError


@pytest.fixture
def music_dir(tmp_path):
    """a.wav, b.FLAC, notes.txt and sub/c.mp3."""
    (tmp_path / "a.wav").touch()
    (tmp_path / "b.FLAC").touch()
    (tmp_path / "notes.txt").touch()
    (tmp_path / "sub").mkdir()
    (tmp_path / "sub" / "c.mp3").touch()
    return tmp_path


@pytest.fixture
def mock_engine():
    """Engine whose analyze_paths() fails on files named bad.*"""
    engine = MagicMock()

    def analyze_paths(paths):
        for path in paths:
            if path.stem == "bad":
                yield path, DecodingError("cannot decode", file_path=str(path))
            else:
                yield path, make_song(path.stem)

    engine.analyze_paths.side_effect = analyze_paths
    return engine


class TestCollectFiles:
    def test_flat(self, music_dir):
        files = BatchProcessor(MagicMock()).collect_files(music_dir)
        assert [path.name for path in files] == ["a.wav", "b.FLAC"]

    def test_recursive(self, music_dir):
        files = BatchProcessor(MagicMock()).collect_files(music_dir, recursive=True)
        assert sorted(path.name for path in files) == ["a.wav", "b.FLAC", "c.mp3"]

    def test_files_and_duplicates(self, music_dir):
        files = BatchProcessor(MagicMock()).collect_files(
            [music_dir / "a.wav", music_dir / "a.wav", music_dir / "notes.txt"]
        )
        assert files == [music_dir / "a.wav"]

    def test_custom_extensions(self, music_dir):
        files = BatchProcessor(MagicMock(), extensions=[".MP3"]).collect_files(
            music_dir, recursive=True
        )
        assert [path.name for path in files] == ["c.mp3"]

    def test_missing_path(self, tmp_path):
        assert BatchProcessor(MagicMock()).collect_files(tmp_path / "missing") == []


class TestProcess:
    def test_successes_and_failures(self, tmp_path, mock_engine):
        (tmp_path / "good.wav").touch()
        (tmp_path / "bad.wav").touch()

        result = BatchProcessor(mock_engine).process(tmp_path)

        assert result.total_files == 2
        assert result.success_count == 1
        assert result.failure_count == 1
        assert result.success_rate == 50.0
        assert "cannot decode" in result.failed[tmp_path / "bad.wav"]
        assert [song.path.stem for song in result.songs] == ["good"]

    def test_progress_callback(self, music_dir, mock_engine):
        callback = MagicMock()
        BatchProcessor(mock_engine, progress_callback=callback).process(music_dir)

        assert callback.call_count == 2
        assert [call.args[0] for call in callback.call_args_list] == [1, 2]
        assert all(call.args[1] == 2 for call in callback.call_args_list)

    def test_skip(self, music_dir, mock_engine):
        result = BatchProcessor(mock_engine).process(
            music_dir, skip=[music_dir / "a.wav"]
        )
        assert list(result.successful) == [music_dir / "b.FLAC"]

    def test_nothing_to_process(self, tmp_path, mock_engine):
        result = BatchProcessor(mock_engine).process(tmp_path)

        assert result.total_files == 0
        mock_engine.analyze_paths.assert_not_called()


class TestBatchResult:
    def test_empty(self):
        result = BatchResult()
        assert result.success_rate == 0.0
        assert result.songs == []

    def test_songs_sorted_by_path(self):
        result = BatchResult(total_files=2)
        result.successful[Path("/b.wav")] = make_song("b")
        result.successful[Path("/a.wav")] = make_song("a")
        assert [song.path.stem for song in result.songs] == ["a", "b"]
