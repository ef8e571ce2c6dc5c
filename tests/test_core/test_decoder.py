"""Tests for LibrosaDecoder."""

import numpy as np
import pytest
import soundfile as sf
from mutagen.flac import FLAC

from conftest import sine
from sonicprint.core.decoder import LibrosaDecoder, create_decoder
from sonicprint.utils.errors import DecodingError, FileTooLargeError, UnsupportedFormatError


@pytest.fixture
def wav_file(tmp_path):
    """One second of stereo 440 Hz at 44.1 kHz."""
    path = tmp_path / "tone.wav"
    tone = sine(440.0, 1.0, sample_rate=44100)
    sf.write(str(path), np.stack([tone, tone], axis=1), 44100)
    return path


@pytest.fixture
def tagged_flac(tmp_path):
    path = tmp_path / "tagged.flac"
    with sf.SoundFile(str(path), 'w', samplerate=22050, channels=1, format='FLAC') as f:
        f.title = "A Title"
        f.artist = "An Artist"
        f.write(sine(220.0, 0.5))
    return path


class TestLibrosaDecoder:
    def test_resamples_and_downmixes(self, wav_file):
        decoded = LibrosaDecoder().decode(wav_file)

        assert decoded.sample_rate == 22050
        assert decoded.sample_array.ndim == 1
        assert decoded.sample_array.dtype == np.float32
        assert decoded.duration == pytest.approx(1.0, abs=0.01)
        assert decoded.path == wav_file

    def test_missing_tags_are_none(self, wav_file):
        decoded = LibrosaDecoder().decode(wav_file)
        assert decoded.title is None
        assert decoded.artist is None
        assert decoded.album is None

    def test_reads_tags(self, tagged_flac):
        decoded = LibrosaDecoder().decode(tagged_flac)
        assert decoded.title == "A Title"
        assert decoded.artist == "An Artist"

    def test_reads_album_artist_and_disc_number(self, tagged_flac):
        audio = FLAC(str(tagged_flac))
        audio["albumartist"] = "Various Artists"
        audio["discnumber"] = "2"
        audio["tracknumber"] = "7"
        audio.save()

        decoded = LibrosaDecoder().decode(tagged_flac)

        assert decoded.album_artist == "Various Artists"
        assert decoded.disc_number == "2"
        assert decoded.track_number == "7"
        assert decoded.title == "A Title"

    def test_untagged_file_has_no_disc_number(self, wav_file):
        decoded = LibrosaDecoder().decode(wav_file)
        assert decoded.album_artist is None
        assert decoded.disc_number is None

    def test_missing_file(self, tmp_path):
        with pytest.raises(DecodingError, match="not found"):
            LibrosaDecoder().decode(tmp_path / "missing.wav")

    def test_unsupported_format(self, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("not audio")
        with pytest.raises(UnsupportedFormatError, match=r"\.txt not supported"):
            LibrosaDecoder().decode(path)

    def test_file_too_large(self, wav_file):
        with pytest.raises(FileTooLargeError):
            LibrosaDecoder(max_file_size=100).decode(wav_file)

    def test_corrupted_file(self, tmp_path):
        path = tmp_path / "broken.wav"
        path.write_bytes(b"RIFF not really a wave file")
        with pytest.raises(DecodingError, match="Failed to decode"):
            LibrosaDecoder().decode(path)


class TestCreateDecoder:
    def test_defaults(self):
        decoder = create_decoder()
        assert decoder.target_sr == 22050
        assert ".flac" in decoder.supported_suffixes

    def test_from_config(self):
        decoder = create_decoder({
            "analysis": {"sample_rate": 16000},
            "audio": {"max_file_size": 1024, "supported_formats": [".WAV"]},
        })
        assert decoder.target_sr == 16000
        assert decoder.max_file_size == 1024
        assert decoder.supported_suffixes == {".wav"}
