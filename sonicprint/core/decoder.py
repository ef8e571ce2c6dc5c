"""
Audio decoding for sonicprint.

Decoders turn a file into mono float32 samples at the analysis sample rate
plus tag metadata. The engine only depends on the Decoder protocol.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Protocol, Set, Tuple, Union

import librosa
import mutagen
import numpy as np
import soundfile as sf

from sonicprint.core.models import DecodedSong
from sonicprint.utils.errors import DecodingError, FileTooLargeError, UnsupportedFormatError

SUPPORTED_FORMATS: Set[str] = {
    '.wav', '.flac', '.ogg', '.mp3', '.aiff', '.aif', '.m4a', '.opus',
}

TARGET_SAMPLE_RATE: int = 22050  # Hz
MAX_FILE_SIZE: int = 524288000  # 500 MB

# mutagen keys for each tag, tried in order
MUTAGEN_TAG_KEYS: Dict[str, Tuple[str, ...]] = {
    'album_artist': ('albumartist', 'album artist'),
    'discnumber': ('discnumber',),
    'artist': ('artist',),
    'title': ('title',),
    'album': ('album',),
    'tracknumber': ('tracknumber',),
    'genre': ('genre',),
}

logger = logging.getLogger("decoder")


class Decoder(Protocol):
    """Anything that can turn a path into a DecodedSong."""

    def decode(self, path: Union[str, Path]) -> DecodedSong:
        """
        Raises:
            DecodingError: If the file cannot be decoded
        """
        ...


class LibrosaDecoder:
    """
    Decodes audio with librosa and reads tags with soundfile and mutagen.

    Thread-safe and stateless - can be used concurrently.
    """

    def __init__(
        self,
        target_sr: int = TARGET_SAMPLE_RATE,
        max_file_size: int = MAX_FILE_SIZE,
        supported_formats: Optional[Set[str]] = None,
    ):
        """
        Initialize decoder with configuration.

        Args:
            target_sr: Sample rate the audio is resampled to
            max_file_size: Maximum file size in bytes
            supported_formats: File suffixes accepted (lower case, with dot)
        """
        self.target_sr = target_sr
        self.max_file_size = max_file_size
        self.supported_suffixes: Set[str] = set(supported_formats or SUPPORTED_FORMATS)

    def decode(self, path: Union[str, Path]) -> DecodedSong:
        """
        Decode an audio file into mono samples.

        Args:
            path: Path to audio file

        Returns:
            DecodedSong: samples, duration and tags

        Raises:
            DecodingError: File missing or unreadable
            UnsupportedFormatError: File format not supported
            FileTooLargeError: File exceeds size limit
        """
        path = Path(path)

        self._validate_file(path)
        samples = self._load_samples(path)
        tags = self._load_tags(path)

        return DecodedSong(
            path=path,
            sample_array=samples,
            sample_rate=self.target_sr,
            duration=len(samples) / self.target_sr,
            artist=tags.get('artist'),
            title=tags.get('title'),
            album=tags.get('album'),
            album_artist=tags.get('album_artist'),
            track_number=tags.get('tracknumber'),
            disc_number=tags.get('discnumber'),
            genre=tags.get('genre'),
        )

    def _validate_file(self, path: Path) -> None:
        if not path.is_file():
            raise DecodingError(f"Audio file not found: {path}", file_path=str(path))

        suffix = path.suffix.lower()
        if suffix not in self.supported_suffixes:
            raise UnsupportedFormatError(
                f"Format {suffix} not supported. "
                f"Supported formats: {', '.join(sorted(self.supported_suffixes))}",
                format=suffix
            )

        file_size = path.stat().st_size
        if file_size > self.max_file_size:
            raise FileTooLargeError(
                f"File too large: {file_size / 1024 / 1024:.1f} MB. "
                f"Maximum: {self.max_file_size / 1024 / 1024:.1f} MB",
                file_size=file_size,
                max_size=self.max_file_size
            )

    def _load_samples(self, path: Path) -> np.ndarray:
        """Load, downmix and resample to the target rate."""
        try:
            samples, _ = librosa.load(
                str(path),
                sr=self.target_sr,
                mono=True,
                dtype=np.float32
            )
        except Exception as e:
            raise DecodingError(
                f"Failed to decode audio data from {path}: {e}",
                file_path=str(path)
            ) from e

        if samples.size == 0:
            raise DecodingError(f"Audio file is empty: {path}", file_path=str(path))

        return samples

    def _load_tags(self, path: Path) -> Dict[str, Any]:
        """
        Read tags with soundfile, then fill the gaps with mutagen.

        libsndfile never reports album artist or disc number, and cannot
        open every container librosa can decode. Missing tags are None.
        """
        tags = self._load_soundfile_tags(path)
        for key, value in self._load_mutagen_tags(path).items():
            tags.setdefault(key, value)

        if 'tracknumber' in tags:
            tags['tracknumber'] = str(tags['tracknumber'])
        return tags

    def _load_soundfile_tags(self, path: Path) -> Dict[str, Any]:
        try:
            with sf.SoundFile(str(path)) as f:
                return {key: value for key, value in f.copy_metadata().items() if value}
        except RuntimeError as e:
            logger.debug(f"No tags read with soundfile from {path}: {e}")
            return {}

    def _load_mutagen_tags(self, path: Path) -> Dict[str, Any]:
        try:
            audio = mutagen.File(str(path), easy=True)
        except mutagen.MutagenError as e:
            logger.debug(f"No tags read with mutagen from {path}: {e}")
            return {}
        if audio is None or audio.tags is None:
            return {}

        tags = {}
        for field, keys in MUTAGEN_TAG_KEYS.items():
            for key in keys:
                try:
                    values = audio.tags[key]
                except (KeyError, ValueError):
                    continue
                if isinstance(values, list):
                    values = values[0] if values else None
                if values:
                    tags[field] = str(values)
                    break
        return tags


def create_decoder(config: Optional[Dict[str, Any]] = None) -> LibrosaDecoder:
    """
    Factory function to create a decoder from the configuration dict.

    Args:
        config: Full configuration (uses the "analysis" and "audio" sections)
    """
    config = config or {}
    audio_config = config.get('audio', {})
    formats = audio_config.get('supported_formats')

    return LibrosaDecoder(
        target_sr=config.get('analysis', {}).get('sample_rate', TARGET_SAMPLE_RATE),
        max_file_size=audio_config.get('max_file_size', MAX_FILE_SIZE),
        supported_formats={suffix.lower() for suffix in formats} if formats else None,
    )
