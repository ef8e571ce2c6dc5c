"""
Writers for analyzed songs and playlists.

Songs are stored as JSON so they can be reloaded without re-analysis;
playlists are written as extended M3U.
"""

import json
import logging
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import List, Sequence

from sonicprint.core.models import Song
from sonicprint.utils.errors import SonicprintError


class ResultWriter(ABC):
    """Abstract base class for song writers (Strategy Pattern)."""

    @abstractmethod
    def write(self, songs: Sequence[Song], output_path: Path) -> None:
        """Write songs to the specified path."""


class JSONSongWriter(ResultWriter):
    """Writes songs with their analyses to a JSON file."""

    def __init__(self, indent: int = 2):
        self.indent = indent
        self.logger = logging.getLogger("result_writer.json")

    def write(self, songs: Sequence[Song], output_path: Path) -> None:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        output_data = {
            "generated": datetime.now().isoformat(),
            "total_songs": len(songs),
            "songs": [song.to_dict() for song in songs],
        }

        with open(output_path, 'w', encoding='utf-8') as f:
            json.dump(output_data, f, indent=self.indent)

        self.logger.info(f"{len(songs)} songs written to: {output_path}")


class M3UPlaylistWriter(ResultWriter):
    """Writes songs, in order, as an extended M3U playlist."""

    def __init__(self):
        self.logger = logging.getLogger("result_writer.m3u")

    def write(self, songs: Sequence[Song], output_path: Path) -> None:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with open(output_path, 'w', encoding='utf-8') as f:
            f.write("#EXTM3U\n")
            for song in songs:
                name = " - ".join(part for part in (song.artist, song.title) if part)
                f.write(f"#EXTINF:{round(song.duration)},{name or song.path.stem}\n")
                f.write(f"{song.path}\n")

        self.logger.info(f"Playlist of {len(songs)} songs written to: {output_path}")


def load_songs(input_path: Path) -> List[Song]:
    """
    Read songs written by JSONSongWriter.

    Raises:
        SonicprintError: If the file is not a valid song file
    """
    input_path = Path(input_path)
    try:
        with open(input_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        return [Song.from_dict(item) for item in data["songs"]]
    except (OSError, ValueError, KeyError, TypeError) as e:
        raise SonicprintError(
            f"Could not read songs from {input_path}: {e}",
            details={"file_path": str(input_path)}
        ) from e


def create_result_writer(format: str = "json", **kwargs) -> ResultWriter:
    """
    Factory function to create appropriate writer.

    Args:
        format: Output format ("json" or "m3u")
        **kwargs: Additional arguments for the writer
    """
    writers = {
        "json": JSONSongWriter,
        "m3u": M3UPlaylistWriter,
        "m3u8": M3UPlaylistWriter,
    }

    writer_class = writers.get(format.lower())
    if writer_class is None:
        raise ValueError(f"Unknown format: {format}. Supported: {list(writers.keys())}")

    return writer_class(**kwargs)
