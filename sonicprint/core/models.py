"""
Core data models for sonicprint.

The Analysis fingerprint, its versioned index tables, and the song values
built around it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Type, Union

import numpy as np

from sonicprint.utils.errors import AnalysisError, IncompatibleAnalysisError


class AnalysisIndexV1(IntEnum):
    """Slot names of a version 1 Analysis."""

    TEMPO = 0
    ZCR = 1
    MEAN_SPECTRAL_CENTROID = 2
    STD_DEVIATION_SPECTRAL_CENTROID = 3
    MEAN_SPECTRAL_ROLLOFF = 4
    STD_DEVIATION_SPECTRAL_ROLLOFF = 5
    MEAN_SPECTRAL_FLATNESS = 6
    STD_DEVIATION_SPECTRAL_FLATNESS = 7
    MEAN_LOUDNESS = 8
    STD_DEVIATION_LOUDNESS = 9
    CHROMA1 = 10
    CHROMA2 = 11
    CHROMA3 = 12
    CHROMA4 = 13
    CHROMA5 = 14
    CHROMA6 = 15
    CHROMA7 = 16
    CHROMA8 = 17
    CHROMA9 = 18
    CHROMA10 = 19

    @property
    def label(self) -> str:
        """CamelCase name used in readable representations."""
        return "".join(part.capitalize() for part in self.name.split("_"))


class AnalysisIndexV2(IntEnum):
    """Slot names of a version 2 Analysis: version 1 plus chroma norms."""

    TEMPO = 0
    ZCR = 1
    MEAN_SPECTRAL_CENTROID = 2
    STD_DEVIATION_SPECTRAL_CENTROID = 3
    MEAN_SPECTRAL_ROLLOFF = 4
    STD_DEVIATION_SPECTRAL_ROLLOFF = 5
    MEAN_SPECTRAL_FLATNESS = 6
    STD_DEVIATION_SPECTRAL_FLATNESS = 7
    MEAN_LOUDNESS = 8
    STD_DEVIATION_LOUDNESS = 9
    CHROMA1 = 10
    CHROMA2 = 11
    CHROMA3 = 12
    CHROMA4 = 13
    CHROMA5 = 14
    CHROMA6 = 15
    CHROMA7 = 16
    CHROMA8 = 17
    CHROMA9 = 18
    CHROMA10 = 19
    CHROMA_DYAD_NORM = 20
    CHROMA_TRIAD_NORM = 21
    CHROMA_DYAD_TRIAD_RATIO = 22

    @property
    def label(self) -> str:
        return "".join(part.capitalize() for part in self.name.split("_"))


class FeaturesVersion(IntEnum):
    """
    Layout of the Analysis vector.

    Analyses of different versions have different lengths and must never be
    compared with each other. LATEST is an alias of the newest version.
    """

    VERSION1 = 1
    VERSION2 = 2
    LATEST = 2

    def feature_count(self) -> int:
        return len(self.index())

    def index(self) -> Type[IntEnum]:
        """Index enum naming every slot of this version."""
        return _INDEX_TABLES[self]


_INDEX_TABLES: Dict[int, Type[IntEnum]] = {
    FeaturesVersion.VERSION1: AnalysisIndexV1,
    FeaturesVersion.VERSION2: AnalysisIndexV2,
}


@dataclass(frozen=True, eq=False)
class Analysis:
    """
    Fixed-length float32 fingerprint of a song.

    The length must match ``version.feature_count()``; the values are
    stored in a read-only array.
    """

    values: np.ndarray
    version: FeaturesVersion = FeaturesVersion.LATEST

    def __post_init__(self) -> None:
        try:
            version = FeaturesVersion(self.version)
        except ValueError as e:
            raise AnalysisError(f"Unknown features version: {self.version}") from e

        values = np.array(self.values, dtype=np.float32)
        expected = version.feature_count()
        if values.ndim != 1 or values.shape[0] != expected:
            raise AnalysisError(
                f"Too many or too little features were provided: expected "
                f"{expected} for version {int(version)}, got {values.size}"
            )
        values.flags.writeable = False

        object.__setattr__(self, 'values', values)
        object.__setattr__(self, 'version', version)

    def __len__(self) -> int:
        return self.values.shape[0]

    def __getitem__(self, index: Union[int, IntEnum]) -> float:
        if isinstance(index, IntEnum) and not isinstance(index, self.version.index()):
            raise IncompatibleAnalysisError(
                f"{type(index).__name__} cannot index a version "
                f"{int(self.version)} analysis",
                expected=self.version.index().__name__,
                found=type(index).__name__,
            )
        return float(self.values[int(index)])

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Analysis):
            return NotImplemented
        return self.version == other.version and np.array_equal(self.values, other.values)

    def __hash__(self) -> int:
        return hash((int(self.version), self.values.tobytes()))

    def __repr__(self) -> str:
        fields = ", ".join(
            f"{index.label}: {self.values[index]}" for index in self.version.index()
        )
        return (
            f"Analysis (Version {int(self.version)}) {{ {fields} }} "
            f"/* {self.as_sequence()} */"
        )

    def as_sequence(self) -> List[float]:
        """Flat list of the features, for persistence."""
        return self.values.tolist()

    def as_array(self) -> np.ndarray:
        """The read-only float32 feature array."""
        return self.values

    def to_dict(self) -> Dict[str, Any]:
        return {"version": int(self.version), "features": self.as_sequence()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Analysis":
        return cls(data["features"], FeaturesVersion(data["version"]))


@dataclass(frozen=True)
class DecodedSong:
    """Output of a Decoder: mono samples plus tag metadata."""

    path: Path
    sample_array: np.ndarray = field(repr=False, compare=False)
    sample_rate: int
    duration: float  # seconds
    artist: Optional[str] = None
    title: Optional[str] = None
    album: Optional[str] = None
    album_artist: Optional[str] = None
    track_number: Optional[str] = None
    disc_number: Optional[str] = None
    genre: Optional[str] = None


@dataclass(frozen=True)
class Song:
    """
    An analyzed song.

    Only songs whose analyses share a features version can be compared.
    """

    path: Path
    analysis: Analysis
    duration: float = 0.0
    artist: Optional[str] = None
    title: Optional[str] = None
    album: Optional[str] = None
    album_artist: Optional[str] = None
    track_number: Optional[str] = None
    disc_number: Optional[str] = None
    genre: Optional[str] = None

    @property
    def features_version(self) -> FeaturesVersion:
        return self.analysis.version

    @classmethod
    def from_decoded(cls, decoded: DecodedSong, analysis: Analysis) -> "Song":
        return cls(
            path=decoded.path,
            analysis=analysis,
            duration=decoded.duration,
            artist=decoded.artist,
            title=decoded.title,
            album=decoded.album,
            album_artist=decoded.album_artist,
            track_number=decoded.track_number,
            disc_number=decoded.disc_number,
            genre=decoded.genre,
        )

    def distance(self, other: "Song") -> float:
        """Euclidean distance between the two analyses."""
        from sonicprint.playlist.distance import euclidean_distance
        return self.custom_distance(other, euclidean_distance)

    def custom_distance(
        self,
        other: "Song",
        distance: Callable[[np.ndarray, np.ndarray], float],
    ) -> float:
        """
        Distance between the two analyses using ``distance``.

        Raises:
            IncompatibleAnalysisError: If the features versions differ
        """
        check_same_version([self, other])
        return distance(self.analysis.as_array(), other.analysis.as_array())

    def closest_from_pool(self, pool: Sequence["Song"]) -> List["Song"]:
        """
        Pool plus this song, ordered by distance to this song and deduplicated.
        """
        from sonicprint.playlist.distance import euclidean_distance
        return self.closest_from_pool_custom(pool, euclidean_distance)

    def closest_from_pool_custom(
        self,
        pool: Sequence["Song"],
        distance: Callable[[np.ndarray, np.ndarray], float],
    ) -> List["Song"]:
        from sonicprint.playlist.playlist import (
            closest_to_first_song,
            dedup_playlist_custom_distance,
        )

        playlist = [self] + list(pool)
        closest_to_first_song(self, playlist, distance)
        dedup_playlist_custom_distance(playlist, None, distance)
        return playlist

    def to_dict(self) -> Dict[str, Any]:
        """JSON-serializable representation."""
        return {
            "path": str(self.path),
            "artist": self.artist,
            "title": self.title,
            "album": self.album,
            "album_artist": self.album_artist,
            "track_number": self.track_number,
            "disc_number": self.disc_number,
            "genre": self.genre,
            "duration": self.duration,
            "analysis": self.analysis.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Song":
        return cls(
            path=Path(data["path"]),
            analysis=Analysis.from_dict(data["analysis"]),
            duration=data.get("duration", 0.0),
            artist=data.get("artist"),
            title=data.get("title"),
            album=data.get("album"),
            album_artist=data.get("album_artist"),
            track_number=data.get("track_number"),
            disc_number=data.get("disc_number"),
            genre=data.get("genre"),
        )


def check_same_version(songs: Sequence[Song]) -> None:
    """
    Raises:
        IncompatibleAnalysisError: If the songs mix features versions
    """
    versions = {song.features_version for song in songs}
    if len(versions) > 1:
        found = sorted(int(version) for version in versions)
        raise IncompatibleAnalysisError(
            f"Cannot compare songs analyzed with different features versions: {found}",
            expected=found[0],
            found=found[1:],
        )
