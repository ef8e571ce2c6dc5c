"""Shared fixtures for sonicprint tests."""

from pathlib import Path
from typing import Optional, Sequence

import numpy as np
import pytest

from sonicprint.core.models import Analysis, FeaturesVersion, Song

SAMPLE_RATE = 22050


# ---------------------------------------------------------------------------
# Signal helpers
# ---------------------------------------------------------------------------


def sine(frequency: float, seconds: float, sample_rate: int = SAMPLE_RATE) -> np.ndarray:
    """Float32 sine wave of the given frequency."""
    t = np.arange(int(seconds * sample_rate)) / sample_rate
    return np.sin(2 * np.pi * frequency * t).astype(np.float32)


def white_noise(seconds: float, sample_rate: int = SAMPLE_RATE, seed: int = 0) -> np.ndarray:
    rng = np.random.default_rng(seed)
    return rng.uniform(-1, 1, int(seconds * sample_rate)).astype(np.float32)


def click_track(clicks: int, gap: int = 22000, click_length: int = 100) -> np.ndarray:
    """Silence with a short burst of ones every gap + click_length samples."""
    period = np.concatenate((np.zeros(gap), np.ones(click_length)))
    return np.tile(period, clicks).astype(np.float32)


# ---------------------------------------------------------------------------
# Song factory
# ---------------------------------------------------------------------------


def make_song(
    name: str,
    position: Sequence[float] = (0.0,),
    version: FeaturesVersion = FeaturesVersion.LATEST,
    title: Optional[str] = None,
    artist: Optional[str] = None,
    album: Optional[str] = None,
    track_number: Optional[str] = None,
    disc_number: Optional[str] = None,
) -> Song:
    """Song whose analysis starts with ``position`` and is zero elsewhere."""
    values = np.zeros(version.feature_count(), dtype=np.float32)
    values[:len(position)] = position
    return Song(
        path=Path(f"/music/{name}.flac"),
        analysis=Analysis(values, version),
        duration=180.0,
        title=title,
        artist=artist,
        album=album,
        track_number=track_number,
        disc_number=disc_number,
    )


@pytest.fixture
def song_factory():
    """The make_song() factory."""
    return make_song
