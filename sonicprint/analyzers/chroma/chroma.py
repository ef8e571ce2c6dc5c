"""
Chroma descriptor.

Runs over the entire buffer at once since tuning estimation needs the
whole song: STFT, tuning, chroma projection, then interval features.
"""

from typing import List

import numpy as np

from sonicprint.analyzers.chroma.filters import chroma_stft
from sonicprint.analyzers.chroma.intervals import (
    chroma_interval_features,
    interval_feature_values,
)
from sonicprint.analyzers.chroma.tuning import estimate_tuning
from sonicprint.core.descriptor_base import BaseAnalyzer, Normalize
from sonicprint.core.dsp import stft
from sonicprint.core.models import FeaturesVersion


class ChromaDesc(Normalize):
    """
    Accumulates chroma frames over one or more calls to do_().

    Each call estimates its own tuning, so the whole song should be passed
    in a single call.
    """

    WINDOW_SIZE: int = 8192
    HOP_SIZE: int = 2205
    MIN_VALUE: float = 0.0
    MAX_VALUE: float = 0.12

    def __init__(self, sample_rate: int, n_chroma: int = 12):
        self.sample_rate = sample_rate
        self.n_chroma = n_chroma
        self.values_chroma = np.zeros((n_chroma, 0))

    def do_(self, signal: np.ndarray) -> None:
        spectrum = stft(signal, self.WINDOW_SIZE, self.HOP_SIZE)
        tuning = estimate_tuning(self.sample_rate, spectrum, self.WINDOW_SIZE, 0.01, 12)
        chroma = chroma_stft(
            self.sample_rate, spectrum, self.WINDOW_SIZE, self.n_chroma, tuning
        )
        self.values_chroma = np.concatenate((self.values_chroma, chroma), axis=1)

    def get_values(self, version: FeaturesVersion = FeaturesVersion.LATEST) -> List[float]:
        """Normalized chroma features for the layout of ``version``."""
        interval_features = chroma_interval_features(self.values_chroma)
        return [
            self.normalize(value)
            for value in interval_feature_values(interval_features, version)
        ]


class ChromaAnalyzer(BaseAnalyzer[List[float]]):
    def __init__(
        self,
        sample_rate: int,
        features_version: FeaturesVersion = FeaturesVersion.LATEST,
    ):
        super().__init__("chroma", "1.0.0", sample_rate)
        self.features_version = FeaturesVersion(features_version)

    def _analyze_impl(self, samples: np.ndarray) -> List[float]:
        desc = ChromaDesc(self.sample_rate)
        desc.do_(samples)
        return desc.get_values(self.features_version)
