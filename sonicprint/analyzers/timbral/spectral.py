"""
Spectral shape descriptor: centroid, rolloff and flatness.

Each phase-vocoder frame (512-sample window, 128-sample hop) yields one
value of each; the analyzer reports their mean and standard deviation.
"""

from typing import List

import numpy as np

from sonicprint.core.descriptor_base import BaseAnalyzer, Normalize
from sonicprint.core.dsp import PhaseVocoder, geometric_mean


class SpectralDesc(Normalize):
    """
    Streaming spectral shape accumulator.

    Centroid and rolloff are normalized against [0, sample_rate / 2];
    flatness is already in [0, 1] and is remapped directly.
    """

    WINDOW_SIZE: int = 512
    HOP_SIZE: int = WINDOW_SIZE // 4
    MIN_VALUE: float = 0.0
    ROLLOFF_ENERGY: float = 0.95

    def __init__(self, sample_rate: int):
        self.sample_rate = sample_rate
        self.centroids: List[float] = []
        self.rolloffs: List[float] = []
        self.flatnesses: List[float] = []
        self._pvoc = PhaseVocoder(self.WINDOW_SIZE, self.HOP_SIZE)
        self._bins = np.arange(self.WINDOW_SIZE // 2 + 1)

    @property
    def MAX_VALUE(self) -> float:
        return self.sample_rate / 2

    def do_(self, chunk: np.ndarray) -> None:
        spectrum = self._pvoc.process(chunk)

        self.centroids.append(self._bin_to_freq(self._centroid_bin(spectrum)))
        self.rolloffs.append(self._bin_to_freq(self._rolloff_bin(spectrum)))

        geo_mean = geometric_mean(spectrum)
        if geo_mean == 0:
            self.flatnesses.append(0.0)
        else:
            self.flatnesses.append(geo_mean / float(np.mean(spectrum)))

    def get_centroid(self) -> List[float]:
        """[mean, standard deviation] of the centroid, normalized."""
        return self._mean_and_std(self.centroids)

    def get_rolloff(self) -> List[float]:
        """[mean, standard deviation] of the rolloff, normalized."""
        return self._mean_and_std(self.rolloffs)

    def get_flatness(self) -> List[float]:
        """[mean, standard deviation] of the flatness, mapped from [0, 1]."""
        values = np.asarray(self.flatnesses)
        return [
            2 * float(np.mean(values)) - 1,
            2 * float(np.std(values)) - 1,
        ]

    def _mean_and_std(self, values: List[float]) -> List[float]:
        values = np.asarray(values)
        return [
            self.normalize(float(np.mean(values))),
            self.normalize(float(np.std(values))),
        ]

    def _centroid_bin(self, spectrum: np.ndarray) -> float:
        total = np.sum(spectrum)
        if total == 0:
            return 0.0
        return float(np.dot(self._bins, spectrum) / total)

    def _rolloff_bin(self, spectrum: np.ndarray) -> float:
        """First bin at which the cumulative energy reaches 95% of the total."""
        energy = np.cumsum(np.square(spectrum))
        if energy[-1] == 0:
            return 0.0
        index = int(np.searchsorted(energy, self.ROLLOFF_ENERGY * energy[-1]))
        return float(min(index, self.WINDOW_SIZE // 2))

    def _bin_to_freq(self, bin_index: float) -> float:
        return bin_index * self.sample_rate / self.WINDOW_SIZE


class SpectralAnalyzer(BaseAnalyzer[List[float]]):
    """
    Feeds a whole buffer hop by hop through a SpectralDesc.

    Returns [centroid mean, centroid std, rolloff mean, rolloff std,
    flatness mean, flatness std].
    """

    def __init__(self, sample_rate: int):
        super().__init__("spectral", "1.0.0", sample_rate)

    def _analyze_impl(self, samples: np.ndarray) -> List[float]:
        desc = SpectralDesc(self.sample_rate)
        hop = SpectralDesc.HOP_SIZE
        for start in range(0, len(samples) - hop + 1, hop):
            desc.do_(samples[start:start + hop])
        return desc.get_centroid() + desc.get_rolloff() + desc.get_flatness()
