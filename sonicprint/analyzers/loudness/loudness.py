"""
Loudness descriptor.

Records the mean power of every 1024-sample window and reports the mean
and standard deviation of those levels in decibels.
"""

from typing import List

import numpy as np

from sonicprint.core.descriptor_base import BaseAnalyzer, Normalize


class LoudnessDesc(Normalize):
    WINDOW_SIZE: int = 1024
    MIN_VALUE: float = -90.0
    MAX_VALUE: float = 0.0
    # Floor applied before converting to dB, maps to MIN_VALUE
    LEVEL_FLOOR: float = 1e-9

    def __init__(self, sample_rate: int):
        self.sample_rate = sample_rate
        self.values: List[float] = []

    def do_(self, chunk: np.ndarray) -> None:
        """Record the linear level (mean of squared samples) of one window."""
        chunk = np.asarray(chunk, dtype=np.float64)
        if chunk.size == 0:
            return
        self.values.append(float(np.mean(np.square(chunk))))

    def get_value(self) -> List[float]:
        """[mean, standard deviation] of the levels, in dB, normalized."""
        if not self.values:
            return [-1.0, -1.0]
        values = np.asarray(self.values)
        mean_level = max(float(np.mean(values)), self.LEVEL_FLOOR)
        std_level = max(float(np.std(values)), self.LEVEL_FLOOR)
        return [
            self.normalize(float(10 * np.log10(mean_level))),
            self.normalize(float(10 * np.log10(std_level))),
        ]


class LoudnessAnalyzer(BaseAnalyzer[List[float]]):
    """Splits a buffer into consecutive windows; the last one may be short."""

    def __init__(self, sample_rate: int):
        super().__init__("loudness", "1.0.0", sample_rate)

    def _analyze_impl(self, samples: np.ndarray) -> List[float]:
        desc = LoudnessDesc(self.sample_rate)
        window = LoudnessDesc.WINDOW_SIZE
        for start in range(0, len(samples), window):
            desc.do_(samples[start:start + window])
        return desc.get_value()
