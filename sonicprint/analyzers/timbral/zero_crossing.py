"""
Zero-crossing rate descriptor.
"""

from typing import List

import numpy as np

from sonicprint.core.descriptor_base import BaseAnalyzer, Normalize
from sonicprint.core.dsp import number_crossings


class ZeroCrossingRateDesc(Normalize):
    """Accumulates crossings and sample counts over any number of windows."""

    MIN_VALUE: float = 0.0
    MAX_VALUE: float = 1.0

    def __init__(self, sample_rate: int):
        self.sample_rate = sample_rate
        self.crossings_sum = 0
        self.samples_checked = 0

    def do_(self, chunk: np.ndarray) -> None:
        self.crossings_sum += number_crossings(chunk)
        self.samples_checked += len(chunk)

    def get_value(self) -> float:
        if self.samples_checked == 0:
            return -1.0
        return self.normalize(self.crossings_sum / self.samples_checked)


class ZeroCrossingRateAnalyzer(BaseAnalyzer[List[float]]):
    """Counts crossings over the whole buffer in a single window."""

    def __init__(self, sample_rate: int):
        super().__init__("zcr", "1.0.0", sample_rate)

    def _analyze_impl(self, samples: np.ndarray) -> List[float]:
        desc = ZeroCrossingRateDesc(self.sample_rate)
        desc.do_(samples)
        return [desc.get_value()]
