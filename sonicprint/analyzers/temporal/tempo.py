"""
Tempo descriptor.

Spectral-flux onset detection over half-overlapping 512-sample windows.
The running tempo estimate is the strongest lag of librosa's tempogram over
the recent onset-strength history, with no prior pulling it toward any
tempo. When half that lag is at least half as strong the faster tempo wins.
Every detected onset records the current estimate.
"""

import logging
from collections import deque
from typing import List

import librosa
import numpy as np

from sonicprint.core.descriptor_base import BaseAnalyzer, Normalize
from sonicprint.core.dsp import PhaseVocoder

logger = logging.getLogger("analyzer.tempo")


class BPMDesc(Normalize):
    """
    Streaming tempo accumulator.

    do_() takes HOP_SIZE new samples at a time; the phase vocoder turns
    them into WINDOW_SIZE windows overlapping by half.
    """

    WINDOW_SIZE: int = 512
    HOP_SIZE: int = WINDOW_SIZE // 2
    MIN_VALUE: float = 0.0
    MAX_VALUE: float = 206.0

    # Onset-strength frames kept for tempo estimation (about 12 s at 22050 Hz)
    HISTORY_SIZE: int = 1024
    # Re-estimate the tempo every TEMPO_STEP frames
    TEMPO_STEP: int = 128
    # Frames around a candidate used by the adaptive peak threshold
    PEAK_WINDOW: int = 7
    PEAK_THRESHOLD: float = 0.3
    # Autocorrelation window of the tempogram, in frames
    TEMPOGRAM_SIZE: int = 384
    # Mean tempogram strength below which no periodicity is reported
    MIN_STRENGTH: float = 0.01
    # Relative strength at which half the lag (double tempo) is preferred
    OCTAVE_RATIO: float = 0.5
    # Windows quieter than this are never onsets (dB)
    SILENCE_THRESHOLD: float = -90.0

    def __init__(self, sample_rate: int):
        self.sample_rate = sample_rate
        self.bpms: List[float] = []
        self._pvoc = PhaseVocoder(self.WINDOW_SIZE, self.HOP_SIZE)
        self._previous_spectrum = np.zeros(self.WINDOW_SIZE // 2 + 1)
        self._history: deque = deque(maxlen=self.HISTORY_SIZE)
        self._recent: deque = deque(maxlen=self.PEAK_WINDOW)
        self._recent_loud: deque = deque(maxlen=2)
        self._frames = 0
        self._bpm = 0.0

    def do_(self, chunk: np.ndarray) -> None:
        spectrum = self._pvoc.process(chunk)
        flux = float(np.sum(np.maximum(spectrum - self._previous_spectrum, 0.0)))
        self._previous_spectrum = spectrum

        self._history.append(flux)
        self._recent.append(flux)
        self._recent_loud.append(self._level_db(self._pvoc.frame) > self.SILENCE_THRESHOLD)
        self._frames += 1

        if self._frames % self.TEMPO_STEP == 0:
            self._bpm = self._estimate_bpm()

        if self._is_onset() and self._bpm > 0:
            self.bpms.append(self._bpm)

    def get_value(self) -> float:
        """
        Median of the recorded BPM samples, normalized.

        Returns -1 (the bottom of the range) when no onset was detected.
        """
        if not self.bpms:
            logger.warning("No onset detected, returning the minimum tempo")
            return -1.0
        return self.normalize(float(np.median(self.bpms)))

    def _is_onset(self) -> bool:
        """
        Peak-pick the previous frame, one frame of look-ahead.

        The candidate must be a local maximum, above the median plus a
        fraction of the mean of the surrounding frames, and not silent.
        """
        if len(self._recent) < 3 or not self._recent_loud[0]:
            return False

        recent = np.asarray(self._recent)
        before, candidate, after = recent[-3], recent[-2], recent[-1]
        if candidate <= 0 or candidate <= before or candidate < after:
            return False

        threshold = np.median(recent) + self.PEAK_THRESHOLD * np.mean(recent)
        return candidate > threshold

    def _estimate_bpm(self) -> float:
        """
        Tempo of the strongest periodicity in the onset history.

        Returns 0 when the history has no periodicity below MAX_VALUE.
        """
        envelope = np.asarray(self._history)
        if not np.any(envelope > 0):
            return 0.0

        tempogram = librosa.feature.tempogram(
            onset_envelope=envelope,
            sr=self.sample_rate,
            hop_length=self.HOP_SIZE,
            win_length=self.TEMPOGRAM_SIZE,
        )
        strength = np.mean(tempogram, axis=1)
        bpms = librosa.tempo_frequencies(
            len(strength), hop_length=self.HOP_SIZE, sr=self.sample_rate
        )
        # Lag 0 is an infinite tempo
        shortest = int(np.argmax(bpms < self.MAX_VALUE))
        if shortest == 0:
            return 0.0

        lag = shortest + int(np.argmax(strength[shortest:]))
        if strength[lag] < self.MIN_STRENGTH:
            return 0.0

        while True:
            middle = int(round(lag / 2))
            candidates = range(max(middle - 1, shortest), min(middle + 2, lag))
            if len(candidates) == 0:
                break
            half = max(candidates, key=lambda k: strength[k])
            if strength[half] < self.OCTAVE_RATIO * strength[lag]:
                break
            lag = half

        bpm = 60.0 * self.sample_rate / (self.HOP_SIZE * self._refine_lag(strength, lag))
        return min(bpm, self.MAX_VALUE)

    @staticmethod
    def _refine_lag(strength: np.ndarray, lag: int) -> float:
        """Parabolic interpolation of the peak at lag."""
        if not 0 < lag < len(strength) - 1:
            return float(lag)
        before, peak, after = strength[lag - 1], strength[lag], strength[lag + 1]
        curvature = before - 2 * peak + after
        if curvature >= 0:
            return float(lag)
        return lag + 0.5 * (before - after) / curvature

    @staticmethod
    def _level_db(chunk: np.ndarray) -> float:
        level = np.mean(np.square(chunk, dtype=np.float64))
        if level <= 0:
            return -np.inf
        return 10 * np.log10(level)


class TempoAnalyzer(BaseAnalyzer[List[float]]):
    """Feeds a whole buffer hop by hop through a BPMDesc."""

    def __init__(self, sample_rate: int):
        super().__init__("tempo", "1.0.0", sample_rate)

    def _analyze_impl(self, samples: np.ndarray) -> List[float]:
        desc = BPMDesc(self.sample_rate)
        hop = BPMDesc.HOP_SIZE
        for start in range(0, len(samples) - hop + 1, hop):
            desc.do_(samples[start:start + hop])
        return [desc.get_value()]
