"""
Numeric utilities shared by the descriptors.

Reflect padding, a Hann-windowed magnitude STFT, a sliding phase-vocoder
framer, a geometric mean that survives long products, Hz to octave
conversion and zero-crossing counting.
"""

from typing import Sequence, Union

import librosa
import numpy as np

ArrayLike = Union[np.ndarray, Sequence[float]]

# Frames transformed per FFT call in stft(); bounds peak memory on long songs
STFT_BLOCK_FRAMES: int = 256


def reflect_pad(array: ArrayLike, pad: int) -> np.ndarray:
    """
    Mirror ``pad`` samples at both edges, excluding the edge sample itself.

    Example:
        reflect_pad([0, 1, 2, 3, 4, 5], 3) -> [3, 2, 1, 0, 1, 2, 3, 4, 5, 4, 3, 2]
    """
    return np.pad(np.asarray(array), pad, mode="reflect")


def hann_window(window_length: int) -> np.ndarray:
    """Periodic Hann window (0.5 - 0.5 cos(2 pi n / N) for n < N)."""
    return librosa.filters.get_window("hann", window_length, fftbins=True)


def stft(signal: ArrayLike, window_length: int, hop_length: int) -> np.ndarray:
    """
    Magnitude short-time Fourier transform.

    The signal is reflect-padded by ``window_length // 2`` on each side, then
    framed with a sliding window of ``window_length`` and step ``hop_length``.

    Args:
        signal: Mono samples
        window_length: FFT size and Hann window length
        hop_length: Step between successive frames

    Returns:
        Array of shape (window_length // 2 + 1, ceil(len(signal) / hop_length))
    """
    signal = np.asarray(signal, dtype=np.float64)
    n_bins = window_length // 2 + 1
    n_frames = -(-len(signal) // hop_length)

    if n_frames == 0:
        return np.zeros((n_bins, 0))

    padded = reflect_pad(signal, window_length // 2)
    frames = librosa.util.frame(padded, frame_length=window_length, hop_length=hop_length)
    frames = frames[:, :n_frames]
    window = hann_window(window_length)[:, np.newaxis]

    spectrum = np.empty((n_bins, frames.shape[1]))
    for start in range(0, frames.shape[1], STFT_BLOCK_FRAMES):
        stop = start + STFT_BLOCK_FRAMES
        spectrum[:, start:stop] = np.abs(np.fft.rfft(frames[:, start:stop] * window, axis=0))

    return spectrum


class PhaseVocoder:
    """
    Sliding framer producing one magnitude spectrum per hop.

    Keeps the last ``window_size`` samples; every call to process() shifts in
    exactly ``hop_size`` new samples and returns the magnitude of the
    Hann-windowed FFT of the whole buffer. The buffer starts out silent.
    """

    def __init__(self, window_size: int, hop_size: int):
        if hop_size <= 0 or hop_size > window_size:
            raise ValueError(
                f"hop size must be in (0, {window_size}], got {hop_size}"
            )
        self.window_size = window_size
        self.hop_size = hop_size
        self._window = hann_window(window_size)
        self._buffer = np.zeros(window_size)

    @property
    def frame(self) -> np.ndarray:
        """The current (unwindowed) window of samples."""
        view = self._buffer.view()
        view.flags.writeable = False
        return view

    def process(self, chunk: ArrayLike) -> np.ndarray:
        chunk = np.asarray(chunk, dtype=np.float64)
        if chunk.shape != (self.hop_size,):
            raise ValueError(
                f"expected {self.hop_size} samples per hop, got {chunk.shape[0]}"
            )
        self._buffer[:-self.hop_size] = self._buffer[self.hop_size:]
        self._buffer[-self.hop_size:] = chunk
        return np.abs(np.fft.rfft(self._buffer * self._window))


def mean(values: ArrayLike) -> float:
    return float(np.mean(np.asarray(values, dtype=np.float64)))


def geometric_mean(values: ArrayLike) -> float:
    """
    Geometric mean computed from separate mantissa and exponent sums.

    Multiplying hundreds of spectral magnitudes directly under- or overflows;
    frexp splits every value into mantissa in [0.5, 1) and integer exponent,
    so the log of the product is the sum of both parts.

    Returns:
        0.0 if any value is exactly zero or the input is empty
    """
    values = np.abs(np.asarray(values, dtype=np.float64))
    if values.size == 0 or np.any(values == 0):
        return 0.0

    mantissas, exponents = np.frexp(values)
    log2_sum = np.sum(np.log2(mantissas)) + np.sum(exponents, dtype=np.int64)
    return float(np.exp2(log2_sum / values.size))


def hz_to_octs(
    frequencies: ArrayLike, tuning: float, bins_per_octave: int
) -> np.ndarray:
    """
    Convert frequencies in Hz to octave numbers.

    Octave 0 starts at A0 (27.5 Hz) shifted by the fractional tuning offset
    ``tuning`` expressed in bins of ``bins_per_octave``.
    """
    a440 = 440.0 * 2.0 ** (tuning / bins_per_octave)
    frequencies = np.asarray(frequencies, dtype=np.float64)
    return np.log2(frequencies / (a440 / 16.0))


def number_crossings(samples: ArrayLike) -> int:
    """
    Count polarity flips between consecutive samples.

    A sample is positive when strictly greater than zero, so zeros count as
    negative. The polarity of the first sample is the starting state.
    """
    positive = np.asarray(samples) > 0
    if positive.size < 2:
        return 0
    return int(np.count_nonzero(positive[1:] != positive[:-1]))
