"""
Tuning estimation for the chroma descriptor.

Pitch peaks are picked from a magnitude spectrogram with parabolic
interpolation, folded into fractional semitones and histogrammed; the
most common deviation is the tuning offset.
"""

from typing import Tuple

import numpy as np

from sonicprint.core.dsp import hz_to_octs
from sonicprint.utils.errors import AnalysisError

PIP_FMIN: float = 150.0
PIP_FMAX: float = 4000.0
PIP_THRESHOLD: float = 0.1

_TINY = np.finfo(np.float64).tiny


def pip_track(
    sample_rate: int, spectrum: np.ndarray, n_fft: int
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Parabolic-interpolated pitch peaks of a magnitude spectrogram.

    Only bins with frequency in [150, min(4000, sample_rate / 2)) are
    searched. A bin is a peak when it exceeds 0.1 times the maximum of its
    column, is strictly greater than the bin below it and at least as large
    as the bin above it.

    Args:
        sample_rate: Sample rate of the analyzed signal
        spectrum: Array of shape (n_fft // 2 + 1, frames)
        n_fft: FFT size used to compute ``spectrum``

    Returns:
        (pitches in Hz, interpolated magnitudes), in row-major peak order

    Raises:
        AnalysisError: If no FFT bin falls in the search range
    """
    spectrum = np.asarray(spectrum, dtype=np.float64)
    fmax = min(PIP_FMAX, sample_rate / 2)
    fft_freqs = np.linspace(0, sample_rate / 2, 1 + n_fft // 2)
    freq_mask = (PIP_FMIN <= fft_freqs) & (fft_freqs < fmax)

    in_range = np.flatnonzero(freq_mask)
    if in_range.size == 0:
        raise AnalysisError(
            "no frequency bins in the pitch tracking range",
            analyzer_name="chroma",
        )
    beginning, end = in_range[0], in_range[-1]

    ref_value = PIP_THRESHOLD * np.max(spectrum, axis=0)

    before = spectrum[beginning:end - 3]
    elem = spectrum[beginning + 1:end - 2]
    after = spectrum[beginning + 2:end - 1]

    is_peak = (elem > ref_value) & (after <= elem) & (before < elem)
    rows, cols = np.nonzero(is_peak)
    before, elem, after = before[rows, cols], elem[rows, cols], after[rows, cols]

    avg = 0.5 * (after - before)
    shift = 2 * elem - after - before
    # Near-flat peaks: nudge the denominator instead of dropping the peak
    shift = np.where(np.abs(shift) < _TINY, shift + 1, shift)
    shift = avg / shift

    pitches = (rows + beginning + 1 + shift) * sample_rate / n_fft
    magnitudes = elem + 0.5 * avg * shift
    return pitches, magnitudes


def pitch_tuning(
    frequencies: np.ndarray, resolution: float, bins_per_octave: int
) -> float:
    """
    Most frequent deviation of ``frequencies`` from the 12-TET grid.

    Args:
        frequencies: Pitches in Hz
        resolution: Histogram bin width, in fractions of a bin
        bins_per_octave: Number of bins per octave

    Returns:
        Tuning offset in fractions of a bin, in [-0.5, 0.5); 0 if no input
    """
    frequencies = np.asarray(frequencies, dtype=np.float64)
    if frequencies.size == 0:
        return 0.0

    residual = (bins_per_octave * hz_to_octs(frequencies, 0.0, 12)) % 1.0
    residual[residual >= 0.5] -= 1.0

    n_bins = int(np.ceil(1.0 / resolution))
    indexes = np.clip(((residual + 0.5) / resolution).astype(int), 0, n_bins - 1)
    counts = np.bincount(indexes, minlength=n_bins)

    return (-50 + 100 * resolution * int(np.argmax(counts))) / 100


def estimate_tuning(
    sample_rate: int,
    spectrum: np.ndarray,
    n_fft: int,
    resolution: float = 0.01,
    bins_per_octave: int = 12,
) -> float:
    """
    Estimate the tuning offset of a magnitude spectrogram.

    Keeps pitch peaks whose magnitude reaches the median magnitude of all
    peaks, then histograms them with pitch_tuning().

    Returns:
        Tuning offset in fractions of a bin; 0 when no pitch is found
    """
    pitches, magnitudes = pip_track(sample_rate, spectrum, n_fft)

    positive = pitches > 0
    pitches, magnitudes = pitches[positive], magnitudes[positive]
    if pitches.size == 0:
        return 0.0

    threshold = np.median(magnitudes)
    return pitch_tuning(pitches[magnitudes >= threshold], resolution, bins_per_octave)
