"""
Chroma filter bank and chroma projection.
"""

import numpy as np

from sonicprint.core.dsp import hz_to_octs

CHROMA_CENTER_OCTAVE: float = 5.0
CHROMA_OCTAVE_WIDTH: float = 2.0

_TINY = np.finfo(np.float64).tiny


def chroma_filter(
    sample_rate: int, n_fft: int, n_chroma: int, tuning: float
) -> np.ndarray:
    """
    Build the chroma filter bank mapping FFT bins onto pitch classes.

    Every FFT bin contributes to the chroma bins around its pitch class with
    a Gaussian falloff. Columns are L2-normalized, then weighted by a
    Gaussian over octave position centred on octave 5, two octaves wide.
    Rows are rolled so that row 0 is C.

    Args:
        sample_rate: Sample rate of the analyzed signal
        n_fft: FFT size
        n_chroma: Number of chroma bins
        tuning: Tuning offset in fractions of a chroma bin

    Returns:
        Array of shape (n_chroma, n_fft // 2 + 1)
    """
    frequencies = np.linspace(0, sample_rate, n_fft + 1)
    with np.errstate(divide="ignore"):
        freq_bins = n_chroma * hz_to_octs(frequencies, tuning, n_chroma)
    # DC has no pitch: put it 1.5 octaves below the first bin
    freq_bins[0] = freq_bins[1] - 1.5 * n_chroma

    binwidth_bins = np.ones_like(freq_bins)
    binwidth_bins[:-1] = np.maximum(np.diff(freq_bins), 1.0)

    n_chroma2 = np.floor(n_chroma / 2 + 0.5)
    distance = freq_bins[np.newaxis, :] - np.arange(n_chroma)[:, np.newaxis]
    distance = np.remainder(distance + n_chroma2 + 10 * n_chroma, n_chroma) - n_chroma2

    wts = np.exp(-0.5 * (2 * distance / binwidth_bins) ** 2)

    norms = np.linalg.norm(wts, axis=0)
    norms[norms < _TINY] = 1.0
    wts /= norms

    wts *= np.exp(
        -0.5 * ((freq_bins / n_chroma - CHROMA_CENTER_OCTAVE) / CHROMA_OCTAVE_WIDTH) ** 2
    )

    wts = np.roll(wts, -3, axis=0)
    return np.ascontiguousarray(wts[:, :1 + n_fft // 2])


def chroma_stft(
    sample_rate: int,
    spectrum: np.ndarray,
    n_fft: int,
    n_chroma: int,
    tuning: float,
) -> np.ndarray:
    """
    Project a magnitude spectrogram onto chroma bins.

    The spectrum is squared into power, multiplied by the filter bank and
    every frame is L1-normalized (all-zero frames stay zero).

    Returns:
        Array of shape (n_chroma, frames)
    """
    power = np.square(np.asarray(spectrum, dtype=np.float64))
    raw_chroma = chroma_filter(sample_rate, n_fft, n_chroma, tuning) @ power

    sums = np.sum(np.abs(raw_chroma), axis=0)
    sums[sums < _TINY] = 1.0
    return raw_chroma / sums
