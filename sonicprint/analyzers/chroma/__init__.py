"""
Chroma subsystem: tuning estimation, filter bank and interval features.
"""

from sonicprint.analyzers.chroma.chroma import ChromaAnalyzer, ChromaDesc
from sonicprint.analyzers.chroma.filters import chroma_filter, chroma_stft
from sonicprint.analyzers.chroma.intervals import (
    chroma_interval_features,
    extract_interval_features,
    normalize_feature_sequence,
)
from sonicprint.analyzers.chroma.tuning import estimate_tuning, pip_track, pitch_tuning

__all__ = [
    "ChromaAnalyzer",
    "ChromaDesc",
    "chroma_filter",
    "chroma_stft",
    "chroma_interval_features",
    "extract_interval_features",
    "normalize_feature_sequence",
    "estimate_tuning",
    "pip_track",
    "pitch_tuning",
]
