"""
Descriptor analyzers, one per feature family of an Analysis.
"""

from sonicprint.analyzers.chroma.chroma import ChromaAnalyzer, ChromaDesc
from sonicprint.analyzers.loudness.loudness import LoudnessAnalyzer, LoudnessDesc
from sonicprint.analyzers.temporal.tempo import BPMDesc, TempoAnalyzer
from sonicprint.analyzers.timbral.spectral import SpectralAnalyzer, SpectralDesc
from sonicprint.analyzers.timbral.zero_crossing import (
    ZeroCrossingRateAnalyzer,
    ZeroCrossingRateDesc,
)

__all__ = [
    "BPMDesc",
    "TempoAnalyzer",
    "SpectralDesc",
    "SpectralAnalyzer",
    "ZeroCrossingRateDesc",
    "ZeroCrossingRateAnalyzer",
    "LoudnessDesc",
    "LoudnessAnalyzer",
    "ChromaDesc",
    "ChromaAnalyzer",
]
