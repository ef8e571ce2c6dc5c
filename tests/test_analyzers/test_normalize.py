"""Tests for the shared range normalization of every descriptor."""

import pytest

from conftest import SAMPLE_RATE
from sonicprint.analyzers import (
    BPMDesc,
    ChromaDesc,
    LoudnessDesc,
    SpectralDesc,
    ZeroCrossingRateDesc,
)

DESCRIPTORS = [BPMDesc, SpectralDesc, ZeroCrossingRateDesc, LoudnessDesc, ChromaDesc]


class TestNormalize:
    @pytest.mark.parametrize("desc_class", DESCRIPTORS)
    def test_range_ends_are_exact(self, desc_class):
        desc = desc_class(SAMPLE_RATE)
        assert desc.normalize(desc.MIN_VALUE) == -1.0
        assert desc.normalize(desc.MAX_VALUE) == 1.0

    @pytest.mark.parametrize("desc_class", DESCRIPTORS)
    def test_midpoint_maps_to_zero(self, desc_class):
        desc = desc_class(SAMPLE_RATE)
        midpoint = (desc.MIN_VALUE + desc.MAX_VALUE) / 2
        assert desc.normalize(midpoint) == pytest.approx(0.0, abs=1e-12)

    def test_chroma_range(self):
        desc = ChromaDesc(SAMPLE_RATE)
        assert (desc.MIN_VALUE, desc.MAX_VALUE) == (0.0, 0.12)

    def test_spectral_range_follows_sample_rate(self):
        assert SpectralDesc(10).MAX_VALUE == 5.0
        assert SpectralDesc(SAMPLE_RATE).MAX_VALUE == 11025.0
