"""
Interval-class and triad features of a chromagram.

Ten binary pitch-class templates (six dyads, one per interval class, then
major, minor, diminished and augmented triads) are matched against every
frame under all twelve transpositions.
"""

from typing import List

import numpy as np

from sonicprint.core.models import FeaturesVersion

# One column per template, one row per pitch class starting at C
INTERVAL_TEMPLATES = np.array([
    [1, 1, 1, 1, 1, 1, 1, 1, 1, 1],
    [1, 0, 0, 0, 0, 0, 0, 0, 0, 0],
    [0, 1, 0, 0, 0, 0, 0, 0, 0, 0],
    [0, 0, 1, 0, 0, 0, 0, 1, 1, 0],
    [0, 0, 0, 1, 0, 0, 1, 0, 0, 1],
    [0, 0, 0, 0, 1, 0, 0, 0, 0, 0],
    [0, 0, 0, 0, 0, 1, 0, 0, 1, 0],
    [0, 0, 0, 0, 0, 0, 1, 1, 0, 0],
    [0, 0, 0, 0, 0, 0, 0, 0, 0, 1],
    [0, 0, 0, 0, 0, 0, 0, 0, 0, 0],
    [0, 0, 0, 0, 0, 0, 0, 0, 0, 0],
    [0, 0, 0, 0, 0, 0, 0, 0, 0, 0],
], dtype=bool)

DYAD_TEMPLATES: int = 6
CHROMA_EXPONENT: float = 15.0
# Frame sums below this are left unnormalized
NORMALIZE_THRESHOLD: float = 0.0001

_TINY = np.finfo(np.float64).tiny


def normalize_feature_sequence(feature: np.ndarray) -> np.ndarray:
    """L1-normalize every column of ``feature``."""
    feature = np.asarray(feature, dtype=np.float64)
    sums = np.sum(np.abs(feature), axis=0)
    sums[sums < NORMALIZE_THRESHOLD] = 1.0
    return feature / sums


def extract_interval_features(
    chroma: np.ndarray, templates: np.ndarray = INTERVAL_TEMPLATES
) -> np.ndarray:
    """
    Template activations of every frame.

    For each template and each of the 12 rotations, the chroma values of the
    pitch classes in the rotated template are multiplied; the products are
    summed over rotations.

    Args:
        chroma: Array of shape (12, frames)
        templates: Boolean array of shape (12, n_templates)

    Returns:
        Array of shape (n_templates, frames)
    """
    features = np.zeros((templates.shape[1], chroma.shape[1]))
    for index in range(templates.shape[1]):
        template = templates[:, index]
        for shift in range(chroma.shape[0]):
            rows = np.roll(template, shift)
            features[index] += np.prod(chroma[rows], axis=0)
    return features


def chroma_interval_features(chroma: np.ndarray) -> np.ndarray:
    """
    Time-averaged template activations of a chromagram.

    The chromagram is sharpened with exp(15 x) and renormalized first.

    Returns:
        One value per template (10)
    """
    sharpened = normalize_feature_sequence(np.exp(CHROMA_EXPONENT * np.asarray(chroma)))
    return np.mean(extract_interval_features(sharpened), axis=1)


def interval_feature_values(
    interval_features: np.ndarray, version: FeaturesVersion
) -> List[float]:
    """
    Raw chroma feature values laid out for ``version``.

    Version 1 uses the ten template means. Version 2 appends the L2 norm of
    the dyad means, the L2 norm of the triad means and the dyad/triad ratio
    (0 when the triad norm vanishes).
    """
    values = [float(value) for value in interval_features]
    if version == FeaturesVersion.VERSION1:
        return values

    dyad_norm = float(np.linalg.norm(interval_features[:DYAD_TEMPLATES]))
    triad_norm = float(np.linalg.norm(interval_features[DYAD_TEMPLATES:]))
    ratio = dyad_norm / triad_norm if triad_norm >= _TINY else 0.0
    return values + [dyad_norm, triad_norm, ratio]
