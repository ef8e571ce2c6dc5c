"""
Distance metrics between fingerprints.

A metric is any callable taking two fingerprint arrays (as returned by
Analysis.as_array()) and returning a non-negative float.
"""

from typing import Callable, Sequence, Union

import numpy as np

ArrayLike = Union[np.ndarray, Sequence[float]]
DistanceMetric = Callable[[np.ndarray, np.ndarray], float]


def _vectors(a: ArrayLike, b: ArrayLike):
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    if a.shape != b.shape or a.ndim != 1:
        raise ValueError(f"cannot compare fingerprints of shapes {a.shape} and {b.shape}")
    return a, b


def mahalanobis_distance(a: ArrayLike, b: ArrayLike, m: np.ndarray) -> float:
    """
    sqrt((a - b)^T M (a - b)).

    ``m`` should be positive semi-definite; small negative quadratic forms
    from rounding are clipped to 0.
    """
    a, b = _vectors(a, b)
    diff = a - b
    return float(np.sqrt(max(float(diff @ np.asarray(m) @ diff), 0.0)))


def mahalanobis_distance_builder(m: np.ndarray) -> DistanceMetric:
    """
    Metric using a fixed matrix ``m``, for example one learned from
    user feedback.

    Raises:
        ValueError: If ``m`` is not square
    """
    m = np.array(m, dtype=np.float64)
    if m.ndim != 2 or m.shape[0] != m.shape[1]:
        raise ValueError(f"distance matrix must be square, got shape {m.shape}")

    def distance(a: ArrayLike, b: ArrayLike) -> float:
        return mahalanobis_distance(a, b, m)

    return distance


def euclidean_distance(a: ArrayLike, b: ArrayLike) -> float:
    """Mahalanobis distance with the identity matrix."""
    a, b = _vectors(a, b)
    diff = a - b
    return float(np.sqrt(diff @ diff))


def cosine_distance(a: ArrayLike, b: ArrayLike) -> float:
    """
    1 - cos(a, b).

    A zero vector has no direction; its distance to anything is 1.
    """
    a, b = _vectors(a, b)
    norms = np.linalg.norm(a) * np.linalg.norm(b)
    if norms == 0:
        return 1.0
    return float(1 - (a @ b) / norms)


def set_distance(
    reference_set: Sequence[ArrayLike],
    candidate: ArrayLike,
    distance: DistanceMetric = euclidean_distance,
) -> float:
    """
    Distance from ``candidate`` to the nearest member of ``reference_set``.

    Raises:
        ValueError: If ``reference_set`` is empty
    """
    if len(reference_set) == 0:
        raise ValueError("reference set must contain at least one fingerprint")
    return min(distance(reference, candidate) for reference in reference_set)


METRICS = {
    "euclidean": euclidean_distance,
    "cosine": cosine_distance,
}


def get_metric(name: str) -> DistanceMetric:
    """
    Raises:
        ValueError: If ``name`` is not a known metric
    """
    try:
        return METRICS[name]
    except KeyError:
        raise ValueError(
            f"Unknown distance metric {name!r}, expected one of {', '.join(METRICS)}"
        ) from None
