# Copyright (c) 2026 Huewise
# SPDX-License-Identifier: MIT

"""
How resolvable a palette is: pairwise distances, nearest neighbours and
just-noticeable-difference labels.
"""

from __future__ import annotations

from typing import Union

import numpy as np
from numpy.typing import ArrayLike, NDArray

from huewise.color.distance import distance_between_coords
from huewise.schema.types import DistanceMetric


# Just-noticeable difference per metric, in that metric's units
_JND = {
    DistanceMetric.DE2000: 1.0,
    DistanceMetric.LAB76: 2.3,
    DistanceMetric.OKLAB76: 0.023,
    DistanceMetric.CAM02UCS: 1.0,
    DistanceMetric.CAM16UCS: 1.0,
    DistanceMetric.DEITP: 1.0,
}

# (multiple of JND, label), ascending
DISCRIMINABILITY_LEVELS: tuple[tuple[float, str], ...] = (
    (5.0, "awful"),
    (10.0, "poor"),
    (20.0, "fair"),
    (30.0, "good"),
)


def metric_jnd(metric: Union[DistanceMetric, str]) -> float:
    """Just-noticeable difference for ``metric``."""
    return _JND[DistanceMetric.parse(metric, fallback=True)]


def discriminability_label(distance: float, metric: Union[DistanceMetric, str]) -> str:
    """
    Coarse verbal label for a pairwise distance.

    Thresholds are 5, 10, 20 and 30 JNDs.
    """
    jnd = metric_jnd(metric)
    if not np.isfinite(distance):
        return DISCRIMINABILITY_LEVELS[0][1]
    for multiple, label in DISCRIMINABILITY_LEVELS:
        if distance < multiple * jnd:
            return label
    return "great"


def distance_matrix(coords: ArrayLike, metric: Union[DistanceMetric, str]) -> NDArray[np.float64]:
    """
    Symmetric (N, N) matrix of pairwise distances.

    Args:
        coords: (N, 3) coordinates in ``metric``'s space
        metric: Distance metric
    """
    coords = np.asarray(coords, dtype=np.float64).reshape(-1, 3)
    matrix = distance_between_coords(coords[:, None, :], coords[None, :, :], metric)
    np.fill_diagonal(matrix, 0.0)
    return matrix


def nearest_neighbors(matrix: ArrayLike) -> tuple[NDArray[np.intp], NDArray[np.float64]]:
    """
    Index of and distance to each row's closest other entry.

    Returns:
        (indices, distances). With fewer than two entries the index is -1
        and the distance is inf.
    """
    matrix = np.array(matrix, dtype=np.float64)
    n = matrix.shape[0]
    if n < 2:
        return np.full(n, -1, dtype=np.intp), np.full(n, np.inf)
    masked = matrix.copy()
    np.fill_diagonal(masked, np.inf)
    masked[~np.isfinite(masked)] = np.inf
    indices = np.argmin(masked, axis=1)
    return indices, masked[np.arange(n), indices]
