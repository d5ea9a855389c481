# Copyright (c) 2026 Huewise
# SPDX-License-Identifier: MIT

"""
Generalized-mean aggregation of a distance multiset.

A palette's distinctness is summarized by combining all its pairwise
distances into one scalar. Means below the arithmetic mean (harmonic,
power with p < 0, minimum) are dominated by the closest pair.
"""

from __future__ import annotations

from typing import Optional, Union

import numpy as np
from numpy.typing import ArrayLike

from huewise.schema.types import MeanKind


# Floor applied to every value before aggregation
EPSILON = 1e-9

# Exponent used by power and Lehmer means when none is given
DEFAULT_EXPONENT = -2.0


def _floored(values: ArrayLike) -> np.ndarray:
    arr = np.asarray(values, dtype=np.float64).ravel()
    arr = arr[np.isfinite(arr)]
    return np.maximum(arr, EPSILON)


def _minimum(v: np.ndarray, p: float) -> float:
    return float(np.min(v))


def _arithmetic(v: np.ndarray, p: float) -> float:
    return float(np.mean(v))


def _quadratic(v: np.ndarray, p: float) -> float:
    return float(np.sqrt(np.mean(v * v)))


def _geometric(v: np.ndarray, p: float) -> float:
    return float(np.exp(np.mean(np.log(v))))


def _harmonic(v: np.ndarray, p: float) -> float:
    return float(v.size / np.sum(1.0 / v))


def _power(v: np.ndarray, p: float) -> float:
    if abs(p) < 1e-12:
        return _geometric(v, p)
    return float(np.power(np.mean(np.power(v, p)), 1.0 / p))


def _lehmer(v: np.ndarray, p: float) -> float:
    return float(np.sum(np.power(v, p + 1.0)) / np.sum(np.power(v, p)))


_MEANS = {
    MeanKind.MINIMUM: _minimum,
    MeanKind.ARITHMETIC: _arithmetic,
    MeanKind.QUADRATIC: _quadratic,
    MeanKind.GEOMETRIC: _geometric,
    MeanKind.HARMONIC: _harmonic,
    MeanKind.POWER: _power,
    MeanKind.LEHMER: _lehmer,
}


def aggregate_distances(
    values: ArrayLike,
    kind: Union[MeanKind, str] = MeanKind.HARMONIC,
    p: Optional[float] = None,
) -> float:
    """
    Reduce a distance multiset to one scalar.

    Non-finite values are dropped and the rest floored to ``EPSILON``,
    so no mean ever divides by zero.

    Args:
        values: Distances, any shape
        kind: Which generalized mean to take
        p: Exponent for POWER and LEHMER (default -2); ignored otherwise

    Returns:
        The aggregate, or 0.0 when no finite values remain

    Example:
        >>> aggregate_distances([1.0, 2.0, 4.0], "geometric")
        2.0
    """
    kind = MeanKind.parse(kind)
    v = _floored(values)
    if v.size == 0:
        return 0.0
    exponent = DEFAULT_EXPONENT if p is None else float(p)
    return _MEANS[kind](v, exponent)
