# Copyright (c) 2026 Huewise
# SPDX-License-Identifier: MIT

"""
Perceptual distance metrics.

Every metric is evaluated in its own coordinate space:

    de2000, lab76  → CIELAB
    oklab76        → OKLab
    cam02ucs       → CAM02-UCS
    cam16ucs       → CAM16-UCS
    deitp          → ICtCp

Use ``metric_coordinates`` to project XYZ into a metric's space once, then
``distance_between_coords`` for any number of pairwise comparisons.
"""

from __future__ import annotations

from typing import Union

import numpy as np
from numpy.typing import ArrayLike, NDArray

from huewise.color.appearance import xyz_to_cam02_ucs, xyz_to_cam16_ucs
from huewise.color.colorspace import hex_to_rgb, srgb_to_xyz, xyz_to_lab, xyz_to_oklab
from huewise.color.ictcp import delta_e_itp, xyz_to_ictcp
from huewise.schema.types import DistanceMetric


MetricLike = Union[DistanceMetric, str]


# =============================================================================
# CIEDE2000
# =============================================================================

_POW25_7 = 25.0 ** 7


def delta_e_2000(lab1: ArrayLike, lab2: ArrayLike) -> NDArray[np.float64]:
    """
    CIEDE2000 color difference (kL = kC = kH = 1).

    Args:
        lab1: CIELAB array of shape (..., 3)
        lab2: CIELAB array broadcastable against ``lab1``

    Returns:
        Array of shape (...) of non-negative differences
    """
    lab1 = np.asarray(lab1, dtype=np.float64)
    lab2 = np.asarray(lab2, dtype=np.float64)
    l1, a1, b1 = lab1[..., 0], lab1[..., 1], lab1[..., 2]
    l2, a2, b2 = lab2[..., 0], lab2[..., 1], lab2[..., 2]

    c1 = np.hypot(a1, b1)
    c2 = np.hypot(a2, b2)
    c_bar7 = ((c1 + c2) / 2.0) ** 7
    g = 0.5 * (1.0 - np.sqrt(c_bar7 / (c_bar7 + _POW25_7)))

    a1p = (1.0 + g) * a1
    a2p = (1.0 + g) * a2
    c1p = np.hypot(a1p, b1)
    c2p = np.hypot(a2p, b2)
    h1p = np.mod(np.degrees(np.arctan2(b1, a1p)), 360.0)
    h2p = np.mod(np.degrees(np.arctan2(b2, a2p)), 360.0)

    d_lp = l2 - l1
    d_cp = c2p - c1p

    chroma_zero = (c1p * c2p) == 0
    dh = h2p - h1p
    dh = np.where(dh > 180.0, dh - 360.0, np.where(dh < -180.0, dh + 360.0, dh))
    dh = np.where(chroma_zero, 0.0, dh)
    d_hp = 2.0 * np.sqrt(c1p * c2p) * np.sin(np.radians(dh) / 2.0)

    l_bar = (l1 + l2) / 2.0
    c_bar_p = (c1p + c2p) / 2.0

    h_sum = h1p + h2p
    h_bar = np.where(
        np.abs(h1p - h2p) <= 180.0,
        h_sum / 2.0,
        np.where(h_sum < 360.0, (h_sum + 360.0) / 2.0, (h_sum - 360.0) / 2.0),
    )
    h_bar = np.where(chroma_zero, h_sum, h_bar)

    t = (
        1.0
        - 0.17 * np.cos(np.radians(h_bar - 30.0))
        + 0.24 * np.cos(np.radians(2.0 * h_bar))
        + 0.32 * np.cos(np.radians(3.0 * h_bar + 6.0))
        - 0.20 * np.cos(np.radians(4.0 * h_bar - 63.0))
    )

    l50 = (l_bar - 50.0) ** 2
    s_l = 1.0 + 0.015 * l50 / np.sqrt(20.0 + l50)
    s_c = 1.0 + 0.045 * c_bar_p
    s_h = 1.0 + 0.015 * c_bar_p * t

    d_theta = 30.0 * np.exp(-(((h_bar - 275.0) / 25.0) ** 2))
    c_bar_p7 = c_bar_p ** 7
    r_c = 2.0 * np.sqrt(c_bar_p7 / (c_bar_p7 + _POW25_7))
    r_t = -np.sin(np.radians(2.0 * d_theta)) * r_c

    lt = d_lp / s_l
    ct = d_cp / s_c
    ht = d_hp / s_h
    return np.sqrt(np.maximum(lt * lt + ct * ct + ht * ht + r_t * ct * ht, 0.0))


# =============================================================================
# Euclidean
# =============================================================================


def euclidean_distance(coords1: ArrayLike, coords2: ArrayLike) -> NDArray[np.float64]:
    """Euclidean distance ‖Δ‖ along the last axis."""
    d = np.asarray(coords1, dtype=np.float64) - np.asarray(coords2, dtype=np.float64)
    return np.sqrt(np.sum(d * d, axis=-1))


# =============================================================================
# Dispatch
# =============================================================================

_COORDINATES = {
    DistanceMetric.DE2000: xyz_to_lab,
    DistanceMetric.LAB76: xyz_to_lab,
    DistanceMetric.OKLAB76: xyz_to_oklab,
    DistanceMetric.CAM02UCS: xyz_to_cam02_ucs,
    DistanceMetric.CAM16UCS: xyz_to_cam16_ucs,
    DistanceMetric.DEITP: xyz_to_ictcp,
}

_DISTANCES = {
    DistanceMetric.DE2000: delta_e_2000,
    DistanceMetric.LAB76: euclidean_distance,
    DistanceMetric.OKLAB76: euclidean_distance,
    DistanceMetric.CAM02UCS: euclidean_distance,
    DistanceMetric.CAM16UCS: euclidean_distance,
    DistanceMetric.DEITP: delta_e_itp,
}


def metric_coordinates(xyz: ArrayLike, metric: MetricLike) -> NDArray[np.float64]:
    """
    Project XYZ (Y in [0, 1]) into the coordinate space of ``metric``.

    An unrecognized metric resolves to DE2000 (Lab coordinates) with a
    logged warning.
    """
    return _COORDINATES[DistanceMetric.parse(metric, fallback=True)](xyz)


def distance_between_coords(
    coords1: ArrayLike,
    coords2: ArrayLike,
    metric: MetricLike,
) -> NDArray[np.float64]:
    """
    Distance between coordinates already expressed in ``metric``'s space.

    Inputs broadcast against each other, so an (N, 1, 3) and a (1, M, 3)
    array yield an (N, M) distance matrix.
    """
    return _DISTANCES[DistanceMetric.parse(metric, fallback=True)](coords1, coords2)


def color_distance(hex1: str, hex2: str, metric: MetricLike = DistanceMetric.DE2000) -> float:
    """
    Perceptual distance between two hex colors.

    Example:
        >>> color_distance("#FF0000", "#FF0000")
        0.0
    """
    metric = DistanceMetric.parse(metric, fallback=True)
    xyz = srgb_to_xyz(np.stack([hex_to_rgb(hex1), hex_to_rgb(hex2)]))
    coords = metric_coordinates(xyz, metric)
    return float(distance_between_coords(coords[0], coords[1], metric))
