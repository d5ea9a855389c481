# Copyright (c) 2026 Huewise
# SPDX-License-Identifier: MIT

"""
ICtCp encoding (ITU-R BT.2100) and the ΔE-ITP color difference (BT.2124).

    XYZ → Rec.2020 linear RGB → LMS → PQ inverse EOTF → ICtCp
"""

from __future__ import annotations

import numpy as np
from numpy.typing import ArrayLike, NDArray

from huewise.color.colorspace import xyz_to_gamut
from huewise.schema.types import GamutPreset


# Rec.2020 linear RGB to LMS
_RGB_TO_LMS = np.array([
    [1688.0, 2146.0, 262.0],
    [683.0, 2951.0, 462.0],
    [99.0, 309.0, 3688.0],
], dtype=np.float64) / 4096.0

# PQ-encoded LMS to ICtCp
_LMS_TO_ICTCP = np.array([
    [2048.0, 2048.0, 0.0],
    [6610.0, -13613.0, 7003.0],
    [17933.0, -17390.0, -543.0],
], dtype=np.float64) / 4096.0

# SMPTE ST 2084 constants
PQ_M1 = 2610.0 / 16384.0
PQ_M2 = 2523.0 / 32.0
PQ_C1 = 3424.0 / 4096.0
PQ_C2 = 2413.0 / 128.0
PQ_C3 = 2392.0 / 128.0

PQ_REFERENCE_LUMINANCE = 10000.0


def pq_encode(
    values: ArrayLike,
    peak_luminance: float = PQ_REFERENCE_LUMINANCE,
) -> NDArray[np.float64]:
    """
    PQ inverse EOTF.

    Args:
        values: Relative linear light, 1.0 = ``peak_luminance``
        peak_luminance: Display peak in cd/m² (default 10000)

    Returns:
        Non-linear PQ signal in [0, 1]
    """
    y = np.asarray(values, dtype=np.float64) * (peak_luminance / PQ_REFERENCE_LUMINANCE)
    y = np.clip(y, 0.0, 1.0)
    ym = np.power(y, PQ_M1)
    return np.power((PQ_C1 + PQ_C2 * ym) / (1.0 + PQ_C3 * ym), PQ_M2)


def xyz_to_ictcp(
    xyz: ArrayLike,
    peak_luminance: float = PQ_REFERENCE_LUMINANCE,
) -> NDArray[np.float64]:
    """
    Convert XYZ (Y in [0, 1]) to ICtCp.

    Returns:
        Array of shape (..., 3) with (I, Ct, Cp)
    """
    rgb = xyz_to_gamut(xyz, GamutPreset.REC2020)
    lms = np.einsum("...j,ij->...i", rgb, _RGB_TO_LMS)
    lms_p = pq_encode(lms, peak_luminance)
    return np.einsum("...j,ij->...i", lms_p, _LMS_TO_ICTCP)


def delta_e_itp(ictcp1: ArrayLike, ictcp2: ArrayLike) -> NDArray[np.float64]:
    """
    ΔE-ITP between ICtCp coordinates.

    ΔE_ITP = 720 · ‖(ΔI, 0.5·ΔCt, ΔCp)‖
    """
    d = np.asarray(ictcp1, dtype=np.float64) - np.asarray(ictcp2, dtype=np.float64)
    return 720.0 * np.sqrt(d[..., 0] ** 2 + (0.5 * d[..., 1]) ** 2 + d[..., 2] ** 2)
