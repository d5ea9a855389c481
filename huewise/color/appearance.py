# Copyright (c) 2026 Huewise
# SPDX-License-Identifier: MIT

"""
Color appearance models: CAM02-UCS and CAM16-UCS.

Forward transform only (XYZ → uniform color space):

    XYZ → CAT (CAT02 / CAT16) → degree-of-adaptation scaling
        → post-adaptation compression → A, J, a, b, h → M → (J', a', b')

References:
- CIECAM02: CIE 159:2004
- CAM16: Li et al. (2017)
- UCS mapping: Luo, Cui & Li (2006)

Viewing conditions default to an "average surround" sRGB-like preset.
This is a fixed simplification, not a colorimetric auto-detection.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache
from typing import Optional, Union

import numpy as np
from numpy.typing import ArrayLike, NDArray

from huewise.color.colorspace import D65_WHITE


class AppearanceModel(Enum):
    """Chromatic adaptation family used by the forward model."""
    CAM02 = "cam02"
    CAM16 = "cam16"


# =============================================================================
# Matrices
# =============================================================================

_CAT02 = np.array([
    [0.7328, 0.4296, -0.1624],
    [-0.7036, 1.6975, 0.0061],
    [0.0030, 0.0136, 0.9834],
], dtype=np.float64)

_CAT16 = np.array([
    [0.401288, 0.650173, -0.051461],
    [-0.250268, 1.204414, 0.045854],
    [-0.002079, 0.048952, 0.953127],
], dtype=np.float64)

# Hunt-Pointer-Estevez cone space (CIECAM02 only)
_HPE = np.array([
    [0.38971, 0.68898, -0.07868],
    [-0.22981, 1.18340, 0.04641],
    [0.0, 0.0, 1.0],
], dtype=np.float64)

_CAM02_POST = _HPE @ np.linalg.inv(_CAT02)

# UCS coefficients
_UCS_C1 = 0.007
_UCS_C2 = 0.0228


# =============================================================================
# Viewing conditions
# =============================================================================


@dataclass(frozen=True, slots=True)
class ViewingConditions:
    """
    Surround and adaptation parameters for the appearance model.

    Attributes:
        white: Reference white XYZ on the 0-100 scale
        adapting_luminance: LA in cd/m²
        background_luminance: Yb, relative luminance of the background
        surround_f: F (average surround 1.0)
        surround_c: c (average surround 0.69)
        surround_nc: Nc (average surround 1.0)
    """
    white: tuple[float, float, float] = field(
        default=tuple(float(v) * 100.0 for v in D65_WHITE)
    )
    adapting_luminance: float = 64.0
    background_luminance: float = 20.0
    surround_f: float = 1.0
    surround_c: float = 0.69
    surround_nc: float = 1.0

    def __post_init__(self) -> None:
        if self.adapting_luminance <= 0:
            raise ValueError("adapting_luminance must be positive")
        if self.background_luminance <= 0:
            raise ValueError("background_luminance must be positive")


DEFAULT_VIEWING_CONDITIONS = ViewingConditions()


@dataclass(frozen=True, slots=True)
class _Derived:
    """Per-(model, conditions) constants shared by every sample."""
    cat: NDArray[np.float64]
    post: Optional[NDArray[np.float64]]
    scale: NDArray[np.float64]
    fl: float
    n: float
    nbb: float
    ncb: float
    z: float
    aw: float
    c: float
    nc: float


def _post_adapt(values: NDArray[np.float64], fl: float) -> NDArray[np.float64]:
    t = np.sign(values) * np.power(np.abs(fl * values / 100.0), 0.42)
    return 400.0 * t / (np.abs(t) + 27.13) + 0.1


def _to_cone_space(
    xyz100: NDArray[np.float64],
    cat: NDArray[np.float64],
    post: Optional[NDArray[np.float64]],
    scale: NDArray[np.float64],
) -> NDArray[np.float64]:
    rgb = np.einsum("...j,ij->...i", xyz100, cat) * scale
    if post is not None:
        rgb = np.einsum("...j,ij->...i", rgb, post)
    return rgb


def _achromatic(rgb_a: NDArray[np.float64], nbb: float) -> NDArray[np.float64]:
    return (2.0 * rgb_a[..., 0] + rgb_a[..., 1] + 0.05 * rgb_a[..., 2] - 0.305) * nbb


def _derive(model: AppearanceModel, vc: ViewingConditions) -> _Derived:
    cat = _CAT02 if model is AppearanceModel.CAM02 else _CAT16
    post = _CAM02_POST if model is AppearanceModel.CAM02 else None

    white = np.asarray(vc.white, dtype=np.float64)
    yw = white[1]
    la = vc.adapting_luminance

    d = vc.surround_f * (1.0 - (1.0 / 3.6) * np.exp((-la - 42.0) / 92.0))
    d = float(np.clip(d, 0.0, 1.0))

    n = vc.background_luminance / yw
    k = 1.0 / (5.0 * la + 1.0)
    k4 = k ** 4
    fl = 0.2 * k4 * (5.0 * la) + 0.1 * (1.0 - k4) ** 2 * np.cbrt(5.0 * la)
    nbb = 0.725 * (1.0 / n) ** 0.2
    z = 1.48 + np.sqrt(n)

    rgb_w = cat @ white
    scale = d * yw / rgb_w + 1.0 - d

    white_a = _post_adapt(_to_cone_space(white, cat, post, scale), fl)
    aw = float(_achromatic(white_a, nbb))

    return _Derived(
        cat=cat, post=post, scale=scale,
        fl=float(fl), n=float(n), nbb=float(nbb), ncb=float(nbb),
        z=float(z), aw=aw, c=vc.surround_c, nc=vc.surround_nc,
    )


_derived_for = lru_cache(maxsize=16)(_derive)


# =============================================================================
# Forward model
# =============================================================================


def xyz_to_jmh(
    xyz: ArrayLike,
    model: Union[AppearanceModel, str] = AppearanceModel.CAM16,
    viewing_conditions: Optional[ViewingConditions] = None,
) -> NDArray[np.float64]:
    """
    Lightness J, colorfulness M and hue angle h (degrees) for XYZ.

    Args:
        xyz: Relative XYZ (Y in [0, 1]), shape (..., 3)
        model: CAM02 or CAM16 adaptation
        viewing_conditions: Defaults to the average-surround preset

    Returns:
        Array of shape (..., 3) with (J, M, h)
    """
    model = AppearanceModel(model)
    vc = viewing_conditions or DEFAULT_VIEWING_CONDITIONS
    dv = _derived_for(model, vc)

    xyz100 = np.asarray(xyz, dtype=np.float64) * 100.0
    rgb_a = _post_adapt(_to_cone_space(xyz100, dv.cat, dv.post, dv.scale), dv.fl)
    r, g, b = rgb_a[..., 0], rgb_a[..., 1], rgb_a[..., 2]

    big_a = np.maximum(_achromatic(rgb_a, dv.nbb), 0.0)
    j = 100.0 * np.power(big_a / dv.aw, dv.c * dv.z)

    a = r - 12.0 * g / 11.0 + b / 11.0
    bb = (r + g - 2.0 * b) / 9.0
    h_rad = np.arctan2(bb, a)
    h = np.mod(np.degrees(h_rad), 360.0)

    et = 0.25 * (np.cos(np.radians(h) + 2.0) + 3.8)
    denom = r + g + 21.0 * b / 20.0
    safe = np.where(np.abs(denom) < 1e-12, 1e-12, denom)
    t = (50000.0 / 13.0) * dv.nc * dv.ncb * et * np.hypot(a, bb) / safe
    t = np.maximum(t, 0.0)

    c = np.power(t, 0.9) * np.sqrt(j / 100.0) * (1.64 - 0.29 ** dv.n) ** 0.73
    m = c * dv.fl ** 0.25
    return np.stack([j, m, h], axis=-1)


def jmh_to_ucs(jmh: ArrayLike) -> NDArray[np.float64]:
    """Map (J, M, h) to the Euclidean (J', a', b') uniform space."""
    jmh = np.asarray(jmh, dtype=np.float64)
    j, m, h = jmh[..., 0], jmh[..., 1], jmh[..., 2]
    j_prime = (1.0 + 100.0 * _UCS_C1) * j / (1.0 + _UCS_C1 * j)
    m_prime = np.log1p(_UCS_C2 * m) / _UCS_C2
    h_rad = np.radians(h)
    return np.stack([j_prime, m_prime * np.cos(h_rad), m_prime * np.sin(h_rad)], axis=-1)


def xyz_to_cam02_ucs(
    xyz: ArrayLike,
    viewing_conditions: Optional[ViewingConditions] = None,
) -> NDArray[np.float64]:
    """XYZ to CAM02-UCS (J', a', b')."""
    return jmh_to_ucs(xyz_to_jmh(xyz, AppearanceModel.CAM02, viewing_conditions))


def xyz_to_cam16_ucs(
    xyz: ArrayLike,
    viewing_conditions: Optional[ViewingConditions] = None,
) -> NDArray[np.float64]:
    """XYZ to CAM16-UCS (J', a', b')."""
    return jmh_to_ucs(xyz_to_jmh(xyz, AppearanceModel.CAM16, viewing_conditions))
