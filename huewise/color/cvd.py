# Copyright (c) 2026 Huewise
# SPDX-License-Identifier: MIT

"""
Color vision deficiency simulation.

Two models:

- LEGACY: fixed 3×3 matrices per deficiency, linearly interpolated toward
  identity by severity and applied directly to whatever RGB values they
  are given. Existing visual fixtures depend on this exact arithmetic,
  including when it is applied to gamma-encoded values.
- MACHADO2009: the Machado, Oliveira & Fernandes (2009) physiological
  model, a continuous matrix family over severity, applied in linear RGB.
  Matrices come from ``colorspacious``.
"""

from __future__ import annotations

from typing import Union

import numpy as np
from colorspacious import machado_et_al_2009_matrix
from numpy.typing import ArrayLike, NDArray

from huewise.color.colorspace import hex_to_rgb, linear_to_srgb, rgb_to_hex, srgb_to_linear
from huewise.schema.types import CvdModel, CvdType


CvdTypeLike = Union[CvdType, str]
CvdModelLike = Union[CvdModel, str]

_IDENTITY = np.eye(3, dtype=np.float64)

LEGACY_MATRICES: dict[CvdType, NDArray[np.float64]] = {
    CvdType.DEUTAN: np.array([
        [0.625, 0.375, 0.0],
        [0.7, 0.3, 0.0],
        [0.0, 0.3, 0.7],
    ], dtype=np.float64),
    CvdType.PROTAN: np.array([
        [0.56667, 0.43333, 0.0],
        [0.55833, 0.44167, 0.0],
        [0.0, 0.24167, 0.75833],
    ], dtype=np.float64),
    CvdType.TRITAN: np.array([
        [0.95, 0.05, 0.0],
        [0.0, 0.43333, 0.56667],
        [0.0, 0.475, 0.525],
    ], dtype=np.float64),
}

# colorspacious naming
_MACHADO_NAMES = {
    CvdType.DEUTAN: "deuteranomaly",
    CvdType.PROTAN: "protanomaly",
    CvdType.TRITAN: "tritanomaly",
}


def cvd_matrix(
    cvd_type: CvdTypeLike,
    severity: float = 1.0,
    model: CvdModelLike = CvdModel.LEGACY,
) -> NDArray[np.float64]:
    """
    The 3×3 simulation matrix for a deficiency at a severity.

    Args:
        cvd_type: Deficiency type; NONE yields the identity
        severity: 0 (normal vision) to 1 (full dichromacy), clipped
        model: LEGACY or MACHADO2009

    Returns:
        Matrix M such that simulated = M @ rgb
    """
    cvd_type = CvdType.parse(cvd_type)
    model = CvdModel.parse(model)
    severity = float(np.clip(severity, 0.0, 1.0))
    if cvd_type is CvdType.NONE or severity == 0.0:
        return _IDENTITY.copy()
    if model is CvdModel.MACHADO2009:
        matrix = machado_et_al_2009_matrix(_MACHADO_NAMES[cvd_type], severity * 100.0)
        return np.asarray(matrix, dtype=np.float64)
    return (1.0 - severity) * _IDENTITY + severity * LEGACY_MATRICES[cvd_type]


def apply_cvd_matrix(values: ArrayLike, matrix: NDArray[np.float64]) -> NDArray[np.float64]:
    """
    Multiply RGB triples of shape (..., 3) by a 3×3 matrix.

    Terms are summed red, green, blue in that order so that 8-bit results
    are reproducible against stored fixtures.
    """
    values = np.asarray(values, dtype=np.float64)
    r = values[..., 0:1]
    g = values[..., 1:2]
    b = values[..., 2:3]
    return matrix[:, 0] * r + matrix[:, 1] * g + matrix[:, 2] * b


def simulate_cvd(
    srgb: ArrayLike,
    cvd_type: CvdTypeLike,
    severity: float = 1.0,
    model: CvdModelLike = CvdModel.LEGACY,
) -> NDArray[np.float64]:
    """
    Simulate a deficiency on gamma-encoded sRGB values.

    LEGACY applies its matrix in gamma space; MACHADO2009 linearizes,
    applies its matrix and re-encodes. Output is not clipped.
    """
    model = CvdModel.parse(model)
    matrix = cvd_matrix(cvd_type, severity, model)
    if model is CvdModel.MACHADO2009:
        return linear_to_srgb(apply_cvd_matrix(srgb_to_linear(srgb), matrix))
    return apply_cvd_matrix(srgb, matrix)


def simulate_linear(
    linear_rgb: ArrayLike,
    cvd_type: CvdTypeLike,
    severity: float = 1.0,
    model: CvdModelLike = CvdModel.LEGACY,
) -> NDArray[np.float64]:
    """
    Apply a deficiency's matrix directly to linear RGB values.

    This is the form used while scoring candidates. For LEGACY the gamma
    space matrix is applied to linear values unchanged.
    """
    return apply_cvd_matrix(linear_rgb, cvd_matrix(cvd_type, severity, model))


def simulate_hex(
    hex_color: str,
    cvd_type: CvdTypeLike,
    severity: float = 1.0,
    model: CvdModelLike = CvdModel.LEGACY,
) -> str:
    """
    Simulate a deficiency on a hex color.

    Example:
        >>> simulate_hex("#FF0000", "deutan")
        '#9FB300'
    """
    rgb = np.clip(hex_to_rgb(hex_color), 0.0, 1.0)
    return rgb_to_hex(np.clip(simulate_cvd(rgb, cvd_type, severity, model), 0.0, 1.0))
