# Copyright (c) 2026 Huewise
# SPDX-License-Identifier: MIT

"""
Bounds engine: admissible channel regions derived from a palette.

All work happens in normalized channel units (see ``huewise.schema``).

Contiguous topology:
    linear channel   lerp([min, max], [0, 1], 1 - width)
    hue channel      complement of the largest circular gap, widened
                     toward the full circle by 1 - width
Discontiguous topology:
    one interval (or arc) of radius (1 - width) / 2 around every point,
    overlapping intervals merged

A width of 0 leaves a channel unconstrained. SOFT channels are never
clipped; they carry Gaussian contours of the palette as metadata.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np
from numpy.typing import ArrayLike, NDArray

from huewise.color.colorspace import decode_colors, normalize_with_range, range_from_preset
from huewise.schema.optimization import (
    Bounds,
    ChannelBounds,
    ConstraintSet,
    ContourInterval,
    OptimizationConfig,
)
from huewise.schema.types import (
    AestheticMode,
    ColorSpace,
    ConstraintMode,
    ConstraintTopology,
    GamutPreset,
)


# z-scores of the 50%, 80% and 95% central Gaussian intervals
CONTOUR_Z_SCORES = (0.6745, 1.2816, 1.96)

_FULL = ((0.0, 1.0),)
_TAU = 2.0 * np.pi


# =============================================================================
# Palette preparation
# =============================================================================


def normalize_palette(
    colors: Sequence[str],
    space: ColorSpace,
    gamut: GamutPreset = GamutPreset.SRGB,
) -> NDArray[np.float64]:
    """
    Decode hex colors and normalize them with the gamut-scaled range.

    Linear channels are clipped to [0, 1]; hue wraps.

    Returns:
        Array of shape (N, 3)
    """
    space = ColorSpace.parse(space)
    values = decode_colors(colors, space)
    if values.shape[0] == 0:
        return values
    normalized = normalize_with_range(values, range_from_preset(space, gamut))
    hue = space.hue_index
    for idx in range(3):
        if idx != hue:
            normalized[:, idx] = np.clip(normalized[:, idx], 0.0, 1.0)
    return normalized


def midpoint(space: ColorSpace) -> NDArray[np.float64]:
    """Stand-in point for an empty palette: hue and chroma 0, the rest centred."""
    point = np.full(3, 0.5)
    for idx in (space.hue_index, space.saturation_index):
        if idx is not None:
            point[idx] = 0.0
    return point


def apply_aesthetic_offsets(
    normalized: ArrayLike,
    space: ColorSpace,
    mode: AestheticMode,
) -> NDArray[np.float64]:
    """
    Append rotated copies of every point.

    Hue spaces rotate the hue channel. Opponent spaces (Lab-like) rotate
    the two chromatic channels about the neutral axis.
    """
    points = np.asarray(normalized, dtype=np.float64).reshape(-1, 3)
    offsets = AestheticMode.parse(mode).offsets
    if not offsets or points.shape[0] == 0:
        return points

    hue = space.hue_index
    copies = [points]
    for offset in offsets:
        rotated = points.copy()
        if hue is not None:
            rotated[:, hue] = np.mod(rotated[:, hue] + offset, 1.0)
        else:
            angle = _TAU * offset
            a = rotated[:, 1] - 0.5
            b = rotated[:, 2] - 0.5
            rotated[:, 1] = np.clip(0.5 + a * np.cos(angle) - b * np.sin(angle), 0.0, 1.0)
            rotated[:, 2] = np.clip(0.5 + a * np.sin(angle) + b * np.cos(angle), 0.0, 1.0)
        copies.append(rotated)
    return np.vstack(copies)


# =============================================================================
# Per-channel bounds
# =============================================================================


def linear_interval(values: ArrayLike, width: float) -> tuple[float, float]:
    """Observed [min, max] widened toward [0, 1] by ``1 - width``."""
    values = np.asarray(values, dtype=np.float64)
    if width <= 0 or values.size == 0:
        return 0.0, 1.0
    lo = max(0.0, width * float(values.min()))
    hi = min(1.0, (1.0 - width) + width * float(values.max()))
    return lo, hi


def hue_arc(values: ArrayLike, width: float) -> tuple[float, float]:
    """
    Arc spanning the observed hues, widened toward the full circle.

    Returns:
        (start, end) with start in [0, 1) and end = start + span
    """
    hues = np.sort(np.mod(np.asarray(values, dtype=np.float64), 1.0))
    if width <= 0 or hues.size == 0:
        return 0.0, 1.0
    gaps = np.diff(np.append(hues, hues[0] + 1.0))
    k = int(np.argmax(gaps))
    gap = float(gaps[k])
    arc_start = (float(hues[k]) + gap) % 1.0
    arc_span = 1.0 - gap
    center = arc_start + arc_span / 2.0
    span = min(1.0, 1.0 - width * (1.0 - arc_span))
    start = (center - span / 2.0) % 1.0
    return start, start + span


def union_intervals(values: ArrayLike, width: float) -> tuple[tuple[float, float], ...]:
    """Merged intervals of radius ``(1 - width) / 2`` around each value."""
    values = np.sort(np.asarray(values, dtype=np.float64))
    if width <= 0 or values.size == 0:
        return _FULL
    radius = (1.0 - width) / 2.0
    merged: list[list[float]] = []
    for v in values:
        lo, hi = max(0.0, v - radius), min(1.0, v + radius)
        if merged and lo <= merged[-1][1]:
            merged[-1][1] = max(merged[-1][1], hi)
        else:
            merged.append([lo, hi])
    return tuple((lo, hi) for lo, hi in merged)


def union_arcs(values: ArrayLike, width: float) -> tuple[tuple[float, float], ...]:
    """Merged hue arcs of radius ``(1 - width) / 2`` around each hue."""
    hues = np.mod(np.asarray(values, dtype=np.float64), 1.0)
    if width <= 0 or hues.size == 0:
        return _FULL
    radius = (1.0 - width) / 2.0
    if 2.0 * radius >= 1.0:
        return _FULL
    starts = np.sort(np.mod(hues - radius, 1.0))
    merged: list[list[float]] = []
    for s in starts:
        e = s + 2.0 * radius
        if merged and s <= merged[-1][1]:
            merged[-1][1] = max(merged[-1][1], e)
        else:
            merged.append([s, e])
    # Join the last arc with the first across the wrap point
    if len(merged) > 1 and merged[-1][1] - 1.0 >= merged[0][0]:
        first = merged.pop(0)
        merged[-1][1] = max(merged[-1][1], first[1] + 1.0)
    if any(e - s >= 1.0 for s, e in merged):
        return _FULL
    return tuple((s, e) for s, e in merged)


def gaussian_contours(values: ArrayLike, is_hue: bool) -> tuple[ContourInterval, ...]:
    """Iso-density intervals ``mean ± z·sd`` at the standard z-scores."""
    values = np.asarray(values, dtype=np.float64)
    if values.size == 0:
        return ()
    if is_hue:
        angles = _TAU * values
        c, s = float(np.mean(np.cos(angles))), float(np.mean(np.sin(angles)))
        mean = (np.arctan2(s, c) / _TAU) % 1.0
        resultant = max(np.hypot(c, s), 1e-12)
        sd = float(np.sqrt(-2.0 * np.log(min(resultant, 1.0)))) / _TAU
        out = []
        for z in CONTOUR_Z_SCORES:
            half = min(z * sd, 0.5)
            lo = (mean - half) % 1.0
            out.append(ContourInterval(z=z, lo=lo, hi=lo + 2.0 * half))
        return tuple(out)

    mean = float(np.mean(values))
    sd = float(np.std(values))
    return tuple(
        ContourInterval(
            z=z,
            lo=max(0.0, mean - z * sd),
            hi=min(1.0, mean + z * sd),
        )
        for z in CONTOUR_Z_SCORES
    )


# =============================================================================
# Bounds
# =============================================================================


def compute_bounds(
    normalized: ArrayLike,
    space: ColorSpace,
    constraints: ConstraintSet = ConstraintSet(),
) -> Bounds:
    """
    Derive per-channel bounds from a normalized palette.

    Args:
        normalized: (N, 3) normalized palette; may be empty
        space: Color space of the palette
        constraints: Topology, widths, modes and harmony settings

    Returns:
        Immutable Bounds
    """
    space = ColorSpace.parse(space)
    points = np.asarray(normalized, dtype=np.float64).reshape(-1, 3)
    if points.shape[0] == 0:
        points = midpoint(space)[None, :]
    points = apply_aesthetic_offsets(points, space, constraints.aesthetic_mode)

    hue = space.hue_index
    discontiguous = constraints.topology is ConstraintTopology.DISCONTIGUOUS
    channels = []
    for idx, name in enumerate(space.channels):
        column = points[:, idx]
        column = column[np.isfinite(column)]
        is_hue = idx == hue
        width = constraints.widths[idx]
        mode = constraints.modes[idx]

        if mode is ConstraintMode.SOFT:
            channels.append(ChannelBounds(
                name=name,
                intervals=_FULL,
                is_hue=is_hue,
                mode=mode,
                contours=gaussian_contours(column, is_hue),
            ))
            continue

        if is_hue:
            intervals = union_arcs(column, width) if discontiguous else (hue_arc(column, width),)
        else:
            intervals = union_intervals(column, width) if discontiguous else (linear_interval(column, width),)
        channels.append(ChannelBounds(name=name, intervals=intervals, is_hue=is_hue, mode=mode))

    return Bounds(space=space, channels=tuple(channels), constraints=constraints)


def palette_bounds(colors: Sequence[str], config: OptimizationConfig) -> Bounds:
    """Bounds for a hex palette under an optimization config."""
    normalized = normalize_palette(colors, config.color_space, config.gamut_preset)
    return compute_bounds(normalized, config.color_space, ConstraintSet.from_config(config))
