# Copyright (c) 2026 Huewise
# SPDX-License-Identifier: MIT

"""
Objective function: parameter vector → scalar to minimize.

    value = -Σ_state weight·aggregate(pairwise distances) + penalty

Pairwise distances are every existing×candidate pair plus every
candidate×candidate pair, measured after simulating each enabled vision
state. The penalty is

    (1e4·range² + 1e3·low-lightness² + 1e4·gamut² + 1e-3·Σp²) / 100

where the range excess is measured on the realized (8-bit) colors.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np
from numpy.typing import ArrayLike, NDArray

from huewise.color.colorspace import (
    decode_colors,
    encode_colors,
    gamut_to_xyz,
    hexes_to_rgb,
    linear_rgb_to_xyz,
    normalize_with_range,
    range_from_preset,
    srgb_to_xyz,
    to_xyz,
    unscale_with_range,
    xyz_to_gamut,
    xyz_to_linear_rgb,
)
from huewise.color.cvd import apply_cvd_matrix, cvd_matrix
from huewise.color.distance import distance_between_coords, metric_coordinates
from huewise.color.means import aggregate_distances
from huewise.optimize.bounds import palette_bounds
from huewise.optimize.transform import ParameterTransform
from huewise.schema.optimization import Bounds, ColorDetail, Neighbor, OptimizationConfig
from huewise.schema.types import ConstraintMode, CvdType


# Penalty weights
RANGE_PENALTY_WEIGHT = 1e4
LOW_LIGHTNESS_PENALTY_WEIGHT = 1e3
GAMUT_PENALTY_WEIGHT = 1e4
PARAM_PENALTY_WEIGHT = 1e-3
# Normalized lightness below which candidates are penalized
LOW_LIGHTNESS_THRESHOLD = 0.08
# Legacy divisor keeping penalties on the scale of the distance term
PENALTY_NORMALIZATION = 100.0


@dataclass(frozen=True, slots=True)
class ObjectiveBreakdown:
    """Every term of one objective evaluation."""
    value: float
    distance: float
    penalty: float
    range_penalty: float
    lightness_penalty: float
    gamut_penalty: float
    param_penalty: float
    state_distances: tuple[tuple[CvdType, float], ...]
    colors: tuple[str, ...]
    values: NDArray[np.float64]
    normalized: NDArray[np.float64]


class PaletteObjective:
    """
    Scores candidate colors against an existing palette.

    Everything that does not depend on the candidates (bounds, existing
    colors' coordinates per vision state) is computed once here. Calls
    never mutate the instance, so it can be evaluated from many threads.

    Args:
        existing_colors: Hex colors of the palette to extend
        config: Optimization settings
        bounds: Precomputed bounds (derived from the palette if omitted)

    Example:
        >>> objective = PaletteObjective(["#FF0000"], OptimizationConfig())
        >>> objective(np.zeros(3))  # doctest: +SKIP
    """

    def __init__(
        self,
        existing_colors: Sequence[str],
        config: OptimizationConfig,
        bounds: Optional[Bounds] = None,
    ) -> None:
        self.config = config
        self.space = config.color_space
        self.channel_range = range_from_preset(self.space, config.gamut_preset)
        self.existing_colors = tuple(encode_colors(decode_colors(existing_colors, "srgb"), "srgb"))
        self.bounds = bounds if bounds is not None else palette_bounds(self.existing_colors, config)
        self.transform = ParameterTransform(self.bounds, config.n_colors_to_add)
        self.states = config.enabled_cvd_states
        self._matrices = {
            state: cvd_matrix(state, config.cvd_severity, config.cvd_model)
            for state in CvdType
        }
        self._existing_coords = {
            state: self.coordinates(self.existing_colors, state)
            for state, _ in self.states
        }

    # -------------------------------------------------------------------------
    # Coordinates
    # -------------------------------------------------------------------------

    def coordinates(self, colors: Sequence[str], state: CvdType = CvdType.NONE) -> NDArray[np.float64]:
        """
        Metric coordinates of hex colors as seen under a vision state.

        hex → XYZ → linear RGB (gamut-clipped when clipping is on)
        → simulate → XYZ → metric space
        """
        if len(colors) == 0:
            return np.empty((0, 3))
        xyz = srgb_to_xyz(hexes_to_rgb(colors))
        clip = self.config.clip_to_gamut_during_optimization
        gamut = self.config.gamut_preset
        if clip:
            linear = np.clip(xyz_to_gamut(xyz, gamut), 0.0, 1.0)
        else:
            linear = xyz_to_linear_rgb(xyz)
        if state is not CvdType.NONE:
            linear = apply_cvd_matrix(linear, self._matrices[state])
        xyz = gamut_to_xyz(linear, gamut) if clip else linear_rgb_to_xyz(linear)
        return metric_coordinates(xyz, self.config.distance_metric)

    def _pairwise(self, existing: NDArray[np.float64], candidates: NDArray[np.float64]) -> NDArray[np.float64]:
        metric = self.config.distance_metric
        parts = []
        if existing.shape[0] and candidates.shape[0]:
            cross = distance_between_coords(existing[:, None, :], candidates[None, :, :], metric)
            parts.append(cross.ravel())
        n = candidates.shape[0]
        if n > 1:
            i, j = np.triu_indices(n, k=1)
            parts.append(np.atleast_1d(distance_between_coords(candidates[i], candidates[j], metric)))
        return np.concatenate(parts) if parts else np.empty(0)

    def _aggregate(self, distances: NDArray[np.float64]) -> float:
        return aggregate_distances(distances, self.config.mean_kind, self.config.mean_p)

    # -------------------------------------------------------------------------
    # Evaluation
    # -------------------------------------------------------------------------

    def realize(self, params: ArrayLike) -> tuple[NDArray[np.float64], NDArray[np.float64], tuple[str, ...]]:
        """Decode parameters to (normalized, channel values, hex colors)."""
        normalized = self.transform.decode(params)
        values = unscale_with_range(normalized, self.channel_range)
        return normalized, values, tuple(encode_colors(values, self.space))

    def evaluate(self, params: ArrayLike) -> ObjectiveBreakdown:
        """Score a parameter vector and report every term."""
        params = np.asarray(params, dtype=np.float64)
        normalized, values, colors = self.realize(params)

        state_distances = []
        distance = 0.0
        for state, weight in self.states:
            candidates = self.coordinates(colors, state)
            agg = self._aggregate(self._pairwise(self._existing_coords[state], candidates))
            state_distances.append((state, agg))
            distance += weight * agg

        range_pen = self._range_excess(colors)
        light_pen = self._low_lightness(normalized)
        gamut_pen = self._gamut_excess(values)
        param_pen = float(np.sum(params * params))
        penalty = (
            RANGE_PENALTY_WEIGHT * range_pen
            + LOW_LIGHTNESS_PENALTY_WEIGHT * light_pen
            + GAMUT_PENALTY_WEIGHT * gamut_pen
            + PARAM_PENALTY_WEIGHT * param_pen
        ) / PENALTY_NORMALIZATION

        value = -distance + penalty
        if not np.isfinite(value):
            value = float("inf")
        return ObjectiveBreakdown(
            value=float(value),
            distance=float(distance),
            penalty=float(penalty),
            range_penalty=range_pen,
            lightness_penalty=light_pen,
            gamut_penalty=gamut_pen,
            param_penalty=param_pen,
            state_distances=tuple(state_distances),
            colors=colors,
            values=values,
            normalized=normalized,
        )

    def __call__(self, params: ArrayLike) -> float:
        return self.evaluate(params).value

    # -------------------------------------------------------------------------
    # Penalty terms
    # -------------------------------------------------------------------------

    def _range_excess(self, colors: Sequence[str]) -> float:
        realized = normalize_with_range(decode_colors(colors, self.space), self.channel_range)
        sat = self.space.saturation_index
        total = 0.0
        for idx, cb in enumerate(self.bounds.channels):
            if cb.mode is ConstraintMode.SOFT or cb.is_full:
                continue
            for row, v in enumerate(realized[:, idx]):
                # Hue of a near-neutral color is undefined
                if cb.is_hue and sat is not None and realized[row, sat] < 1e-3:
                    continue
                if np.isfinite(v):
                    total += cb.excess(float(v)) ** 2
        return total

    def _low_lightness(self, normalized: NDArray[np.float64]) -> float:
        idx = self.space.lightness_index
        if idx is None:
            return 0.0
        shortfall = np.maximum(LOW_LIGHTNESS_THRESHOLD - normalized[:, idx], 0.0)
        return float(np.sum(shortfall * shortfall))

    def _gamut_excess(self, values: NDArray[np.float64]) -> float:
        linear = xyz_to_gamut(to_xyz(values, self.space), self.config.gamut_preset)
        linear = np.nan_to_num(linear, nan=0.0)
        excess = linear - np.clip(linear, 0.0, 1.0)
        return float(np.sum(excess * excess))

    # -------------------------------------------------------------------------
    # Diagnostics
    # -------------------------------------------------------------------------

    def details(self, colors: Sequence[str], values: ArrayLike) -> tuple[ColorDetail, ...]:
        """
        Influence and nearest neighbours of each candidate.

        Influence is the aggregate distance with the color included minus
        the aggregate without it, over the same pairs used for scoring
        under normal vision. Neighbours are searched over the whole
        palette for every vision state.
        """
        colors = tuple(colors)
        values = np.asarray(values, dtype=np.float64).reshape(-1, 3)
        n_new = len(colors)
        if n_new == 0:
            return ()
        offset = len(self.existing_colors)

        existing = self.coordinates(self.existing_colors, CvdType.NONE)
        candidates = self.coordinates(colors, CvdType.NONE)
        pairs = []
        for i in range(offset):
            for j in range(n_new):
                pairs.append((i, offset + j))
        for i in range(n_new):
            for j in range(i + 1, n_new):
                pairs.append((offset + i, offset + j))
        everything = np.vstack([existing, candidates])
        metric = self.config.distance_metric
        if pairs:
            idx = np.asarray(pairs)
            dists = np.atleast_1d(distance_between_coords(
                everything[idx[:, 0]], everything[idx[:, 1]], metric
            ))
        else:
            idx = np.empty((0, 2), dtype=int)
            dists = np.empty(0)
        total = self._aggregate(dists)

        influences = []
        for local in range(n_new):
            k = offset + local
            keep = (idx[:, 0] != k) & (idx[:, 1] != k) if len(idx) else np.empty(0, dtype=bool)
            without = self._aggregate(dists[keep]) if keep.any() else total
            influences.append(total - without)
        order = sorted(range(n_new), key=lambda i: (-influences[i], i))
        ranks = {i: rank + 1 for rank, i in enumerate(order)}

        neighbors = self._neighbors(colors)
        return tuple(
            ColorDetail(
                hex=colors[i],
                values=tuple(float(v) for v in values[i]),
                influence=float(influences[i]),
                influence_rank=ranks[i],
                neighbors=neighbors[i],
            )
            for i in range(n_new)
        )

    def _neighbors(self, colors: tuple[str, ...]) -> list[tuple[Neighbor, ...]]:
        everything = self.existing_colors + colors
        offset = len(self.existing_colors)
        if len(everything) < 2:
            return [() for _ in colors]
        metric = self.config.distance_metric
        out: list[list[Neighbor]] = [[] for _ in colors]
        for state in CvdType:
            coords = self.coordinates(everything, state)
            matrix = distance_between_coords(coords[:, None, :], coords[None, :, :], metric)
            for local in range(len(colors)):
                row = np.array(matrix[offset + local], dtype=np.float64)
                row[offset + local] = np.inf
                j = int(np.argmin(row))
                out[local].append(Neighbor(state=state, hex=everything[j], distance=float(row[j])))
        return [tuple(n) for n in out]
