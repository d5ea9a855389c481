# Copyright (c) 2026 Huewise
# SPDX-License-Identifier: MIT

"""
Reparameterization layer between raw parameters and normalized colors.

The solver works over all of ℝⁿ; this layer maps every real vector to a
color that honors the bounds, so the solver needs no constraint logic of
its own.

Per channel (parameters are laid out candidate-major, three per color):

    lightness      exp + cumulative sum across candidates, then logistic
                   (candidates come out ordered by lightness)
    full-circle    wrap01(θ / 2π), so θ and θ + 2π decode identically
    hue
    hue arc        start + logistic(θ)·span, wrapped
    other          clamp01(logistic(p))

The unit value is then laid across the channel's admissible intervals
(one interval, or the concatenation of several).
"""

from __future__ import annotations

import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy.special import expit, logit

from huewise.schema.optimization import Bounds, ChannelBounds
from huewise.schema.types import ConstraintMode


LOGIT_EPS = 1e-6
# Smallest hue arc the decoder will spread values over
MIN_ARC_SPAN = 1e-6
# Minimum separation between ordered lightness logits when encoding
_MIN_LIGHTNESS_GAP = 1e-4

_TAU = 2.0 * np.pi


def logistic(x: ArrayLike) -> NDArray[np.float64]:
    """Standard logistic function."""
    return expit(np.asarray(x, dtype=np.float64))


def logit_clamped(p: ArrayLike) -> NDArray[np.float64]:
    """Logit of ``p`` clamped to [1e-6, 1 - 1e-6]."""
    return logit(np.clip(np.asarray(p, dtype=np.float64), LOGIT_EPS, 1.0 - LOGIT_EPS))


def wrap01(x: ArrayLike) -> NDArray[np.float64]:
    """Wrap into [0, 1)."""
    return np.mod(np.asarray(x, dtype=np.float64), 1.0)


def _intervals(cb: ChannelBounds) -> NDArray[np.float64]:
    if cb.mode is ConstraintMode.SOFT:
        return np.array([[0.0, 1.0]])
    return np.asarray(cb.intervals, dtype=np.float64).reshape(-1, 2)


def _is_full_circle(cb: ChannelBounds) -> bool:
    return cb.is_hue and (cb.mode is ConstraintMode.SOFT or cb.total_length >= 1.0 - 1e-12)


def _lengths(iv: NDArray[np.float64], min_len: float) -> NDArray[np.float64]:
    return np.maximum(iv[:, 1] - iv[:, 0], min_len)


def from_unit(t: ArrayLike, intervals: ArrayLike, min_len: float = 0.0) -> NDArray[np.float64]:
    """
    Lay unit values across the concatenation of ``intervals``.

    t = 0 maps to the first interval's start, t = 1 to the last one's end.
    """
    t = np.clip(np.asarray(t, dtype=np.float64), 0.0, 1.0)
    iv = np.asarray(intervals, dtype=np.float64).reshape(-1, 2)
    lengths = _lengths(iv, min_len)
    cum = np.concatenate([[0.0], np.cumsum(lengths)])
    total = cum[-1]
    if total <= 0.0:
        return np.full(t.shape, iv[0, 0])
    pos = t * total
    idx = np.clip(np.searchsorted(cum, pos, side="right") - 1, 0, len(iv) - 1)
    return iv[idx, 0] + np.minimum(pos - cum[idx], lengths[idx])


def to_unit(
    values: ArrayLike,
    intervals: ArrayLike,
    min_len: float = 0.0,
    periodic: bool = False,
) -> NDArray[np.float64]:
    """
    Inverse of ``from_unit``.

    Values outside every interval snap to the nearest interval edge.
    """
    values = np.atleast_1d(np.asarray(values, dtype=np.float64))
    iv = np.asarray(intervals, dtype=np.float64).reshape(-1, 2)
    lengths = _lengths(iv, min_len)
    cum = np.concatenate([[0.0], np.cumsum(lengths)])
    total = cum[-1]
    if total <= 0.0:
        return np.full(values.shape, 0.5)

    out = np.empty(values.shape)
    for k, v in enumerate(values):
        if periodic:
            offsets = np.mod(v - iv[:, 0], 1.0)
            inside = offsets <= lengths
            if inside.any():
                i = int(np.argmax(inside))
                off = offsets[i]
            else:
                # Circular distance to each arc's end and start
                past_end = offsets - lengths
                before_start = 1.0 - offsets
                i = int(np.argmin(np.minimum(past_end, before_start)))
                off = lengths[i] if past_end[i] <= before_start[i] else 0.0
        else:
            dist = np.where(v < iv[:, 0], iv[:, 0] - v, np.where(v > iv[:, 1], v - iv[:, 1], 0.0))
            i = int(np.argmin(dist))
            off = float(np.clip(v - iv[i, 0], 0.0, lengths[i]))
        out[k] = (cum[i] + off) / total
    return out


class ParameterTransform:
    """
    Bidirectional map between a flat parameter vector and normalized colors.

    Holds no mutable state, so one instance is shared by every restart.

    Args:
        bounds: Admissible channel regions
        n_colors: Number of candidate colors
    """

    def __init__(self, bounds: Bounds, n_colors: int) -> None:
        self.bounds = bounds
        self.n_colors = int(n_colors)
        self.lightness_index = bounds.space.lightness_index
        self._intervals = tuple(_intervals(cb) for cb in bounds.channels)
        self._full_circle = tuple(_is_full_circle(cb) for cb in bounds.channels)

    @property
    def dimension(self) -> int:
        return self.n_colors * 3

    def decode(self, params: ArrayLike) -> NDArray[np.float64]:
        """
        Decode a parameter vector.

        Returns:
            (n_colors, 3) normalized colors
        """
        p = np.asarray(params, dtype=np.float64).reshape(self.n_colors, 3)
        out = np.empty_like(p)
        for idx, cb in enumerate(self.bounds.channels):
            column = p[:, idx]
            if cb.is_hue:
                if self._full_circle[idx]:
                    out[:, idx] = wrap01(column / _TAU)
                else:
                    out[:, idx] = wrap01(from_unit(logistic(column), self._intervals[idx], MIN_ARC_SPAN))
                continue
            if idx == self.lightness_index and self.n_colors > 1:
                ordered = column.copy()
                ordered[1:] = np.exp(column[1:])
                t = logistic(np.cumsum(ordered))
            else:
                t = np.clip(logistic(column), 0.0, 1.0)
            out[:, idx] = from_unit(t, self._intervals[idx])
        return out

    def sample(self, rng: np.random.Generator, count: int = 1) -> NDArray[np.float64]:
        """Draw normalized colors uniformly from the admissible region."""
        out = np.empty((count, 3))
        for idx, cb in enumerate(self.bounds.channels):
            t = rng.random(count)
            if cb.is_hue:
                out[:, idx] = t if self._full_circle[idx] else wrap01(
                    from_unit(t, self._intervals[idx], MIN_ARC_SPAN)
                )
            else:
                out[:, idx] = from_unit(t, self._intervals[idx])
        return out

    def encode(self, normalized: ArrayLike) -> NDArray[np.float64]:
        """
        Encode normalized colors as a parameter vector.

        Rows must already be sorted by ascending lightness when more than
        one color is encoded; ties are separated by a small gap.
        """
        rows = np.asarray(normalized, dtype=np.float64).reshape(self.n_colors, 3)
        out = np.empty_like(rows)
        for idx, cb in enumerate(self.bounds.channels):
            column = rows[:, idx]
            if cb.is_hue:
                if self._full_circle[idx]:
                    out[:, idx] = wrap01(column) * _TAU
                else:
                    t = to_unit(column, self._intervals[idx], MIN_ARC_SPAN, periodic=True)
                    out[:, idx] = logit_clamped(t)
                continue
            y = logit_clamped(to_unit(column, self._intervals[idx]))
            if idx == self.lightness_index and self.n_colors > 1:
                y = np.maximum.accumulate(y)
                for i in range(1, len(y)):
                    y[i] = max(y[i], y[i - 1] + _MIN_LIGHTNESS_GAP)
                encoded = y.copy()
                encoded[1:] = np.log(np.maximum(np.diff(y), 1e-6))
                out[:, idx] = encoded
            else:
                out[:, idx] = y
        return out.ravel()
