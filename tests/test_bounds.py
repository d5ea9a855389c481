# Copyright (c) 2026 Huewise
# SPDX-License-Identifier: MIT

"""Tests for the bounds engine."""

import numpy as np
import pytest

from huewise.optimize.bounds import (
    apply_aesthetic_offsets,
    compute_bounds,
    hue_arc,
    linear_interval,
    normalize_palette,
    palette_bounds,
    union_arcs,
    union_intervals,
)
from huewise.schema.optimization import ConstraintSet, OptimizationConfig
from huewise.schema.types import (
    AestheticMode,
    ColorSpace,
    ConstraintMode,
    ConstraintTopology,
)


PALETTE = np.array([
    [0.3, 0.2, 0.10],
    [0.6, 0.4, 0.25],
    [0.8, 0.3, 0.15],
])


class TestLinearChannels:

    def test_width_zero_is_full(self):
        assert linear_interval([0.2, 0.6], 0.0) == (0.0, 1.0)

    def test_width_one_is_observed_extent(self):
        assert linear_interval([0.2, 0.6], 1.0) == (pytest.approx(0.2), pytest.approx(0.6))

    def test_partial_width(self):
        assert linear_interval([0.2, 0.6], 0.5) == (pytest.approx(0.1), pytest.approx(0.8))

    def test_union_separate(self):
        intervals = union_intervals([0.8, 0.2], 0.8)
        assert len(intervals) == 2
        np.testing.assert_allclose(intervals, [[0.1, 0.3], [0.7, 0.9]])

    def test_union_merges_overlap(self):
        intervals = union_intervals([0.2, 0.3], 0.8)
        np.testing.assert_allclose(intervals, [[0.1, 0.4]])

    def test_union_clipped_to_unit(self):
        (lo, hi), = union_intervals([0.02], 0.8)
        assert lo == 0.0
        assert hi == pytest.approx(0.12)


class TestHueChannel:

    def test_width_zero_is_full_circle(self):
        assert hue_arc([0.1, 0.5], 0.0) == (0.0, 1.0)

    def test_arc_spans_observed(self):
        start, end = hue_arc([0.1, 0.2], 1.0)
        assert start == pytest.approx(0.1)
        assert end == pytest.approx(0.2)

    def test_arc_across_wrap(self):
        start, end = hue_arc([0.95, 0.05], 1.0)
        assert start == pytest.approx(0.95)
        assert end == pytest.approx(1.05)

    def test_partial_width_widens(self):
        start, end = hue_arc([0.1, 0.2], 0.5)
        assert end - start == pytest.approx(0.55)

    def test_union_arcs_merge_across_wrap(self):
        arcs = union_arcs([0.02, 0.98], 0.9)
        assert len(arcs) == 1
        np.testing.assert_allclose(arcs[0], [0.93, 1.07])

    def test_union_arcs_separate(self):
        arcs = union_arcs([0.1, 0.5], 0.9)
        assert len(arcs) == 2


class TestAesthetics:

    def test_hue_rotation(self):
        out = apply_aesthetic_offsets([[0.5, 0.3, 0.1]], ColorSpace.OKLCH, AestheticMode.COMPLEMENTARY)
        assert out.shape == (2, 3)
        assert out[1, 2] == pytest.approx(0.6)
        assert out[1, 0] == out[0, 0]

    def test_opponent_rotation(self):
        out = apply_aesthetic_offsets([[0.5, 0.7, 0.5]], ColorSpace.LAB, "complementary")
        np.testing.assert_allclose(out[1], [0.5, 0.3, 0.5], atol=1e-12)

    def test_none_unchanged(self):
        out = apply_aesthetic_offsets(PALETTE, ColorSpace.OKLCH, "none")
        np.testing.assert_array_equal(out, PALETTE)

    def test_tetradic_count(self):
        out = apply_aesthetic_offsets(PALETTE, ColorSpace.OKLCH, "tetradic")
        assert out.shape == (12, 3)

    def test_complementary_arc(self):
        constraints = ConstraintSet(widths=(0.0, 0.0, 1.0), aesthetic_mode=AestheticMode.COMPLEMENTARY)
        hue = compute_bounds([[0.5, 0.3, 0.1]], ColorSpace.OKLCH, constraints).channel("h")
        assert hue.total_length == pytest.approx(0.5)
        assert hue.contains(0.1)
        assert hue.contains(0.6)
        assert not hue.contains(0.85)

    def test_triadic_discontiguous(self):
        constraints = ConstraintSet(
            topology=ConstraintTopology.DISCONTIGUOUS,
            widths=(0.0, 0.0, 0.9),
            aesthetic_mode=AestheticMode.TRIADIC,
        )
        hue = compute_bounds([[0.5, 0.3, 0.0]], ColorSpace.OKLCH, constraints).channel("h")
        assert len(hue.intervals) == 3
        for lo, hi in hue.intervals:
            assert hi - lo == pytest.approx(0.1)


class TestComputeBounds:

    def test_default_unconstrained(self):
        bounds = compute_bounds(PALETTE, ColorSpace.OKLCH)
        assert all(cb.is_full for cb in bounds.channels)

    def test_discontiguous_width_zero_unconstrained(self):
        constraints = ConstraintSet(topology=ConstraintTopology.DISCONTIGUOUS)
        bounds = compute_bounds(PALETTE, ColorSpace.OKLCH, constraints)
        assert all(cb.is_full for cb in bounds.channels)

    def test_hard_width_one(self):
        bounds = compute_bounds(PALETTE, ColorSpace.OKLCH, ConstraintSet(widths=(1.0, 1.0, 1.0)))
        assert bounds.channel("l").intervals[0] == (pytest.approx(0.3), pytest.approx(0.8))
        assert bounds.channel("c").intervals[0] == (pytest.approx(0.2), pytest.approx(0.4))
        hue = bounds.channel("h")
        assert hue.is_hue
        assert hue.lo == pytest.approx(0.1)
        assert hue.hi == pytest.approx(0.25)
        for point in PALETTE:
            assert bounds.contains(point)

    def test_empty_palette_uses_midpoint(self):
        bounds = compute_bounds(np.empty((0, 3)), ColorSpace.OKLCH, ConstraintSet(widths=(1.0, 1.0, 1.0)))
        assert bounds.channel("l").intervals[0] == (0.5, 0.5)
        assert bounds.channel("c").intervals[0] == (0.0, 0.0)

    def test_soft_channel(self):
        constraints = ConstraintSet(
            widths=(1.0, 1.0, 1.0),
            modes=(ConstraintMode.SOFT, ConstraintMode.HARD, ConstraintMode.SOFT),
        )
        bounds = compute_bounds(PALETTE, ColorSpace.OKLCH, constraints)
        lightness = bounds.channel("l")
        assert lightness.intervals == ((0.0, 1.0),)
        assert len(lightness.contours) == 3
        spans = [c.hi - c.lo for c in lightness.contours]
        assert spans == sorted(spans)
        assert len(bounds.channel("h").contours) == 3
        # Soft channels never reject
        assert bounds.contains([0.01, 0.3, 0.9])

    def test_lab_has_no_hue(self):
        bounds = compute_bounds(PALETTE, ColorSpace.LAB, ConstraintSet(widths=(1.0, 1.0, 1.0)))
        assert not any(cb.is_hue for cb in bounds.channels)


class TestPaletteBounds:

    def test_normalize_palette_shape(self):
        out = normalize_palette(["#FF0000", "#00FF00"], ColorSpace.OKLCH)
        assert out.shape == (2, 3)
        assert np.all((out >= 0.0) & (out <= 1.0))

    def test_from_config(self):
        config = OptimizationConfig(constraint_widths=(1.0, 0.0, 0.0))
        bounds = palette_bounds(["#FF0000", "#00FF00"], config)
        lo, hi = bounds.channel("l").intervals[0]
        assert lo == pytest.approx(0.628, abs=1e-2)
        assert hi == pytest.approx(0.866, abs=1e-2)
        assert bounds.channel("c").is_full
