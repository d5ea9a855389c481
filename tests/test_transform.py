# Copyright (c) 2026 Huewise
# SPDX-License-Identifier: MIT

"""Tests for the parameter ↔ color reparameterization."""

import numpy as np
import pytest

from huewise.optimize.transform import (
    ParameterTransform,
    from_unit,
    logistic,
    logit_clamped,
    to_unit,
    wrap01,
)
from huewise.schema.optimization import Bounds, ChannelBounds
from huewise.schema.types import ColorSpace, ConstraintMode


def make_bounds(l=((0.0, 1.0),), c=((0.0, 1.0),), h=((0.0, 1.0),), soft_hue=False):
    return Bounds(
        space=ColorSpace.OKLCH,
        channels=(
            ChannelBounds("l", l),
            ChannelBounds("c", c),
            ChannelBounds("h", h, is_hue=True, mode=ConstraintMode.SOFT if soft_hue else ConstraintMode.HARD),
        ),
    )


class TestHelpers:

    def test_logit_inverts_logistic(self):
        p = np.array([0.01, 0.3, 0.5, 0.99])
        np.testing.assert_allclose(logistic(logit_clamped(p)), p, atol=1e-12)

    def test_logit_clamped_finite(self):
        assert np.all(np.isfinite(logit_clamped([0.0, 1.0])))

    def test_wrap01(self):
        np.testing.assert_allclose(wrap01([-0.25, 1.25, 0.5]), [0.75, 0.25, 0.5])

    def test_from_unit_concatenates(self):
        iv = ((0.0, 0.2), (0.6, 0.8))
        np.testing.assert_allclose(from_unit([0.0, 0.25, 0.75, 1.0], iv), [0.0, 0.1, 0.7, 0.8])

    def test_to_unit_inverts_from_unit(self):
        iv = ((0.0, 0.2), (0.6, 0.8))
        t = np.array([0.1, 0.4, 0.6, 0.9])
        np.testing.assert_allclose(to_unit(from_unit(t, iv), iv), t, atol=1e-12)

    def test_to_unit_snaps_to_nearest_edge(self):
        np.testing.assert_allclose(to_unit([0.5], ((0.0, 0.2), (0.6, 0.8))), [0.5])


class TestDecode:

    @pytest.mark.parametrize("theta", [0.3, 1.7, -2.5, 10.0])
    def test_full_hue_periodic(self, theta):
        transform = ParameterTransform(make_bounds(), 1)
        a = transform.decode([0.0, 0.0, theta])
        b = transform.decode([0.0, 0.0, theta + 2.0 * np.pi])
        np.testing.assert_allclose(a, b, atol=1e-12)

    def test_soft_hue_is_periodic(self):
        transform = ParameterTransform(make_bounds(h=((0.2, 0.3),), soft_hue=True), 1)
        a = transform.decode([0.0, 0.0, 1.0])
        b = transform.decode([0.0, 0.0, 1.0 + 2.0 * np.pi])
        np.testing.assert_allclose(a, b, atol=1e-12)

    def test_arc_monotone(self):
        transform = ParameterTransform(make_bounds(h=((0.9, 1.1),)), 1)
        hues = np.array([transform.decode([0.0, 0.0, p])[0, 2] for p in np.linspace(-6.0, 6.0, 50)])
        offsets = np.mod(hues - 0.9, 1.0)
        assert np.all(np.diff(offsets) >= -1e-12)
        assert np.all(offsets <= 0.2 + 1e-12)

    def test_degenerate_arc(self):
        transform = ParameterTransform(make_bounds(h=((0.3, 0.3),)), 1)
        for p in (-5.0, 0.0, 5.0):
            assert transform.decode([0.0, 0.0, p])[0, 2] == pytest.approx(0.3, abs=1e-6)

    def test_lightness_ordered(self):
        transform = ParameterTransform(make_bounds(), 3)
        params = np.random.default_rng(3).normal(size=9)
        out = transform.decode(params)
        assert np.all(np.diff(out[:, 0]) > 0)

    def test_linear_within_bounds(self):
        transform = ParameterTransform(make_bounds(c=((0.2, 0.4),)), 1)
        for p in (-50.0, 0.0, 50.0):
            c = transform.decode([0.0, p, 0.0])[0, 1]
            assert 0.2 <= c <= 0.4

    def test_discontiguous_within_union(self):
        bounds = make_bounds(c=((0.0, 0.2), (0.6, 0.8)))
        transform = ParameterTransform(bounds, 1)
        for p in np.linspace(-10.0, 10.0, 41):
            c = transform.decode([0.0, p, 0.0])[0, 1]
            assert bounds.channel("c").contains(c, tol=1e-12)

    def test_dimension(self):
        assert ParameterTransform(make_bounds(), 4).dimension == 12


class TestEncode:

    def test_encode_inverts_decode(self):
        bounds = make_bounds(l=((0.1, 0.9),), c=((0.0, 0.6),), h=((0.4, 1.2),))
        transform = ParameterTransform(bounds, 3)
        rows = np.array([
            [0.3, 0.1, 0.5],
            [0.6, 0.2, 0.95],
            [0.8, 0.5, 0.1],
        ])
        decoded = transform.decode(transform.encode(rows))
        np.testing.assert_allclose(decoded, rows, atol=1e-6)

    def test_full_hue_encode(self):
        transform = ParameterTransform(make_bounds(), 1)
        params = transform.encode([[0.5, 0.5, 0.25]])
        assert params[2] == pytest.approx(0.5 * np.pi)

    def test_sample_inside_bounds(self):
        bounds = make_bounds(l=((0.2, 0.7),), c=((0.0, 0.1), (0.5, 0.6)), h=((0.8, 1.1),))
        transform = ParameterTransform(bounds, 1)
        samples = transform.sample(np.random.default_rng(0), 20)
        assert samples.shape == (20, 3)
        for row in samples:
            assert bounds.contains(row)
