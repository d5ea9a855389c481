# Copyright (c) 2026 Huewise
# SPDX-License-Identifier: MIT

"""Tests for the Nelder-Mead minimizer."""

import numpy as np
import pytest

from huewise.optimize.nelder_mead import nelder_mead
from huewise.schema.types import TerminationReason


def sphere(x):
    return float(np.sum(x * x))


def shifted(x):
    return float((x[0] - 3.0) ** 2)


class TestConvergence:

    def test_sphere(self):
        result = nelder_mead(sphere, [1.0, 1.0], max_iterations=200)
        assert result.termination is TerminationReason.CONVERGED
        assert result.iterations <= 200
        assert result.fx < 1e-3
        np.testing.assert_allclose(result.x, [0.0, 0.0], atol=5e-2)

    def test_shifted_minimum_1d(self):
        result = nelder_mead(shifted, [0.5])
        assert result.termination is TerminationReason.CONVERGED
        assert result.x[0] == pytest.approx(3.0, abs=1e-2)

    def test_equal_values_stop_early(self):
        """A simplex straddling the minimum at equal heights has zero spread."""
        result = nelder_mead(shifted, [0.0])
        assert result.termination is TerminationReason.CONVERGED
        assert result.fx <= shifted([0.0])
        assert result.x[0] == pytest.approx(3.6)
        assert result.fx == pytest.approx(0.36)

    def test_nan_treated_as_worst(self):
        def fn(x):
            return float("nan") if x[0] < 0 else float((x[0] - 1.0) ** 2)

        result = nelder_mead(fn, [0.5], step=0.5)
        assert np.isfinite(result.fx)
        assert result.x[0] == pytest.approx(1.0, abs=1e-2)

    def test_fx_matches_x(self):
        result = nelder_mead(sphere, [0.4, -0.8, 1.3], max_iterations=50)
        assert result.fx == pytest.approx(sphere(result.x))


class TestTermination:

    def test_max_iterations(self):
        result = nelder_mead(sphere, [5.0, -5.0, 5.0], max_iterations=10, tolerance=0.0)
        assert result.termination is TerminationReason.MAX_ITERATIONS
        assert result.iterations == 10

    def test_flat_function_converges_immediately(self):
        result = nelder_mead(lambda x: 1.0, [0.0, 0.0])
        assert result.termination is TerminationReason.CONVERGED
        assert result.iterations == 0
        assert result.evaluations == 3

    def test_deterministic(self):
        a = nelder_mead(sphere, [0.7, -0.2, 0.9], max_iterations=40)
        b = nelder_mead(sphere, [0.7, -0.2, 0.9], max_iterations=40)
        np.testing.assert_array_equal(a.x, b.x)
        assert a.evaluations == b.evaluations
