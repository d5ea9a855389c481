# Copyright (c) 2026 Huewise
# SPDX-License-Identifier: MIT

"""Tests for the multi-start optimization driver."""

import json
import re
import threading

import numpy as np
import pytest

from huewise import optimize_palette
from huewise.errors import ConfigurationError, OptimizationCancelled
from huewise.optimize.driver import gamut_uniform_start, random_start
from huewise.optimize.objective import PaletteObjective
from huewise.schema.optimization import BestResult, OptimizationConfig
from huewise.schema.types import TraceStage


PALETTE = ["#1F77B4", "#FF7F0E"]
HEX = re.compile(r"^#[0-9A-F]{6}$")


def small_config(**overrides):
    settings = dict(n_colors_to_add=2, n_restarts=3, max_iterations=30, seed=42, n_workers=2)
    settings.update(overrides)
    return OptimizationConfig(**settings)


class TestOptimizePalette:

    def test_result_shape(self):
        result = optimize_palette(PALETTE, small_config())
        assert len(result.colors) == 2
        assert all(HEX.match(c) for c in result.colors)
        assert len(result.values) == 2
        assert np.isfinite(result.score)
        assert result.runs_completed == 3
        assert not result.cancelled

    def test_seed_deterministic(self):
        a = optimize_palette(PALETTE, small_config())
        b = optimize_palette(PALETTE, small_config())
        assert a.colors == b.colors
        assert a.score == b.score

    def test_worker_count_does_not_change_result(self):
        serial = optimize_palette(PALETTE, small_config(n_workers=1))
        pooled = optimize_palette(PALETTE, small_config(n_workers=3))
        assert serial.colors == pooled.colors
        assert serial.best_run.restart == pooled.best_run.restart

    def test_rng_argument_matches_seed(self):
        from_config = optimize_palette(PALETTE, small_config(seed=5))
        from_rng = optimize_palette(PALETTE, small_config(seed=None), rng=np.random.default_rng(5))
        assert from_config.colors == from_rng.colors

    def test_keep_all_runs(self):
        result = optimize_palette(PALETTE, small_config(keep_all_runs=True))
        assert [r.restart for r in result.runs] == [0, 1, 2]
        assert result.score == min(r.score for r in result.runs)
        assert result.ranked_runs()[0].score == result.score

    def test_runs_dropped_by_default(self):
        assert optimize_palette(PALETTE, small_config()).runs == ()

    def test_empty_palette(self):
        result = optimize_palette([], small_config(n_colors_to_add=3, n_restarts=2))
        assert len(result.colors) == 3

    def test_details_attached(self):
        result = optimize_palette(PALETTE, small_config())
        assert len(result.details) == 2
        assert sorted(d.influence_rank for d in result.details) == [1, 2]

    def test_clip_to_gamut(self):
        result = optimize_palette(PALETTE, small_config(clip_to_gamut_during_optimization=True))
        assert all(HEX.match(c) for c in result.colors)

    def test_invalid_hex(self):
        with pytest.raises(ValueError):
            optimize_palette(["#12"], small_config())

    def test_invalid_config(self):
        with pytest.raises(ConfigurationError):
            optimize_palette(PALETTE, small_config(n_colors_to_add=0))

    def test_json(self):
        result = optimize_palette(PALETTE, small_config())
        data = json.loads(result.to_json())
        assert data["colors"] == list(result.colors)
        restored = BestResult.from_dict(data)
        assert restored.colors == result.colors
        assert restored.bounds == result.bounds


class TestCallbacks:

    def test_progress(self):
        events = []
        optimize_palette(PALETTE, small_config(), on_progress=events.append)
        assert len(events) == 3
        assert [e.completed for e in events] == [1, 2, 3]
        assert sorted(e.restart for e in events) == [0, 1, 2]
        assert events[-1].pct == 100
        best = [e.best_score for e in events]
        assert best == sorted(best, reverse=True)

    def test_verbose_stages(self):
        traces = []
        optimize_palette(PALETTE, small_config(), on_verbose=traces.append)
        stages = [t.stage for t in traces]
        assert stages.count(TraceStage.START) == 3
        assert stages.count(TraceStage.END) == 3
        assert stages.count(TraceStage.BEST) >= 1
        assert stages[-1] is TraceStage.FINAL_BEST
        assert stages.count(TraceStage.FINAL_BEST) == 1


class TestCancellation:

    def test_cancel_before_start(self):
        cancel = threading.Event()
        cancel.set()
        with pytest.raises(OptimizationCancelled):
            optimize_palette(PALETTE, small_config(), cancel=cancel)

    def test_cancel_after_first_restart(self):
        cancel = threading.Event()
        result = optimize_palette(
            PALETTE,
            small_config(n_workers=1),
            on_progress=lambda _: cancel.set(),
            cancel=cancel,
        )
        assert result.cancelled
        assert result.runs_completed == 1
        assert len(result.colors) == 2

    def test_failing_restart_cancels_pending(self):
        calls = []

        def fail(progress):
            calls.append(progress.restart)
            raise RuntimeError("callback failed")

        with pytest.raises(RuntimeError, match="callback failed"):
            optimize_palette(PALETTE, small_config(n_workers=1, n_restarts=10), on_progress=fail)
        assert len(calls) < 10


class TestStarts:

    def test_random_start(self):
        a = random_start(np.random.default_rng(1), 6)
        b = random_start(np.random.default_rng(1), 6)
        assert a.shape == (6,)
        np.testing.assert_array_equal(a, b)

    def test_gamut_uniform_start(self):
        objective = PaletteObjective(PALETTE, small_config(clip_to_gamut_during_optimization=True))
        params = gamut_uniform_start(np.random.default_rng(0), objective)
        assert params.shape == (6,)
        assert np.all(np.isfinite(params))
        normalized = objective.transform.decode(params)
        assert np.all(np.diff(normalized[:, 0]) >= 0)
