# Copyright (c) 2026 Huewise
# SPDX-License-Identifier: MIT

"""Tests for schema types, validation and serialization roundtrips."""

import logging

import pytest

from huewise.errors import ConfigurationError, InvalidColorSpace
from huewise.schema.optimization import (
    Bounds,
    ChannelBounds,
    ColorDetail,
    ConstraintSet,
    ContourInterval,
    Neighbor,
    OptimizationConfig,
    RunProgress,
    RunResult,
)
from huewise.schema.types import (
    ChannelRange,
    ColorSpace,
    ConstraintMode,
    CvdModel,
    CvdType,
    DistanceMetric,
    GamutPreset,
    MeanKind,
    TerminationReason,
)


class TestEnums:

    def test_case_insensitive(self):
        assert ColorSpace.parse(" OKLCH ") is ColorSpace.OKLCH

    def test_aliases(self):
        assert GamutPreset.parse("p3") is GamutPreset.DISPLAY_P3
        assert MeanKind.parse("rms") is MeanKind.QUADRATIC
        assert CvdModel.parse("machado") is CvdModel.MACHADO2009
        assert CvdType.parse("Protanopia") is CvdType.PROTAN

    def test_unknown_space(self):
        with pytest.raises(InvalidColorSpace) as exc_info:
            ColorSpace.parse("cmyk")
        assert exc_info.value.identifier == "cmyk"

    def test_unknown_gamut(self):
        with pytest.raises(InvalidColorSpace):
            GamutPreset.parse("adobe")

    def test_metric_fallback(self, caplog):
        with caplog.at_level(logging.WARNING):
            assert DistanceMetric.parse("de94", fallback=True) is DistanceMetric.DE2000
        assert "de94" in caplog.text

    def test_metric_strict(self):
        with pytest.raises(InvalidColorSpace):
            DistanceMetric.parse("de94")

    def test_space_channels(self):
        assert ColorSpace.OKLCH.channels == ("l", "c", "h")
        assert ColorSpace.OKLCH.hue_index == 2
        assert ColorSpace.OKLCH.lightness_index == 0
        assert ColorSpace.HSL.hue_index == 0
        assert ColorSpace.HSL.lightness_index == 2
        assert ColorSpace.LAB.hue_index is None

    def test_optimizable(self):
        assert ColorSpace.JZAZBZ.is_optimizable
        assert not ColorSpace.XYZ.is_optimizable
        assert not ColorSpace.SRGB.is_optimizable

    def test_termination_values(self):
        assert TerminationReason.parse("max iterations") is TerminationReason.MAX_ITERATIONS


class TestChannelRange:

    def test_reversed_rejected(self):
        with pytest.raises(ValueError):
            ChannelRange(ColorSpace.LAB, (0.0, 0.0, 0.0), (100.0, -1.0, 1.0))

    def test_roundtrip(self):
        rng = ChannelRange(ColorSpace.OKLCH, (0.0, 0.0, 0.0), (1.0, 0.4, 360.0))
        assert ChannelRange.from_dict(rng.to_dict()) == rng


class TestOptimizationConfig:

    def test_defaults(self):
        config = OptimizationConfig()
        assert config.color_space is ColorSpace.OKLCH
        assert config.n_colors_to_add == 1
        assert config.distance_metric is DistanceMetric.DE2000
        assert config.mean_kind is MeanKind.HARMONIC
        assert config.enabled_cvd_states == ((CvdType.NONE, 1.0),)
        assert config.dimension == 3

    def test_string_coercion(self):
        config = OptimizationConfig(
            color_space="lab",
            mean_kind="geometric",
            cvd_weights={"deuteranopia": 0.5, "none": 1.0},
            gamut_preset="p3",
            constraint_modes=("soft", "hard", "hard"),
        )
        assert config.color_space is ColorSpace.LAB
        assert config.gamut_preset is GamutPreset.DISPLAY_P3
        assert config.constraint_modes[0] is ConstraintMode.SOFT
        assert config.enabled_cvd_states == ((CvdType.NONE, 1.0), (CvdType.DEUTAN, 0.5))

    def test_unknown_metric_falls_back(self):
        assert OptimizationConfig(distance_metric="bogus").distance_metric is DistanceMetric.DE2000

    def test_unknown_space(self):
        with pytest.raises(InvalidColorSpace):
            OptimizationConfig(color_space="cmyk")

    def test_non_optimizable_space(self):
        with pytest.raises(ConfigurationError):
            OptimizationConfig(color_space="xyz")

    @pytest.mark.parametrize("overrides", [
        {"n_colors_to_add": 0},
        {"n_restarts": 0},
        {"max_iterations": 5},
        {"mean_kind": "median"},
        {"cvd_weights": {"none": -1.0}},
        {"cvd_weights": {"none": 0.0}},
        {"cvd_weights": {"achromat": 1.0}},
        {"cvd_severity": 1.5},
        {"constraint_widths": (0.5, 0.5)},
        {"constraint_widths": (0.5, 0.5, 1.5)},
        {"constraint_modes": ("hard", "firm", "hard")},
        {"aesthetic_mode": "analogous"},
        {"nm_step": 0.0},
        {"n_workers": 0},
    ])
    def test_rejected(self, overrides):
        with pytest.raises(ConfigurationError):
            OptimizationConfig(**overrides)

    def test_roundtrip(self):
        config = OptimizationConfig(
            color_space="jzazbz",
            n_colors_to_add=3,
            cvd_weights={"none": 1.0, "tritan": 0.25},
            constraint_widths=(0.5, 1.0, 0.0),
            aesthetic_mode="triadic",
            seed=9,
        )
        assert OptimizationConfig.from_dict(config.to_dict()) == config

    def test_unknown_key(self):
        with pytest.raises(ConfigurationError):
            OptimizationConfig.from_dict({"colour_space": "lab"})


class TestChannelBounds:

    def test_linear_contains_and_excess(self):
        cb = ChannelBounds("l", ((0.2, 0.4), (0.6, 0.8)))
        assert cb.contains(0.3)
        assert not cb.contains(0.5)
        assert cb.excess(0.5) == pytest.approx(0.1)
        assert cb.excess(0.9) == pytest.approx(0.1)
        assert cb.excess(0.7) == 0.0
        assert not cb.is_contiguous
        assert cb.total_length == pytest.approx(0.4)

    def test_hue_wraps(self):
        cb = ChannelBounds("h", ((0.9, 1.1),), is_hue=True)
        assert cb.contains(0.05)
        assert cb.contains(0.95)
        assert not cb.contains(0.5)
        assert cb.excess(0.5) == pytest.approx(0.4)

    def test_full(self):
        assert ChannelBounds("c").is_full
        assert ChannelBounds("h", ((0.3, 1.3),), is_hue=True).is_full
        assert not ChannelBounds("c", ((0.0, 0.5),)).is_full

    def test_reversed(self):
        with pytest.raises(ValueError):
            ChannelBounds("l", ((0.5, 0.2),))

    def test_linear_outside_unit(self):
        with pytest.raises(ValueError):
            ChannelBounds("l", ((0.5, 1.2),))

    def test_roundtrip(self):
        cb = ChannelBounds(
            "l", mode=ConstraintMode.SOFT,
            contours=(ContourInterval(z=0.6745, lo=0.3, hi=0.5),),
        )
        assert ChannelBounds.from_dict(cb.to_dict()) == cb


class TestBounds:

    def _bounds(self):
        return Bounds(
            space=ColorSpace.OKLCH,
            channels=(
                ChannelBounds("l", ((0.2, 0.8),)),
                ChannelBounds("c", ((0.0, 0.3),), mode=ConstraintMode.SOFT),
                ChannelBounds("h", ((0.9, 1.1),), is_hue=True),
            ),
            constraints=ConstraintSet(widths=(1.0, 1.0, 1.0)),
        )

    def test_contains_skips_soft(self):
        bounds = self._bounds()
        assert bounds.contains([0.5, 0.9, 0.0])
        assert not bounds.contains([0.9, 0.1, 0.0])

    def test_channel_lookup(self):
        assert self._bounds().channel("h").is_hue

    def test_wrong_channel_count(self):
        with pytest.raises(ValueError):
            Bounds(space=ColorSpace.LAB, channels=(ChannelBounds("l"),))

    def test_roundtrip(self):
        bounds = self._bounds()
        assert Bounds.from_dict(bounds.to_dict()) == bounds


class TestResults:

    def test_detail_closest(self):
        detail = ColorDetail(
            hex="#112233",
            values=(0.1, 0.2, 0.3),
            neighbors=(
                Neighbor(CvdType.DEUTAN, "#000000", 3.0),
                Neighbor(CvdType.NONE, "#FFFFFF", 5.0),
            ),
        )
        assert detail.closest.hex == "#FFFFFF"
        assert ColorDetail.from_dict(detail.to_dict()) == detail

    def test_run_result_roundtrip(self):
        run = RunResult(
            restart=2,
            parameters=(0.1, -0.2, 0.3),
            colors=("#AABBCC",),
            values=((0.5, 0.1, 200.0),),
            score=-12.5,
            distance_term=13.0,
            penalty_term=0.5,
            iterations=40,
            termination=TerminationReason.CONVERGED,
            start_score=-3.0,
        )
        assert RunResult.from_dict(run.to_dict()) == run

    def test_progress_pct(self):
        progress = RunProgress(
            completed=1, total=3, restart=0, run_score=-1.0, best_score=-1.0,
            start_colors=(), end_colors=(), best_colors=(),
        )
        assert progress.pct == 33
