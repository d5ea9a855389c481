# Copyright (c) 2026 Huewise
# SPDX-License-Identifier: MIT

"""Tests for color space conversions, hex codecs and range utilities."""

import numpy as np
import pytest

from huewise.color.colorspace import (
    CHANNEL_RANGES,
    clamp_to_range,
    convert_color_values,
    decode_color,
    effective_range_from_colors,
    encode_color,
    hex_to_rgb,
    hsl_to_rgb,
    is_in_gamut,
    lab_to_lch,
    lch_to_lab,
    linear_to_srgb,
    normalize_with_range,
    oklab_to_srgb,
    project_to_gamut,
    range_from_preset,
    rgb_to_hex,
    rgb_to_hsl,
    srgb_to_linear,
    srgb_to_oklab,
    srgb_to_xyz,
    unscale_with_range,
    xyz_to_lab,
    xyz_to_oklab,
)
from huewise.errors import InvalidColorSpace
from huewise.schema.types import ColorSpace, GamutPreset


SAMPLES = np.array([
    [0.2, 0.5, 0.7],
    [0.9, 0.1, 0.3],
    [0.45, 0.45, 0.05],
    [0.8, 0.8, 0.8],
])


class TestTransferCurve:
    """sRGB ↔ linear RGB."""

    def test_roundtrip_batch(self):
        srgb = np.random.RandomState(7).random((50, 3))
        np.testing.assert_allclose(linear_to_srgb(srgb_to_linear(srgb)), srgb, atol=1e-10)

    def test_linear_segment(self):
        assert float(srgb_to_linear(np.array([0.03]))[0]) == pytest.approx(0.03 / 12.92)

    def test_endpoints(self):
        np.testing.assert_allclose(srgb_to_linear([0.0, 1.0]), [0.0, 1.0], atol=1e-12)

    def test_out_of_gamut_survives(self):
        linear = np.array([-0.01, 1.2, 0.5])
        np.testing.assert_allclose(srgb_to_linear(linear_to_srgb(linear)), linear, atol=1e-10)


class TestHexCodec:

    def test_parse(self):
        np.testing.assert_allclose(hex_to_rgb("#FF0000"), [1.0, 0.0, 0.0])
        np.testing.assert_allclose(hex_to_rgb("00ff80"), [0.0, 1.0, 128 / 255])

    def test_invalid_raises(self):
        with pytest.raises(ValueError):
            hex_to_rgb("#XYZ")

    def test_format_uppercase(self):
        assert rgb_to_hex([1.0, 0.0, 0.0]) == "#FF0000"

    def test_round_half_up(self):
        assert rgb_to_hex([0.5, 0.5, 0.5]) == "#808080"

    def test_clipped(self):
        assert rgb_to_hex([1.5, -0.2, 0.0]) == "#FF0000"


class TestHSL:
    """HSL boundary behavior."""

    def test_pure_red(self):
        np.testing.assert_allclose(hsl_to_rgb([0, 100, 50]), [1.0, 0.0, 0.0], atol=1e-12)

    def test_hue_360_equals_0(self):
        np.testing.assert_allclose(hsl_to_rgb([360, 100, 50]), hsl_to_rgb([0, 100, 50]), atol=1e-12)

    def test_zero_saturation_is_gray(self):
        rgb = hsl_to_rgb([200, 0, 40])
        np.testing.assert_allclose(rgb, [0.4, 0.4, 0.4], atol=1e-12)

    def test_full_lightness_is_white(self):
        np.testing.assert_allclose(hsl_to_rgb([120, 80, 100]), [1.0, 1.0, 1.0], atol=1e-12)

    def test_zero_lightness_is_black(self):
        np.testing.assert_allclose(hsl_to_rgb([120, 80, 0]), [0.0, 0.0, 0.0], atol=1e-12)

    def test_rgb_to_hsl_red(self):
        np.testing.assert_allclose(rgb_to_hsl([1.0, 0.0, 0.0]), [0.0, 100.0, 50.0], atol=1e-9)

    def test_rgb_to_hsl_gray_has_zero_saturation(self):
        hsl = rgb_to_hsl([0.3, 0.3, 0.3])
        assert hsl[1] == pytest.approx(0.0)
        assert hsl[2] == pytest.approx(30.0)


class TestRoundtrips:
    """space → XYZ → space reproduces the input."""

    @pytest.mark.parametrize("space", [s.value for s in ColorSpace])
    def test_roundtrip_through_space(self, space):
        values = convert_color_values(SAMPLES, "srgb", space)
        back = convert_color_values(values, space, "srgb")
        np.testing.assert_allclose(back, SAMPLES, atol=1e-4)

    def test_oklab_bridge(self):
        lab = np.array([0.6, 0.1, -0.05])
        np.testing.assert_allclose(srgb_to_oklab(oklab_to_srgb(lab)), lab, atol=1e-4)

    def test_white_lightness(self):
        white = srgb_to_xyz([1.0, 1.0, 1.0])
        assert xyz_to_lab(white)[0] == pytest.approx(100.0, abs=1e-3)
        assert xyz_to_oklab(white)[0] == pytest.approx(1.0, abs=1e-3)

    def test_lch_hue_periodic(self):
        np.testing.assert_allclose(lch_to_lab([50, 30, 10]), lch_to_lab([50, 30, 370]), atol=1e-10)

    def test_lch_hue_range(self):
        lch = lab_to_lch([[50, -10, -10], [50, 10, 0]])
        assert np.all((lch[:, 2] >= 0) & (lch[:, 2] < 360))

    def test_same_space_is_copy(self):
        values = np.array([0.5, 0.1, 120.0])
        out = convert_color_values(values, "oklch", "oklch")
        np.testing.assert_array_equal(out, values)
        assert out is not values

    def test_unknown_space(self):
        with pytest.raises(InvalidColorSpace) as exc_info:
            convert_color_values(SAMPLES, "srgb", "cmyk")
        assert exc_info.value.identifier == "cmyk"


class TestRanges:

    def test_srgb_preset_is_canonical(self):
        assert range_from_preset("lab", "srgb") == CHANNEL_RANGES[ColorSpace.LAB]

    def test_wide_gamut_scales_about_centre(self):
        rng = range_from_preset("oklch", GamutPreset.DISPLAY_P3)
        assert rng.channel("l") == (pytest.approx(-0.05), pytest.approx(1.05))
        assert rng.channel("c") == (pytest.approx(-0.025), pytest.approx(0.525))
        assert rng.channel("h") == (0.0, 360.0)

    def test_rec2020_scale(self):
        lo, hi = range_from_preset("lab", "rec2020").channel("a")
        assert (lo, hi) == (pytest.approx(-216.0), pytest.approx(216.0))

    def test_normalize_wraps_hue(self):
        rng = CHANNEL_RANGES[ColorSpace.LCH]
        out = normalize_with_range([50.0, 115.0, 370.0], rng)
        np.testing.assert_allclose(out, [0.5, 0.5, 10.0 / 360.0])

    def test_unscale_inverts_normalize(self):
        rng = CHANNEL_RANGES[ColorSpace.OKLAB]
        values = np.array([[0.4, -0.1, 0.2], [0.9, 0.3, -0.4]])
        np.testing.assert_allclose(unscale_with_range(normalize_with_range(values, rng), rng), values)

    def test_clamp(self):
        rng = CHANNEL_RANGES[ColorSpace.LCH]
        np.testing.assert_allclose(clamp_to_range([120.0, -5.0, 400.0], rng), [100.0, 0.0, 40.0])

    def test_non_optimizable_has_no_range(self):
        with pytest.raises(InvalidColorSpace):
            range_from_preset("xyz")

    def test_effective_range(self):
        rng = effective_range_from_colors(["#000000", "#808080"], "lab")
        lo, hi = rng.channel("l")
        assert lo == pytest.approx(0.0, abs=1e-6)
        assert 50.0 < hi < 60.0


class TestGamut:

    def test_primary_in_gamut(self):
        assert is_in_gamut(decode_color("#FF0000", "oklch"), "oklch")

    def test_high_chroma_out_of_gamut(self):
        assert not is_in_gamut([0.7, 0.4, 150.0], "oklch")

    def test_projection_lands_in_gamut(self):
        projected = project_to_gamut([0.7, 0.4, 150.0], "oklch")
        assert is_in_gamut(projected, "oklch")

    def test_wide_gamut_accepts_more(self):
        p3_green = convert_color_values([0.0, 1.0, 0.0], "rgb", "xyz")
        # Linear sRGB green is inside both P3 and Rec.2020
        assert is_in_gamut(p3_green, "xyz", "display-p3")
        assert is_in_gamut(p3_green, "xyz", "rec2020")


class TestDecodeEncode:

    @pytest.mark.parametrize("space", ["hsl", "lab", "lch", "oklab", "oklch", "luv", "jzazbz"])
    def test_hex_roundtrip(self, space):
        assert encode_color(decode_color("#3941C8", space), space) == "#3941C8"

    def test_decode_hsl(self):
        np.testing.assert_allclose(decode_color("#FF0000", "hsl"), [0.0, 100.0, 50.0], atol=1e-9)
