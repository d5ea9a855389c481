# Copyright (c) 2026 Huewise
# SPDX-License-Identifier: MIT

"""
Color science primitives.

Pure, stateless functions over NumPy arrays; safe to call concurrently.
"""

from huewise.color.appearance import (
    AppearanceModel,
    ViewingConditions,
    xyz_to_cam02_ucs,
    xyz_to_cam16_ucs,
    xyz_to_jmh,
)
from huewise.color.colorspace import (
    CHANNEL_RANGES,
    channel_range,
    clamp_to_range,
    convert_color_values,
    decode_color,
    decode_colors,
    effective_range_from_colors,
    effective_range_from_values,
    encode_color,
    encode_colors,
    from_xyz,
    hex_to_rgb,
    hsl_to_rgb,
    is_in_gamut,
    linear_to_srgb,
    normalize_with_range,
    project_to_gamut,
    range_from_preset,
    rgb_to_hex,
    rgb_to_hsl,
    srgb_to_linear,
    to_xyz,
    unscale_with_range,
)
from huewise.color.cvd import cvd_matrix, simulate_cvd, simulate_hex, simulate_linear
from huewise.color.distance import (
    color_distance,
    delta_e_2000,
    distance_between_coords,
    euclidean_distance,
    metric_coordinates,
)
from huewise.color.ictcp import delta_e_itp, xyz_to_ictcp
from huewise.color.means import aggregate_distances
from huewise.color.resolvability import (
    discriminability_label,
    distance_matrix,
    metric_jnd,
    nearest_neighbors,
)

__all__ = [
    # Conversions
    "convert_color_values",
    "to_xyz",
    "from_xyz",
    "srgb_to_linear",
    "linear_to_srgb",
    "hex_to_rgb",
    "rgb_to_hex",
    "rgb_to_hsl",
    "hsl_to_rgb",
    "decode_color",
    "decode_colors",
    "encode_color",
    "encode_colors",
    # Ranges and gamut
    "CHANNEL_RANGES",
    "channel_range",
    "range_from_preset",
    "normalize_with_range",
    "unscale_with_range",
    "clamp_to_range",
    "effective_range_from_values",
    "effective_range_from_colors",
    "project_to_gamut",
    "is_in_gamut",
    # Appearance models
    "AppearanceModel",
    "ViewingConditions",
    "xyz_to_jmh",
    "xyz_to_cam02_ucs",
    "xyz_to_cam16_ucs",
    "xyz_to_ictcp",
    # Distances
    "delta_e_2000",
    "delta_e_itp",
    "euclidean_distance",
    "metric_coordinates",
    "distance_between_coords",
    "color_distance",
    "aggregate_distances",
    "distance_matrix",
    "nearest_neighbors",
    "metric_jnd",
    "discriminability_label",
    # CVD
    "cvd_matrix",
    "simulate_cvd",
    "simulate_linear",
    "simulate_hex",
]
