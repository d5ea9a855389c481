# Copyright (c) 2026 Huewise
# SPDX-License-Identifier: MIT

"""
Huewise -- Perceptually distinct palette extension.

Generates new colors that are maximally distinguishable from an existing
palette and from each other, optionally robust to simulated color vision
deficiency, within user-set channel bounds and a target gamut.

Quick start::

    from huewise import OptimizationConfig, optimize_palette

    result = optimize_palette(
        ["#1F77B4", "#FF7F0E"],
        OptimizationConfig(n_colors_to_add=2, seed=7),
    )
    result.colors     # ('#...', '#...')
    result.to_json()  # Full diagnostics

The color science primitives live in ``huewise.color``.
"""

from __future__ import annotations

__version__ = "1.0.0"

from huewise.color import (
    aggregate_distances,
    color_distance,
    convert_color_values,
    simulate_hex,
)
from huewise.errors import (
    ConfigurationError,
    HuewiseError,
    InvalidColorSpace,
    OptimizationCancelled,
)
from huewise.optimize import optimize_palette
from huewise.schema import (
    BestResult,
    ColorSpace,
    CvdType,
    DistanceMetric,
    MeanKind,
    OptimizationConfig,
    RunProgress,
    RunResult,
    RunTrace,
)

__all__ = [
    # Core API
    "optimize_palette",
    "OptimizationConfig",
    "BestResult",
    "RunResult",
    "RunProgress",
    "RunTrace",
    # Library functions (commonly needed)
    "convert_color_values",
    "color_distance",
    "aggregate_distances",
    "simulate_hex",
    # Identifiers
    "ColorSpace",
    "DistanceMetric",
    "MeanKind",
    "CvdType",
    # Errors
    "HuewiseError",
    "InvalidColorSpace",
    "ConfigurationError",
    "OptimizationCancelled",
    # Version
    "__version__",
]
