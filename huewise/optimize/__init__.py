# Copyright (c) 2026 Huewise
# SPDX-License-Identifier: MIT

"""
Constrained multi-start palette optimizer.

    palette → bounds → objective (via the transform layer) → Nelder-Mead
            → driver (restarts, best tracking, diagnostics)
"""

from huewise.optimize.bounds import compute_bounds, normalize_palette, palette_bounds
from huewise.optimize.driver import (
    gamut_uniform_start,
    optimize_palette,
    random_start,
    run_restart,
)
from huewise.optimize.nelder_mead import NelderMeadResult, nelder_mead
from huewise.optimize.objective import ObjectiveBreakdown, PaletteObjective
from huewise.optimize.transform import ParameterTransform, logistic, logit_clamped, wrap01

__all__ = [
    # Entry point
    "optimize_palette",
    # Building blocks
    "compute_bounds",
    "palette_bounds",
    "normalize_palette",
    "ParameterTransform",
    "PaletteObjective",
    "ObjectiveBreakdown",
    "nelder_mead",
    "NelderMeadResult",
    "run_restart",
    "random_start",
    "gamut_uniform_start",
    # Transform helpers
    "logistic",
    "logit_clamped",
    "wrap01",
]
