# Copyright (c) 2026 Huewise
# SPDX-License-Identifier: MIT

"""
Schema definitions for palette optimization.

All types in this module are immutable (frozen dataclasses) or closed
enumerations. A RunResult, once produced, is never altered.
"""

from huewise.schema.optimization import (
    BestResult,
    Bounds,
    ChannelBounds,
    ColorDetail,
    ConstraintSet,
    ContourInterval,
    Neighbor,
    OptimizationConfig,
    RunProgress,
    RunResult,
    RunTrace,
)
from huewise.schema.types import (
    CHANNEL_ORDER,
    OPTIMIZABLE_SPACES,
    AestheticMode,
    ChannelRange,
    ColorSpace,
    ConstraintMode,
    ConstraintTopology,
    CvdModel,
    CvdType,
    DistanceMetric,
    GamutPreset,
    MeanKind,
    TerminationReason,
    TraceStage,
)

__all__ = [
    # Enumerations
    "ColorSpace",
    "GamutPreset",
    "DistanceMetric",
    "MeanKind",
    "CvdType",
    "CvdModel",
    "ConstraintTopology",
    "ConstraintMode",
    "AestheticMode",
    "TerminationReason",
    "TraceStage",
    "CHANNEL_ORDER",
    "OPTIMIZABLE_SPACES",
    # Ranges and bounds
    "ChannelRange",
    "ChannelBounds",
    "ContourInterval",
    "ConstraintSet",
    "Bounds",
    # Configuration
    "OptimizationConfig",
    # Results
    "Neighbor",
    "ColorDetail",
    "RunResult",
    "RunProgress",
    "RunTrace",
    "BestResult",
]
