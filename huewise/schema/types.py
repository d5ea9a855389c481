# Copyright (c) 2026 Huewise
# SPDX-License-Identifier: MIT

"""
Closed enumerations and channel ranges.

Every identifier that selects behavior (space, metric, mean, deficiency,
gamut, constraint topology) is a member of a closed Enum. String input is
accepted at the API boundary and resolved once through ``parse()``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import logging
from typing import Optional

from huewise.errors import ConfigurationError, InvalidColorSpace

logger = logging.getLogger(__name__)


class _ParseableEnum(Enum):
    """Enum with case-insensitive string parsing and aliases."""

    @classmethod
    def _aliases(cls) -> dict[str, str]:
        return {}

    @classmethod
    def _invalid(cls, value: object) -> Exception:
        return ConfigurationError(f"Unknown {cls.__name__}: {value!r}")

    @classmethod
    def parse(cls, value):
        """Resolve an enum member from a member or a string identifier."""
        if isinstance(value, cls):
            return value
        key = str(value if value is not None else "").strip().lower()
        key = cls._aliases().get(key, key)
        try:
            return cls(key)
        except ValueError:
            raise cls._invalid(value) from None


# =============================================================================
# Color spaces and gamuts
# =============================================================================


class ColorSpace(_ParseableEnum):
    """
    Supported color spaces.

    ``RGB`` is *linear* RGB (sRGB primaries); ``SRGB`` is the gamma-encoded
    form. Only the perceptual spaces are optimizable.
    """
    HSL = "hsl"
    LAB = "lab"
    LCH = "lch"
    OKLAB = "oklab"
    OKLCH = "oklch"
    LUV = "luv"
    JZAZBZ = "jzazbz"
    XYZ = "xyz"
    RGB = "rgb"
    SRGB = "srgb"

    @classmethod
    def _invalid(cls, value: object) -> Exception:
        return InvalidColorSpace(value)

    @property
    def channels(self) -> tuple[str, ...]:
        """Channel names in array order."""
        return CHANNEL_ORDER[self]

    @property
    def hue_index(self) -> Optional[int]:
        """Index of the periodic hue channel, or None."""
        channels = self.channels
        return channels.index("h") if "h" in channels else None

    @property
    def lightness_index(self) -> Optional[int]:
        """Index of the lightness-like channel, or None."""
        for key in ("l", "jz"):
            if key in self.channels:
                return self.channels.index(key)
        return None

    @property
    def saturation_index(self) -> Optional[int]:
        """Index of the saturation/chroma channel, or None."""
        for key in ("s", "c"):
            if key in self.channels:
                return self.channels.index(key)
        return None

    @property
    def is_optimizable(self) -> bool:
        return self in OPTIMIZABLE_SPACES


CHANNEL_ORDER: dict[ColorSpace, tuple[str, ...]] = {
    ColorSpace.HSL: ("h", "s", "l"),
    ColorSpace.LAB: ("l", "a", "b"),
    ColorSpace.LCH: ("l", "c", "h"),
    ColorSpace.OKLAB: ("l", "a", "b"),
    ColorSpace.OKLCH: ("l", "c", "h"),
    ColorSpace.LUV: ("l", "u", "v"),
    ColorSpace.JZAZBZ: ("jz", "az", "bz"),
    ColorSpace.XYZ: ("x", "y", "z"),
    ColorSpace.RGB: ("r", "g", "b"),
    ColorSpace.SRGB: ("r", "g", "b"),
}

OPTIMIZABLE_SPACES = frozenset({
    ColorSpace.HSL,
    ColorSpace.LAB,
    ColorSpace.LCH,
    ColorSpace.OKLAB,
    ColorSpace.OKLCH,
    ColorSpace.LUV,
    ColorSpace.JZAZBZ,
})


class GamutPreset(_ParseableEnum):
    """Display gamuts with D65 white."""
    SRGB = "srgb"
    DISPLAY_P3 = "display-p3"
    REC2020 = "rec2020"

    @classmethod
    def _aliases(cls) -> dict[str, str]:
        return {"p3": "display-p3", "displayp3": "display-p3", "rec.2020": "rec2020"}

    @classmethod
    def _invalid(cls, value: object) -> Exception:
        return InvalidColorSpace(value, kind="gamut preset")

    @property
    def scale(self) -> float:
        """Factor applied to non-hue channel extents by range_from_preset."""
        return {
            GamutPreset.SRGB: 1.0,
            GamutPreset.DISPLAY_P3: 1.1,
            GamutPreset.REC2020: 1.2,
        }[self]


# =============================================================================
# Metrics and aggregation
# =============================================================================


class DistanceMetric(_ParseableEnum):
    """Perceptual distance metrics."""
    DE2000 = "de2000"
    LAB76 = "lab76"
    OKLAB76 = "oklab76"
    CAM02UCS = "cam02ucs"
    CAM16UCS = "cam16ucs"
    DEITP = "deitp"

    @classmethod
    def _invalid(cls, value: object) -> Exception:
        return InvalidColorSpace(value, kind="distance metric")

    @classmethod
    def parse(cls, value, fallback: bool = False):
        """
        Resolve a metric.

        With ``fallback=True`` an unrecognized identifier resolves to
        DE2000 instead of raising.
        """
        if value is None:
            return cls.DE2000
        try:
            return super().parse(value)
        except InvalidColorSpace:
            if not fallback:
                raise
            logger.warning(
                "Unknown distance metric %r, falling back to de2000", value
            )
            return cls.DE2000


class MeanKind(_ParseableEnum):
    """Generalized means used to aggregate a distance multiset."""
    HARMONIC = "harmonic"
    GEOMETRIC = "geometric"
    ARITHMETIC = "arithmetic"
    QUADRATIC = "quadratic"
    LEHMER = "lehmer"
    POWER = "power"
    MINIMUM = "minimum"

    @classmethod
    def _aliases(cls) -> dict[str, str]:
        return {"min": "minimum", "mean": "arithmetic", "rms": "quadratic"}


# =============================================================================
# Color vision deficiency
# =============================================================================


class CvdType(_ParseableEnum):
    """Simulated vision states. NONE is normal vision."""
    NONE = "none"
    DEUTAN = "deutan"
    PROTAN = "protan"
    TRITAN = "tritan"

    @classmethod
    def _aliases(cls) -> dict[str, str]:
        return {
            "normal": "none",
            "deuteranomaly": "deutan",
            "deuteranopia": "deutan",
            "protanomaly": "protan",
            "protanopia": "protan",
            "tritanomaly": "tritan",
            "tritanopia": "tritan",
        }


class CvdModel(_ParseableEnum):
    """CVD simulation models."""
    LEGACY = "legacy"
    MACHADO2009 = "machado2009"

    @classmethod
    def _aliases(cls) -> dict[str, str]:
        return {"machado": "machado2009"}


# =============================================================================
# Constraints
# =============================================================================


class ConstraintTopology(_ParseableEnum):
    """Single interval per channel, or a union of intervals/arcs."""
    CONTIGUOUS = "contiguous"
    DISCONTIGUOUS = "discontiguous"


class ConstraintMode(_ParseableEnum):
    """Hard bounds clip the search; soft bounds are metadata only."""
    HARD = "hard"
    SOFT = "soft"


class AestheticMode(_ParseableEnum):
    """Symmetric hue offsets added to the palette before bounding."""
    NONE = "none"
    COMPLEMENTARY = "complementary"
    TRIADIC = "triadic"
    TETRADIC = "tetradic"

    @property
    def offsets(self) -> tuple[float, ...]:
        """Angular offsets as fractions of a full turn."""
        return {
            AestheticMode.NONE: (),
            AestheticMode.COMPLEMENTARY: (0.5,),
            AestheticMode.TRIADIC: (1.0 / 3.0, 2.0 / 3.0),
            AestheticMode.TETRADIC: (0.25, 0.5, 0.75),
        }[self]


class TerminationReason(_ParseableEnum):
    """Why the solver stopped."""
    CONVERGED = "converged"
    MAX_ITERATIONS = "max iterations"


class TraceStage(_ParseableEnum):
    """Point in a restart at which a verbose trace is emitted."""
    START = "start"
    END = "end"
    BEST = "best"
    FINAL_BEST = "final-best"


# =============================================================================
# Channel ranges
# =============================================================================


@dataclass(frozen=True, slots=True)
class ChannelRange:
    """
    Canonical legal extent of each channel of a color space.

    Used to normalize channel values into [0, 1]. The hue channel is
    periodic over its extent.

    Attributes:
        space: The color space these extents belong to
        mins: Per-channel minimum, in channel order
        maxs: Per-channel maximum, in channel order
    """
    space: ColorSpace
    mins: tuple[float, float, float]
    maxs: tuple[float, float, float]

    def __post_init__(self) -> None:
        """Validate extents."""
        if len(self.mins) != 3 or len(self.maxs) != 3:
            raise ValueError("ChannelRange requires exactly three channels")
        for lo, hi in zip(self.mins, self.maxs):
            if hi < lo:
                raise ValueError(f"Channel max {hi} is below min {lo}")

    def channel(self, name: str) -> tuple[float, float]:
        """(min, max) for a named channel."""
        idx = self.space.channels.index(name)
        return self.mins[idx], self.maxs[idx]

    def to_dict(self) -> dict:
        """Serialize to dictionary keyed by channel name."""
        return {
            "space": self.space.value,
            "min": dict(zip(self.space.channels, self.mins)),
            "max": dict(zip(self.space.channels, self.maxs)),
        }

    @classmethod
    def from_dict(cls, data: dict) -> ChannelRange:
        """Deserialize from dictionary."""
        space = ColorSpace.parse(data["space"])
        return cls(
            space=space,
            mins=tuple(float(data["min"][ch]) for ch in space.channels),
            maxs=tuple(float(data["max"][ch]) for ch in space.channels),
        )
