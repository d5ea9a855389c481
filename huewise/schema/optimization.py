# Copyright (c) 2026 Huewise
# SPDX-License-Identifier: MIT

"""
Optimization schema: configuration, bounds and results.

Design principles:
- Immutable: every type is a frozen dataclass
- Validated once: a config that constructs is a config that runs
- Serializable: ``to_dict()`` / ``from_dict()`` on every type, JSON on results

Bounds are expressed in *normalized* channel units: each channel of the
active color space is mapped into [0, 1] by its gamut-scaled range. The
hue channel is measured in turns, so an arc may run past 1.0 and wraps.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Mapping, Optional

from huewise.errors import ConfigurationError
from huewise.schema.types import (
    AestheticMode,
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


# =============================================================================
# Configuration
# =============================================================================


def _parse_or_reject(enum_cls, value, name: str):
    try:
        return enum_cls.parse(value)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid {name}: {value!r}") from exc


def _per_channel(values, name: str) -> tuple:
    values = tuple(values)
    if len(values) != 3:
        raise ConfigurationError(f"{name} needs one entry per channel, got {len(values)}")
    return values


@dataclass(frozen=True, slots=True)
class OptimizationConfig:
    """
    Everything that controls one palette optimization.

    String identifiers are accepted for every enum field and resolved in
    ``__post_init__``. Per-channel tuples follow the color space's
    channel order (e.g. (l, c, h) for oklch).

    Attributes:
        color_space: Space the candidates are parameterized in
        n_colors_to_add: Number of new colors to generate (>= 1)
        n_restarts: Independent random restarts (>= 1)
        max_iterations: Nelder-Mead iteration cap per restart (>= 10)
        distance_metric: Pairwise distance; unknown names fall back to de2000
        mean_kind: Aggregation of the pairwise distance multiset
        mean_p: Exponent for power/Lehmer means (None = -2)
        cvd_weights: Weight per vision state; only positive weights are scored
        cvd_model: Simulation model for the deficiency states
        cvd_severity: Severity applied to every deficiency state, [0, 1]
        gamut_preset: Gamut that scales channel ranges and bounds clipping
        clip_to_gamut_during_optimization: Clip candidates to the gamut cube
            before scoring, and start from gamut-uniform samples
        constraint_topology: One interval per channel, or a union
        constraint_widths: Per-channel width in [0, 1]; 0 leaves it free
        constraint_modes: Per-channel hard (clip) or soft (metadata only)
        aesthetic_mode: Symmetric hue offsets applied before bounding
        seed: Seed for the run's random generator
        nm_step: Initial simplex step
        nm_tolerance: Simplex value-spread tolerance
        keep_all_runs: Retain every restart's RunResult in the BestResult
        n_workers: Worker threads (None = os.cpu_count())
    """
    color_space: ColorSpace = ColorSpace.OKLCH
    n_colors_to_add: int = 1
    n_restarts: int = 10
    max_iterations: int = 200
    distance_metric: DistanceMetric = DistanceMetric.DE2000
    mean_kind: MeanKind = MeanKind.HARMONIC
    mean_p: Optional[float] = None
    cvd_weights: Mapping[CvdType, float] = field(
        default_factory=lambda: {CvdType.NONE: 1.0}
    )
    cvd_model: CvdModel = CvdModel.LEGACY
    cvd_severity: float = 1.0
    gamut_preset: GamutPreset = GamutPreset.SRGB
    clip_to_gamut_during_optimization: bool = False
    constraint_topology: ConstraintTopology = ConstraintTopology.CONTIGUOUS
    constraint_widths: tuple[float, float, float] = (0.0, 0.0, 0.0)
    constraint_modes: tuple[ConstraintMode, ConstraintMode, ConstraintMode] = (
        ConstraintMode.HARD,
        ConstraintMode.HARD,
        ConstraintMode.HARD,
    )
    aesthetic_mode: AestheticMode = AestheticMode.NONE
    seed: Optional[int] = None
    nm_step: float = 1.2
    nm_tolerance: float = 1e-5
    keep_all_runs: bool = False
    n_workers: Optional[int] = None

    def __post_init__(self) -> None:
        """Coerce identifiers and reject invalid settings."""
        set_ = object.__setattr__

        space = ColorSpace.parse(self.color_space)
        if not space.is_optimizable:
            raise ConfigurationError(f"Color space {space.value!r} cannot be optimized")
        set_(self, "color_space", space)

        if self.n_colors_to_add < 1:
            raise ConfigurationError(f"n_colors_to_add must be >= 1, got {self.n_colors_to_add}")
        if self.n_restarts < 1:
            raise ConfigurationError(f"n_restarts must be >= 1, got {self.n_restarts}")
        if self.max_iterations < 10:
            raise ConfigurationError(f"max_iterations must be >= 10, got {self.max_iterations}")

        set_(self, "distance_metric", DistanceMetric.parse(self.distance_metric, fallback=True))
        set_(self, "mean_kind", _parse_or_reject(MeanKind, self.mean_kind, "mean_kind"))
        if self.mean_p is not None:
            set_(self, "mean_p", float(self.mean_p))

        weights: dict[CvdType, float] = {}
        for key, weight in dict(self.cvd_weights).items():
            state = _parse_or_reject(CvdType, key, "cvd_weights key")
            weight = float(weight)
            if not weight >= 0.0:
                raise ConfigurationError(f"CVD weight for {state.value!r} must be >= 0, got {weight}")
            weights[state] = weights.get(state, 0.0) + weight
        if not any(w > 0 for w in weights.values()):
            raise ConfigurationError("At least one CVD weight must be positive")
        set_(self, "cvd_weights", weights)

        set_(self, "cvd_model", _parse_or_reject(CvdModel, self.cvd_model, "cvd_model"))
        if not 0.0 <= self.cvd_severity <= 1.0:
            raise ConfigurationError(f"cvd_severity must be 0-1, got {self.cvd_severity}")

        set_(self, "gamut_preset", GamutPreset.parse(self.gamut_preset))

        set_(self, "constraint_topology", _parse_or_reject(
            ConstraintTopology, self.constraint_topology, "constraint_topology"
        ))
        widths = tuple(float(w) for w in _per_channel(self.constraint_widths, "constraint_widths"))
        for w in widths:
            if not 0.0 <= w <= 1.0:
                raise ConfigurationError(f"Constraint widths must be 0-1, got {w}")
        set_(self, "constraint_widths", widths)
        modes = _per_channel(self.constraint_modes, "constraint_modes")
        set_(self, "constraint_modes", tuple(
            _parse_or_reject(ConstraintMode, m, "constraint mode") for m in modes
        ))
        set_(self, "aesthetic_mode", _parse_or_reject(AestheticMode, self.aesthetic_mode, "aesthetic_mode"))

        if self.nm_step <= 0:
            raise ConfigurationError(f"nm_step must be positive, got {self.nm_step}")
        if self.nm_tolerance < 0:
            raise ConfigurationError(f"nm_tolerance must be >= 0, got {self.nm_tolerance}")
        if self.n_workers is not None and self.n_workers < 1:
            raise ConfigurationError(f"n_workers must be >= 1, got {self.n_workers}")

    @property
    def enabled_cvd_states(self) -> tuple[tuple[CvdType, float], ...]:
        """(state, weight) pairs with positive weight, in CvdType order."""
        return tuple(
            (state, self.cvd_weights[state])
            for state in CvdType
            if self.cvd_weights.get(state, 0.0) > 0.0
        )

    @property
    def dimension(self) -> int:
        """Length of the flat parameter vector."""
        return self.n_colors_to_add * 3

    def to_dict(self) -> dict:
        """Serialize to dictionary."""
        return {
            "color_space": self.color_space.value,
            "n_colors_to_add": self.n_colors_to_add,
            "n_restarts": self.n_restarts,
            "max_iterations": self.max_iterations,
            "distance_metric": self.distance_metric.value,
            "mean_kind": self.mean_kind.value,
            "mean_p": self.mean_p,
            "cvd_weights": {k.value: v for k, v in self.cvd_weights.items()},
            "cvd_model": self.cvd_model.value,
            "cvd_severity": self.cvd_severity,
            "gamut_preset": self.gamut_preset.value,
            "clip_to_gamut_during_optimization": self.clip_to_gamut_during_optimization,
            "constraint_topology": self.constraint_topology.value,
            "constraint_widths": list(self.constraint_widths),
            "constraint_modes": [m.value for m in self.constraint_modes],
            "aesthetic_mode": self.aesthetic_mode.value,
            "seed": self.seed,
            "nm_step": self.nm_step,
            "nm_tolerance": self.nm_tolerance,
            "keep_all_runs": self.keep_all_runs,
            "n_workers": self.n_workers,
        }

    @classmethod
    def from_dict(cls, data: dict) -> OptimizationConfig:
        """Deserialize from dictionary. Missing keys take their defaults."""
        known = {name for name in cls.__dataclass_fields__}
        unknown = set(data) - known
        if unknown:
            raise ConfigurationError(f"Unknown config keys: {sorted(unknown)}")
        kwargs = dict(data)
        for key in ("constraint_widths", "constraint_modes"):
            if key in kwargs:
                kwargs[key] = tuple(kwargs[key])
        return cls(**kwargs)


# =============================================================================
# Bounds
# =============================================================================


@dataclass(frozen=True, slots=True)
class ContourInterval:
    """Gaussian iso-density interval ``mean ± z·sd`` (visualization only)."""
    z: float
    lo: float
    hi: float

    def to_dict(self) -> dict:
        return {"z": self.z, "lo": self.lo, "hi": self.hi}

    @classmethod
    def from_dict(cls, data: dict) -> ContourInterval:
        return cls(z=data["z"], lo=data["lo"], hi=data["hi"])


@dataclass(frozen=True, slots=True)
class ChannelBounds:
    """
    Admissible region of one channel, in normalized units.

    Attributes:
        name: Channel name ("l", "c", "h", ...)
        intervals: Disjoint, sorted (lo, hi) intervals. For the hue channel
            ``lo`` lies in [0, 1) and ``hi`` may exceed 1 (the arc wraps).
        is_hue: True for the periodic hue channel
        mode: HARD bounds restrict decoding; SOFT bounds decode over [0, 1]
        contours: Gaussian contours of the palette (SOFT mode only)
    """
    name: str
    intervals: tuple[tuple[float, float], ...] = ((0.0, 1.0),)
    is_hue: bool = False
    mode: ConstraintMode = ConstraintMode.HARD
    contours: tuple[ContourInterval, ...] = ()

    def __post_init__(self) -> None:
        """Validate intervals."""
        if not self.intervals:
            raise ValueError(f"Channel {self.name!r} has no admissible interval")
        for lo, hi in self.intervals:
            if hi < lo:
                raise ValueError(f"Interval ({lo}, {hi}) is reversed")
            if not self.is_hue and (lo < 0.0 or hi > 1.0):
                raise ValueError(f"Interval ({lo}, {hi}) is outside [0, 1]")

    @property
    def lo(self) -> float:
        return self.intervals[0][0]

    @property
    def hi(self) -> float:
        return self.intervals[-1][1]

    @property
    def total_length(self) -> float:
        """Summed length of all intervals."""
        return sum(hi - lo for lo, hi in self.intervals)

    @property
    def is_contiguous(self) -> bool:
        return len(self.intervals) == 1

    @property
    def is_full(self) -> bool:
        """True when the channel is unconstrained."""
        return self.is_contiguous and self.total_length >= 1.0 - 1e-12 and (
            self.is_hue or (self.lo <= 0.0 and self.hi >= 1.0)
        )

    def contains(self, value: float, tol: float = 1e-9) -> bool:
        """True if a normalized value lies in an admissible interval."""
        if self.is_hue:
            if self.total_length >= 1.0 - 1e-12:
                return True
            v = value % 1.0
            return any(
                lo - tol <= v <= hi + tol or lo - tol <= v + 1.0 <= hi + tol
                for lo, hi in self.intervals
            )
        return any(lo - tol <= value <= hi + tol for lo, hi in self.intervals)

    def excess(self, value: float) -> float:
        """
        Distance from a normalized value to the nearest admissible point.

        Hue distances are circular and measured in turns.
        """
        if self.contains(value, tol=0.0):
            return 0.0
        if self.is_hue:
            v = value % 1.0
            best = 1.0
            for lo, hi in self.intervals:
                for edge in (lo, hi):
                    d = abs(v - edge % 1.0)
                    best = min(best, d, 1.0 - d)
            return best
        return min(
            (lo - value) if value < lo else (value - hi)
            for lo, hi in self.intervals
        )

    def to_dict(self) -> dict:
        """Serialize to dictionary."""
        d = {
            "name": self.name,
            "intervals": [list(iv) for iv in self.intervals],
            "is_hue": self.is_hue,
            "mode": self.mode.value,
        }
        if self.contours:
            d["contours"] = [c.to_dict() for c in self.contours]
        return d

    @classmethod
    def from_dict(cls, data: dict) -> ChannelBounds:
        """Deserialize from dictionary."""
        return cls(
            name=data["name"],
            intervals=tuple(tuple(iv) for iv in data["intervals"]),
            is_hue=data.get("is_hue", False),
            mode=ConstraintMode.parse(data.get("mode", "hard")),
            contours=tuple(ContourInterval.from_dict(c) for c in data.get("contours", [])),
        )


@dataclass(frozen=True, slots=True)
class ConstraintSet:
    """How bounds were derived: topology, per-channel widths/modes, harmony."""
    topology: ConstraintTopology = ConstraintTopology.CONTIGUOUS
    widths: tuple[float, float, float] = (0.0, 0.0, 0.0)
    modes: tuple[ConstraintMode, ConstraintMode, ConstraintMode] = (
        ConstraintMode.HARD,
        ConstraintMode.HARD,
        ConstraintMode.HARD,
    )
    aesthetic_mode: AestheticMode = AestheticMode.NONE

    @classmethod
    def from_config(cls, config: OptimizationConfig) -> ConstraintSet:
        return cls(
            topology=config.constraint_topology,
            widths=config.constraint_widths,
            modes=config.constraint_modes,
            aesthetic_mode=config.aesthetic_mode,
        )

    def to_dict(self) -> dict:
        return {
            "topology": self.topology.value,
            "widths": list(self.widths),
            "modes": [m.value for m in self.modes],
            "aesthetic_mode": self.aesthetic_mode.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> ConstraintSet:
        return cls(
            topology=ConstraintTopology.parse(data["topology"]),
            widths=tuple(data["widths"]),
            modes=tuple(ConstraintMode.parse(m) for m in data["modes"]),
            aesthetic_mode=AestheticMode.parse(data.get("aesthetic_mode", "none")),
        )


@dataclass(frozen=True, slots=True)
class Bounds:
    """
    Per-channel admissible regions for one color space.

    Immutable once built; recompute when the palette, space or
    constraint settings change.
    """
    space: ColorSpace
    channels: tuple[ChannelBounds, ChannelBounds, ChannelBounds]
    constraints: ConstraintSet = field(default_factory=ConstraintSet)

    def __post_init__(self) -> None:
        if len(self.channels) != 3:
            raise ValueError("Bounds requires exactly three channels")

    def channel(self, name: str) -> ChannelBounds:
        """Bounds of a named channel."""
        return self.channels[self.space.channels.index(name)]

    def contains(self, normalized) -> bool:
        """True if a normalized color lies inside every hard bound."""
        return all(
            cb.mode is ConstraintMode.SOFT or cb.contains(float(v))
            for cb, v in zip(self.channels, normalized)
        )

    def to_dict(self) -> dict:
        return {
            "space": self.space.value,
            "channels": [c.to_dict() for c in self.channels],
            "constraints": self.constraints.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> Bounds:
        return cls(
            space=ColorSpace.parse(data["space"]),
            channels=tuple(ChannelBounds.from_dict(c) for c in data["channels"]),
            constraints=ConstraintSet.from_dict(data["constraints"]),
        )


# =============================================================================
# Results
# =============================================================================


@dataclass(frozen=True, slots=True)
class Neighbor:
    """Closest other color under one vision state."""
    state: CvdType
    hex: str
    distance: float

    def to_dict(self) -> dict:
        return {"state": self.state.value, "hex": self.hex, "distance": self.distance}

    @classmethod
    def from_dict(cls, data: dict) -> Neighbor:
        return cls(state=CvdType.parse(data["state"]), hex=data["hex"], distance=data["distance"])


@dataclass(frozen=True, slots=True)
class ColorDetail:
    """
    Diagnostics for one generated color.

    Attributes:
        hex: The color
        values: Channel values in the optimization space
        influence: Aggregate distance with this color minus without it
        influence_rank: 1 = largest influence
        neighbors: Closest other color per vision state (normal vision first)
    """
    hex: str
    values: tuple[float, float, float]
    influence: float = 0.0
    influence_rank: int = 1
    neighbors: tuple[Neighbor, ...] = ()

    @property
    def closest(self) -> Optional[Neighbor]:
        """Closest color under normal vision, if any."""
        for n in self.neighbors:
            if n.state is CvdType.NONE:
                return n
        return None

    def to_dict(self) -> dict:
        return {
            "hex": self.hex,
            "values": list(self.values),
            "influence": self.influence,
            "influence_rank": self.influence_rank,
            "neighbors": [n.to_dict() for n in self.neighbors],
        }

    @classmethod
    def from_dict(cls, data: dict) -> ColorDetail:
        return cls(
            hex=data["hex"],
            values=tuple(data["values"]),
            influence=data.get("influence", 0.0),
            influence_rank=data.get("influence_rank", 1),
            neighbors=tuple(Neighbor.from_dict(n) for n in data.get("neighbors", [])),
        )


@dataclass(frozen=True, slots=True)
class RunResult:
    """
    Outcome of one restart. Built once, never mutated.

    Attributes:
        restart: Zero-based restart index
        parameters: Final flat parameter vector
        colors: Decoded hex colors
        values: Decoded channel values in the optimization space
        score: Objective value (lower is better)
        distance_term: Weighted aggregate distance (higher is better)
        penalty_term: Normalized penalty included in ``score``
        iterations: Solver iterations used
        termination: Why the solver stopped
        start_score: Objective value at the start point
        details: Per-color diagnostics
    """
    restart: int
    parameters: tuple[float, ...]
    colors: tuple[str, ...]
    values: tuple[tuple[float, float, float], ...]
    score: float
    distance_term: float
    penalty_term: float
    iterations: int
    termination: TerminationReason
    start_score: float = float("nan")
    details: tuple[ColorDetail, ...] = ()

    def to_dict(self) -> dict:
        return {
            "restart": self.restart,
            "parameters": list(self.parameters),
            "colors": list(self.colors),
            "values": [list(v) for v in self.values],
            "score": self.score,
            "distance_term": self.distance_term,
            "penalty_term": self.penalty_term,
            "iterations": self.iterations,
            "termination": self.termination.value,
            "start_score": self.start_score,
            "details": [d.to_dict() for d in self.details],
        }

    @classmethod
    def from_dict(cls, data: dict) -> RunResult:
        return cls(
            restart=data["restart"],
            parameters=tuple(data["parameters"]),
            colors=tuple(data["colors"]),
            values=tuple(tuple(v) for v in data["values"]),
            score=data["score"],
            distance_term=data["distance_term"],
            penalty_term=data["penalty_term"],
            iterations=data["iterations"],
            termination=TerminationReason.parse(data["termination"]),
            start_score=data.get("start_score", float("nan")),
            details=tuple(ColorDetail.from_dict(d) for d in data.get("details", [])),
        )


@dataclass(frozen=True, slots=True)
class RunProgress:
    """Reported once per completed restart."""
    completed: int
    total: int
    restart: int
    run_score: float
    best_score: float
    start_colors: tuple[str, ...]
    end_colors: tuple[str, ...]
    best_colors: tuple[str, ...]

    @property
    def pct(self) -> int:
        """Percent of restarts completed, rounded."""
        return int(round(100.0 * self.completed / self.total)) if self.total else 100


@dataclass(frozen=True, slots=True)
class RunTrace:
    """Full decoded state at a stage of a restart."""
    stage: TraceStage
    restart: int
    parameters: tuple[float, ...]
    colors: tuple[str, ...]
    values: tuple[tuple[float, float, float], ...]
    score: float
    distance_term: float
    penalty_term: float
    details: tuple[ColorDetail, ...] = ()


@dataclass(frozen=True, slots=True)
class BestResult:
    """
    Output of ``optimize_palette``.

    Attributes:
        colors: Winning hex colors
        values: Winning channel values in the optimization space
        score: Objective value of the winning run
        termination: Solver termination reason of the winning run
        best_run: The winning RunResult
        runs: Every RunResult in restart order (empty unless kept)
        runs_completed: Restarts that ran to completion
        cancelled: True if the optimization was cancelled early
        bounds: Bounds the candidates were decoded into
    """
    colors: tuple[str, ...]
    values: tuple[tuple[float, float, float], ...]
    score: float
    termination: TerminationReason
    best_run: RunResult
    bounds: Bounds
    runs: tuple[RunResult, ...] = ()
    runs_completed: int = 0
    cancelled: bool = False

    @property
    def details(self) -> tuple[ColorDetail, ...]:
        return self.best_run.details

    @property
    def distance_term(self) -> float:
        return self.best_run.distance_term

    @property
    def penalty_term(self) -> float:
        return self.best_run.penalty_term

    def ranked_runs(self) -> tuple[RunResult, ...]:
        """Retained runs, best first."""
        return tuple(sorted(self.runs, key=lambda r: (r.score, r.restart)))

    def to_dict(self) -> dict:
        """Serialize to dictionary."""
        d = {
            "colors": list(self.colors),
            "values": [list(v) for v in self.values],
            "score": self.score,
            "termination": self.termination.value,
            "best_run": self.best_run.to_dict(),
            "bounds": self.bounds.to_dict(),
            "runs_completed": self.runs_completed,
            "cancelled": self.cancelled,
        }
        if self.runs:
            d["runs"] = [r.to_dict() for r in self.runs]
        return d

    @classmethod
    def from_dict(cls, data: dict) -> BestResult:
        """Deserialize from dictionary."""
        return cls(
            colors=tuple(data["colors"]),
            values=tuple(tuple(v) for v in data["values"]),
            score=data["score"],
            termination=TerminationReason.parse(data["termination"]),
            best_run=RunResult.from_dict(data["best_run"]),
            bounds=Bounds.from_dict(data["bounds"]),
            runs=tuple(RunResult.from_dict(r) for r in data.get("runs", [])),
            runs_completed=data.get("runs_completed", 0),
            cancelled=data.get("cancelled", False),
        )

    def to_json(self, indent: Optional[int] = 2) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)
