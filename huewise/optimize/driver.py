# Copyright (c) 2026 Huewise
# SPDX-License-Identifier: MIT

"""
Optimization driver: independent random restarts on a worker pool.

Each restart draws its own start point from a sub-seed fixed up front,
runs Nelder-Mead, and produces an immutable RunResult. A lock-guarded
slot keeps the best run (lowest objective, lowest restart index on ties),
so the outcome does not depend on thread scheduling.

Cancellation is cooperative: a set ``cancel`` event stops new restarts
from starting, while restarts already in flight complete.
"""

from __future__ import annotations

import logging
import os
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Optional, Sequence, Union

import numpy as np
from numpy.typing import NDArray

from huewise.color.colorspace import (
    from_xyz,
    gamut_to_xyz,
    is_in_gamut,
    normalize_with_range,
    project_to_gamut,
    unscale_with_range,
)
from huewise.errors import OptimizationCancelled
from huewise.optimize.nelder_mead import nelder_mead
from huewise.optimize.objective import ObjectiveBreakdown, PaletteObjective
from huewise.optimize.transform import logit_clamped
from huewise.schema.optimization import (
    BestResult,
    OptimizationConfig,
    RunProgress,
    RunResult,
    RunTrace,
)
from huewise.schema.types import TraceStage

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[RunProgress], None]
VerboseCallback = Callable[[RunTrace], None]

_MAX_SEED = np.iinfo(np.int64).max


# =============================================================================
# Start points
# =============================================================================


def random_start(rng: np.random.Generator, dimension: int) -> NDArray[np.float64]:
    """Logit-domain start: ln(p / (1 - p)) with p ~ Uniform(0, 1)."""
    return logit_clamped(rng.random(dimension))


def gamut_uniform_start(rng: np.random.Generator, objective: PaletteObjective) -> NDArray[np.float64]:
    """
    Start from colors sampled uniformly inside the bounds and the gamut.

    Tries rejection sampling in the bounds, then sampling in gamut RGB,
    and finally projects bounded samples onto the gamut. Samples are
    ordered by lightness before encoding.
    """
    config = objective.config
    transform = objective.transform
    bounds = objective.bounds
    space = objective.space
    gamut = config.gamut_preset
    rng_range = objective.channel_range
    n = config.n_colors_to_add

    samples: list[NDArray[np.float64]] = []
    attempts = 0
    max_attempts = max(400, n * 400)
    while len(samples) < n and attempts < max_attempts:
        attempts += 1
        norm = transform.sample(rng)[0]
        if is_in_gamut(unscale_with_range(norm, rng_range), space, gamut):
            samples.append(norm)

    tries = 0
    max_tries = max(200, n * 200)
    while len(samples) < n and tries < max_tries:
        tries += 1
        values = from_xyz(gamut_to_xyz(rng.random(3), gamut), space)
        norm = normalize_with_range(values, rng_range)
        if np.all(np.isfinite(norm)) and bounds.contains(norm):
            samples.append(norm)

    while len(samples) < n:
        values = unscale_with_range(transform.sample(rng)[0], rng_range)
        projected = project_to_gamut(values, space, gamut)
        samples.append(normalize_with_range(projected, rng_range))

    rows = np.vstack(samples)
    light = space.lightness_index
    if light is not None and n > 1:
        rows = rows[np.argsort(rows[:, light], kind="stable")]
    return transform.encode(rows)


# =============================================================================
# Restarts
# =============================================================================


def _trace(
    stage: TraceStage,
    restart: int,
    params: NDArray[np.float64],
    info: ObjectiveBreakdown,
    details=(),
) -> RunTrace:
    return RunTrace(
        stage=stage,
        restart=restart,
        parameters=tuple(float(p) for p in params),
        colors=info.colors,
        values=tuple(tuple(float(v) for v in row) for row in info.values),
        score=info.value,
        distance_term=info.distance,
        penalty_term=info.penalty,
        details=details,
    )


def run_restart(
    objective: PaletteObjective,
    restart: int,
    seed: int,
    on_trace: Optional[VerboseCallback] = None,
) -> tuple[RunResult, ObjectiveBreakdown]:
    """
    Run one restart from a seeded start point.

    Returns:
        (RunResult, breakdown at the start point)
    """
    config = objective.config
    rng = np.random.default_rng(seed)
    if config.clip_to_gamut_during_optimization:
        start = gamut_uniform_start(rng, objective)
    else:
        start = random_start(rng, objective.transform.dimension)

    start_info = objective.evaluate(start)
    if on_trace is not None:
        on_trace(_trace(TraceStage.START, restart, start, start_info))

    solved = nelder_mead(
        objective,
        start,
        max_iterations=config.max_iterations,
        step=config.nm_step,
        tolerance=config.nm_tolerance,
    )
    end_info = objective.evaluate(solved.x)
    details = objective.details(end_info.colors, end_info.values)

    result = RunResult(
        restart=restart,
        parameters=tuple(float(p) for p in solved.x),
        colors=end_info.colors,
        values=tuple(tuple(float(v) for v in row) for row in end_info.values),
        score=solved.fx,
        distance_term=end_info.distance,
        penalty_term=end_info.penalty,
        iterations=solved.iterations,
        termination=solved.termination,
        start_score=start_info.value,
        details=details,
    )
    logger.debug(
        "Restart %d: start %.4f -> end %.4f after %d iterations (%s)",
        restart, start_info.value, solved.fx, solved.iterations, solved.termination.value,
    )
    if on_trace is not None:
        on_trace(_trace(TraceStage.END, restart, solved.x, end_info, details))
    return result, start_info


# =============================================================================
# Entry point
# =============================================================================


def optimize_palette(
    existing_colors: Sequence[str],
    config: Optional[OptimizationConfig] = None,
    on_progress: Optional[ProgressCallback] = None,
    on_verbose: Optional[VerboseCallback] = None,
    rng: Union[np.random.Generator, int, None] = None,
    cancel: Optional[threading.Event] = None,
) -> BestResult:
    """
    Generate colors maximally distinguishable from a palette.

    Args:
        existing_colors: Hex colors to extend (may be empty)
        config: Optimization settings (defaults if omitted)
        on_progress: Called once per completed restart
        on_verbose: Called at the start, end and best-update of each
            restart, and once for the final best
        rng: Generator or seed for restart sub-seeds (default: config.seed)
        cancel: Event that stops new restarts from starting

    Returns:
        BestResult

    Raises:
        ValueError: For a malformed hex color
        OptimizationCancelled: If cancelled before any restart completed

    Example:
        >>> result = optimize_palette(["#1F77B4", "#FF7F0E"], OptimizationConfig(seed=1))
        >>> result.colors  # doctest: +SKIP
        ('#2CA02C',)
    """
    config = config if config is not None else OptimizationConfig()
    objective = PaletteObjective(existing_colors, config)

    if not isinstance(rng, np.random.Generator):
        rng = np.random.default_rng(config.seed if rng is None else rng)
    seeds = [int(s) for s in rng.integers(0, _MAX_SEED, size=config.n_restarts)]

    n_workers = min(config.n_workers or os.cpu_count() or 1, config.n_restarts)
    lock = threading.Lock()
    best: list[Optional[RunResult]] = [None]
    completed: list[RunResult] = []

    def emit(trace: RunTrace) -> None:
        if on_verbose is not None:
            with lock:
                on_verbose(trace)

    def task(restart: int) -> Optional[RunResult]:
        if cancel is not None and cancel.is_set():
            return None
        result, start_info = run_restart(
            objective, restart, seeds[restart], emit if on_verbose is not None else None
        )
        with lock:
            completed.append(result)
            current = best[0]
            if current is None or (result.score, result.restart) < (current.score, current.restart):
                best[0] = result
                if on_verbose is not None:
                    on_verbose(RunTrace(
                        stage=TraceStage.BEST,
                        restart=result.restart,
                        parameters=result.parameters,
                        colors=result.colors,
                        values=result.values,
                        score=result.score,
                        distance_term=result.distance_term,
                        penalty_term=result.penalty_term,
                        details=result.details,
                    ))
            if on_progress is not None:
                on_progress(RunProgress(
                    completed=len(completed),
                    total=config.n_restarts,
                    restart=restart,
                    run_score=result.score,
                    best_score=best[0].score,
                    start_colors=start_info.colors,
                    end_colors=result.colors,
                    best_colors=best[0].colors,
                ))
        return result

    with ThreadPoolExecutor(max_workers=n_workers) as pool:
        futures = [pool.submit(task, restart) for restart in range(config.n_restarts)]
        try:
            for future in as_completed(futures):
                future.result()
        except BaseException:
            pool.shutdown(wait=False, cancel_futures=True)
            raise

    winner = best[0]
    cancelled = len(completed) < config.n_restarts
    if winner is None:
        logger.warning("Optimization cancelled before any restart completed")
        raise OptimizationCancelled("No restart completed before cancellation")
    if cancelled:
        logger.warning(
            "Optimization cancelled after %d of %d restarts", len(completed), config.n_restarts
        )

    if on_verbose is not None:
        on_verbose(RunTrace(
            stage=TraceStage.FINAL_BEST,
            restart=winner.restart,
            parameters=winner.parameters,
            colors=winner.colors,
            values=winner.values,
            score=winner.score,
            distance_term=winner.distance_term,
            penalty_term=winner.penalty_term,
            details=winner.details,
        ))

    logger.info(
        "Best score %.4f from restart %d (%d/%d restarts, cancelled=%s)",
        winner.score, winner.restart, len(completed), config.n_restarts, cancelled,
    )
    runs = tuple(sorted(completed, key=lambda r: r.restart)) if config.keep_all_runs else ()
    return BestResult(
        colors=winner.colors,
        values=winner.values,
        score=winner.score,
        termination=winner.termination,
        best_run=winner,
        bounds=objective.bounds,
        runs=runs,
        runs_completed=len(completed),
        cancelled=cancelled,
    )
