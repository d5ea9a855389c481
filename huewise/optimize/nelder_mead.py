# Copyright (c) 2026 Huewise
# SPDX-License-Identifier: MIT

"""
Nelder-Mead downhill simplex minimizer.

Derivative-free and purely comparison driven; deterministic for a fixed
start point and objective. Reflection α=1, expansion γ=2, contraction
ρ=0.5, shrink σ=0.5.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

import numpy as np
from numpy.typing import ArrayLike, NDArray

from huewise.schema.types import TerminationReason


ALPHA = 1.0
GAMMA = 2.0
RHO = 0.5
SIGMA = 0.5


@dataclass(frozen=True, slots=True)
class NelderMeadResult:
    """
    Attributes:
        x: Best vertex found
        fx: Objective value at ``x``
        iterations: Iterations performed
        evaluations: Objective evaluations performed
        termination: CONVERGED when the simplex value spread fell below the
            tolerance, MAX_ITERATIONS otherwise
    """
    x: NDArray[np.float64]
    fx: float
    iterations: int
    evaluations: int
    termination: TerminationReason


def nelder_mead(
    fn: Callable[[NDArray[np.float64]], float],
    x0: ArrayLike,
    max_iterations: int = 200,
    step: float = 1.2,
    tolerance: float = 1e-5,
) -> NelderMeadResult:
    """
    Minimize ``fn`` from ``x0``.

    The initial simplex is ``x0`` plus one vertex per dimension offset by
    ``step`` along that axis.

    Args:
        fn: Objective, called with 1-D float arrays
        x0: Start point
        max_iterations: Iteration cap
        step: Initial simplex edge length
        tolerance: Stop once max(f) - min(f) over the simplex is below this

    Returns:
        NelderMeadResult
    """
    x0 = np.asarray(x0, dtype=np.float64).ravel()
    n = x0.size
    simplex = np.tile(x0, (n + 1, 1))
    for i in range(n):
        simplex[i + 1, i] += step

    evaluations = 0

    def f(x: NDArray[np.float64]) -> float:
        nonlocal evaluations
        evaluations += 1
        value = float(fn(x))
        return value if not np.isnan(value) else np.inf

    values = np.array([f(v) for v in simplex])

    for iteration in range(max_iterations):
        order = np.argsort(values, kind="stable")
        simplex = simplex[order]
        values = values[order]

        if values[-1] - values[0] < tolerance:
            return NelderMeadResult(
                x=simplex[0].copy(),
                fx=float(values[0]),
                iterations=iteration,
                evaluations=evaluations,
                termination=TerminationReason.CONVERGED,
            )

        worst = simplex[n]
        centroid = simplex[:n].mean(axis=0)

        reflect = centroid + ALPHA * (centroid - worst)
        fr = f(reflect)

        if fr < values[0]:
            expand = centroid + GAMMA * (reflect - centroid)
            fe = f(expand)
            if fe < fr:
                simplex[n], values[n] = expand, fe
            else:
                simplex[n], values[n] = reflect, fr
            continue

        if fr < values[n - 1]:
            simplex[n], values[n] = reflect, fr
            continue

        if fr < values[n]:
            contract = centroid + RHO * (reflect - centroid)
        else:
            contract = centroid + RHO * (worst - centroid)
        fc = f(contract)
        if fc < values[n]:
            simplex[n], values[n] = contract, fc
            continue

        best = simplex[0]
        for i in range(1, n + 1):
            simplex[i] = best + SIGMA * (simplex[i] - best)
            values[i] = f(simplex[i])

    order = np.argsort(values, kind="stable")
    return NelderMeadResult(
        x=simplex[order[0]].copy(),
        fx=float(values[order[0]]),
        iterations=max_iterations,
        evaluations=evaluations,
        termination=TerminationReason.MAX_ITERATIONS,
    )
