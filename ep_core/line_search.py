"""Bisection line search for the Armijo and weak Wolfe conditions.

Along a descent direction d (default -∇f(x)), bracket the step t in [a, b):

    Armijo:     f(x + t d) <= f(x) + c1 t <∇f(x), d>
    weak Wolfe: <∇f(x + t d), d> >= c2 <∇f(x), d>

Armijo failure shrinks the upper bound, curvature failure raises the lower
bound; the next trial bisects once an upper bound exists and doubles before.
Running out of bracket or trials is reported, not raised.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Tuple

import numpy as np

__all__ = ["LineSearchResult", "armijo_wolfe_line_search", "ACCEPTED", "INTERVAL_TOO_SMALL", "MAX_TRIALS"]

ValueAndGrad = Callable[[np.ndarray], Tuple[float, np.ndarray]]

ACCEPTED = "accepted"
INTERVAL_TOO_SMALL = "interval_too_small"
MAX_TRIALS = "max_trials"


@dataclass(frozen=True)
class LineSearchResult:
    step: float
    trials: int
    reason: str

    @property
    def accepted(self) -> bool:
        return self.reason == ACCEPTED


def armijo_wolfe_line_search(
    value_and_grad: ValueAndGrad,
    xs: np.ndarray,
    fx: float,
    gx: np.ndarray,
    direction: Optional[np.ndarray] = None,
    c1: float = 1e-3,
    c2: float = 0.9,
    min_interval: float = 1e-10,
    max_trials: int = 100,
    initial_step: float = 1.0,
) -> LineSearchResult:
    """Return a step length along ``direction`` from ``xs``.

    Args:
        value_and_grad: x -> (f(x), ∇f(x)).
        xs: Current point (not modified).
        fx, gx: f and ∇f at ``xs``.
        direction: Descent direction; defaults to -gx.
    Returns:
        LineSearchResult with the step, number of trials and stop reason.
    """
    assert 0.0 < c1 < c2 < 1.0, "need 0 < c1 < c2 < 1"
    x0 = np.asarray(xs, dtype=float)
    g0 = np.asarray(gx, dtype=float)
    d = -g0 if direction is None else np.asarray(direction, dtype=float)
    slope0 = float(np.dot(g0, d))
    f0 = float(fx)

    a = 0.0
    b = float("inf")
    t = float(initial_step)
    trials = 0
    while True:
        if abs(b - a) < min_interval:
            return LineSearchResult(step=t, trials=trials, reason=INTERVAL_TOO_SMALL)
        if trials > max_trials:
            return LineSearchResult(step=t, trials=trials, reason=MAX_TRIALS)

        f_t, g_t = value_and_grad(x0 + t * d)
        armijo = float(f_t) <= f0 + c1 * t * slope0
        wolfe = float(np.dot(np.asarray(g_t, dtype=float), d)) >= c2 * slope0

        if not armijo:
            b = t
        elif not wolfe:
            a = t
        else:
            return LineSearchResult(step=t, trials=trials + 1, reason=ACCEPTED)

        if b < float("inf"):
            t = (a + b) / 2.0
        else:
            t = 2.0 * a
        trials += 1
