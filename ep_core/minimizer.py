"""Unconstrained minimizer: a bounded batch of steepest-descent steps.

The minimizer owns the variable vector for the duration of a batch and updates
it in place. It never judges convergence; it reports the energy and gradient
norm at the final point and leaves the decision to the driver.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, List, Tuple

import math
import warnings

import numpy as np

from .config import OptimizerConfig
from .errors import NonFiniteEnergyError
from .line_search import armijo_wolfe_line_search

__all__ = ["BatchResult", "minimize"]

ValueAndGrad = Callable[[np.ndarray], Tuple[float, np.ndarray]]


@dataclass(frozen=True)
class BatchResult:
    energy: float
    grad_norm: float
    iterations: int
    step_lengths: List[float] = field(default_factory=list)
    line_search_stops: int = 0

    @property
    def mean_step_length(self) -> float:
        if not self.step_lengths:
            return float("nan")
        return float(sum(self.step_lengths) / len(self.step_lengths))


def _checked(value_and_grad: ValueAndGrad, xs: np.ndarray) -> Tuple[float, np.ndarray]:
    energy, grad = value_and_grad(xs)
    energy = float(energy)
    grad = np.asarray(grad, dtype=float)
    if not math.isfinite(energy):
        raise NonFiniteEnergyError(f"energy is not finite ({energy}) at x={xs.tolist()}")
    if not np.all(np.isfinite(grad)):
        raise NonFiniteEnergyError(f"gradient is not finite ({grad.tolist()}) at x={xs.tolist()}")
    return energy, grad


def minimize(
    value_and_grad: ValueAndGrad,
    xs: np.ndarray,
    steps: int,
    config: OptimizerConfig,
) -> BatchResult:
    """Run ``steps`` descent iterations on ``xs`` (mutated in place).

    Each iteration: x ← x − t·∇f(x) with t fixed or chosen by the line search,
    then f and ∇f are recomputed at the updated point. The returned energy and
    gradient norm belong to the final point. A step that lands on a non-finite
    energy or gradient is undone before ``NonFiniteEnergyError`` propagates.
    """
    assert isinstance(xs, np.ndarray) and xs.dtype == np.float64, "xs must be a float64 numpy array"
    assert int(steps) == steps and steps >= 0, "steps must be a non-negative integer"
    energy, grad = _checked(value_and_grad, xs)
    step_lengths: List[float] = []
    stops = 0
    for _ in range(int(steps)):
        if config.uses_line_search:
            result = armijo_wolfe_line_search(
                value_and_grad,
                xs,
                energy,
                grad,
                c1=config.armijo_c1,
                c2=config.wolfe_c2,
                min_interval=config.line_search_min_interval,
                max_trials=config.line_search_max_trials,
                initial_step=config.line_search_initial_step,
            )
            t = float(result.step)
            if not result.accepted:
                stops += 1
                if config.warn_on_line_search_stop:
                    warnings.warn(
                        f"Line search stopped early ({result.reason}) after {result.trials} trials; "
                        f"using step {t:.3e}.",
                        RuntimeWarning,
                        stacklevel=2,
                    )
        else:
            t = float(config.step_size)
        prev = xs.copy()
        xs -= t * grad
        try:
            energy, grad = _checked(value_and_grad, xs)
        except NonFiniteEnergyError:
            # handles stay at the last finite point
            xs[:] = prev
            raise
        step_lengths.append(t)
    return BatchResult(
        energy=energy,
        grad_norm=float(np.linalg.norm(grad)),
        iterations=int(steps),
        step_lengths=step_lengths,
        line_search_stops=stops,
    )
