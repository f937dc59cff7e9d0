from __future__ import annotations

from typing import Sequence

import numpy as np

__all__ = ["unconstrained_converged", "penalty_converged"]


def unconstrained_converged(grad_norm: float, tolerance: float) -> bool:
    """Inner stop: ||∇f(x)|| < tolerance."""
    return float(grad_norm) < float(tolerance)


def penalty_converged(
    x0: Sequence[float],
    x1: Sequence[float],
    f0: float,
    f1: float,
    tolerance: float,
) -> bool:
    """Outer stop: both ||x1 - x0|| and |f1 - f0| below tolerance."""
    a = np.asarray(x0, dtype=float)
    b = np.asarray(x1, dtype=float)
    assert a.shape == b.shape, "snapshot shapes differ"
    state_change = float(np.linalg.norm(b - a))
    energy_change = abs(float(f1) - float(f0))
    return state_change < float(tolerance) and energy_change < float(tolerance)
