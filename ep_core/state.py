"""Optimization state record carried between advance calls.

Everything the driver needs to resume lives here, so an interactive caller can
stop calling ``advance`` at any point and pick the problem up later.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import math

import numpy as np

from .config import OptimizerConfig
from .energy import EnergyFunction
from .translation import Path, TermCall

__all__ = ["OptimizationStatus", "OptimizationState"]


class OptimizationStatus(str, Enum):
    NEW_ROUND = "NewRound"
    MINIMIZING = "Minimizing"
    ROUND_CONVERGED = "RoundConverged"
    GLOBALLY_CONVERGED = "GloballyConverged"


@dataclass
class OptimizationState:
    """Progress of one optimization problem.

    ``free_variable_handles`` is the mutable slot arena the minimizer writes
    into; every ``last_*_state`` snapshot is an independent copy of it.
    """

    free_variable_paths: Tuple[Path, ...]
    free_variable_values: List[float]
    objective_terms: Tuple[TermCall, ...]
    constraint_terms: Tuple[TermCall, ...]
    translation: Any
    free_variable_handles: Optional[np.ndarray] = None
    penalty_weight: float = OptimizerConfig.initial_penalty_weight
    outer_round: int = 0
    inner_round: int = 0
    status: OptimizationStatus = OptimizationStatus.NEW_ROUND
    last_outer_state: Optional[np.ndarray] = None
    last_outer_energy: Optional[float] = None
    last_inner_state: Optional[np.ndarray] = None
    last_inner_energy: Optional[float] = None
    last_grad_norm: Optional[float] = None
    total_steps: int = 0
    cached_energy_function: Optional[EnergyFunction] = None

    @classmethod
    def initial(
        cls,
        paths: Sequence[Path],
        values: Sequence[float],
        objective_terms: Sequence[TermCall] = (),
        constraint_terms: Sequence[TermCall] = (),
        translation: Any = None,
    ) -> "OptimizationState":
        assert len(paths) == len(values), "paths/values length mismatch"
        path_tuple = tuple(tuple(p) for p in paths)
        assert len(set(path_tuple)) == len(path_tuple), "duplicate free variable path"
        vals = [float(v) for v in values]
        if translation is None:
            translation = {p: v for p, v in zip(path_tuple, vals)}
        return cls(
            free_variable_paths=path_tuple,
            free_variable_values=vals,
            objective_terms=tuple(objective_terms),
            constraint_terms=tuple(constraint_terms),
            translation=translation,
        )

    @classmethod
    def from_translation(
        cls,
        translation: Mapping[Path, float],
        paths: Sequence[Path],
        objective_terms: Sequence[TermCall] = (),
        constraint_terms: Sequence[TermCall] = (),
    ) -> "OptimizationState":
        """Seed the free variables from their current values in ``translation``."""
        missing = [p for p in paths if tuple(p) not in translation]
        if missing:
            raise KeyError(f"free variable paths missing from translation: {missing!r}")
        values = [float(translation[tuple(p)]) for p in paths]
        return cls.initial(paths, values, objective_terms, constraint_terms, dict(translation))

    @property
    def num_variables(self) -> int:
        return len(self.free_variable_paths)

    @property
    def is_converged(self) -> bool:
        return self.status is OptimizationStatus.GLOBALLY_CONVERGED

    def read_handles(self) -> List[float]:
        """Plain-float copy of the live handles (or the values before the first round)."""
        if self.free_variable_handles is None:
            return list(self.free_variable_values)
        return [float(v) for v in self.free_variable_handles]

    def values_by_path(self) -> Dict[Path, float]:
        return {p: float(v) for p, v in zip(self.free_variable_paths, self.free_variable_values)}

    def check_invariants(self) -> None:
        n = self.num_variables
        assert len(self.free_variable_values) == n, "values/paths length mismatch"
        if self.free_variable_handles is not None:
            assert self.free_variable_handles.shape == (n,), "handles/paths length mismatch"
        assert self.penalty_weight > 0.0 and math.isfinite(self.penalty_weight), "penalty weight must be positive"
        assert self.outer_round >= 0 and self.inner_round >= 0, "round counters must be non-negative"
        for snap in (self.last_outer_state, self.last_inner_state):
            if snap is not None and self.free_variable_handles is not None:
                assert not np.shares_memory(snap, self.free_variable_handles), "snapshot aliases live handles"

    def summary(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "outer_round": int(self.outer_round),
            "inner_round": int(self.inner_round),
            "penalty_weight": float(self.penalty_weight),
            "energy": float("nan") if self.last_inner_energy is None else float(self.last_inner_energy),
            "grad_norm": float("nan") if self.last_grad_norm is None else float(self.last_grad_norm),
            "total_steps": int(self.total_steps),
        }
