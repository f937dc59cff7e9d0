"""Energy function builder for the exterior-penalty method.

    E(x; w) = Σ_i f_i(x) + w · s · Σ_j max(c_j(x), 0)^2

with objective terms f_i, constraint terms c_j (satisfied when c_j ≤ 0), live
penalty weight w and fixed constraint scale s.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Sequence, Tuple

from .config import OptimizerConfig
from .interfaces import GradientBackend, TermFn, TranslationLayer
from .registry import TermRegistry
from .translation import Path, ResolvedTerm, TermCall

__all__ = ["CompiledTerm", "EnergyFunction", "build_energy_function", "penalty"]


def penalty(c: float) -> float:
    """One-sided quadratic penalty on a plain float: max(c, 0)^2."""
    gap = max(float(c), 0.0)
    return gap * gap


@dataclass(frozen=True)
class CompiledTerm:
    """A resolved term paired with its implementation."""

    resolved: ResolvedTerm
    fn: TermFn

    @property
    def name(self) -> str:
        return self.resolved.name

    def __call__(self, xs: Any) -> Any:
        return self.fn(*self.resolved.arguments(xs))


@dataclass(frozen=True)
class EnergyFunction:
    """Pure function ``(xs, weight) -> energy`` over the free-variable vector.

    The weight is an argument rather than captured state so one build serves
    every outer round of a problem.
    """

    objectives: Tuple[CompiledTerm, ...]
    constraints: Tuple[CompiledTerm, ...]
    backend: GradientBackend
    constraint_scale: float
    num_variables: int

    def objective_energy(self, xs: Any) -> Any:
        total: Any = 0.0
        for term in self.objectives:
            total = total + term(xs)
        return total

    def penalty_energy(self, xs: Any) -> Any:
        total: Any = 0.0
        for term in self.constraints:
            total = total + self.backend.penalty(term(xs))
        return total

    def __call__(self, xs: Any, weight: float) -> Any:
        assert len(xs) == self.num_variables, "variable vector length mismatch"
        energy = self.objective_energy(xs) + self.penalty_energy(xs) * (float(weight) * self.constraint_scale)
        # Zero-coefficient dependency on every variable keeps inert variables in the gradient
        return energy + xs.sum() * 0.0

    def bind(self, weight: float):
        """Freeze the weight, returning a single-argument function for the minimizer."""
        w = float(weight)

        def _energy(xs: Any) -> Any:
            return self(xs, w)

        return _energy

    def breakdown(self, xs: Any, weight: float) -> Dict[str, float]:
        obj = float(self.objective_energy(xs))
        pen = float(self.penalty_energy(xs))
        return {
            "objective": obj,
            "penalty": pen,
            "weighted_penalty": pen * float(weight) * self.constraint_scale,
            "total": obj + pen * float(weight) * self.constraint_scale,
        }

    def constraint_values(self, xs: Any) -> List[float]:
        """Raw constraint evaluations c_j(x); positive means violated."""
        return [float(term(xs)) for term in self.constraints]


def _compile(resolved: Sequence[ResolvedTerm], registry: TermRegistry) -> Tuple[CompiledTerm, ...]:
    return tuple(CompiledTerm(r, registry.get(r.name)) for r in resolved)


def build_energy_function(
    objective_terms: Sequence[TermCall],
    constraint_terms: Sequence[TermCall],
    translation: Any,
    paths: Sequence[Path],
    layer: TranslationLayer,
    objectives: TermRegistry,
    constraints: TermRegistry,
    backend: GradientBackend,
    config: OptimizerConfig,
) -> EnergyFunction:
    """Resolve and dispatch every term once; unknown names raise ``TermNotFoundError``."""
    obj_resolved = layer.evaluate_terms(list(objective_terms), translation, list(paths))
    con_resolved = layer.evaluate_terms(list(constraint_terms), translation, list(paths))
    return EnergyFunction(
        objectives=_compile(obj_resolved, objectives),
        constraints=_compile(con_resolved, constraints),
        backend=backend,
        constraint_scale=float(config.constraint_scale),
        num_variables=len(paths),
    )
