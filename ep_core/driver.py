"""Exterior-penalty driver: a resumable state machine over minimization rounds.

Each call to ``advance`` performs at most one transition:

    NewRound        -> Minimizing         build energy, seed handles, reset weight/counters
    Minimizing      -> Minimizing         one inner batch, ||∇E|| still above tolerance
    Minimizing      -> RoundConverged     one inner batch, ||∇E|| below tolerance
    RoundConverged  -> Minimizing         grow penalty weight, next outer round
    RoundConverged  -> GloballyConverged  snapshots stopped moving (only once outer_round > 1)
    GloballyConverged                     absorbing, advance is a no-op

Usage:
    opt = PenaltyOptimizer(layer=DictTranslationLayer(), objectives=OBJECTIVES, constraints=CONSTRAINTS)
    state = OptimizationState.initial(paths, values, objective_terms, constraint_terms)
    while not state.is_converged:
        state = opt.advance(state, steps=50)
        render(state.translation)
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Callable, List, Optional

import warnings

import numpy as np

from .backends import FiniteDifferenceBackend
from .config import OptimizerConfig
from .convergence import penalty_converged, unconstrained_converged
from .energy import EnergyFunction, build_energy_function
from .interfaces import GradientBackend, TranslationLayer
from .minimizer import BatchResult, minimize
from .registry import TermRegistry
from .state import OptimizationState, OptimizationStatus

__all__ = ["PenaltyOptimizer"]

StateCallback = Callable[[OptimizationState], None]
BatchCallback = Callable[[BatchResult], None]
EnergyUpdateCallback = Callable[[float], None]


@dataclass
class PenaltyOptimizer:
    """Exterior-penalty driver with simple event hooks."""

    layer: TranslationLayer
    objectives: TermRegistry
    constraints: TermRegistry
    config: OptimizerConfig = field(default_factory=OptimizerConfig)
    backend: GradientBackend = field(default_factory=FiniteDifferenceBackend)
    enforce_invariants: bool = True

    on_state_updated: List[StateCallback] = field(default_factory=list)
    on_batch_finished: List[BatchCallback] = field(default_factory=list)
    on_energy_updated: List[EnergyUpdateCallback] = field(default_factory=list)

    def __post_init__(self) -> None:
        assert isinstance(self.config, OptimizerConfig), "config must be an OptimizerConfig"
        assert isinstance(self.objectives, TermRegistry), "objectives must be a TermRegistry"
        assert isinstance(self.constraints, TermRegistry), "constraints must be a TermRegistry"

    def build_energy(self, state: OptimizationState) -> EnergyFunction:
        return build_energy_function(
            state.objective_terms,
            state.constraint_terms,
            state.translation,
            state.free_variable_paths,
            self.layer,
            self.objectives,
            self.constraints,
            self.backend,
            self.config,
        )

    def advance(self, state: OptimizationState, steps: int, evaluate: bool = True) -> OptimizationState:
        """Perform one transition, running at most ``steps`` descent iterations.

        With ``evaluate`` the current handles are written back into the
        translation and derived values are recomputed, so every call yields a
        drawable state even mid-round.
        """
        status = state.status
        if status is OptimizationStatus.GLOBALLY_CONVERGED:
            return state
        if status is OptimizationStatus.NEW_ROUND:
            new_state = self._start_problem(state)
        elif status is OptimizationStatus.MINIMIZING:
            new_state = self._minimize_batch(state, steps)
        elif status is OptimizationStatus.ROUND_CONVERGED:
            new_state = self._judge_round(state)
        else:  # pragma: no cover - exhaustive over OptimizationStatus
            raise ValueError(f"unknown optimization status: {status!r}")

        if evaluate:
            new_state = self._evaluate(new_state)
        if self.enforce_invariants:
            new_state.check_invariants()
        self._emit_state(new_state)
        return new_state

    def reset(self, state: OptimizationState) -> OptimizationState:
        """Return to NewRound, seeding the next problem from the current values."""
        return replace(
            state,
            free_variable_handles=None,
            penalty_weight=self.config.initial_penalty_weight,
            outer_round=0,
            inner_round=0,
            status=OptimizationStatus.NEW_ROUND,
            last_outer_state=None,
            last_outer_energy=None,
            last_inner_state=None,
            last_inner_energy=None,
            last_grad_norm=None,
            total_steps=0,
            cached_energy_function=None,
        )

    def solve(self, state: OptimizationState, steps_per_call: int = 100, max_calls: int = 10_000) -> OptimizationState:
        """Advance until GloballyConverged or ``max_calls`` advances have run."""
        assert max_calls >= 1, "max_calls must be >= 1"
        for _ in range(max_calls):
            if state.is_converged:
                return state
            state = self.advance(state, steps_per_call)
        if not state.is_converged:
            warnings.warn(
                f"Optimization did not converge within {max_calls} advance calls "
                f"(status={state.status.value}, outer_round={state.outer_round}, "
                f"penalty_weight={state.penalty_weight:.3e}).",
                RuntimeWarning,
                stacklevel=2,
            )
        return state

    # --- transitions ---
    def _start_problem(self, state: OptimizationState) -> OptimizationState:
        energy_fn = self.build_energy(state)
        handles = np.array(state.free_variable_values, dtype=float)
        return replace(
            state,
            cached_energy_function=energy_fn,
            free_variable_handles=handles,
            penalty_weight=self.config.initial_penalty_weight,
            outer_round=0,
            inner_round=0,
            status=OptimizationStatus.MINIMIZING,
            last_outer_state=None,
            last_outer_energy=None,
            last_inner_state=None,
            last_inner_energy=None,
            last_grad_norm=None,
        )

    def _minimize_batch(self, state: OptimizationState, steps: int) -> OptimizationState:
        energy_fn = state.cached_energy_function
        xs = state.free_variable_handles
        assert energy_fn is not None and xs is not None, "Minimizing requires a started problem"
        f = energy_fn.bind(state.penalty_weight)
        backend = self.backend

        def value_and_grad(x: np.ndarray):
            return backend.value_and_grad(f, x)

        result = minimize(value_and_grad, xs, steps, self.config)
        self._emit_batch(result)
        if unconstrained_converged(result.grad_norm, self.config.inner_tolerance):
            status = OptimizationStatus.ROUND_CONVERGED
        else:
            status = OptimizationStatus.MINIMIZING
        return replace(
            state,
            last_inner_state=xs.copy(),
            last_inner_energy=float(result.energy),
            last_grad_norm=float(result.grad_norm),
            inner_round=state.inner_round + 1,
            total_steps=state.total_steps + result.iterations,
            status=status,
        )

    def _judge_round(self, state: OptimizationState) -> OptimizationState:
        current = state.last_inner_state
        current_energy = state.last_inner_energy
        assert current is not None and current_energy is not None, "RoundConverged requires an inner snapshot"
        # The first two rounds are never judged: round 0 is unrepresentative of the penalized problem
        converged = (
            state.outer_round > 1
            and state.last_outer_state is not None
            and state.last_outer_energy is not None
            and penalty_converged(
                state.last_outer_state,
                current,
                state.last_outer_energy,
                current_energy,
                self.config.outer_tolerance,
            )
        )
        snapshot = dict(last_outer_state=current.copy(), last_outer_energy=float(current_energy))
        if converged:
            return replace(state, status=OptimizationStatus.GLOBALLY_CONVERGED, **snapshot)
        return replace(
            state,
            status=OptimizationStatus.MINIMIZING,
            penalty_weight=state.penalty_weight * self.config.weight_growth_factor,
            outer_round=state.outer_round + 1,
            inner_round=0,
            **snapshot,
        )

    # --- output ---
    def _evaluate(self, state: OptimizationState) -> OptimizationState:
        values = state.read_handles()
        translation = self.layer.write_back(state.translation, list(zip(state.free_variable_paths, values)))
        state = replace(state, free_variable_values=values, translation=translation)
        return self.layer.recompute(state)

    def _emit_state(self, state: OptimizationState) -> None:
        for cb in self.on_state_updated:
            cb(state)

    def _emit_batch(self, result: BatchResult) -> None:
        for cb in self.on_batch_finished:
            cb(result)
        for cb in self.on_energy_updated:
            cb(float(result.energy))
