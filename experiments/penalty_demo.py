"""Exterior-penalty demo: drive a small problem to convergence batch by batch.

Scenarios:
  bound  one variable, no objective, constraint x <= 5, start x = 10
  bowl   objective x^2 + y^2, no constraints, start (3, -3)
  pair   two points pulled together but kept at least 2 apart

Example:
  uv run python -m experiments.penalty_demo --scenario bound --steps 50
"""

from __future__ import annotations

import argparse
from typing import Any, Dict, List, Tuple

from ep_core.backends import make_backend
from ep_core.config import OptimizerConfig
from ep_core.driver import PenaltyOptimizer
from ep_core.state import OptimizationState
from ep_core.translation import DictTranslationLayer, Path, TermCall, VarRef, describe_terms
from ep_logging.observability import BatchTracker, OptimizationTracker
from ep_terms import CONSTRAINTS, OBJECTIVES


def build_scenario(name: str) -> Tuple[OptimizationState, Dict[str, Any]]:
    if name == "bound":
        x: Path = ("x", "value")
        state = OptimizationState.initial(
            paths=[x],
            values=[10.0],
            constraint_terms=[TermCall("lessThan", (VarRef(x), 5.0))],
        )
        return state, {"step_policy": "fixed", "step_size": 1e-4}
    if name == "bowl":
        x, y = ("p", "x"), ("p", "y")
        state = OptimizationState.initial(
            paths=[x, y],
            values=[3.0, -3.0],
            objective_terms=[TermCall("squared", (VarRef(x),)), TermCall("squared", (VarRef(y),))],
        )
        return state, {"step_policy": "fixed", "step_size": 0.1}
    if name == "pair":
        ax, ay, bx, by = ("A", "x"), ("A", "y"), ("B", "x"), ("B", "y")
        args = (VarRef(ax), VarRef(ay), VarRef(bx), VarRef(by))
        state = OptimizationState.initial(
            paths=[ax, ay, bx, by],
            values=[-3.0, 0.5, 4.0, -0.5],
            objective_terms=[TermCall("near", args)],
            constraint_terms=[TermCall("apartBy", args + (2.0,))],
        )
        return state, {}
    raise ValueError(f"unknown scenario: {name!r}")


def run(
    scenario: str,
    steps: int,
    max_calls: int,
    backend: str,
    step_policy: str | None,
    step_size: float | None,
    run_id: str,
    log_per_variable: bool,
) -> None:
    state, defaults = build_scenario(scenario)
    overrides: Dict[str, Any] = dict(defaults)
    if step_policy is not None:
        overrides["step_policy"] = step_policy
    if step_size is not None:
        overrides["step_size"] = step_size
    config = OptimizerConfig.from_mapping(overrides)
    optimizer = PenaltyOptimizer(
        layer=DictTranslationLayer(),
        objectives=OBJECTIVES,
        constraints=CONSTRAINTS,
        config=config,
        backend=make_backend(backend),
    )
    tracker = OptimizationTracker(name="penalty_trace", run_id=run_id, log_per_variable=log_per_variable)
    batches = BatchTracker(name="penalty_batches", run_id=run_id)
    tracker.attach(optimizer)
    batches.attach(optimizer)

    print("objectives:", describe_terms(state.objective_terms))
    print("constraints:", describe_terms(state.constraint_terms))
    state = optimizer.solve(state, steps_per_call=steps, max_calls=max_calls)
    rows: List[Dict[str, Any]] = list(tracker.buffer)
    tracker.flush()
    batches.flush()
    print(
        f"status={state.status.value} outer_round={state.outer_round} "
        f"weight={state.penalty_weight:.3e} steps={state.total_steps} advances={len(rows)}"
    )
    for path, value in state.values_by_path().items():
        print(f"  {'.'.join(path)} = {value:.6f}")


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--scenario", type=str, default="bound", choices=["bound", "bowl", "pair"])
    parser.add_argument("--steps", type=int, default=50, help="descent iterations per advance call")
    parser.add_argument("--max_calls", type=int, default=2000)
    parser.add_argument("--backend", type=str, default="finite_difference", choices=["finite_difference", "jax", "torch"])
    parser.add_argument("--step_policy", type=str, default=None, choices=["fixed", "line_search"])
    parser.add_argument("--step_size", type=float, default=None)
    parser.add_argument("--run_id", type=str, default="demo")
    parser.add_argument("--log_per_variable", action="store_true")
    args = parser.parse_args()
    run(
        scenario=args.scenario,
        steps=args.steps,
        max_calls=args.max_calls,
        backend=args.backend,
        step_policy=args.step_policy,
        step_size=args.step_size,
        run_id=args.run_id,
        log_per_variable=args.log_per_variable,
    )


if __name__ == "__main__":
    main()
