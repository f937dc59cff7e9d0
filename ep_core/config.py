"""Tunable constants for the exterior-penalty optimizer.

All thresholds, weights and step-length settings live in one frozen record that
is handed to the driver/minimizer at construction. Defaults reproduce the
reference configuration:

    weight_growth_factor   = 10      (penalty weight multiplier per outer round)
    constraint_scale       = 1e5     (constraint pressure vs raw objective scale)
    initial_penalty_weight = 1e-2
    outer_tolerance        = 1e-3    (exterior-penalty stop)
    inner_tolerance        = 1e-2    (unconstrained stop, on ||∇f||)
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Any, Mapping

__all__ = ["StepPolicy", "OptimizerConfig"]


class StepPolicy(str, Enum):
    """How the minimizer picks a step length."""

    FIXED = "fixed"
    LINE_SEARCH = "line_search"


@dataclass(frozen=True)
class OptimizerConfig:
    # Exterior-penalty schedule
    weight_growth_factor: float = 10.0
    constraint_scale: float = 1e5
    initial_penalty_weight: float = 1e-2
    # Step length
    # A fixed step is only stable below 1 / (scale * weight), which shrinks tenfold every outer round
    step_policy: StepPolicy = StepPolicy.LINE_SEARCH
    step_size: float = 1e-4
    # Convergence
    outer_tolerance: float = 1e-3
    inner_tolerance: float = 1e-2
    # Armijo / weak-Wolfe line search
    armijo_c1: float = 1e-3
    wolfe_c2: float = 0.9
    line_search_min_interval: float = 1e-10
    line_search_max_trials: int = 100
    line_search_initial_step: float = 1.0
    warn_on_line_search_stop: bool = False

    def __post_init__(self) -> None:
        if isinstance(self.step_policy, str) and not isinstance(self.step_policy, StepPolicy):
            object.__setattr__(self, "step_policy", StepPolicy(self.step_policy))
        self.validate()

    def validate(self) -> None:
        assert self.weight_growth_factor > 1.0, "weight_growth_factor must be > 1"
        assert self.constraint_scale > 0.0, "constraint_scale must be > 0"
        assert self.initial_penalty_weight > 0.0, "initial_penalty_weight must be > 0"
        assert self.step_size > 0.0, "step_size must be > 0"
        assert self.outer_tolerance > 0.0, "outer_tolerance must be > 0"
        assert self.inner_tolerance > 0.0, "inner_tolerance must be > 0"
        assert 0.0 < self.armijo_c1 < self.wolfe_c2 < 1.0, "need 0 < c1 < c2 < 1"
        assert self.line_search_min_interval > 0.0, "line_search_min_interval must be > 0"
        assert self.line_search_max_trials >= 1, "line_search_max_trials must be >= 1"
        assert self.line_search_initial_step > 0.0, "line_search_initial_step must be > 0"

    @property
    def uses_line_search(self) -> bool:
        return self.step_policy is StepPolicy.LINE_SEARCH

    def with_overrides(self, **overrides: Any) -> "OptimizerConfig":
        return replace(self, **overrides)

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "OptimizerConfig":
        """Build a config from a plain mapping (parsed JSON, CLI args, ...).

        Unknown keys are rejected rather than ignored so that a typo cannot
        silently fall back to a default threshold.
        """
        known = {f.name: f for f in fields(cls)}
        unknown = sorted(set(str(k) for k in raw) - set(known))
        if unknown:
            raise ValueError(f"unknown optimizer config keys: {', '.join(unknown)}")
        kwargs: dict[str, Any] = {}
        for key, value in raw.items():
            if value is None:
                continue
            if key == "step_policy":
                try:
                    kwargs[key] = StepPolicy(str(getattr(value, "value", value)))
                except ValueError as exc:
                    raise ValueError(f"invalid step_policy: {value!r}") from exc
            elif key == "line_search_max_trials":
                kwargs[key] = int(value)
            elif key == "warn_on_line_search_stop":
                kwargs[key] = bool(value)
            else:
                try:
                    kwargs[key] = float(value)
                except (TypeError, ValueError) as exc:
                    raise ValueError(f"config value for {key!r} must be numeric, got {value!r}") from exc
        return cls(**kwargs)
