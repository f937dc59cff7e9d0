from __future__ import annotations

import pytest

from ep_core.config import OptimizerConfig, StepPolicy


def test_defaults():
    cfg = OptimizerConfig()
    assert cfg.weight_growth_factor == 10.0
    assert cfg.constraint_scale == 1e5
    assert cfg.initial_penalty_weight == 1e-2
    assert cfg.outer_tolerance == 1e-3
    assert cfg.inner_tolerance == 1e-2
    assert cfg.step_policy is StepPolicy.LINE_SEARCH
    assert cfg.uses_line_search


def test_string_policy_is_coerced():
    assert OptimizerConfig(step_policy="line_search").uses_line_search
    fixed = OptimizerConfig(step_policy="fixed")
    assert fixed.step_policy is StepPolicy.FIXED and not fixed.uses_line_search


def test_from_mapping_parses_and_skips_none():
    cfg = OptimizerConfig.from_mapping(
        {"step_policy": "line_search", "step_size": "0.5", "line_search_max_trials": 7.0, "outer_tolerance": None}
    )
    assert cfg.step_policy is StepPolicy.LINE_SEARCH
    assert cfg.step_size == 0.5
    assert cfg.line_search_max_trials == 7
    assert cfg.outer_tolerance == OptimizerConfig().outer_tolerance


@pytest.mark.parametrize(
    "raw",
    [
        {"stepsize": 0.1},
        {"step_policy": "newton"},
        {"constraint_scale": "huge"},
    ],
)
def test_from_mapping_rejects_bad_input(raw):
    with pytest.raises(ValueError):
        OptimizerConfig.from_mapping(raw)


@pytest.mark.parametrize(
    "overrides",
    [
        {"weight_growth_factor": 1.0},
        {"step_size": 0.0},
        {"armijo_c1": 0.95},
        {"inner_tolerance": -1.0},
    ],
)
def test_validation_asserts(overrides):
    with pytest.raises(AssertionError):
        OptimizerConfig(**overrides)
    with pytest.raises(AssertionError):
        OptimizerConfig().with_overrides(**overrides)
