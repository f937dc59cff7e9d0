from __future__ import annotations

import numpy as np
import pytest

from ep_core.config import OptimizerConfig, StepPolicy
from ep_core.convergence import penalty_converged, unconstrained_converged
from ep_core.errors import NonFiniteEnergyError
from ep_core.minimizer import minimize


def _bowl(x: np.ndarray):
    return float(np.dot(x, x)), 2.0 * x


def test_fixed_step_mutates_in_place_and_reports_final_point():
    xs = np.array([3.0, -3.0])
    handle = xs
    result = minimize(_bowl, xs, 5, OptimizerConfig(step_policy="fixed", step_size=0.1))
    assert handle is xs
    expected = np.array([3.0, -3.0]) * 0.8**5
    assert np.allclose(xs, expected)
    assert result.iterations == 5
    assert result.step_lengths == [0.1] * 5
    assert result.energy == pytest.approx(float(np.dot(expected, expected)))
    assert result.grad_norm == pytest.approx(2.0 * float(np.linalg.norm(expected)))


def test_zero_steps_only_evaluates():
    xs = np.array([1.0, 2.0])
    result = minimize(_bowl, xs, 0, OptimizerConfig())
    assert xs.tolist() == [1.0, 2.0]
    assert result.iterations == 0
    assert result.energy == pytest.approx(5.0)
    assert np.isnan(result.mean_step_length)


def test_line_search_policy_takes_exact_step_on_square():
    xs = np.array([4.0])
    result = minimize(_bowl, xs, 1, OptimizerConfig(step_policy=StepPolicy.LINE_SEARCH))
    assert result.step_lengths == [pytest.approx(0.5)]
    assert xs[0] == pytest.approx(0.0)
    assert result.line_search_stops == 0


def test_line_search_stop_is_counted_and_optionally_warned():
    def linear(x: np.ndarray):
        return float(-x[0]), np.array([-1.0])

    config = OptimizerConfig(
        step_policy="line_search",
        line_search_max_trials=3,
        warn_on_line_search_stop=True,
    )
    xs = np.array([0.0])
    with pytest.warns(RuntimeWarning):
        result = minimize(linear, xs, 1, config)
    assert result.line_search_stops == 1
    assert xs[0] > 0.0


def test_non_finite_energy_is_fatal():
    def broken(x: np.ndarray):
        return float("nan"), np.zeros_like(x)

    with pytest.raises(NonFiniteEnergyError):
        minimize(broken, np.array([1.0]), 3, OptimizerConfig())
    with pytest.raises(FloatingPointError):
        minimize(lambda x: (1.0, np.array([np.inf])), np.array([1.0]), 1, OptimizerConfig())


def test_rejects_non_float_vectors():
    with pytest.raises(AssertionError):
        minimize(_bowl, np.array([1, 2]), 1, OptimizerConfig())


def test_unconstrained_predicate_is_strict():
    assert unconstrained_converged(0.009, 1e-2)
    assert not unconstrained_converged(1e-2, 1e-2)


def test_penalty_predicate_requires_both_changes_small():
    x0 = [1.0, 2.0]
    assert penalty_converged(x0, [1.0, 2.0005], 3.0, 3.0005, 1e-3)
    # state settled but energy still moving
    assert not penalty_converged(x0, [1.0, 2.0], 3.0, 3.5, 1e-3)
    # energy flat but state still moving
    assert not penalty_converged(x0, [1.5, 2.0], 3.0, 3.0, 1e-3)
    with pytest.raises(AssertionError):
        penalty_converged([1.0], [1.0, 2.0], 0.0, 0.0, 1e-3)


def test_non_finite_step_leaves_handles_at_last_finite_point():
    def cliff(x: np.ndarray):
        if abs(x[0]) > 3.0:
            return float("inf"), np.array([np.inf])
        return float(x[0] ** 2), np.array([2.0 * x[0]])

    # step 1.5 on x^2 multiplies x by -2 each iteration: 1 -> -2 -> 4 (off the cliff)
    xs = np.array([1.0])
    with pytest.raises(NonFiniteEnergyError):
        minimize(cliff, xs, 5, OptimizerConfig(step_policy="fixed", step_size=1.5))
    assert xs.tolist() == [-2.0]
