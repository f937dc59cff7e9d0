from __future__ import annotations

import numpy as np
import pytest

from ep_core.line_search import (
    ACCEPTED,
    INTERVAL_TOO_SMALL,
    MAX_TRIALS,
    armijo_wolfe_line_search,
)

C1 = 1e-3
C2 = 0.9


def _square(x: np.ndarray):
    return float(x[0] ** 2), np.array([2.0 * x[0]])


def _assert_conditions(x0: np.ndarray, d: np.ndarray, t: float):
    f0, g0 = _square(x0)
    f_t, g_t = _square(x0 + t * d)
    slope0 = float(np.dot(g0, d))
    assert f_t <= f0 + C1 * t * slope0
    assert float(np.dot(g_t, d)) >= C2 * slope0


def test_steepest_descent_on_square_satisfies_both_conditions():
    x0 = np.array([4.0])
    f0, g0 = _square(x0)
    result = armijo_wolfe_line_search(_square, x0, f0, g0, c1=C1, c2=C2)
    assert result.reason == ACCEPTED and result.accepted
    assert result.step == pytest.approx(0.5)
    assert _square(x0 - result.step * g0)[0] < f0
    _assert_conditions(x0, -g0, result.step)
    # input point untouched
    assert x0[0] == 4.0


def test_unit_direction_on_square():
    x0 = np.array([4.0])
    f0, g0 = _square(x0)
    d = np.array([-1.0])
    result = armijo_wolfe_line_search(_square, x0, f0, g0, direction=d, c1=C1, c2=C2)
    assert result.accepted
    t = result.step
    assert (4.0 - t) ** 2 < 16.0
    _assert_conditions(x0, d, t)


def test_ascent_direction_collapses_bracket():
    x0 = np.array([4.0])
    f0, g0 = _square(x0)
    result = armijo_wolfe_line_search(_square, x0, f0, g0, direction=np.array([1.0]))
    assert result.reason == INTERVAL_TOO_SMALL
    assert not result.accepted
    assert 0.0 < result.step < 1e-9


def test_trial_budget_is_reported_not_raised():
    x0 = np.array([4.0])
    f0, g0 = _square(x0)
    result = armijo_wolfe_line_search(_square, x0, f0, g0, direction=np.array([1.0]), max_trials=3)
    assert result.reason == MAX_TRIALS
    assert result.trials == 4


def test_step_doubles_while_no_upper_bound():
    # f(x) = -x: Armijo always holds, curvature never does, so t keeps doubling
    def linear(x: np.ndarray):
        return float(-x[0]), np.array([-1.0])

    x0 = np.array([0.0])
    f0, g0 = linear(x0)
    result = armijo_wolfe_line_search(linear, x0, f0, g0, max_trials=5)
    assert result.reason == MAX_TRIALS
    assert result.step == 64.0
