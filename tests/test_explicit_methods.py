# tests/test_explicit_methods.py
import math

import numpy as np
import pytest

from threaded_ode.convergence import observed_order
from threaded_ode.derivatives import (
    CountingDerivative,
    exponential_exact,
    exponential_growth,
    find_steady_state,
    regular_de,
)
from threaded_ode.errors import InvalidConfiguration
from threaded_ode.explicit_methods import (
    METHODS,
    STAGES,
    IntegrationResult,
    forward_euler,
    heun,
    integrate,
    resolve_methods,
    runge_kutta4,
)
from threaded_ode.problem import ODEProblem


def test_single_step_matches_hand_computation():
    h = 0.1
    assert forward_euler(exponential_growth, 1.0, 0.0, 1, h) == pytest.approx(1.1)
    # Heun: 1 + h/2 * (1 + (1 + h))
    assert heun(exponential_growth, 1.0, 0.0, 1, h) == pytest.approx(1.105)
    # RK4 reproduces the Taylor series of exp(h) to fourth order
    expected = 1.0 + h + h**2 / 2 + h**3 / 6 + h**4 / 24
    assert runge_kutta4(exponential_growth, 1.0, 0.0, 1, h) == pytest.approx(expected, rel=1e-14)


def test_heun_corrector_uses_start_of_step_state():
    # f depends on t and y; evaluate both stages by hand
    def f(t, y):
        return t * y + 1.0

    h, y0, t0 = 0.2, 2.0, 1.0
    k1 = f(t0, y0)
    k2 = f(t0 + h, y0 + h * k1)
    expected = y0 + h / 2 * (k1 + k2)
    assert heun(f, y0, t0, 1, h) == expected


def test_rk4_stage_times():
    seen = []

    def f(t, y):
        seen.append(t)
        return 0.0

    runge_kutta4(f, 0.0, 1.0, 1, 0.5)
    assert seen == [1.0, 1.25, 1.25, 1.5]


@pytest.mark.parametrize("method", list(METHODS))
def test_evaluation_count_matches_step_count(method):
    counter = CountingDerivative(regular_de)
    problem = ODEProblem.from_interval(counter, t_start=0.0, t_stop=5.0, dt=0.01)
    integrate(method, problem)
    assert counter.calls == STAGES[method] * problem.num_steps


def test_euler_takes_exactly_n_steps_despite_time_drift():
    # 0.1 accumulates rounding error; the loop must not depend on it
    times = []

    def f(t, y):
        times.append(t)
        return 1.0

    problem = ODEProblem.from_interval(f, t_start=0.0, t_stop=1.0, dt=0.1)
    value = forward_euler(f, 0.0, problem.t_start, problem.num_steps, problem.dt)
    assert len(times) == 10
    assert value == pytest.approx(1.0)
    assert times[-1] == pytest.approx(0.9)


@pytest.mark.parametrize("method", list(METHODS))
def test_single_step_boundary(method):
    counter = CountingDerivative(exponential_growth)
    problem = ODEProblem.from_interval(counter, y0=1.0, t_start=0.0, t_stop=0.25, dt=0.25)
    assert problem.num_steps == 1
    integrate(method, problem)
    assert counter.calls == STAGES[method]


@pytest.mark.parametrize("method, expected_order, tol", [
    ("euler", 1, 0.15),
    ("heun", 2, 0.15),
    ("rk4", 4, 0.25),
])
def test_convergence_order_on_exponential(method, expected_order, tol):
    dt_values = [0.1, 0.05, 0.025, 0.0125]
    errors = []
    for dt in dt_values:
        problem = ODEProblem.from_interval(exponential_growth, y0=1.0,
                                           t_start=0.0, t_stop=1.0, dt=dt)
        errors.append(abs(integrate(method, problem).value - exponential_exact(1.0)))
    # errors shrink monotonically with dt
    assert all(a > b for a, b in zip(errors, errors[1:]))
    assert abs(observed_order(dt_values, errors) - expected_order) < tol


def test_small_step_approaches_exact_solution(exponential_problem):
    exact = math.e
    assert abs(integrate("euler", exponential_problem).value - exact) < 2e-2
    assert abs(integrate("heun", exponential_problem).value - exact) < 1e-4
    assert abs(integrate("rk4", exponential_problem).value - exact) < 1e-9


@pytest.mark.parametrize("method", list(METHODS))
def test_nan_propagates_without_raising(method):
    problem = ODEProblem.from_steps(lambda t, y: math.nan, y0=1.0, num_steps=5, dt=0.1)
    assert math.isnan(integrate(method, problem).value)


@pytest.mark.parametrize("method", list(METHODS))
def test_overflow_gives_infinity(method):
    problem = ODEProblem.from_steps(exponential_growth, y0=1e308, num_steps=3, dt=1.0)
    assert math.isinf(integrate(method, problem).value)


def test_regular_de_ieee_semantics():
    assert math.isnan(regular_de(0.0, -1.0))
    assert regular_de(0.0, 1e308) == -math.inf
    assert regular_de(0.0, 0.0) == 10.0


def test_integrate_returns_timed_result(regular_problem):
    result = integrate("rk4", regular_problem)
    assert isinstance(result, IntegrationResult)
    assert result.method == "rk4"
    assert result.elapsed >= 0.0
    _, value, elapsed = result
    assert value == result.value and elapsed == result.elapsed


def test_repeated_runs_are_bit_identical(regular_problem):
    for method in METHODS:
        assert integrate(method, regular_problem).value == integrate(method, regular_problem).value


def test_sample_problem_reaches_steady_state(regular_problem):
    y_star = find_steady_state(regular_de, y_guess=10.0)
    assert abs(regular_de(0.0, y_star)) < 1e-10

    values = {m: integrate(m, regular_problem).value for m in METHODS}
    for value in values.values():
        assert abs(value - y_star) < 0.05

    # accuracy ordering against a fine-step RK4 reference at t = 5
    reference = runge_kutta4(regular_de, 0.0, 0.0, 5000, 0.001)
    err = {m: abs(v - reference) for m, v in values.items()}
    assert err["rk4"] <= err["heun"] <= err["euler"]


def test_resolve_methods():
    assert resolve_methods(None) == ["euler", "heun", "rk4"]
    assert resolve_methods(["RK4", " euler", "rk4"]) == ["rk4", "euler"]
    with pytest.raises(InvalidConfiguration):
        resolve_methods(["midpoint"])
    with pytest.raises(InvalidConfiguration):
        resolve_methods([])


def test_find_steady_state_zero_slope():
    with pytest.raises(RuntimeError):
        find_steady_state(lambda t, y: 1.0, y_guess=0.0)


def test_counting_derivative_reset():
    counter = CountingDerivative(exponential_growth)
    np.testing.assert_allclose(counter(0.0, 2.0), 2.0)
    assert counter.calls == 1
    counter.reset()
    assert counter.calls == 0
