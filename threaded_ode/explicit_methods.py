"""
Fixed-step explicit integrators for a scalar ODE dy/dt = f(t, y).

Implements:
    Forward Euler:  y[n+1] = y[n] + h * f(t[n], y[n])
    Heun:           y[n+1] = y[n] + h/2 * (k1 + f(t[n] + h, y[n] + h*k1))
    Runge-Kutta 4:  y[n+1] = y[n] + h/6 * (k1 + 2*k2 + 2*k3 + k4)

Each stepping function runs exactly num_steps iterations and returns the final
state. integrate() times one run and packs it into an IntegrationResult.
No checks are made on the state: nan/inf from f flows through unchanged.
"""

import time
from typing import Callable, Dict, NamedTuple

from threaded_ode.errors import InvalidConfiguration


class IntegrationResult(NamedTuple):
    """Final state and wall-clock duration (seconds) of one integrator run."""

    method: str
    value: float
    elapsed: float


def forward_euler(f: Callable, y0: float, t_start: float, num_steps: int, dt: float) -> float:
    """
    Forward Euler integrator with fixed time step.

    Parameters
    ----------
    f : callable
        Derivative function f(t, y)
    y0 : float
        Initial state at t_start
    t_start : float
        Starting time
    num_steps : int
        Number of steps to take
    dt : float
        Fixed time step size

    Returns
    -------
    y : float
        Approximation of y(t_start + num_steps * dt)
    """
    y = y0
    t = t_start
    for _ in range(num_steps):
        y += dt * f(t, y)
        t += dt
    return y


def heun(f: Callable, y0: float, t_start: float, num_steps: int, dt: float) -> float:
    """
    Heun's method (Improved Euler), second order.

    The predictor y + h*k1 and the corrector update both start from the
    state at the beginning of the step.
    """
    y = y0
    t = t_start
    half_dt = dt / 2.0
    for _ in range(num_steps):
        k1 = f(t, y)
        y_predict = y + dt * k1
        y = y + half_dt * (k1 + f(t + dt, y_predict))
        t += dt
    return y


def runge_kutta4(f: Callable, y0: float, t_start: float, num_steps: int, dt: float) -> float:
    """Classical fourth-order Runge-Kutta."""
    y = y0
    t = t_start
    half_dt = dt / 2.0
    sixth_dt = dt / 6.0
    for _ in range(num_steps):
        k1 = f(t, y)
        k2 = f(t + half_dt, y + half_dt * k1)
        k3 = f(t + half_dt, y + half_dt * k2)
        k4 = f(t + dt, y + dt * k3)
        y += sixth_dt * (k1 + 2.0 * k2 + 2.0 * k3 + k4)
        t += dt
    return y


METHODS: Dict[str, Callable] = {
    "euler": forward_euler,
    "heun": heun,
    "rk4": runge_kutta4,
}

METHOD_LABELS = {
    "euler": "Euler",
    "heun": "Heun",
    "rk4": "Runge Kutta",
}

# derivative evaluations per step
STAGES = {"euler": 1, "heun": 2, "rk4": 4}

ORDERS = {"euler": 1, "heun": 2, "rk4": 4}


def resolve_methods(methods=None):
    """Normalize a list of method names, defaulting to all three."""
    if methods is None:
        return list(METHODS)
    resolved = []
    for name in methods:
        key = name.strip().lower()
        if key not in METHODS:
            raise InvalidConfiguration(
                f"unknown method {name!r}; choose from {', '.join(METHODS)}"
            )
        if key not in resolved:
            resolved.append(key)
    if not resolved:
        raise InvalidConfiguration("at least one method is required")
    return resolved


def integrate(method: str, problem) -> IntegrationResult:
    """
    Run one integrator on an ODEProblem and time it.

    The stopwatch wraps the whole stepping call; nothing is timed inside the
    loop.
    """
    stepper = METHODS[method]
    start = time.perf_counter()
    value = stepper(problem.f, problem.y0, problem.t_start, problem.num_steps, problem.dt)
    elapsed = time.perf_counter() - start
    return IntegrationResult(method, value, elapsed)
