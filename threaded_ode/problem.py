"""
Problem description for a scalar initial value problem dy/dt = f(t, y).

A time range can be given either as an interval (t_start, t_stop) with a
fixed step dt, or as (t_start, num_steps, dt). Both forms produce the same
ODEProblem; whichever form is used, the other is derived:

    num_steps = round((t_stop - t_start) / dt)
    t_stop    = t_start + num_steps * dt

The step count is what drives the integrators, so the loops never compare
floating-point times to decide when to stop.
"""

import math
import numbers
from dataclasses import dataclass
from typing import Callable

from threaded_ode.errors import InvalidConfiguration


DerivativeFn = Callable[[float, float], float]


def _check_step_size(dt):
    if not isinstance(dt, numbers.Real) or not math.isfinite(dt) or dt <= 0.0:
        raise InvalidConfiguration(f"step size must be a positive finite number, got {dt!r}")


def _check_step_count(num_steps):
    if isinstance(num_steps, bool) or not isinstance(num_steps, numbers.Integral):
        raise InvalidConfiguration(f"num_steps must be an integer, got {num_steps!r}")
    if num_steps < 1:
        raise InvalidConfiguration(f"num_steps must be >= 1, got {num_steps}")


def _check_derivative(f):
    if not callable(f):
        raise InvalidConfiguration(f"derivative function must be callable, got {type(f).__name__}")


@dataclass(frozen=True)
class ODEProblem:
    """
    Immutable scalar IVP with a fixed step size.

    Attributes
    ----------
    f : callable
        Derivative function f(t, y) -> float. Shared read-only by every worker.
    y0 : float
        Initial state at t_start
    t_start : float
        Starting time
    t_stop : float
        Stopping time (t_start + num_steps * dt)
    dt : float
        Fixed time step
    num_steps : int
        Number of steps every integrator takes
    """

    f: DerivativeFn
    y0: float
    t_start: float
    t_stop: float
    dt: float
    num_steps: int

    def __post_init__(self):
        _check_derivative(self.f)
        _check_step_size(self.dt)
        _check_step_count(self.num_steps)
        if not self.t_stop > self.t_start:
            raise InvalidConfiguration(
                f"t_stop ({self.t_stop}) must be after t_start ({self.t_start})"
            )

    @classmethod
    def from_interval(cls, f, y0=0.0, t_start=0.0, t_stop=5.0, dt=1e-5):
        """
        Build a problem from (t_start, t_stop, dt).

        num_steps is rounded, and t_stop is recomputed as t_start + num_steps * dt
        so it is the time the integrators actually reach.
        """
        _check_derivative(f)
        _check_step_size(dt)
        if not (math.isfinite(t_start) and math.isfinite(t_stop)):
            raise InvalidConfiguration("t_start and t_stop must be finite")
        if not t_stop > t_start:
            raise InvalidConfiguration(f"t_stop ({t_stop}) must be after t_start ({t_start})")
        ratio = (t_stop - t_start) / dt
        if not math.isfinite(ratio):
            raise InvalidConfiguration(
                f"dt={dt} is too small for the interval [{t_start}, {t_stop}]"
            )
        num_steps = int(round(ratio))
        if num_steps < 1:
            raise InvalidConfiguration(
                f"dt={dt} is too large for the interval [{t_start}, {t_stop}]"
            )
        t_stop = t_start + num_steps * dt
        return cls(f=f, y0=float(y0), t_start=float(t_start), t_stop=float(t_stop),
                   dt=float(dt), num_steps=num_steps)

    @classmethod
    def from_steps(cls, f, y0=0.0, t_start=0.0, num_steps=1, dt=1e-5):
        """Build a problem from (t_start, num_steps, dt); t_stop is derived."""
        _check_step_size(dt)
        if not math.isfinite(t_start):
            raise InvalidConfiguration("t_start must be finite")
        _check_step_count(num_steps)
        t_stop = t_start + num_steps * dt
        return cls(f=f, y0=float(y0), t_start=float(t_start), t_stop=float(t_stop),
                   dt=float(dt), num_steps=num_steps)

    def with_derivative(self, f):
        """Same time range and initial state, different derivative function."""
        return ODEProblem(f=f, y0=self.y0, t_start=self.t_start, t_stop=self.t_stop,
                          dt=self.dt, num_steps=self.num_steps)
