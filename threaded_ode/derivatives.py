"""
Derivative functions f(t, y) for scalar ODEs.

Any callable with signature f(t, y) -> float can be integrated. Functions here
are module-level so they can be shipped by reference to worker processes, and
they never mutate shared data, so any number of workers may call them at once.
"""

import math
import threading
import time


def regular_de(t, y):
    """
    dy/dt = 10 - 0.2 y - 0.27 y^1.5

    The t argument is unused but kept so the function matches f(t, y).
    y^1.5 is written as y*sqrt(y) so overflow gives inf and a negative
    state gives nan instead of raising or turning complex.
    """
    if y >= 0.0:
        y15 = y * math.sqrt(y)
    else:
        y15 = math.nan
    return 10.0 - 0.2 * y - 0.27 * y15


def exponential_growth(t, y):
    """dy/dt = y, exact solution y0 * exp(t - t0)."""
    return y


def exponential_exact(t, y0=1.0, t0=0.0):
    """Analytic solution of exponential_growth."""
    return y0 * math.exp(t - t0)


def time_dependent_de(t, y):
    """dy/dt = cos(t) - y, a non-autonomous test problem."""
    return math.cos(t) - y


def time_dependent_exact(t, y0=0.0, t0=0.0):
    """Analytic solution of time_dependent_de."""
    particular = 0.5 * (math.cos(t) + math.sin(t))
    c = (y0 - 0.5 * (math.cos(t0) + math.sin(t0))) * math.exp(t0)
    return particular + c * math.exp(-t)


class CountingDerivative:
    """
    Wraps a derivative function and counts how often it is evaluated.

    The counter is the only mutable state and is guarded by a lock, so one
    instance can be shared by concurrent workers.
    """

    def __init__(self, f):
        self.f = f
        self._calls = 0
        self._lock = threading.Lock()

    def __call__(self, t, y):
        with self._lock:
            self._calls += 1
        return self.f(t, y)

    @property
    def calls(self):
        return self._calls

    def reset(self):
        with self._lock:
            self._calls = 0


class SleepingDerivative:
    """
    Derivative that sleeps for a fixed delay on every evaluation.

    time.sleep releases the GIL, so threaded workers really overlap. Used to
    measure harness timing independently of pure-Python CPU contention.
    """

    def __init__(self, f, delay):
        self.f = f
        self.delay = delay

    def __call__(self, t, y):
        time.sleep(self.delay)
        return self.f(t, y)


def find_steady_state(f, y_guess=1.0, t=0.0, tol=1e-12, max_iter=100, dy=1e-7):
    """
    Find y* with f(t, y*) = 0 using Newton's method with a finite-difference slope.

    Parameters
    ----------
    f : callable
        Autonomous (or frozen-in-time) derivative function f(t, y)
    y_guess : float
        Initial guess
    t : float
        Time at which f is evaluated
    tol : float
        Convergence tolerance on |f(t, y)|
    max_iter : int
        Maximum Newton iterations
    dy : float
        Relative finite-difference perturbation

    Returns
    -------
    y_star : float
        The steady-state value

    Raises
    ------
    RuntimeError
        If Newton does not converge or hits a zero slope
    """
    y = float(y_guess)
    for _ in range(max_iter):
        fy = f(t, y)
        if abs(fy) < tol:
            return y
        h = dy * max(1.0, abs(y))
        slope = (f(t, y + h) - f(t, y - h)) / (2.0 * h)
        if slope == 0.0 or not math.isfinite(slope):
            raise RuntimeError(f"zero or non-finite slope at y = {y}")
        y = y - fy / slope
    raise RuntimeError(f"Newton did not converge in {max_iter} iterations (y = {y})")

