"""
Convergence study of the fixed-step integrators against an analytic solution.

For each dt in dt_values, every method is run over the same interval and the
error |y_N - y_exact(t_N)| is recorded, where t_N = t_start + N*dt is
the time the integrator actually reaches. The observed order of accuracy is
the slope of log(error) vs log(dt), fitted with a least-squares line:

    log(error) = log(C) + p * log(dt)
"""

import math
from typing import Callable, Dict, Optional, Sequence

import numpy as np

from threaded_ode.explicit_methods import METHOD_LABELS, ORDERS, integrate, resolve_methods
from threaded_ode.problem import ODEProblem


def observed_order(dt_values, errors):
    """
    Least-squares slope of log(error) against log(dt).

    Points with a zero or non-finite error are dropped; returns nan when fewer
    than two points remain.
    """
    dt_arr = np.asarray(dt_values, dtype=float)
    err_arr = np.asarray(errors, dtype=float)
    mask = np.isfinite(err_arr) & (err_arr > 0.0)
    if np.count_nonzero(mask) < 2:
        return math.nan
    slope, _ = np.polyfit(np.log(dt_arr[mask]), np.log(err_arr[mask]), 1)
    return float(slope)


def convergence_study(f: Callable,
                      exact: Callable,
                      y0: float = 1.0,
                      t_start: float = 0.0,
                      t_stop: float = 1.0,
                      dt_values: Optional[Sequence[float]] = None,
                      methods=None,
                      verbose: bool = False) -> Dict:
    """
    Run every method for several step sizes and compare to the exact solution.

    Parameters
    ----------
    f : callable
        Derivative function f(t, y)
    exact : callable
        Exact solution y(t), evaluated at the end time reached for each dt
    y0 : float
        Initial state
    t_start : float
        Starting time
    t_stop : float
        Stopping time
    dt_values : list of float
        Step sizes to test (default: 0.1, 0.05, 0.025, 0.0125)
    methods : list of str, optional
        Method names (default: all three)
    verbose : bool
        If True, print a summary table

    Returns
    -------
    results : dict
        'dt_values', 't_end' and 'y_exact' (one per dt), and per method: 'values', 'errors',
        'computation_times', 'observed_order', 'expected_order'
    """
    if dt_values is None:
        dt_values = [0.1, 0.05, 0.025, 0.0125]
    methods = resolve_methods(methods)

    per_method = {}
    for method in methods:
        per_method[method] = {
            "values": [],
            "errors": [],
            "computation_times": [],
        }

    if verbose:
        print("=" * 70)
        print("CONVERGENCE STUDY")
        print("=" * 70)
        print(f"Time range: [{t_start}, {t_stop}]")
        print(f"Testing {len(dt_values)} dt values for {', '.join(methods)}")
        print("-" * 70)

    t_end_values = []
    y_exact_values = []
    for dt in dt_values:
        problem = ODEProblem.from_interval(f, y0=y0, t_start=t_start, t_stop=t_stop, dt=dt)
        y_exact = exact(problem.t_stop)
        t_end_values.append(problem.t_stop)
        y_exact_values.append(y_exact)
        for method in methods:
            result = integrate(method, problem)
            entry = per_method[method]
            entry["values"].append(result.value)
            entry["errors"].append(abs(result.value - y_exact))
            entry["computation_times"].append(result.elapsed)

    for method, entry in per_method.items():
        entry["observed_order"] = observed_order(dt_values, entry["errors"])
        entry["expected_order"] = ORDERS[method]

    if verbose:
        print(f"{'dt':<12} " + " ".join(f"{METHOD_LABELS[m]:<16}" for m in methods))
        print("-" * 70)
        for i, dt in enumerate(dt_values):
            row = " ".join(f"{per_method[m]['errors'][i]:<16.6e}" for m in methods)
            print(f"{dt:<12.6e} {row}")
        print("-" * 70)
        for m in methods:
            print(f"  {METHOD_LABELS[m]}: observed order {per_method[m]['observed_order']:.3f}"
                  f" (expected {ORDERS[m]})")

    results = {
        "dt_values": list(dt_values),
        "t_end": t_end_values,
        "y_exact": y_exact_values,
        "t_start": t_start,
        "t_stop": t_stop,
    }
    results.update(per_method)
    return results
