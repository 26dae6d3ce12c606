"""
Concurrent vs serial execution of the explicit integrators.

run_concurrent() hands one integrator per worker to a concurrent.futures pool,
all sharing the same ODEProblem (and therefore the same derivative function),
and measures wall-clock time from dispatch until the last worker has been
joined. run_serial() calls the integrators back to back on the calling thread
and sums their individual durations.

Worker processes give real CPU parallelism. Worker threads only overlap where
the derivative function releases the GIL (sleep, native code); with a
pure-Python f the thread policy runs roughly as slow as the serial one.
"""

import math
import time
from concurrent.futures import ProcessPoolExecutor, ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Dict, Optional

from threaded_ode.errors import InvalidConfiguration, WorkerFailure
from threaded_ode.explicit_methods import (
    METHOD_LABELS,
    IntegrationResult,
    integrate,
    resolve_methods,
)


EXECUTORS = {
    "process": ProcessPoolExecutor,
    "thread": ThreadPoolExecutor,
}


@dataclass(frozen=True)
class ExecutionReport:
    """
    Outcome of running a set of integrators under one execution policy.

    results and failures are keyed by method name; a method appears in exactly
    one of them.
    """

    policy: str
    results: Dict[str, IntegrationResult] = field(default_factory=dict)
    failures: Dict[str, WorkerFailure] = field(default_factory=dict)
    total_elapsed: float = 0.0

    @property
    def ok(self):
        return not self.failures

    def raise_for_failures(self):
        """Raise the first recorded WorkerFailure, if any."""
        for failure in self.failures.values():
            raise failure

    def to_dict(self):
        return {
            "policy": self.policy,
            "total_elapsed": self.total_elapsed,
            "results": {
                name: {"value": r.value, "elapsed": r.elapsed}
                for name, r in self.results.items()
            },
            "failures": {name: str(exc) for name, exc in self.failures.items()},
        }


def _pool_class(executor):
    try:
        return EXECUTORS[executor]
    except KeyError:
        raise InvalidConfiguration(
            f"unknown executor {executor!r}; choose from {', '.join(EXECUTORS)}"
        ) from None


def _print_result(result):
    print(f"{METHOD_LABELS[result.method]} Approximation: {result.value}")
    print(f"Time: {result.elapsed} seconds\n")


def _print_failure(failure):
    print(f"{METHOD_LABELS[failure.method]} FAILED: {failure.cause!r}\n")


def run_concurrent(problem, methods=None, executor="process", verbose=False) -> ExecutionReport:
    """
    Run each integrator on its own worker and wait for all of them.

    Parameters
    ----------
    problem : ODEProblem
        Problem shared by every worker
    methods : list of str, optional
        Method names (default: euler, heun, rk4)
    executor : str
        "process" or "thread"
    verbose : bool
        If True, print each result as its worker completes

    Returns
    -------
    report : ExecutionReport
        Per-method results or failures; total_elapsed is wall-clock time from
        the first dispatch to the last join
    """
    methods = resolve_methods(methods)
    pool_cls = _pool_class(executor)

    if verbose:
        print("\n----Concurrent Execution ({} workers, {} pool)----\n".format(len(methods), executor))

    results = {}
    failures = {}
    with pool_cls(max_workers=len(methods)) as pool:
        start = time.perf_counter()
        futures = {}
        for method in methods:
            try:
                futures[pool.submit(integrate, method, problem)] = method
            except Exception as exc:
                failures[method] = WorkerFailure(method, exc)

        # completion order is arbitrary
        for future in as_completed(futures):
            method = futures[future]
            try:
                result = future.result()
            except Exception as exc:
                failures[method] = WorkerFailure(method, exc)
                if verbose:
                    _print_failure(failures[method])
                continue
            results[method] = result
            if verbose:
                _print_result(result)
        total = time.perf_counter() - start

    ordered = {m: results[m] for m in methods if m in results}
    return ExecutionReport(policy="concurrent", results=ordered,
                           failures=failures, total_elapsed=total)


def run_serial(problem, methods=None, verbose=False) -> ExecutionReport:
    """
    Run the integrators one after another on the calling thread.

    total_elapsed is the sum of the individual durations of the methods that
    completed.
    """
    methods = resolve_methods(methods)

    if verbose:
        print("\n----Serialized Execution----\n")

    results = {}
    failures = {}
    for method in methods:
        try:
            result = integrate(method, problem)
        except Exception as exc:
            failures[method] = WorkerFailure(method, exc)
            if verbose:
                _print_failure(failures[method])
            continue
        results[method] = result
        if verbose:
            _print_result(result)

    total = sum(r.elapsed for r in results.values())
    return ExecutionReport(policy="serial", results=results,
                           failures=failures, total_elapsed=total)


def compare_execution(problem, serial_problem: Optional[object] = None, methods=None,
                      executor="process", verbose=False):
    """
    Run the concurrent policy, then the serial policy, and compare totals.

    Parameters
    ----------
    problem : ODEProblem
        Problem for the concurrent run
    serial_problem : ODEProblem, optional
        Problem for the serial run; may carry a separately constructed but
        equivalent derivative function (default: same as problem)
    methods : list of str, optional
        Method names (default: all three)
    executor : str
        Pool kind for the concurrent run
    verbose : bool
        If True, print per-method results and the summary

    Returns
    -------
    comparison : dict
        'concurrent' and 'serial' ExecutionReports, and 'threading_gain'
        (serial total - concurrent total; nan if any method failed)
    """
    methods = resolve_methods(methods)
    _pool_class(executor)
    if serial_problem is None:
        serial_problem = problem

    concurrent = run_concurrent(problem, methods, executor=executor, verbose=verbose)
    serial = run_serial(serial_problem, methods, verbose=verbose)

    if concurrent.ok and serial.ok:
        gain = serial.total_elapsed - concurrent.total_elapsed
    else:
        gain = math.nan

    if verbose:
        print("---RESULTS---")
        print(f"Concurrent Time: {concurrent.total_elapsed} seconds")
        print(f"Serialized Time: {serial.total_elapsed} seconds")
        print(f"Gains from Concurrency: {gain} seconds\n")
        for report in (concurrent, serial):
            for failure in report.failures.values():
                print(f"  {report.policy}: {failure}")

    return {
        "concurrent": concurrent,
        "serial": serial,
        "threading_gain": gain,
    }
