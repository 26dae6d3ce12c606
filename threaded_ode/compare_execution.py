#!/usr/bin/env python3
"""
Compare concurrent vs serial execution of Euler, Heun and Runge-Kutta 4.

This script:
1. Builds the problem dy/dt = 10 - 0.2 y - 0.27 y^1.5 on [t_start, t_stop]
2. Runs the three integrators on parallel workers, then back to back
3. Reports per-method approximations and times, and the gain from concurrency
4. Optionally runs a convergence study on dy/dt = y and saves plots / JSON
"""

import argparse
import json
import math
from pathlib import Path

from threaded_ode.convergence import convergence_study
from threaded_ode.derivatives import (
    exponential_exact,
    exponential_growth,
    find_steady_state,
    regular_de,
)
from threaded_ode.errors import InvalidConfiguration
from threaded_ode.explicit_methods import METHOD_LABELS
from threaded_ode.harness import EXECUTORS, compare_execution
from threaded_ode.plotting import plot_convergence, plot_timings
from threaded_ode.problem import ODEProblem


def build_parser():
    parser = argparse.ArgumentParser(
        description='Compare concurrent vs serial execution of fixed-step ODE integrators'
    )
    parser.add_argument('--y0', type=float, default=0.0,
                        help='Initial state (default: 0.0)')
    parser.add_argument('--t-start', type=float, default=0.0,
                        help='Starting time (default: 0.0)')
    span = parser.add_mutually_exclusive_group()
    span.add_argument('--t-stop', type=float, default=None,
                      help='Stopping time (default: 5.0)')
    span.add_argument('--steps', type=int, default=None,
                      help='Number of steps (alternative to --t-stop)')
    parser.add_argument('--dt', type=float, default=1e-5,
                        help='Fixed time step (default: 1e-5)')
    parser.add_argument('--methods', type=str, default='euler,heun,rk4',
                        help='Comma-separated methods (default: euler,heun,rk4)')
    parser.add_argument('--executor', choices=sorted(EXECUTORS), default='process',
                        help='Worker pool for the concurrent run (default: process)')
    parser.add_argument('--output', type=str, default=None,
                        help='Save results to this JSON file')
    parser.add_argument('--convergence', action='store_true',
                        help='Also run a convergence study on dy/dt = y')
    parser.add_argument('--plot-dir', type=str, default=None,
                        help='Directory to save timing / convergence plots')
    parser.add_argument('--quiet', action='store_true',
                        help='Only print the final summary')
    return parser


def build_problem(args):
    if args.steps is not None:
        return ODEProblem.from_steps(regular_de, y0=args.y0, t_start=args.t_start,
                                     num_steps=args.steps, dt=args.dt)
    t_stop = 5.0 if args.t_stop is None else args.t_stop
    return ODEProblem.from_interval(regular_de, y0=args.y0, t_start=args.t_start,
                                    t_stop=t_stop, dt=args.dt)


def to_json_safe(obj):
    """Replace nan/inf floats with None so the output is strict JSON."""
    if isinstance(obj, float):
        return obj if math.isfinite(obj) else None
    if isinstance(obj, dict):
        return {key: to_json_safe(value) for key, value in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [to_json_safe(value) for value in obj]
    return obj


def summarize_steady_state(comparison, verbose=True):
    """Distance of each serial result from the steady state of regular_de."""
    y_star = find_steady_state(regular_de, y_guess=10.0)
    distances = {
        name: abs(result.value - y_star)
        for name, result in comparison["serial"].results.items()
    }
    if verbose:
        print(f"Steady state y* = {y_star:.12f}")
        for name, dist in distances.items():
            print(f"  {METHOD_LABELS[name]}: |y_N - y*| = {dist:.6e}")
    return y_star, distances


def main(argv=None):
    """Main function to run the execution comparison."""
    parser = build_parser()
    args = parser.parse_args(argv)
    verbose = not args.quiet
    methods = [m for m in args.methods.split(',') if m.strip()]

    try:
        problem = build_problem(args)
        # computationally identical, separately constructed derivative for the serial run
        serial_problem = problem.with_derivative(
            lambda t, y: regular_de(t, y)
        )
    except InvalidConfiguration as e:
        parser.error(str(e))

    if verbose:
        print("=" * 70)
        print("CONCURRENT vs SERIAL ODE INTEGRATION")
        print("=" * 70)
        print(f"  y0 = {problem.y0}, t = [{problem.t_start}, {problem.t_stop}]")
        print(f"  dt = {problem.dt:.6e}, steps = {problem.num_steps}")

    try:
        comparison = compare_execution(problem, serial_problem, methods=methods,
                                       executor=args.executor, verbose=verbose)
    except InvalidConfiguration as e:
        parser.error(str(e))

    concurrent = comparison["concurrent"]
    serial = comparison["serial"]
    if args.quiet:
        print(f"Concurrent Time: {concurrent.total_elapsed} seconds")
        print(f"Serialized Time: {serial.total_elapsed} seconds")
        print(f"Gains from Concurrency: {comparison['threading_gain']} seconds")

    y_star, distances = summarize_steady_state(comparison, verbose=verbose)

    study = None
    if args.convergence:
        study = convergence_study(exponential_growth, exponential_exact,
                                  y0=1.0, t_start=0.0, t_stop=1.0,
                                  methods=methods, verbose=verbose)

    if args.plot_dir:
        plot_dir = Path(args.plot_dir)
        plot_dir.mkdir(parents=True, exist_ok=True)
        plot_timings(comparison, outfile=plot_dir / 'timings.png')
        if study is not None:
            plot_convergence(study, outfile=plot_dir / 'convergence.png')
        if verbose:
            print(f"Plots saved to {plot_dir}")

    if args.output:
        payload = {
            "problem": {
                "y0": problem.y0,
                "t_start": problem.t_start,
                "t_stop": problem.t_stop,
                "dt": problem.dt,
                "num_steps": problem.num_steps,
                "executor": args.executor,
            },
            "concurrent": concurrent.to_dict(),
            "serial": serial.to_dict(),
            "threading_gain": comparison["threading_gain"],
            "steady_state": {"y_star": y_star, "distances": distances},
        }
        if study is not None:
            payload["convergence"] = study
        with open(args.output, 'w') as f:
            json.dump(to_json_safe(payload), f, indent=2, allow_nan=False)
        if verbose:
            print(f"Results saved to {args.output}")

    failed = not (concurrent.ok and serial.ok)
    if failed or math.isnan(comparison["threading_gain"]):
        return 1
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
