"""Plots for convergence studies and concurrent vs serial timings."""

import numpy as np
import matplotlib.pyplot as plt

from threaded_ode.explicit_methods import METHOD_LABELS, METHODS


def plot_convergence(study, title=None, outfile=None, show=False):
    """
    Log-log plot of error vs dt for each method, with O(dt^p) guide lines.

    study: dict returned by convergence.convergence_study
    """
    dt_values = np.asarray(study["dt_values"], dtype=float)
    fig, ax = plt.subplots(1, 1, figsize=(8, 6))
    for method in METHODS:
        if method not in study:
            continue
        entry = study[method]
        errors = np.maximum(1e-16, np.asarray(entry["errors"], dtype=float))
        ax.loglog(dt_values, errors, 'o-', linewidth=2, markersize=6,
                  label=f"{METHOD_LABELS[method]} (p = {entry['observed_order']:.2f})")
        # reference slope anchored at the largest dt
        p = entry["expected_order"]
        guide = errors[0] * (dt_values / dt_values[0]) ** p
        ax.loglog(dt_values, guide, '--', alpha=0.4, color='gray')
    ax.set_xlabel('Time step dt')
    ax.set_ylabel('|y_N - y_exact|')
    ax.set_title(title or 'Convergence of fixed-step explicit methods')
    ax.grid(True, which='both', ls='--', alpha=0.5)
    ax.legend()
    fig.tight_layout()
    if outfile:
        fig.savefig(outfile, dpi=150)
    if show:
        plt.show()
    return fig


def plot_timings(comparison, title=None, outfile=None, show=False):
    """
    Grouped bar chart of per-method times for both policies, plus totals.

    comparison: dict returned by harness.compare_execution
    """
    concurrent = comparison["concurrent"]
    serial = comparison["serial"]
    methods = [m for m in METHODS if m in concurrent.results or m in serial.results]
    labels = [METHOD_LABELS[m] for m in methods] + ['Total']

    def _times(report):
        times = [report.results[m].elapsed if m in report.results else np.nan for m in methods]
        return times + [report.total_elapsed]

    x = np.arange(len(labels))
    width = 0.35
    fig, ax = plt.subplots(1, 1, figsize=(8, 5))
    ax.bar(x - width / 2, _times(concurrent), width, label='Concurrent')
    ax.bar(x + width / 2, _times(serial), width, label='Serial')
    ax.set_xticks(x)
    ax.set_xticklabels(labels)
    ax.set_ylabel('Wall-clock time (s)')
    ax.set_title(title or f"Gain from concurrency: {comparison['threading_gain']:.4f} s")
    ax.grid(True, axis='y', ls='--', alpha=0.5)
    ax.legend()
    fig.tight_layout()
    if outfile:
        fig.savefig(outfile, dpi=150)
    if show:
        plt.show()
    return fig
