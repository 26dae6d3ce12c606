# tests/conftest.py
"""
pytest conftest: ensure project root is on sys.path and force non-interactive mpl backend.

It runs early during pytest collection and:
 - inserts the project root (parent of tests/) into sys.path so tests can import
   threaded_ode without installing it.
 - sets matplotlib backend to 'Agg' to avoid GUI windows when plots are made.
 - provides shared fixtures for the sample problems.
"""

import os
import sys

import pytest

# 1) Make sure project root (parent of tests/) is on sys.path
THIS_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(THIS_DIR, ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

# 2) Force matplotlib to use a non-interactive backend before pyplot is imported
os.environ.setdefault("MPLBACKEND", "Agg")
import matplotlib  # noqa: E402

matplotlib.use("Agg")

from threaded_ode.derivatives import exponential_growth, regular_de  # noqa: E402
from threaded_ode.problem import ODEProblem  # noqa: E402


@pytest.fixture(autouse=True)
def disable_plots(monkeypatch):
    """No-op plt.show so tests never block on a window."""
    import matplotlib.pyplot as plt

    monkeypatch.setattr(plt, "show", lambda *a, **k: None)
    yield
    plt.close("all")


@pytest.fixture
def regular_problem():
    """The sample problem on [0, 5] with a coarse step."""
    return ODEProblem.from_interval(regular_de, y0=0.0, t_start=0.0, t_stop=5.0, dt=0.01)


@pytest.fixture
def exponential_problem():
    """dy/dt = y, y(0) = 1 on [0, 1]."""
    return ODEProblem.from_interval(exponential_growth, y0=1.0, t_start=0.0, t_stop=1.0, dt=0.01)
