"""
threaded_ode: Fixed-step explicit ODE integrators, run concurrently vs serially

This package approximates a scalar ODE dy/dt = f(t, y) with Forward Euler,
Heun (Improved Euler) and classical Runge-Kutta 4, and compares the wall-clock
cost of running the three methods on parallel workers against running them
back to back.
"""

__version__ = "0.1.0"
