"""Single pendulum physics: vector field family and reference solutions.

Each vector field maps a phase state (q, p) to its time derivatives
(q_dot, p_dot). Fields operate on arrays whose last axis holds (q, p), so
a single state of shape (2,) and a batch of shape (N, 2) go through the
same code path.

The RK4 stepper that animates these fields lives in portrait/integrator.py.
reference_trajectory() here solves the same equations with SciPy's
solve_ivp (DOP853) and is used to cross-validate the stepper.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

import numpy as np
from scipy.integrate import solve_ivp


class VectorField(Protocol):
    """Protocol for the right-hand side of a one-degree-of-freedom system."""

    def q_dot(self, states: np.ndarray) -> np.ndarray:
        """Time derivative of position for states (..., 2)."""
        ...

    def p_dot(self, states: np.ndarray) -> np.ndarray:
        """Time derivative of momentum for states (..., 2)."""
        ...

    def derivatives(self, states: np.ndarray) -> np.ndarray:
        """Both derivatives stacked on the last axis, shape (..., 2)."""
        ...


class _PendulumField:
    """Shared q_dot and derivatives() for fields where q_dot = p."""

    def q_dot(self, states: np.ndarray) -> np.ndarray:
        return states[..., 1]

    def derivatives(self, states: np.ndarray) -> np.ndarray:
        # New array on every call (no in-place mutation of the input)
        return np.stack([self.q_dot(states), self.p_dot(states)], axis=-1)


@dataclass(frozen=True)
class ConservativePendulum(_PendulumField):
    """Undamped, undriven pendulum: q_dot = p, p_dot = -sin(q)."""

    def p_dot(self, states: np.ndarray) -> np.ndarray:
        return -np.sin(states[..., 0])


@dataclass(frozen=True)
class AttractorPendulum(_PendulumField):
    """Pendulum with unit linear damping: p_dot = -sin(q) - p.

    Every trajectory spirals into one of the stable equilibria at
    q = 2*pi*k, which makes these the attractors of the phase portrait.
    """

    def p_dot(self, states: np.ndarray) -> np.ndarray:
        return -np.sin(states[..., 0]) - states[..., 1]


@dataclass(frozen=True)
class DissipativePendulum(_PendulumField):
    """Generalized damped pendulum: p_dot = -2*a*p - w**2 * sin(q).

    Attributes:
        damping: Damping coefficient a. Negative values pump energy in.
        frequency: Natural (small-oscillation) angular frequency w.
    """

    damping: float = 0.0
    frequency: float = 1.0

    def p_dot(self, states: np.ndarray) -> np.ndarray:
        q = states[..., 0]
        p = states[..., 1]
        return -2.0 * self.damping * p - self.frequency**2 * np.sin(q)


def pendulum_energy(states: np.ndarray, frequency: float = 1.0) -> np.ndarray:
    """Total energy 0.5*p**2 - w**2*cos(q) for states (..., 2).

    Conserved by ConservativePendulum (w = 1) and by DissipativePendulum
    with zero damping.
    """
    q = states[..., 0]
    p = states[..., 1]
    return 0.5 * p**2 - frequency**2 * np.cos(q)


def reference_trajectory(
    field: VectorField,
    initial_state,
    n_steps: int,
    h: float,
) -> np.ndarray:
    """High-accuracy solution sampled on the fixed-step time grid.

    Samples are taken at t = h, 2h, ..., n_steps*h so that row i lines up
    with the i-th state produced by the RK4 stepper. Position is not
    wrapped.

    Returns:
        (n_steps, 2) float64 array of [q, p].
    """
    y0 = np.asarray(initial_state, dtype=np.float64)
    t_end = n_steps * h
    t_eval = h * np.arange(1, n_steps + 1)

    sol = solve_ivp(
        fun=lambda t, y: field.derivatives(y),
        t_span=(0.0, t_end),
        y0=y0,
        method="DOP853",
        t_eval=t_eval,
        rtol=1e-12,
        atol=1e-12,
    )

    return sol.y.T
