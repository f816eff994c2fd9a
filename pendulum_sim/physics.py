"""
Numerical physics for the damped single pendulum.

This module provides:
- The derivative function of the damped nonlinear pendulum
- A classical RK4 integrator (single step and sub-stepped)
- Energy, period and speed estimates used by the gauge and the info panel
- Position helpers for visualization

Every function here is pure: nothing is cached between calls.
"""

from __future__ import annotations

import math
from typing import Tuple

from pendulum_sim.config import DEFAULT_CONFIG, SimulationConfig
from pendulum_sim.errors import InvalidParameterError, NumericalInstabilityError
from pendulum_sim.state import PendulumState, TrailPoint

Derivative = Tuple[float, float]


def _require_finite(**values: float) -> None:
    for name, value in values.items():
        if not math.isfinite(value):
            raise InvalidParameterError(f"{name} must be finite, got {value!r}")


def _require_length(length: float) -> None:
    if not length > 0:
        raise InvalidParameterError(f"length must be positive, got {length!r}")


def pendulum_derivatives(theta: float, omega: float, length: float, gravity: float, damping_coefficient: float) -> Derivative:
    """Return (dtheta, domega) for a pendulum with linear damping.

    Angles are measured from the vertical (downwards is 0 rad).
    """
    _require_length(length)
    dtheta = omega
    domega = -(gravity / length) * math.sin(theta) - damping_coefficient * omega
    return dtheta, domega


def rk4_step(
    angle: float,
    angular_velocity: float,
    length: float,
    dt: float,
    gravity: float,
    damping_coefficient: float,
) -> Tuple[float, float]:
    """Perform one classical RK4 step and return (new_angle, new_angular_velocity).

    Raises InvalidParameterError for a non-positive length or any non-finite input.
    The step size is not clamped here.
    """
    _require_finite(
        angle=angle,
        angular_velocity=angular_velocity,
        length=length,
        dt=dt,
        gravity=gravity,
        damping_coefficient=damping_coefficient,
    )
    _require_length(length)

    def f(theta: float, omega: float) -> Derivative:
        return pendulum_derivatives(theta, omega, length, gravity, damping_coefficient)

    theta, omega = angle, angular_velocity
    try:
        k1t, k1v = f(theta, omega)
        k2t, k2v = f(theta + 0.5 * dt * k1t, omega + 0.5 * dt * k1v)
        k3t, k3v = f(theta + 0.5 * dt * k2t, omega + 0.5 * dt * k2v)
        k4t, k4v = f(theta + dt * k3t, omega + dt * k3v)
    except (OverflowError, ValueError) as err:
        # an intermediate stage left the finite range (math.sin(inf) raises)
        raise NumericalInstabilityError(f"RK4 stage diverged with dt={dt!r}: {err}") from err

    new_theta = theta + dt * (k1t + 2.0 * k2t + 2.0 * k3t + k4t) / 6.0
    new_omega = omega + dt * (k1v + 2.0 * k2v + 2.0 * k3v + k4v) / 6.0
    return new_theta, new_omega


def rk4_integrate_substeps(
    angle: float,
    angular_velocity: float,
    length: float,
    dt_total: float,
    dt_max: float,
    gravity: float,
    damping_coefficient: float,
) -> Tuple[float, float]:
    """Integrate dt_total using RK4 by splitting into sub-steps of size <= dt_max."""
    if not dt_max > 0:
        raise InvalidParameterError(f"dt_max must be positive, got {dt_max!r}")
    _require_finite(dt_total=dt_total)
    steps = max(1, int(math.ceil(abs(dt_total) / dt_max)))
    dt = float(dt_total) / steps
    theta, omega = angle, angular_velocity
    for _ in range(steps):
        theta, omega = rk4_step(theta, omega, length, dt, gravity, damping_coefficient)
    return theta, omega


def check_finite(angle: float, angular_velocity: float) -> None:
    """Raise NumericalInstabilityError if the integrated state is not finite."""
    if not (math.isfinite(angle) and math.isfinite(angular_velocity)):
        raise NumericalInstabilityError(
            f"non-finite pendulum state: angle={angle!r}, angular_velocity={angular_velocity!r}"
        )


# --- Derived quantities -------------------------------------------------------


def kinetic_energy(state: PendulumState) -> float:
    speed = state.angular_velocity * state.length
    return 0.5 * state.mass * speed * speed


def potential_energy(state: PendulumState, gravity: float) -> float:
    """Potential energy relative to the lowest point of the swing."""
    return state.mass * gravity * state.length * (1.0 - math.cos(state.angle))


def compute_energy(state: PendulumState, gravity: float) -> float:
    """Total mechanical energy (kinetic + potential)."""
    return kinetic_energy(state) + potential_energy(state, gravity)


def compute_max_energy(state: PendulumState, gravity: float) -> float:
    """Energy of the bob held at rest straight above the pivot.

    Used as the full-scale value of the energy gauge, not as a bound for the
    current amplitude.
    """
    return 2.0 * state.mass * gravity * state.length


def compute_energy_fraction(state: PendulumState, gravity: float) -> float:
    """Gauge fill level in [0, 1]."""
    max_energy = compute_max_energy(state, gravity)
    if max_energy <= 0:
        return 0.0
    return min(1.0, max(0.0, compute_energy(state, gravity) / max_energy))


def compute_period(state: PendulumState, gravity: float) -> float:
    """Small-angle period 2*pi*sqrt(L/g); underestimates large amplitudes."""
    _require_length(state.length)
    if not gravity > 0:
        raise InvalidParameterError(f"gravity must be positive, got {gravity!r}")
    return 2.0 * math.pi * math.sqrt(state.length / gravity)


def compute_max_speed(state: PendulumState, gravity: float) -> float:
    """Max-speed estimate shown in the info panel.

    Note: this is sqrt(2 g L) * (1 - cos(angle)) for the current angle, kept
    as the info panel has always displayed it. It is not the energy-conserving
    speed at the lowest point.
    """
    return math.sqrt(2.0 * gravity * state.length) * (1.0 - math.cos(state.angle))


# --- Geometry -----------------------------------------------------------------


def bob_position(angle: float, length: float) -> Tuple[float, float]:
    """Bob position in meters relative to the pivot, x to the right and y downwards."""
    return length * math.sin(angle), length * math.cos(angle)


def project_to_screen(angle: float, length: float, config: SimulationConfig = DEFAULT_CONFIG) -> TrailPoint:
    """Bob position in screen pixels for the configured pivot and scale."""
    x_m, y_m = bob_position(angle, length)
    return (
        config.pivot_x + x_m * config.pixels_per_meter,
        config.pivot_y + y_m * config.pixels_per_meter,
    )
