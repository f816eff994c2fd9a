"""Value types for the pendulum state and the user controls.

Both types are frozen: a transition produces a new value through
``dataclasses.replace`` and never mutates a snapshot a reader may hold.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Tuple

TrailPoint = Tuple[float, float]
Trail = Tuple[TrailPoint, ...]

INITIAL_ANGLE = math.pi / 4
INITIAL_LENGTH = 2.0
INITIAL_MASS = 1.0
INITIAL_GRAVITY = 9.81
INITIAL_DAMPING = 0.5


@dataclass(frozen=True)
class PendulumState:
    angle: float = INITIAL_ANGLE  # rad from vertical, not wrapped
    angular_velocity: float = 0.0  # rad/s
    length: float = INITIAL_LENGTH  # m
    mass: float = INITIAL_MASS  # kg
    trail: Trail = field(default_factory=tuple)  # screen-space points, oldest first


@dataclass(frozen=True)
class SimulationControls:
    is_running: bool = True
    gravity: float = INITIAL_GRAVITY  # m/s^2
    damping: float = INITIAL_DAMPING  # percent, 0..100
    show_trail: bool = True

    @property
    def damping_coefficient(self) -> float:
        """Dimensionless coefficient consumed by the integrator."""
        return self.damping / 100.0


def create_initial_state() -> PendulumState:
    return PendulumState()


def create_initial_controls() -> SimulationControls:
    return SimulationControls()
