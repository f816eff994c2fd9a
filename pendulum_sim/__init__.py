"""
Single-pendulum simulation core.

RK4 integration of the damped pendulum, a bounded trajectory trail, derived
quantities for the energy gauge and info panel, and the per-tick loop driver.
"""

from .errors import InvalidParameterError, NumericalInstabilityError, SimulationError
from .config import DEFAULT_CONFIG, SimulationConfig
from .state import PendulumState, SimulationControls, create_initial_controls, create_initial_state
from .physics import (
    compute_energy,
    compute_energy_fraction,
    compute_max_energy,
    compute_max_speed,
    compute_period,
    rk4_step,
)
from .sim_session import SimulationSession, advance, reset_simulation, reset_trail, restart, step
from .frame_loop import FrameLoop, ThreadTickScheduler

__all__ = [
    # Errors
    "SimulationError",
    "InvalidParameterError",
    "NumericalInstabilityError",
    # Config & state
    "SimulationConfig",
    "DEFAULT_CONFIG",
    "PendulumState",
    "SimulationControls",
    "create_initial_state",
    "create_initial_controls",
    # Physics
    "rk4_step",
    "compute_energy",
    "compute_max_energy",
    "compute_energy_fraction",
    "compute_period",
    "compute_max_speed",
    # Loop driver
    "step",
    "advance",
    "reset_trail",
    "reset_simulation",
    "restart",
    "SimulationSession",
    "FrameLoop",
    "ThreadTickScheduler",
]
