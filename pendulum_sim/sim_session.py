from __future__ import annotations

import logging
import math
import threading
from dataclasses import dataclass, field, replace
from typing import NamedTuple, Optional, Tuple

from pendulum_sim.config import DEFAULT_CONFIG, Range, SimulationConfig
from pendulum_sim.errors import InvalidParameterError, SimulationError
from pendulum_sim.physics import (
    check_finite,
    compute_energy,
    compute_energy_fraction,
    compute_max_energy,
    compute_max_speed,
    compute_period,
    project_to_screen,
    rk4_integrate_substeps,
    rk4_step,
)
from pendulum_sim.state import (
    PendulumState,
    SimulationControls,
    create_initial_controls,
    create_initial_state,
)
from pendulum_sim.trail import append_point, clear_trail

logger = logging.getLogger(__name__)


class StepResult(NamedTuple):
    state: PendulumState
    error: Optional[SimulationError]


def step_with_status(
    state: PendulumState,
    controls: SimulationControls,
    delta_time: float,
    config: SimulationConfig = DEFAULT_CONFIG,
) -> StepResult:
    """Advance one tick and report why it was rejected, if it was.

    A paused tick returns the input state untouched; no zero-length integration
    is performed. A rejected tick also returns the input state.
    """
    if not controls.is_running:
        return StepResult(state, None)

    if not math.isfinite(delta_time) or delta_time < 0:
        err = InvalidParameterError(f"delta_time must be finite and non-negative, got {delta_time!r}")
        logger.warning("Tick skipped: %s", err)
        return StepResult(state, err)

    try:
        new_angle, new_velocity = rk4_step(
            state.angle,
            state.angular_velocity,
            state.length,
            delta_time,
            controls.gravity,
            controls.damping_coefficient,
        )
        check_finite(new_angle, new_velocity)
    except SimulationError as err:
        logger.warning("Tick skipped, state frozen: %s", err)
        return StepResult(state, err)

    trail = state.trail
    if controls.show_trail:
        point = project_to_screen(new_angle, state.length, config)
        trail = append_point(trail, point, config.trail_capacity)

    return StepResult(replace(state, angle=new_angle, angular_velocity=new_velocity, trail=trail), None)


def step(
    state: PendulumState,
    controls: SimulationControls,
    delta_time: float,
    config: SimulationConfig = DEFAULT_CONFIG,
) -> PendulumState:
    """Loop driver entry point: return the state after one tick of delta_time seconds."""
    return step_with_status(state, controls, delta_time, config).state


def advance(
    state: PendulumState,
    controls: SimulationControls,
    duration: float,
    max_dt: float = DEFAULT_CONFIG.max_frame_dt,
) -> PendulumState:
    """Integrate a longer interval in RK4 sub-steps without touching the trail.

    Ignores ``is_running``; used to look up where the bob will be after ``duration``.
    """
    angle, velocity = rk4_integrate_substeps(
        state.angle,
        state.angular_velocity,
        state.length,
        duration,
        max_dt,
        controls.gravity,
        controls.damping_coefficient,
    )
    check_finite(angle, velocity)
    return replace(state, angle=angle, angular_velocity=velocity)


def reset_trail(state: PendulumState) -> PendulumState:
    return replace(state, trail=clear_trail())


def reset_simulation() -> Tuple[PendulumState, SimulationControls]:
    """Initial state and controls; running is re-enabled."""
    return create_initial_state(), create_initial_controls()


def restart(controls: SimulationControls) -> Tuple[PendulumState, SimulationControls]:
    """Initial state, keeping the user's gravity/damping/trail choices but running again."""
    return create_initial_state(), replace(controls, is_running=True)


def _clamp(name: str, value: float, bounds: Range) -> float:
    value = float(value)
    if not math.isfinite(value):
        raise InvalidParameterError(f"{name} must be finite, got {value!r}")
    low, high = bounds
    return min(high, max(low, value))


@dataclass
class SimulationSession:
    """Holds the current snapshot pair and is the only writer of it.

    Readers call :meth:`snapshot` and get a consistent (state, controls) pair;
    every transition swaps in new frozen values under a short lock.
    """

    config: SimulationConfig = DEFAULT_CONFIG
    state: PendulumState = field(default_factory=create_initial_state)
    controls: SimulationControls = field(default_factory=create_initial_controls)
    sim_time: float = 0.0

    energy_ref: Optional[float] = None
    energy_drift: float = 0.0
    _energy_accum: float = 0.0

    last_error: Optional[str] = None
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def snapshot(self) -> Tuple[PendulumState, SimulationControls]:
        with self._lock:
            return self.state, self.controls

    def tick(self, delta_time: float) -> PendulumState:
        """Advance by delta_time seconds (already capped by the caller)."""
        with self._lock:
            if not self.controls.is_running:
                return self.state
            previous = self.state
            result = step_with_status(previous, self.controls, delta_time, self.config)
            if result.error is not None:
                self.last_error = str(result.error)
                return self.state
            self.last_error = None
            self.state = result.state
            self.sim_time += delta_time
            self._monitor_energy(previous, delta_time)
            return self.state

    def _monitor_energy(self, previous: PendulumState, delta_time: float) -> None:
        # drift only means something for the undamped system
        if self.controls.damping != 0.0:
            self.energy_ref = None
            self.energy_drift = 0.0
            self._energy_accum = 0.0
            return
        if self.energy_ref is None:
            self.energy_ref = compute_energy(previous, self.controls.gravity)
        self._energy_accum += delta_time
        if self._energy_accum >= self.config.energy_check_interval:
            self._energy_accum = 0.0
            e = compute_energy(self.state, self.controls.gravity)
            self.energy_drift = abs(e - self.energy_ref) / max(1e-9, abs(self.energy_ref))
            logger.debug("Energy drift %.6f at t=%.3f", self.energy_drift, self.sim_time)

    def _forget_energy_reference(self) -> None:
        self.energy_ref = None
        self.energy_drift = 0.0
        self._energy_accum = 0.0

    # --- actions ---------------------------------------------------------

    def reset(self, full: bool = True) -> None:
        """Restore the initial state; ``full`` also restores every control."""
        with self._lock:
            if full:
                self.state, self.controls = reset_simulation()
            else:
                self.state, self.controls = restart(self.controls)
            self.sim_time = 0.0
            self.last_error = None
            self._forget_energy_reference()
        logger.debug("Simulation reset (full=%s)", full)

    def set_running(self, running: bool) -> None:
        with self._lock:
            self.controls = replace(self.controls, is_running=bool(running))
        logger.debug("Running set to %s", running)

    def toggle_running(self) -> bool:
        with self._lock:
            self.controls = replace(self.controls, is_running=not self.controls.is_running)
            return self.controls.is_running

    def toggle_trail(self) -> bool:
        with self._lock:
            self.controls = replace(self.controls, show_trail=not self.controls.show_trail)
            return self.controls.show_trail

    def clear_trail(self) -> None:
        with self._lock:
            self.state = reset_trail(self.state)

    def set_gravity(self, gravity: float) -> None:
        value = _clamp("gravity", gravity, self.config.gravity_range)
        with self._lock:
            self.controls = replace(self.controls, gravity=value)
            self._forget_energy_reference()
        logger.debug("Gravity set to %.2f", value)

    def set_damping(self, damping: float) -> None:
        value = _clamp("damping", damping, self.config.damping_range)
        with self._lock:
            self.controls = replace(self.controls, damping=value)
            self._forget_energy_reference()
        logger.debug("Damping set to %.1f%%", value)

    def set_length(self, length: float) -> None:
        value = _clamp("length", length, self.config.length_range)
        with self._lock:
            self.state = replace(self.state, length=value)
            self._forget_energy_reference()
        logger.debug("Length set to %.2f", value)

    def set_mass(self, mass: float) -> None:
        value = _clamp("mass", mass, self.config.mass_range)
        with self._lock:
            self.state = replace(self.state, mass=value)
            self._forget_energy_reference()
        logger.debug("Mass set to %.2f", value)

    # --- derived quantities for the presentation layer -----------------

    def energy(self) -> float:
        state, controls = self.snapshot()
        return compute_energy(state, controls.gravity)

    def max_energy(self) -> float:
        state, controls = self.snapshot()
        return compute_max_energy(state, controls.gravity)

    def energy_fraction(self) -> float:
        state, controls = self.snapshot()
        return compute_energy_fraction(state, controls.gravity)

    def period(self) -> float:
        state, controls = self.snapshot()
        return compute_period(state, controls.gravity)

    def max_speed(self) -> float:
        state, controls = self.snapshot()
        return compute_max_speed(state, controls.gravity)
