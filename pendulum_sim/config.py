from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from pendulum_sim.errors import InvalidParameterError

Range = Tuple[float, float]


@dataclass(frozen=True)
class SimulationConfig:
    """Fixed tuning values for a simulation session.

    The projection fields place the pivot in screen space and convert meters to
    pixels for trail points. Ranges mirror the limits of the control sliders.
    """

    trail_capacity: int = 50
    max_frame_dt: float = 0.017  # ~60 fps
    frame_interval: float = 1.0 / 60.0

    pivot_x: float = 300.0
    pivot_y: float = 125.0
    pixels_per_meter: float = 150.0

    length_range: Range = (0.5, 4.0)
    mass_range: Range = (0.5, 2.0)
    gravity_range: Range = (1.0, 20.0)
    damping_range: Range = (0.0, 100.0)

    energy_check_interval: float = 0.5

    def __post_init__(self) -> None:
        if self.trail_capacity <= 0:
            raise InvalidParameterError(f"trail_capacity must be positive, got {self.trail_capacity}")
        for name in ("max_frame_dt", "frame_interval", "pixels_per_meter", "energy_check_interval"):
            value = getattr(self, name)
            if not value > 0:
                raise InvalidParameterError(f"{name} must be positive, got {value}")
        for name in ("length_range", "mass_range", "gravity_range", "damping_range"):
            low, high = getattr(self, name)
            if low > high:
                raise InvalidParameterError(f"{name} is empty: ({low}, {high})")

    @property
    def pivot(self) -> Tuple[float, float]:
        return (self.pivot_x, self.pivot_y)


DEFAULT_CONFIG = SimulationConfig()
