from __future__ import annotations

from pendulum_sim.state import Trail, TrailPoint

DEFAULT_CAPACITY = 50


def append_point(trail: Trail, point: TrailPoint, capacity: int = DEFAULT_CAPACITY) -> Trail:
    """Return a new trail with point at the tail, dropping the oldest points beyond capacity."""
    if capacity <= 0:
        raise ValueError(f"capacity must be positive, got {capacity}")
    extended = trail + ((float(point[0]), float(point[1])),)
    if len(extended) > capacity:
        extended = extended[len(extended) - capacity:]
    return extended


def clear_trail() -> Trail:
    return ()
