import pytest

from pendulum_sim.state import PendulumState, SimulationControls, create_initial_controls, create_initial_state


@pytest.fixture
def initial_state() -> PendulumState:
    return create_initial_state()


@pytest.fixture
def initial_controls() -> SimulationControls:
    return create_initial_controls()


@pytest.fixture
def undamped_controls() -> SimulationControls:
    return SimulationControls(is_running=True, gravity=9.81, damping=0.0, show_trail=True)
