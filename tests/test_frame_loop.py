import pytest

from pendulum_sim.frame_loop import FrameLoop, ThreadTickScheduler
from pendulum_sim.sim_session import SimulationSession


class FakeScheduler:
    """Collects callbacks instead of running them; tests fire them by hand."""

    def __init__(self):
        self.pending = []
        self.cancelled = []

    def schedule(self, callback):
        handle = object()
        self.pending.append((handle, callback))
        return handle

    def cancel(self, handle):
        self.cancelled.append(handle)
        self.pending = [(h, cb) for h, cb in self.pending if h is not handle]

    def fire(self):
        handle, callback = self.pending.pop(0)
        callback()


class FakeClock:
    def __init__(self, now=100.0):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def loop_parts():
    sim = SimulationSession()
    scheduler = FakeScheduler()
    clock = FakeClock()
    loop = FrameLoop(sim, scheduler, clock)
    return sim, scheduler, clock, loop


def test_start_schedules_one_tick(loop_parts):
    sim, scheduler, clock, loop = loop_parts
    loop.start()
    loop.start()
    assert len(scheduler.pending) == 1
    assert loop.running


def test_tick_uses_elapsed_time_and_reschedules(loop_parts):
    sim, scheduler, clock, loop = loop_parts
    loop.start()
    clock.now += 0.01
    scheduler.fire()
    assert sim.sim_time == pytest.approx(0.01)
    assert len(scheduler.pending) == 1


def test_elapsed_time_is_capped(loop_parts):
    sim, scheduler, clock, loop = loop_parts
    loop.start()
    clock.now += 5.0
    scheduler.fire()
    assert sim.sim_time == pytest.approx(sim.config.max_frame_dt)


def test_clock_going_backwards_gives_zero_dt(loop_parts):
    sim, scheduler, clock, loop = loop_parts
    loop.start()
    clock.now -= 1.0
    before = sim.snapshot()[0].angle
    scheduler.fire()
    assert sim.sim_time == 0.0
    assert sim.snapshot()[0].angle == before


def test_ticks_apply_in_order(loop_parts):
    sim, scheduler, clock, loop = loop_parts
    loop.start()
    for _ in range(5):
        clock.now += 0.01
        scheduler.fire()
    assert len(sim.snapshot()[0].trail) == 5


def test_stop_cancels_pending_tick(loop_parts):
    sim, scheduler, clock, loop = loop_parts
    loop.start()
    _, callback = scheduler.pending[0]
    loop.stop()
    assert scheduler.pending == []
    assert len(scheduler.cancelled) == 1
    assert not loop.running

    # a callback that already escaped cancellation must not tick
    clock.now += 0.01
    callback()
    assert sim.sim_time == 0.0
    assert scheduler.pending == []


def test_restart_after_stop(loop_parts):
    sim, scheduler, clock, loop = loop_parts
    loop.start()
    loop.stop()
    clock.now += 3.0
    loop.start()
    clock.now += 0.01
    scheduler.fire()
    # time spent stopped is not replayed
    assert sim.sim_time == pytest.approx(0.01)


def test_thread_scheduler_cancel():
    scheduler = ThreadTickScheduler(interval=60.0)
    fired = []
    handle = scheduler.schedule(lambda: fired.append(True))
    assert handle.daemon
    scheduler.cancel(handle)
    handle.join(timeout=1.0)
    assert fired == []


def test_default_scheduler_uses_config_interval():
    sim = SimulationSession()
    loop = FrameLoop(sim)
    assert isinstance(loop.scheduler, ThreadTickScheduler)
    assert loop.scheduler.interval == pytest.approx(sim.config.frame_interval)
