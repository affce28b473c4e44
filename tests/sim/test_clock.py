import pytest

from rail_sim.sim.clock import FPS_60, FrameClock
from rail_sim.sim.event import Tick


def test_frames_map_to_times_and_back():
    clock = FrameClock(dt=0.25, start=1.0)
    assert clock.time_of(0) == 1.0
    assert clock.time_of(4) == 2.0
    assert clock.frame_at(2.0) == 4
    assert clock.frame_at(2.1) == 4
    assert clock.frame_at(0.0) == 0  # before start clamps to the first frame


def test_on_tick_schedules_exactly_the_next_frame():
    clock = FrameClock()
    first = clock.first_tick()
    assert first == Tick(t=0.0, frame=0, dt=FPS_60)
    (nxt,) = clock.on_tick(first)
    assert nxt.frame == 1
    assert nxt.t == pytest.approx(FPS_60)


def test_non_positive_dt_is_rejected():
    with pytest.raises(ValueError):
        FrameClock(dt=0.0)
