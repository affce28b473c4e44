# tests/sim/test_kernel.py
from dataclasses import dataclass

import pytest

from rail_sim.sim.clock import FrameClock
from rail_sim.sim.event import BaseEvent, Tick
from rail_sim.sim.hooks import NoopHooks
from rail_sim.sim.kernel import Kernel


# ---- demo domain events ----
@dataclass(order=True)
class Place(BaseEvent):
    n: int = 0


@dataclass(order=True)
class Placed(BaseEvent):
    n: int = 0


# --- test hook that records dispatch order & fan-out ---
class TraceHooks(NoopHooks):
    def __init__(self):
        self.trace = []
        self.out = []
        self.errors = []

    def dispatch_start(self, ev, *, seq, qsize, handlers):
        self.trace.append((ev.t, type(ev).__name__))

    def dispatch_end(self, ev, *, out_events, qsize, ms):
        self.out.append(out_events)

    def error(self, ev, *, reason, **kw):
        self.errors.append(reason)


def test_requests_at_same_time_run_before_the_tick_scheduled_after_them():
    hooks = TraceHooks()
    k = Kernel(hooks=hooks)
    clock = FrameClock(dt=0.5)
    k.on(Place, lambda ev: [Placed(t=ev.t, n=ev.n)])
    k.on(Tick, clock.on_tick)

    k.schedule(Place(t=0.0, n=1))
    k.schedule(clock.first_tick())
    processed = k.run(until=1.0)

    names = [name for _, name in hooks.trace]
    assert names == ["Place", "Tick", "Placed", "Tick", "Tick"]
    assert processed == 5
    assert k.now == 1.0
    assert k.pending == 1  # the frame after `until` stays queued


def test_handlers_run_in_subscription_order_and_fan_out_is_counted():
    hooks = TraceHooks()
    k = Kernel(hooks=hooks)
    seen: list[str] = []
    k.on(Place, lambda ev: (seen.append("network"), [Placed(t=ev.t)])[1])
    k.on(Place, lambda ev: (seen.append("trains"), None)[1])
    k.schedule(Place(t=2.0))
    k.run()
    assert seen == ["network", "trains"]
    assert hooks.out == [1, 0]


def test_max_events_gate():
    k = Kernel()
    clock = FrameClock()
    k.on(Tick, clock.on_tick)
    k.schedule(clock.first_tick())
    assert k.run(max_events=3) == 3
    assert k.now == pytest.approx(2 * clock.dt)


def test_scheduling_in_the_past_raises_and_is_reported():
    hooks = TraceHooks()
    k = Kernel(hooks=hooks)
    k.on(Place, lambda ev: [Place(t=ev.t - 1.0)])
    k.schedule(Place(t=1.0))
    with pytest.raises(RuntimeError):
        k.run()
    assert hooks.errors == ["scheduled_past"]
