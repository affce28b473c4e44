# sim/clock.py
from __future__ import annotations

from dataclasses import dataclass

from rail_sim.sim.event import Tick

FPS_60 = 1.0 / 60.0


@dataclass(frozen=True)
class FrameClock:
    """Fixed-step frame clock; frame n starts at t = start + n * dt."""

    dt: float = FPS_60
    start: float = 0.0

    def __post_init__(self):
        if self.dt <= 0:
            raise ValueError(f"dt must be > 0, got {self.dt}")

    def time_of(self, frame: int) -> float:
        return self.start + frame * self.dt

    def frame_at(self, t: float) -> int:
        """Index of the last frame starting at or before t."""
        return max(0, int((t - self.start) // self.dt + 1e-9))

    def first_tick(self) -> Tick:
        return Tick(t=self.start, frame=0, dt=self.dt)

    def on_tick(self, ev: Tick):
        # subscribed last so every other Tick handler sees this frame first
        nxt = ev.frame + 1
        return [Tick(t=self.time_of(nxt), frame=nxt, dt=self.dt)]
