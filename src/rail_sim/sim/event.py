# sim/event.py
from dataclasses import dataclass


@dataclass(order=True)
class BaseEvent:
    t: float  # simulation seconds


@dataclass(order=True)
class Tick(BaseEvent):
    """One simulation frame. Buffered requests are applied and trains advanced here."""

    frame: int
    dt: float
