# domain/entities/train.py
from dataclasses import dataclass
from typing import Literal

from rail_sim.domain.entities.geometry import Vec2
from rail_sim.domain.entities.track import TrackDirection, TrackEdge

Steer = Literal["left", "right"]


@dataclass
class DriveControls:
    """Latest driver input for a manually driven train."""

    throttle: float = 0.0  # -1 brake/reverse .. +1 accelerate
    steer: Steer | None = None


@dataclass
class Train:
    id: int
    edge: TrackEdge
    sample: float = 0.0  # curve parameter along edge, 0 = entered, 1 = arrived
    speed: float = 0.0  # world units / second, >= 0 while advancing
    driving: TrackDirection | None = None  # None => autonomous
    pos: Vec2 | None = None
    parked: bool = False  # stopped at a dead end

    @property
    def direction(self) -> TrackDirection:
        return self.edge.direction

    @property
    def manual(self) -> bool:
        return self.driving is not None

    def flip(self) -> None:
        """Reverse in place: same physical point, opposite traversal, speed sign negated."""
        self.sample = 1.0 - self.sample
        self.edge = self.edge.reversed()
        self.speed = -self.speed
        self.parked = False

    def move_to(self, edge: TrackEdge, sample: float) -> None:
        self.edge = edge
        self.sample = min(1.0, max(0.0, sample))
        self.parked = False
