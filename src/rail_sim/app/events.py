# app/events.py
from dataclasses import dataclass

from rail_sim.domain.entities.geometry import TileIndex
from rail_sim.domain.entities.track import TrackPos, TrackSegment
from rail_sim.domain.entities.train import Steer
from rail_sim.sim.event import BaseEvent, Tick

__all__ = [
    "Tick",
    "TrackPlacementRequested",
    "TrackRemovalRequested",
    "NetworkChanged",
    "TrainPlacementRequested",
    "TrainRemovalRequested",
    "TrainReassignRequested",
    "DriveCommand",
    "TrainStopped",
]


# Network requests: buffered, applied once on the next Tick
@dataclass(order=True)
class TrackPlacementRequested(BaseEvent):
    """Endpoints as placed; the segment is built (and validated) when applied."""

    start: TrackPos
    end: TrackPos

    @classmethod
    def of(cls, t: float, segment: TrackSegment) -> "TrackPlacementRequested":
        return cls(t=t, start=segment.start, end=segment.end)


@dataclass(order=True)
class TrackRemovalRequested(BaseEvent):
    track_id: int


# Render refresh: at most one per tick, however many mutations happened
@dataclass(order=True)
class NetworkChanged(BaseEvent):
    frame: int
    added: int = 0
    removed: int = 0


# Trains
@dataclass(order=True)
class TrainPlacementRequested(BaseEvent):
    track_id: int
    sample: float
    manual: bool = False


@dataclass(order=True)
class TrainRemovalRequested(BaseEvent):
    train_id: int


@dataclass(order=True)
class TrainReassignRequested(BaseEvent):
    train_id: int
    track_id: int
    sample: float = 0.0


@dataclass(order=True)
class DriveCommand(BaseEvent):
    """Driver input for a manual train; holds until the next command."""

    train_id: int
    throttle: float = 0.0
    steer: Steer | None = None


# Observability
@dataclass(order=True)
class TrainStopped(BaseEvent):
    train_id: int
    track_id: int
    tile: TileIndex
