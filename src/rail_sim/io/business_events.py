# rail_sim/io/business_events.py

from dataclasses import dataclass


# Base type for analytics events (not scheduled in the kernel!)
@dataclass
class BizEvent:
    run_id: str
    t: float  # simulation time
    frame: int  # tick index (for total ordering)
    name: str  # stable event name


@dataclass
class TrackAddedBiz(BizEvent):
    track_id: int
    start: tuple[int, int]
    end: tuple[int, int]
    length: float


@dataclass
class TrackRemovedBiz(BizEvent):
    track_id: int


@dataclass
class TrackRejectedBiz(BizEvent):
    reason: str


@dataclass
class TrainPlacedBiz(BizEvent):
    train_id: int
    track_id: int
    sample: float
    manual: bool


@dataclass
class TrainRemovedBiz(BizEvent):
    train_id: int


@dataclass
class TrainStoppedBiz(BizEvent):
    train_id: int
    track_id: int
    tile: tuple[int, int]
