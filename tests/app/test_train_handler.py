import pytest

from rail_sim.app.controllers.trains import TrainHandler
from rail_sim.app.events import (
    DriveCommand,
    Tick,
    TrainPlacementRequested,
    TrainReassignRequested,
    TrainRemovalRequested,
    TrainStopped,
)
from rail_sim.config.models import MechanicsModel, TrainModel
from rail_sim.domain.entities.geometry import Octant
from rail_sim.domain.entities.track import TrackDirection, TrackEdge, TrackPos, TrackSegment
from rail_sim.domain.mechanics.mechanics_factory import build_mechanics
from rail_sim.domain.state import RailState
from rail_sim.io.recorder import MemorySink, Recorder
from rail_sim.policy.branching import RandomBranchPolicy
from rail_sim.sim.rng import RNGRegistry

N = Octant.N
DT = 0.1


def make(params=None):
    state = RailState()
    track = state.network.add_track(
        TrackSegment.from_directed(TrackPos((0, 0), N), TrackPos((0, 5), N))
    )  # 160 world units
    sink = MemorySink()
    handler = TrainHandler(
        state,
        build_mechanics(MechanicsModel()),
        RandomBranchPolicy(RNGRegistry(0)),
        params=params or TrainModel(),
        recorder=Recorder(sink),
    )
    return state, handler, track, sink


def tick(frame=0):
    return Tick(t=frame * DT, frame=frame, dt=DT)


def test_placement_is_validated_and_applied_on_tick():
    state, handler, track, sink = make()
    handler.on_train_placement(TrainPlacementRequested(t=0.0, track_id=track, sample=0.5))
    handler.on_train_placement(TrainPlacementRequested(t=0.0, track_id=99, sample=0.5))
    assert state.trains == {}

    handler.on_tick(tick())

    (train,) = state.trains.values()
    assert train.edge == TrackEdge.pos(track)
    assert not train.manual
    assert train.pos is not None
    assert len(sink.named("TrainPlaced")) == 1


def test_autonomous_trains_accelerate_to_the_speed_cap():
    state, handler, track, _ = make(TrainModel(acceleration=200.0, max_speed=30.0))
    handler.on_train_placement(TrainPlacementRequested(t=0.0, track_id=track, sample=0.0))
    handler.on_tick(tick(0))
    (train,) = state.trains.values()
    assert train.speed == pytest.approx(20.0)
    handler.on_tick(tick(1))
    assert train.speed == pytest.approx(30.0)


def test_manual_train_reverses_through_zero_speed():
    state, handler, track, _ = make()
    handler.on_train_placement(
        TrainPlacementRequested(t=0.0, track_id=track, sample=0.5, manual=True)
    )
    handler.on_tick(tick(0))
    (train,) = state.trains.values()
    assert train.speed == 0.0  # no throttle yet

    handler.on_drive_command(DriveCommand(t=0.1, train_id=train.id, throttle=-1.0))
    handler.on_tick(tick(1))

    assert train.driving is TrackDirection.NEG
    assert train.direction is TrackDirection.NEG
    assert train.speed == pytest.approx(20.0)
    assert train.sample == pytest.approx(0.5 + 20.0 * DT / 160.0)

    handler.on_tick(tick(2))  # holding reverse keeps backing up faster
    assert train.speed == pytest.approx(40.0)


def test_throttle_is_clamped_and_autonomous_trains_ignore_commands():
    state, handler, track, _ = make()
    handler.on_train_placement(TrainPlacementRequested(t=0.0, track_id=track, sample=0.0))
    handler.on_train_placement(
        TrainPlacementRequested(t=0.0, track_id=track, sample=0.0, manual=True)
    )
    handler.on_tick(tick())
    auto, manual = state.trains[0], state.trains[1]

    handler.on_drive_command(DriveCommand(t=0.1, train_id=manual.id, throttle=5.0, steer="left"))
    handler.on_drive_command(DriveCommand(t=0.1, train_id=auto.id, throttle=1.0))

    assert state.controls[manual.id].throttle == 1.0
    assert state.controls[manual.id].steer == "left"
    assert auto.id not in state.controls


def test_dead_end_emits_one_stop():
    state, handler, track, sink = make()
    handler.on_train_placement(TrainPlacementRequested(t=0.0, track_id=track, sample=0.99))
    out = []
    for frame in range(5):
        out += handler.on_tick(tick(frame))

    stops = [ev for ev in out if isinstance(ev, TrainStopped)]
    assert len(stops) == 1
    assert stops[0].tile == (0, 5)
    assert len(sink.named("TrainStopped")) == 1


def test_train_on_removed_track_waits_for_reassign():
    state, handler, track, _ = make()
    handler.on_train_placement(TrainPlacementRequested(t=0.0, track_id=track, sample=0.2))
    handler.on_tick(tick(0))
    (train,) = state.trains.values()

    state.network.remove_track(track)
    handler.on_tick(tick(1))
    assert train.speed == 0.0
    assert train.sample == pytest.approx(0.2 + 20.0 * DT / 160.0)

    other = state.network.add_track(
        TrackSegment.from_directed(TrackPos((5, 0), N), TrackPos((5, 5), N))
    )
    handler.on_train_reassign(TrainReassignRequested(t=0.2, train_id=train.id, track_id=other))
    handler.on_tick(tick(2))
    assert train.edge == TrackEdge.pos(other)
    assert train.speed > 0.0


def test_removal_drops_train_and_controls():
    state, handler, track, sink = make()
    handler.on_train_placement(
        TrainPlacementRequested(t=0.0, track_id=track, sample=0.0, manual=True)
    )
    handler.on_tick(tick(0))
    handler.on_train_removal(TrainRemovalRequested(t=0.1, train_id=0))
    handler.on_train_removal(TrainRemovalRequested(t=0.1, train_id=7))
    handler.on_tick(tick(1))
    assert state.trains == {}
    assert state.controls == {}
    assert len(sink.named("TrainRemoved")) == 1
