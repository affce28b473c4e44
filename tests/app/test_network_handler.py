from rail_sim.app.controllers.network import NetworkHandler
from rail_sim.app.events import (
    NetworkChanged,
    Tick,
    TrackPlacementRequested,
    TrackRemovalRequested,
)
from rail_sim.domain.entities.geometry import Octant
from rail_sim.domain.entities.track import TrackPos, TrackSegment
from rail_sim.domain.state import RailState
from rail_sim.io.recorder import MemorySink, Recorder

N = Octant.N


def seg(a, b):
    return TrackSegment.from_directed(TrackPos(a, N), TrackPos(b, N))


def tick(frame=0):
    return Tick(t=frame * 0.1, frame=frame, dt=0.1)


def make():
    state = RailState()
    sink = MemorySink()
    return state, NetworkHandler(state, recorder=Recorder(sink)), sink


def test_requests_wait_for_the_tick():
    state, handler, _ = make()
    assert handler.on_track_placement(TrackPlacementRequested.of(0.0, seg((0, 0), (0, 5)))) == []
    assert len(state.network) == 0
    assert len(handler.requests) == 1


def test_many_mutations_coalesce_into_one_refresh():
    state, handler, sink = make()
    handler.on_track_placement(TrackPlacementRequested.of(0.0, seg((0, 0), (0, 5))))
    handler.on_track_placement(TrackPlacementRequested.of(0.0, seg((0, 5), (0, 9))))
    same = TrackSegment.from_directed(TrackPos((0, 5), Octant.S), TrackPos((0, 0), Octant.S))
    handler.on_track_placement(TrackPlacementRequested.of(0.0, same))  # duplicate

    out = handler.on_tick(tick())

    assert out == [NetworkChanged(t=0.0, frame=0, added=2, removed=0)]
    assert len(state.network) == 2
    assert state.refresh.consume()
    assert not state.refresh.consume()
    assert [e.track_id for e in sink.named("TrackAdded")] == [0, 1]
    assert handler.on_tick(tick(1)) == []  # drained: nothing applied twice


def test_self_loop_request_is_rejected_without_failing_the_tick():
    state, handler, sink = make()
    handler.on_track_placement(
        TrackPlacementRequested(t=0.0, start=TrackPos((1, 1), N), end=TrackPos((1, 1), Octant.S))
    )
    handler.on_track_placement(TrackPlacementRequested.of(0.0, seg((0, 0), (0, 5))))

    out = handler.on_tick(tick())

    assert out[0].added == 1
    assert len(sink.named("TrackRejected")) == 1


def test_removal_applies_on_tick_and_unknown_ids_are_ignored():
    state, handler, sink = make()
    track = state.network.add_track(seg((0, 0), (0, 5)))
    handler.on_track_removal(TrackRemovalRequested(t=0.0, track_id=track))
    handler.on_track_removal(TrackRemovalRequested(t=0.0, track_id=99))

    out = handler.on_tick(tick())

    assert out == [NetworkChanged(t=0.0, frame=0, added=0, removed=1)]
    assert track not in state.network
    assert [e.track_id for e in sink.named("TrackRemoved")] == [track]


def test_unchanged_network_raises_no_refresh():
    state, handler, _ = make()
    handler.on_track_removal(TrackRemovalRequested(t=0.0, track_id=3))
    assert handler.on_tick(tick()) == []
    assert not state.refresh.is_set()
