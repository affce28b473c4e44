# rail_sim/app/extract.py
"""Read-only snapshots for an external renderer.

Nothing here holds rendering handles. A renderer polls ``refresh_if_changed`` each
frame and redraws the network only when the refresh signal was raised.
"""

from dataclasses import dataclass

from rail_sim.app.protocols import RenderTarget
from rail_sim.domain.entities.geometry import TileIndex, Vec2
from rail_sim.domain.entities.track import TrackID
from rail_sim.domain.state import RailState


@dataclass(frozen=True)
class TrackSnapshot:
    track: TrackID
    points: tuple[Vec2, Vec2, Vec2, Vec2]  # bezier control points, world units
    length: float


@dataclass(frozen=True)
class TrainSnapshot:
    train: int
    pos: Vec2 | None
    manual: bool
    parked: bool


def extract_network(state: RailState) -> tuple[dict[TrackID, TrackSnapshot], set[TileIndex]]:
    with state.lock.read():
        tracks = {
            track: TrackSnapshot(track, data.segment.control_points(), data.length)
            for track, data in state.network
        }
        nodes = state.network.node_tiles()
    return tracks, nodes


def extract_trains(state: RailState) -> list[TrainSnapshot]:
    return [
        TrainSnapshot(train.id, train.pos, train.manual, train.parked)
        for train in sorted(state.trains.values(), key=lambda t: t.id)
    ]


def refresh_if_changed(state: RailState, target: RenderTarget) -> bool:
    if not state.refresh.consume():
        return False
    tracks, nodes = extract_network(state)
    target.redraw(tracks.values(), nodes)
    return True
