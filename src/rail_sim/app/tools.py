# rail_sim/app/tools.py
import logging
import math
from dataclasses import dataclass, field

from rail_sim.app.events import (
    TrackPlacementRequested,
    TrackRemovalRequested,
    TrainPlacementRequested,
)
from rail_sim.domain.entities.geometry import Octant, TileIndex, Vec2, tile_to_center
from rail_sim.domain.entities.track import TrackSegment
from rail_sim.domain.mechanics.mechanics_core import Mechanics
from rail_sim.domain.mechanics.mechanics_queries import NearestTrack
from rail_sim.domain.state import RailState

log = logging.getLogger(__name__)


@dataclass
class TrackPlacementTool:
    """
    Click-driven track builder without the drawing.

    Three stages: pick a start tile, pick a facing among the offered ones, then
    confirm targets. Each confirm requests only the first ghost segment and moves
    the start to its far end, so a long build is a chain of confirms.
    """

    state: RailState
    mechanics: Mechanics
    start: TileIndex | None = None
    facing: Octant | None = None
    options: list[bool] = field(default_factory=lambda: [True] * 8)

    @property
    def stage(self) -> str:
        if self.start is None:
            return "idle"
        return "facing" if self.facing is None else "placing"

    def begin(self, tile: TileIndex, any_facing: bool = False) -> list[Octant]:
        self.start, self.facing = tuple(tile), None
        if any_facing:
            self.options = [True] * 8
        else:
            with self.state.lock.read():
                self.options = self.state.network.get_connections(self.start)
            if not any(self.options):
                self.options = [True] * 8
        return self.offered()

    def offered(self) -> list[Octant]:
        return [Octant(i) for i, ok in enumerate(self.options) if ok]

    def facing_towards(self, cursor: Vec2) -> Octant | None:
        """Offered facing closest to the direction from the start tile's centre to ``cursor``."""
        if self.start is None:
            return None
        wanted = (cursor - tile_to_center(self.start)).normalize_or_zero()
        best, to_beat = Octant.N, math.inf
        for octant in self.offered():
            diff = (wanted - octant.unit()).length_squared()
            if diff < to_beat:
                best, to_beat = octant, diff
        return best

    def pick_facing(self, cursor: Vec2) -> Octant | None:
        self.facing = self.facing_towards(cursor)
        return self.facing

    def preview(self, target: TileIndex, allow_bends: bool | None = None) -> list[TrackSegment]:
        if self.start is None or self.facing is None:
            return []
        return self.mechanics.segments(self.start, self.facing, target, allow_bends)

    def confirm(
        self, target: TileIndex, allow_bends: bool | None = None, t: float = 0.0
    ) -> TrackPlacementRequested | None:
        if self.start is None or self.facing is None:
            return None
        waypoints = self.mechanics.place(self.start, self.facing, target, allow_bends)
        if len(waypoints) < 2:
            return None
        segment = TrackSegment.from_directed(waypoints[0], waypoints[1])
        self.start, self.facing = waypoints[1].tile, waypoints[1].facing
        return TrackPlacementRequested.of(t, segment)

    def cancel(self) -> None:
        self.start, self.facing = None, None
        self.options = [True] * 8

    def erase(self, cursor: Vec2, t: float = 0.0) -> TrackRemovalRequested | None:
        with self.state.lock.read():
            hit = self.mechanics.nearest(self.state.network, cursor)
        if hit is None:
            return None
        log.debug("erase hit track %d at %.1f", hit.track, hit.distance)
        return TrackRemovalRequested(t=t, track_id=hit.track)


@dataclass
class TrainPlacementTool:
    state: RailState
    mechanics: Mechanics

    def hover(self, cursor: Vec2) -> NearestTrack | None:
        with self.state.lock.read():
            return self.mechanics.nearest(self.state.network, cursor)

    def place(
        self, cursor: Vec2, manual: bool = False, t: float = 0.0
    ) -> TrainPlacementRequested | None:
        hit = self.hover(cursor)
        if hit is None:
            return None
        return TrainPlacementRequested(t=t, track_id=hit.track, sample=hit.sample, manual=manual)
