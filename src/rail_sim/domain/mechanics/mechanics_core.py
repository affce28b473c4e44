# rail_sim/domain/mechanics/mechanics_core.py
from collections.abc import Iterator
from dataclasses import dataclass

from rail_sim.app.protocols import PlacementPlanner, TrackQuery
from rail_sim.domain.entities.geometry import Octant, TileIndex, Vec2
from rail_sim.domain.entities.track import TrackPos, TrackSegment
from rail_sim.domain.entities.train import Train
from rail_sim.domain.mechanics.mechanics_placement import (
    MAX_RADIUS,
    MIN_RADIUS,
    TrackParams,
    lay_towards,
)
from rail_sim.domain.mechanics.mechanics_queries import (
    ITERATIONS,
    PREFILTER_MARGIN,
    NearestTrack,
    find_nearest_track,
)
from rail_sim.domain.mechanics.mechanics_traversal import BranchChooser, advance
from rail_sim.domain.network import Network


@dataclass
class CurveQuery(TrackQuery):
    cutoff: float = 100.0
    margin: float = PREFILTER_MARGIN
    iterations: int = ITERATIONS

    def nearest(self, network: Network, point: Vec2) -> NearestTrack | None:
        return find_nearest_track(
            network, point, self.cutoff, margin=self.margin, iterations=self.iterations
        )


@dataclass
class Mechanics:
    """
    Façade bundling placement parameters and hit-testing.
    ``params`` and ``allow_bends`` are live settings; replace them between calls.
    """

    params: PlacementPlanner
    query: TrackQuery
    allow_bends: bool = False

    def place(
        self,
        start_tile: TileIndex,
        facing: Octant,
        target_tile: TileIndex,
        allow_bends: bool | None = None,
    ) -> list[TrackPos]:
        bends = self.allow_bends if allow_bends is None else allow_bends
        return self.params.place_tracks(start_tile, facing, target_tile, bends)

    def segments(
        self,
        start_tile: TileIndex,
        facing: Octant,
        target_tile: TileIndex,
        allow_bends: bool | None = None,
    ) -> list[TrackSegment]:
        bends = self.allow_bends if allow_bends is None else allow_bends
        return self.params.place_segments(start_tile, facing, target_tile, bends)

    def lay(
        self, start: TrackPos, target_tile: TileIndex, allow_bends: bool | None = None
    ) -> Iterator[TrackSegment]:
        bends = self.allow_bends if allow_bends is None else allow_bends
        yield from lay_towards(self.params, start, target_tile, allow_bends=bends)

    def nearest(self, network: Network, point: Vec2) -> NearestTrack | None:
        return self.query.nearest(network, point)

    def advance(self, train: Train, network: Network, dt: float, choose: BranchChooser):
        return advance(train, network, dt, choose)

    def set_radius(self, radius: float) -> None:
        if not MIN_RADIUS <= radius <= MAX_RADIUS:
            raise ValueError(f"radius must be in [{MIN_RADIUS}, {MAX_RADIUS}] tiles, got {radius}")
        self.params = TrackParams(radius=radius)
