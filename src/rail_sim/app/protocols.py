from collections.abc import Iterable, Sequence
from typing import Protocol, runtime_checkable

from rail_sim.domain.entities.geometry import Octant, TileIndex, Vec2
from rail_sim.domain.entities.track import TrackPos, TrackSegment
from rail_sim.domain.entities.train import Train
from rail_sim.domain.network import Exit, Network


# ------------- Mechanics --------------------
@runtime_checkable
class PlacementPlanner(Protocol):
    """
    Responsibilities:
      • Turn (start tile, facing, target tile) into ≤3 oriented waypoints.
      • Waypoints are tile-snapped; consecutive pairs become one TrackSegment each.
    """

    def place_tracks(
        self,
        start_tile: TileIndex,
        start_facing: Octant,
        target_tile: TileIndex,
        allow_bends: bool = False,
    ) -> list[TrackPos]: ...

    def place_segments(
        self,
        start_tile: TileIndex,
        start_facing: Octant,
        target_tile: TileIndex,
        allow_bends: bool = False,
    ) -> list[TrackSegment]: ...


@runtime_checkable
class TrackQuery(Protocol):
    """Map a continuous world point onto the nearest network edge (hit-testing)."""

    def nearest(self, network: Network, point: Vec2): ...


# --------------- Policies -------------------------


@runtime_checkable
class BranchPolicy(Protocol):
    """
    Choose the next segment at a junction.
    Must return an index into ``exits`` (never called with an empty list).
    """

    def __call__(self, train: Train, node: TrackPos, exits: Sequence[Exit]) -> int: ...


@runtime_checkable
class RenderTarget(Protocol):
    """External draw/extraction step; called only after the refresh signal fires."""

    def redraw(self, tracks: Iterable, nodes: Iterable[TileIndex]) -> None: ...
