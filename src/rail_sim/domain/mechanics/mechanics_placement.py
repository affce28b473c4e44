"""Turn a start node and a target tile into buildable track waypoints.

All geometry here is in tile units. A placement call yields at most three
waypoints (two segments). Longer builds come from calling it again from the last
confirmed waypoint, see ``lay_towards``.
"""

import logging
import math
from collections.abc import Iterator
from dataclasses import dataclass

from rail_sim.domain.entities.geometry import ZERO, Octant, TileIndex, Vec2, add_tile, tile_offset
from rail_sim.domain.entities.track import TrackPos, TrackSegment

log = logging.getLogger(__name__)

STRAIGHT_TOLERANCE = 0.01
MIN_RADIUS, MAX_RADIUS = 2.5, 20.0  # tiles
_EPS = 1e-9


def in_direction(start: TileIndex, facing: Octant, end: TileIndex) -> bool:
    dir_vec = tile_offset(start, end).normalize_or_zero()
    return dir_vec.abs_diff_eq(facing.unit(), STRAIGHT_TOLERANCE)


def _sign(x: float) -> int:
    return 1 if math.copysign(1.0, x) > 0 else -1


@dataclass(frozen=True)
class TrackParams:
    radius: float = 6.0  # tiles

    def turn_offset(self, facing: Octant, target_angle: float) -> Vec2:
        """
        Tile offset at the end of one 45 degree turn of ``radius``.

        ``target_angle`` is the signed angle from the target vector to the facing.
        Positive values turn clockwise (to the right).
        """
        d = -_sign(target_angle)
        unit = facing.unit()
        center = unit.perp() * (self.radius * d)
        offset = facing.rotate(d).unit() * self.radius
        return (offset + center).rounded()

    def place_tracks(
        self,
        start_tile: TileIndex,
        start_facing: Octant,
        target_tile: TileIndex,
        allow_bends: bool = False,
    ) -> list[TrackPos]:
        start_facing = Octant.of(start_facing)
        waypoints = [TrackPos(start_tile, start_facing)]

        def push(offset: Vec2, facing: Octant) -> None:
            tile = add_tile(start_tile, offset)
            if tile != waypoints[-1].tile:
                waypoints.append(TrackPos(tile, facing))

        tile_vec = tile_offset(start_tile, target_tile)
        if tile_vec.is_zero():
            return waypoints

        # straight
        if in_direction(start_tile, start_facing, target_tile):
            push(tile_vec, start_facing)
            return waypoints

        start_unit = start_facing.unit()
        tile_angle = tile_vec.angle_between(start_unit)
        turn_vec = self.turn_offset(start_facing, tile_angle)
        abs_turn_angle = abs(start_unit.angle_between(turn_vec))

        # bend: one S-shaped segment absorbing the lateral offset
        if allow_bends:
            perp = start_unit.perp()
            projected_turn = turn_vec.project_onto_normalized(perp).length()
            if projected_turn > _EPS:
                ratio = tile_vec.project_onto_normalized(perp).length() / projected_turn
                bend = (turn_vec * ratio).rounded()
                straight_vec = (tile_vec - bend).rounded()
                can_bend = straight_vec == ZERO or straight_vec.dot(start_unit) > 0
                # sharper than two chained turns is left to the turn case
                if can_bend and bend.length_squared() <= (turn_vec * 2.0).length_squared():
                    push(straight_vec, start_facing)
                    push(straight_vec + bend, start_facing)
                    return waypoints
            else:
                log.debug("turn has no lateral component at facing %s; skipping bend", start_facing)

        # straight until a single turn lands on the target diagonal
        projected_tile = tile_vec.project_onto_normalized(start_unit)
        projected_dist = projected_tile.distance(tile_vec)
        turn_straight = (
            turn_vec.length() * math.sin(math.pi / 4 - abs_turn_angle) / math.sin(0.75 * math.pi)
        )
        straight_length = projected_tile.length() - projected_dist - turn_straight
        straight_vec = (start_unit * straight_length).rounded()
        target_facing = start_facing.rotate(_sign(tile_angle))

        if straight_vec == ZERO or straight_length < 0 or projected_tile.dot(start_unit) < 0:
            push(turn_vec, target_facing)
        else:
            push(straight_vec, start_facing)
            push(straight_vec + turn_vec, target_facing)
        return waypoints

    def place_segments(
        self,
        start_tile: TileIndex,
        start_facing: Octant,
        target_tile: TileIndex,
        allow_bends: bool = False,
    ) -> list[TrackSegment]:
        waypoints = self.place_tracks(start_tile, start_facing, target_tile, allow_bends)
        return [TrackSegment.from_directed(a, b) for a, b in zip(waypoints, waypoints[1:])]


def lay_towards(
    params: TrackParams,
    start: TrackPos,
    target_tile: TileIndex,
    *,
    allow_bends: bool = False,
    max_steps: int = 32,
) -> Iterator[TrackSegment]:
    """
    Repeatedly place from the last confirmed waypoint, yielding one segment per step,
    the way an interactive builder confirms the first ghost segment each click.
    Stops on reaching the target, when a step makes no progress, or after ``max_steps``.
    """
    cur = start
    seen = {cur}
    for _ in range(max_steps):
        if cur.tile == tuple(target_tile):
            return
        waypoints = params.place_tracks(cur.tile, cur.facing, target_tile, allow_bends)
        if len(waypoints) < 2:
            return
        nxt = waypoints[1]
        if nxt in seen:
            log.warning("placement towards %s is circling at %s; stopping", target_tile, nxt)
            return
        yield TrackSegment.from_directed(cur, nxt)
        seen.add(nxt)
        cur = nxt
