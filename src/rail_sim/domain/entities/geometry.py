"""Tile grid, world positions and 8-way orientations.

World space is continuous (x right, y up). The grid is made of square tiles of
``TILE_SIZE`` world units. Tile ``(0, 0)`` spans ``[0, TILE_SIZE)`` on both axes.
Orientation is quantized to octants: 0 is north (+y) and values increase
clockwise in 45 degree steps.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import IntEnum

TILE_SIZE = 32.0

TileIndex = tuple[int, int]


def round_half_away(x: float) -> float:
    """Round to nearest, ties away from zero (Python's round() ties to even)."""
    return math.copysign(math.floor(abs(x) + 0.5), x)


@dataclass(frozen=True)
class Vec2:
    x: float
    y: float

    def __add__(self, o: Vec2) -> Vec2:
        return Vec2(self.x + o.x, self.y + o.y)

    def __sub__(self, o: Vec2) -> Vec2:
        return Vec2(self.x - o.x, self.y - o.y)

    def __mul__(self, k: float) -> Vec2:
        return Vec2(self.x * k, self.y * k)

    __rmul__ = __mul__

    def __truediv__(self, k: float) -> Vec2:
        return Vec2(self.x / k, self.y / k)

    def __neg__(self) -> Vec2:
        return Vec2(-self.x, -self.y)

    def __iter__(self):
        yield self.x
        yield self.y

    def dot(self, o: Vec2) -> float:
        return self.x * o.x + self.y * o.y

    def perp_dot(self, o: Vec2) -> float:
        return self.x * o.y - self.y * o.x

    def length_squared(self) -> float:
        return self.x * self.x + self.y * self.y

    def length(self) -> float:
        return math.hypot(self.x, self.y)

    def distance(self, o: Vec2) -> float:
        return math.hypot(o.x - self.x, o.y - self.y)

    def is_zero(self) -> bool:
        return self.x == 0.0 and self.y == 0.0

    def normalize_or_zero(self) -> Vec2:
        n = self.length()
        if n == 0.0 or not math.isfinite(n):
            return ZERO
        return Vec2(self.x / n, self.y / n)

    def perp(self) -> Vec2:
        """Rotated 90 degrees counter-clockwise."""
        return Vec2(-self.y, self.x)

    def angle_between(self, o: Vec2) -> float:
        """Signed angle rotating self onto o; positive is counter-clockwise."""
        return math.atan2(self.perp_dot(o), self.dot(o))

    def project_onto_normalized(self, unit: Vec2) -> Vec2:
        return unit * self.dot(unit)

    def rounded(self) -> Vec2:
        return Vec2(round_half_away(self.x), round_half_away(self.y))

    def as_tile(self) -> TileIndex:
        r = self.rounded()
        return (int(r.x), int(r.y))

    def abs_diff_eq(self, o: Vec2, eps: float) -> bool:
        return abs(self.x - o.x) <= eps and abs(self.y - o.y) <= eps


ZERO = Vec2(0.0, 0.0)


class Octant(IntEnum):
    N = 0
    NE = 1
    E = 2
    SE = 3
    S = 4
    SW = 5
    W = 6
    NW = 7

    @classmethod
    def of(cls, value: int) -> Octant:
        return cls(int(value) % 8)

    def rotate(self, steps: int) -> Octant:
        return Octant.of(int(self) + int(steps))

    def __add__(self, other: int) -> Octant:
        return self.rotate(int(other))

    def left(self) -> Octant:
        return self.rotate(-1)

    def right(self) -> Octant:
        return self.rotate(1)

    def inverse(self) -> Octant:
        return self.rotate(4)

    def perp(self) -> Octant:
        return self.rotate(2)

    def angle(self) -> float:
        return octant_to_angle(self)

    def unit(self) -> Vec2:
        return angle_to_unit(self.angle())


def octant_to_angle(octant: int) -> float:
    return int(octant) * math.pi / 4.0


def angle_to_unit(angle: float) -> Vec2:
    # angle is measured clockwise from north
    return Vec2(math.sin(angle), math.cos(angle))


def octant_to_unit(octant: int) -> Vec2:
    return angle_to_unit(octant_to_angle(octant))


# ---- world <-> tile conversions -------------------------------------------


def pos_to_tile(pos: Vec2) -> TileIndex:
    return (
        int(round_half_away(pos.x / TILE_SIZE - 0.5)),
        int(round_half_away(pos.y / TILE_SIZE - 0.5)),
    )


def tile_to_pos(tile: TileIndex) -> Vec2:
    """Lower-left corner of the tile."""
    return Vec2(tile[0] * TILE_SIZE, tile[1] * TILE_SIZE)


def tile_to_center(tile: TileIndex) -> Vec2:
    return tile_to_pos(tile) + Vec2(TILE_SIZE / 2.0, TILE_SIZE / 2.0)


def tile_offset(a: TileIndex, b: TileIndex) -> Vec2:
    """Vector from tile a to tile b, in tile units."""
    return Vec2(float(b[0] - a[0]), float(b[1] - a[1]))


def add_tile(tile: TileIndex, offset: Vec2) -> TileIndex:
    dx, dy = offset.as_tile()
    return (tile[0] + dx, tile[1] + dy)
