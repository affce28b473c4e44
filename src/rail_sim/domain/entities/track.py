from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum

import numpy as np

from rail_sim.domain.entities.geometry import Octant, TileIndex, Vec2, tile_to_center

TrackID = int

LENGTH_TOLERANCE = 0.1  # world units


@dataclass(frozen=True, order=True)
class TrackPos:
    """Oriented endpoint of a track: a tile plus the facing used to leave it along the track."""

    tile: TileIndex
    facing: Octant

    def __post_init__(self):
        object.__setattr__(self, "tile", (int(self.tile[0]), int(self.tile[1])))
        object.__setattr__(self, "facing", Octant.of(self.facing))

    def inverse(self) -> TrackPos:
        return TrackPos(self.tile, self.facing.inverse())


@dataclass(frozen=True)
class TrackSegment:
    """
    Undirected curved connection between two oriented endpoints.

    Stored canonically with ``start.tile <= end.tile`` so both traversal directions
    of one physical segment compare and hash equal. Each endpoint's facing points
    into the segment.
    """

    start: TrackPos
    end: TrackPos

    def __post_init__(self):
        if self.start.tile == self.end.tile:
            raise ValueError(f"track segment cannot start and end on tile {self.start.tile}")
        if self.start.tile > self.end.tile:
            s, e = self.start, self.end
            object.__setattr__(self, "start", e)
            object.__setattr__(self, "end", s)

    @classmethod
    def from_directed(cls, start: TrackPos, end: TrackPos) -> TrackSegment:
        """Segment travelled from ``start`` arriving at ``end`` (end facing = travel direction)."""
        return cls(start, end.inverse())

    def control_points(self) -> tuple[Vec2, Vec2, Vec2, Vec2]:
        start_pos = tile_to_center(self.start.tile)
        end_pos = tile_to_center(self.end.tile)
        ctrl_mag = start_pos.distance(end_pos) / 3.0
        return (
            start_pos,
            start_pos + self.start.facing.unit() * ctrl_mag,
            end_pos + self.end.facing.unit() * ctrl_mag,
            end_pos,
        )

    def curve(self) -> CubicBezier:
        return CubicBezier(*self.control_points())


@dataclass(frozen=True)
class CubicBezier:
    start: Vec2
    ctrl1: Vec2
    ctrl2: Vec2
    end: Vec2

    def sample(self, t: float) -> Vec2:
        u = 1.0 - t
        a, b, c, d = u * u * u, 3.0 * u * u * t, 3.0 * u * t * t, t * t * t
        return Vec2(
            a * self.start.x + b * self.ctrl1.x + c * self.ctrl2.x + d * self.end.x,
            a * self.start.y + b * self.ctrl1.y + c * self.ctrl2.y + d * self.end.y,
        )

    def sample_many(self, ts: np.ndarray) -> np.ndarray:
        """Vectorized sample; returns an (n, 2) array of points."""
        t = np.asarray(ts, dtype=float)[:, None]
        u = 1.0 - t
        pts = np.array([tuple(self.start), tuple(self.ctrl1), tuple(self.ctrl2), tuple(self.end)])
        weights = np.hstack([u**3, 3.0 * u * u * t, 3.0 * u * t * t, t**3])
        return weights @ pts

    def baseline(self) -> tuple[Vec2, Vec2]:
        return self.start, self.end

    def split(self, t: float = 0.5) -> tuple[CubicBezier, CubicBezier]:
        # de Casteljau
        p01 = self.start + (self.ctrl1 - self.start) * t
        p12 = self.ctrl1 + (self.ctrl2 - self.ctrl1) * t
        p23 = self.ctrl2 + (self.end - self.ctrl2) * t
        p012 = p01 + (p12 - p01) * t
        p123 = p12 + (p23 - p12) * t
        mid = p012 + (p123 - p012) * t
        return CubicBezier(self.start, p01, p012, mid), CubicBezier(mid, p123, p23, self.end)

    def approximate_length(self, tolerance: float = LENGTH_TOLERANCE, max_depth: int = 16) -> float:
        """Arc length by subdivision until control polygon and chord agree within tolerance."""
        total = 0.0
        stack = [(self, 0)]
        while stack:
            c, depth = stack.pop()
            chord = c.start.distance(c.end)
            poly = c.start.distance(c.ctrl1) + c.ctrl1.distance(c.ctrl2) + c.ctrl2.distance(c.end)
            if poly - chord <= tolerance or depth >= max_depth:
                total += (chord + poly) / 2.0
            else:
                a, b = c.split()
                stack.append((b, depth + 1))
                stack.append((a, depth + 1))
        return total


class TrackDirection(IntEnum):
    """Which canonical endpoint a traversal exits from: POS exits at ``end``, NEG at ``start``."""

    NEG = -1
    POS = 1

    @classmethod
    def from_sign(cls, x: float) -> TrackDirection:
        return cls.POS if x > 0 else cls.NEG

    def is_pos(self) -> bool:
        return self is TrackDirection.POS

    def inverse(self) -> TrackDirection:
        return TrackDirection.NEG if self.is_pos() else TrackDirection.POS

    def signum(self) -> float:
        return float(self.value)


@dataclass(frozen=True, order=True)
class TrackEdge:
    track: TrackID
    direction: TrackDirection

    @classmethod
    def pos(cls, track: TrackID) -> TrackEdge:
        return cls(track, TrackDirection.POS)

    @classmethod
    def neg(cls, track: TrackID) -> TrackEdge:
        return cls(track, TrackDirection.NEG)

    def reversed(self) -> TrackEdge:
        return TrackEdge(self.track, self.direction.inverse())


@dataclass(frozen=True)
class TrackData:
    segment: TrackSegment
    curve: CubicBezier = field(repr=False)
    length: float

    @classmethod
    def from_segment(cls, segment: TrackSegment) -> TrackData:
        curve = segment.curve()
        return cls(segment=segment, curve=curve, length=curve.approximate_length())

    @property
    def start_tile(self) -> TileIndex:
        return self.segment.start.tile

    @property
    def end_tile(self) -> TileIndex:
        return self.segment.end.tile

    def get_pos(self, direction: TrackDirection) -> TrackPos:
        """Endpoint reached when traversing in ``direction``."""
        return self.segment.end if direction.is_pos() else self.segment.start

    def point_at(self, direction: TrackDirection, sample: float) -> Vec2:
        """World point at ``sample`` of a traversal; the curve itself always runs start→end."""
        return self.curve.sample(sample if direction.is_pos() else 1.0 - sample)
