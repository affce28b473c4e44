from dataclasses import dataclass

import numpy as np

from rail_sim.domain.entities.geometry import Vec2
from rail_sim.domain.entities.track import CubicBezier, TrackID
from rail_sim.domain.network import Network

ITERATIONS = 4
PREFILTER_MARGIN = 200.0  # world units beyond cutoff for the chord pre-filter

_STEPS = np.arange(-5, 6, dtype=float)  # 11 samples centred on the current best


@dataclass(frozen=True)
class NearestTrack:
    track: TrackID
    sample: float
    point: Vec2
    distance: float


def project_onto_line(v: Vec2, w: Vec2, p: Vec2) -> Vec2:
    """Closest point to p on segment vw (v itself if the segment is degenerate)."""
    len_sq = v.distance(w) ** 2
    if len_sq == 0.0:
        return v
    t = min(1.0, max(0.0, (p - v).dot(w - v) / len_sq))
    return v + (w - v) * t


def nearest_on_curve(curve: CubicBezier, point: Vec2, iterations: int = ITERATIONS) -> float:
    """
    Curve parameter closest to ``point`` by coarse-to-fine grid search.

    Starts at t=0.5. Each round samples 11 parameters around the current best at a
    step of 10**-(round+1) and recentres on the closest one. Candidates are
    clamped to [0, 1].
    """
    base = 0.5
    target = np.array([point.x, point.y])
    for i in range(iterations):
        ts = np.clip(base + _STEPS / 10.0 ** (i + 1), 0.0, 1.0)
        dists = np.linalg.norm(curve.sample_many(ts) - target, axis=1)
        base = float(ts[int(np.argmin(dists))])
    return min(1.0, max(0.0, base))


def find_nearest_track(
    network: Network,
    point: Vec2,
    cutoff: float,
    *,
    margin: float = PREFILTER_MARGIN,
    iterations: int = ITERATIONS,
) -> NearestTrack | None:
    best: NearestTrack | None = None
    for track, data in network.tracks.items():
        a, b = data.curve.baseline()
        if point.distance(project_onto_line(a, b, point)) >= cutoff + margin:
            continue
        t = nearest_on_curve(data.curve, point, iterations)
        nearest = data.curve.sample(t)
        dist = point.distance(nearest)
        if dist > cutoff:
            continue
        if best is None or dist < best.distance:
            best = NearestTrack(track=track, sample=t, point=nearest, distance=dist)
    return best
