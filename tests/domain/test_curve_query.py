import pytest

from rail_sim.domain.entities.geometry import Octant, Vec2
from rail_sim.domain.entities.track import TrackPos, TrackSegment
from rail_sim.domain.mechanics.mechanics_queries import (
    find_nearest_track,
    nearest_on_curve,
    project_onto_line,
)
from rail_sim.domain.network import Network

N, NE = Octant.N, Octant.NE


def turn_curve():
    return TrackSegment.from_directed(TrackPos((0, 0), N), TrackPos((2, 4), NE)).curve()


@pytest.mark.parametrize("t0", [0.0, 0.137, 0.3, 0.5, 0.81, 1.0])
def test_nearest_on_curve_recovers_the_sampled_parameter(t0):
    curve = turn_curve()
    t = nearest_on_curve(curve, curve.sample(t0))
    assert t == pytest.approx(t0, abs=1e-3)


def test_nearest_on_curve_clamps_points_beyond_the_ends():
    curve = turn_curve()
    assert nearest_on_curve(curve, curve.start - Vec2(0.0, 100.0)) == 0.0
    assert 0.0 <= nearest_on_curve(curve, Vec2(1e4, 1e4)) <= 1.0


def test_project_onto_line_handles_degenerate_segment():
    v = Vec2(1.0, 1.0)
    assert project_onto_line(v, v, Vec2(5.0, 5.0)) == v
    p = project_onto_line(Vec2(0.0, 0.0), Vec2(10.0, 0.0), Vec2(4.0, 3.0))
    assert p == Vec2(4.0, 0.0)
    assert project_onto_line(Vec2(0.0, 0.0), Vec2(10.0, 0.0), Vec2(-4.0, 3.0)) == Vec2(0.0, 0.0)


def make_network():
    net = Network()
    net.add_track(TrackSegment.from_directed(TrackPos((0, 0), N), TrackPos((0, 5), N)))
    net.add_track(TrackSegment.from_directed(TrackPos((10, 0), N), TrackPos((10, 5), N)))
    return net


def test_find_nearest_track_picks_the_closest_within_cutoff():
    net = make_network()
    hit = find_nearest_track(net, Vec2(20.0, 100.0), cutoff=100.0)
    assert hit is not None
    assert hit.track == 0
    assert hit.distance == pytest.approx(4.0, abs=0.1)
    assert hit.sample == pytest.approx((100.0 - 16.0) / 160.0, abs=1e-2)

    hit = find_nearest_track(net, Vec2(330.0, 50.0), cutoff=100.0)
    assert hit.track == 1


def test_find_nearest_track_misses_beyond_cutoff():
    net = make_network()
    assert find_nearest_track(net, Vec2(160.0, 100.0), cutoff=50.0) is None
    assert find_nearest_track(Network(), Vec2(0.0, 0.0), cutoff=100.0) is None
