from rail_sim.domain.entities.geometry import Octant
from rail_sim.domain.entities.track import TrackEdge, TrackPos, TrackSegment
from rail_sim.domain.network import Network

N, NE, S = Octant.N, Octant.NE, Octant.S


def straight(a, b):
    """North-running straight from tile a to tile b."""
    return TrackSegment.from_directed(TrackPos(a, N), TrackPos(b, N))


def test_add_track_wires_both_directions():
    net = Network()
    seg = straight((0, 0), (0, 5))
    track = net.add_track(seg)

    assert track == 0
    assert net.edge_count == 2
    # leaving from seg.start runs POS and arrives facing out of seg.end
    exits = net.get_exits(seg.start.inverse())
    assert [edge for edge, _ in exits] == [TrackEdge.pos(track)]
    assert net.edge_between(seg.start, seg.end.inverse()) == TrackEdge.pos(track)
    exits = net.get_exits(seg.end.inverse())
    assert [edge for edge, _ in exits] == [TrackEdge.neg(track)]
    assert net.edge_between(seg.end, seg.start.inverse()) == TrackEdge.neg(track)


def test_remove_track_removes_both_directions_and_isolated_nodes():
    net = Network()
    seg = straight((0, 0), (0, 5))
    track = net.add_track(seg)
    net.remove_track(track)

    assert net.get(track) is None
    assert net.get_exits(seg.start.inverse()) == []
    assert net.get_exits(seg.end.inverse()) == []
    assert net.edge_count == 0
    assert net.node_count == 0
    assert net.get_connections((0, 0)) == [False] * 8


def test_removing_unknown_track_is_a_no_op():
    net = Network()
    net.add_track(straight((0, 0), (0, 5)))
    net.remove_track(42)
    assert len(net) == 1


def test_ids_are_owned_by_the_network():
    a, b = Network(), Network()
    assert a.add_track(straight((0, 0), (0, 5))) == 0
    assert a.add_track(straight((0, 5), (0, 10))) == 1
    assert b.add_track(straight((0, 0), (0, 5))) == 0


def test_duplicate_segment_returns_existing_id():
    net = Network()
    first = net.add_track(straight((0, 0), (0, 5)))
    again = net.add_track(TrackSegment.from_directed(TrackPos((0, 5), S), TrackPos((0, 0), S)))
    assert again == first
    assert len(net) == 1
    assert net.edge_count == 2
    assert net.add_track(straight((0, 5), (0, 10))) == 1  # no id consumed by the duplicate


def test_connections_report_oriented_nodes_on_a_tile():
    net = Network()
    net.add_track(straight((0, 0), (0, 5)))
    conn = net.get_connections((0, 0))
    assert conn[N] and conn[S]
    assert sum(conn) == 2
    assert net.node_tiles() == {(0, 0), (0, 5)}


def test_exits_at_a_junction_never_reverse_onto_the_arriving_track():
    net = Network()
    a = net.add_track(straight((0, 0), (0, 5)))
    b = net.add_track(straight((0, 5), (0, 10)))
    c = net.add_track(TrackSegment.from_directed(TrackPos((0, 5), N), TrackPos((2, 9), NE)))

    arrived = net.get(a).get_pos(TrackEdge.pos(a).direction)
    exits = {edge for edge, _ in net.get_exits(arrived)}
    assert exits == {TrackEdge.pos(b), TrackEdge.pos(c)}

    # coming back down b the only way on is a, travelled backwards
    back = net.get(b).get_pos(TrackEdge.neg(b).direction)
    assert [edge for edge, _ in net.get_exits(back)] == [TrackEdge.neg(a)]
