# domain/network.py
import logging
from collections.abc import Iterator

import networkx as nx

from rail_sim.domain.entities.geometry import Octant, TileIndex
from rail_sim.domain.entities.track import TrackData, TrackEdge, TrackID, TrackPos, TrackSegment

log = logging.getLogger(__name__)

Exit = tuple[TrackEdge, TrackData]


class Network:
    """
    Directed pathing graph over oriented track endpoints.

    Nodes are ``TrackPos``. Each segment contributes two edges:
    ``start -> end.inverse()`` labelled POS and ``end -> start.inverse()`` labelled NEG.
    A train arriving at node ``n`` continues along the out-edges of ``n.inverse()``,
    so it can only leave in the direction the arriving curve was built for.
    """

    def __init__(self):
        self._graph = nx.DiGraph()
        self.tracks: dict[TrackID, TrackData] = {}
        self._ids: dict[TrackSegment, TrackID] = {}
        self._next_id: TrackID = 0

    def __len__(self) -> int:
        return len(self.tracks)

    def __contains__(self, track: TrackID) -> bool:
        return track in self.tracks

    def __iter__(self) -> Iterator[tuple[TrackID, TrackData]]:
        return iter(self.tracks.items())

    # ------------------------- mutation -------------------------

    def add_track(self, segment: TrackSegment) -> TrackID:
        existing = self._ids.get(segment)
        if existing is not None:
            # same physical segment already built; the graph is keyed by node pair anyway
            log.debug("duplicate segment %s -> existing track %d", segment, existing)
            return existing

        track = self._next_id
        self._next_id += 1
        self._graph.add_edge(segment.start, segment.end.inverse(), edge=TrackEdge.pos(track))
        self._graph.add_edge(segment.end, segment.start.inverse(), edge=TrackEdge.neg(track))
        self.tracks[track] = TrackData.from_segment(segment)
        self._ids[segment] = track
        log.debug("added track %d %s", track, segment)
        return track

    def remove_track(self, track: TrackID) -> None:
        data = self.tracks.pop(track, None)
        if data is None:
            return
        seg = data.segment
        del self._ids[seg]
        for u, v in ((seg.start, seg.end.inverse()), (seg.end, seg.start.inverse())):
            if self._graph.has_edge(u, v):
                self._graph.remove_edge(u, v)
            for n in (u, v):
                if n in self._graph and self._graph.degree(n) == 0:
                    self._graph.remove_node(n)
        log.debug("removed track %d", track)

    # ------------------------- queries --------------------------

    def get(self, track: TrackID) -> TrackData | None:
        return self.tracks.get(track)

    def get_data(self, edge: TrackEdge) -> TrackData | None:
        return self.tracks.get(edge.track)

    def get_connections(self, tile: TileIndex) -> list[bool]:
        """For each octant, whether an oriented node exists at ``tile``."""
        return [TrackPos(tile, Octant(i)) in self._graph for i in range(8)]

    def get_exits(self, node: TrackPos) -> list[Exit]:
        """Legal next segments for a train arriving at ``node``; empty means dead end."""
        departing = node.inverse()
        if departing not in self._graph:
            return []
        out: list[Exit] = []
        for _, _, edge in self._graph.out_edges(departing, data="edge"):
            data = self.tracks.get(edge.track)
            if data is not None:
                out.append((edge, data))
        return out

    def edge_between(self, u: TrackPos, v: TrackPos) -> TrackEdge | None:
        if not self._graph.has_edge(u, v):
            return None
        return self._graph.edges[u, v]["edge"]

    def node_tiles(self) -> set[TileIndex]:
        tiles: set[TileIndex] = set()
        for data in self.tracks.values():
            tiles.add(data.start_tile)
            tiles.add(data.end_tile)
        return tiles

    @property
    def edge_count(self) -> int:
        return self._graph.number_of_edges()

    @property
    def node_count(self) -> int:
        return self._graph.number_of_nodes()
