# rail_sim/app/controllers/network.py
import logging

from rail_sim.app.events import (
    NetworkChanged,
    Tick,
    TrackPlacementRequested,
    TrackRemovalRequested,
)
from rail_sim.domain.entities.track import TrackSegment
from rail_sim.domain.state import RailState
from rail_sim.io.business_events import TrackAddedBiz, TrackRejectedBiz, TrackRemovedBiz
from rail_sim.io.recorder import Recorder
from rail_sim.sim.buffer import RequestQueue

log = logging.getLogger(__name__)

NetworkRequest = TrackPlacementRequested | TrackRemovalRequested


class NetworkHandler:
    """
    Sole writer of the network. Requests are buffered as they arrive and applied
    together on the next Tick under the write lock; one NetworkChanged follows.
    """

    def __init__(self, state: RailState, recorder: Recorder | None = None, run_id: str = "local"):
        self.state = state
        self.recorder = recorder
        self.run_id = run_id
        self.requests: RequestQueue[NetworkRequest] = RequestQueue()

    # ------------ request intake --------------

    def on_track_placement(self, ev: TrackPlacementRequested):
        self.requests.send(ev)
        return []

    def on_track_removal(self, ev: TrackRemovalRequested):
        self.requests.send(ev)
        return []

    # ------------ per-tick mutation --------------

    def on_tick(self, ev: Tick):
        pending = self.requests.drain()
        if not pending:
            return []

        added = removed = 0
        network = self.state.network
        with self.state.lock.write():
            for req in pending:
                if isinstance(req, TrackPlacementRequested):
                    try:
                        segment = TrackSegment(req.start, req.end)
                    except ValueError as exc:
                        log.warning("track placement rejected: %s", exc)
                        self._biz(TrackRejectedBiz, ev, reason=str(exc))
                        continue
                    before = len(network)
                    track = network.add_track(segment)
                    if len(network) > before:
                        added += 1
                        self._biz_added(ev, track)
                else:
                    if req.track_id not in network:
                        log.warning("removal of unknown track %d ignored", req.track_id)
                        continue
                    network.remove_track(req.track_id)
                    removed += 1
                    self._biz(TrackRemovedBiz, ev, track_id=req.track_id)

        if not (added or removed):
            return []
        self.state.refresh.set()
        return [NetworkChanged(t=ev.t, frame=ev.frame, added=added, removed=removed)]

    # ------------ analytics --------------

    def _biz(self, cls, tick: Tick, **fields):
        if self.recorder:
            name = cls.__name__.removesuffix("Biz")
            biz = cls(run_id=self.run_id, t=tick.t, frame=tick.frame, name=name, **fields)
            self.recorder.emit(biz)

    def _biz_added(self, tick: Tick, track: int):
        data = self.state.network.get(track)
        self._biz(
            TrackAddedBiz,
            tick,
            track_id=track,
            start=data.start_tile,
            end=data.end_tile,
            length=data.length,
        )
