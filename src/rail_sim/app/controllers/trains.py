# rail_sim/app/controllers/trains.py
import logging

from rail_sim.app.events import (
    DriveCommand,
    Tick,
    TrainPlacementRequested,
    TrainReassignRequested,
    TrainRemovalRequested,
    TrainStopped,
)
from rail_sim.app.protocols import BranchPolicy
from rail_sim.config.models import TrainModel
from rail_sim.domain.entities.track import TrackEdge
from rail_sim.domain.entities.train import Train
from rail_sim.domain.mechanics.mechanics_core import Mechanics
from rail_sim.domain.state import RailState
from rail_sim.io.business_events import TrainPlacedBiz, TrainRemovedBiz, TrainStoppedBiz
from rail_sim.io.recorder import Recorder
from rail_sim.policy.branching import SteeringBranchPolicy
from rail_sim.sim.buffer import RequestQueue

log = logging.getLogger(__name__)

TrainRequest = TrainPlacementRequested | TrainRemovalRequested | TrainReassignRequested


class TrainHandler:
    def __init__(
        self,
        state: RailState,
        mechanics: Mechanics,
        autonomous: BranchPolicy,
        params: TrainModel | None = None,
        recorder: Recorder | None = None,
        run_id: str = "local",
    ):
        self.state = state
        self.mechanics = mechanics
        self.autonomous = autonomous
        self.params = params or TrainModel()
        self.recorder = recorder
        self.run_id = run_id
        self.requests: RequestQueue[TrainRequest] = RequestQueue()

    # ------------ request intake --------------

    def on_train_placement(self, ev: TrainPlacementRequested):
        self.requests.send(ev)
        return []

    def on_train_removal(self, ev: TrainRemovalRequested):
        self.requests.send(ev)
        return []

    def on_train_reassign(self, ev: TrainReassignRequested):
        self.requests.send(ev)
        return []

    def on_drive_command(self, ev: DriveCommand):
        controls = self.state.controls.get(ev.train_id)
        if controls is None:
            log.debug("drive command for non-manual train %d ignored", ev.train_id)
            return []
        controls.throttle = min(1.0, max(-1.0, ev.throttle))
        controls.steer = ev.steer
        return []

    # ------------ per-tick update --------------

    def on_tick(self, ev: Tick):
        out: list[TrainStopped] = []
        with self.state.lock.read():
            self._apply_requests(ev)
            for train in list(self.state.trains.values()):
                was_parked = train.parked
                if train.manual:
                    self._drive_manual(train, ev.dt)
                else:
                    self._drive_autonomous(train, ev.dt)
                if train.parked and not was_parked:
                    out.append(self._stopped(ev, train))
        return out

    def _apply_requests(self, tick: Tick) -> None:
        network = self.state.network
        for req in self.requests.drain():
            if isinstance(req, TrainPlacementRequested):
                if req.track_id not in network:
                    log.warning("train placement on unknown track %d ignored", req.track_id)
                    continue
                train = self.state.add_train(req.track_id, req.sample, req.manual)
                data = network.get(req.track_id)
                train.pos = data.point_at(train.direction, train.sample)
                self._biz(
                    TrainPlacedBiz,
                    tick,
                    train_id=train.id,
                    track_id=req.track_id,
                    sample=train.sample,
                    manual=req.manual,
                )
            elif isinstance(req, TrainRemovalRequested):
                if self.state.remove_train(req.train_id) is not None:
                    self._biz(TrainRemovedBiz, tick, train_id=req.train_id)
            else:
                train = self.state.trains.get(req.train_id)
                if train is None or req.track_id not in network:
                    log.warning(
                        "reassign of train %d to track %d ignored", req.train_id, req.track_id
                    )
                    continue
                train.move_to(TrackEdge.pos(req.track_id), req.sample)
                train.speed = 0.0

    def _drive_manual(self, train: Train, dt: float) -> None:
        controls = self.state.controls[train.id]
        p = self.params
        speed = train.speed + dt * p.acceleration * controls.throttle * train.driving.signum()
        train.speed = min(p.max_speed, max(-p.max_speed, speed))
        if train.speed < 0.0:
            train.flip()
            train.driving = train.driving.inverse()
        self._advance(train, dt, SteeringBranchPolicy(controls.steer))

    def _drive_autonomous(self, train: Train, dt: float) -> None:
        p = self.params
        train.speed = min(train.speed + dt * p.acceleration, p.max_speed)
        self._advance(train, dt, self.autonomous)

    def _advance(self, train: Train, dt: float, choose: BranchPolicy) -> None:
        if self.mechanics.advance(train, self.state.network, dt, choose) is None:
            # track removed under the train; it waits for a reassign
            train.speed = 0.0

    # ------------ analytics --------------

    def _stopped(self, tick: Tick, train: Train) -> TrainStopped:
        data = self.state.network.get_data(train.edge)
        tile = data.get_pos(train.direction).tile
        self._biz(TrainStoppedBiz, tick, train_id=train.id, track_id=train.edge.track, tile=tile)
        return TrainStopped(t=tick.t, train_id=train.id, track_id=train.edge.track, tile=tile)

    def _biz(self, cls, tick: Tick, **fields):
        if self.recorder:
            name = cls.__name__.removesuffix("Biz")
            biz = cls(run_id=self.run_id, t=tick.t, frame=tick.frame, name=name, **fields)
            self.recorder.emit(biz)
