# rail_sim/domain/state.py
from dataclasses import dataclass, field

from rail_sim.domain.entities.track import TrackDirection, TrackEdge, TrackID
from rail_sim.domain.entities.train import DriveControls, Train
from rail_sim.domain.network import Network
from rail_sim.sim.sync import RefreshSignal, RWLock


@dataclass
class RailState:
    network: Network = field(default_factory=Network)
    trains: dict[int, Train] = field(default_factory=dict)
    controls: dict[int, DriveControls] = field(default_factory=dict)
    # network is single-writer: mutate under lock.write(), read under lock.read()
    lock: RWLock = field(default_factory=RWLock)
    refresh: RefreshSignal = field(default_factory=RefreshSignal)
    _next_train_id: int = 0

    def add_train(self, track: TrackID, sample: float, manual: bool) -> Train:
        tid = self._next_train_id
        self._next_train_id += 1
        train = Train(
            id=tid,
            edge=TrackEdge.pos(track),
            sample=min(1.0, max(0.0, sample)),
            driving=TrackDirection.POS if manual else None,
        )
        self.trains[tid] = train
        if manual:
            self.controls[tid] = DriveControls()
        return train

    def remove_train(self, train_id: int) -> Train | None:
        self.controls.pop(train_id, None)
        return self.trains.pop(train_id, None)

    def manual_trains(self) -> list[Train]:
        return [t for t in self.trains.values() if t.manual]

    def autonomous_trains(self) -> list[Train]:
        return [t for t in self.trains.values() if not t.manual]
