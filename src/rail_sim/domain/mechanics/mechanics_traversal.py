import logging
from collections.abc import Callable, Sequence

from rail_sim.domain.entities.geometry import Vec2
from rail_sim.domain.entities.track import TrackData, TrackPos
from rail_sim.domain.entities.train import Train
from rail_sim.domain.network import Exit, Network

log = logging.getLogger(__name__)

# (train, node it arrived at, legal exits) -> index into exits
BranchChooser = Callable[[Train, TrackPos, Sequence[Exit]], int]


def move_along(track: TrackData, train: Train, amount: float) -> float:
    """Advance ``train.sample`` by ``amount`` world units, clamped; returns distance covered."""
    if track.length <= 0.0:
        train.sample = 1.0
        return 0.0
    sample = min(1.0, max(0.0, train.sample + amount / track.length))
    delta = (sample - train.sample) * track.length
    train.sample = sample
    return delta


def advance(train: Train, network: Network, dt: float, choose: BranchChooser) -> Vec2 | None:
    """
    Move ``train`` forward by ``speed * dt`` world units, crossing onto new segments
    at nodes through ``choose``. A dead end parks the train at sample 1.0 with speed 0.

    Returns the new world position, or None when the train's track no longer exists.
    A negative budget moves nothing; callers reverse with ``Train.flip`` first.
    """
    data = network.get_data(train.edge)
    if data is None:
        return None

    budget = train.speed * dt
    while budget > 0.0:
        if train.sample >= 1.0:
            node = data.get_pos(train.direction)
            exits = network.get_exits(node)
            if exits:
                idx = choose(train, node, exits)
                edge, data = exits[idx]
                train.move_to(edge, 0.0)
            else:
                if not train.parked:
                    log.debug("train %d parked at dead end %s", train.id, node)
                train.speed = 0.0
                train.parked = True

        covered = move_along(data, train, budget)
        if covered == 0.0:
            break
        train.parked = False
        budget -= covered

    train.pos = data.point_at(train.direction, train.sample)
    return train.pos
