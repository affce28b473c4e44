# rail_sim/policy/branching.py
from collections.abc import Sequence

from rail_sim.app.protocols import BranchPolicy
from rail_sim.domain.entities.geometry import tile_offset
from rail_sim.domain.entities.track import TrackPos
from rail_sim.domain.entities.train import Steer, Train
from rail_sim.domain.network import Exit
from rail_sim.sim.rng import RNGRegistry


class RandomBranchPolicy(BranchPolicy):
    """Uniform choice among exits, drawn from a per-train substream."""

    def __init__(self, rng_registry: RNGRegistry, stream: str = "branching"):
        self.rng_registry = rng_registry
        self.stream = stream

    def __call__(self, train: Train, node: TrackPos, exits: Sequence[Exit]) -> int:
        g = self.rng_registry.substream(self.stream, train.id)
        return int(g.integers(0, len(exits)))


class SteeringBranchPolicy(BranchPolicy):
    """
    Pick the exit whose far end deviates least from the travel direction.
    ``steer`` rotates the wanted direction one octant left or right. When the train is
    driven in reverse, left and right swap, so the key means the driver's left.
    """

    def __init__(self, steer: Steer | None = None):
        self.steer = steer

    def target_facing(self, train: Train, node: TrackPos):
        facing = node.facing.inverse()
        steer = self.steer
        if steer is not None and train.driving is not None and not train.driving.is_pos():
            steer = "right" if steer == "left" else "left"
        if steer == "left":
            facing = facing.left()
        elif steer == "right":
            facing = facing.right()
        return facing

    def __call__(self, train: Train, node: TrackPos, exits: Sequence[Exit]) -> int:
        target = self.target_facing(train, node).unit()

        def deviation(i: int) -> float:
            edge, data = exits[i]
            far = data.get_pos(edge.direction).tile
            return abs(tile_offset(node.tile, far).angle_between(target))

        return min(range(len(exits)), key=deviation)
