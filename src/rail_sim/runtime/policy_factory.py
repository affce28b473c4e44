from rail_sim.app.protocols import BranchPolicy
from rail_sim.config.models import (
    BranchPolicyRandomModel,
    BranchPolicySteeringModel,
    BranchPolicyUnion,
)
from rail_sim.policy.branching import RandomBranchPolicy, SteeringBranchPolicy
from rail_sim.sim.rng import RNGRegistry


def make_branch_policy(cfg: BranchPolicyUnion, *, rng_registry: RNGRegistry) -> BranchPolicy:
    if isinstance(cfg, BranchPolicyRandomModel):
        return RandomBranchPolicy(rng_registry=rng_registry, stream=cfg.stream)
    elif isinstance(cfg, BranchPolicySteeringModel):
        return SteeringBranchPolicy(steer=None)
    else:
        raise TypeError(cfg)
