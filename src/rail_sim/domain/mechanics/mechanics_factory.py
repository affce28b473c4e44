# rail_sim/domain/mechanics/mechanics_factory.py

from rail_sim.config.models import MechanicsModel
from rail_sim.domain.mechanics.mechanics_core import CurveQuery, Mechanics
from rail_sim.domain.mechanics.mechanics_placement import TrackParams


def build_mechanics(cfg: MechanicsModel) -> Mechanics:
    params = TrackParams(radius=cfg.track.radius)
    query = CurveQuery(
        cutoff=cfg.query.cutoff,
        margin=cfg.query.prefilter_margin,
        iterations=cfg.query.iterations,
    )
    return Mechanics(params=params, query=query, allow_bends=cfg.track.allow_bends)
