# rail_sim/app/build.py
import logging
from collections.abc import Mapping
from dataclasses import dataclass

from rail_sim.app.controllers.network import NetworkHandler
from rail_sim.app.controllers.trains import TrainHandler
from rail_sim.app.events import TrackPlacementRequested, TrainPlacementRequested
from rail_sim.app.tools import TrackPlacementTool, TrainPlacementTool
from rail_sim.app.wiring import wire
from rail_sim.config.models import LayoutPathModel, ScenarioModel
from rail_sim.domain.entities.geometry import Octant
from rail_sim.domain.entities.track import TrackPos, TrackSegment
from rail_sim.domain.mechanics.mechanics_core import Mechanics
from rail_sim.domain.mechanics.mechanics_factory import build_mechanics
from rail_sim.domain.state import RailState
from rail_sim.io.kernel_logging import KernelLogging  # JSON logs
from rail_sim.io.recorder import JsonlSink, Recorder, Sink
from rail_sim.runtime.policy_factory import make_branch_policy
from rail_sim.sim.clock import FrameClock
from rail_sim.sim.hooks import NoopHooks
from rail_sim.sim.kernel import Kernel
from rail_sim.sim.rng import RNGRegistry

log = logging.getLogger(__name__)


@dataclass
class App:
    kernel: Kernel
    clock: FrameClock
    rng: RNGRegistry
    state: RailState
    mechanics: Mechanics
    network: NetworkHandler
    trains: TrainHandler
    track_tool: TrackPlacementTool
    train_tool: TrainPlacementTool
    model: ScenarioModel

    def run(self, duration: float | None = None) -> int:
        until = self.model.sim.duration if duration is None else self.kernel.now + duration
        return self.kernel.run(until=until)


def layout_segments(path: LayoutPathModel, mechanics: Mechanics) -> list[TrackSegment]:
    """Lay one path the way a builder would: confirm towards each target in turn."""
    cur = TrackPos(path.start, Octant.of(path.facing))
    segments: list[TrackSegment] = []
    for target in path.targets:
        for seg in mechanics.lay(cur, target, path.allow_bends):
            segments.append(seg)
            # the far end of the confirmed segment, facing onwards
            cur = seg.end.inverse() if seg.start.tile == cur.tile else seg.start.inverse()
    return segments


def build(
    cfg: ScenarioModel | Mapping,
    *,
    worker: int = 0,
    use_logging: bool = True,
    sinks: list[Sink] | None = None,
) -> App:
    # 0) Validate config
    model = cfg if isinstance(cfg, ScenarioModel) else ScenarioModel.model_validate(cfg)

    # 1) Clock & RNG
    clock = FrameClock(dt=model.sim.dt)
    rng_registry = RNGRegistry(model.sim.seed, scenario=model.name, worker=worker)

    # 2) Kernel (with hooks)

    # Recorder for analytics
    recorder = Recorder(*(sinks or [JsonlSink()]))  # AsyncSink(JsonlSink()) for non-blocking

    hooks = (
        KernelLogging(
            run_id=model.run_id,
            level=model.log.level,
            debug=model.log.debug,
            sample_every=model.log.sample_every,
        )
        if use_logging
        else NoopHooks()
    )
    kernel = Kernel(hooks=hooks)

    # 3) State & policies
    state = RailState()
    mechanics = build_mechanics(model.mechanics)
    autonomous = make_branch_policy(model.autonomous, rng_registry=rng_registry)

    # 4) Handlers (inject deps explicitly)
    network = NetworkHandler(state=state, recorder=recorder, run_id=model.run_id)
    trains = TrainHandler(
        state=state,
        mechanics=mechanics,
        autonomous=autonomous,
        params=model.trains,
        recorder=recorder,
        run_id=model.run_id,
    )

    # 5) Wiring
    wire(kernel, network=network, trains=trains, clock=clock)

    # 6) Seed layout and trains; requests at t0 sort ahead of the first Tick
    t0 = clock.start
    layout: dict[TrackSegment, None] = {}
    for path in model.layout:
        segments = layout_segments(path, mechanics)
        log.debug("layout from %s: %d segments", path.start, len(segments))
        layout.update(dict.fromkeys(segments))
    # ids are handed out per distinct segment, so index i becomes TrackID i
    for seg in layout:
        kernel.schedule(TrackPlacementRequested.of(t0, seg))
    for seed in model.initial_trains:
        if seed.track >= len(layout):
            raise ValueError(
                f"initial train on layout track {seed.track}, layout has {len(layout)} tracks"
            )
        req = TrainPlacementRequested(
            t=t0, track_id=seed.track, sample=seed.sample, manual=seed.manual
        )
        kernel.schedule(req)
    kernel.schedule(clock.first_tick())

    return App(
        kernel=kernel,
        clock=clock,
        rng=rng_registry,
        state=state,
        mechanics=mechanics,
        network=network,
        trains=trains,
        track_tool=TrackPlacementTool(state, mechanics),
        train_tool=TrainPlacementTool(state, mechanics),
        model=model,
    )
