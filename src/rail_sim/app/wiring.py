# rail_sim/app/wiring.py
from rail_sim.app.controllers.network import NetworkHandler
from rail_sim.app.controllers.trains import TrainHandler
from rail_sim.app.events import (
    DriveCommand,
    Tick,
    TrackPlacementRequested,
    TrackRemovalRequested,
    TrainPlacementRequested,
    TrainReassignRequested,
    TrainRemovalRequested,
)
from rail_sim.sim.clock import FrameClock
from rail_sim.sim.kernel import Kernel


def wire(
    kernel: Kernel,
    *,
    network: NetworkHandler,
    trains: TrainHandler,
    clock: FrameClock,
) -> None:
    k = kernel

    # requests are buffered; nothing mutates until the next Tick
    k.on(TrackPlacementRequested, network.on_track_placement)
    k.on(TrackRemovalRequested, network.on_track_removal)

    k.on(TrainPlacementRequested, trains.on_train_placement)
    k.on(TrainRemovalRequested, trains.on_train_removal)
    k.on(TrainReassignRequested, trains.on_train_reassign)
    k.on(DriveCommand, trains.on_drive_command)  # applies immediately, read next Tick

    # per frame: mutate the graph, then move trains over the result
    k.on(Tick, network.on_tick)
    k.on(Tick, trains.on_tick)
    k.on(Tick, clock.on_tick)  # last: schedules the next frame
