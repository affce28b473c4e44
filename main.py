# main.py
import logging

from rail_sim.app.build import build
from rail_sim.app.events import DriveCommand
from rail_sim.app.extract import extract_network, extract_trains
from rail_sim.io.recorder import MemorySink

DEMO = {
    "name": "demo",
    "run_id": "demo-1",
    "sim": {"seed": 7, "duration": 10.0},
    "mechanics": {"track": {"radius": 6.0, "allow_bends": False}},
    "layout": [
        {"start": (0, 0), "facing": 0, "targets": [(0, 12), (12, 30), (30, 30)]},
        {"start": (0, 12), "facing": 0, "targets": [(-12, 30)]},
    ],
    "initial_trains": [
        {"track": 0, "sample": 0.0},
        {"track": 0, "sample": 0.5, "manual": True},
    ],
}


def run(cfg=DEMO):
    sink = MemorySink()
    app = build(cfg, sinks=[sink])

    # first frame applies the layout and places the trains
    app.kernel.run(until=0.0)
    for train in app.state.manual_trains():
        app.kernel.schedule(DriveCommand(t=app.kernel.now, train_id=train.id, throttle=1.0))

    app.run()

    tracks, nodes = extract_network(app.state)
    log = logging.getLogger("rail_sim.demo")
    log.info("tracks=%d nodes=%d biz_events=%d", len(tracks), len(nodes), len(sink.events))
    for snap in extract_trains(app.state):
        log.info("train %d at %s parked=%s", snap.train, snap.pos, snap.parked)
    return app


if __name__ == "__main__":
    run()
