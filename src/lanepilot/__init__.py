"""
lanepilot

Line geometry toolkit and steering / stopping-zone controller for a
camera-guided vehicle.

Architecture:
    lanepilot/
    ├── geometry/          - Point, Line, Vector (boundary segment algebra)
    ├── decision/          - Decision-making subsystem
    │   ├── controller.py  - SteeringController (per-frame control loop)
    │   ├── scheduler.py   - Deferred, keyed command dispatch
    │   ├── clock.py       - System and manual clocks
    │   └── run.py         - DecisionServer, replay, CLI
    ├── integration/       - Messages, ZMQ transport, console sink
    ├── core/              - Configuration and interfaces
    └── utils/             - Terminal display

Usage Levels:

    Level 1 - Server Process:
        lanepilot-decision --config config.yaml

    Level 2 - Component Access:
        from lanepilot.decision import SteeringController, ThreadedCommandScheduler
        from lanepilot.integration.zmq import ZmqCommandSink

        scheduler = ThreadedCommandScheduler(ZmqCommandSink())
        controller = SteeringController(scheduler)
        controller.process_lane(angle, stopping_zone_start, stopping_zone_end)

    Level 3 - Geometry:
        from lanepilot.geometry import Line, Point

        Line.average([Line(Point(0, 0), Point(2, 4)), Line(Point(1, 0), Point(3, 4))])
"""

from .geometry import Point, Point3D, Line, Vector
from .decision import SteeringController

__version__ = "0.1.0"

__all__ = ['Point', 'Point3D', 'Line', 'Vector', 'SteeringController']
