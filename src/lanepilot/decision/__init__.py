"""
Decision Module

Per-frame steering and stopping-zone decisions:
- Proportional steering with convergence override and asymmetric gain
- One-shot stopping-zone brake and no-signal emergency stop
- Deferred, keyed command dispatch
- Injectable clocks for replay and tests

Public API:
- SteeringController: Core decision logic (process_lane / process_summary)
- ControllerState, ControlDecision: Explicit state and per-frame result
- ThreadedCommandScheduler, ManualCommandScheduler: Command dispatch
- SystemClock, ManualClock: Time sources

Simple Usage:
    scheduler = ThreadedCommandScheduler(sink)
    controller = SteeringController(scheduler)
    controller.process_lane(angle=12.0, stopping_zone_start=-1, stopping_zone_end=-1)
"""

from .clock import SystemClock, ManualClock
from .scheduler import (
    CommandScheduler,
    ScheduledCommand,
    ThreadedCommandScheduler,
    ManualCommandScheduler,
)
from .controller import SteeringController, ControllerState, ControlDecision

__all__ = [
    'SteeringController',
    'ControllerState',
    'ControlDecision',
    'CommandScheduler',
    'ScheduledCommand',
    'ThreadedCommandScheduler',
    'ManualCommandScheduler',
    'SystemClock',
    'ManualClock',
]
