"""
Steering Controller

Per-frame decision loop that turns a lane angle and stopping-zone distances
into actuator commands.

Each call to `process_lane` runs, in order:
    1. Heartbeat       - "log:<name> connected" at most once per heartbeat interval
    2. Stopping zone   - one-shot delayed brake once the zone entrance recedes
    3. Fail-safe       - one-shot emergency stop after too long without a lane
    4. Rate limit      - steering runs at most once per command interval
    5-7. Steering      - proportional rudder, convergence override, asymmetric gain

All state lives in an explicit ControllerState owned by the controller. The
controller is single-writer: frames must be serialized by the caller.
"""

import math
from dataclasses import dataclass, asdict
from typing import Optional

from lanepilot.constants import ControllerConstants, ScheduleKeys
from lanepilot.core.config import ControllerConfig, TimingConfig
from lanepilot.core.interfaces import Clock
from lanepilot.integration.messages import ActuatorCommand, LaneSummary
from lanepilot.decision.scheduler import CommandScheduler


@dataclass
class ControllerState:
    """
    Mutable controller state.

    Created once per controller. The two latches only ever go from False to
    True; clearing them requires a new controller.
    """
    last_valid_angle_ms: float
    last_command_ms: float
    last_heartbeat_ms: float
    previous_angle: Optional[float] = None
    min_stopping_zone_distance: float = math.inf
    last_rudder_sent: float = 0.0
    stopping_zone_detected: bool = False
    emergency_stop_activated: bool = False

    @classmethod
    def initial(cls, now_ms: float) -> "ControllerState":
        return cls(
            last_valid_angle_ms=now_ms,
            last_command_ms=now_ms,
            last_heartbeat_ms=now_ms,
        )


@dataclass
class ControlDecision:
    """What a single frame produced."""
    rudder: Optional[float] = None      # None when rate limited
    centered: bool = False              # convergence override forced 0
    heartbeat: bool = False
    brake_scheduled: bool = False
    emergency_stop: bool = False


class SteeringController:
    """
    Steering and stopping-zone controller.

    Usage:
        scheduler = ThreadedCommandScheduler(sink)
        controller = SteeringController(scheduler, config=cfg.controller, timing=cfg.timing)

        # once per frame
        controller.process_lane(angle, stopping_zone_start, stopping_zone_end)
    """

    def __init__(
        self,
        scheduler: CommandScheduler,
        config: ControllerConfig | None = None,
        timing: TimingConfig | None = None,
        clock: Clock | None = None,
        state: ControllerState | None = None,
        verbose: bool = False,
    ):
        """
        Initialize steering controller.

        Args:
            scheduler: Dispatches commands off the frame thread
            config: Gains and thresholds (defaults if None)
            timing: Intervals in ms (defaults if None)
            clock: Time source; defaults to the scheduler's clock
            state: Pre-built state, e.g. to resume or to test a given situation
            verbose: Print per-frame steering decisions
        """
        self.scheduler = scheduler
        self.config = config or ControllerConfig()
        self.timing = timing or TimingConfig()
        self.clock = clock or scheduler.clock
        self.state = state or ControllerState.initial(self.clock.now_ms())
        self.verbose = verbose

        self.frame_count = 0

    # =========================================================================
    # Per-frame entry points
    # =========================================================================

    def process_summary(self, summary: LaneSummary) -> ControlDecision:
        """Process a decoded lane summary."""
        return self.process_lane(
            summary.angle,
            summary.stopping_zone_start,
            summary.stopping_zone_end,
        )

    def process_lane(
        self,
        angle: Optional[float],
        stopping_zone_start: float = ControllerConstants.NOT_DETECTED,
        stopping_zone_end: float = ControllerConstants.NOT_DETECTED,
    ) -> ControlDecision:
        """
        Process one frame.

        Args:
            angle: Lane angle in degrees, None when no lane was found
            stopping_zone_start: Distance to the stopping zone entrance (-1 = not detected)
            stopping_zone_end: Distance to the stopping zone exit (-1 = not detected)

        Returns:
            ControlDecision describing the commands this frame scheduled
        """
        if angle is not None and not (angle > 0 or angle < 0):
            # exactly zero (or NaN) carries no direction
            angle = None

        now = self.clock.now_ms()
        decision = ControlDecision()
        self.frame_count += 1

        decision.heartbeat = self._heartbeat(now)
        decision.brake_scheduled = self._track_stopping_zone(stopping_zone_start)
        decision.emergency_stop = self._verify_angle_found(angle, now)

        if now - self.state.last_command_ms >= self.timing.command_interval_ms:
            decision.rudder, decision.centered = self._steer(angle, now)

        return decision

    # =========================================================================
    # Steps
    # =========================================================================

    def _heartbeat(self, now: float) -> bool:
        if now - self.state.last_heartbeat_ms < self.timing.heartbeat_interval_ms:
            return False

        self.scheduler.schedule(
            ActuatorCommand.log(f"{self.config.name} connected"),
            key=ScheduleKeys.HEARTBEAT,
        )
        self.state.last_heartbeat_ms = now
        return True

    def _track_stopping_zone(self, distance: float) -> bool:
        """Brake once the zone entrance came near and is now receding."""
        if not distance > 0:
            return False

        state = self.state
        if distance < state.min_stopping_zone_distance:
            state.min_stopping_zone_distance = distance
            if self.verbose:
                print(f"[Controller] New minimal distance to stopping zone: {distance:.1f}")

        if state.min_stopping_zone_distance >= self.config.near_field_threshold:
            return False
        if distance - state.min_stopping_zone_distance <= self.config.recession_threshold:
            return False
        if state.stopping_zone_detected:
            return False

        print(f"[Controller] --- stop --- stopping zone passed "
              f"(min={state.min_stopping_zone_distance:.1f}, now={distance:.1f}), "
              f"braking in {self.timing.brake_delay_ms:.0f}ms")
        self.scheduler.schedule(
            ActuatorCommand.brake(),
            delay_ms=self.timing.brake_delay_ms,
            key=ScheduleKeys.STOPPING_ZONE_BRAKE,
        )
        state.stopping_zone_detected = True
        return True

    def _verify_angle_found(self, angle: Optional[float], now: float) -> bool:
        """Emergency stop once no lane has been seen for too long."""
        if angle is not None:
            self.state.last_valid_angle_ms = now
            return False

        if self.state.emergency_stop_activated:
            return False
        if now - self.state.last_valid_angle_ms <= self.timing.no_signal_timeout_ms:
            return False

        print(f"[Controller] ✗ No angle found for {self.timing.no_signal_timeout_ms:.0f}ms, emergency stop")
        self.scheduler.schedule(ActuatorCommand.stop(), key=ScheduleKeys.EMERGENCY_STOP)
        self.state.emergency_stop_activated = True
        return True

    def _steer(self, angle: Optional[float], now: float) -> tuple:
        """Compute and schedule the rudder command. Returns (rudder, centered)."""
        current = angle if angle is not None else 0.0
        previous = self.state.previous_angle
        cfg = self.config

        rudder = ControllerConstants.RUDDER_SCALE * (abs(current) / cfg.max_angle_deg) * cfg.base_gain

        centered = False
        if self._is_converging(previous, current):
            rudder = 0.0
            centered = True
        elif rudder > 0:
            if current > 0:
                rudder = -rudder * cfg.left_gain
            else:
                rudder = rudder * cfg.right_gain

        if self.verbose:
            label = "center" if centered else f"{rudder:+.2f}"
            print(f"[Controller] prev={previous} angle={angle} rudder={label}")

        self.scheduler.schedule(ActuatorCommand.set_wheel(rudder))
        self.state.last_command_ms = now
        self.state.last_rudder_sent = rudder
        self.state.previous_angle = angle
        return rudder, centered

    @staticmethod
    def _is_converging(previous: Optional[float], current: float) -> bool:
        """Same steering direction as last time, but the angle got smaller."""
        if previous is None or previous == 0:
            return False
        flipped = (previous < 0 < current) or (previous > 0 > current)
        return not flipped and abs(current) < abs(previous)

    # =========================================================================
    # Runtime tuning and introspection
    # =========================================================================

    def update_parameter(self, param_name: str, value: float) -> bool:
        """
        Update a controller parameter in real-time.

        Args:
            param_name: Name of parameter to update
            value: New value

        Returns:
            True if parameter was updated successfully, False otherwise
        """
        # Map of valid parameters and their value constraints
        valid_params = {
            'base_gain': (self.config, 0.0, 2.0),
            'left_gain': (self.config, 0.0, 3.0),
            'right_gain': (self.config, 0.0, 3.0),
            'max_angle_deg': (self.config, 1.0, 180.0),
            'near_field_threshold': (self.config, 0.0, 10000.0),
            'recession_threshold': (self.config, 0.0, 10000.0),
            'no_signal_timeout_ms': (self.timing, 0.0, 60000.0),
            'command_interval_ms': (self.timing, 0.0, 10000.0),
            'heartbeat_interval_ms': (self.timing, 0.0, 60000.0),
            'brake_delay_ms': (self.timing, 0.0, 60000.0),
        }

        if param_name not in valid_params:
            print(f"⚠ Unknown parameter: {param_name}")
            return False

        target, min_val, max_val = valid_params[param_name]
        if not (min_val <= value <= max_val):
            print(f"⚠ Value {value} out of range [{min_val}, {max_val}] for {param_name}")
            return False

        setattr(target, param_name, float(value))
        print(f"✓ Updated {param_name} = {value}")
        return True

    @property
    def is_halted(self) -> bool:
        """True once either latch has fired."""
        return self.state.emergency_stop_activated or self.state.stopping_zone_detected

    def status(self) -> dict:
        """Snapshot of the controller state for display."""
        status = asdict(self.state)
        status['frame_count'] = self.frame_count
        return status
