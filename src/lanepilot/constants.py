"""
lanepilot Constants

Defaults for the steering controller and its transport.
Following clean code principles: NO MAGIC NUMBERS!
"""


class ControllerConstants:
    """Constants for the steering/stopping-zone controller."""

    # Steering gains
    DEFAULT_BASE_GAIN = 0.45        # Proportional gain on |angle| / MAX_ANGLE
    DEFAULT_LEFT_GAIN = 1.0         # Applied to positive angles (steer left)
    DEFAULT_RIGHT_GAIN = 1.3        # Applied to negative angles (steering linkage asymmetry)
    DEFAULT_MAX_ANGLE_DEG = 60.0    # Angle that maps to 100 * base gain
    RUDDER_SCALE = 100.0            # Percentage scale

    # Stopping zone thresholds (distance units from the classifier)
    DEFAULT_NEAR_FIELD_THRESHOLD = 100.0
    DEFAULT_RECESSION_THRESHOLD = 30.0

    # Sentinel used upstream for "not detected"
    NOT_DETECTED = -1.0

    DEFAULT_NAME = "LaneDetectionController"


class TimingConstants:
    """Controller timing in milliseconds."""

    DEFAULT_NO_SIGNAL_TIMEOUT_MS = 1000
    DEFAULT_COMMAND_INTERVAL_MS = 100
    DEFAULT_HEARTBEAT_INTERVAL_MS = 1000
    DEFAULT_BRAKE_DELAY_MS = 1000


class CommandTags:
    """Actuator command tags and payloads."""

    SET_WHEEL = "setwheel"
    SPEED = "speed"
    LOG = "log"

    BRAKE = "brake"
    STOP = "stop"


class ScheduleKeys:
    """Keys identifying the event that scheduled a command."""

    STOPPING_ZONE_BRAKE = "stopping_zone_brake"
    EMERGENCY_STOP = "emergency_stop"
    HEARTBEAT = "heartbeat"


class CommunicationConstants:
    """Constants for inter-process communication."""

    # ZMQ message topics
    TOPIC_LANE = b'lane'
    TOPIC_CONTROL = b'control'
    TOPIC_DECISION_PARAMETERS = 'decision'

    # ZMQ default URLs
    DEFAULT_LANE_URL = "tcp://localhost:5563"
    DEFAULT_CONTROL_BIND_URL = "tcp://*:5564"
    DEFAULT_PARAMETER_BROKER_URL = "tcp://localhost:5560"

    # Socket tuning
    DEFAULT_RECV_TIMEOUT_MS = 100
    DEFAULT_SEND_HWM = 100


class LauncherConstants:
    """Constants for the decision server process."""

    DEFAULT_STATS_INTERVAL = 3.0  # seconds
    DEFAULT_SHUTDOWN_FLUSH = 0.2  # seconds to let the last commands leave


# Convenience exports
__all__ = [
    'ControllerConstants',
    'TimingConstants',
    'CommandTags',
    'ScheduleKeys',
    'CommunicationConstants',
    'LauncherConstants',
]
