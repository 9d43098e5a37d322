"""
Message Types

Structures exchanged between the lane classifier, the decision server and
the actuator driver.

Wire formats:
    LaneSummary     JSON object
    ActuatorCommand "<tag>:<payload>" text, e.g. "setwheel:-12.5", "speed:brake"
    ParameterUpdate JSON object {"parameter": ..., "value": ...}
"""

from dataclasses import dataclass, asdict
from typing import Optional, Dict, Any
import json
import math
import time

from lanepilot.constants import CommandTags, ControllerConstants


class MessageDecodeError(ValueError):
    """Raised when an incoming message can not be decoded."""


# Key names used by the upstream lane-detection result map
_LEGACY_KEYS = {
    'distanceMiddle': 'distance_to_middle',
    'distanceLeft': 'distance_to_left',
    'distanceRight': 'distance_to_right',
    'distanceToStoppingZone': 'stopping_zone_start',
    'distanceToStoppingZoneEnd': 'stopping_zone_end',
}


def _as_float(data: Dict[str, Any], key: str, default: Optional[float], finite: bool = False) -> Optional[float]:
    value = data.get(key, default)
    if value is None:
        return default
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError) as e:
        raise MessageDecodeError(f"Field '{key}' is not numeric: {value!r}") from e
    if finite and not math.isfinite(number):
        raise MessageDecodeError(f"Field '{key}' must be finite, got {value!r}")
    return number


@dataclass
class LaneSummary:
    """
    Per-frame lane summary from the boundary/orientation classifier.

    `angle` is None when no lane was found. Distances to the stopping zone
    use -1 for "not detected".
    """
    angle: Optional[float] = None
    distance_to_middle: float = 0.0
    distance_to_left: float = 0.0
    distance_to_right: float = 0.0
    stopping_zone_start: float = ControllerConstants.NOT_DETECTED
    stopping_zone_end: float = ControllerConstants.NOT_DETECTED
    frame_id: int = 0
    timestamp: float = None

    def __post_init__(self):
        if self.timestamp is None:
            self.timestamp = time.time()

    @property
    def lane_found(self) -> bool:
        return self.angle is not None

    @property
    def stopping_zone_entrance_detected(self) -> bool:
        return self.stopping_zone_start > 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_dict(cls, data: Dict[str, Any], zero_angle_is_missing: bool = True) -> "LaneSummary":
        """
        Decode a summary.

        Args:
            data: Decoded JSON object (snake_case or legacy camelCase keys)
            zero_angle_is_missing: Map an angle of exactly 0 to None. The
                upstream pipeline reports "no lane" as 0. Decoding only:
                SteeringController treats 0 as missing either way.

        Raises:
            MessageDecodeError: if the payload is not an object, a field is
                not numeric, or angle, frame_id or timestamp is infinite
        """
        if not isinstance(data, dict):
            raise MessageDecodeError(f"Lane summary must be an object, got {type(data).__name__}")

        data = {_LEGACY_KEYS.get(k, k): v for k, v in data.items()}

        angle = data.get('angle')
        if angle is not None:
            angle = _as_float(data, 'angle', 0.0)
            if math.isinf(angle):
                raise MessageDecodeError(f"Field 'angle' must be finite, got {angle!r}")
            if math.isnan(angle) or (zero_angle_is_missing and angle == 0):
                angle = None

        not_detected = ControllerConstants.NOT_DETECTED
        return cls(
            angle=angle,
            distance_to_middle=_as_float(data, 'distance_to_middle', 0.0),
            distance_to_left=_as_float(data, 'distance_to_left', 0.0),
            distance_to_right=_as_float(data, 'distance_to_right', 0.0),
            stopping_zone_start=_as_float(data, 'stopping_zone_start', not_detected),
            stopping_zone_end=_as_float(data, 'stopping_zone_end', not_detected),
            frame_id=int(_as_float(data, 'frame_id', 0, finite=True)),
            timestamp=_as_float(data, 'timestamp', None, finite=True),
        )

    @classmethod
    def from_json(cls, text: str | bytes, zero_angle_is_missing: bool = True) -> "LaneSummary":
        try:
            data = json.loads(text)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise MessageDecodeError(f"Invalid lane summary JSON: {e}") from e
        return cls.from_dict(data, zero_angle_is_missing=zero_angle_is_missing)


@dataclass(frozen=True)
class ActuatorCommand:
    """
    Command for the actuator driver.

    Usage:
        ActuatorCommand.set_wheel(-12.5).to_wire()   # "setwheel:-12.5"
        ActuatorCommand.brake().to_wire()            # "speed:brake"
    """
    tag: str
    payload: str

    @classmethod
    def set_wheel(cls, percentage: float) -> "ActuatorCommand":
        return cls(CommandTags.SET_WHEEL, str(float(percentage)))

    @classmethod
    def brake(cls) -> "ActuatorCommand":
        return cls(CommandTags.SPEED, CommandTags.BRAKE)

    @classmethod
    def stop(cls) -> "ActuatorCommand":
        return cls(CommandTags.SPEED, CommandTags.STOP)

    @classmethod
    def log(cls, message: str) -> "ActuatorCommand":
        return cls(CommandTags.LOG, message)

    @classmethod
    def parse(cls, text: str) -> "ActuatorCommand":
        """
        Parse "<tag>:<payload>" text. Only the first colon separates.

        Raises:
            MessageDecodeError: if there is no tag separator
        """
        tag, sep, payload = text.partition(':')
        if not sep or not tag:
            raise MessageDecodeError(f"Command must look like '<tag>:<payload>', got {text!r}")
        return cls(tag, payload)

    @property
    def wheel_percentage(self) -> Optional[float]:
        """Payload as a number for setwheel commands, else None."""
        if self.tag != CommandTags.SET_WHEEL:
            return None
        return float(self.payload)

    def to_wire(self) -> str:
        return f"{self.tag}:{self.payload}"

    def __str__(self) -> str:
        return self.to_wire()


@dataclass
class ParameterUpdate:
    """
    Parameter update message.

    Sent from a tuning tool to the broker, then forwarded to the decision server.
    """
    category: str  # 'decision'
    parameter: str  # Parameter name
    value: float  # New value
    timestamp: float = None

    def __post_init__(self):
        if self.timestamp is None:
            self.timestamp = time.time()

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
