"""Tests for message decoding and the command wire format."""

import json
import math

import pytest

from lanepilot.integration.messages import (
    ActuatorCommand,
    LaneSummary,
    MessageDecodeError,
)


# =============================================================================
# LaneSummary
# =============================================================================

def test_zero_angle_decodes_as_missing():
    summary = LaneSummary.from_dict({'angle': 0})
    assert summary.angle is None
    assert not summary.lane_found


def test_zero_angle_kept_when_disabled():
    summary = LaneSummary.from_dict({'angle': 0.0}, zero_angle_is_missing=False)
    assert summary.angle == 0.0
    assert summary.lane_found


def test_nan_and_absent_angle_are_missing():
    assert LaneSummary.from_dict({'angle': math.nan}).angle is None
    assert LaneSummary.from_dict({}).angle is None
    assert LaneSummary.from_dict({'angle': None}).angle is None


def test_defaults_mark_zone_not_detected():
    summary = LaneSummary.from_dict({'angle': 4.5})
    assert summary.angle == 4.5
    assert summary.stopping_zone_start == -1.0
    assert summary.stopping_zone_end == -1.0
    assert not summary.stopping_zone_entrance_detected


def test_legacy_keys_are_accepted():
    summary = LaneSummary.from_dict({
        'angle': -12.0,
        'distanceMiddle': 3,
        'distanceLeft': 40,
        'distanceRight': 45,
        'distanceToStoppingZone': 88,
        'distanceToStoppingZoneEnd': 140,
    })
    assert summary.distance_to_middle == 3.0
    assert summary.distance_to_left == 40.0
    assert summary.distance_to_right == 45.0
    assert summary.stopping_zone_start == 88.0
    assert summary.stopping_zone_end == 140.0
    assert summary.stopping_zone_entrance_detected


def test_from_json_accepts_bytes():
    payload = json.dumps({'angle': 7, 'frame_id': 12, 'timestamp': 3.5}).encode('utf-8')
    summary = LaneSummary.from_json(payload)
    assert summary.angle == 7.0
    assert summary.frame_id == 12
    assert summary.timestamp == 3.5


@pytest.mark.parametrize("payload", [
    "not json",
    "[1, 2, 3]",
    '{"angle": "left"}',
    '{"angle": 3, "distanceToStoppingZone": "far"}',
])
def test_malformed_summary_raises(payload):
    with pytest.raises(MessageDecodeError):
        LaneSummary.from_json(payload)


def test_summary_json_keeps_missing_angle_as_null():
    text = LaneSummary(angle=None, frame_id=3, timestamp=1.0).to_json()
    data = json.loads(text)
    assert data['angle'] is None
    assert LaneSummary.from_json(text).angle is None


# =============================================================================
# ActuatorCommand
# =============================================================================

def test_command_wire_formats():
    assert ActuatorCommand.set_wheel(-12.5).to_wire() == "setwheel:-12.5"
    assert ActuatorCommand.set_wheel(0).to_wire() == "setwheel:0.0"
    assert ActuatorCommand.brake().to_wire() == "speed:brake"
    assert ActuatorCommand.stop().to_wire() == "speed:stop"
    assert str(ActuatorCommand.log("ctrl connected")) == "log:ctrl connected"


def test_parse_splits_on_first_colon_only():
    command = ActuatorCommand.parse("log:time: 12:00")
    assert command.tag == "log"
    assert command.payload == "time: 12:00"


def test_parse_round_trips_setwheel():
    command = ActuatorCommand.parse("setwheel:9.75")
    assert command == ActuatorCommand.set_wheel(9.75)
    assert command.wheel_percentage == 9.75


@pytest.mark.parametrize("text", ["speed", ":brake", ""])
def test_parse_rejects_untagged_text(text):
    with pytest.raises(MessageDecodeError):
        ActuatorCommand.parse(text)


def test_wheel_percentage_only_for_setwheel():
    assert ActuatorCommand.brake().wheel_percentage is None


@pytest.mark.parametrize("payload", [
    '{"angle": 5.0, "frame_id": NaN}',
    '{"angle": 5.0, "frame_id": Infinity}',
    '{"angle": 5.0, "frame_id": 1e400}',
    '{"angle": Infinity}',
    '{"angle": 5.0, "timestamp": "soon"}',
    '{"angle": 5.0, "timestamp": -Infinity}',
])
def test_non_finite_or_textual_fields_raise_decode_error(payload):
    with pytest.raises(MessageDecodeError):
        LaneSummary.from_json(payload)
