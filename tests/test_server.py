"""Tests for decision server shutdown."""

import pytest

from lanepilot.constants import ScheduleKeys
from lanepilot.core.config import Config
from lanepilot.decision.run import DecisionServer
from lanepilot.integration.messages import ActuatorCommand


@pytest.fixture
def server():
    server = DecisionServer(
        Config(),
        lane_url="inproc://test-lane",
        bind_url="inproc://test-control",
        enable_parameter_updates=False,
        enable_footer=False,
    )
    yield server
    server.stop()


def test_stop_drops_pending_brake_and_sends_stop(server, monkeypatch):
    sent = []
    monkeypatch.setattr(server.sink, "send", sent.append)

    server.scheduler.schedule(
        ActuatorCommand.brake(), delay_ms=60000, key=ScheduleKeys.STOPPING_ZONE_BRAKE,
    )
    server.stop()

    assert sent == [ActuatorCommand.stop()]
    assert not server.scheduler.is_running
    assert not server.scheduler.is_pending(ScheduleKeys.STOPPING_ZONE_BRAKE)


def test_stop_is_idempotent(server, monkeypatch):
    sent = []
    monkeypatch.setattr(server.sink, "send", sent.append)

    server.stop()
    server.stop()
    assert sent == [ActuatorCommand.stop()]


def test_stop_without_shutdown_stop(monkeypatch):
    config = Config()
    config.controller.stop_on_shutdown = False
    server = DecisionServer(
        config,
        lane_url="inproc://test-lane-2",
        bind_url="inproc://test-control-2",
        enable_parameter_updates=False,
        enable_footer=False,
    )
    sent = []
    monkeypatch.setattr(server.sink, "send", sent.append)

    server.stop()
    assert sent == []


def test_latched_brake_becomes_stop_even_without_shutdown_stop(monkeypatch):
    config = Config()
    config.controller.stop_on_shutdown = False
    server = DecisionServer(
        config,
        lane_url="inproc://test-lane-3",
        bind_url="inproc://test-control-3",
        enable_parameter_updates=False,
        enable_footer=False,
    )
    sent = []
    monkeypatch.setattr(server.sink, "send", sent.append)

    # zone entrance came within the near field, then receded
    for distance in (90.0, 50.0, 85.0):
        server.controller.process_lane(5.0, distance)
    assert server.scheduler.is_pending(ScheduleKeys.STOPPING_ZONE_BRAKE)

    server.stop()
    assert sent[-1] == ActuatorCommand.stop()
    assert ActuatorCommand.brake() not in sent
