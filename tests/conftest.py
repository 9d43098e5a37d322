"""Shared fixtures: a manual clock, a recording sink and a deterministic scheduler."""

import pytest

from lanepilot.core.interfaces import CommandSink
from lanepilot.decision import ManualClock, ManualCommandScheduler, SteeringController


class RecordingSink(CommandSink):
    """Collects every command it is given."""

    def __init__(self):
        self.commands = []
        self.closed = False

    def send(self, command):
        self.commands.append(command)

    def close(self):
        self.closed = True

    def wires(self):
        return [c.to_wire() for c in self.commands]

    def tagged(self, tag):
        return [c for c in self.commands if c.tag == tag]


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def scheduler(sink, clock):
    return ManualCommandScheduler(sink, clock)


@pytest.fixture
def controller(scheduler):
    return SteeringController(scheduler)
