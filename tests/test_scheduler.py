"""Tests for deferred command dispatch."""

import threading

import pytest

from lanepilot.core.interfaces import CommandSink
from lanepilot.decision import ManualClock, ManualCommandScheduler, ThreadedCommandScheduler
from lanepilot.integration.messages import ActuatorCommand


class EventSink(CommandSink):
    """Records the sending thread and signals each send."""

    def __init__(self):
        self.commands = []
        self.threads = []
        self.sent = threading.Event()

    def send(self, command):
        self.commands.append(command)
        self.threads.append(threading.current_thread())
        self.sent.set()

    def close(self):
        pass


class FailingSink(CommandSink):
    def __init__(self):
        self.attempts = 0

    def send(self, command):
        self.attempts += 1
        raise ConnectionError("actuator unreachable")

    def close(self):
        pass


# =============================================================================
# Manual scheduler
# =============================================================================

def test_manual_scheduler_sends_only_due_tasks(sink, scheduler, clock):
    scheduler.schedule(ActuatorCommand.brake(), delay_ms=500)
    scheduler.schedule(ActuatorCommand.log("now"))

    assert scheduler.run_pending() == [ActuatorCommand.log("now")]
    clock.advance(499)
    assert scheduler.run_pending() == []
    clock.advance(1)
    assert scheduler.run_pending() == [ActuatorCommand.brake()]
    assert scheduler.sent_count == 2


def test_due_tasks_go_out_in_due_then_schedule_order(sink, scheduler, clock):
    scheduler.schedule(ActuatorCommand.log("late"), delay_ms=20)
    scheduler.schedule(ActuatorCommand.log("first"))
    scheduler.schedule(ActuatorCommand.log("second"))
    scheduler.schedule(ActuatorCommand.log("middle"), delay_ms=10)

    clock.advance(50)
    scheduler.run_pending()
    assert [c.payload for c in sink.commands] == ["first", "second", "middle", "late"]


def test_cancel_withdraws_keyed_task(sink, scheduler, clock):
    scheduler.schedule(ActuatorCommand.brake(), delay_ms=1000, key="stopping_zone_brake")
    assert scheduler.is_pending("stopping_zone_brake")

    assert scheduler.cancel("stopping_zone_brake")
    assert not scheduler.is_pending("stopping_zone_brake")
    assert not scheduler.cancel("stopping_zone_brake")

    clock.advance(5000)
    assert scheduler.run_pending() == []


def test_cancel_after_dispatch_is_noop(sink, scheduler, clock):
    scheduler.schedule(ActuatorCommand.stop(), key="emergency_stop")
    scheduler.run_pending()
    assert not scheduler.cancel("emergency_stop")
    assert sink.wires() == ["speed:stop"]


def test_same_key_replaces_pending_task(sink, scheduler, clock):
    scheduler.schedule(ActuatorCommand.log("old"), delay_ms=100, key="heartbeat")
    scheduler.schedule(ActuatorCommand.log("new"), delay_ms=200, key="heartbeat")

    assert len(scheduler.pending()) == 1
    clock.advance(300)
    scheduler.run_pending()
    assert sink.wires() == ["log:new"]


def test_cancel_all_and_close(sink, scheduler, clock):
    scheduler.schedule(ActuatorCommand.brake(), delay_ms=10, key="a")
    scheduler.schedule(ActuatorCommand.log("x"), delay_ms=20)
    assert scheduler.cancel_all() == 2
    assert scheduler.pending() == []

    scheduler.schedule(ActuatorCommand.log("y"))
    scheduler.close()
    clock.advance(100)
    assert scheduler.run_pending() == []


def test_negative_delay_is_treated_as_now(sink, scheduler, clock):
    task = scheduler.schedule(ActuatorCommand.stop(), delay_ms=-50)
    assert task.due_ms == clock.now_ms()


def test_failing_sink_is_counted_not_raised(clock, capsys):
    sink = FailingSink()
    scheduler = ManualCommandScheduler(sink, clock)
    scheduler.schedule(ActuatorCommand.brake())
    scheduler.schedule(ActuatorCommand.stop())

    assert scheduler.run_pending() == []
    assert sink.attempts == 2
    assert scheduler.failed_count == 2
    assert scheduler.sent_count == 0
    assert "actuator unreachable" in capsys.readouterr().out


# =============================================================================
# Threaded scheduler
# =============================================================================

def test_threaded_scheduler_sends_off_caller_thread():
    sink = EventSink()
    scheduler = ThreadedCommandScheduler(sink)
    try:
        scheduler.schedule(ActuatorCommand.set_wheel(12.5))
        assert sink.sent.wait(timeout=2.0)
        assert sink.commands == [ActuatorCommand.set_wheel(12.5)]
        assert sink.threads[0] is not threading.current_thread()
    finally:
        scheduler.close()
    assert not scheduler.is_running


def test_threaded_scheduler_honours_delay_and_cancel():
    sink = EventSink()
    scheduler = ThreadedCommandScheduler(sink)
    try:
        scheduler.schedule(ActuatorCommand.brake(), delay_ms=200, key="stopping_zone_brake")
        assert scheduler.cancel("stopping_zone_brake")
        assert not sink.sent.wait(timeout=0.4)

        scheduler.schedule(ActuatorCommand.log("later"), delay_ms=50)
        assert sink.sent.wait(timeout=2.0)
        assert [c.payload for c in sink.commands] == ["later"]
    finally:
        scheduler.close()


def test_manual_clock_never_goes_backwards():
    clock = ManualClock(100)
    with pytest.raises(ValueError):
        clock.advance(-1)
    with pytest.raises(ValueError):
        clock.set(50)
    assert clock.set(250) == 250.0
