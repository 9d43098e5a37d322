"""
Command Scheduler

Deferred dispatch of actuator commands. The controller never talks to the
transport itself: it schedules a command (now, or after a delay) and returns
immediately.

Tasks may carry a key naming the event that created them. A keyed task can
be withdrawn with `cancel(key)` until it fires, and scheduling the same key
again replaces the pending task.

Implementations:
    ThreadedCommandScheduler - background worker thread (live use)
    ManualCommandScheduler   - fires due tasks on request (replay, tests)
"""

import heapq
import itertools
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from lanepilot.core.interfaces import Clock, CommandSink
from lanepilot.integration.messages import ActuatorCommand
from lanepilot.decision.clock import SystemClock


@dataclass(order=True)
class ScheduledCommand:
    """A command waiting for its due time."""
    due_ms: float
    sequence: int
    command: ActuatorCommand = field(compare=False)
    key: Optional[str] = field(default=None, compare=False)
    cancelled: bool = field(default=False, compare=False)


class CommandScheduler(ABC):
    """
    Base scheduler: keeps the ordered task queue and the key index.

    Subclasses decide when due tasks are dispatched.
    """

    def __init__(self, sink: CommandSink, clock: Clock | None = None):
        self.sink = sink
        self.clock = clock or SystemClock()

        self._lock = threading.Lock()
        self._queue: List[ScheduledCommand] = []
        self._keyed: Dict[str, ScheduledCommand] = {}
        self._sequence = itertools.count()

        self.sent_count = 0
        self.failed_count = 0

    def schedule(
        self,
        command: ActuatorCommand,
        delay_ms: float = 0.0,
        key: str | None = None,
    ) -> ScheduledCommand:
        """
        Queue a command for dispatch after `delay_ms`.

        Args:
            command: Command to send
            delay_ms: Delay from now; 0 still dispatches off the caller's path
            key: Optional event key; replaces a pending task with the same key

        Returns:
            The queued task
        """
        task = ScheduledCommand(
            due_ms=self.clock.now_ms() + max(0.0, delay_ms),
            sequence=next(self._sequence),
            command=command,
            key=key,
        )

        with self._lock:
            if key is not None:
                previous = self._keyed.get(key)
                if previous is not None:
                    previous.cancelled = True
                self._keyed[key] = task
            heapq.heappush(self._queue, task)

        self._wake()
        return task

    def cancel(self, key: str) -> bool:
        """
        Withdraw the pending task scheduled under `key`.

        Returns:
            True if a pending task was cancelled
        """
        with self._lock:
            task = self._keyed.pop(key, None)
            if task is None or task.cancelled:
                return False
            task.cancelled = True

        self._wake()
        return True

    def cancel_all(self) -> int:
        """Withdraw every pending task. Returns the number cancelled."""
        with self._lock:
            count = 0
            for task in self._queue:
                if not task.cancelled:
                    task.cancelled = True
                    count += 1
            self._queue.clear()
            self._keyed.clear()

        self._wake()
        return count

    def pending(self) -> List[ScheduledCommand]:
        """Pending tasks in dispatch order."""
        with self._lock:
            return sorted(task for task in self._queue if not task.cancelled)

    def is_pending(self, key: str) -> bool:
        with self._lock:
            task = self._keyed.get(key)
            return task is not None and not task.cancelled

    @abstractmethod
    def close(self) -> None:
        """Stop dispatching. Pending tasks are dropped."""
        pass

    def _wake(self) -> None:
        """Hook for subclasses that sleep until the next due time."""
        pass

    def _pop_due(self, now_ms: float) -> List[ScheduledCommand]:
        """Remove and return every live task due at `now_ms`."""
        due = []
        with self._lock:
            while self._queue and self._queue[0].due_ms <= now_ms:
                task = heapq.heappop(self._queue)
                if task.cancelled:
                    continue
                if task.key is not None and self._keyed.get(task.key) is task:
                    del self._keyed[task.key]
                due.append(task)
        return due

    def _next_due_ms(self) -> Optional[float]:
        with self._lock:
            while self._queue and self._queue[0].cancelled:
                heapq.heappop(self._queue)
            return self._queue[0].due_ms if self._queue else None

    def _dispatch(self, task: ScheduledCommand) -> bool:
        """Send one task. Transport failures are logged, never retried."""
        try:
            self.sink.send(task.command)
        except Exception as e:
            self.failed_count += 1
            print(f"[Scheduler] ✗ Failed to send '{task.command}': {type(e).__name__}: {e}")
            return False

        self.sent_count += 1
        return True


class ThreadedCommandScheduler(CommandScheduler):
    """
    Scheduler backed by a single daemon worker thread.

    Commands are sent from the worker thread in due-time order, so the frame
    processing thread never blocks on the transport. Requires a clock that
    follows wall time (the default SystemClock).

    Usage:
        scheduler = ThreadedCommandScheduler(sink)
        scheduler.schedule(ActuatorCommand.brake(), delay_ms=1000, key="stopping_zone_brake")
        ...
        scheduler.close()
    """

    def __init__(self, sink: CommandSink, clock: Clock | None = None, name: str = "command-scheduler"):
        super().__init__(sink, clock)
        self._condition = threading.Condition()
        self._running = True
        self._thread = threading.Thread(target=self._run, name=name, daemon=True)
        self._thread.start()

    def _wake(self) -> None:
        with self._condition:
            self._condition.notify()

    def _run(self) -> None:
        while True:
            with self._condition:
                if not self._running:
                    return

                next_due = self._next_due_ms()
                if next_due is None:
                    self._condition.wait()
                    continue

                wait_ms = next_due - self.clock.now_ms()
                if wait_ms > 0:
                    self._condition.wait(timeout=wait_ms / 1000.0)
                    continue

            for task in self._pop_due(self.clock.now_ms()):
                self._dispatch(task)

    def close(self, timeout: float = 1.0) -> None:
        with self._condition:
            self._running = False
            self._condition.notify_all()
        self._thread.join(timeout=timeout)

    @property
    def is_running(self) -> bool:
        return self._thread.is_alive()


class ManualCommandScheduler(CommandScheduler):
    """
    Scheduler that dispatches only when `run_pending()` is called.

    Paired with a ManualClock it makes the whole control loop deterministic:
    advance the clock, process a frame, run pending commands.
    """

    def run_pending(self) -> List[ActuatorCommand]:
        """Send every task due at the clock's current time."""
        sent = []
        for task in self._pop_due(self.clock.now_ms()):
            if self._dispatch(task):
                sent.append(task.command)
        return sent

    def close(self) -> None:
        self.cancel_all()
