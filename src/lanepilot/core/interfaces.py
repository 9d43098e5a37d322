"""
Core Interfaces

Abstract seams the controller depends on, so time and transport can be
swapped (wall clock vs. replay, ZMQ vs. in-process recording).
"""

from abc import ABC, abstractmethod

from lanepilot.integration.messages import ActuatorCommand


class Clock(ABC):
    """
    Abstract time source.

    Implementations: SystemClock (monotonic wall time), ManualClock (tests, replay)
    """

    @abstractmethod
    def now_ms(self) -> float:
        """
        Current time in milliseconds.

        Only differences between readings are meaningful.
        """
        pass


class CommandSink(ABC):
    """
    Abstract actuator boundary.

    Implementations: ZmqCommandSink (message bus), ConsoleCommandSink (replay)
    """

    @abstractmethod
    def send(self, command: ActuatorCommand) -> None:
        """
        Deliver one command.

        Delivery guarantees belong to the transport; callers do not retry.
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """Release transport resources."""
        pass
