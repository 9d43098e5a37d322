"""
Console Command Sink

Prints actuator commands instead of sending them; used by replay runs.
"""

from typing import List

from lanepilot.core.interfaces import Clock, CommandSink
from lanepilot.integration.messages import ActuatorCommand


class ConsoleCommandSink(CommandSink):
    """Print each command with the clock time it was dispatched at."""

    def __init__(self, clock: Clock | None = None, prefix: str = "[Command]"):
        self.clock = clock
        self.prefix = prefix
        self.history: List[ActuatorCommand] = []

    def send(self, command: ActuatorCommand) -> None:
        self.history.append(command)
        if self.clock is not None:
            print(f"{self.prefix} t={self.clock.now_ms():9.1f}ms {command.to_wire()}")
        else:
            print(f"{self.prefix} {command.to_wire()}")

    def close(self) -> None:
        pass
