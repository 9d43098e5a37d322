"""
ZMQ Command Publisher

Publishes actuator commands on the message bus for the actuator driver.
"""

import time
from typing import Optional, Dict, Any

import zmq

from lanepilot.constants import CommunicationConstants
from lanepilot.core.interfaces import CommandSink
from lanepilot.integration.messages import ActuatorCommand


class ZmqCommandSink(CommandSink):
    """
    Publisher: sends actuator commands to the driver.

    Publishes multipart [topic, "<tag>:<payload>"] on the control topic.
    """

    def __init__(
        self,
        bind_url: str = CommunicationConstants.DEFAULT_CONTROL_BIND_URL,
        topic: str = "control",
        context: Optional[zmq.Context] = None,
    ):
        """
        Initialize command publisher.

        Args:
            bind_url: ZMQ URL to bind publisher socket
            topic: Topic frame prepended to every command
            context: ZMQ context (optional, will create if not provided)
        """
        self.bind_url = bind_url
        self.topic = topic.encode('utf-8')

        # Create or use provided context
        self.context = context if context else zmq.Context()
        self.owns_context = context is None

        self.socket = self.context.socket(zmq.PUB)
        self.socket.setsockopt(zmq.SNDHWM, CommunicationConstants.DEFAULT_SEND_HWM)
        self.socket.setsockopt(zmq.LINGER, 500)
        self.socket.bind(bind_url)

        # Stats
        self.command_count = 0
        self.started_at = time.time()

    def send(self, command: ActuatorCommand) -> None:
        """
        Publish one command.

        Args:
            command: Actuator command
        """
        self.socket.send_multipart([
            self.topic,
            command.to_wire().encode('utf-8'),
        ])
        self.command_count += 1

    def close(self) -> None:
        """Close the publisher and cleanup resources."""
        if self.socket:
            self.socket.close()
        if self.owns_context and self.context:
            self.context.term()

    def get_stats(self) -> Dict[str, Any]:
        """Get publisher statistics."""
        return {
            'command_count': self.command_count,
            'uptime_s': time.time() - self.started_at,
            'bind_url': self.bind_url,
        }
