"""
ZMQ Parameter Client

Lets the decision server pick up tuning changes (gains, thresholds,
intervals) while it runs.

Usage:
    client = ParameterClient(category='decision')
    client.register_callback(controller.update_parameter)

    # In main loop
    while running:
        client.poll()  # Non-blocking, processes any pending updates

    client.close()
"""

import json
from typing import Callable, Optional

import zmq

from lanepilot.constants import CommunicationConstants
from lanepilot.integration.messages import ParameterUpdate


class ParameterClient:
    """
    Client for subscribing to parameter updates.

    Messages are multipart [category, {"parameter": name, "value": v}].
    """

    def __init__(
        self,
        category: str = CommunicationConstants.TOPIC_DECISION_PARAMETERS,
        broker_url: str = CommunicationConstants.DEFAULT_PARAMETER_BROKER_URL,
        context: Optional[zmq.Context] = None,
    ):
        """
        Initialize parameter client.

        Args:
            category: Category to filter messages on (e.g. 'decision')
            broker_url: ZMQ URL of the parameter broker
            context: ZMQ context (optional, will create if not provided)
        """
        self.category = category
        self.broker_url = broker_url

        self.context = context if context else zmq.Context()
        self.owns_context = context is None

        self.socket = self.context.socket(zmq.SUB)
        self.socket.setsockopt(zmq.LINGER, 0)
        self.socket.connect(broker_url)
        self.socket.setsockopt(zmq.SUBSCRIBE, category.encode('utf-8'))

        self.callback: Optional[Callable[[str, float], object]] = None

    def register_callback(self, callback: Callable[[str, float], object]):
        """
        Register callback for parameter updates.

        Args:
            callback: Function that takes (parameter_name: str, value: float)
        """
        self.callback = callback

    def poll(self) -> bool:
        """
        Poll for parameter updates (non-blocking).

        Returns:
            True if a message was received and handled, False otherwise
        """
        try:
            parts = self.socket.recv_multipart(zmq.NOBLOCK)
        except zmq.Again:
            # No message available (this is normal)
            return False

        try:
            data = json.loads(parts[1].decode('utf-8'))
            update = ParameterUpdate(
                category=self.category,
                parameter=str(data['parameter']),
                value=float(data['value']),
            )
        except (IndexError, KeyError, TypeError, ValueError) as e:
            # Malformed update: report and keep running
            print(f"[ParameterClient] Error decoding update: {type(e).__name__}: {e}")
            return False

        if self.callback:
            self.callback(update.parameter, update.value)

        return True

    def close(self):
        """Close the client and cleanup resources."""
        if self.socket:
            self.socket.close()
        if self.owns_context and self.context:
            self.context.term()
