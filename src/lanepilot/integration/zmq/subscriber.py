"""
ZMQ Lane Summary Subscriber

Receives per-frame lane summaries from the lane classifier.
"""

from typing import Optional

import zmq

from lanepilot.constants import CommunicationConstants
from lanepilot.integration.messages import LaneSummary, MessageDecodeError


class LaneSummarySubscriber:
    """
    Subscriber for lane summaries.

    Messages are multipart [topic, json]. Only the newest frames matter, so
    the receive queue is kept short.

    Usage:
        subscriber = LaneSummarySubscriber("tcp://localhost:5563")
        summary = subscriber.receive(timeout_ms=100)
        subscriber.close()
    """

    def __init__(
        self,
        url: str = CommunicationConstants.DEFAULT_LANE_URL,
        topic: str = "lane",
        zero_angle_is_missing: bool = True,
        context: Optional[zmq.Context] = None,
    ):
        """
        Initialize lane summary subscriber.

        Args:
            url: ZMQ URL of the classifier's publisher
            topic: Topic to subscribe to
            zero_angle_is_missing: Decode an angle of 0 as "no lane"
            context: ZMQ context (optional, will create if not provided)
        """
        self.url = url
        self.topic = topic.encode('utf-8')
        self.zero_angle_is_missing = zero_angle_is_missing

        self.context = context if context else zmq.Context()
        self.owns_context = context is None

        self.socket = self.context.socket(zmq.SUB)
        self.socket.setsockopt(zmq.RCVHWM, 10)
        self.socket.setsockopt(zmq.LINGER, 0)
        self.socket.connect(url)
        self.socket.setsockopt(zmq.SUBSCRIBE, self.topic)

        self.poller = zmq.Poller()
        self.poller.register(self.socket, zmq.POLLIN)

        self.received_count = 0
        self.dropped_count = 0

    def receive(self, timeout_ms: int = CommunicationConstants.DEFAULT_RECV_TIMEOUT_MS) -> Optional[LaneSummary]:
        """
        Wait up to `timeout_ms` for the next summary.

        Returns:
            LaneSummary, or None on timeout or on a malformed message
        """
        events = dict(self.poller.poll(timeout_ms))
        if self.socket not in events:
            return None

        parts = self.socket.recv_multipart(zmq.NOBLOCK)
        if len(parts) < 2:
            self.dropped_count += 1
            print(f"[LaneSubscriber] ⚠ Dropping message with {len(parts)} frame(s)")
            return None

        try:
            summary = LaneSummary.from_json(parts[1], zero_angle_is_missing=self.zero_angle_is_missing)
        except MessageDecodeError as e:
            self.dropped_count += 1
            print(f"[LaneSubscriber] ⚠ Dropping malformed summary: {e}")
            return None

        self.received_count += 1
        return summary

    def close(self):
        """Close the subscriber and cleanup resources."""
        if self.socket:
            self.socket.close()
        if self.owns_context and self.context:
            self.context.term()
