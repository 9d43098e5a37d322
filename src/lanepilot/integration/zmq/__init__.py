"""
ZMQ Integration

Transport between the lane classifier, the decision server and the actuator
driver.

Public API:
    - ZmqCommandSink: Publish actuator commands
    - LaneSummarySubscriber: Receive lane summaries
    - ParameterClient: Subscribe to parameter updates
"""

from .publisher import ZmqCommandSink
from .subscriber import LaneSummarySubscriber
from .client import ParameterClient

__all__ = [
    "ZmqCommandSink",
    "LaneSummarySubscriber",
    "ParameterClient",
]
