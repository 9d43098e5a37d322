"""
Integration

Messages and transports around the controller.

Modules:
    messages - LaneSummary, ActuatorCommand, ParameterUpdate
    console  - ConsoleCommandSink (replay output)
    zmq      - ZmqCommandSink, LaneSummarySubscriber, ParameterClient
"""

from .messages import LaneSummary, ActuatorCommand, ParameterUpdate, MessageDecodeError

__all__ = [
    'LaneSummary',
    'ActuatorCommand',
    'ParameterUpdate',
    'MessageDecodeError',
]
