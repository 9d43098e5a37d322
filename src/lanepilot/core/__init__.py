"""
Core

Configuration and the abstract seams (clock, command sink) the controller
depends on.
"""

from .config import Config, ConfigManager, ControllerConfig, TimingConfig, MessagingConfig
from .interfaces import Clock, CommandSink

__all__ = [
    'Config',
    'ConfigManager',
    'ControllerConfig',
    'TimingConfig',
    'MessagingConfig',
    'Clock',
    'CommandSink',
]
