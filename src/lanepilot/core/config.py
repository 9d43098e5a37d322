"""
Configuration management for the steering controller.
Loads from YAML and provides type-safe access to settings.
"""

from dataclasses import dataclass, field, asdict, fields
from pathlib import Path

import yaml

from lanepilot.constants import (
    ControllerConstants,
    TimingConstants,
    CommunicationConstants,
)


def get_project_root() -> Path:
    """
    Find the project root directory by locating pyproject.toml.

    Returns:
        Path to project root directory
    """
    current = Path(__file__).resolve()
    for parent in [current] + list(current.parents):
        if (parent / "pyproject.toml").exists():
            return parent

    # Fallback: src/lanepilot/core/config.py -> project root
    return Path(__file__).resolve().parent.parent.parent.parent


# Default config path at project root
DEFAULT_CONFIG_PATH = get_project_root() / "config.yaml"


@dataclass
class ControllerConfig:
    """Steering gains and stopping-zone thresholds."""
    base_gain: float = ControllerConstants.DEFAULT_BASE_GAIN
    left_gain: float = ControllerConstants.DEFAULT_LEFT_GAIN
    right_gain: float = ControllerConstants.DEFAULT_RIGHT_GAIN
    max_angle_deg: float = ControllerConstants.DEFAULT_MAX_ANGLE_DEG
    near_field_threshold: float = ControllerConstants.DEFAULT_NEAR_FIELD_THRESHOLD
    recession_threshold: float = ControllerConstants.DEFAULT_RECESSION_THRESHOLD
    stop_on_shutdown: bool = True
    name: str = ControllerConstants.DEFAULT_NAME

    def __post_init__(self):
        if self.max_angle_deg <= 0:
            raise ValueError(f"controller.max_angle_deg must be positive, got {self.max_angle_deg}")
        for name in ('base_gain', 'left_gain', 'right_gain'):
            if getattr(self, name) < 0:
                raise ValueError(f"controller.{name} must not be negative")


@dataclass
class TimingConfig:
    """Controller intervals, all in milliseconds."""
    no_signal_timeout_ms: float = TimingConstants.DEFAULT_NO_SIGNAL_TIMEOUT_MS
    command_interval_ms: float = TimingConstants.DEFAULT_COMMAND_INTERVAL_MS
    heartbeat_interval_ms: float = TimingConstants.DEFAULT_HEARTBEAT_INTERVAL_MS
    brake_delay_ms: float = TimingConstants.DEFAULT_BRAKE_DELAY_MS

    def __post_init__(self):
        for f in fields(self):
            if getattr(self, f.name) < 0:
                raise ValueError(f"timing.{f.name} must not be negative")


@dataclass
class MessagingConfig:
    """ZMQ endpoints for lane summaries, actuator commands and parameters."""
    lane_url: str = CommunicationConstants.DEFAULT_LANE_URL
    lane_topic: str = CommunicationConstants.TOPIC_LANE.decode('utf-8')
    control_bind_url: str = CommunicationConstants.DEFAULT_CONTROL_BIND_URL
    control_topic: str = CommunicationConstants.TOPIC_CONTROL.decode('utf-8')
    parameter_broker_url: str = CommunicationConstants.DEFAULT_PARAMETER_BROKER_URL
    enable_parameter_updates: bool = True
    zero_angle_is_missing: bool = True  # decode-only; the controller always treats 0 as "no lane"


@dataclass
class Config:
    """
    Master configuration container.

    Aggregates all subsystem configurations.
    """
    controller: ControllerConfig = field(default_factory=ControllerConfig)
    timing: TimingConfig = field(default_factory=TimingConfig)
    messaging: MessagingConfig = field(default_factory=MessagingConfig)


def _section(cls, data: dict | None, section: str):
    """Build a config section, keeping defaults for keys that are absent."""
    if not data or section not in data or data[section] is None:
        return cls()

    values = data[section]
    known = {f.name for f in fields(cls)}
    unknown = set(values) - known
    if unknown:
        print(f"⚠ Ignoring unknown keys in '{section}': {', '.join(sorted(unknown))}")

    return cls(**{k: v for k, v in values.items() if k in known})


class ConfigManager:
    """
    Configuration manager with YAML loading.

    Usage:
        # Load from project root config.yaml (default)
        config = ConfigManager.load()

        # Load from specific path
        config = ConfigManager.load('path/to/config.yaml')

        # Use built-in defaults only
        config = ConfigManager.load('default')

        gain = config.controller.base_gain
    """

    @staticmethod
    def load(config_path: str | Path | None = None) -> Config:
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to YAML config file.
                        If None, tries to load from project root config.yaml.
                        If "default", uses built-in defaults without loading file.

        Returns:
            Config object with loaded settings

        Raises:
            yaml.YAMLError: if the file is not valid YAML
            ValueError: if a value is out of range
        """
        if config_path == "default":
            return Config()

        if config_path is None:
            config_path = DEFAULT_CONFIG_PATH

        path = Path(config_path)
        if not path.exists():
            print(f"Warning: Config file {config_path} not found. Using defaults.")
            return Config()

        with open(path, 'r') as f:
            data = yaml.safe_load(f)

        if data is None:
            return Config()

        return Config(
            controller=_section(ControllerConfig, data, 'controller'),
            timing=_section(TimingConfig, data, 'timing'),
            messaging=_section(MessagingConfig, data, 'messaging'),
        )

    @staticmethod
    def save(config: Config, config_path: str | Path) -> bool:
        """
        Save configuration to YAML file.

        Args:
            config: Config object to save
            config_path: Path to save YAML file

        Returns:
            True if successful
        """
        try:
            with open(config_path, 'w') as f:
                yaml.safe_dump(asdict(config), f, default_flow_style=False, indent=2)
            return True

        except OSError as e:
            print(f"Error saving config: {e}")
            return False
