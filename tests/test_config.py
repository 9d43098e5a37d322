"""Tests for YAML configuration loading."""

import pytest
import yaml

from lanepilot.core.config import Config, ConfigManager, ControllerConfig, TimingConfig


def test_builtin_defaults():
    config = ConfigManager.load("default")
    assert config.controller.base_gain == 0.45
    assert config.controller.left_gain == 1.0
    assert config.controller.right_gain == 1.3
    assert config.controller.max_angle_deg == 60
    assert config.controller.near_field_threshold == 100
    assert config.controller.recession_threshold == 30
    assert config.timing.no_signal_timeout_ms == 1000
    assert config.timing.command_interval_ms == 100
    assert config.timing.heartbeat_interval_ms == 1000
    assert config.timing.brake_delay_ms == 1000
    assert config.messaging.zero_angle_is_missing


def test_project_config_matches_defaults():
    assert ConfigManager.load() == Config()


def test_missing_file_falls_back_to_defaults(tmp_path, capsys):
    config = ConfigManager.load(tmp_path / "nope.yaml")
    assert config == Config()
    assert "not found" in capsys.readouterr().out


def test_partial_file_keeps_other_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "controller:\n"
        "  right_gain: 1.5\n"
        "timing:\n"
        "  brake_delay_ms: 250\n"
        "messaging:\n"
        "  lane_url: tcp://classifier:6000\n"
    )
    config = ConfigManager.load(path)
    assert config.controller.right_gain == 1.5
    assert config.controller.base_gain == 0.45
    assert config.timing.brake_delay_ms == 250
    assert config.timing.command_interval_ms == 100
    assert config.messaging.lane_url == "tcp://classifier:6000"


def test_empty_file_is_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("")
    assert ConfigManager.load(path) == Config()


def test_unknown_keys_are_ignored_with_warning(tmp_path, capsys):
    path = tmp_path / "config.yaml"
    path.write_text("controller:\n  kp: 0.5\n  base_gain: 0.5\n")
    config = ConfigManager.load(path)
    assert config.controller.base_gain == 0.5
    assert "kp" in capsys.readouterr().out


def test_invalid_values_raise(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("timing:\n  command_interval_ms: -5\n")
    with pytest.raises(ValueError):
        ConfigManager.load(path)

    with pytest.raises(ValueError):
        ControllerConfig(max_angle_deg=0)
    with pytest.raises(ValueError):
        TimingConfig(brake_delay_ms=-1)


def test_invalid_yaml_raises(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("controller: [unclosed\n")
    with pytest.raises(yaml.YAMLError):
        ConfigManager.load(path)


def test_save_and_reload(tmp_path):
    config = Config()
    config.controller.left_gain = 1.1
    config.timing.heartbeat_interval_ms = 500.0
    config.messaging.enable_parameter_updates = False

    path = tmp_path / "saved.yaml"
    assert ConfigManager.save(config, path)
    assert ConfigManager.load(path) == config


def test_save_to_unwritable_path_returns_false(tmp_path):
    assert not ConfigManager.save(Config(), tmp_path / "missing" / "config.yaml")
