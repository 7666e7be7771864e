# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Tests for configuration loading and validation."""

import logging
import tempfile
from pathlib import Path

import pytest
import yaml

from component_harness.config import CONFIG_FILENAME, ConfigurationError, HarnessConfig


def test_default_config_when_file_missing():
    """Test that defaults are used when config file is missing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        config_path = Path(tmpdir) / "nonexistent.yml"
        config = HarnessConfig(config_path=config_path)

        # Check all defaults
        assert config.env_browser is True
        assert config.env_dev is True
        assert config.env_building is False
        assert config.app_version == "test"
        assert config.page_url == "http://localhost/"
        assert config.auto_cleanup is True
        assert config.tick_limit == 100
        assert config.enable_structured_logging is False
        assert config.log_level == logging.INFO


def test_default_path_is_in_working_directory(tmp_path, monkeypatch):
    """Test that the default config path is .component_harness.yml in the cwd."""
    monkeypatch.chdir(tmp_path)
    (tmp_path / CONFIG_FILENAME).write_text("env_dev: false\n", encoding="utf-8")

    config = HarnessConfig()

    assert config.env_dev is False


def test_valid_config_loading():
    """Test loading a valid configuration file."""
    with tempfile.TemporaryDirectory() as tmpdir:
        config_path = Path(tmpdir) / "config.yml"
        config_data = {
            "env_dev": False,
            "env_building": True,
            "app_version": "2.0.0",
            "page_url": "https://example.test/shop",
            "tick_limit": 20,
            "log_level": "debug",
        }

        with open(config_path, "w") as f:
            yaml.dump(config_data, f)

        config = HarnessConfig(config_path=config_path)

        assert config.env_dev is False
        assert config.env_building is True
        assert config.app_version == "2.0.0"
        assert config.page_url == "https://example.test/shop"
        assert config.tick_limit == 20
        assert config.log_level == logging.DEBUG
        # Defaults for unspecified values
        assert config.env_browser is True
        assert config.auto_cleanup is True


def test_invalid_parameter_values():
    """Test that invalid parameter values are rejected and defaults used."""
    with tempfile.TemporaryDirectory() as tmpdir:
        config_path = Path(tmpdir) / "config.yml"
        config_data = {
            "tick_limit": 0,  # Invalid: must be > 0
            "log_level": "VERBOSE",  # Invalid: not a logging level
            "page_url": "localhost",  # Invalid: needs a scheme
            "app_version": "   ",  # Invalid: blank
        }

        with open(config_path, "w") as f:
            yaml.dump(config_data, f)

        config = HarnessConfig(config_path=config_path)

        # Should use defaults for invalid values
        assert config.tick_limit == 100
        assert config.log_level == logging.INFO
        assert config.page_url == "http://localhost/"
        assert config.app_version == "test"


def test_invalid_parameter_types():
    """Test that invalid parameter types are rejected and defaults used."""
    with tempfile.TemporaryDirectory() as tmpdir:
        config_path = Path(tmpdir) / "config.yml"
        config_data = {
            "tick_limit": "not_a_number",
            "env_dev": "not_a_boolean",
            "auto_cleanup": 1,
        }

        with open(config_path, "w") as f:
            yaml.dump(config_data, f)

        config = HarnessConfig(config_path=config_path)

        # Should use defaults for invalid types
        assert config.tick_limit == 100
        assert config.env_dev is True
        assert config.auto_cleanup is True


def test_boolean_is_not_an_integer():
    """Test that 'tick_limit: true' is rejected even though bool subclasses int."""
    config = HarnessConfig.from_dict({"tick_limit": True})
    assert config.tick_limit == 100


def test_unknown_parameters_ignored(caplog):
    """Test that unknown parameters are ignored."""
    with tempfile.TemporaryDirectory() as tmpdir:
        config_path = Path(tmpdir) / "config.yml"
        config_data = {
            "tick_limit": 15,
            "unknown_parameter": "some_value",
        }

        with open(config_path, "w") as f:
            yaml.dump(config_data, f)

        with caplog.at_level(logging.WARNING):
            config = HarnessConfig(config_path=config_path)

        # Known parameters should be loaded
        assert config.tick_limit == 15
        assert "unknown_parameter" not in config.as_dict()
        assert "Unknown configuration parameter 'unknown_parameter'" in caplog.text


def test_empty_config_file():
    """Test that an empty config file uses all defaults."""
    with tempfile.TemporaryDirectory() as tmpdir:
        config_path = Path(tmpdir) / "config.yml"
        config_path.write_text("", encoding="utf-8")

        config = HarnessConfig(config_path=config_path)

        assert config.as_dict() == HarnessConfig.DEFAULTS


def test_non_dictionary_config_file():
    """Test that a YAML list falls back to defaults."""
    with tempfile.TemporaryDirectory() as tmpdir:
        config_path = Path(tmpdir) / "config.yml"
        config_path.write_text("- env_dev\n- tick_limit\n", encoding="utf-8")

        config = HarnessConfig(config_path=config_path)

        assert config.as_dict() == HarnessConfig.DEFAULTS


def test_invalid_yaml_syntax():
    """Test that invalid YAML syntax falls back to defaults."""
    with tempfile.TemporaryDirectory() as tmpdir:
        config_path = Path(tmpdir) / "config.yml"
        config_path.write_text("invalid: yaml: syntax: here:", encoding="utf-8")

        config = HarnessConfig(config_path=config_path)

        # Should use all defaults
        assert config.tick_limit == 100
        assert config.env_dev is True


def test_from_dict():
    """Test building a configuration without a file."""
    config = HarnessConfig.from_dict({"env_dev": False, "enable_structured_logging": True})

    assert config.config_path is None
    assert config.env_dev is False
    assert config.enable_structured_logging is True


def test_from_dict_rejects_non_dictionary():
    """Test that from_dict fails loudly on a non-dictionary."""
    with pytest.raises(ConfigurationError):
        HarnessConfig.from_dict(["env_dev"])


def test_defaults_are_not_shared():
    """Test that changing one configuration does not leak into DEFAULTS."""
    config = HarnessConfig.from_dict({"app_version": "3.1"})
    values = config.as_dict()
    values["app_version"] = "changed"

    assert config.app_version == "3.1"
    assert HarnessConfig.DEFAULTS["app_version"] == "test"
