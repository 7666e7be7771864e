# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Configuration loading and validation for the component harness."""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".component_harness.yml"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConfigurationError(Exception):
    """Raised when configuration validation fails critically."""

    pass


class HarnessConfig:
    """Configuration for the component test harness.

    Loads configuration from .component_harness.yml with validation and defaults.
    Values feed the default ambient mocks and the pytest plugin.
    """

    DEFAULTS = {
        # environment-flags mock
        "env_browser": True,
        "env_dev": True,
        "env_building": False,
        "app_version": "test",
        # ambient-stores mock
        "page_url": "http://localhost/",
        # pytest plugin
        "auto_cleanup": True,
        "tick_limit": 100,  # Max flush passes before a runaway update fails
        "enable_structured_logging": False,
        "log_level": "INFO",
    }

    def __init__(self, config_path: Optional[Path] = None):
        """Initialize configuration.

        Args:
            config_path: Path to configuration file. If None, uses default location.
        """
        if config_path is None:
            config_path = Path.cwd() / CONFIG_FILENAME

        self.config_path = config_path
        self._config: Dict[str, Any] = {}
        self._load_config()

    @classmethod
    def from_dict(cls, values: Dict[str, Any]) -> "HarnessConfig":
        """Build a configuration from an in-memory mapping (no file access).

        Raises:
            ConfigurationError: If values is not a dictionary.
        """
        if not isinstance(values, dict):
            raise ConfigurationError(f"Configuration must be a dictionary, got {type(values)}")
        config = cls.__new__(cls)
        config.config_path = None
        config._config = cls.DEFAULTS.copy()
        config._validate_and_merge(values)
        return config

    def _load_config(self) -> None:
        """Load and validate configuration from file."""
        if not self.config_path.exists():
            logger.info(f"Configuration file not found at {self.config_path}, using defaults")
            self._config = self.DEFAULTS.copy()
            return

        try:
            with open(self.config_path, encoding="utf-8") as f:
                loaded_config = yaml.safe_load(f)

            if loaded_config is None:
                logger.warning("Configuration file is empty, using defaults")
                self._config = self.DEFAULTS.copy()
                return

            if not isinstance(loaded_config, dict):
                logger.warning(
                    f"Configuration file must contain a YAML dictionary, "
                    f"got {type(loaded_config)}, using defaults"
                )
                self._config = self.DEFAULTS.copy()
                return

            self._config = self.DEFAULTS.copy()
            self._validate_and_merge(loaded_config)

        except yaml.YAMLError as e:
            logger.warning(
                f"Error parsing configuration file {self.config_path}: {e}, using defaults"
            )
            self._config = self.DEFAULTS.copy()
        except OSError as e:
            logger.warning(
                f"Unable to read configuration file {self.config_path}: {e}, using defaults"
            )
            self._config = self.DEFAULTS.copy()

    def _validate_and_merge(self, loaded_config: Dict[str, Any]) -> None:
        """Validate loaded configuration and merge with defaults.

        Invalid parameters are logged as warnings and defaults are used.
        """
        for key, value in loaded_config.items():
            if key not in self.DEFAULTS:
                logger.warning(f"Unknown configuration parameter '{key}', ignoring")
                continue

            if not self._validate_parameter(key, value):
                logger.warning(
                    f"Invalid value for '{key}': {value}, using default {self.DEFAULTS[key]}"
                )
                continue

            self._config[key] = value

    def _validate_parameter(self, key: str, value: Any) -> bool:
        """Validate a configuration parameter.

        Returns:
            True if valid, False if invalid
        """
        expected_type = type(self.DEFAULTS[key])
        # bool is an int subclass; keep "tick_limit: true" out
        if expected_type is int and isinstance(value, bool):
            return False
        if not isinstance(value, expected_type):
            return False

        if key == "tick_limit":
            return bool(0 < value <= 10000)
        elif key == "log_level":
            return value.upper() in LOG_LEVELS
        elif key == "page_url":
            return value.startswith(("http://", "https://"))
        elif key == "app_version":
            return bool(value.strip())

        return True

    def as_dict(self) -> Dict[str, Any]:
        return dict(self._config)

    @property
    def env_browser(self) -> bool:
        """Value of the mocked ``browser`` environment flag."""
        value = self._config["env_browser"]
        assert isinstance(value, bool)
        return value

    @property
    def env_dev(self) -> bool:
        """Value of the mocked ``dev`` environment flag."""
        value = self._config["env_dev"]
        assert isinstance(value, bool)
        return value

    @property
    def env_building(self) -> bool:
        """Value of the mocked ``building`` environment flag."""
        value = self._config["env_building"]
        assert isinstance(value, bool)
        return value

    @property
    def app_version(self) -> str:
        """Value of the mocked ``version`` environment flag."""
        value = self._config["app_version"]
        assert isinstance(value, str)
        return value

    @property
    def page_url(self) -> str:
        """Initial URL of the mocked page store."""
        value = self._config["page_url"]
        assert isinstance(value, str)
        return value

    @property
    def auto_cleanup(self) -> bool:
        """Whether the pytest plugin unmounts everything after each test."""
        value = self._config["auto_cleanup"]
        assert isinstance(value, bool)
        return value

    @property
    def tick_limit(self) -> int:
        """Maximum flush passes before reactive updates are considered runaway."""
        value = self._config["tick_limit"]
        assert isinstance(value, int)
        return value

    @property
    def enable_structured_logging(self) -> bool:
        """Whether the pytest plugin sets up JSON file logging."""
        value = self._config["enable_structured_logging"]
        assert isinstance(value, bool)
        return value

    @property
    def log_level(self) -> int:
        """Logging level as a ``logging`` module constant."""
        value = self._config["log_level"]
        assert isinstance(value, str)
        level = logging.getLevelName(value.upper())
        assert isinstance(level, int)
        return level
