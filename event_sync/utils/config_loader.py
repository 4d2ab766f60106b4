"""Configuration loader for the GitHub events synchronizer."""

import os
import re
from pathlib import Path
from typing import Any, Dict, Optional

import structlog
import yaml
from pydantic import ValidationError
from pydantic_settings import SettingsError

from event_sync.exceptions import ConfigurationError
from event_sync.models.config import AppConfig

log = structlog.stdlib.get_logger()

CONFIG_PATH_ENV_VAR = "GHEVENTS_CONFIG"
CONFIG_FILE_NAME = "config.yaml"
APP_DIR_NAME = "github-events-sync"


class ConfigLoader:
    """Loads and validates application configuration from a YAML file and environment variables."""

    def __init__(self) -> None:
        """Initialize the ConfigLoader."""
        self.env_var_pattern = re.compile(r"\$\{([^}]+)\}")

    def load_config(self, config_path: Optional[str] = None) -> AppConfig:
        """Load configuration from YAML file with environment variable overrides.

        The configuration file is optional. When no path is given and no file
        exists at the default location, defaults plus GHEVENTS_* environment
        variables are used.

        Args:
            config_path: Path to the configuration YAML file. If None, uses
                $GHEVENTS_CONFIG or the per-user default location.

        Returns:
            AppConfig: Validated application configuration

        Raises:
            ConfigurationError: If the file is unreadable, malformed, or invalid
        """
        explicit = config_path is not None or bool(os.getenv(CONFIG_PATH_ENV_VAR))
        path = Path(config_path) if config_path is not None else self._get_default_config_path()

        config_dict: Dict[str, Any] = {}
        if path.is_file():
            log.info("loading_configuration", config_path=str(path))
            config_dict = self._substitute_env_vars(self._load_yaml_file(path))
        elif explicit:
            raise ConfigurationError(f"Configuration file not found: {path}")
        else:
            log.debug("no_configuration_file", config_path=str(path))

        try:
            app_config = AppConfig(**config_dict)
        except (ValidationError, SettingsError) as e:
            log.error("configuration_validation_failed", error=str(e))
            raise ConfigurationError(f"Configuration validation failed: {e}") from e

        log.info("configuration_loaded_successfully")
        return app_config

    def _get_default_config_path(self) -> Path:
        """Get the configuration file path from the environment or XDG conventions.

        Returns:
            Path: Location of the configuration file (may not exist)
        """
        override = os.getenv(CONFIG_PATH_ENV_VAR)
        if override:
            return Path(override).expanduser()

        xdg_config_home = os.getenv("XDG_CONFIG_HOME")
        config_root = Path(xdg_config_home) if xdg_config_home else Path.home() / ".config"
        return config_root / APP_DIR_NAME / CONFIG_FILE_NAME

    def _load_yaml_file(self, config_path: Path) -> Dict[str, Any]:
        """Load YAML configuration file.

        Args:
            config_path: Path to the YAML file

        Returns:
            Dict containing the configuration (empty for an empty file)

        Raises:
            ConfigurationError: If file cannot be read or parsed
        """
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                config_dict = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Failed to parse YAML file {config_path}: {e}") from e
        except OSError as e:
            raise ConfigurationError(f"Failed to load configuration file {config_path}: {e}") from e

        if config_dict is None:
            return {}
        if not isinstance(config_dict, dict):
            raise ConfigurationError(f"Configuration file must contain a mapping: {config_path}")

        log.debug("yaml_file_loaded", config_path=str(config_path))
        return config_dict

    def _substitute_env_vars(self, config: Any) -> Any:
        """Recursively substitute environment variables in configuration.

        Environment variables are specified as ${VAR_NAME} in the YAML file.

        Args:
            config: Configuration value (can be dict, list, str, or other types)

        Returns:
            Configuration with environment variables substituted

        Raises:
            ConfigurationError: If a referenced environment variable is not set
        """
        if isinstance(config, dict):
            return {key: self._substitute_env_vars(value) for key, value in config.items()}
        elif isinstance(config, list):
            return [self._substitute_env_vars(item) for item in config]
        elif isinstance(config, str):
            return self._substitute_env_var_in_string(config)
        else:
            return config

    def _substitute_env_var_in_string(self, value: str) -> str:
        """Substitute environment variables in a string.

        Args:
            value: String that may contain ${VAR_NAME} patterns

        Returns:
            String with environment variables substituted

        Raises:
            ConfigurationError: If a referenced environment variable is not set
        """
        for var_name in self.env_var_pattern.findall(value):
            env_value = os.getenv(var_name)
            if env_value is None:
                raise ConfigurationError(
                    f"Required environment variable not set: {var_name}. "
                    f"Please set {var_name} in your environment."
                )
            value = value.replace(f"${{{var_name}}}", env_value)

        return value
