"""
Configuration Management for the Error Handler

Handles hierarchical configuration loading (defaults, config file,
environment variables) and validation into a ReporterConfig.
"""

import json
import logging
import os
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from .exceptions import ConfigurationError

# Configuration file locations in order of precedence (highest to lowest)
CONFIG_SEARCH_PATHS = [
    Path.cwd() / '.error_handler.yml',
    Path.cwd() / '.error_handler.yaml',
    Path.cwd() / '.error_handler.json',
    Path.home() / '.error_handler' / 'config.yml',
    Path.home() / '.error_handler' / 'config.json',
]

# Environment variable prefix
ENV_PREFIX = 'ERROR_HANDLER_'

DEFAULT_CONFIG = {
    'debug': False,
    'include_trace': False,
    'renderer': None,
    'exit_code': 255,
}


@dataclass
class ReporterConfig:
    """Operating mode of an ErrorReporter."""
    debug: bool = False
    include_trace: bool = False
    renderer: Optional[str] = None
    exit_code: int = 255

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ReporterConfig":
        """
        Build a validated config from a plain mapping.

        Raises:
            ConfigurationError: On unknown keys or values of the wrong type
        """
        unknown = set(data) - set(DEFAULT_CONFIG)
        if unknown:
            raise ConfigurationError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")

        merged = {**DEFAULT_CONFIG, **data}

        for key in ('debug', 'include_trace'):
            if not isinstance(merged[key], bool):
                raise ConfigurationError(f"'{key}' must be a boolean, got {merged[key]!r}")

        if merged['renderer'] is not None and not isinstance(merged['renderer'], str):
            raise ConfigurationError(f"'renderer' must be a string, got {merged['renderer']!r}")

        exit_code = merged['exit_code']
        if isinstance(exit_code, bool) or not isinstance(exit_code, int) or not 0 <= exit_code <= 255:
            raise ConfigurationError(f"'exit_code' must be an integer in 0..255, got {exit_code!r}")

        return cls(**merged)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class ConfigurationManager:
    """Loads reporter configuration from files and the environment."""

    def __init__(self, config_file: Optional[str] = None):
        """
        Initialize configuration manager.

        Args:
            config_file: Explicit configuration file path; skips the search paths
        """
        self.logger = logging.getLogger(__name__)
        self.config_file = config_file
        self._config_cache = None
        self._config_sources = []

    def load(self) -> Dict[str, Any]:
        """
        Load configuration from all sources in hierarchical order.

        Returns:
            Merged configuration dictionary
        """
        if self._config_cache is not None:
            return self._config_cache

        config = dict(DEFAULT_CONFIG)
        self._config_sources = ["defaults"]

        if self.config_file:
            path = Path(self.config_file)
            if not path.exists():
                raise ConfigurationError(f"Config file not found: {path}")
            config.update(self._load_config_file(path))
            self._config_sources.append(f"file:{path}")
        else:
            for config_path in CONFIG_SEARCH_PATHS:
                if config_path.exists():
                    config.update(self._load_config_file(config_path))
                    self._config_sources.append(f"file:{config_path}")
                    self.logger.debug(f"Loaded config from {config_path}")
                    break  # Use first found config file

        env_config = self._load_environment_variables()
        if env_config:
            config.update(env_config)
            self._config_sources.append("environment")

        self._config_cache = config
        return config

    def _load_config_file(self, path: Path) -> Dict[str, Any]:
        """Load configuration from file."""
        if path.suffix not in ['.yml', '.yaml', '.json']:
            raise ConfigurationError(f"Unknown config file format: {path}")

        try:
            with open(path, 'r') as f:
                if path.suffix == '.json':
                    data = json.load(f)
                else:
                    data = yaml.safe_load(f)
        except (OSError, ValueError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Failed to load config from {path}: {e}") from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file {path} must contain a mapping")

        # Allow the settings to be nested under an 'error_handler' section
        if 'error_handler' not in data:
            return data

        section = data['error_handler']
        if section is None:
            return {}
        if not isinstance(section, dict):
            raise ConfigurationError(f"'error_handler' section in {path} must be a mapping")
        return section

    def _load_environment_variables(self) -> Dict[str, Any]:
        """Load configuration from environment variables."""
        env_config = {}

        for key, value in os.environ.items():
            if key.startswith(ENV_PREFIX):
                config_key = key[len(ENV_PREFIX):].lower()
                env_config[config_key] = self._parse_env_value(value)

        return env_config

    def _parse_env_value(self, value: str) -> Union[str, int, float, bool, None]:
        """Parse environment variable value to appropriate type."""
        if value.lower() in ['true', 'yes', 'on']:
            return True
        elif value.lower() in ['false', 'no', 'off']:
            return False

        # JSON literals cover numbers and null
        try:
            return json.loads(value)
        except ValueError:
            pass

        return value

    def get(self, key: str, default: Any = None) -> Any:
        return self.load().get(key, default)

    def get_sources(self) -> List[str]:
        """Get list of configuration sources that were loaded."""
        self.load()
        return self._config_sources

    def to_reporter_config(self) -> ReporterConfig:
        """Validated ReporterConfig from the merged configuration."""
        return ReporterConfig.from_dict(self.load())


def load_config(config_file: Optional[str] = None) -> ReporterConfig:
    """Load and validate reporter configuration."""
    return ConfigurationManager(config_file).to_reporter_config()
