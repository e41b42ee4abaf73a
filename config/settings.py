"""
Configuration management system for the Tracked Attachments Console.

This module provides centralized configuration management with support for:
- JSON-based configuration files
- Environment variable overrides
- Default value handling
- Runtime configuration updates
"""

import json
import os
import sys
import logging
from typing import Any, Dict, Optional

from core.utils.exceptions import ConfigurationError


class ConfigManager:
    """Manages application configuration with JSON files and environment variables."""

    def __init__(self, config_file: Optional[str] = None):
        """
        Initialize configuration manager.

        Args:
            config_file: Path to custom configuration file, replacing config/settings.json
        """
        self._config: Dict[str, Any] = {}
        self._base_path = self._get_base_path()
        self._config_dir = os.path.join(self._base_path, 'config')
        self._default_config_file = os.path.join(self._config_dir, 'default_config.json')
        self._user_config_file = config_file or os.path.join(self._config_dir, 'settings.json')

        self._load_configuration()

    def _get_base_path(self) -> str:
        """Get the base path of the application."""
        if getattr(sys, 'frozen', False):
            # Running as compiled executable
            return os.path.dirname(sys.executable)
        return os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

    def _load_configuration(self) -> None:
        """Load configuration from default and user files."""
        try:
            self._load_default_config()

            # User configuration overrides defaults
            self._load_user_config()

            self._apply_env_overrides()

        except ConfigurationError:
            raise
        except Exception as e:
            raise ConfigurationError(f"Failed to load configuration: {e}", original_exception=e)

    def _load_default_config(self) -> None:
        """Load the default configuration file on top of the built-in defaults."""
        self._config = self._get_minimal_config()
        if os.path.exists(self._default_config_file):
            try:
                with open(self._default_config_file, 'r', encoding='utf-8') as f:
                    self._merge_config(self._config, json.load(f))
            except (json.JSONDecodeError, IOError) as e:
                raise ConfigurationError(f"Invalid default config file: {e}", config_key=self._default_config_file)

    def _load_user_config(self) -> None:
        """Load user configuration file if it exists."""
        if os.path.exists(self._user_config_file):
            try:
                with open(self._user_config_file, 'r', encoding='utf-8') as f:
                    user_config = json.load(f)
                    self._merge_config(self._config, user_config)
            except (json.JSONDecodeError, IOError) as e:
                logging.warning(f"Failed to load user config: {e}")

    def _apply_env_overrides(self) -> None:
        """Apply environment variable overrides to configuration."""
        env_mappings = {
            'TAC_DEBUG': ('app', 'debug'),
            'TAC_LOG_LEVEL': ('logging', 'level'),
            'TAC_API_URL': ('api', 'base_url'),
            'TAC_API_KEY': ('api', 'api_key'),
            'TAC_API_TIMEOUT': ('api', 'timeout'),
            'TAC_VERIFY_SSL': ('api', 'verify_ssl'),
        }

        for env_var, (section, key) in env_mappings.items():
            if env_var in os.environ:
                value = os.environ[env_var]
                # Convert to appropriate type
                if key in ['debug', 'verify_ssl']:
                    value = value.lower() in ('true', '1', 'yes')
                elif key in ['timeout']:
                    try:
                        value = float(value)
                    except ValueError:
                        logging.warning(f"Invalid value for {env_var}: {value}")
                        continue

                self._config.setdefault(section, {})[key] = value

    def _merge_config(self, base: Dict[str, Any], override: Dict[str, Any]) -> None:
        """Recursively merge configuration dictionaries."""
        for key, value in override.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._merge_config(base[key], value)
            else:
                base[key] = value

    def _get_minimal_config(self) -> Dict[str, Any]:
        """Get minimal configuration if no config file exists."""
        return {
            'app': {
                'name': 'Tracked Attachments Console',
                'version': '1.0.0',
                'debug': False
            },
            'api': {
                'base_url': 'http://localhost:3333/api',
                'resource': 'attachments',
                'api_key': '',
                'timeout': 30.0,
                'verify_ssl': True
            },
            'logging': {
                'level': 'INFO',
                'max_file_size_mb': 10,
                'backup_count': 5
            },
            'paths': {
                'logs_dir': 'logs'
            },
            'ui': {
                'notification_timeout_ms': 5000
            }
        }

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value by dot-notation key.

        Args:
            key: Configuration key in dot notation (e.g., 'api.base_url')
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        try:
            value = self._config
            for k in key.split('.'):
                value = value[k]
            return value
        except (KeyError, TypeError):
            return default

    def set(self, key: str, value: Any) -> None:
        """Set configuration value by dot-notation key."""
        keys = key.split('.')
        config = self._config

        for k in keys[:-1]:
            if k not in config:
                config[k] = {}
            config = config[k]

        config[keys[-1]] = value

    def save_user_config(self) -> None:
        """Save current configuration to user config file."""
        try:
            os.makedirs(os.path.dirname(self._user_config_file), exist_ok=True)
            with open(self._user_config_file, 'w', encoding='utf-8') as f:
                json.dump(self._config, f, indent=2)
        except IOError as e:
            raise ConfigurationError(f"Failed to save user config: {e}")

    def reload(self) -> None:
        """Reload configuration from files."""
        self._load_configuration()

    def __getitem__(self, key: str) -> Any:
        return self.get(key)

    def __setitem__(self, key: str, value: Any) -> None:
        self.set(key, value)

    def __contains__(self, key: str) -> bool:
        sentinel = object()
        return self.get(key, sentinel) is not sentinel

    @property
    def base_path(self) -> str:
        """Get application base path."""
        return self._base_path

    @property
    def config_dir(self) -> str:
        """Get configuration directory path."""
        return self._config_dir


# Global configuration instance
_config_instance: Optional[ConfigManager] = None


def get_config() -> ConfigManager:
    """Get global configuration instance."""
    global _config_instance
    if _config_instance is None:
        _config_instance = ConfigManager()
    return _config_instance


def init_config(config_file: Optional[str] = None) -> ConfigManager:
    """
    Initialize global configuration instance.

    Args:
        config_file: Path to custom configuration file

    Returns:
        ConfigManager instance
    """
    global _config_instance
    _config_instance = ConfigManager(config_file)
    return _config_instance
