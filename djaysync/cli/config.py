"""
CLI Configuration Management

Provides configuration loading and validation for the djay-sync CLI.
Values come from built-in defaults, a JSON configuration file and
environment variables (a .env file is picked up through python-dotenv),
in increasing order of precedence. Command-line arguments override all of
them.
"""

import os
import copy
import json
import logging
import platform
from typing import Dict, Any, Optional
from pathlib import Path

from dotenv import load_dotenv

from ..core.exceptions import ConfigurationError
from ..core.models import FieldSelection, SyncOptions


VALID_LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')

logger = logging.getLogger(__name__)


class SyncConfig:
    """
    CLI configuration manager

    Features:
    - Multiple configuration sources (file, environment, defaults)
    - Platform-specific configuration paths
    - Configuration validation
    - Environment variable overrides
    """

    def __init__(self, config_path: Optional[str] = None, load_env_file: bool = True):
        """Initialize configuration manager"""
        self.explicit_path = config_path is not None
        self.config_path = config_path or self._get_default_config_path()
        self._config_cache: Optional[Dict[str, Any]] = None
        self._defaults = self._get_default_config()

        if load_env_file:
            env_path = self._find_env_file()
            if env_path:
                load_dotenv(env_path)

    def _get_default_config_path(self) -> str:
        """Get default configuration file path based on platform"""
        if platform.system() == "Windows":
            config_dir = os.path.expandvars(r"%APPDATA%\djay-sync")
        elif platform.system() == "Darwin":  # macOS
            config_dir = os.path.expanduser("~/Library/Application Support/djay-sync")
        else:  # Linux and others
            config_dir = os.path.expanduser("~/.config/djay-sync")

        return os.path.join(config_dir, "config.json")

    def _find_env_file(self) -> Optional[str]:
        """Find .env file in current directory or parent directories"""
        current_dir = Path.cwd()

        # Check current directory and up to 3 parent directories
        for _ in range(4):
            env_file = current_dir / '.env'
            if env_file.exists():
                return str(env_file)
            if current_dir == current_dir.parent:  # Reached root
                break
            current_dir = current_dir.parent

        return None

    def _get_default_config(self) -> Dict[str, Any]:
        """Get default configuration values"""
        return {
            # What to write and how
            "sync": {
                "fields": "both",
                "overwrite_existing": False,
                "dry_run": False
            },

            # djay database exports
            "tables": {
                "auto_path": None,
                "manual_path": None
            },

            # Library output
            "library": {
                "output_path": None
            },

            # Logging
            "logging": {
                "console_level": "INFO",
                "file_level": "DEBUG",
                "log_dir": None,
                "enable_console": True,
                "enable_files": True
            },

            # User interface
            "ui": {
                "progress_bars": True
            }
        }

    def load_config(self, force_reload: bool = False) -> Dict[str, Any]:
        """
        Load configuration from all sources

        Args:
            force_reload: Force reload from file (ignore cache)

        Returns:
            Merged configuration dictionary

        Raises:
            ConfigurationError: If a value is invalid or an explicitly
                requested config file cannot be read
        """
        if self._config_cache is not None and not force_reload:
            return self._config_cache

        # Start with defaults
        config = copy.deepcopy(self._defaults)

        # Load from configuration file
        file_config = self._load_from_file()
        if file_config:
            config = self._deep_merge(config, file_config)

        # Apply environment variable overrides
        env_config = self._load_from_environment()
        if env_config:
            config = self._deep_merge(config, env_config)

        config = self._validate_config(config)

        self._config_cache = config
        return config

    def _load_from_file(self) -> Optional[Dict[str, Any]]:
        """Load configuration from JSON file"""
        if not os.path.exists(self.config_path):
            if self.explicit_path:
                raise ConfigurationError("Configuration file not found", details=self.config_path)
            return None

        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            if self.explicit_path:
                raise ConfigurationError("Failed to load config file",
                                         details=f"{self.config_path}: {e}")
            logger.warning(f"Failed to load config file {self.config_path}: {e}")
            return None

        if not isinstance(data, dict):
            raise ConfigurationError("Configuration must be a JSON object", details=self.config_path)
        return data

    def _load_from_environment(self) -> Dict[str, Any]:
        """Load configuration overrides from environment variables"""
        config = {}

        # Map environment variables to config keys
        env_mappings = {
            'DJAYSYNC_FIELDS': ('sync', 'fields', str),
            'DJAYSYNC_OVERWRITE': ('sync', 'overwrite_existing', self._str_to_bool),
            'DJAYSYNC_DRY_RUN': ('sync', 'dry_run', self._str_to_bool),
            'DJAYSYNC_AUTO_TABLE': ('tables', 'auto_path', str),
            'DJAYSYNC_MANUAL_TABLE': ('tables', 'manual_path', str),
            'DJAYSYNC_LOG_LEVEL': ('logging', 'console_level', str),
            'DJAYSYNC_LOG_DIR': ('logging', 'log_dir', str),
            'DJAYSYNC_PROGRESS': ('ui', 'progress_bars', self._str_to_bool),
        }

        for env_var, (section, key, converter) in env_mappings.items():
            value = os.environ.get(env_var)
            if value is not None:
                config.setdefault(section, {})[key] = converter(value)

        return config

    @staticmethod
    def _str_to_bool(value: str) -> bool:
        """Convert string to boolean"""
        return value.strip().lower() in ('true', '1', 'yes', 'on', 'enabled')

    def _deep_merge(self, base: Dict[str, Any], update: Dict[str, Any]) -> Dict[str, Any]:
        """Deep merge two dictionaries"""
        result = base.copy()

        for key, value in update.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result

    def _validate_config(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """Validate and normalize configuration values"""
        for section in self._defaults:
            if not isinstance(config.get(section), dict):
                raise ConfigurationError(f"Invalid {section} section: expected an object",
                                         details=self.config_path)

        sync = config['sync']
        try:
            sync['fields'] = FieldSelection.parse(sync.get('fields', 'both')).value
        except ValueError:
            raise ConfigurationError(
                f"Invalid sync.fields: {sync.get('fields')!r}",
                details="expected one of tempo, key, both"
            )
        sync['overwrite_existing'] = bool(sync.get('overwrite_existing', False))
        sync['dry_run'] = bool(sync.get('dry_run', False))

        logging_section = config['logging']
        for key in ('console_level', 'file_level'):
            level = str(logging_section.get(key, 'INFO')).upper()
            if level not in VALID_LOG_LEVELS:
                raise ConfigurationError(f"Invalid logging.{key}: {level!r}")
            logging_section[key] = level

        return config

    def get_option(self, path: str, default: Any = None) -> Any:
        """
        Get a configuration option using dot notation

        Args:
            path: Dot-separated path (e.g., 'sync.fields')
            default: Default value if path not found
        """
        value = self.load_config()
        try:
            for key in path.split('.'):
                value = value[key]
            return value
        except (KeyError, TypeError):
            return default

    def sync_options(self) -> SyncOptions:
        """Build SyncOptions from the 'sync' section"""
        return SyncOptions.from_dict(self.load_config().get('sync', {}))

    def save_config(self, config: Optional[Dict[str, Any]] = None) -> str:
        """
        Save configuration to file

        Returns:
            Path of the written file
        """
        if config is None:
            config = self.load_config()

        os.makedirs(os.path.dirname(self.config_path) or '.', exist_ok=True)
        with open(self.config_path, 'w', encoding='utf-8') as f:
            json.dump(config, f, indent=2, ensure_ascii=False)

        # Clear cache to force reload
        self._config_cache = None
        return self.config_path
