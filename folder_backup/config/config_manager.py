"""Configuration management for folder backup."""

import os
import tempfile
import yaml
from typing import Dict, Any, Optional
from .config_validator import ConfigValidator


class ConfigManager:
    """Loads backup settings from YAML and merges them with defaults."""

    DEFAULT_CONFIG_LOCATIONS = [
        "folder-backup.yaml",
        "folder-backup.yml",
        os.path.expanduser("~/.folder-backup/config.yaml"),
        os.path.expanduser("~/.folder-backup/config.yml"),
        "/etc/folder-backup/config.yaml",
    ]

    DEFAULTS = {
        'backup': {
            'project_name': None,
            'source': '.',
            'destination': '~/Backups',
            'keep': 30,
            'temp_dir': None
        },
        'logging': {
            'level': 'INFO',
            'file': None
        }
    }

    def __init__(self, config_path: Optional[str] = None):
        """Initialize configuration manager.

        Args:
            config_path: Optional path to config file. If not provided,
                        default locations are searched and built-in
                        defaults are used when none exists.
        """
        self.config_path = config_path
        self.config_file: Optional[str] = None
        self.config_data: Dict[str, Any] = {}
        self.validator = ConfigValidator()

    def load_config(self) -> Dict[str, Any]:
        """Load configuration from file.

        Returns:
            Dictionary containing configuration data.

        Raises:
            FileNotFoundError: If an explicitly given config file is missing.
            ValueError: If config file is invalid.
        """
        self.config_file = self._find_config_file()
        self.config_data = {}

        if self.config_file:
            try:
                with open(self.config_file, 'r', encoding='utf-8') as f:
                    self.config_data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML in config file {self.config_file}: {e}")
            except OSError as e:
                raise ValueError(f"Error reading config file {self.config_file}: {e}")

        # Validate configuration
        self.validator.validate(self.config_data)

        # Set defaults
        self._set_defaults()

        return self.config_data

    def _find_config_file(self) -> Optional[str]:
        """Find configuration file in default locations.

        Returns:
            Path to configuration file, or None if there is none.

        Raises:
            FileNotFoundError: If the explicitly given file does not exist.
        """
        if self.config_path:
            if os.path.exists(self.config_path):
                return self.config_path
            else:
                raise FileNotFoundError(f"Config file not found: {self.config_path}")

        for location in self.DEFAULT_CONFIG_LOCATIONS:
            if os.path.exists(location):
                return location

        return None

    def _set_defaults(self):
        """Set default values for optional configuration parameters."""
        for section, section_defaults in self.DEFAULTS.items():
            if self.config_data.get(section) is None:
                self.config_data[section] = {}
            for key, value in section_defaults.items():
                if self.config_data[section].get(key) is None:
                    self.config_data[section][key] = value

    def get_backup_config(self) -> Dict[str, Any]:
        """Get backup configuration with paths expanded.

        Returns:
            Dictionary with project_name, source, destination, keep and
            temp_dir. project_name falls back to the source folder name.
        """
        backup = dict(self.config_data.get('backup', self.DEFAULTS['backup']))

        backup['source'] = os.path.abspath(os.path.expanduser(backup['source']))
        backup['destination'] = os.path.abspath(os.path.expanduser(backup['destination']))
        backup['temp_dir'] = os.path.expanduser(backup['temp_dir'] or tempfile.gettempdir())
        if not backup.get('project_name'):
            backup['project_name'] = os.path.basename(backup['source']) or 'backup'

        return backup

    def get_logging_config(self) -> Dict[str, Any]:
        """Get logging configuration.

        Returns:
            Logging configuration dictionary.
        """
        return self.config_data.get('logging', self.DEFAULTS['logging'])

    def apply_overrides(self, section: str, **overrides):
        """Override configuration values, ignoring those that are None.

        Args:
            section: Section to update.
            **overrides: Values given on the command line.

        Raises:
            ValueError: If the resulting configuration is invalid.
        """
        values = {key: value for key, value in overrides.items() if value is not None}
        if not values:
            return

        self.config_data.setdefault(section, {}).update(values)
        self.validator.validate(self.config_data)
