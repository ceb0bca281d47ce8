"""Configuration validation for folder backup."""

from typing import Dict, Any


class ConfigValidator:
    """Validates folder backup configuration."""

    KNOWN_SECTIONS = ['backup', 'logging']
    PATH_FIELDS = ['source', 'destination', 'temp_dir']
    LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR']

    def validate(self, config: Dict[str, Any]) -> None:
        """Validate configuration data.

        Args:
            config: Configuration dictionary to validate.

        Raises:
            ValueError: If configuration is invalid.
        """
        self._validate_structure(config)

        if config.get('backup'):
            self._validate_backup_config(config['backup'])

        if config.get('logging'):
            self._validate_logging_config(config['logging'])

    def _validate_structure(self, config: Dict[str, Any]) -> None:
        """Validate basic configuration structure.

        Args:
            config: Configuration dictionary.

        Raises:
            ValueError: If the config or one of its sections is not a mapping.
        """
        if not isinstance(config, dict):
            raise ValueError("Configuration must be a mapping")

        unknown_sections = [section for section in config if section not in self.KNOWN_SECTIONS]
        if unknown_sections:
            raise ValueError(f"Unknown configuration sections: {unknown_sections}")

        for section in self.KNOWN_SECTIONS:
            value = config.get(section)
            if value is not None and not isinstance(value, dict):
                raise ValueError(f"Configuration section '{section}' must be a mapping")

    def _validate_backup_config(self, backup: Dict[str, Any]) -> None:
        """Validate backup section.

        Args:
            backup: Backup configuration dictionary.

        Raises:
            ValueError: If a path or the retention count is invalid.
        """
        for field in self.PATH_FIELDS:
            value = backup.get(field)
            if value is None:
                continue
            if not isinstance(value, str) or not value.strip():
                raise ValueError(f"Backup {field} must be a non-empty string")

        project_name = backup.get('project_name')
        if project_name is not None and (not isinstance(project_name, str) or not project_name.strip()):
            raise ValueError("Backup project_name must be a non-empty string")

        keep = backup.get('keep')
        if keep is not None:
            if isinstance(keep, bool) or not isinstance(keep, int) or keep < 0:
                raise ValueError(f"Backup keep must be a non-negative integer: {keep!r}")

    def _validate_logging_config(self, logging_config: Dict[str, Any]) -> None:
        level = logging_config.get('level')
        if level is not None and str(level).upper() not in self.LOG_LEVELS:
            raise ValueError(f"Invalid log level: {level}")

        log_file = logging_config.get('file')
        if log_file is not None and not isinstance(log_file, str):
            raise ValueError("Logging file must be a string")
