"""Configuration management for backup-sync."""

import copy
import os
import yaml
from typing import Dict, Any, Optional

from .config_validator import ConfigValidator
from ..core.exceptions import ConfigurationError
from ..core.filters import compile_exclude, parse_min_date
from ..core.models import BackupConfig, DEFAULT_SIGNATURE_FILE


class ConfigManager:
    """Manages configuration loading, validation and saving."""

    DEFAULT_CONFIG_LOCATIONS = [
        "config.yaml",
        "config.yml",
        os.path.expanduser("~/.backup-sync/config.yaml"),
        os.path.expanduser("~/.backup-sync/config.yml"),
        "/etc/backup-sync/config.yaml",
        "/etc/backup-sync/config.yml"
    ]

    DEFAULTS = {
        'backup': {
            'date': None,
            'exclude': None,
            'test_mode': False,
            'force_erase': False,
            'follow_symlinks': False,
            'signature_file': DEFAULT_SIGNATURE_FILE,
            'run_as_user': None
        },
        'summary': {
            'send_email': False
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
                        will search in default locations.
        """
        self.config_path = config_path
        self.config_data: Dict[str, Any] = {}
        self.validator = ConfigValidator()

    def config_exists(self) -> bool:
        """Check whether a configuration file can be found."""
        try:
            self._find_config_file()
        except FileNotFoundError:
            return False
        return True

    def load_config(self, overrides: Optional[Dict[str, Any]] = None,
                    check_paths: bool = True) -> Dict[str, Any]:
        """Load configuration from file.

        Args:
            overrides: Values for the ``backup`` section that take precedence
                over the file. ``None`` values are ignored.
            check_paths: Require source and destination to exist.

        Returns:
            Dictionary containing configuration data.

        Raises:
            FileNotFoundError: If config file cannot be found.
            ConfigurationError: If config file is invalid.
        """
        config_file = self._find_config_file()

        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                self.config_data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in config file {config_file}: {e}")
        except OSError as e:
            raise ConfigurationError(f"Error reading config file {config_file}: {e}")

        self.config_path = config_file
        return self.apply_config(self.config_data, overrides, check_paths)

    def apply_config(self, config_data: Dict[str, Any], overrides: Optional[Dict[str, Any]] = None,
                     check_paths: bool = True) -> Dict[str, Any]:
        """Merge overrides into configuration data, validate it and fill defaults."""
        if not isinstance(config_data, dict):
            raise ConfigurationError("Configuration must be a mapping")

        self.config_data = config_data
        self._apply_overrides(overrides or {})

        # Validate configuration
        self.validator.validate(self.config_data, check_paths=check_paths)

        # Set defaults
        self._set_defaults()

        return self.config_data

    def save_config(self, config_data: Dict[str, Any], path: Optional[str] = None) -> str:
        """Write configuration data as YAML.

        Returns:
            Path of the written file.

        Raises:
            ConfigurationError: If the file cannot be written.
        """
        if path is None and not self.config_path and self.config_exists():
            path = self._find_config_file()
        path = path or self.config_path or self.DEFAULT_CONFIG_LOCATIONS[0]

        directory = os.path.dirname(path)
        try:
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(path, 'w', encoding='utf-8') as f:
                yaml.safe_dump(config_data, f, default_flow_style=False, sort_keys=False)
        except PermissionError as e:
            raise ConfigurationError(
                f"Permission denied while writing config {path}. Do you have enough rights?") from e
        except OSError as e:
            raise ConfigurationError(f"Error writing config file {path}: {e}") from e

        self.config_path = path
        return path

    def _find_config_file(self) -> str:
        """Find configuration file in default locations.

        Returns:
            Path to configuration file.

        Raises:
            FileNotFoundError: If no config file is found.
        """
        if self.config_path:
            if os.path.exists(self.config_path):
                return self.config_path
            else:
                raise FileNotFoundError(f"Config file not found: {self.config_path}")

        for location in self.DEFAULT_CONFIG_LOCATIONS:
            if os.path.exists(location):
                return location

        raise FileNotFoundError(
            f"Configuration file not found in any of these locations:\n" +
            "\n".join(f"  - {loc}" for loc in self.DEFAULT_CONFIG_LOCATIONS) +
            "\n\nRun 'backup-sync init-config' to generate one."
        )

    def _apply_overrides(self, overrides: Dict[str, Any]):
        values = {key: value for key, value in overrides.items() if value is not None}
        if not values:
            return

        backup = self.config_data.get('backup') or {}
        if not isinstance(backup, dict):
            raise ConfigurationError("Backup section must be a dictionary")
        backup.update(values)
        self.config_data['backup'] = backup

    def _set_defaults(self):
        """Set default values for optional configuration parameters."""
        for section, section_defaults in copy.deepcopy(self.DEFAULTS).items():
            if not self.config_data.get(section):
                self.config_data[section] = {}
            for key, value in section_defaults.items():
                if key not in self.config_data[section]:
                    self.config_data[section][key] = value

    def get_backup_config(self) -> BackupConfig:
        """Build the resolved configuration for a backup run.

        Returns:
            BackupConfig with parsed date threshold and compiled pattern.
        """
        backup = self.config_data.get('backup', {})
        return BackupConfig(
            backup_source=backup['source'],
            backup_destination=backup['destination'],
            backup_date=parse_min_date(backup.get('date')),
            exclude=compile_exclude(backup.get('exclude')),
            test_mode=backup.get('test_mode', False),
            force_erase=backup.get('force_erase', False),
            follow_symlinks=backup.get('follow_symlinks', False),
            signature_file=backup.get('signature_file') or DEFAULT_SIGNATURE_FILE
        )

    def get_email_config(self) -> Dict[str, Any]:
        """Get email configuration.

        Returns:
            Email configuration dictionary.
        """
        return self.config_data.get('email') or {}

    def get_summary_config(self) -> Dict[str, Any]:
        return self.config_data.get('summary', {})

    def get_logging_config(self) -> Dict[str, Any]:
        """Get logging configuration.

        Returns:
            Logging configuration dictionary.
        """
        return self.config_data.get('logging', {})

    def get_run_as_user(self) -> Optional[str]:
        return self.config_data.get('backup', {}).get('run_as_user')
