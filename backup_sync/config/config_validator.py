"""Configuration validation for backup-sync."""

import os
from typing import Dict, Any

from ..core.exceptions import ConfigurationError
from ..core.filters import compile_exclude, parse_min_date


class ConfigValidator:
    """Validates backup-sync configuration."""

    REQUIRED_SECTIONS = ['backup']
    REQUIRED_BACKUP_FIELDS = ['source', 'destination']
    REQUIRED_EMAIL_FIELDS = ['smtp_server', 'to_addresses']
    BOOLEAN_BACKUP_FIELDS = ['test_mode', 'force_erase', 'follow_symlinks']
    LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR']

    def validate(self, config: Dict[str, Any], check_paths: bool = True) -> None:
        """Validate configuration data.

        Args:
            config: Configuration dictionary to validate.
            check_paths: Also require source and destination to exist.

        Raises:
            ConfigurationError: If configuration is invalid.
        """
        self._validate_structure(config)
        self._validate_backup(config['backup'], check_paths)

        # Validate email config if present
        if config.get('email'):
            self._validate_email_config(config['email'])

        logging_config = config.get('logging') or {}
        level = logging_config.get('level')
        if level is not None and str(level).upper() not in self.LOG_LEVELS:
            raise ConfigurationError(f"Invalid logging level: {level}")

        summary = config.get('summary') or {}
        if summary.get('send_email') and not config.get('email'):
            raise ConfigurationError("summary.send_email is set but no email section is configured")

    def _validate_structure(self, config: Dict[str, Any]) -> None:
        """Validate basic configuration structure.

        Raises:
            ConfigurationError: If required sections are missing.
        """
        if not isinstance(config, dict):
            raise ConfigurationError("Configuration must be a mapping")

        missing_sections = [section for section in self.REQUIRED_SECTIONS if not config.get(section)]
        if missing_sections:
            raise ConfigurationError(f"Missing required configuration sections: {missing_sections}")

    def _validate_backup(self, backup: Dict[str, Any], check_paths: bool) -> None:
        """Validate the backup section.

        Raises:
            ConfigurationError: If a field is missing or unusable.
        """
        if not isinstance(backup, dict):
            raise ConfigurationError("Backup section must be a dictionary")

        missing_fields = [field for field in self.REQUIRED_BACKUP_FIELDS if not backup.get(field)]
        if missing_fields:
            raise ConfigurationError(f"Backup section missing required fields: {missing_fields}")

        if check_paths:
            for field in self.REQUIRED_BACKUP_FIELDS:
                if not os.path.isdir(backup[field]):
                    raise ConfigurationError(f"Backup {field} is not an existing directory: {backup[field]}")

            source = os.path.realpath(backup['source'])
            destination = os.path.realpath(backup['destination'])
            if source == destination:
                raise ConfigurationError("Backup source and destination point to the same directory")
            if _is_inside(source, destination):
                raise ConfigurationError(f"Backup source {source} is inside the destination {destination}")
            if _is_inside(destination, source):
                raise ConfigurationError(f"Backup destination {destination} is inside the source {source}")

        for field in self.BOOLEAN_BACKUP_FIELDS:
            if field in backup and not isinstance(backup[field], bool):
                raise ConfigurationError(f"Backup {field} must be true or false: {backup[field]!r}")

        signature_file = backup.get('signature_file')
        if signature_file is not None and (not signature_file or os.path.basename(signature_file) != signature_file):
            raise ConfigurationError(f"Backup signature_file must be a plain file name: {signature_file!r}")

        # Both raise ConfigurationError on bad values
        parse_min_date(backup.get('date'))
        compile_exclude(backup.get('exclude'))

    def _validate_email_config(self, email_config: Dict[str, Any]) -> None:
        """Validate email configuration.

        Raises:
            ConfigurationError: If email configuration is invalid.
        """
        missing_fields = [field for field in self.REQUIRED_EMAIL_FIELDS if field not in email_config]
        if missing_fields:
            raise ConfigurationError(f"Email configuration missing required fields: {missing_fields}")

        # Validate port if provided
        if 'smtp_port' in email_config:
            try:
                port = int(email_config['smtp_port'])
                if not (1 <= port <= 65535):
                    raise ValueError()
            except (ValueError, TypeError):
                raise ConfigurationError(f"Email configuration has invalid SMTP port: {email_config['smtp_port']}")

        # Validate to_addresses is a list
        to_addresses = email_config.get('to_addresses', [])
        if not isinstance(to_addresses, list) or not to_addresses:
            raise ConfigurationError("Email to_addresses must be a non-empty list")


def _is_inside(path: str, parent: str) -> bool:
    try:
        return os.path.commonpath([path, parent]) == parent
    except ValueError:
        # Different drives
        return False
