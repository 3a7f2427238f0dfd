"""
backup-sync - Incremental backups onto removable volumes.

This package copies new and updated files from a source tree onto a backup
volume, recognising volumes it has prepared before and wiping unknown ones
on first use.
"""

__version__ = "1.0.0"

from .core.runner import BackupRunner
from .core.scanner import TreeScanner
from .reporters.email_reporter import EmailReporter

__all__ = ["BackupRunner", "TreeScanner", "EmailReporter"]
