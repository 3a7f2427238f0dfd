"""Core backup functionality."""

from .diff_engine import compute_pending
from .exceptions import (
    BackupError,
    ConfigurationError,
    EraseError,
    ErrorKind,
    MarkError,
    PrivilegeError,
    ScanError,
    TransferError,
)
from .filters import FilterPipeline, filter_by_exclude, filter_by_min_date
from .models import BackupConfig, FileKind, FileRecord, TransferReason, TransferReport, VolumeState
from .runner import BackupRunner
from .scanner import TreeScanner
from .transfer import TransferExecutor
from .volume import VolumeManager

__all__ = [
    "BackupRunner", "TreeScanner", "TransferExecutor", "VolumeManager", "FilterPipeline",
    "compute_pending", "filter_by_exclude", "filter_by_min_date",
    "BackupConfig", "FileKind", "FileRecord", "TransferReason", "TransferReport", "VolumeState",
    "BackupError", "ConfigurationError", "EraseError", "ErrorKind", "MarkError", "PrivilegeError", "ScanError",
    "TransferError",
]
