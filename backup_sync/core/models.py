"""Data models for incremental backup."""

import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional


DEFAULT_SIGNATURE_FILE = "backupsync.signature"


class FileKind(Enum):
    """Kind of filesystem entry encountered during a scan."""
    FILE = "file"
    DIRECTORY = "directory"


class TransferReason(Enum):
    """Why a source file was selected for transfer."""
    NOT_FOUND_AT_DESTINATION = "Destination file not found"
    SOURCE_NEWER = "Source file is newer than destination file"


class VolumeState(Enum):
    """Lifecycle state of a destination volume."""
    UNKNOWN = "unknown"
    CONFIRMED = "confirmed"


@dataclass
class FileRecord:
    """Information about a scanned file."""
    path: str
    relative_path: str
    name: str
    kind: FileKind
    modified_time: datetime
    reason: Optional[TransferReason] = None

    @property
    def is_file(self) -> bool:
        return self.kind is FileKind.FILE

    def assign_reason(self, reason: TransferReason) -> None:
        """Attach the transfer reason. A reason is never reassigned."""
        if self.reason is not None:
            raise ValueError(f"Transfer reason already set for {self.relative_path}")
        self.reason = reason

    def to_dict(self) -> dict:
        return {
            'path': self.path,
            'relative_path': self.relative_path,
            'name': self.name,
            'kind': self.kind.value,
            'modified_time': self.modified_time.isoformat(),
            'reason': self.reason.value if self.reason else None,
        }


@dataclass
class TransferReport:
    """Counts reported after applying a pending list."""
    total_count: int = 0
    overwrite_count: int = 0

    @property
    def new_count(self) -> int:
        return self.total_count - self.overwrite_count


@dataclass(frozen=True)
class BackupConfig:
    """Resolved configuration for a single backup run.

    ``backup_date`` and ``exclude`` are ``None`` when no threshold or
    exclusion pattern is configured.
    """
    backup_source: str
    backup_destination: str
    backup_date: Optional[datetime] = None
    exclude: Optional[re.Pattern] = None
    test_mode: bool = False
    force_erase: bool = False
    follow_symlinks: bool = False
    signature_file: str = DEFAULT_SIGNATURE_FILE


@dataclass
class BackupRunResult:
    """Outcome of a complete backup run."""
    pending: List[FileRecord]
    volume_state: VolumeState
    test_mode: bool
    report: Optional[TransferReport] = None
    log_lines: List[str] = field(default_factory=list)
    duration_seconds: float = 0.0
