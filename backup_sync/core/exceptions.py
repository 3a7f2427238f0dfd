"""Errors raised by the backup core."""

import errno
from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    """Distinguishes actionable permission problems from other I/O failures."""
    PERMISSION_DENIED = "permission_denied"
    OTHER = "other"


def classify_os_error(error: OSError) -> ErrorKind:
    """Map an OSError to an ErrorKind."""
    if isinstance(error, PermissionError) or error.errno in (errno.EACCES, errno.EPERM):
        return ErrorKind.PERMISSION_DENIED
    return ErrorKind.OTHER


class BackupError(Exception):
    """Base class for all backup errors."""


class ScanError(BackupError):
    """A scan root is missing or a directory under it is unreadable."""

    def __init__(self, path: str, message: str):
        super().__init__(f"Cannot scan {path}: {message}")
        self.path = path


class ConfigurationError(BackupError, ValueError):
    """Invalid configuration value (filter pattern, date threshold, paths)."""


class VolumeError(BackupError):
    """A destination volume operation failed."""

    action = "access"

    def __init__(self, path: str, kind: ErrorKind, detail: Optional[str] = None):
        if kind is ErrorKind.PERMISSION_DENIED:
            message = f"Insufficient permissions to {self.action} disk {path}"
        else:
            message = f"Error trying to {self.action} disk {path}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.path = path
        self.kind = kind

    @property
    def permission_denied(self) -> bool:
        return self.kind is ErrorKind.PERMISSION_DENIED


class EraseError(VolumeError):
    """Erasing the destination volume failed."""

    action = "erase"


class MarkError(VolumeError):
    """Writing the volume signature failed."""

    action = "mark"


class TransferError(BackupError):
    """Copying, stat'ing or deleting a file failed during transfer."""

    def __init__(self, relative_path: str, message: str, kind: ErrorKind = ErrorKind.OTHER):
        super().__init__(f"Transfer of {relative_path} failed: {message}")
        self.relative_path = relative_path
        self.kind = kind

    @property
    def permission_denied(self) -> bool:
        return self.kind is ErrorKind.PERMISSION_DENIED


class PrivilegeError(BackupError):
    """Switching to the backup user failed after the process identity changed."""

    def __init__(self, user: str, detail: str):
        super().__init__(f"Could not drop privileges to {user}: {detail}")
        self.user = user
