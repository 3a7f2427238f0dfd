"""Directory tree scanning for incremental backup."""

import os
import stat
import logging
from datetime import datetime, timezone
from typing import List, Optional, Set, Tuple

from .exceptions import ScanError
from .models import FileKind, FileRecord


class TreeScanner:
    """Enumerates a directory tree into a flat list of file records."""

    def __init__(self, follow_symlinks: bool = False, logger: Optional[logging.Logger] = None):
        """Initialize tree scanner.

        Args:
            follow_symlinks: Resolve symbolic links and treat them as their
                target. When False, links are skipped.
            logger: Logger receiving scan progress lines.
        """
        self.follow_symlinks = follow_symlinks
        self.logger = logger or logging.getLogger(__name__)

    def scan(self, root_path: str) -> List[FileRecord]:
        """Scan a directory and return every file beneath it.

        Directories are recursed into but never returned. Paths are made
        relative to ``root_path`` with ``/`` separators.

        Args:
            root_path: Directory to scan.

        Returns:
            List of FileRecord objects in depth-first order.

        Raises:
            ScanError: If the root is missing, not a directory or unreadable.
        """
        root = os.path.abspath(root_path)

        if not os.path.exists(root):
            raise ScanError(root_path, "path does not exist")

        if not os.path.isdir(root):
            raise ScanError(root_path, "path is not a directory")

        self.logger.debug(f"Starting scan of {root}")

        records: List[FileRecord] = []
        visited: Set[Tuple[int, int]] = set()
        self._scan_directory(root, "", records, visited)

        self.logger.debug(f"Completed scan of {root}, found {len(records)} files")
        return records

    def _scan_directory(self, directory: str, relative_dir: str,
                        records: List[FileRecord], visited: Set[Tuple[int, int]]) -> None:
        """Recursively collect file records under one directory."""
        try:
            dir_stat = os.stat(directory)
            key = (dir_stat.st_dev, dir_stat.st_ino)
            if key in visited:
                self.logger.debug(f"Skipping already visited directory {directory}")
                return
            visited.add(key)

            with os.scandir(directory) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as e:
            raise ScanError(directory, e.strerror or str(e)) from e

        for entry in entries:
            relative_path = f"{relative_dir}/{entry.name}" if relative_dir else entry.name

            if entry.is_symlink() and not self.follow_symlinks:
                self.logger.debug(f"Skipping symbolic link {entry.path}")
                continue

            try:
                entry_stat = entry.stat(follow_symlinks=self.follow_symlinks)
            except OSError as e:
                # Dangling links have no target to stat
                if entry.is_symlink():
                    self.logger.debug(f"Skipping broken symbolic link {entry.path}: {e}")
                    continue
                raise ScanError(entry.path, e.strerror or str(e)) from e

            if stat.S_ISDIR(entry_stat.st_mode):
                self._scan_directory(entry.path, relative_path, records, visited)
            elif stat.S_ISREG(entry_stat.st_mode):
                records.append(FileRecord(
                    path=entry.path,
                    relative_path=relative_path,
                    name=entry.name,
                    kind=FileKind.FILE,
                    modified_time=datetime.fromtimestamp(entry_stat.st_mtime, timezone.utc),
                ))
            else:
                self.logger.debug(f"Skipping special file {entry.path}")
