"""Applies a pending list to the backup destination."""

import logging
import os
import shutil
from typing import List, Optional

from .exceptions import TransferError, classify_os_error
from .models import FileRecord, TransferReport
from ..utils.formatters import pluralize


class TransferExecutor:
    """Copies pending files while preserving their timestamps."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    def apply(self, pending: List[FileRecord], destination_root: str) -> TransferReport:
        """Copy every pending file to the destination, in list order.

        Existing destination files are deleted first and counted as
        overwrites. Access and modification times are copied from the source.
        Files copied before a failure are left in place.

        Args:
            pending: Pending records from the diff engine and filters.
            destination_root: Root directory of the backup destination.

        Returns:
            TransferReport with total and overwrite counts.

        Raises:
            TransferError: If stat, delete or copy fails for a file.
        """
        report = TransferReport()

        if not pending:
            self.logger.info("No files to backup!")
            return report

        self.logger.info("Performing backup...")

        for record in pending:
            target = os.path.join(destination_root, *record.relative_path.split('/'))
            try:
                source_stat = os.stat(record.path)

                if os.path.lexists(target):
                    os.unlink(target)
                    report.overwrite_count += 1

                os.makedirs(os.path.dirname(target), exist_ok=True)
                shutil.copyfile(record.path, target)
                os.utime(target, ns=(source_stat.st_atime_ns, source_stat.st_mtime_ns))
            except OSError as e:
                raise TransferError(record.relative_path, str(e), classify_os_error(e)) from e

            report.total_count += 1
            self.logger.debug(f"Copied {record.relative_path}")

        self.logger.info("Backup complete!")
        self.logger.info(f"Backed up {pluralize(report.total_count, 'file')} (Updated: {report.overwrite_count})")
        return report
