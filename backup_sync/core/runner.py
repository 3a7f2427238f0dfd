"""Main backup run coordinator."""

import logging
import time
from typing import List, Optional

from .diff_engine import compute_pending
from .filters import FilterPipeline
from .models import BackupConfig, BackupRunResult, FileRecord
from .scanner import TreeScanner
from .transfer import TransferExecutor
from .volume import ConfirmErase, VolumeManager
from ..reporters.email_reporter import EmailReporter
from ..reporters.log_collector import LogCollector
from ..utils.formatters import format_duration
from ..utils.privileges import drop_privileges


class BackupRunner:
    """Runs one incremental backup from source to destination volume."""

    def __init__(self, config: BackupConfig, confirm_erase: Optional[ConfirmErase] = None,
                 email_reporter: Optional[EmailReporter] = None,
                 run_as_user: Optional[str] = None,
                 logger: Optional[logging.Logger] = None):
        """Initialize backup runner.

        Args:
            config: Resolved backup configuration.
            confirm_erase: Asked before erasing a non-empty new volume.
            email_reporter: Sends the run summary when given.
            run_as_user: User to switch to when started as root.
            logger: Logger receiving the run's lines.
        """
        self.config = config
        self.confirm_erase = confirm_erase
        self.email_reporter = email_reporter
        self.run_as_user = run_as_user
        self.logger = logger or logging.getLogger(__name__)

        self.scanner = TreeScanner(follow_symlinks=config.follow_symlinks, logger=self.logger)
        self.filters = FilterPipeline(config.backup_date, config.exclude, logger=self.logger)
        self.volume = VolumeManager(config.backup_destination, config.signature_file, logger=self.logger)
        self.executor = TransferExecutor(logger=self.logger)

    def build_pending(self) -> List[FileRecord]:
        """Scan both trees, diff them and apply the filters."""
        source_files = self.scanner.scan(self.config.backup_source)
        destination_files = self.scanner.scan(self.config.backup_destination)

        pending = compute_pending(source_files, destination_files)
        self.logger.info(f"New files found: {len(pending)}")

        return self.filters.apply(pending)

    def run(self) -> BackupRunResult:
        """Run the complete backup.

        Returns:
            BackupRunResult describing the run.

        Raises:
            BackupError: On the first unrecoverable error.
        """
        start_time = time.monotonic()
        collector = LogCollector()
        self.logger.addHandler(collector)
        previous_level = self.logger.level
        # The summary collects INFO lines whatever the console verbosity
        if self.logger.getEffectiveLevel() > logging.INFO:
            self.logger.setLevel(logging.INFO)

        try:
            drop_privileges(self.run_as_user, self.logger)

            state = self.volume.initialize(self.config.force_erase, self.confirm_erase)
            pending = self.build_pending()

            result = BackupRunResult(pending=pending, volume_state=state, test_mode=self.config.test_mode)

            if self.config.test_mode:
                self.logger.info(f"Test mode: {len(pending)} files would be backed up")
            else:
                result.report = self.executor.apply(pending, self.config.backup_destination)

            if self.email_reporter:
                self.logger.info("Sending mail summary...")
                self.email_reporter.send_summary(collector.summary())

            result.duration_seconds = time.monotonic() - start_time
            self.logger.info(f"Total execution time: {format_duration(result.duration_seconds)}")
            result.log_lines = list(collector.lines)
            return result
        finally:
            self.logger.removeHandler(collector)
            self.logger.setLevel(previous_level)
