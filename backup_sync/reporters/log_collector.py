"""Log sink collecting the lines of a backup run."""

import logging
from datetime import datetime
from typing import List


SUMMARY_RULE = "=" * 67


class LogCollector(logging.Handler):
    """Logging handler that keeps every emitted line in memory."""

    def __init__(self, level: int = logging.INFO):
        super().__init__(level)
        self.lines: List[str] = []
        self.setFormatter(logging.Formatter('[%(asctime)s] %(levelname)s : %(message)s',
                                            datefmt='%H:%M:%S'))

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.lines.append(self.format(record))
        except Exception:
            self.handleError(record)

    def summary(self) -> str:
        """Render the collected lines as a mail body."""
        parts = [f"backup-sync Log Summary - {datetime.now().strftime('%a %b %d %Y')}", SUMMARY_RULE]
        parts.extend(self.lines)
        parts.append(SUMMARY_RULE)
        parts.append("Generated by backup-sync")
        parts.append(SUMMARY_RULE)
        return "\n".join(parts)
