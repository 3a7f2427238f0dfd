"""Run summary reporting."""

from .email_reporter import EmailReporter
from .log_collector import LogCollector

__all__ = ["EmailReporter", "LogCollector"]
