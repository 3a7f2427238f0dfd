"""Filters narrowing the pending transfer list."""

import logging
import re
from datetime import date, datetime
from typing import List, Optional, Union

from .exceptions import ConfigurationError
from .models import FileRecord


DATE_FORMATS = [
    '%Y-%m-%d',
    '%Y-%m-%d %H:%M',
    '%Y-%m-%d %H:%M:%S',
    '%Y/%m/%d',
    '%d.%m.%Y',
]


def parse_min_date(value: Union[str, date, datetime, None]) -> Optional[datetime]:
    """Turn a configured date threshold into a timezone-aware datetime.

    Blank values mean "no threshold" and yield None. Values without an
    offset are read as local time.

    Raises:
        ConfigurationError: If the value cannot be read as a date.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return _as_instant(value)
    if isinstance(value, date):
        return _as_instant(datetime(value.year, value.month, value.day))

    text = str(value).strip()
    if not text:
        return None

    try:
        return _as_instant(datetime.fromisoformat(text))
    except ValueError:
        pass

    for fmt in DATE_FORMATS:
        try:
            return _as_instant(datetime.strptime(text, fmt))
        except ValueError:
            continue

    raise ConfigurationError(f"Invalid backup date: {value!r}")


def _as_instant(value: datetime) -> datetime:
    # Scanned modification times are UTC instants
    if value.tzinfo is not None:
        return value
    try:
        return value.astimezone()
    except (OverflowError, OSError) as e:
        raise ConfigurationError(f"Backup date out of range: {value}") from e


def compile_exclude(pattern: Union[str, re.Pattern, None]) -> Optional[re.Pattern]:
    """Compile an exclusion pattern. Blank patterns yield None.

    Raises:
        ConfigurationError: If the pattern is not a valid regular expression.
    """
    if pattern is None or isinstance(pattern, re.Pattern):
        return pattern

    if not str(pattern):
        return None

    try:
        return re.compile(str(pattern))
    except re.error as e:
        raise ConfigurationError(f"Invalid exclude pattern {pattern!r}: {e}") from e


def filter_by_min_date(records: List[FileRecord], threshold: Optional[datetime]) -> List[FileRecord]:
    """Keep records modified at or after ``threshold``.

    A threshold without timezone is read as local time.
    """
    threshold = parse_min_date(threshold)
    if threshold is None:
        return records
    return [record for record in records if record.modified_time >= threshold]


def filter_by_exclude(records: List[FileRecord],
                      pattern: Union[str, re.Pattern, None]) -> List[FileRecord]:
    """Drop records whose name matches ``pattern``."""
    compiled = compile_exclude(pattern)
    if compiled is None:
        return records
    return [record for record in records if compiled.search(record.name) is None]


class FilterPipeline:
    """Applies the date filter and then the exclude filter."""

    def __init__(self, backup_date: Optional[datetime] = None,
                 exclude: Union[str, re.Pattern, None] = None,
                 logger: Optional[logging.Logger] = None):
        self.backup_date = parse_min_date(backup_date)
        # Compiled up front so a bad pattern fails before any filtering
        self.exclude = compile_exclude(exclude)
        self.logger = logger or logging.getLogger(__name__)

    def apply(self, records: List[FileRecord]) -> List[FileRecord]:
        if records:
            records = filter_by_min_date(records, self.backup_date)
            self.logger.info(f"Files remaining after date filter: {len(records)}")

        if records:
            records = filter_by_exclude(records, self.exclude)
            self.logger.info(f"Files remaining after exclude filter: {len(records)}")

        return records
