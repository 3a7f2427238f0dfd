"""Formatting utilities for backup output."""

import json
from datetime import datetime
from typing import List

from ..core.models import FileRecord


def format_date(dt: datetime, short: bool = False) -> str:
    """Format datetime for display.

    Args:
        dt: Datetime to format.
        short: If True, use short format.

    Returns:
        Formatted date string.
    """
    if dt.tzinfo is not None:
        dt = dt.astimezone()

    if short:
        return dt.strftime('%Y-%m-%d %H:%M')
    else:
        return dt.strftime('%Y-%m-%d %H:%M:%S')


def pluralize(count: int, singular: str, plural: str = None) -> str:
    """Return ``count`` followed by the matching noun form."""
    if count == 1:
        return f"{count} {singular}"
    return f"{count} {plural or singular + 's'}"


def format_duration(seconds: float) -> str:
    """Format an execution time, in milliseconds below one second."""
    if seconds < 1:
        return f"{int(seconds * 1000)}ms"
    return f"{seconds:.1f}s"


def format_pending_entry(record: FileRecord) -> str:
    """One preview line: relative path, modification date and reason."""
    reason = record.reason.value if record.reason else "-"
    return f"{record.relative_path}  ({format_date(record.modified_time)})  {reason}"


def format_pending_text(pending: List[FileRecord]) -> str:
    """Render the test mode preview of a pending list."""
    if not pending:
        return "There are no files to backup!"

    lines = ["Following files are different on source:", ""]
    lines.extend(f"  {format_pending_entry(record)}" for record in pending)
    lines.append("")
    lines.append("Running in test mode.")
    lines.append("This is only a preview: files will not be backed up!")
    return "\n".join(lines)


def format_pending_json(pending: List[FileRecord]) -> str:
    """Render a pending list as JSON."""
    return json.dumps([record.to_dict() for record in pending], indent=2)
