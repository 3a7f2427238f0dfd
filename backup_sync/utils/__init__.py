"""Utility modules for backup runs."""

from .formatters import format_date, format_duration, format_pending_json, format_pending_text, pluralize
from .privileges import drop_privileges

__all__ = ["format_date", "format_duration", "format_pending_json", "format_pending_text",
           "pluralize", "drop_privileges"]
