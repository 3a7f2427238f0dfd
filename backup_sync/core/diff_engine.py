"""Comparison of source and destination file lists."""

from typing import Dict, Iterable, List

from .models import FileRecord, TransferReason


def compute_pending(source_list: Iterable[FileRecord],
                    destination_list: Iterable[FileRecord]) -> List[FileRecord]:
    """Select the source files that have to be copied to the destination.

    A source file is pending when no destination file shares its relative
    path, or when its modification time is strictly later than that of its
    destination counterpart. The returned list keeps the source order.

    Args:
        source_list: Files found under the backup source.
        destination_list: Files found under the backup destination.

    Returns:
        Pending source records with their ``reason`` set.
    """
    destination_index: Dict[str, FileRecord] = {
        record.relative_path: record
        for record in destination_list
        if record.is_file
    }

    pending = []
    for source_file in source_list:
        if not source_file.is_file:
            continue

        destination_file = destination_index.get(source_file.relative_path)
        if destination_file is None:
            source_file.assign_reason(TransferReason.NOT_FOUND_AT_DESTINATION)
            pending.append(source_file)
        elif source_file.modified_time > destination_file.modified_time:
            source_file.assign_reason(TransferReason.SOURCE_NEWER)
            pending.append(source_file)

    return pending
