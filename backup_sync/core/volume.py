"""Destination volume detection, erasing and marking."""

import logging
import os
from datetime import datetime
from typing import Callable, Optional

from .exceptions import EraseError, MarkError, classify_os_error
from .models import DEFAULT_SIGNATURE_FILE, VolumeState


ConfirmErase = Callable[[str], bool]


class VolumeManager:
    """Tracks whether a destination volume has been initialized for backups.

    A volume is recognised by a signature file at its root. Only the
    presence of that file matters; its content is informational.
    """

    def __init__(self, root: str, signature_file: str = DEFAULT_SIGNATURE_FILE,
                 logger: Optional[logging.Logger] = None):
        """Initialize volume manager.

        Args:
            root: Root directory of the destination volume.
            signature_file: Name of the marker file under ``root``.
            logger: Logger receiving lifecycle lines.
        """
        self.root = root
        self.signature_file = signature_file
        self.logger = logger or logging.getLogger(__name__)
        self.state = VolumeState.UNKNOWN

    @property
    def signature_path(self) -> str:
        return os.path.join(self.root, self.signature_file)

    def is_valid(self) -> bool:
        """Check whether the volume carries the signature file."""
        return os.path.isfile(self.signature_path)

    def is_empty(self) -> bool:
        """Check whether the volume root has no entries at all."""
        with os.scandir(self.root) as it:
            return next(it, None) is None

    def initialize(self, force_erase: bool = False,
                   confirm_erase: Optional[ConfirmErase] = None) -> VolumeState:
        """Resolve the volume state, erasing and marking a new volume.

        A new volume is erased unconditionally when ``force_erase`` is set.
        Otherwise a non-empty new volume is only erased when
        ``confirm_erase`` returns True. The signature is written once the
        erase decision is final, whatever it was.

        Args:
            force_erase: Erase a new volume without asking.
            confirm_erase: Called with the volume root, returns the user's
                decision. A missing callback counts as a refusal.

        Returns:
            VolumeState.CONFIRMED.

        Raises:
            EraseError: If erasing fails.
            MarkError: If writing the signature fails.
        """
        if self.is_valid():
            self.logger.info("Valid disk detected")
            self.state = VolumeState.CONFIRMED
            return self.state

        self.logger.info("New disk detected")

        if force_erase:
            self.erase()
        elif not self._is_empty_for_erase():
            self.logger.warning("WARNING: Disk is not empty! Do you want to erase the disk?")
            if confirm_erase is not None and confirm_erase(self.root):
                self.erase()
            else:
                self.logger.info("Disk has not been erased")

        self.mark()
        self.state = VolumeState.CONFIRMED
        return self.state

    def _is_empty_for_erase(self) -> bool:
        try:
            return self.is_empty()
        except OSError as e:
            raise EraseError(self.root, classify_os_error(e), e.strerror) from e

    def erase(self) -> None:
        """Delete every file below the volume root. Directories remain.

        Raises:
            EraseError: If a file cannot be listed or deleted.
        """
        try:
            self._clean_dir(self.root)
        except OSError as e:
            self.logger.error("Error erasing disk")
            raise EraseError(self.root, classify_os_error(e), f"{e.filename}: {e.strerror}") from e

        self.logger.info("Disk has been erased")

    def _clean_dir(self, directory: str) -> None:
        with os.scandir(directory) as it:
            entries = list(it)

        for entry in entries:
            if entry.is_dir(follow_symlinks=False):
                self._clean_dir(entry.path)
            else:
                os.unlink(entry.path)

    def mark(self) -> None:
        """Write the signature file.

        Raises:
            MarkError: If the file cannot be written.
        """
        content = (
            f"backup-sync - disk cleared on {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}\n"
            "Do not remove this file, it is used by backup-sync to verify the disk\n"
        )

        try:
            with open(self.signature_path, 'w', encoding='utf-8') as f:
                f.write(content)
        except OSError as e:
            self.logger.error("Error marking disk")
            raise MarkError(self.root, classify_os_error(e), e.strerror) from e

        self.logger.info(f"Disk has been marked ({self.signature_file})")
