"""Dropping root privileges before a backup run."""

import logging
import os
from typing import Optional

from ..core.exceptions import PrivilegeError

try:
    import pwd
except ImportError:  # Windows has no user database
    pwd = None


logger = logging.getLogger(__name__)


def running_as_root() -> bool:
    return hasattr(os, 'geteuid') and os.geteuid() == 0


def drop_privileges(user: Optional[str], log: Optional[logging.Logger] = None) -> bool:
    """Switch to ``user`` when running as root.

    Returns:
        True if the process now runs as ``user``. False when not root,
        when no user is configured, or when the user is unknown; in the
        last case the run continues as root.

    Raises:
        PrivilegeError: If resetting groups, gid or uid fails. The process
            identity may then be half changed, so the run must stop.
    """
    log = log or logger

    if not user or not running_as_root() or pwd is None:
        return False

    log.info(f"Root privileges detected. Trying to drop to {user} user privileges...")

    try:
        entry = pwd.getpwnam(user)
    except KeyError as e:
        log.warning(f"Drop failed ({e}). Proceeding as root (dangerous)")
        return False

    try:
        # Root's supplementary groups must not survive the switch
        os.initgroups(entry.pw_name, entry.pw_gid)
        os.setgid(entry.pw_gid)
        os.setuid(entry.pw_uid)
    except OSError as e:
        raise PrivilegeError(user, e.strerror or str(e)) from e

    log.info("Dropped successfully")
    return True
