"""Live mount status from the kernel mount table."""

import logging
import os
import re
from typing import Iterable, List, Optional

from smb_mount.errors import ProbeError
from smb_mount.models import MountEntry, MountInfo

_log = logging.getLogger("smb_mount")

MOUNTS_FILE = "/proc/self/mounts"

_OCTAL_ESC_RE = re.compile(r"\\([0-7]{3})")


def _decode_mount_path(raw: str) -> str:
    """Decode octal escapes in /proc mount paths (e.g. ``\\040`` -> space)."""
    return _OCTAL_ESC_RE.sub(lambda m: chr(int(m.group(1), 8)), raw)


def read_mount_table() -> List[MountInfo]:
    """Parse the mount table.  Raises :class:`ProbeError` if it cannot be read."""
    try:
        with open(MOUNTS_FILE) as f:
            lines = f.readlines()
    except OSError as e:
        raise ProbeError(MOUNTS_FILE, f"failed to read mount table: {e}") from e

    table = []
    for line in lines:
        parts = line.split()
        if len(parts) < 3:
            continue
        options = parts[3].split(",") if len(parts) > 3 else []
        table.append(MountInfo(
            source=_decode_mount_path(parts[0]),
            mount_point=_decode_mount_path(parts[1]),
            fstype=parts[2],
            options=options,
        ))
    return table


def _candidates(path: str) -> set:
    return {os.path.abspath(path), os.path.realpath(path)}


def is_mounted(path: str) -> bool:
    """Return True if *path* is an active mount point.

    A path that does not exist is simply not mounted.
    """
    if not os.path.exists(path):
        return False
    wanted = _candidates(path)
    return any(m.mount_point in wanted for m in read_mount_table())


def mount_info(path: str) -> Optional[MountInfo]:
    """Return the mount-table row for *path*, or None if not mounted.

    With stacked mounts the last (topmost) row wins.
    """
    wanted = _candidates(path)
    found = None
    for m in read_mount_table():
        if m.mount_point in wanted:
            found = m
    return found


def refresh_all(entries: Iterable[MountEntry]) -> None:
    """Update ``is_mounted`` on every entry.

    A probe failure is logged and the entry is treated as unmounted.
    """
    for entry in entries:
        try:
            entry.is_mounted = is_mounted(entry.actual_path)
        except ProbeError as e:
            _log.warning("failed to check status for %s: %s", entry.name, e)
            entry.is_mounted = False
