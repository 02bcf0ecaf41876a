"""Mount path resolution for configured entries.

Precedence is strict: ``mount_dir_path`` > ``base_dir``/``mount_dir_name``
> ``base_dir``/``name``.  Exactly one branch applies per entry.

Resolution happens once per entry instance.  After the first call the
entry keeps its ``actual_path`` and later calls return it unchanged, even
with a different ``base_dir``.  Use :func:`force_resolve` to recompute.
"""

import logging
import os
from typing import Iterable, List

from smb_mount.errors import PathResolutionError
from smb_mount.models import MountEntry

_log = logging.getLogger("smb_mount")


def expand_path(path: str) -> str:
    """Replace a leading ``~`` with the invoking user's home and return the
    absolute, normalized path.

    ``~name`` is not a lookup of user *name*: the ``~`` alone is replaced.
    Does not touch the filesystem.
    """
    if path.startswith("~"):
        home = os.path.expanduser("~")
        if home.startswith("~"):
            raise PathResolutionError(path, "failed to expand ~: no home directory")
        path = home + path[1:]
    return os.path.abspath(path)


def _compute(entry: MountEntry, base_dir: str) -> str:
    if entry.mount_dir_path:
        return expand_path(entry.mount_dir_path)
    if not base_dir:
        raise PathResolutionError(entry.name, "base_dir must not be empty")
    dir_name = entry.mount_dir_name or entry.name
    return os.path.join(expand_path(base_dir), dir_name)


def resolve(entry: MountEntry, base_dir: str) -> str:
    """Return the entry's mount path, computing it on the first call only."""
    if entry.path_resolved:
        _log.debug("resolve %s: already resolved to %s (base_dir %s ignored)",
                   entry.name, entry.actual_path, base_dir)
        return entry.actual_path

    entry.actual_path = _compute(entry, base_dir)
    entry.path_resolved = True
    return entry.actual_path


def force_resolve(entry: MountEntry, base_dir: str) -> str:
    """Discard any cached path and resolve again against *base_dir*."""
    entry.path_resolved = False
    entry.actual_path = ""
    return resolve(entry, base_dir)


def resolve_all(entries: Iterable[MountEntry], base_dir: str) -> List[str]:
    """Resolve every entry in order and return their paths."""
    return [resolve(entry, base_dir) for entry in entries]
