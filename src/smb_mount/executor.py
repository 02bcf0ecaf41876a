"""Mount and unmount SMB shares with mount.cifs / umount."""

import logging
import os
from typing import List, Optional

from smb_mount.credentials import staged_credentials
from smb_mount.errors import (
    AlreadyMountedError,
    BaseDirError,
    ElevationFailedError,
    MountExecError,
    NotMountedError,
    PathResolutionError,
    SmbMountError,
    UnmountExecError,
)
from smb_mount.models import MountEntry
from smb_mount.privilege import (
    CommandExecutor,
    CommandResult,
    DirectExecutor,
    run_elevated,
)
from smb_mount.status import is_mounted

_log = logging.getLogger("smb_mount")

MOUNT_HELPER = "mount.cifs"
UMOUNT_HELPER = "umount"
FILE_MODE = "0755"
DIR_MODE = "0755"

_DETACH_FLAGS = {"lazy": "-l", "force": "-f"}


# ---------------------------------------------------------------------------
# Command builders (no I/O)
# ---------------------------------------------------------------------------

def build_mount_options(creds_path: str, uid: Optional[int] = None,
                        gid: Optional[int] = None) -> str:
    """Return the ``-o`` option string; uid/gid default to the invoking user."""
    uid = os.getuid() if uid is None else uid
    gid = os.getgid() if gid is None else gid
    return (
        f"credentials={creds_path}"
        f",file_mode={FILE_MODE}"
        f",dir_mode={DIR_MODE}"
        f",uid={uid}"
        f",gid={gid}"
    )


def build_mount_command(entry: MountEntry, creds_path: str) -> List[str]:
    """``mount.cifs //host:port/share /mount/path -o options``"""
    return [
        MOUNT_HELPER,
        entry.unc,
        entry.actual_path,
        "-o", build_mount_options(creds_path),
    ]


def build_umount_command(path: str, detach: Optional[str] = None) -> List[str]:
    """``umount [-l|-f] path``; *detach* is ``"lazy"``, ``"force"`` or None."""
    if detach is None:
        return [UMOUNT_HELPER, path]
    return [UMOUNT_HELPER, _DETACH_FLAGS[detach], path]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _raise_for_result(result: CommandResult, executor: CommandExecutor,
                      op: str, path: str, message: str) -> None:
    if result.success:
        return
    if executor.elevated:
        raise ElevationFailedError(op, path, result.returncode)
    error_cls = MountExecError if op == "mount" else UnmountExecError
    raise error_cls(path, f"{message} (exit {result.returncode})", result.output)


def _ensure_mount_dir(path: str, executor: CommandExecutor) -> None:
    try:
        os.makedirs(path, mode=0o755, exist_ok=True)
    except PermissionError as e:
        if not executor.elevated:
            raise MountExecError(path, f"failed to create mount directory: {e}") from e
        run_elevated(["mkdir", "-p", path], op="mount", path=path)
    except OSError as e:
        raise MountExecError(path, f"failed to create mount directory: {e}") from e


def ensure_base_dir(base_dir: str) -> None:
    """Create the base directory if needed.

    Raises :class:`BaseDirError` if it cannot be created or is not a directory.
    """
    if os.path.exists(base_dir) and not os.path.isdir(base_dir):
        raise BaseDirError(base_dir, "base_dir exists but is not a directory")
    try:
        os.makedirs(base_dir, mode=0o755, exist_ok=True)
    except OSError as e:
        raise BaseDirError(base_dir, f"failed to create base directory: {e}") from e


# ---------------------------------------------------------------------------
# Mount / unmount
# ---------------------------------------------------------------------------

def mount(entry: MountEntry, executor: Optional[CommandExecutor] = None) -> None:
    """Mount a resolved entry.

    Raises :class:`AlreadyMountedError` before touching anything if the path
    is already a mount point.  The credentials file is removed again before
    this returns, whatever the outcome.
    """
    executor = executor or DirectExecutor()
    if not entry.path_resolved:
        raise PathResolutionError(entry.name, "mount path has not been resolved")
    path = entry.actual_path

    if is_mounted(path):
        raise AlreadyMountedError(path)

    _ensure_mount_dir(path, executor)

    _log.info("mount %s: %s -> %s%s", entry.name, entry.unc, path,
              " (sudo)" if executor.elevated else "")
    with staged_credentials(entry.username, entry.password) as creds_path:
        result = executor.run(build_mount_command(entry, creds_path))

    _raise_for_result(result, executor, "mount", path, "mount failed")
    entry.is_mounted = True


def unmount(path: str, executor: Optional[CommandExecutor] = None) -> None:
    """Unmount *path*.  Raises :class:`NotMountedError` if it isn't mounted."""
    executor = executor or DirectExecutor()
    if not is_mounted(path):
        raise NotMountedError(path)

    _log.info("umount %s%s", path, " (sudo)" if executor.elevated else "")
    result = executor.run(build_umount_command(path))
    _raise_for_result(result, executor, "umount", path, "umount failed")


def force_unmount(path: str, executor: Optional[CommandExecutor] = None) -> None:
    """Lazy-detach *path*; fall back to a forced detach only if that fails."""
    executor = executor or DirectExecutor()
    if not is_mounted(path):
        raise NotMountedError(path)

    _log.info("umount -l %s", path)
    result = executor.run(build_umount_command(path, "lazy"))
    if result.success:
        return

    _log.warning("lazy unmount of %s failed (exit %d), forcing",
                 path, result.returncode)
    result = executor.run(build_umount_command(path, "force"))
    _raise_for_result(result, executor, "umount", path, "force unmount failed")


def unmount_entry(entry: MountEntry, executor: Optional[CommandExecutor] = None,
                  force: bool = False) -> None:
    """Unmount a resolved entry and clear its mounted flag."""
    if force:
        force_unmount(entry.actual_path, executor)
    else:
        unmount(entry.actual_path, executor)
    entry.is_mounted = False


def cleanup_mount_point(path: str, executor: Optional[CommandExecutor] = None) -> bool:
    """Remove an empty, unmounted mount directory.

    Returns True if the directory was removed.  A non-empty directory is
    left alone.
    """
    executor = executor or DirectExecutor()
    if is_mounted(path):
        raise SmbMountError("cleanup", path, "cannot cleanup: still mounted")
    if not os.path.isdir(path):
        return False
    try:
        os.rmdir(path)
    except PermissionError:
        if not executor.elevated:
            _log.info("cleanup %s: permission denied, leaving directory", path)
            return False
        run_elevated(["rmdir", path], op="cleanup", path=path)
    except OSError as e:
        _log.info("cleanup %s: %s", path, e)
        return False
    return True


def unmount_and_cleanup(entry: MountEntry, executor: Optional[CommandExecutor] = None,
                        force: bool = False) -> bool:
    """Unmount the entry, then remove its mount directory if it is empty."""
    unmount_entry(entry, executor, force=force)
    try:
        return cleanup_mount_point(entry.actual_path, executor)
    except SmbMountError as e:
        _log.warning("cleanup after unmount of %s failed: %s", entry.name, e)
        return False
