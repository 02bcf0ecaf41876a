"""Sequential batch mount/unmount with per-entry outcomes.

Entries are processed strictly in order, one at a time: sudo and the
password prompt share the terminal, so running entries in parallel would
interleave prompts.  A failing entry never stops the batch.
"""

import logging
from typing import Callable, Dict, Iterable, List, Optional

from smb_mount.errors import (
    AlreadyMountedError,
    BaseDirError,
    MountExecError,
    NotMountedError,
    PathResolutionError,
    SmbMountError,
    UnmountExecError,
)
from smb_mount.executor import ensure_base_dir, mount, unmount_and_cleanup, unmount_entry
from smb_mount.models import BatchResult, EntryOutcome, MountEntry, Outcome
from smb_mount.privilege import CommandExecutor, DirectExecutor, needs_privilege, select_executor
from smb_mount.resolver import expand_path, resolve
from smb_mount.status import refresh_all

_log = logging.getLogger("smb_mount")

PasswordProvider = Callable[[MountEntry], str]
ProgressCallback = Callable[[int, int, MountEntry], None]


def _run_with_fallback(entry: MountEntry, op: str,
                       action: Callable[[CommandExecutor], None]) -> bool:
    """Run *action* directly, retrying once through sudo on a helper failure.

    Returns True if the sudo retry was used.  Only a failing helper is
    retried, and only when the process is not root.
    """
    try:
        action(DirectExecutor())
        return False
    except (MountExecError, UnmountExecError) as e:
        if not needs_privilege():
            raise
        _log.info("%s %s: retrying with sudo after: %s", op, entry.name, e.message)

    executor = select_executor(elevate=True, op=op, path=entry.actual_path)
    action(executor)
    return True


def _resolve_entries(entries: List[MountEntry], base_dir: str) -> Dict[int, str]:
    """Resolve paths.  Returns failure reasons keyed by ``id(entry)``."""
    failures = {}
    for entry in entries:
        try:
            resolve(entry, base_dir)
        except PathResolutionError as e:
            _log.warning("resolve %s failed: %s", entry.name, e)
            failures[id(entry)] = str(e)
    return failures


def mount_many(entries: Iterable[MountEntry], base_dir: str,
               password_provider: Optional[PasswordProvider] = None,
               on_progress: Optional[ProgressCallback] = None) -> BatchResult:
    """Mount *entries* in order and return one outcome per entry.

    Raises :class:`BaseDirError` before any entry is touched if the base
    directory cannot be prepared.
    """
    entries = list(entries)
    result = BatchResult()
    if not entries:
        return result

    if not base_dir:
        raise BaseDirError(base_dir, "base_dir must not be empty")
    try:
        ensure_base_dir(expand_path(base_dir))
    except PathResolutionError as e:
        raise BaseDirError(base_dir, e.message) from e

    unresolved = _resolve_entries(entries, base_dir)
    refresh_all(e for e in entries if id(e) not in unresolved)

    total = len(entries)
    for i, entry in enumerate(entries, 1):
        if on_progress:
            on_progress(i, total, entry)

        if id(entry) in unresolved:
            result.outcomes.append(EntryOutcome(
                name=entry.name, path="", outcome=Outcome.FAILED,
                reason=unresolved[id(entry)],
            ))
            continue

        if entry.is_mounted:
            result.outcomes.append(EntryOutcome(
                name=entry.name, path=entry.actual_path,
                outcome=Outcome.ALREADY_MOUNTED,
            ))
            continue

        if not entry.has_password and password_provider is not None:
            try:
                entry.password = password_provider(entry)
            except (EOFError, OSError) as e:
                result.outcomes.append(EntryOutcome(
                    name=entry.name, path=entry.actual_path,
                    outcome=Outcome.FAILED, reason=f"failed to read password: {e}",
                ))
                continue

        result.outcomes.append(_mount_one(entry))

    _log.info("mount complete: %d succeeded, %d failed",
              result.succeeded, result.failed)
    return result


def _mount_one(entry: MountEntry) -> EntryOutcome:
    try:
        elevated = _run_with_fallback(entry, "mount", lambda ex: mount(entry, ex))
    except AlreadyMountedError:
        entry.is_mounted = True
        return EntryOutcome(name=entry.name, path=entry.actual_path,
                            outcome=Outcome.ALREADY_MOUNTED)
    except SmbMountError as e:
        _log.error("mount %s failed: %s", entry.name, e)
        return EntryOutcome(name=entry.name, path=entry.actual_path,
                            outcome=Outcome.FAILED, reason=str(e))
    entry.is_mounted = True
    return EntryOutcome(name=entry.name, path=entry.actual_path,
                        outcome=Outcome.MOUNTED, elevated=elevated)


def unmount_many(entries: Iterable[MountEntry], base_dir: str = "",
                 force: bool = False, cleanup: bool = False,
                 on_progress: Optional[ProgressCallback] = None) -> BatchResult:
    """Unmount *entries* in order and return one outcome per entry.

    *force* uses the lazy-then-forced detach.  *cleanup* removes each empty
    mount directory afterwards.
    """
    entries = list(entries)
    result = BatchResult()
    if not entries:
        return result

    unresolved = _resolve_entries(entries, base_dir)
    refresh_all(e for e in entries if id(e) not in unresolved)

    total = len(entries)
    for i, entry in enumerate(entries, 1):
        if on_progress:
            on_progress(i, total, entry)

        if id(entry) in unresolved:
            result.outcomes.append(EntryOutcome(
                name=entry.name, path="", outcome=Outcome.FAILED,
                reason=unresolved[id(entry)],
            ))
            continue

        if not entry.is_mounted:
            result.outcomes.append(EntryOutcome(
                name=entry.name, path=entry.actual_path,
                outcome=Outcome.ALREADY_UNMOUNTED,
            ))
            continue

        result.outcomes.append(_unmount_one(entry, force, cleanup))

    _log.info("unmount complete: %d succeeded, %d failed",
              result.succeeded, result.failed)
    return result


def _unmount_one(entry: MountEntry, force: bool, cleanup: bool) -> EntryOutcome:
    if cleanup:
        def action(ex):
            unmount_and_cleanup(entry, ex, force=force)
    else:
        def action(ex):
            unmount_entry(entry, ex, force=force)

    try:
        elevated = _run_with_fallback(entry, "umount", action)
    except NotMountedError:
        entry.is_mounted = False
        return EntryOutcome(name=entry.name, path=entry.actual_path,
                            outcome=Outcome.ALREADY_UNMOUNTED)
    except SmbMountError as e:
        _log.error("umount %s failed: %s", entry.name, e)
        return EntryOutcome(name=entry.name, path=entry.actual_path,
                            outcome=Outcome.FAILED, reason=str(e))
    entry.is_mounted = False
    return EntryOutcome(name=entry.name, path=entry.actual_path,
                        outcome=Outcome.UNMOUNTED, elevated=elevated)
