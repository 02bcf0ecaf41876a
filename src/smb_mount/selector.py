"""Interactive checkbox selection of mount entries."""

from typing import List, Optional

import questionary

from smb_mount.models import MountEntry


def candidates(entries: List[MountEntry], action: str) -> List[MountEntry]:
    """Entries that *action* ("mount" or "umount") can apply to."""
    if action == "mount":
        return [e for e in entries if not e.is_mounted]
    return [e for e in entries if e.is_mounted]


def _label(entry: MountEntry) -> str:
    return f"{entry.name}  {entry.unc} -> {entry.actual_path}"


def select_entries(entries: List[MountEntry], action: str) -> Optional[List[MountEntry]]:
    """Ask the user which entries to act on.

    Returns the chosen entries in config order, an empty list when there is
    nothing to choose from, or None if the user cancelled.
    """
    pool = candidates(entries, action)
    if not pool:
        return []

    choices = [
        questionary.Choice(title=_label(entry), value=i)
        for i, entry in enumerate(pool)
    ]
    verb = "mount" if action == "mount" else "unmount"
    try:
        selected = questionary.checkbox(
            f"Select shares to {verb}:",
            choices=choices,
        ).ask()
    except (EOFError, KeyboardInterrupt):
        return None

    if selected is None:
        return None
    chosen = set(selected)
    return [entry for i, entry in enumerate(pool) if i in chosen]
