"""Data models for mount entries and batch results."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

DEFAULT_SMB_PORT = 445


@dataclass
class MountEntry:
    name: str
    smb_addr: str
    share_name: str
    username: str
    smb_port: int = 0
    password: str = ""
    mount_dir_name: str = ""
    mount_dir_path: str = ""

    # Runtime state, never read from or written to the config file
    actual_path: str = ""
    path_resolved: bool = False
    is_mounted: bool = False

    @property
    def port(self) -> int:
        """SMB port, 445 when unset."""
        return self.smb_port or DEFAULT_SMB_PORT

    @property
    def has_password(self) -> bool:
        return bool(self.password)

    @property
    def unc(self) -> str:
        """E.g. //192.168.1.10:445/Media"""
        return f"//{self.smb_addr}:{self.port}/{self.share_name}"

    @classmethod
    def from_dict(cls, d: dict) -> "MountEntry":
        return cls(
            name=str(d["name"]),
            smb_addr=str(d["smb_addr"]),
            share_name=str(d["share_name"]),
            username=str(d["username"]),
            smb_port=int(d.get("smb_port") or 0),
            password=str(d.get("password") or ""),
            mount_dir_name=str(d.get("mount_dir_name") or ""),
            mount_dir_path=str(d.get("mount_dir_path") or ""),
        )


@dataclass
class MountInfo:
    """One row of the kernel mount table."""
    source: str
    mount_point: str
    fstype: str
    options: List[str] = field(default_factory=list)


class Outcome(Enum):
    MOUNTED = "mounted"
    UNMOUNTED = "unmounted"
    ALREADY_MOUNTED = "already mounted"
    ALREADY_UNMOUNTED = "already unmounted"
    FAILED = "failed"

    @property
    def ok(self) -> bool:
        return self is not Outcome.FAILED

    @property
    def icon(self) -> str:
        return {
            Outcome.MOUNTED: "[green]\u2714[/green]",
            Outcome.UNMOUNTED: "[green]\u2714[/green]",
            Outcome.ALREADY_MOUNTED: "[dim]\u2714[/dim]",
            Outcome.ALREADY_UNMOUNTED: "[dim]\u2714[/dim]",
            Outcome.FAILED: "[red]\u2718[/red]",
        }[self]


@dataclass
class EntryOutcome:
    name: str
    path: str
    outcome: Outcome
    reason: str = ""
    elevated: bool = False

    @property
    def ok(self) -> bool:
        return self.outcome.ok

    def to_dict(self) -> dict:
        d = {
            "name": self.name,
            "path": self.path,
            "outcome": self.outcome.value,
        }
        if self.reason:
            d["reason"] = self.reason
        if self.elevated:
            d["elevated"] = True
        return d


@dataclass
class BatchResult:
    """Ordered per-entry outcomes of one mount_many/unmount_many call."""
    outcomes: List[EntryOutcome] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return sum(1 for o in self.outcomes if o.ok)

    @property
    def failed(self) -> int:
        return len(self.outcomes) - self.succeeded

    @property
    def ok(self) -> bool:
        """Partial success counts as success; only a total failure is not ok."""
        return self.succeeded > 0 or self.failed == 0

    def get(self, name: str) -> Optional[EntryOutcome]:
        for o in self.outcomes:
            if o.name == name:
                return o
        return None

    def to_dict(self) -> dict:
        return {
            "succeeded": self.succeeded,
            "failed": self.failed,
            "ok": self.ok,
            "outcomes": [o.to_dict() for o in self.outcomes],
        }
