"""Privilege detection and command execution strategies (direct or via sudo)."""

import logging
import os
import shutil
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List

from smb_mount.errors import ElevationFailedError, ElevationUnavailableError

_log = logging.getLogger("smb_mount")

SUDO = "sudo"
_SBIN_DIRS = ("/usr/sbin", "/sbin")


def is_root() -> bool:
    return os.geteuid() == 0


def has_sudo() -> bool:
    return shutil.which(SUDO) is not None


def needs_privilege() -> bool:
    """True whenever the process is not running as root."""
    return not is_root()


def can_sudo() -> bool:
    """Return True if the current user may use sudo.

    ``sudo -n -l`` exits 0 when no password is needed and 1 when one is.
    """
    if is_root():
        return True
    if not has_sudo():
        return False
    proc = subprocess.run([SUDO, "-n", "-l"], capture_output=True)
    return proc.returncode in (0, 1)


def _find_tool(name: str) -> bool:
    if shutil.which(name):
        return True
    # Non-root PATH often lacks the sbin dirs
    return any(os.path.isfile(os.path.join(d, name)) for d in _SBIN_DIRS)


def check_mount_tools() -> List[str]:
    """Return the names of missing mount helpers (empty list = all present)."""
    return [tool for tool in ("mount.cifs", "umount") if not _find_tool(tool)]


# ---------------------------------------------------------------------------
# Execution strategies
# ---------------------------------------------------------------------------

@dataclass
class CommandResult:
    returncode: int
    output: str = ""

    @property
    def success(self) -> bool:
        return self.returncode == 0


class CommandExecutor(ABC):
    """Runs a helper command and reports its exit status."""

    elevated = False

    @abstractmethod
    def run(self, argv: List[str]) -> CommandResult:
        ...


class DirectExecutor(CommandExecutor):
    """Runs the command as the current user and captures combined output."""

    def run(self, argv: List[str]) -> CommandResult:
        _log.debug("exec: %s", " ".join(argv))
        try:
            proc = subprocess.run(
                argv, stdout=subprocess.PIPE, stderr=subprocess.STDOUT, text=True,
            )
        except OSError as e:
            returncode = 127 if isinstance(e, FileNotFoundError) else 126
            return CommandResult(returncode=returncode, output=str(e))
        return CommandResult(returncode=proc.returncode, output=proc.stdout or "")


class ElevatedExecutor(CommandExecutor):
    """Runs the command through ``sudo -S --``.

    stdin, stdout and stderr are inherited so sudo can prompt for a password
    on the terminal and the helper's output reaches the user unmodified.
    Nothing is captured.
    """

    elevated = True

    def wrap(self, argv: List[str]) -> List[str]:
        return [SUDO, "-S", "--"] + list(argv)

    def run(self, argv: List[str]) -> CommandResult:
        cmd = self.wrap(argv)
        _log.info("exec (sudo): %s", " ".join(argv))
        proc = subprocess.run(cmd)
        return CommandResult(returncode=proc.returncode)


def select_executor(elevate: bool = False, op: str = "exec",
                    path: str = "") -> CommandExecutor:
    """Pick the execution strategy for one operation.

    Root never needs sudo.  Elevation without sudo on the system raises
    :class:`ElevationUnavailableError`.
    """
    if not elevate or is_root():
        return DirectExecutor()
    if not has_sudo():
        raise ElevationUnavailableError(op, path)
    return ElevatedExecutor()


def run_elevated(argv: List[str], op: str = "exec", path: str = "") -> CommandResult:
    """Run *argv* with root rights, once.  Non-zero exit raises."""
    executor = select_executor(elevate=True, op=op, path=path)
    result = executor.run(argv)
    if not result.success:
        raise ElevationFailedError(op, path, result.returncode)
    return result
