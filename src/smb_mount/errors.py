"""Error types raised while resolving, probing, mounting and unmounting shares."""

from typing import Optional


class SmbMountError(Exception):
    """Base error for a single mount/unmount operation on one path."""

    def __init__(self, op: str, path: str, message: str):
        super().__init__(message)
        self.op = op
        self.path = path
        self.message = message

    def __str__(self) -> str:
        return f"{self.op} {self.path}: {self.message}"


class PathResolutionError(SmbMountError):
    def __init__(self, path: str, message: str):
        super().__init__("resolve", path, message)


class ProbeError(SmbMountError):
    def __init__(self, path: str, message: str):
        super().__init__("probe", path, message)


class StagingError(SmbMountError):
    def __init__(self, message: str, path: str = ""):
        super().__init__("stage", path, message)


class AlreadyMountedError(SmbMountError):
    def __init__(self, path: str):
        super().__init__("mount", path, "already mounted")


class NotMountedError(SmbMountError):
    def __init__(self, path: str, op: str = "umount"):
        super().__init__(op, path, "not mounted")


class MountExecError(SmbMountError):
    """``mount.cifs`` exited non-zero.  ``output`` holds its combined output."""

    def __init__(self, path: str, message: str, output: str = ""):
        super().__init__("mount", path, message)
        self.output = output

    def __str__(self) -> str:
        text = super().__str__()
        if self.output.strip():
            text += f"\nOutput: {self.output.strip()}"
        return text


class UnmountExecError(MountExecError):
    def __init__(self, path: str, message: str, output: str = ""):
        super().__init__(path, message, output)
        self.op = "umount"


class ElevationUnavailableError(SmbMountError):
    def __init__(self, op: str, path: str = ""):
        super().__init__(
            op, path, "privilege escalation required but sudo is not available",
        )


class ElevationFailedError(SmbMountError):
    def __init__(self, op: str, path: str, returncode: Optional[int] = None):
        message = f"{op} with sudo failed"
        if returncode is not None:
            message += f" (exit {returncode})"
        super().__init__(op, path, message)
        self.returncode = returncode


class BaseDirError(SmbMountError):
    """The base directory cannot be prepared; aborts a whole batch."""

    def __init__(self, path: str, message: str):
        super().__init__("prepare", path, message)


class ConfigError(Exception):
    """Config file missing, unreadable or invalid."""

    def __init__(self, path: str, message: str, errors: Optional[list] = None):
        super().__init__(message)
        self.path = path
        self.message = message
        self.errors = errors or []

    def __str__(self) -> str:
        text = f"config error ({self.path}): {self.message}"
        for err in self.errors:
            text += f"\n  - {err}"
        return text
