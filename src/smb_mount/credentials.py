"""Temporary credentials files for mount.cifs.

The file is created in the temp directory, restricted to ``0600`` before
anything is written, and removed again as soon as the helper has run::

    with staged_credentials(entry.username, entry.password) as creds_path:
        subprocess.run(["mount.cifs", ..., "-o", f"credentials={creds_path}"])
"""

import logging
import os
import tempfile
from contextlib import contextmanager
from typing import Iterator

from smb_mount.errors import StagingError

_log = logging.getLogger("smb_mount")

CREDS_PREFIX = "smb_mount_creds_"
CREDS_SUFFIX = ".txt"


def generate_credentials_file(username: str, password: str, domain: str = "") -> str:
    """Return the content of a Samba credentials file."""
    return f"username={username}\npassword={password}\ndomain={domain}\n"


def _discard(path: str) -> None:
    try:
        os.remove(path)
    except OSError:
        pass


def stage(username: str, password: str, domain: str = "") -> str:
    """Write a private credentials file and return its path.

    Raises :class:`StagingError` if the file cannot be created, restricted
    or written.  A partially written file is removed first.
    """
    try:
        fd, path = tempfile.mkstemp(prefix=CREDS_PREFIX, suffix=CREDS_SUFFIX)
    except OSError as e:
        raise StagingError(f"failed to create credentials file: {e}") from e

    try:
        os.fchmod(fd, 0o600)
    except OSError as e:
        os.close(fd)
        _discard(path)
        raise StagingError(
            f"failed to set credentials file permissions: {e}", path,
        ) from e

    try:
        with os.fdopen(fd, "w") as f:
            f.write(generate_credentials_file(username, password, domain))
    except Exception as e:
        _discard(path)
        raise StagingError(f"failed to write credentials: {e}", path) from e

    return path


def release(path: str) -> None:
    """Remove a staged credentials file.  Already-removed files are fine."""
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
    except OSError as e:
        _log.warning("failed to remove credentials file %s: %s", path, e)


@contextmanager
def staged_credentials(username: str, password: str, domain: str = "") -> Iterator[str]:
    """Stage credentials for the duration of a ``with`` block."""
    path = stage(username, password, domain)
    try:
        yield path
    finally:
        release(path)
