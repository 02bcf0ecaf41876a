"""Rotating file logger for smb_mount, keeps max ~1 MB on disk."""

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path


def log_path() -> Path:
    """Return the log file path under the user's config directory."""
    base = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    return base / "smb_mount" / "smb_mount.log"


def setup_logging(verbose: bool = False) -> logging.Logger:
    """Configure and return the ``smb_mount`` logger.

    * 512 KB max per file, 1 backup = **1 MB total** on disk.
    * Idempotent: safe to call multiple times (checks for existing handlers).
    """
    logger = logging.getLogger("smb_mount")
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    # Avoid adding duplicate handlers on repeated calls
    if logger.handlers:
        return logger

    log_file = log_path()
    log_file.parent.mkdir(parents=True, exist_ok=True)

    handler = RotatingFileHandler(
        str(log_file),
        maxBytes=512 * 1024,  # 512 KB
        backupCount=1,
    )
    handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s %(message)s",
                          datefmt="%Y-%m-%d %H:%M:%S")
    )

    logger.addHandler(handler)
    return logger
