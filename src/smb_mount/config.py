"""Configuration loading and validation for smb_mount."""

import os
import re
import stat
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from smb_mount.errors import ConfigError, PathResolutionError
from smb_mount.models import MountEntry
from smb_mount.resolver import expand_path, resolve

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)\}")

CONFIG_FILENAME = "smb_mount_config.yaml"

_REQUIRED_MOUNT_KEYS = ("name", "smb_addr", "share_name", "username")


@dataclass
class Config:
    base_dir: str
    mounts: List[MountEntry] = field(default_factory=list)
    path: Optional[Path] = None

    def find(self, name: str) -> Optional[MountEntry]:
        for entry in self.mounts:
            if entry.name == name:
                return entry
        return None

    def names(self) -> List[str]:
        return [entry.name for entry in self.mounts]


def default_config_path() -> Path:
    """Return ``$XDG_CONFIG_HOME/smb_mount_config.yaml`` (``~/.config`` when unset)."""
    base = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    return base / CONFIG_FILENAME


def _expand_env_vars(obj):
    """Recursively expand ${VAR} references in string values."""
    if isinstance(obj, str):
        return _ENV_VAR_RE.sub(lambda m: os.environ.get(m.group(1), m.group(0)), obj)
    if isinstance(obj, dict):
        return {k: _expand_env_vars(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_expand_env_vars(item) for item in obj]
    return obj


def validate_config(config: Dict[str, Any]) -> list:
    """Validate a raw config dict and return a list of error strings (empty = valid)."""
    errors = []

    base_dir = config.get("base_dir")
    if not isinstance(base_dir, str) or not base_dir.strip():
        errors.append("base_dir is required")

    mounts = config.get("mounts")
    if not isinstance(mounts, list) or not mounts:
        errors.append("mounts must be a non-empty list")
        return errors

    seen = set()
    for i, m in enumerate(mounts):
        if not isinstance(m, dict):
            errors.append(f"mounts[{i}] must be a mapping")
            continue
        for key in _REQUIRED_MOUNT_KEYS:
            val = m.get(key)
            if val is None or not str(val).strip():
                errors.append(f"mounts[{i}] missing '{key}'")

        name = m.get("name")
        if name:
            if name in seen:
                errors.append(f"mounts[{i}] duplicate name '{name}'")
            seen.add(name)

        port = m.get("smb_port")
        if port is not None:
            if isinstance(port, bool) or not isinstance(port, int) or not (1 <= port <= 65535):
                errors.append(f"mounts[{i}].smb_port must be an integer 1-65535, got {port!r}")

        for key in ("password", "mount_dir_name", "mount_dir_path"):
            val = m.get(key)
            if val is not None and not isinstance(val, str):
                errors.append(f"mounts[{i}].{key} must be a string")

    return errors


def parse_config(raw: Dict[str, Any], path: Optional[Path] = None) -> Config:
    """Build a :class:`Config` from an already validated dict and resolve paths."""
    source = str(path) if path else "<config>"
    try:
        base_dir = expand_path(raw["base_dir"])
    except PathResolutionError as e:
        raise ConfigError(source, f"failed to normalize base_dir: {e.message}") from e

    cfg = Config(base_dir=base_dir, path=path)
    for m in raw["mounts"]:
        entry = MountEntry.from_dict(m)
        try:
            resolve(entry, base_dir)
        except PathResolutionError as e:
            raise ConfigError(source, f"failed to resolve mount path for "
                                      f"'{entry.name}': {e.message}") from e
        cfg.mounts.append(entry)
    return cfg


def load_config(path: Optional[Path] = None) -> Config:
    """Load, validate and normalize the YAML config.

    String values containing ``${VAR}`` are expanded from environment
    variables.  Unset variables are left as-is.
    """
    path = path or default_config_path()
    if not path.exists():
        raise ConfigError(str(path), "config file not found")
    try:
        with open(path, "r") as f:
            raw = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(str(path), f"failed to parse config: {e}") from e
    except OSError as e:
        raise ConfigError(str(path), f"failed to read config: {e}") from e

    if not isinstance(raw, dict):
        raise ConfigError(str(path), "config must be a mapping")

    raw = _expand_env_vars(raw)
    errors = validate_config(raw)
    if errors:
        raise ConfigError(str(path), "config validation failed", errors)
    return parse_config(raw, path)


def check_config_permissions(path: Path) -> List[str]:
    """Return warnings if the config file is readable by others.

    The file may hold passwords, so it should be ``0600``.
    """
    warnings = []
    try:
        mode = path.stat().st_mode
    except OSError:
        return warnings
    if mode & stat.S_IROTH:
        warnings.append("Config file is world-readable. Consider chmod 600 for better security.")
    if mode & stat.S_IRGRP:
        warnings.append(
            "Config file is group-readable. For best security, only the owner should read it."
        )
    return warnings
