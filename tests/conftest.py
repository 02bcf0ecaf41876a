"""Shared fixtures for smb_mount tests."""

import pytest

from smb_mount.models import MountEntry


def _make_entry(name="media", **kwargs):
    fields = {
        "name": name,
        "smb_addr": "192.168.1.10",
        "share_name": "Media",
        "username": "alice",
    }
    fields.update(kwargs)
    return MountEntry(**fields)


def _resolved_entry(name="media", path=None, **kwargs):
    entry = _make_entry(name, **kwargs)
    entry.actual_path = path or f"/mnt/smb/{name}"
    entry.path_resolved = True
    return entry


@pytest.fixture
def make_entry():
    """Factory for MountEntry objects with sensible defaults."""
    return _make_entry


@pytest.fixture
def resolved_entry():
    """Factory for entries whose mount path is already resolved."""
    return _resolved_entry


@pytest.fixture
def entry():
    return _make_entry(password="secret")


@pytest.fixture
def raw_config():
    """Return a minimal valid raw config dict."""
    return {
        "base_dir": "/mnt/smb",
        "mounts": [
            {
                "name": "media",
                "smb_addr": "192.168.1.10",
                "share_name": "Media",
                "username": "alice",
                "password": "secret",
            },
            {
                "name": "backup",
                "smb_addr": "nas.local",
                "smb_port": 4455,
                "share_name": "Backup",
                "username": "bob",
                "mount_dir_name": "backups",
            },
        ],
    }
