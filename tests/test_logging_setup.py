"""Tests for the logging setup module."""

import logging
from logging.handlers import RotatingFileHandler
from unittest.mock import patch

import pytest

from smb_mount.logging_setup import log_path, setup_logging


@pytest.fixture
def clean_logger():
    logger = logging.getLogger("smb_mount")
    saved = logger.handlers[:]
    logger.handlers.clear()
    yield logger
    for h in logger.handlers[:]:
        h.close()
        logger.removeHandler(h)
    logger.handlers.extend(saved)
    logger.setLevel(logging.NOTSET)


class TestSetupLogging:
    def test_returns_smb_mount_logger(self, tmp_path, clean_logger):
        with patch("smb_mount.logging_setup.log_path", return_value=tmp_path / "smb_mount.log"):
            result = setup_logging()
        assert result.name == "smb_mount"

    def test_idempotent(self, tmp_path, clean_logger):
        """Calling setup_logging() twice should not add duplicate handlers."""
        with patch("smb_mount.logging_setup.log_path", return_value=tmp_path / "smb_mount.log"):
            setup_logging()
            handler_count = len(clean_logger.handlers)
            setup_logging()
        assert len(clean_logger.handlers) == handler_count == 1

    def test_rotating_handler_limits(self, tmp_path, clean_logger):
        with patch("smb_mount.logging_setup.log_path", return_value=tmp_path / "smb_mount.log"):
            setup_logging()
        handler = clean_logger.handlers[0]
        assert isinstance(handler, RotatingFileHandler)
        assert handler.maxBytes == 512 * 1024
        assert handler.backupCount == 1

    def test_verbose_sets_debug(self, tmp_path, clean_logger):
        with patch("smb_mount.logging_setup.log_path", return_value=tmp_path / "smb_mount.log"):
            setup_logging(verbose=True)
        assert clean_logger.level == logging.DEBUG

    def test_default_level_info(self, tmp_path, clean_logger):
        with patch("smb_mount.logging_setup.log_path", return_value=tmp_path / "smb_mount.log"):
            setup_logging()
        assert clean_logger.level == logging.INFO

    def test_creates_parent_dir(self, tmp_path, clean_logger):
        log_file = tmp_path / "nested" / "smb_mount.log"
        with patch("smb_mount.logging_setup.log_path", return_value=log_file):
            setup_logging()
        assert log_file.parent.is_dir()

    def test_writes_messages(self, tmp_path, clean_logger):
        log_file = tmp_path / "smb_mount.log"
        with patch("smb_mount.logging_setup.log_path", return_value=log_file):
            logger = setup_logging()
        logger.info("mount media: //nas:445/Media -> /mnt/smb/media")
        for h in logger.handlers:
            h.flush()
        assert "INFO mount media" in log_file.read_text()


class TestLogPath:
    def test_under_xdg_config(self, tmp_path, monkeypatch):
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        assert log_path() == tmp_path / "smb_mount" / "smb_mount.log"
