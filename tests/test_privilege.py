"""Tests for privilege detection and execution strategies."""

import subprocess
from unittest.mock import MagicMock, patch

import pytest

from smb_mount.errors import ElevationFailedError, ElevationUnavailableError
from smb_mount.privilege import (
    CommandResult,
    DirectExecutor,
    ElevatedExecutor,
    can_sudo,
    check_mount_tools,
    needs_privilege,
    run_elevated,
    select_executor,
)


class TestPrivilegeDetection:
    @patch("smb_mount.privilege.os.geteuid", return_value=0)
    def test_root_needs_nothing(self, _):
        assert needs_privilege() is False

    @patch("smb_mount.privilege.os.geteuid", return_value=1000)
    def test_user_needs_privilege(self, _):
        assert needs_privilege() is True

    @patch("smb_mount.privilege.os.geteuid", return_value=0)
    def test_can_sudo_as_root(self, _):
        assert can_sudo() is True

    @patch("smb_mount.privilege.os.geteuid", return_value=1000)
    @patch("smb_mount.privilege.shutil.which", return_value=None)
    def test_can_sudo_without_binary(self, _which, _euid):
        assert can_sudo() is False

    @patch("smb_mount.privilege.os.geteuid", return_value=1000)
    @patch("smb_mount.privilege.shutil.which", return_value="/usr/bin/sudo")
    @patch("smb_mount.privilege.subprocess.run")
    def test_can_sudo_password_required(self, mock_run, _which, _euid):
        mock_run.return_value = MagicMock(returncode=1)
        assert can_sudo() is True
        assert mock_run.call_args[0][0] == ["sudo", "-n", "-l"]

    @patch("smb_mount.privilege.os.geteuid", return_value=1000)
    @patch("smb_mount.privilege.shutil.which", return_value="/usr/bin/sudo")
    @patch("smb_mount.privilege.subprocess.run")
    def test_can_sudo_not_in_sudoers(self, mock_run, _which, _euid):
        mock_run.return_value = MagicMock(returncode=2)
        assert can_sudo() is False


class TestCheckMountTools:
    @patch("smb_mount.privilege.shutil.which", return_value="/usr/bin/x")
    def test_all_present(self, _):
        assert check_mount_tools() == []

    @patch("smb_mount.privilege.shutil.which", return_value=None)
    @patch("smb_mount.privilege.os.path.isfile", return_value=False)
    def test_missing(self, _isfile, _which):
        assert check_mount_tools() == ["mount.cifs", "umount"]

    @patch("smb_mount.privilege.shutil.which", return_value=None)
    def test_found_in_sbin(self, _which):
        with patch("smb_mount.privilege.os.path.isfile",
                   side_effect=lambda p: p == "/sbin/mount.cifs"):
            assert check_mount_tools() == ["umount"]


class TestDirectExecutor:
    @patch("smb_mount.privilege.subprocess.run")
    def test_captures_combined_output(self, mock_run):
        mock_run.return_value = MagicMock(returncode=32, stdout="mount error(13)")
        result = DirectExecutor().run(["mount.cifs", "//h/s", "/mnt/s"])
        assert result == CommandResult(returncode=32, output="mount error(13)")
        assert not result.success
        kwargs = mock_run.call_args[1]
        assert kwargs["stdout"] == subprocess.PIPE
        assert kwargs["stderr"] == subprocess.STDOUT

    @patch("smb_mount.privilege.subprocess.run", side_effect=FileNotFoundError("mount.cifs"))
    def test_missing_binary(self, _):
        result = DirectExecutor().run(["mount.cifs"])
        assert result.returncode == 127
        assert "mount.cifs" in result.output

    @patch("smb_mount.privilege.subprocess.run",
           side_effect=PermissionError(13, "Permission denied", "mount.cifs"))
    def test_non_executable_binary(self, _):
        result = DirectExecutor().run(["mount.cifs"])
        assert result.returncode == 126
        assert "Permission denied" in result.output

    def test_not_elevated(self):
        assert DirectExecutor().elevated is False


class TestElevatedExecutor:
    def test_wrap(self):
        assert ElevatedExecutor().wrap(["umount", "/mnt/a"]) == [
            "sudo", "-S", "--", "umount", "/mnt/a",
        ]

    @patch("smb_mount.privilege.subprocess.run")
    def test_inherits_stdio(self, mock_run):
        mock_run.return_value = MagicMock(returncode=0)
        result = ElevatedExecutor().run(["umount", "/mnt/a"])
        assert result.success
        assert result.output == ""
        mock_run.assert_called_once_with(["sudo", "-S", "--", "umount", "/mnt/a"])


class TestSelectExecutor:
    def test_no_elevation(self):
        assert isinstance(select_executor(), DirectExecutor)

    @patch("smb_mount.privilege.os.geteuid", return_value=0)
    def test_root_never_uses_sudo(self, _):
        assert isinstance(select_executor(elevate=True), DirectExecutor)

    @patch("smb_mount.privilege.os.geteuid", return_value=1000)
    @patch("smb_mount.privilege.shutil.which", return_value="/usr/bin/sudo")
    def test_sudo(self, _which, _euid):
        assert isinstance(select_executor(elevate=True), ElevatedExecutor)

    @patch("smb_mount.privilege.os.geteuid", return_value=1000)
    @patch("smb_mount.privilege.shutil.which", return_value=None)
    def test_sudo_missing(self, _which, _euid):
        with pytest.raises(ElevationUnavailableError) as exc:
            select_executor(elevate=True, op="mount", path="/mnt/a")
        assert exc.value.op == "mount"
        assert exc.value.path == "/mnt/a"


class TestRunElevated:
    @patch("smb_mount.privilege.os.geteuid", return_value=1000)
    @patch("smb_mount.privilege.shutil.which", return_value="/usr/bin/sudo")
    @patch("smb_mount.privilege.subprocess.run")
    def test_success(self, mock_run, _which, _euid):
        mock_run.return_value = MagicMock(returncode=0)
        assert run_elevated(["mkdir", "-p", "/mnt/a"]).success
        mock_run.assert_called_once_with(["sudo", "-S", "--", "mkdir", "-p", "/mnt/a"])

    @patch("smb_mount.privilege.os.geteuid", return_value=1000)
    @patch("smb_mount.privilege.shutil.which", return_value="/usr/bin/sudo")
    @patch("smb_mount.privilege.subprocess.run")
    def test_failure_raises(self, mock_run, _which, _euid):
        mock_run.return_value = MagicMock(returncode=1)
        with pytest.raises(ElevationFailedError) as exc:
            run_elevated(["rmdir", "/mnt/a"], op="cleanup", path="/mnt/a")
        assert exc.value.returncode == 1
        assert "cleanup with sudo failed" in str(exc.value)
