"""Tests for subprocess_utils module."""

import subprocess
from unittest.mock import patch

from qtbuild.subprocess_utils import format_command, get_subprocess_creation_flags, safe_run

CREATE_NO_WINDOW = 0x08000000


def test_get_subprocess_creation_flags_windows():
    """Test that Windows returns CREATE_NO_WINDOW flag."""
    with patch("sys.platform", "win32"), patch("subprocess.CREATE_NO_WINDOW", CREATE_NO_WINDOW, create=True):
        flags = get_subprocess_creation_flags()
        assert flags == CREATE_NO_WINDOW


def test_get_subprocess_creation_flags_linux():
    """Test that Linux returns 0."""
    with patch("sys.platform", "linux"):
        flags = get_subprocess_creation_flags()
        assert flags == 0


@patch("subprocess.run")
def test_safe_run_applies_flags_on_windows(mock_run):
    """Test that safe_run applies flags on Windows."""
    with patch("sys.platform", "win32"), patch("subprocess.CREATE_NO_WINDOW", CREATE_NO_WINDOW, create=True):
        safe_run(["c++", "--version"], capture_output=True)

        mock_run.assert_called_once()
        call_kwargs = mock_run.call_args[1]
        assert call_kwargs["creationflags"] == CREATE_NO_WINDOW


@patch("subprocess.run")
def test_safe_run_no_flags_on_linux(mock_run):
    """Test that safe_run doesn't apply flags on Linux."""
    with patch("sys.platform", "linux"):
        safe_run(["c++", "--version"], capture_output=True)

        mock_run.assert_called_once()
        call_kwargs = mock_run.call_args[1]
        assert "creationflags" not in call_kwargs


@patch("subprocess.run")
def test_safe_run_merges_custom_creationflags(mock_run):
    """Test that custom creationflags are OR'd with defaults."""
    with patch("sys.platform", "win32"), patch("subprocess.CREATE_NO_WINDOW", CREATE_NO_WINDOW, create=True):
        custom_flag = 0x00000200
        safe_run(["ar", "rcs", "libx.a"], creationflags=custom_flag)

        call_kwargs = mock_run.call_args[1]
        assert call_kwargs["creationflags"] == custom_flag | CREATE_NO_WINDOW


@patch("subprocess.run")
def test_safe_run_defaults_stdin_to_devnull(mock_run):
    """Test that tools never inherit stdin."""
    with patch("sys.platform", "linux"):
        safe_run(("ar", "--version"))

        args, kwargs = mock_run.call_args
        assert args[0] == ["ar", "--version"]
        assert kwargs["stdin"] == subprocess.DEVNULL


@patch("subprocess.run")
def test_safe_run_keeps_explicit_stdin(mock_run):
    with patch("sys.platform", "linux"):
        safe_run(["cat"], stdin=subprocess.PIPE)
        assert mock_run.call_args[1]["stdin"] == subprocess.PIPE


def test_format_command():
    assert format_command(["c++", "-c", "a.cpp"]) == "c++ -c a.cpp"
