"""Tests for clipboard output."""

import subprocess
from unittest.mock import patch

import pyperclip
import pytest

from ctx_cli.clipboard import ClipboardSink
from ctx_cli.errors import ClipboardError


def only(*available):
    """Fake shutil.which that finds just the named programs."""
    return lambda name: f"/usr/bin/{name}" if name in available else None


class TestClipboardSink:
    def test_pyperclip_route(self):
        with patch("ctx_cli.clipboard.pyperclip.copy") as mock_copy:
            route = ClipboardSink().copy("hello")

        assert route == "pyperclip"
        mock_copy.assert_called_once_with("hello")

    def test_falls_back_to_helper_program(self):
        ok = subprocess.CompletedProcess(args=[], returncode=0, stdout="", stderr="")
        with (
            patch("ctx_cli.clipboard.pyperclip.copy", side_effect=pyperclip.PyperclipException("no backend")),
            patch("ctx_cli.clipboard.shutil.which", side_effect=only("xclip")),
            patch("ctx_cli.clipboard.subprocess.run", return_value=ok) as mock_run,
        ):
            route = ClipboardSink().copy("text")

        assert route == "xclip"
        args, kwargs = mock_run.call_args
        assert args[0] == ["/usr/bin/xclip", "-selection", "clipboard"]
        assert kwargs["input"] == "text"

    def test_failing_helper_tries_next(self):
        results = [
            subprocess.CompletedProcess(args=[], returncode=1, stdout="", stderr="Can't open display"),
            subprocess.CompletedProcess(args=[], returncode=0, stdout="", stderr=""),
        ]
        with (
            patch("ctx_cli.clipboard.pyperclip.copy", side_effect=pyperclip.PyperclipException("no backend")),
            patch("ctx_cli.clipboard.shutil.which", side_effect=only("xclip", "wl-copy")),
            patch("ctx_cli.clipboard.subprocess.run", side_effect=results),
        ):
            assert ClipboardSink().copy("text") == "wl-copy"

    def test_timeout_counts_as_failure(self):
        with (
            patch("ctx_cli.clipboard.pyperclip.copy", side_effect=pyperclip.PyperclipException("no backend")),
            patch("ctx_cli.clipboard.shutil.which", side_effect=only("pbcopy")),
            patch("ctx_cli.clipboard.subprocess.run", side_effect=subprocess.TimeoutExpired("pbcopy", 5)),
        ):
            with pytest.raises(ClipboardError):
                ClipboardSink().copy("text")

    def test_nothing_available(self):
        with (
            patch("ctx_cli.clipboard.pyperclip.copy", side_effect=pyperclip.PyperclipException("no backend")),
            patch("ctx_cli.clipboard.shutil.which", return_value=None),
        ):
            with pytest.raises(ClipboardError, match="no backend"):
                ClipboardSink().copy("text")

    def test_custom_fallback_list(self):
        with patch("ctx_cli.clipboard.pyperclip.copy", side_effect=pyperclip.PyperclipException("no backend")):
            with pytest.raises(ClipboardError):
                ClipboardSink(fallback_commands=[]).copy("text")
