"""Cross-platform clipboard output for ctx."""

import logging
import shutil
import subprocess

import pyperclip

from .errors import ClipboardError

logger = logging.getLogger(__name__)

# Helper programs tried, in order, when pyperclip cannot reach a clipboard
FALLBACK_COMMANDS: list[list[str]] = [
    ["pbcopy"],
    ["xclip", "-selection", "clipboard"],
    ["xsel", "--clipboard", "--input"],
    ["wl-copy"],
]


class ClipboardSink:
    """Copy text to the system clipboard."""

    def __init__(self, fallback_commands: list[list[str]] | None = None, timeout: int = 5):
        self.fallback_commands = FALLBACK_COMMANDS if fallback_commands is None else fallback_commands
        self.timeout = timeout

    def _run_command(self, command: list[str], text: str) -> tuple[bool, str]:
        """Feed text to a helper program and return (success, error)."""
        try:
            result = subprocess.run(
                command,
                input=text,
                capture_output=True,
                timeout=self.timeout,
                text=True,
            )
        except subprocess.TimeoutExpired:
            return False, "Command timed out"
        except OSError as e:
            return False, str(e)

        if result.returncode != 0:
            return False, result.stderr.strip() or f"exit status {result.returncode}"
        return True, ""

    def copy(self, text: str) -> str:
        """Copy ``text`` to the clipboard.

        Returns:
            Name of the route that succeeded ("pyperclip" or a program name)

        Raises:
            ClipboardError: If pyperclip and every helper program failed
        """
        try:
            pyperclip.copy(text)
            return "pyperclip"
        except pyperclip.PyperclipException as e:
            original_error = e
            logger.debug(f"pyperclip unavailable, trying helper programs: {e}")

        for command in self.fallback_commands:
            program = shutil.which(command[0])
            if not program:
                continue

            success, error = self._run_command([program, *command[1:]], text)
            if success:
                logger.info(f"Copied to clipboard via {command[0]}")
                return command[0]
            logger.warning(f"Clipboard helper {command[0]} failed: {error}")

        raise ClipboardError(f"Could not copy to clipboard: {original_error}")
