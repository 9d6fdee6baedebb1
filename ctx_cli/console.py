"""Shared Rich console instances for CLI output."""

from rich.console import Console

console = Console()

# Diagnostics go to stderr so `ctx preview` output can be piped cleanly
err_console = Console(stderr=True)

__all__ = ["console", "err_console"]
