"""Helpers shared by the ctx commands and the REPL."""

from __future__ import annotations

import functools
import os
import sys
from collections.abc import Callable
from typing import Any

import click
from rich.table import Table

from ..console import console
from ..console import err_console
from ..errors import CtxError
from ..files import format_size
from ..files.info import total_size
from ..logging_setup import init_json_logging
from ..paths import default_log_path
from ..paths import get_ctx_home
from ..session import Session
from ..session import YankResult
from ..utils.error_format import escape_markup
from ..utils.error_format import format_error_message


def get_session(ctx: click.Context) -> Session:
    """Return the session stored on the click context, opening it on first use."""
    root = ctx.find_root()
    if isinstance(root.obj, Session):
        return root.obj

    home = get_ctx_home()
    init_json_logging(default_log_path(home), "DEBUG" if root.meta.get("ctx.verbose") else None)
    session = Session.open(home)
    root.obj = session
    return session


def handle_errors(func: Callable[..., Any]) -> Callable[..., Any]:
    """Print ctx errors as one red line and exit with status 1."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except (CtxError, ValueError) as e:
            err_console.print(f"[red]Error:[/red] {escape_markup(format_error_message(e))}")
            sys.exit(1)

    return wrapper


def to_absolute(path: str) -> str:
    """Make a CLI path absolute; absolute input is passed through untouched."""
    if os.path.isabs(path):
        return path
    return os.path.abspath(os.path.expanduser(path))


def resolve_file_refs(session: Session, refs: list[str]) -> list[str]:
    """Turn ``files`` listing numbers and paths into context paths.

    Raises:
        ValueError: If a number is outside the listing
    """
    infos = None
    paths = []
    for ref in refs:
        if ref.isdigit():
            if infos is None:
                infos = session.file_infos()
            index = int(ref)
            if index < 1 or index > len(infos):
                raise ValueError(f"No file #{index} (context has {len(infos)} files)")
            paths.append(infos[index - 1].path)
        else:
            paths.append(to_absolute(ref))
    return paths


def files_table(session: Session) -> Table:
    infos = session.file_infos()
    total = total_size(infos)
    table = Table(
        title=f"Files in '{session.context.name}' ({len(infos)} files, {format_size(total)})",
        show_header=True,
        header_style="bold cyan",
    )
    table.add_column("#", justify="right", style="dim")
    table.add_column("Project", style="magenta")
    table.add_column("Path", style="green")
    table.add_column("Size", justify="right", style="yellow")

    for i, info in enumerate(infos, start=1):
        name = escape_markup(info.rel_path or info.path)
        if not info.exists:
            name = f"[red]{name} (missing)[/red]"
        table.add_row(str(i), escape_markup(info.project), name, format_size(info.size))
    return table


def folders_table(session: Session) -> Table:
    table = Table(title=f"Folders in '{session.context.name}'", show_header=True, header_style="bold cyan")
    table.add_column("Folder", style="green")
    table.add_column("Files", justify="right")
    table.add_column("Size", justify="right", style="yellow")

    for folder in session.folder_infos():
        table.add_row(escape_markup(folder.path), str(folder.file_count), format_size(folder.total_size))
    return table


def report_yank(result: YankResult, what: str) -> bool:
    """Print the outcome of a yank. Returns True if the text reached the clipboard."""
    assembly = result.assembly
    if result.blocked:
        err_console.print(
            f"[yellow]⚠️ {assembly.missing_count} file(s) missing, nothing copied[/yellow] (drop --strict to copy anyway)"
        )
        for path in assembly.missing:
            err_console.print(f"  [dim]{escape_markup(path)}[/dim]")
        return False

    if assembly.missing:
        err_console.print(f"[yellow]⚠️ Warning: {assembly.missing_count} file(s) missing[/yellow]")
        for path in assembly.missing:
            err_console.print(f"  [dim]{escape_markup(path)}[/dim]")
    if assembly.unreadable:
        err_console.print(f"[yellow]Skipped {len(assembly.unreadable)} unreadable file(s)[/yellow]")
    if result.history_error:
        err_console.print(f"[yellow]History not saved:[/yellow] {escape_markup(result.history_error)}")

    if result.clipboard_error:
        err_console.print(f"[red]Clipboard error:[/red] {escape_markup(result.clipboard_error)}")
        return False

    console.print(f"[green]✓[/green] Yanked {what} ({len(assembly.included)} files) to clipboard")
    return True
