"""Yank history commands."""

from __future__ import annotations

import sys

import click
from rich.panel import Panel
from rich.table import Table

from ..console import console
from ..utils.error_format import escape_markup
from .common import get_session
from .common import handle_errors
from .common import report_yank


@click.group(invoke_without_command=True)
@click.pass_context
def history(ctx: click.Context):
    """Browse and replay past yanks."""
    if ctx.invoked_subcommand is None:
        click.echo("\n" + ctx.get_help())
        ctx.exit()


@history.command(name="list")
@click.option("--limit", "-n", default=20, help="Number of entries to show")
@click.pass_context
@handle_errors
def history_list(ctx: click.Context, limit: int):
    """List recent yanks, newest first."""
    session = get_session(ctx)
    entries = session.history_entries()
    if not entries:
        console.print("[yellow]No history yet.[/yellow]")
        return

    table = Table(title="History", show_header=True, header_style="bold cyan")
    table.add_column("#", justify="right", style="dim")
    table.add_column("When", style="yellow")
    table.add_column("Context", style="magenta")
    table.add_column("Files", justify="right")
    table.add_column("Request", style="green")

    for i, entry in enumerate(entries[:limit], start=1):
        table.add_row(
            str(i),
            entry.format_timestamp(),
            escape_markup(entry.context_name),
            str(len(entry.files)),
            escape_markup(entry.request_preview()),
        )
    console.print(table)


@history.command(name="show")
@click.argument("index", type=int)
@click.pass_context
@handle_errors
def history_show(ctx: click.Context, index: int):
    """Show one entry (1 = newest)."""
    session = get_session(ctx)
    entry = session.history_entry(index)

    lines = [
        f"[bold]When:[/bold] {entry.format_timestamp()}",
        f"[bold]Context:[/bold] {escape_markup(entry.context_name)}",
        f"[bold]Files:[/bold] {len(entry.files)}",
    ]
    console.print(Panel("\n".join(lines), title=f"History #{index}", border_style="cyan"))

    if entry.project_context:
        console.print("[dim]<project_context>[/dim]")
        console.print(escape_markup(entry.project_context.rstrip("\n")))
    if entry.request:
        console.print("[dim]<request>[/dim]")
        console.print(escape_markup(entry.request.rstrip("\n")))
    for path in entry.files:
        console.print(f"  {escape_markup(path)}")


@history.command(name="yank")
@click.argument("index", type=int, default=1)
@click.pass_context
@handle_errors
def history_yank(ctx: click.Context, index: int):
    """Copy a past prompt again, re-reading its files from disk."""
    session = get_session(ctx)
    result = session.yank_history(index)
    if not report_yank(result, f"history entry #{index}"):
        sys.exit(1)


@history.command(name="prune")
@click.pass_context
@handle_errors
def history_prune(ctx: click.Context):
    """Apply the retention limit now."""
    session = get_session(ctx)
    removed = session.history.prune()
    console.print(f"[green]✓[/green] Removed {removed} old entries")
