"""Context management commands."""

from __future__ import annotations

import click
from rich.table import Table

from ..console import console
from ..errors import CtxError
from ..models import DEFAULT_NAME
from ..utils.error_format import escape_markup
from .common import get_session
from .common import handle_errors


@click.group(invoke_without_command=True)
@click.pass_context
def context(ctx: click.Context):
    """Manage named contexts."""
    if ctx.invoked_subcommand is None:
        click.echo("\n" + ctx.get_help())
        ctx.exit()


@context.command(name="list")
@click.pass_context
@handle_errors
def context_list(ctx: click.Context):
    """List contexts; the active one is marked."""
    session = get_session(ctx)

    table = Table(title="Contexts", show_header=True, header_style="bold cyan")
    table.add_column("Name", style="green")
    table.add_column("Files", justify="right")
    table.add_column("Status")

    for name in session.list_contexts():
        try:
            file_count = str(len(session.load_context(name).files))
        except (CtxError, ValueError):
            file_count = "?"
        status = "[bold green]active[/bold green]" if name == session.context.name else ""
        table.add_row(escape_markup(name), file_count, status)

    console.print(table)


@context.command(name="new")
@click.argument("name")
@click.pass_context
@handle_errors
def context_new(ctx: click.Context, name: str):
    """Create a context and switch to it."""
    session = get_session(ctx)
    session.new_context(name)
    console.print(f"[green]✓[/green] Created context: {escape_markup(name)}")


@context.command(name="use")
@click.argument("name")
@click.pass_context
@handle_errors
def context_use(ctx: click.Context, name: str):
    """Switch the active context."""
    session = get_session(ctx)
    session.switch_context(name)
    console.print(f"[green]✓[/green] Active context: {escape_markup(name)}")


@context.command(name="delete")
@click.argument("name")
@click.option("--force", "-f", is_flag=True, help="Skip confirmation")
@click.pass_context
@handle_errors
def context_delete(ctx: click.Context, name: str, force: bool):
    """Delete a context (the default context cannot be deleted)."""
    session = get_session(ctx)
    if name == DEFAULT_NAME:
        raise ValueError("The default context cannot be deleted")

    if not force and not click.confirm(f"Delete context '{name}'?", default=False):
        console.print("[yellow]Cancelled[/yellow]")
        return

    was_active = name == session.context.name
    session.delete_context(name)
    console.print(f"[green]✓[/green] Deleted context: {escape_markup(name)}")
    if was_active:
        console.print(f"[dim]Switched to '{escape_markup(session.context.name)}'[/dim]")


@context.command(name="next")
@click.pass_context
@handle_errors
def context_next(ctx: click.Context):
    """Switch to the next context (wraps around)."""
    session = get_session(ctx)
    session.cycle_context(1)
    console.print(f"Active context: [green]{escape_markup(session.context.name)}[/green]")


@context.command(name="prev")
@click.pass_context
@handle_errors
def context_prev(ctx: click.Context):
    """Switch to the previous context (wraps around)."""
    session = get_session(ctx)
    session.cycle_context(-1)
    console.print(f"Active context: [green]{escape_markup(session.context.name)}[/green]")
