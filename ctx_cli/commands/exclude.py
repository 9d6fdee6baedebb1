"""Exclude rule commands."""

from __future__ import annotations

import click
from rich.table import Table

from ..console import console
from ..files import matches
from ..files import should_exclude
from ..models import ExcludeRule
from ..paths import validate_record_name
from ..utils.error_format import escape_markup
from .common import get_session
from .common import handle_errors
from .common import to_absolute


@click.group(invoke_without_command=True)
@click.pass_context
def exclude(ctx: click.Context):
    """Manage exclude rules used when adding directories."""
    if ctx.invoked_subcommand is None:
        click.echo("\n" + ctx.get_help())
        ctx.exit()


@exclude.command(name="list")
@click.pass_context
@handle_errors
def exclude_list(ctx: click.Context):
    """List exclude rules; the active one is marked."""
    session = get_session(ctx)
    for name in session.list_excludes():
        marker = "[bold green]*[/bold green]" if name == session.exclude.name else " "
        console.print(f"{marker} {escape_markup(name)}")


@exclude.command(name="show")
@click.argument("name", required=False)
@click.pass_context
@handle_errors
def exclude_show(ctx: click.Context, name: str | None):
    """Show the patterns of a rule (default: the active rule)."""
    session = get_session(ctx)
    rule = session.load_exclude(name) if name else session.exclude

    table = Table(title=f"Exclude rule '{rule.name}'", show_header=True, header_style="bold cyan")
    table.add_column("Pattern", style="green")
    for pattern in rule.patterns:
        table.add_row(escape_markup(pattern))
    console.print(table)


@exclude.command(name="use")
@click.argument("name")
@click.pass_context
@handle_errors
def exclude_use(ctx: click.Context, name: str):
    """Make a rule the active one."""
    session = get_session(ctx)
    session.use_exclude(name)
    console.print(f"[green]✓[/green] Active exclude rule: {escape_markup(name)}")


@exclude.command(name="new")
@click.argument("name")
@click.argument("patterns", nargs=-1)
@click.pass_context
@handle_errors
def exclude_new(ctx: click.Context, name: str, patterns: tuple[str, ...]):
    """Create a rule from the given patterns."""
    session = get_session(ctx)
    validate_record_name(name, "exclude rule name")
    if session.store.exists("exclude", name):
        raise ValueError(f"Exclude rule '{name}' already exists")

    session.save_exclude(ExcludeRule(name=name, patterns=list(patterns)))
    console.print(f"[green]✓[/green] Created exclude rule: {escape_markup(name)} ({len(patterns)} patterns)")


@exclude.command(name="add-pattern")
@click.argument("name")
@click.argument("patterns", nargs=-1, required=True)
@click.pass_context
@handle_errors
def exclude_add_pattern(ctx: click.Context, name: str, patterns: tuple[str, ...]):
    """Append patterns to a rule."""
    session = get_session(ctx)
    rule = session.load_exclude(name)
    new = [p for p in patterns if p not in rule.patterns]
    session.save_exclude(rule.model_copy(update={"patterns": [*rule.patterns, *new]}))
    console.print(f"[green]✓[/green] Added {len(new)} pattern(s) to {escape_markup(name)}")


@exclude.command(name="remove-pattern")
@click.argument("name")
@click.argument("patterns", nargs=-1, required=True)
@click.pass_context
@handle_errors
def exclude_remove_pattern(ctx: click.Context, name: str, patterns: tuple[str, ...]):
    """Remove patterns from a rule."""
    session = get_session(ctx)
    rule = session.load_exclude(name)
    kept = [p for p in rule.patterns if p not in patterns]
    session.save_exclude(rule.model_copy(update={"patterns": kept}))
    console.print(f"[green]✓[/green] Removed {len(rule.patterns) - len(kept)} pattern(s) from {escape_markup(name)}")


@exclude.command(name="check")
@click.argument("path")
@click.pass_context
@handle_errors
def exclude_check(ctx: click.Context, path: str):
    """Tell whether the active rule excludes PATH, and which patterns hit."""
    session = get_session(ctx)
    path = to_absolute(path)
    rule = session.exclude

    if not should_exclude(path, rule):
        console.print(f"[green]included[/green] {escape_markup(path)}")
        return

    base = path.rstrip("/").rsplit("/", 1)[-1]
    hits = [p for p in rule.patterns if matches(p, path) or matches(p, base)]
    console.print(f"[yellow]excluded[/yellow] {escape_markup(path)}")
    for pattern in hits:
        console.print(f"  [dim]by {escape_markup(pattern)}[/dim]")
