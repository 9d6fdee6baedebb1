"""ctx CLI - collect a project description, a request and files into one LLM prompt."""

import sys

import click
from rich.panel import Panel

from .commands.common import files_table
from .commands.common import folders_table
from .commands.common import get_session
from .commands.common import handle_errors
from .commands.common import report_yank
from .commands.common import resolve_file_refs
from .commands.common import to_absolute
from .commands.context import context as context_group
from .commands.exclude import exclude as exclude_group
from .commands.history import history as history_group
from .console import console
from .console import err_console
from .files import format_size
from .files.info import total_size
from .repl import run_repl
from .utils.error_format import escape_markup


@click.group(invoke_without_command=True)
@click.version_option(package_name="ctx-cli")
@click.option("--verbose", "-v", is_flag=True, help="Log at DEBUG level")
@click.pass_context
def cli(ctx: click.Context, verbose: bool):
    """ctx - build LLM prompts from a project description, a request and source files."""
    ctx.meta["ctx.verbose"] = verbose

    # If no command specified, start the interactive shell
    if ctx.invoked_subcommand is None:
        ctx.invoke(shell)


@cli.command()
@click.argument("paths", nargs=-1, required=True)
@click.pass_context
@handle_errors
def add(ctx: click.Context, paths: tuple[str, ...]):
    """Add files, or every non-excluded file below a directory."""
    session = get_session(ctx)
    for path in paths:
        result = session.add_path(to_absolute(path))
        shown = escape_markup(result.path)
        if result.is_dir:
            console.print(f"[green]✓[/green] Added {result.added} files from {shown}")
            if result.duplicates:
                console.print(f"  [dim]{result.duplicates} already in context[/dim]")
        elif result.added:
            console.print(f"[green]✓[/green] File added: {shown}")
        else:
            console.print(f"[dim]Already in context: {shown}[/dim]")


@cli.command()
@click.argument("refs", nargs=-1, required=True)
@click.pass_context
@handle_errors
def rm(ctx: click.Context, refs: tuple[str, ...]):
    """Remove files by path or by number from `ctx files`."""
    session = get_session(ctx)
    removed = session.remove_files(resolve_file_refs(session, list(refs)))
    console.print(f"[green]✓[/green] Removed {removed} file(s)")


@cli.command(name="rm-folder")
@click.argument("folders", nargs=-1, required=True)
@click.pass_context
@handle_errors
def rm_folder(ctx: click.Context, folders: tuple[str, ...]):
    """Remove every file directly inside the given folders."""
    session = get_session(ctx)
    removed = session.remove_folders([to_absolute(f).rstrip("/") or "/" for f in folders])
    console.print(f"[green]✓[/green] Removed {removed} file(s)")


@cli.command()
@click.option("--force", "-f", is_flag=True, help="Skip confirmation")
@click.pass_context
@handle_errors
def clear(ctx: click.Context, force: bool):
    """Remove every file from the active context."""
    session = get_session(ctx)
    if not force and not click.confirm(f"Remove all files from '{session.context.name}'?", default=False):
        console.print("[yellow]Cancelled[/yellow]")
        return
    count = session.clear_files()
    console.print(f"[green]✓[/green] Cleared {count} file(s)")


@cli.command()
@click.pass_context
@handle_errors
def files(ctx: click.Context):
    """List the active context's files, largest first."""
    console.print(files_table(get_session(ctx)))


@cli.command()
@click.pass_context
@handle_errors
def folders(ctx: click.Context):
    """List the folders of the active context's files."""
    console.print(folders_table(get_session(ctx)))


@cli.command()
@click.pass_context
@handle_errors
def show(ctx: click.Context):
    """Show the active context."""
    session = get_session(ctx)
    context = session.context
    infos = session.file_infos()
    missing = sum(1 for f in infos if not f.exists)

    lines = [
        f"[bold]Context:[/bold] {escape_markup(context.name)}",
        f"[bold]Project root:[/bold] {escape_markup(context.project_root or '(none)')}",
        f"[bold]Files:[/bold] {len(infos)} ({format_size(total_size(infos))})",
        f"[bold]Exclude rule:[/bold] {escape_markup(session.exclude.name)}",
    ]
    if missing:
        lines.append(f"[yellow]Missing:[/yellow] {missing}")
    console.print(Panel("\n".join(lines), title="ctx", border_style="cyan"))

    console.print("[bold]Request[/bold]")
    console.print(escape_markup(context.request.rstrip("\n")) or "[dim](empty)[/dim]")
    console.print("[bold]Project context[/bold]")
    console.print(escape_markup(context.project_context.rstrip("\n")) or "[dim](empty)[/dim]")


@cli.command()
@click.option("--strict", is_flag=True, help="Copy nothing if any file is missing")
@click.pass_context
@handle_errors
def yank(ctx: click.Context, strict: bool):
    """Copy the assembled prompt to the clipboard and record it in history."""
    session = get_session(ctx)
    result = session.yank(strict=strict)
    if not report_yank(result, f"'{session.context.name}'"):
        sys.exit(1)


@cli.command()
@click.pass_context
@handle_errors
def preview(ctx: click.Context):
    """Print the assembled prompt to stdout."""
    session = get_session(ctx)
    result = session.preview()
    click.echo(result.document, nl=False)
    if result.missing:
        err_console.print(f"[yellow]⚠️ Warning: {result.missing_count} file(s) missing[/yellow]")


def _edit_text(current: str, text: str | None, edit: bool) -> str | None:
    """Resolve the new value of a text field, or None to leave it alone."""
    if edit:
        return click.edit(current)
    if text == "-":
        return click.get_text_stream("stdin").read()
    return text


@cli.command()
@click.argument("text", required=False)
@click.option("--edit", "-e", is_flag=True, help="Open $EDITOR on the current text")
@click.pass_context
@handle_errors
def request(ctx: click.Context, text: str | None, edit: bool):
    """Show or set the request text ('-' reads stdin)."""
    session = get_session(ctx)
    new = _edit_text(session.context.request, text, edit)
    if new is None:
        click.echo(session.context.request, nl=False)
        return
    session.set_request(new)
    console.print("[green]✓[/green] Request updated")


@cli.command(name="project-context")
@click.argument("text", required=False)
@click.option("--edit", "-e", is_flag=True, help="Open $EDITOR on the current text")
@click.pass_context
@handle_errors
def project_context(ctx: click.Context, text: str | None, edit: bool):
    """Show or set the project context text ('-' reads stdin)."""
    session = get_session(ctx)
    new = _edit_text(session.context.project_context, text, edit)
    if new is None:
        click.echo(session.context.project_context, nl=False)
        return
    session.set_project_context(new)
    console.print("[green]✓[/green] Project context updated")


@cli.command()
@click.argument("path", required=False)
@click.option("--unset", is_flag=True, help="Show absolute paths again")
@click.pass_context
@handle_errors
def root(ctx: click.Context, path: str | None, unset: bool):
    """Show or set the project root stripped from file paths in the prompt."""
    session = get_session(ctx)
    if unset:
        session.set_project_root(None)
        console.print("[green]✓[/green] Project root cleared")
        return
    if path is None:
        click.echo(session.context.project_root or "")
        return
    session.set_project_root(to_absolute(path))
    console.print(f"[green]✓[/green] Project root: {escape_markup(session.context.project_root)}")


@cli.command()
@click.pass_context
@handle_errors
def config(ctx: click.Context):
    """Show the current configuration."""
    session = get_session(ctx)
    lines = [
        f"[bold]Home:[/bold] {escape_markup(session.home)}",
        f"[bold]Context:[/bold] {escape_markup(session.config.active_context)}",
        f"[bold]Exclude:[/bold] {escape_markup(session.config.active_exclude)}",
        f"[bold]Skip prefixes:[/bold] {escape_markup(', '.join(session.config.skip_prefixes))}",
    ]
    console.print(Panel("\n".join(lines), title="Current Config", border_style="cyan"))


@cli.command()
@click.pass_context
@handle_errors
def shell(ctx: click.Context):
    """Interactive shell: paste paths to add them, type 'help' for commands."""
    run_repl(get_session(ctx))


cli.add_command(context_group, name="context")
cli.add_command(exclude_group, name="exclude")
cli.add_command(history_group, name="history")


def main():
    """Entry point for the ctx console script."""
    cli()


if __name__ == "__main__":
    main()
