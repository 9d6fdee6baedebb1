"""Interactive ctx shell.

Each input line is handled completely before the next prompt: either a
list of pasted absolute paths (added to the active context) or a command
word followed by arguments.
"""

from __future__ import annotations

import logging
import os
import shlex
from pathlib import Path

from prompt_toolkit import PromptSession
from prompt_toolkit.formatted_text import HTML
from prompt_toolkit.history import FileHistory
from prompt_toolkit.history import InMemoryHistory
from rich.console import Console

from .commands.common import files_table
from .commands.common import folders_table
from .commands.common import resolve_file_refs
from .commands.common import to_absolute
from .console import console as default_console
from .errors import CtxError
from .files import format_size
from .paths import repl_history_path
from .session import AddResult
from .session import Session
from .session import YankResult
from .utils.error_format import escape_markup
from .utils.error_format import format_error_message

logger = logging.getLogger(__name__)


class CommandProcessor:
    """Parse and run shell lines against a session."""

    COMMANDS = {
        "add": {"action": "add", "description": "Add files or directories (or just paste absolute paths)"},
        "rm": {"action": "remove", "description": "Remove files by number or path"},
        "clear": {"action": "clear", "description": "Remove every file from the context"},
        "files": {"action": "files", "description": "List files, largest first"},
        "folders": {"action": "folders", "description": "List folders with file counts"},
        "yank": {"action": "yank", "description": "Copy the prompt to the clipboard"},
        "preview": {"action": "preview", "description": "Print the prompt"},
        "request": {"action": "request", "description": "Show or set the request text"},
        "project": {"action": "project", "description": "Show or set the project context text"},
        "root": {"action": "root", "description": "Set the project root ('-' to unset)"},
        "use": {"action": "use", "description": "Switch to a context"},
        "new": {"action": "new", "description": "Create a context and switch to it"},
        "next": {"action": "next", "description": "Switch to the next context"},
        "prev": {"action": "prev", "description": "Switch to the previous context"},
        "contexts": {"action": "contexts", "description": "List contexts"},
        "exclude": {"action": "exclude", "description": "Show or switch the active exclude rule"},
        "history": {"action": "history", "description": "List recent yanks"},
        "replay": {"action": "replay", "description": "Copy history entry N again"},
        "help": {"action": "help", "description": "Show available commands"},
        "quit": {"action": "quit", "description": "Leave the shell"},
        "exit": {"action": "quit", "description": "Leave the shell"},
    }

    def __init__(self, session: Session, console: Console | None = None):
        self.session = session
        self.console = console or default_console
        self.done = False

    def process_input(self, line: str) -> tuple[str, list[str], str]:
        """Split a line into (action, args, raw argument text)."""
        line = line.strip()
        if not line:
            return "noop", [], ""

        # A single pasted path may contain spaces
        if line.startswith("/") and os.path.exists(line):
            return "add", [line], line

        try:
            tokens = shlex.split(line)
        except ValueError:
            tokens = line.split()

        if tokens and all(t.startswith("/") for t in tokens):
            return "add", tokens, line

        word = tokens[0]
        command = word.lower()
        parts = line.split(maxsplit=1)
        rest = parts[1] if len(parts) > 1 else ""
        if command in self.COMMANDS:
            return self.COMMANDS[command]["action"], tokens[1:], rest
        return "unknown", [word], rest

    def handle_line(self, line: str) -> None:
        action, args, raw = self.process_input(line)
        if action == "noop":
            return
        try:
            handler = getattr(self, f"_do_{action}")
            handler(args, raw)
        except (CtxError, ValueError) as e:
            self.console.print(f"[red]Error:[/red] {escape_markup(format_error_message(e))}")

    # ===== HANDLERS =====

    def _do_unknown(self, args: list[str], raw: str) -> None:
        self.console.print(f"Unknown command: {escape_markup(args[0])}. Type 'help' for available commands.")

    def _do_help(self, args: list[str], raw: str) -> None:
        self.console.print("[bold]Available commands:[/bold]")
        for name, info in self.COMMANDS.items():
            if name == "exit":
                continue
            self.console.print(f"  {name:<10} - {info['description']}")

    def _do_quit(self, args: list[str], raw: str) -> None:
        self.done = True

    def _do_add(self, args: list[str], raw: str) -> None:
        if not args:
            raise ValueError("Usage: add PATH...")
        for path in args:
            try:
                self._report_add(self.session.add_path(to_absolute(path)))
            except (CtxError, ValueError) as e:
                self.console.print(f"[red]Error:[/red] {escape_markup(format_error_message(e))}")

    def _report_add(self, result: AddResult) -> None:
        path = escape_markup(result.path)
        if result.is_dir:
            self.console.print(f"[green]✓[/green] Added {result.added} files from {path}")
        elif result.added:
            self.console.print(f"[green]✓[/green] File added: {path}")
        else:
            self.console.print(f"[dim]Already in context: {path}[/dim]")

    def _do_remove(self, args: list[str], raw: str) -> None:
        if not args:
            raise ValueError("Usage: rm N|PATH...")
        removed = self.session.remove_files(resolve_file_refs(self.session, args))
        self.console.print(f"[green]✓[/green] Removed {removed} file(s)")

    def _do_clear(self, args: list[str], raw: str) -> None:
        count = self.session.clear_files()
        self.console.print(f"[green]✓[/green] Cleared {count} file(s)")

    def _do_files(self, args: list[str], raw: str) -> None:
        self.console.print(files_table(self.session))

    def _do_folders(self, args: list[str], raw: str) -> None:
        self.console.print(folders_table(self.session))

    def _do_yank(self, args: list[str], raw: str) -> None:
        self._report_yank(self.session.yank(strict="--strict" in args), f"'{self.session.context.name}'")

    def _do_replay(self, args: list[str], raw: str) -> None:
        index = int(args[0]) if args and args[0].isdigit() else 1
        self._report_yank(self.session.yank_history(index), f"history entry #{index}")

    def _report_yank(self, result: YankResult, what: str) -> None:
        assembly = result.assembly
        if assembly.missing:
            self.console.print(f"[yellow]⚠️ Warning: {assembly.missing_count} file(s) missing[/yellow]")
        if result.blocked:
            self.console.print("[yellow]Nothing copied[/yellow]")
            return
        if result.history_error:
            self.console.print(f"[yellow]History not saved:[/yellow] {escape_markup(result.history_error)}")
        if result.clipboard_error:
            self.console.print(f"[red]Clipboard error:[/red] {escape_markup(result.clipboard_error)}")
            return
        size = format_size(len(assembly.document.encode("utf-8")))
        self.console.print(f"[green]✓[/green] Yanked {escape_markup(what)} ({len(assembly.included)} files, {size})")

    def _do_preview(self, args: list[str], raw: str) -> None:
        document = self.session.preview().document
        self.console.print(document, end="", markup=False, highlight=False, soft_wrap=True)

    def _do_request(self, args: list[str], raw: str) -> None:
        if not raw:
            self.console.print(escape_markup(self.session.context.request) or "[dim](no request)[/dim]")
            return
        self.session.set_request(raw)
        self.console.print("[green]✓[/green] Request updated")

    def _do_project(self, args: list[str], raw: str) -> None:
        if not raw:
            self.console.print(escape_markup(self.session.context.project_context) or "[dim](no project context)[/dim]")
            return
        self.session.set_project_context(raw)
        self.console.print("[green]✓[/green] Project context updated")

    def _do_root(self, args: list[str], raw: str) -> None:
        if not args:
            self.console.print(escape_markup(self.session.context.project_root or "(no project root)"))
            return
        root = None if args[0] == "-" else to_absolute(args[0])
        self.session.set_project_root(root)
        self.console.print(f"[green]✓[/green] Project root: {escape_markup(root or '(none)')}")

    def _do_use(self, args: list[str], raw: str) -> None:
        if not args:
            raise ValueError("Usage: use CONTEXT")
        self.session.switch_context(args[0])
        self.console.print(f"Active context: [green]{escape_markup(args[0])}[/green]")

    def _do_new(self, args: list[str], raw: str) -> None:
        if not args:
            raise ValueError("Usage: new CONTEXT")
        self.session.new_context(args[0])
        self.console.print(f"[green]✓[/green] Created context: {escape_markup(args[0])}")

    def _do_next(self, args: list[str], raw: str) -> None:
        self.session.cycle_context(1)
        self.console.print(f"Active context: [green]{escape_markup(self.session.context.name)}[/green]")

    def _do_prev(self, args: list[str], raw: str) -> None:
        self.session.cycle_context(-1)
        self.console.print(f"Active context: [green]{escape_markup(self.session.context.name)}[/green]")

    def _do_contexts(self, args: list[str], raw: str) -> None:
        for name in self.session.list_contexts():
            marker = "*" if name == self.session.context.name else " "
            self.console.print(f"{marker} {escape_markup(name)}")

    def _do_exclude(self, args: list[str], raw: str) -> None:
        if args:
            self.session.use_exclude(args[0])
        rule = self.session.exclude
        self.console.print(f"Exclude rule: [green]{escape_markup(rule.name)}[/green] ({len(rule.patterns)} patterns)")

    def _do_history(self, args: list[str], raw: str) -> None:
        entries = self.session.history_entries()[:20]
        if not entries:
            self.console.print("[yellow]No history yet.[/yellow]")
        for i, entry in enumerate(entries, start=1):
            self.console.print(
                f"{i:>3}  {entry.format_timestamp()}  {escape_markup(entry.context_name)}  "
                f"({len(entry.files)} files)  {escape_markup(entry.request_preview())}"
            )

    def prompt_message(self) -> HTML:
        ctx = self.session.context
        return HTML(f"\n<ansigreen><b>{_html_escape(ctx.name)} ({len(ctx.files)})&gt;</b></ansigreen> ")


def _html_escape(text: str) -> str:
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def _create_prompt_session(home: Path) -> PromptSession:
    """Create the PromptSession for the shell.

    Uses persistent history in the ctx home directory, falling back to
    in-memory history when the file cannot be used.
    """
    history_path = repl_history_path(home)

    try:
        history_path.parent.mkdir(parents=True, exist_ok=True)
        history = FileHistory(str(history_path))
    except Exception as e:
        history = InMemoryHistory()
        logger.warning(f"Could not load history from {history_path}: {e}. Using in-memory history for this session.")

    return PromptSession(history=history, enable_history_search=True)


def run_repl(session: Session, console: Console | None = None) -> None:
    """Run the interactive loop until quit, EOF or Ctrl-D."""
    processor = CommandProcessor(session, console)
    prompt_session = _create_prompt_session(session.home)
    processor.console.print(
        f"[bold]ctx[/bold] - context [green]{escape_markup(session.context.name)}[/green]. "
        "Paste paths to add them, 'help' for commands."
    )

    while not processor.done:
        try:
            line = prompt_session.prompt(processor.prompt_message())
        except KeyboardInterrupt:
            continue
        except EOFError:
            break
        processor.handle_line(line)
