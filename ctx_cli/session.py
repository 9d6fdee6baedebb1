"""Session state for ctx.

A ``Session`` owns everything one run of the tool works on: the store,
the history, the clipboard, the loaded config, the active context and
the active exclude rule. Commands receive it explicitly; there is no
module-level state.
"""

from __future__ import annotations

import logging
import os
import stat
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC
from datetime import datetime
from pathlib import Path
from typing import Any

from pydantic import BaseModel
from pydantic import ValidationError

from .assembler import AssemblyResult
from .assembler import assemble
from .assembler import assemble_from_history
from .clipboard import ClipboardSink
from .errors import CtxError
from .errors import FilesystemError
from .errors import NotFoundError
from .errors import PersistenceError
from .files import DirectoryExpander
from .files import FileInfo
from .files import FolderInfo
from .files import build_file_infos
from .files import group_folders
from .files.info import files_in_folders
from .history_store import HistoryStore
from .models import DEFAULT_NAME
from .models import AppConfig
from .models import Context
from .models import ExcludeRule
from .models import HistoryEntry
from .paths import get_ctx_home
from .paths import history_dir
from .paths import validate_record_name
from .storage import DocumentStore

logger = logging.getLogger(__name__)


@dataclass
class AddResult:
    """Outcome of adding a file or directory to the active context."""

    path: str
    is_dir: bool
    found: int
    added: int

    @property
    def duplicates(self) -> int:
        return self.found - self.added


@dataclass
class YankResult:
    """Outcome of a yank.

    ``blocked`` is set when strict mode refused to copy because files
    were missing. Clipboard and history failures do not undo the
    assembled document; they are reported here instead.
    """

    assembly: AssemblyResult
    requested: int
    copied: bool = False
    blocked: bool = False
    clipboard_error: str | None = None
    history_key: str | None = None
    history_error: str | None = None


def _parse(model: type[BaseModel], data: dict[str, Any], what: str) -> Any:
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise PersistenceError(f"Malformed {what}: {e}") from e


class Session:
    """Explicit application state passed to every ctx operation."""

    def __init__(
        self,
        home: Path | None = None,
        *,
        store: DocumentStore | None = None,
        history: HistoryStore | None = None,
        clipboard: ClipboardSink | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self.home = home or get_ctx_home()
        self.store = store or DocumentStore(self.home)
        self.history = history or HistoryStore(history_dir(self.home))
        self.clipboard = clipboard or ClipboardSink()
        self.clock = clock or (lambda: datetime.now(UTC))

        self.config = AppConfig()
        self.context = Context(name=DEFAULT_NAME)
        self.exclude = ExcludeRule.default()

    @classmethod
    def open(cls, home: Path | None = None, **kwargs: Any) -> Session:
        """Bootstrap the on-disk layout and load the active state."""
        session = cls(home, **kwargs)
        session.ensure_layout()
        session.reload()
        return session

    # ===== BOOTSTRAP =====

    def ensure_layout(self) -> None:
        """Create directories and default records that do not exist yet."""
        self.store.ensure_dirs()
        try:
            self.history.base_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise PersistenceError(f"Failed to create {self.history.base_dir}: {e}") from e

        if not self.store.has_config():
            self.store.save_config(AppConfig().model_dump())
            logger.info(f"Created default config in {self.home}")

        if not self.store.exists("context", DEFAULT_NAME):
            self.store.save("context", DEFAULT_NAME, Context(name=DEFAULT_NAME).to_record())

        if not self.store.exists("exclude", DEFAULT_NAME):
            self.store.save("exclude", DEFAULT_NAME, ExcludeRule.default().model_dump())

    def reload(self) -> None:
        """Re-read config, active context and active exclude rule from disk."""
        config = _parse(AppConfig, self.store.load_config(), "config").with_defaults()
        self.config = config

        try:
            self.context = self.load_context(config.active_context)
        except (NotFoundError, PersistenceError, ValueError) as e:
            logger.warning(f"Active context '{config.active_context}' unavailable, using default: {e}")
            self.context = self.load_context(DEFAULT_NAME)
            self.config.active_context = DEFAULT_NAME
            self.save_config()

        try:
            self.exclude = self.load_exclude(config.active_exclude)
        except (NotFoundError, PersistenceError, ValueError) as e:
            logger.warning(f"Active exclude rule '{config.active_exclude}' unavailable, using default: {e}")
            self.exclude = self.load_exclude(DEFAULT_NAME)
            self.config.active_exclude = DEFAULT_NAME
            self.save_config()

    def save_config(self) -> None:
        self.store.save_config(self.config.model_dump())

    # ===== RECORDS =====

    def load_context(self, name: str) -> Context:
        data = self.store.load("context", name)
        data.setdefault("name", name)
        return _parse(Context, data, f"context '{name}'")

    def save_context(self) -> None:
        self.store.save("context", self.context.name, self.context.to_record())

    def load_exclude(self, name: str) -> ExcludeRule:
        data = self.store.load("exclude", name)
        data.setdefault("name", name)
        return _parse(ExcludeRule, data, f"exclude rule '{name}'")

    def save_exclude(self, rule: ExcludeRule) -> None:
        self.store.save("exclude", rule.name, rule.model_dump())
        if rule.name == self.exclude.name:
            self.exclude = rule

    def list_contexts(self) -> list[str]:
        return self.store.list("context")

    def list_excludes(self) -> list[str]:
        return self.store.list("exclude")

    # ===== FILE SET =====

    def add_path(self, path: str) -> AddResult:
        """Add an absolute file path, or every file below a directory.

        Raises:
            ValueError: If the path is empty or not absolute
            FilesystemError: If the path cannot be read or expanded
            PersistenceError: If the context cannot be saved
        """
        if not path:
            raise ValueError("No path given")
        if not os.path.isabs(path):
            raise ValueError(f"Not an absolute path: {path}")

        try:
            mode = os.stat(path).st_mode
        except OSError as e:
            raise FilesystemError(path, "path not found") from e

        if stat.S_ISDIR(mode):
            files = DirectoryExpander(self.exclude).expand(path)
            added = self.context.add_many(files)
            self.save_context()
            logger.info(f"Added {added} of {len(files)} files from {path} to '{self.context.name}'")
            return AddResult(path=path, is_dir=True, found=len(files), added=added)

        added = int(self.context.add_file(path))
        if added:
            self.save_context()
            logger.info(f"Added {path} to '{self.context.name}'")
        return AddResult(path=path, is_dir=False, found=1, added=added)

    def remove_files(self, paths: list[str]) -> int:
        """Remove the given paths; returns how many entries disappeared."""
        before = len(self.context.files)
        if len(paths) == 1:
            self.context.remove_file(paths[0])
        else:
            self.context.remove_many(paths)
        removed = before - len(self.context.files)
        self.save_context()
        return removed

    def remove_folders(self, folders: list[str]) -> int:
        """Remove every file whose parent directory is one of ``folders``."""
        return self.remove_files(files_in_folders(self.context.files, folders))

    def clear_files(self) -> int:
        count = len(self.context.files)
        self.context.clear()
        self.save_context()
        return count

    def file_infos(self) -> list[FileInfo]:
        """Display details for the active context's files, largest first."""
        return build_file_infos(self.context.files, self.config.skip_prefixes)

    def folder_infos(self) -> list[FolderInfo]:
        return group_folders(self.file_infos())

    # ===== TEXTS =====

    def set_request(self, text: str) -> None:
        self.context.request = text
        self.save_context()

    def set_project_context(self, text: str) -> None:
        self.context.project_context = text
        self.save_context()

    def set_project_root(self, root: str | None) -> None:
        self.context.project_root = root or None
        self.save_context()

    # ===== CONTEXTS =====

    def _activate(self, context: Context) -> None:
        self.context = context
        self.config.active_context = context.name
        self.save_config()

    def new_context(self, name: str) -> Context:
        """Create an empty context and make it active.

        Raises:
            ValueError: If the name is invalid or already taken
        """
        validate_record_name(name, "context name")
        if self.store.exists("context", name):
            raise ValueError(f"Context '{name}' already exists")

        context = Context(name=name)
        self.store.save("context", name, context.to_record())
        self._activate(context)
        logger.info(f"Created context '{name}'")
        return context

    def switch_context(self, name: str) -> Context:
        self._activate(self.load_context(name))
        return self.context

    def cycle_context(self, step: int) -> Context:
        """Switch to the next (step=1) or previous (step=-1) context, wrapping around."""
        names = self.list_contexts()
        if len(names) <= 1:
            return self.context

        if self.context.name in names:
            idx = names.index(self.context.name)
        else:
            idx = -1 if step > 0 else 0
        return self.switch_context(names[(idx + step) % len(names)])

    def delete_context(self, name: str) -> None:
        """Delete a context; deleting the active one switches to ``default``.

        Raises:
            ValueError: If asked to delete the default context
            NotFoundError: If the context does not exist
        """
        if name == DEFAULT_NAME:
            raise ValueError("The default context cannot be deleted")

        self.store.delete("context", name)
        if name == self.context.name:
            self.switch_context(DEFAULT_NAME)

    # ===== EXCLUDES =====

    def use_exclude(self, name: str) -> ExcludeRule:
        self.exclude = self.load_exclude(name)
        self.config.active_exclude = name
        self.save_config()
        return self.exclude

    # ===== OUTPUT =====

    def preview(self) -> AssemblyResult:
        """Assemble the active context without copying or recording history."""
        ctx = self.context
        return assemble(ctx.project_context, ctx.request, ctx.files, ctx.project_root)

    def yank(self, *, strict: bool = False) -> YankResult:
        """Assemble the active context, copy it and record a history entry."""
        ctx = self.context
        requested = list(ctx.files)
        # Snapshot before assembly so the entry records what was asked for
        entry = HistoryEntry.snapshot(ctx, self.clock(), requested)

        assembly = assemble(ctx.project_context, ctx.request, requested, ctx.project_root)
        result = YankResult(assembly=assembly, requested=len(requested))
        if strict and result.assembly.missing:
            result.blocked = True
            return result

        self._copy(result)

        try:
            result.history_key = self.history.save(entry)
        except CtxError as e:
            logger.warning(f"Failed to save history entry: {e}")
            result.history_error = str(e)

        return result

    def history_entries(self) -> list[HistoryEntry]:
        return self.history.list()

    def history_entry(self, index: int) -> HistoryEntry:
        """History entry by 1-based position, newest first."""
        entries = self.history_entries()
        if index < 1 or index > len(entries):
            raise NotFoundError("history entry", str(index))
        return entries[index - 1]

    def yank_history(self, index: int) -> YankResult:
        """Re-assemble a history entry from disk and copy it; records nothing."""
        entry = self.history_entry(index)
        result = YankResult(assembly=assemble_from_history(entry), requested=len(entry.files))
        self._copy(result)
        return result

    def _copy(self, result: YankResult) -> None:
        try:
            self.clipboard.copy(result.assembly.document)
            result.copied = True
        except CtxError as e:
            logger.warning(f"Clipboard copy failed: {e}")
            result.clipboard_error = str(e)
