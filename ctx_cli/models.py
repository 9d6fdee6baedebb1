"""Pydantic models for ctx records."""

from collections.abc import Iterable
from datetime import datetime

from pydantic import BaseModel
from pydantic import Field

DEFAULT_NAME = "default"

DEFAULT_SKIP_PREFIXES = ["work", "projects", "code", "dev", "repos"]

DEFAULT_EXCLUDE_PATTERNS = [
    "**/node_modules/**",
    "**/.git/**",
    "**/.env",
    "**/.env.*",
    "**/*.env",
    "**/package-lock.json",
    "**/pnpm-lock.yaml",
    "**/yarn.lock",
]


class AppConfig(BaseModel):
    """Main config file (config.yaml)."""

    active_context: str = Field(default=DEFAULT_NAME, description="Context loaded at start-up")
    active_exclude: str = Field(default=DEFAULT_NAME, description="Exclude rule used for directory expansion")
    skip_prefixes: list[str] = Field(
        default_factory=lambda: list(DEFAULT_SKIP_PREFIXES),
        description="Leading path segments skipped when naming a file's project",
    )

    def with_defaults(self) -> "AppConfig":
        """Return a copy with an empty skip_prefixes list replaced by the default one."""
        if self.skip_prefixes:
            return self
        return self.model_copy(update={"skip_prefixes": list(DEFAULT_SKIP_PREFIXES)})


class ExcludeRule(BaseModel):
    """Named set of glob patterns. Any matching pattern excludes a path."""

    name: str = Field(..., description="Unique rule identifier")
    patterns: list[str] = Field(default_factory=list)

    @classmethod
    def default(cls) -> "ExcludeRule":
        return cls(name=DEFAULT_NAME, patterns=list(DEFAULT_EXCLUDE_PATTERNS))


class Context(BaseModel):
    """Named bundle of project description, request text and file list.

    ``files`` keeps insertion order and never holds the same path twice.
    Paths are compared as exact strings: ``/a/b`` and ``/a/./b`` are
    different entries.
    """

    name: str = Field(..., description="Unique context identifier, also the storage key")
    project_root: str | None = Field(None, description="Prefix stripped from file paths in the output")
    project_context: str = ""
    request: str = ""
    files: list[str] = Field(default_factory=list)

    def add_file(self, path: str) -> bool:
        """Append a path unless it is already present.

        Returns:
            True if the path was added, False if it was a duplicate
        """
        if path in self.files:
            return False
        self.files.append(path)
        return True

    def add_many(self, paths: Iterable[str]) -> int:
        """Add each path in turn.

        Returns:
            Number of paths actually added
        """
        seen = set(self.files)
        added = 0
        for path in paths:
            if path in seen:
                continue
            seen.add(path)
            self.files.append(path)
            added += 1
        return added

    def remove_file(self, path: str) -> None:
        """Remove every occurrence of ``path``. Absent paths are ignored."""
        self.files = [f for f in self.files if f != path]

    def remove_many(self, paths: Iterable[str]) -> None:
        """Remove all given paths in one pass, keeping survivors in order."""
        doomed = set(paths)
        self.files = [f for f in self.files if f not in doomed]

    def clear(self) -> None:
        self.files = []

    def to_record(self) -> dict:
        """Serialize for the document store; project_root is omitted when unset."""
        return self.model_dump(exclude_none=True)


class HistoryEntry(BaseModel):
    """Immutable snapshot recorded on each yank.

    Holds paths only, never file contents.
    """

    timestamp: datetime
    context_name: str = ""
    project_context: str = ""
    request: str = ""
    files: list[str] = Field(default_factory=list)

    model_config = {"frozen": True}

    @classmethod
    def snapshot(cls, context: Context, timestamp: datetime, files: Iterable[str] | None = None) -> "HistoryEntry":
        """Copy the context's texts and file list by value."""
        return cls(
            timestamp=timestamp,
            context_name=context.name,
            project_context=context.project_context,
            request=context.request,
            files=list(context.files if files is None else files),
        )

    def request_preview(self, width: int = 50) -> str:
        """First line of the request, truncated for listings."""
        if not self.request:
            return "(no request)"

        preview = self.request.split("\n")[0].strip()
        if not preview:
            return "(empty)"
        if len(preview) > width:
            preview = preview[: width - 3] + "..."
        return preview

    def format_timestamp(self) -> str:
        """Human-readable local time."""
        return self.timestamp.astimezone().strftime("%Y-%m-%d %H:%M")
