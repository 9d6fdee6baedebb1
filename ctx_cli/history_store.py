"""Yank history persistence.

Each yank writes one YAML file named ``YYYY-MM-DD_HH-MM-SS_<context>.yaml``
(UTC). Names sort lexicographically in chronological order, which is what
pruning relies on.
"""

import logging
from datetime import UTC
from pathlib import Path

from pydantic import ValidationError

from .errors import NotFoundError
from .errors import PersistenceError
from .models import HistoryEntry
from .storage import read_yaml
from .storage import write_yaml

logger = logging.getLogger(__name__)

MAX_HISTORY_ENTRIES = 100

TIMESTAMP_FORMAT = "%Y-%m-%d_%H-%M-%S"

UNSAFE_FILENAME_CHARS = ("/", "\\", ":", "*", "?", '"', "<", ">", "|", " ")

SUFFIX = ".yaml"


def sanitize_filename(name: str) -> str:
    """Replace characters that are unsafe in file names with ``_``."""
    result = name
    for char in UNSAFE_FILENAME_CHARS:
        result = result.replace(char, "_")
    return result


def history_key(entry: HistoryEntry) -> str:
    """Storage key for an entry: ``<timestamp>_<sanitized context name>``."""
    ts = entry.timestamp
    if ts.tzinfo is not None:
        ts = ts.astimezone(UTC)
    return f"{ts.strftime(TIMESTAMP_FORMAT)}_{sanitize_filename(entry.context_name)}"


class HistoryStore:
    """
    Manages yank history on the filesystem.

    Contract:
    - Inputs: HistoryEntry snapshots
    - Outputs: entries newest first, storage keys
    - Side Effects: writes and deletes files in <ctx home>/history/
    - Errors: PersistenceError when an entry cannot be written,
      NotFoundError for unknown keys
    - Retention: at most ``max_entries`` files, enforced after every save
    """

    def __init__(self, base_dir: Path, max_entries: int = MAX_HISTORY_ENTRIES):
        self.base_dir = base_dir
        self.max_entries = max_entries

    def _path(self, key: str) -> Path:
        return self.base_dir / f"{key}{SUFFIX}"

    def _unique_key(self, key: str) -> str:
        """Append a counter when a same-second entry already used ``key``.

        The counter continues past the highest one still on disk, so a key
        freed by pruning is not reused while newer same-second entries remain.
        """
        prefix = f"{key}-"
        taken = [k for k in self.keys() if k == key or k.startswith(prefix)]
        if not taken:
            return key
        counters = [int(k[len(prefix) :]) for k in taken if k[len(prefix) :].isdigit()]
        return f"{key}-{max(counters, default=0) + 1:03d}"

    def save(self, entry: HistoryEntry) -> str:
        """Write an entry, then prune.

        Returns:
            The storage key the entry was written under

        Raises:
            PersistenceError: If the entry cannot be written
        """
        try:
            self.base_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise PersistenceError(f"Failed to create {self.base_dir}: {e}") from e

        key = self._unique_key(history_key(entry))
        write_yaml(self._path(key), entry.model_dump(mode="json"))
        logger.debug(f"History entry {key} saved")

        self.prune()
        return key

    def keys(self) -> list[str]:
        """All storage keys, oldest first."""
        if not self.base_dir.exists():
            return []
        try:
            return sorted(p.stem for p in self.base_dir.iterdir() if p.is_file() and p.suffix == SUFFIX)
        except OSError as e:
            raise PersistenceError(f"Failed to list {self.base_dir}: {e}") from e

    def load(self, key: str) -> HistoryEntry:
        """Load one entry by storage key.

        Raises:
            NotFoundError: If no entry has this key
            PersistenceError: If the entry cannot be parsed
        """
        try:
            data = read_yaml(self._path(key))
        except FileNotFoundError:
            raise NotFoundError("history entry", key) from None

        try:
            return HistoryEntry.model_validate(data)
        except ValidationError as e:
            raise PersistenceError(f"Malformed history entry {key}: {e}") from e

    def list(self) -> list[HistoryEntry]:
        """All readable entries, newest first. Malformed entries are skipped."""
        entries = []
        for key in self.keys():
            try:
                entries.append(self.load(key))
            except (NotFoundError, PersistenceError) as e:
                logger.debug(f"Skipping history entry {key}: {e}")

        entries.sort(key=_sort_ts, reverse=True)
        return entries

    def prune(self) -> int:
        """Delete the oldest entries beyond ``max_entries``.

        Returns:
            Number of entries removed
        """
        keys = self.keys()
        excess = len(keys) - self.max_entries
        if excess <= 0:
            return 0

        removed = 0
        for key in keys[:excess]:
            try:
                self._path(key).unlink()
                removed += 1
            except OSError as e:
                logger.warning(f"Failed to prune history entry {key}: {e}")

        logger.info(f"Pruned {removed} history entries")
        return removed


def _sort_ts(entry: HistoryEntry) -> float:
    # Naive timestamps are treated as local time, as datetime.timestamp() does
    return entry.timestamp.timestamp()
