"""YAML key-value document store for contexts, exclude rules and config.

Layout under the ctx home directory:
- config.yaml
- contexts/<name>.yaml
- excludes/<name>.yaml
"""

import contextlib
import logging
import tempfile
from pathlib import Path
from typing import Any
from typing import Literal

import yaml

from ..errors import NotFoundError
from ..errors import PersistenceError
from ..paths import CONTEXTS_DIR
from ..paths import EXCLUDES_DIR
from ..paths import config_path
from ..paths import validate_record_name

logger = logging.getLogger(__name__)

RecordKind = Literal["context", "exclude"]

_KIND_DIRS: dict[str, str] = {
    "context": CONTEXTS_DIR,
    "exclude": EXCLUDES_DIR,
}

SUFFIX = ".yaml"


def read_yaml(path: Path) -> dict[str, Any]:
    """Read a YAML mapping from disk.

    Raises:
        FileNotFoundError: If the file does not exist
        PersistenceError: If the file cannot be read or is not a mapping
    """
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        raise
    except (OSError, yaml.YAMLError) as e:
        raise PersistenceError(f"Failed to read {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise PersistenceError(f"{path} does not contain a mapping")
    return data


def write_yaml(path: Path, data: dict[str, Any]) -> None:
    """Write a YAML mapping atomically (temp file + rename).

    Raises:
        PersistenceError: If the file cannot be written
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        # NamedTemporaryFile creates the file with owner-only permissions
        with tempfile.NamedTemporaryFile(
            mode="w", encoding="utf-8", dir=path.parent, prefix=f"{path.stem}_", suffix=".tmp", delete=False
        ) as tmp_file:
            temp_path = Path(tmp_file.name)
            try:
                yaml.safe_dump(data, tmp_file, default_flow_style=False, sort_keys=False, allow_unicode=True)
                tmp_file.flush()
            except Exception:
                tmp_file.close()
                with contextlib.suppress(OSError):
                    temp_path.unlink()
                raise
        temp_path.replace(path)
    except (OSError, yaml.YAMLError) as e:
        raise PersistenceError(f"Failed to write {path}: {e}") from e


class DocumentStore:
    """Loads and saves named YAML records.

    Contract:
    - Inputs: record kind ("context" or "exclude"), record name, mapping
    - Outputs: mappings that round-trip losslessly through save -> load
    - Side effects: filesystem writes under the ctx home directory
    - Errors: NotFoundError for missing records, PersistenceError for
      unreadable or unwritable files, ValueError for invalid names
    """

    def __init__(self, home: Path):
        self.home = home

    def _dir(self, kind: RecordKind) -> Path:
        try:
            return self.home / _KIND_DIRS[kind]
        except KeyError:
            raise ValueError(f"Unknown record kind: {kind}") from None

    def path_for(self, kind: RecordKind, name: str) -> Path:
        validate_record_name(name, f"{kind} name")
        return self._dir(kind) / f"{name}{SUFFIX}"

    def ensure_dirs(self) -> None:
        try:
            for sub in _KIND_DIRS.values():
                (self.home / sub).mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise PersistenceError(f"Failed to create {self.home}: {e}") from e

    def exists(self, kind: RecordKind, name: str) -> bool:
        try:
            return self.path_for(kind, name).is_file()
        except ValueError:
            return False

    def load(self, kind: RecordKind, name: str) -> dict[str, Any]:
        path = self.path_for(kind, name)
        try:
            return read_yaml(path)
        except FileNotFoundError:
            raise NotFoundError(kind, name) from None

    def save(self, kind: RecordKind, name: str, data: dict[str, Any]) -> None:
        path = self.path_for(kind, name)
        write_yaml(path, data)
        logger.debug(f"Saved {kind} '{name}' to {path}")

    def list(self, kind: RecordKind) -> list[str]:
        """List record names of a kind, sorted."""
        directory = self._dir(kind)
        if not directory.exists():
            return []

        try:
            names = [p.stem for p in directory.iterdir() if p.is_file() and p.suffix == SUFFIX]
        except OSError as e:
            raise PersistenceError(f"Failed to list {directory}: {e}") from e
        return sorted(names)

    def delete(self, kind: RecordKind, name: str) -> None:
        path = self.path_for(kind, name)
        try:
            path.unlink()
        except FileNotFoundError:
            raise NotFoundError(kind, name) from None
        except OSError as e:
            raise PersistenceError(f"Failed to delete {path}: {e}") from e
        logger.info(f"Deleted {kind} '{name}'")

    # ===== CONFIG =====

    @property
    def config_file(self) -> Path:
        return config_path(self.home)

    def has_config(self) -> bool:
        return self.config_file.is_file()

    def load_config(self) -> dict[str, Any]:
        try:
            return read_yaml(self.config_file)
        except FileNotFoundError:
            raise NotFoundError("config", str(self.config_file)) from None

    def save_config(self, data: dict[str, Any]) -> None:
        write_yaml(self.config_file, data)
        logger.debug(f"Saved config to {self.config_file}")
