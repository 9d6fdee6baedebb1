"""On-disk layout policy for ctx.

This module centralizes ALL path decisions. Everything else receives
the ctx home directory by injection, which keeps tests off the real
``~/.ctx``.
"""

import os
from pathlib import Path

CONFIG_FILE = "config.yaml"
CONTEXTS_DIR = "contexts"
EXCLUDES_DIR = "excludes"
HISTORY_DIR = "history"
REPL_HISTORY_FILE = "repl_history"
LOG_FILE = "ctx.log.jsonl"


def get_ctx_home() -> Path:
    """Get the ctx home directory.

    Returns:
        ``$CTX_HOME`` when set, otherwise ``~/.ctx``
    """
    override = os.environ.get("CTX_HOME")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".ctx"


def config_path(home: Path) -> Path:
    return home / CONFIG_FILE


def history_dir(home: Path) -> Path:
    return home / HISTORY_DIR


def repl_history_path(home: Path) -> Path:
    return home / REPL_HISTORY_FILE


def default_log_path(home: Path | None = None) -> Path:
    """Get the JSONL log path, honoring ``$CTX_LOG_PATH``."""
    override = os.environ.get("CTX_LOG_PATH")
    if override:
        return Path(override).expanduser()
    return (home or get_ctx_home()) / LOG_FILE


def validate_record_name(name: str, kind: str = "name") -> str:
    """Validate a record name that will become a file name.

    Args:
        name: Context or exclude rule name
        kind: Label used in the error message

    Returns:
        The name unchanged

    Raises:
        ValueError: If the name is empty or could escape its directory
    """
    if not name or not name.strip():
        raise ValueError(f"{kind} cannot be empty")

    # Prevent path traversal
    if "/" in name or "\\" in name or name in (".", ".."):
        raise ValueError(f"Invalid {kind}: {name}")

    return name
