"""Directory expansion into a flat, filtered file list."""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from enum import Enum

from ..errors import FilesystemError
from ..models import ExcludeRule
from .path_filter import PathFilter

logger = logging.getLogger(__name__)


class WalkAction(str, Enum):
    """Signal returned by a walk visitor."""

    CONTINUE = "continue"
    SKIP_SUBTREE = "skip_subtree"


Visitor = Callable[[str, bool], WalkAction]


def walk_tree(root: str, visit: Visitor) -> None:
    """Depth-first walk calling ``visit(path, is_dir)`` for every entry.

    The root itself is visited first. Returning ``SKIP_SUBTREE`` for a
    directory prevents any of its descendants from being visited.
    Entries are visited in name order so a walk is deterministic.

    Raises:
        FilesystemError: If any directory on the walk cannot be read
    """
    if visit(root, True) is WalkAction.SKIP_SUBTREE:
        return

    stack = [root]
    while stack:
        current = stack.pop()
        try:
            with os.scandir(current) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as e:
            raise FilesystemError(current, e.strerror or str(e)) from e

        subdirs = []
        for entry in entries:
            try:
                is_dir = entry.is_dir(follow_symlinks=False)
            except OSError as e:
                raise FilesystemError(entry.path, e.strerror or str(e)) from e

            if is_dir:
                if visit(entry.path, True) is not WalkAction.SKIP_SUBTREE:
                    subdirs.append(entry.path)
            elif entry.is_file():
                visit(entry.path, False)

        # Reverse so the first subdirectory is walked first
        stack.extend(reversed(subdirs))


class DirectoryExpander:
    """Expands a directory into the absolute paths of the files below it.

    Contract:
    - Inputs: root directory, optional ExcludeRule
    - Outputs: ordered list of absolute file paths
    - Errors: FilesystemError if the root or any subdirectory cannot be
      read. Expansion is all-or-nothing; partial results are discarded.

    Excluded directories are pruned, so nothing below them is ever read.
    """

    def __init__(self, exclude: ExcludeRule | None = None) -> None:
        self.filter = PathFilter(exclude)

    def expand(self, root_dir: str) -> list[str]:
        if not os.path.isabs(root_dir):
            root_dir = os.path.abspath(root_dir)

        if not os.path.isdir(root_dir):
            raise FilesystemError(root_dir, "not a directory")

        files: list[str] = []

        def visit(path: str, is_dir: bool) -> WalkAction:
            if self.filter.should_exclude(path):
                if is_dir:
                    logger.debug(f"Pruning excluded directory: {path}")
                    return WalkAction.SKIP_SUBTREE
                return WalkAction.CONTINUE
            if not is_dir:
                files.append(path)
            return WalkAction.CONTINUE

        walk_tree(root_dir, visit)
        logger.debug(f"Expanded {root_dir} into {len(files)} files")
        return files


def expand_directory(root_dir: str, exclude: ExcludeRule | None = None) -> list[str]:
    """Shorthand for ``DirectoryExpander(exclude).expand(root_dir)``."""
    return DirectoryExpander(exclude).expand(root_dir)
